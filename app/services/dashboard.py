from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.member import Member, MemberStatus
from app.services.balance import ZERO, aggregate, compute_balances
from app.services.ledger import get_entries_by_member, get_open_period


def get_dashboard_stats(db: Session) -> Dict[str, Any]:
    """
    Association-wide totals.

    Outstanding figures are the sum of each member's replayed balances, so
    they always agree with the member views.
    """
    members = db.query(Member).all()
    entries_by_member = get_entries_by_member(db, [m.id for m in members])
    totals = aggregate(compute_balances(entries_by_member.get(m.id, [])) for m in members)

    required_put_up = totals.required_put_up(settings.PUT_UP_PER_LAWAS)
    collected_put_up = totals.total_put_up + totals.total_hulam_put_up_issued
    if required_put_up > 0:
        percent_complete = int((collected_put_up * 100 / required_put_up).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    else:
        percent_complete = 0

    return {
        "total_members": len(members),
        "active_members": sum(1 for m in members if m.status == MemberStatus.ACTIVE),
        # Capital counts interest actually collected, not interest charged
        "total_capital": totals.total_put_up + totals.total_interest_paid + totals.total_penalty,
        "total_put_up": totals.total_put_up,
        "total_hulam_put_up": totals.total_hulam_put_up_issued,
        "total_hulam": totals.total_hulam_issued,
        "total_loans": totals.total_hulam_put_up_issued + totals.total_hulam_issued,
        "total_interest": totals.total_interest_charged,
        "total_interest_paid": totals.total_interest_paid,
        "outstanding_interest": totals.outstanding_interest,
        "outstanding_loans": totals.outstanding_principal,
        "total_payments": totals.total_payment,
        "total_penalty": totals.total_penalty,
        "total_lawas": totals.total_lawas,
        "required_put_up": required_put_up,
        "remaining_put_up": max(ZERO, required_put_up - collected_put_up),
        "put_up_percent_complete": percent_complete,
        "active_period": get_open_period(db),
    }
