import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.audit import write_audit_log
from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.db.base import atomic
from app.models.ledger import EntryType, LedgerEntry
from app.models.member import Member, MemberStatus
from app.models.period import Period
from app.services.balance import ZERO, calculate_interest, compute_balances
from app.services.ledger import get_entries_by_member, get_open_period

logger = logging.getLogger(__name__)

ROLLOVER_POLICIES = ("defer", "charge")


@dataclass
class RolloverResult:
    new_period: Period
    carried_forward_count: int = 0
    member_ids: List[int] = field(default_factory=list)


def _check_dates(start_date: date, end_date: Optional[date]):
    if end_date is not None and end_date < start_date:
        raise ValidationError("Period end date cannot be before its start date")


def get_period(db: Session, period_id: int) -> Period:
    period = db.query(Period).filter(Period.id == period_id).first()
    if not period:
        raise NotFoundError(f"Period {period_id} not found")
    return period


def list_periods(db: Session) -> List[Period]:
    return db.query(Period).order_by(Period.start_date.desc(), Period.id.desc()).all()


def create_period(
    db: Session,
    name: str,
    start_date: date,
    end_date: Optional[date] = None
) -> Period:
    """Create a new open period. Only one period may be open at a time."""
    _check_dates(start_date, end_date)
    with atomic(db):
        open_period = get_open_period(db)
        if open_period:
            raise ConflictError(
                f"Period '{open_period.name}' is still open. Close it before creating a new one."
            )
        period = Period(name=name, start_date=start_date, end_date=end_date, is_closed=False)
        db.add(period)
    db.refresh(period)
    return period


def update_period(
    db: Session,
    period_id: int,
    name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> Period:
    """Rename or re-date a period. Open/closed state is not editable here."""
    with atomic(db):
        period = get_period(db, period_id)
        if name is not None:
            period.name = name
        if start_date is not None:
            period.start_date = start_date
        if end_date is not None:
            period.end_date = end_date
        _check_dates(period.start_date, period.end_date)
    db.refresh(period)
    return period


def delete_period(db: Session, period_id: int) -> None:
    """Delete a period together with all of its ledger entries."""
    with atomic(db):
        period = get_period(db, period_id)
        name = period.name
        db.delete(period)
    logger.info("Deleted period %s (%s)", period_id, name)
    write_audit_log("delete_period", f"period={period_id} name={name}")


def close_and_rollover(
    db: Session,
    current_period_id: int,
    name: str,
    start_date: date,
    end_date: Optional[date] = None,
    interest_policy: Optional[str] = None
) -> RolloverResult:
    """
    Close the current period and seed a new one with carry-forward entries.

    For every active member with outstanding principal or shares, one
    carry-forward entry restates cumulative lawas and unpaid hulam put-up /
    hulam in the new period. Under the "charge" policy it also stamps a
    fresh interest charge on the outstanding principal; under "defer" the
    interest is 0 and charged later by regular entries.

    Runs as a single transaction.
    """
    policy = interest_policy or settings.ROLLOVER_INTEREST_POLICY
    if policy not in ROLLOVER_POLICIES:
        raise ValidationError(f"Unknown rollover interest policy: {policy!r}")
    _check_dates(start_date, end_date)

    with atomic(db):
        current = db.query(Period).filter(Period.id == current_period_id).with_for_update().first()
        if not current:
            raise NotFoundError(f"Period {current_period_id} not found")
        if current.is_closed:
            raise ConflictError(f"Period '{current.name}' is already closed")

        # 1. Close the current period
        current.is_closed = True
        if current.end_date is None:
            current.end_date = date.today()
        db.flush()

        # 2. Create the new period
        new_period = Period(name=name, start_date=start_date, end_date=end_date, is_closed=False)
        db.add(new_period)
        db.flush()

        # 3. Carry forward each active member's balances
        members = db.query(Member).filter(
            Member.status == MemberStatus.ACTIVE
        ).order_by(Member.id).with_for_update().all()
        entries_by_member = get_entries_by_member(db, [m.id for m in members])

        member_ids: List[int] = []
        for member in members:
            summary = compute_balances(entries_by_member.get(member.id, []))
            principal = summary.outstanding_principal
            if principal <= 0 and summary.total_lawas <= 0:
                continue

            interest = ZERO
            if policy == "charge" and principal > 0:
                interest = calculate_interest(principal, settings.INTEREST_RATE)

            db.add(LedgerEntry(
                member_id=member.id,
                period_id=new_period.id,
                entry_type=EntryType.CARRY_FORWARD,
                lawas=summary.total_lawas,
                put_up=ZERO,
                hulam_put_up=summary.outstanding_hulam_put_up,
                hulam=summary.outstanding_hulam,
                interest=interest,
                payment=ZERO,
                penalty=ZERO,
            ))
            member_ids.append(member.id)

    db.refresh(new_period)
    logger.info(
        "Closed period %s and opened '%s' (%s); carried forward %d member(s) with policy '%s'",
        current_period_id, new_period.name, new_period.id, len(member_ids), policy
    )
    write_audit_log(
        "close_period",
        f"closed={current_period_id} new={new_period.id} carried_forward={len(member_ids)} policy={policy}"
    )
    return RolloverResult(new_period=new_period, carried_forward_count=len(member_ids), member_ids=member_ids)
