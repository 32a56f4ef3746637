import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.audit import write_audit_log
from app.core.exceptions import NotFoundError, ValidationError
from app.db.base import atomic
from app.models.ledger import LedgerEntry
from app.models.member import Member, MemberStatus
from app.services.balance import BalanceSummary, compute_balances
from app.services.ledger import get_entries_by_member, get_member_entries

logger = logging.getLogger(__name__)


@dataclass
class MemberWithStats:
    member: Member
    stats: BalanceSummary


@dataclass
class MemberDetail:
    member: Member
    entries: List[LedgerEntry]
    stats: BalanceSummary


def _clean_name(value: str, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} is required")
    return cleaned


def _coerce_status(status) -> MemberStatus:
    try:
        return MemberStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in MemberStatus)
        raise ValidationError(f"Invalid member status {status!r}; expected one of: {allowed}")


def get_member(db: Session, member_id: int) -> Member:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        raise NotFoundError(f"Member {member_id} not found")
    return member


def list_members(db: Session, status: Optional[MemberStatus] = None) -> List[Member]:
    query = db.query(Member)
    if status is not None:
        query = query.filter(Member.status == _coerce_status(status))
    return query.order_by(Member.last_name.desc(), Member.first_name.desc(), Member.id).all()


def create_member(
    db: Session,
    first_name: str,
    last_name: str,
    status: MemberStatus = MemberStatus.ACTIVE
) -> Member:
    """Create a member (active unless told otherwise)."""
    member = Member(
        first_name=_clean_name(first_name, "First name"),
        last_name=_clean_name(last_name, "Last name"),
        status=_coerce_status(status),
    )
    with atomic(db):
        db.add(member)
    db.refresh(member)
    return member


def update_member(
    db: Session,
    member_id: int,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    status: Optional[MemberStatus] = None
) -> Member:
    with atomic(db):
        member = get_member(db, member_id)
        if first_name is not None:
            member.first_name = _clean_name(first_name, "First name")
        if last_name is not None:
            member.last_name = _clean_name(last_name, "Last name")
        if status is not None:
            member.status = _coerce_status(status)
    db.refresh(member)
    return member


def delete_member(db: Session, member_id: int) -> None:
    """Delete a member and, by cascade, every ledger entry they own."""
    with atomic(db):
        member = get_member(db, member_id)
        name = member.full_name
        db.delete(member)
    logger.info("Deleted member %s (%s)", member_id, name)
    write_audit_log("delete_member", f"member={member_id} name={name}")


def delete_member_transactions(db: Session, member_id: int) -> int:
    """Remove all of a member's ledger entries but keep the member."""
    with atomic(db):
        get_member(db, member_id)
        deleted = db.query(LedgerEntry).filter(
            LedgerEntry.member_id == member_id
        ).delete(synchronize_session="fetch")
    logger.info("Deleted %d ledger entries for member %s", deleted, member_id)
    write_audit_log("delete_member_transactions", f"member={member_id} entries_deleted={deleted}")
    return deleted


def list_members_with_stats(db: Session, status: Optional[MemberStatus] = None) -> List[MemberWithStats]:
    members = list_members(db, status)
    entries_by_member = get_entries_by_member(db, [m.id for m in members])
    return [
        MemberWithStats(member=m, stats=compute_balances(entries_by_member.get(m.id, [])))
        for m in members
    ]


def get_member_detail(db: Session, member_id: int) -> MemberDetail:
    member = get_member(db, member_id)
    entries = get_member_entries(db, member_id)
    # Newest first for display; replay sorts on its own
    return MemberDetail(
        member=member,
        entries=list(reversed(entries)),
        stats=compute_balances(entries),
    )
