import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.audit import write_audit_log
from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError
from app.db.base import atomic
from app.models.ledger import BulkPaymentBatch, BulkPaymentKind, EntryType, LedgerEntry
from app.models.member import Member, MemberStatus
from app.models.period import Period
from app.services.balance import (
    ZERO,
    calculate_interest,
    compute_balances,
    parse_amount,
    parse_lawas,
)

logger = logging.getLogger(__name__)

AMOUNT_FIELDS = ("lawas", "put_up", "hulam_put_up", "hulam", "payment", "penalty")


@dataclass
class BulkPaymentResult:
    batch: Optional[BulkPaymentBatch] = None
    entry_ids: List[int] = field(default_factory=list)
    members_paid: int = 0
    total_paid: Decimal = ZERO


def _validated_amounts(amounts: Dict) -> Dict[str, Decimal]:
    unknown = set(amounts) - set(AMOUNT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown ledger fields: {', '.join(sorted(unknown))}")
    cleaned = {}
    for name, value in amounts.items():
        cleaned[name] = parse_lawas(value) if name == "lawas" else parse_amount(value, name)
    return cleaned


def get_open_period(db: Session) -> Optional[Period]:
    """The period new entries default to."""
    return db.query(Period).filter(Period.is_closed.is_(False)).order_by(Period.start_date.desc()).first()


def _resolve_open_period(db: Session, period_id: Optional[int]) -> Period:
    # Locks the period row; callers lock member rows only after this
    if period_id is None:
        period = db.query(Period).filter(
            Period.is_closed.is_(False)
        ).order_by(Period.start_date.desc()).with_for_update().first()
        if not period:
            raise ConflictError("No open period. Create one to start recording transactions.")
        return period

    period = db.query(Period).filter(Period.id == period_id).with_for_update().first()
    if not period:
        raise NotFoundError(f"Period {period_id} not found")
    if period.is_closed:
        raise ConflictError(f"Period '{period.name}' is closed")
    return period


def get_entry(db: Session, entry_id: int) -> LedgerEntry:
    entry = db.query(LedgerEntry).filter(LedgerEntry.id == entry_id).first()
    if not entry:
        raise NotFoundError(f"Ledger entry {entry_id} not found")
    return entry


def get_member_entries(db: Session, member_id: int) -> List[LedgerEntry]:
    """All of a member's entries across every period, in replay order."""
    return db.query(LedgerEntry).filter(
        LedgerEntry.member_id == member_id
    ).order_by(LedgerEntry.created_at, LedgerEntry.id).all()


def get_entries_by_member(db: Session, member_ids: List[int]) -> Dict[int, List[LedgerEntry]]:
    grouped: Dict[int, List[LedgerEntry]] = defaultdict(list)
    if not member_ids:
        return grouped
    entries = db.query(LedgerEntry).filter(
        LedgerEntry.member_id.in_(member_ids)
    ).order_by(LedgerEntry.created_at, LedgerEntry.id).all()
    for entry in entries:
        grouped[entry.member_id].append(entry)
    return grouped


def list_period_entries(db: Session, period_id: int) -> List[LedgerEntry]:
    if not db.query(Period.id).filter(Period.id == period_id).first():
        raise NotFoundError(f"Period {period_id} not found")
    return db.query(LedgerEntry).filter(
        LedgerEntry.period_id == period_id
    ).order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc()).all()


def list_member_entries(db: Session, member_id: int) -> List[LedgerEntry]:
    if not db.query(Member.id).filter(Member.id == member_id).first():
        raise NotFoundError(f"Member {member_id} not found")
    return db.query(LedgerEntry).filter(
        LedgerEntry.member_id == member_id
    ).order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc()).all()


def record_entry(
    db: Session,
    member_id: int,
    period_id: Optional[int] = None,
    **amounts
) -> LedgerEntry:
    """
    Record a ledger entry for a member.

    Interest is stamped now as INTEREST_RATE x (hulam + hulam put-up) of this
    entry. Without ``period_id`` the entry goes to the open period.
    """
    values = _validated_amounts(amounts)

    with atomic(db):
        period = _resolve_open_period(db, period_id)
        member = db.query(Member).filter(Member.id == member_id).with_for_update().first()
        if not member:
            raise NotFoundError(f"Member {member_id} not found")

        principal = values.get("hulam", ZERO) + values.get("hulam_put_up", ZERO)
        entry = LedgerEntry(
            member_id=member.id,
            period_id=period.id,
            entry_type=EntryType.REGULAR,
            interest=calculate_interest(principal, settings.INTEREST_RATE),
            **{name: values.get(name, ZERO) for name in AMOUNT_FIELDS}
        )
        db.add(entry)

    db.refresh(entry)
    logger.info("Recorded ledger entry %s for member %s in period %s", entry.id, member_id, entry.period_id)
    return entry


def update_entry(db: Session, entry_id: int, **amounts) -> LedgerEntry:
    """Edit amounts on an entry; interest follows the merged hulam / hulam put-up."""
    values = _validated_amounts(amounts)

    with atomic(db):
        entry = get_entry(db, entry_id)
        if entry.period.is_closed:
            raise ConflictError(f"Period '{entry.period.name}' is closed; its entries cannot be edited")
        if entry.entry_type == EntryType.CARRY_FORWARD:
            raise ConflictError("Carry-forward entries are generated at rollover and cannot be edited")

        for name, value in values.items():
            setattr(entry, name, value)

        if "hulam" in values or "hulam_put_up" in values:
            principal = parse_amount(entry.hulam) + parse_amount(entry.hulam_put_up)
            entry.interest = calculate_interest(principal, settings.INTEREST_RATE)
        entry.updated_at = datetime.utcnow()

    db.refresh(entry)
    return entry


def delete_entry(db: Session, entry_id: int) -> None:
    with atomic(db):
        entry = get_entry(db, entry_id)
        if entry.period.is_closed:
            raise ConflictError(f"Period '{entry.period.name}' is closed; its entries cannot be deleted")
        db.delete(entry)
    logger.info("Deleted ledger entry %s", entry_id)


def pay_all_interest(db: Session, period_id: Optional[int] = None) -> BulkPaymentResult:
    """
    Settle every active member's outstanding interest in one batch.

    Each member with unpaid interest gets a payment-only entry equal to it.
    Either every entry and the batch record are written, or none are. When
    nobody owes interest nothing is written and ``batch`` is None.
    """
    with atomic(db):
        period = _resolve_open_period(db, period_id)
        members = db.query(Member).filter(
            Member.status == MemberStatus.ACTIVE
        ).order_by(Member.id).with_for_update().all()
        entries_by_member = get_entries_by_member(db, [m.id for m in members])

        owed = []
        for member in members:
            summary = compute_balances(entries_by_member.get(member.id, []))
            if summary.outstanding_interest > 0:
                owed.append((member, summary.outstanding_interest))

        if not owed:
            logger.info("No outstanding interest in period %s; nothing to pay", period.id)
            return BulkPaymentResult()

        total = sum((amount for _, amount in owed), ZERO)
        batch = BulkPaymentBatch(
            period_id=period.id,
            kind=BulkPaymentKind.INTEREST,
            entry_count=len(owed),
            total_amount=total,
        )
        db.add(batch)
        db.flush()

        created: List[LedgerEntry] = []
        for member, amount in owed:
            entry = LedgerEntry(
                member_id=member.id,
                period_id=period.id,
                entry_type=EntryType.REGULAR,
                batch_id=batch.id,
                lawas=ZERO,
                put_up=ZERO,
                hulam_put_up=ZERO,
                hulam=ZERO,
                interest=ZERO,
                payment=amount,
                penalty=ZERO,
            )
            db.add(entry)
            created.append(entry)

        db.flush()
        entry_ids = [entry.id for entry in created]

    logger.info("Bulk interest batch %s: %d member(s), total %s", batch.id, len(entry_ids), total)
    write_audit_log("pay_all_interest", f"batch={batch.id} period={period.id} members={len(entry_ids)} total={total}")
    return BulkPaymentResult(batch=batch, entry_ids=entry_ids, members_paid=len(entry_ids), total_paid=total)


def get_batch(db: Session, batch_id: int) -> BulkPaymentBatch:
    batch = db.query(BulkPaymentBatch).filter(BulkPaymentBatch.id == batch_id).first()
    if not batch:
        raise NotFoundError(f"Bulk payment batch {batch_id} not found")
    return batch


def list_batches(db: Session, period_id: Optional[int] = None) -> List[BulkPaymentBatch]:
    query = db.query(BulkPaymentBatch)
    if period_id is not None:
        query = query.filter(BulkPaymentBatch.period_id == period_id)
    return query.order_by(BulkPaymentBatch.created_at.desc(), BulkPaymentBatch.id.desc()).all()


def undo_bulk_payment(db: Session, batch_id: int) -> int:
    """
    Reverse a bulk interest payment by removing the entries it created.

    Runs as one transaction and marks the batch undone so it cannot be
    reversed twice. Returns the number of entries removed.
    """
    with atomic(db):
        batch = db.query(BulkPaymentBatch).filter(BulkPaymentBatch.id == batch_id).with_for_update().first()
        if not batch:
            raise NotFoundError(f"Bulk payment batch {batch_id} not found")
        if batch.undone_at is not None:
            raise ConflictError(f"Bulk payment batch {batch_id} was already undone")
        if batch.period.is_closed:
            raise ConflictError(f"Period '{batch.period.name}' is closed; batch {batch_id} cannot be undone")

        deleted = db.query(LedgerEntry).filter(
            LedgerEntry.batch_id == batch.id
        ).delete(synchronize_session="fetch")
        batch.undone_at = datetime.utcnow()

    logger.info("Undid bulk payment batch %s (%d entries)", batch_id, deleted)
    write_audit_log("undo_pay_all_interest", f"batch={batch_id} entries_deleted={deleted}")
    return deleted
