from app.db.base import Base

# Import all models so Alembic can detect them
from app.models.member import Member, MemberStatus
from app.models.period import Period
from app.models.ledger import (
    LedgerEntry,
    EntryType,
    BulkPaymentBatch,
    BulkPaymentKind,
)

__all__ = [
    "Base",
    "Member",
    "MemberStatus",
    "Period",
    "LedgerEntry",
    "EntryType",
    "BulkPaymentBatch",
    "BulkPaymentKind",
]
