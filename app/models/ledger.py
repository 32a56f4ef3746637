from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Enum as SQLEnum, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import Base
import enum
from decimal import Decimal


class EntryType(str, enum.Enum):
    """Ledger entry type."""
    REGULAR = "regular"
    CARRY_FORWARD = "carry_forward"  # Balance snapshot written at period rollover


class BulkPaymentKind(str, enum.Enum):
    """Kind of bulk payment run."""
    INTEREST = "interest"


class LedgerEntry(Base):
    """One member's transaction line within a period."""
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    period_id = Column(Integer, ForeignKey("periods.id", ondelete="CASCADE"), nullable=False, index=True)
    entry_type = Column(SQLEnum(EntryType, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=EntryType.REGULAR, nullable=False)
    batch_id = Column(Integer, ForeignKey("bulk_payment_batches.id", ondelete="SET NULL"), nullable=True, index=True)

    lawas = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))  # Shares
    put_up = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))  # Cash membership fee
    hulam_put_up = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))  # Membership fee borrowed
    hulam = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))  # Cash loan principal
    interest = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))  # Stamped at write time
    payment = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    penalty = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    member = relationship("Member", back_populates="ledger_entries")
    period = relationship("Period", back_populates="ledger_entries")
    batch = relationship("BulkPaymentBatch", back_populates="entries")

    # Index for chronological replay per member
    __table_args__ = (
        Index("idx_ledger_entry_member_created", "member_id", "created_at", "id"),
    )


class BulkPaymentBatch(Base):
    """Record of one pay-all-interest run; undo deletes its entries."""
    __tablename__ = "bulk_payment_batches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    period_id = Column(Integer, ForeignKey("periods.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(SQLEnum(BulkPaymentKind, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=BulkPaymentKind.INTEREST, nullable=False)
    entry_count = Column(Integer, nullable=False, default=0)
    total_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))
    undone_at = Column(DateTime, nullable=True)

    # Relationships
    period = relationship("Period", back_populates="bulk_payment_batches")
    entries = relationship("LedgerEntry", back_populates="batch")
