from sqlalchemy import Column, Integer, String, DateTime, Date, Boolean, Index, false, text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import Base


class Period(Base):
    """Collection period (e.g. "JAN 2026"). Open until closed by rollover; never reopened."""
    __tablename__ = "periods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    is_closed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    ledger_entries = relationship("LedgerEntry", back_populates="period", cascade="all, delete-orphan")
    bulk_payment_batches = relationship("BulkPaymentBatch", back_populates="period", cascade="all, delete-orphan")


# At most one open period
Index(
    "uq_period_single_open",
    Period.is_closed,
    unique=True,
    postgresql_where=(Period.is_closed == false()),
    sqlite_where=(Period.is_closed == false()),
)
