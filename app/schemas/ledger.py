from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.models.ledger import EntryType, BulkPaymentKind


class LedgerAmounts(BaseModel):
    """Amounts an admin may enter on a ledger line. Interest is never entered; it is computed."""
    lawas: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Shares (whole number)")
    put_up: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Cash membership fee")
    hulam_put_up: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Membership fee borrowed")
    hulam: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Cash loan principal")
    payment: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Cash received")
    penalty: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Penalty fee")


class LedgerEntryCreate(LedgerAmounts):
    member_id: int
    period_id: Optional[int] = Field(None, description="Defaults to the open period")


class LedgerEntryUpdate(LedgerAmounts):
    pass


class LedgerEntryResponse(BaseModel):
    id: int
    member_id: int
    period_id: int
    entry_type: EntryType
    batch_id: Optional[int] = None
    lawas: Decimal
    put_up: Decimal
    hulam_put_up: Decimal
    hulam: Decimal
    interest: Decimal
    payment: Decimal
    penalty: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PayAllInterestRequest(BaseModel):
    period_id: Optional[int] = Field(None, description="Defaults to the open period")


class BulkPaymentBatchResponse(BaseModel):
    id: int
    period_id: int
    kind: BulkPaymentKind
    entry_count: int
    total_amount: Decimal
    created_at: datetime
    undone_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PayAllInterestResponse(BaseModel):
    batch: Optional[BulkPaymentBatchResponse] = None
    entry_ids: List[int]
    members_paid: int
    total_paid: Decimal


class UndoBulkPaymentResponse(BaseModel):
    batch_id: int
    entries_deleted: int
