from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.models.member import MemberStatus
from app.schemas.ledger import LedgerEntryResponse


class MemberCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    status: MemberStatus = MemberStatus.ACTIVE


class MemberUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[MemberStatus] = None


class MemberResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    status: MemberStatus
    created_at: datetime

    class Config:
        from_attributes = True


class BalanceSummaryResponse(BaseModel):
    """Replayed balances for one member."""
    total_lawas: Decimal
    total_put_up: Decimal
    outstanding_hulam_put_up: Decimal
    outstanding_hulam: Decimal
    outstanding_interest: Decimal
    total_interest_charged: Decimal
    total_interest_paid: Decimal
    total_hulam_put_up_issued: Decimal
    total_hulam_issued: Decimal
    total_payment: Decimal
    total_penalty: Decimal
    outstanding_principal: Decimal
    outstanding_balance: Decimal
    required_put_up: Decimal
    put_up_balance: Decimal


class MemberWithStatsResponse(MemberResponse):
    stats: BalanceSummaryResponse


class MemberDetailResponse(MemberWithStatsResponse):
    entries: List[LedgerEntryResponse]
