from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import date, datetime


class PeriodCreate(BaseModel):
    """Schema for creating a new period."""
    name: str = Field(..., min_length=1, max_length=100, description="Period name (e.g., 'JAN 2026')")
    start_date: date = Field(..., description="Period start date")
    end_date: Optional[date] = Field(None, description="Period end date")


class PeriodUpdate(BaseModel):
    """Schema for renaming or re-dating a period."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PeriodCloseRequest(BaseModel):
    """Close the period and open the next one with carried-forward balances."""
    new_period: PeriodCreate
    interest_policy: Optional[Literal["defer", "charge"]] = Field(
        None, description="Interest on carried-forward principal; defaults to ROLLOVER_INTEREST_POLICY"
    )


class PeriodResponse(BaseModel):
    """Schema for period response."""
    id: int
    name: str
    start_date: date
    end_date: Optional[date]
    is_closed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RolloverResponse(BaseModel):
    closed_period_id: int
    new_period: PeriodResponse
    carried_forward_count: int
