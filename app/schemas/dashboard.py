from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from app.schemas.period import PeriodResponse


class DashboardResponse(BaseModel):
    total_members: int
    active_members: int
    total_capital: Decimal
    total_put_up: Decimal
    total_hulam_put_up: Decimal
    total_hulam: Decimal
    total_loans: Decimal
    total_interest: Decimal
    total_interest_paid: Decimal
    outstanding_interest: Decimal
    outstanding_loans: Decimal
    total_payments: Decimal
    total_penalty: Decimal
    total_lawas: Decimal
    required_put_up: Decimal
    remaining_put_up: Decimal
    put_up_percent_complete: int
    active_period: Optional[PeriodResponse] = None
