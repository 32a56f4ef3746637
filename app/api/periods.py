from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.schemas.period import (
    PeriodCreate,
    PeriodUpdate,
    PeriodCloseRequest,
    PeriodResponse,
    RolloverResponse,
)
from app.schemas.ledger import LedgerEntryResponse
from app.services import period as period_service
from app.services.ledger import list_period_entries
from typing import List

router = APIRouter(prefix="/api/periods", tags=["periods"])


@router.get("", response_model=List[PeriodResponse])
def list_periods(db: Session = Depends(get_db)):
    return period_service.list_periods(db)


@router.post("", response_model=PeriodResponse, status_code=201)
def create_period(
    payload: PeriodCreate,
    db: Session = Depends(get_db)
):
    """Create a period. Fails with 409 while another period is open."""
    return period_service.create_period(db, payload.name, payload.start_date, payload.end_date)


@router.get("/{period_id}", response_model=PeriodResponse)
def get_period(
    period_id: int,
    db: Session = Depends(get_db)
):
    return period_service.get_period(db, period_id)


@router.patch("/{period_id}", response_model=PeriodResponse)
def update_period(
    period_id: int,
    payload: PeriodUpdate,
    db: Session = Depends(get_db)
):
    return period_service.update_period(
        db,
        period_id,
        name=payload.name,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )


@router.delete("/{period_id}")
def delete_period(
    period_id: int,
    db: Session = Depends(get_db)
):
    """Delete a period and every ledger entry recorded in it."""
    period_service.delete_period(db, period_id)
    return {"success": True}


@router.post("/{period_id}/close", response_model=RolloverResponse)
def close_period(
    period_id: int,
    payload: PeriodCloseRequest,
    db: Session = Depends(get_db)
):
    """Close the period and roll outstanding balances into a new one."""
    result = period_service.close_and_rollover(
        db,
        period_id,
        name=payload.new_period.name,
        start_date=payload.new_period.start_date,
        end_date=payload.new_period.end_date,
        interest_policy=payload.interest_policy,
    )
    return {
        "closed_period_id": period_id,
        "new_period": result.new_period,
        "carried_forward_count": result.carried_forward_count,
    }


@router.get("/{period_id}/entries", response_model=List[LedgerEntryResponse])
def get_period_entries(
    period_id: int,
    db: Session = Depends(get_db)
):
    return list_period_entries(db, period_id)
