from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.schemas.ledger import (
    LedgerEntryCreate,
    LedgerEntryUpdate,
    LedgerEntryResponse,
    PayAllInterestRequest,
    PayAllInterestResponse,
    BulkPaymentBatchResponse,
    UndoBulkPaymentResponse,
)
from app.services import ledger as ledger_service
from typing import List, Optional

router = APIRouter(prefix="/api/ledger", tags=["ledger"])


@router.post("/entries", response_model=LedgerEntryResponse, status_code=201)
def record_entry(
    payload: LedgerEntryCreate,
    db: Session = Depends(get_db)
):
    """Record a ledger entry; interest is computed from hulam + hulam put-up."""
    amounts = payload.model_dump(exclude={"member_id", "period_id"}, exclude_none=True)
    return ledger_service.record_entry(db, payload.member_id, payload.period_id, **amounts)


@router.get("/entries/{entry_id}", response_model=LedgerEntryResponse)
def get_entry(
    entry_id: int,
    db: Session = Depends(get_db)
):
    return ledger_service.get_entry(db, entry_id)


@router.patch("/entries/{entry_id}", response_model=LedgerEntryResponse)
def update_entry(
    entry_id: int,
    payload: LedgerEntryUpdate,
    db: Session = Depends(get_db)
):
    amounts = payload.model_dump(exclude_none=True)
    return ledger_service.update_entry(db, entry_id, **amounts)


@router.delete("/entries/{entry_id}")
def delete_entry(
    entry_id: int,
    db: Session = Depends(get_db)
):
    ledger_service.delete_entry(db, entry_id)
    return {"success": True}


@router.post("/pay-all-interest", response_model=PayAllInterestResponse)
def pay_all_interest(
    payload: PayAllInterestRequest,
    db: Session = Depends(get_db)
):
    """Create payment-only entries settling every active member's outstanding interest."""
    result = ledger_service.pay_all_interest(db, payload.period_id)
    return {
        "batch": result.batch,
        "entry_ids": result.entry_ids,
        "members_paid": result.members_paid,
        "total_paid": result.total_paid,
    }


@router.get("/batches", response_model=List[BulkPaymentBatchResponse])
def list_batches(
    period_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    return ledger_service.list_batches(db, period_id)


@router.post("/batches/{batch_id}/undo", response_model=UndoBulkPaymentResponse)
def undo_batch(
    batch_id: int,
    db: Session = Depends(get_db)
):
    """Reverse a pay-all-interest run."""
    deleted = ledger_service.undo_bulk_payment(db, batch_id)
    return {"batch_id": batch_id, "entries_deleted": deleted}
