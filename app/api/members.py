from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.core.config import settings
from app.models.member import Member, MemberStatus
from app.schemas.member import (
    MemberCreate,
    MemberUpdate,
    MemberResponse,
    MemberWithStatsResponse,
    MemberDetailResponse,
)
from app.services.balance import BalanceSummary
from app.services import member as member_service
from typing import List, Optional

router = APIRouter(prefix="/api/members", tags=["members"])


def _member_payload(member: Member, stats: BalanceSummary) -> dict:
    return {
        "id": member.id,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "status": member.status,
        "created_at": member.created_at,
        "stats": stats.as_dict(settings.PUT_UP_PER_LAWAS),
    }


@router.get("", response_model=List[MemberWithStatsResponse])
def list_members(
    status: Optional[MemberStatus] = None,
    db: Session = Depends(get_db)
):
    """List members with their replayed balances."""
    rows = member_service.list_members_with_stats(db, status)
    return [_member_payload(row.member, row.stats) for row in rows]


@router.post("", response_model=MemberResponse, status_code=201)
def create_member(
    payload: MemberCreate,
    db: Session = Depends(get_db)
):
    return member_service.create_member(db, payload.first_name, payload.last_name, payload.status)


@router.get("/{member_id}", response_model=MemberDetailResponse)
def get_member(
    member_id: int,
    db: Session = Depends(get_db)
):
    """Member detail: balances plus full entry history (newest first)."""
    detail = member_service.get_member_detail(db, member_id)
    payload = _member_payload(detail.member, detail.stats)
    payload["entries"] = detail.entries
    return payload


@router.patch("/{member_id}", response_model=MemberResponse)
def update_member(
    member_id: int,
    payload: MemberUpdate,
    db: Session = Depends(get_db)
):
    return member_service.update_member(
        db,
        member_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        status=payload.status,
    )


@router.delete("/{member_id}")
def delete_member(
    member_id: int,
    db: Session = Depends(get_db)
):
    """Delete a member and all of their ledger entries."""
    member_service.delete_member(db, member_id)
    return {"success": True}


@router.delete("/{member_id}/entries")
def delete_member_transactions(
    member_id: int,
    db: Session = Depends(get_db)
):
    deleted = member_service.delete_member_transactions(db, member_id)
    return {"success": True, "entries_deleted": deleted}
