"""
Settlement routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from app.db.session import get_db
from app.models.user import User
from app.schemas.settlement import SettlementCreate, SettlementResponse
from app.api.dependencies import get_current_user
from app.services.settlement_service import record_settlement, list_settlements

router = APIRouter(prefix="/groups/{group_id}/settlements", tags=["settlements"])


@router.post("", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def add_settlement(
    group_id: UUID,
    settlement_data: SettlementCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record a payment from one member to another."""
    return record_settlement(
        group_id,
        current_user.id,
        settlement_data.to_user,
        settlement_data.amount,
        db,
        from_user=settlement_data.from_user
    )


@router.get("", response_model=List[SettlementResponse])
async def get_settlements(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a group's settlements, newest first."""
    return list_settlements(group_id, current_user.id, db)
