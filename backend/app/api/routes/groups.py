"""
Group management routes: creation, membership, details and balances.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from app.db.session import get_db
from app.models.user import User
from app.schemas.balance import BalanceResponse
from app.schemas.group import GroupCreate, GroupResponse, GroupDetailResponse, MemberAdd
from app.api.dependencies import get_current_user
from app.services import group_service
from app.services.balance_service import compute_balances

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new group with the current user as its first member."""
    return group_service.create_group(group_data.name, current_user.id, db)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's groups, newest first."""
    return group_service.list_user_groups(current_user.id, db)


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get group details with members and expenses."""
    return group_service.get_group_details(group_id, current_user.id, db)


@router.post("/{group_id}/members", status_code=status.HTTP_201_CREATED)
async def add_member(
    group_id: UUID,
    member: MemberAdd,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an existing user to the group by email."""
    group_service.add_member(group_id, current_user.id, member.email, db)
    return {"message": "member added"}


@router.get("/{group_id}/balances", response_model=List[BalanceResponse])
async def get_balances(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Net balance of every member: positive is owed, negative owes."""
    user_id = current_user.id
    balances = compute_balances(group_id, db, requester_id=user_id)
    return [BalanceResponse(user_id=uid, amount=amount) for uid, amount in balances.items()]
