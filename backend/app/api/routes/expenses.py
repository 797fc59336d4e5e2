"""
Expense routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from app.db.session import get_db
from app.models.user import User
from app.schemas.expense import ExpenseCreate, ExpenseResponse
from app.api.dependencies import get_current_user
from app.services.expense_service import create_expense, list_expenses

router = APIRouter(prefix="/groups/{group_id}/expenses", tags=["expenses"])


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def add_expense(
    group_id: UUID,
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record an expense paid by one member and split among members."""
    splits = None
    if expense_data.splits is not None:
        splits = [(s.user_id, s.amount) for s in expense_data.splits]

    return create_expense(
        group_id,
        current_user.id,
        expense_data.total_amount,
        db,
        description=expense_data.description,
        paid_by=expense_data.paid_by,
        splits=splits,
        participant_ids=expense_data.participant_ids
    )


@router.get("", response_model=List[ExpenseResponse])
async def get_expenses(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a group's expenses, newest first."""
    return list_expenses(group_id, current_user.id, db)
