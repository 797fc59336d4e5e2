"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class SplitItem(BaseModel):
    """One user's share of an expense."""
    user_id: UUID
    amount: Decimal = Field(ge=0, decimal_places=2)


class ExpenseCreate(BaseModel):
    """
    Schema for expense creation.

    Give either explicit ``splits`` (must sum to ``total_amount``) or
    ``participant_ids`` to divide the total evenly. With neither, the payer
    carries the whole expense. ``paid_by`` defaults to the requester.
    """
    description: str = ""
    total_amount: Decimal = Field(gt=0, decimal_places=2)
    paid_by: Optional[UUID] = None
    splits: Optional[List[SplitItem]] = None
    participant_ids: Optional[List[UUID]] = None


class ExpenseSplitResponse(BaseModel):
    """Schema for expense split response."""
    user_id: UUID
    amount: Decimal

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: UUID
    group_id: UUID
    description: str
    total_amount: Decimal
    paid_by: UUID
    created_at: datetime
    splits: List[ExpenseSplitResponse] = []

    class Config:
        from_attributes = True
