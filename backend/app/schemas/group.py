"""
Pydantic schemas for Group entity and membership.
"""
from pydantic import BaseModel, EmailStr
from typing import List
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class GroupCreate(BaseModel):
    """Schema for group creation."""
    name: str


class GroupResponse(BaseModel):
    """Schema for group response."""
    id: UUID
    name: str
    created_by: UUID
    created_at: datetime

    class Config:
        from_attributes = True


class MemberAdd(BaseModel):
    """Schema for adding a member by email."""
    email: EmailStr


class GroupMemberResponse(BaseModel):
    """A member as shown in group details."""
    user_id: UUID
    email: str
    username: str


class GroupExpenseResponse(BaseModel):
    """An expense as shown in group details."""
    id: UUID
    description: str
    total_amount: Decimal
    paid_by: UUID
    created_at: datetime

    class Config:
        from_attributes = True


class GroupDetailResponse(GroupResponse):
    """Group with its members and expenses (newest first)."""
    members: List[GroupMemberResponse] = []
    expenses: List[GroupExpenseResponse] = []
