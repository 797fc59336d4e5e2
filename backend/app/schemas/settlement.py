"""
Pydantic schemas for Settlement entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class SettlementCreate(BaseModel):
    """Schema for recording a settlement. from_user defaults to the requester."""
    to_user: UUID
    amount: Decimal = Field(gt=0, decimal_places=2)
    from_user: Optional[UUID] = None


class SettlementResponse(BaseModel):
    """Schema for settlement response."""
    id: UUID
    group_id: UUID
    from_user: UUID
    to_user: UUID
    amount: Decimal
    created_at: datetime

    class Config:
        from_attributes = True
