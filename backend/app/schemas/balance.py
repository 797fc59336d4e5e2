"""
Pydantic schemas for net balances.
"""
from pydantic import BaseModel
from decimal import Decimal
from uuid import UUID


class BalanceResponse(BaseModel):
    """Net balance of one member: positive is owed, negative owes."""
    user_id: UUID
    amount: Decimal
