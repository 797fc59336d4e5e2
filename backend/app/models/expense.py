"""
Expense and split models.
"""
from sqlalchemy import Column, Numeric, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from app.db.base import Base, BaseModel


class Expense(BaseModel):
    """A payment made by one member on behalf of the group."""
    __tablename__ = "expenses"

    group_id = Column(Uuid, ForeignKey("groups.id"), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    total_amount = Column(Numeric(15, 2), nullable=False)
    paid_by = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    group = relationship("Group", back_populates="expenses")
    splits = relationship("ExpenseSplit", back_populates="expense", cascade="all, delete-orphan")


class ExpenseSplit(Base):
    """A user's share of one expense."""
    __tablename__ = "expense_splits"

    expense_id = Column(Uuid, ForeignKey("expenses.id"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id"), primary_key=True, index=True)
    amount = Column(Numeric(15, 2), nullable=False)

    # Relationships
    expense = relationship("Expense", back_populates="splits")
