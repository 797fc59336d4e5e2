"""
Group and membership models.
"""
from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.db.base import Base, BaseModel


class Group(BaseModel):
    """Expense-sharing group. Immutable once created."""
    __tablename__ = "groups"

    name = Column(String(200), nullable=False)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    members = relationship("GroupMember", back_populates="group")
    expenses = relationship("Expense", back_populates="group")
    settlements = relationship("Settlement", back_populates="group")


class GroupMember(Base):
    """Membership relation; the composite key makes it a set."""
    __tablename__ = "group_members"

    group_id = Column(Uuid, ForeignKey("groups.id"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id"), primary_key=True, index=True)

    # Relationships
    group = relationship("Group", back_populates="members")
    user = relationship("User", back_populates="memberships")
