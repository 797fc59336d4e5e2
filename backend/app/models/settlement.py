"""
Settlement model: a recorded transfer between two members.
"""
from sqlalchemy import Column, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Settlement(BaseModel):
    """from_user paid amount to to_user."""
    __tablename__ = "settlements"

    group_id = Column(Uuid, ForeignKey("groups.id"), nullable=False, index=True)
    from_user = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    to_user = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)

    # Relationships
    group = relationship("Group", back_populates="settlements")
