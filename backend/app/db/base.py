"""
Declarative base and the common model mixin.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import declarative_base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


Base = declarative_base()


class BaseModel(Base):
    """Abstract base adding a UUID primary key and timestamps."""
    __abstract__ = True

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
