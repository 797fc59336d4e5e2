"""
Membership guard: who may see or change a group's data.
"""
from typing import Optional, Set
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, NotFoundError
from app.models.group import Group, GroupMember
from app.models.user import User


def is_member(group_id: UUID, user_id: UUID, db: Session) -> bool:
    """True if user_id belongs to group_id. Read only."""
    membership = db.query(GroupMember).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id
    ).first()
    return membership is not None


def require_member(group_id: UUID, user_id: UUID, db: Session) -> None:
    """Raise ForbiddenError unless user_id belongs to group_id."""
    if not is_member(group_id, user_id, db):
        raise ForbiddenError("not_a_member")


def get_group(group_id: UUID, db: Session) -> Group:
    """Load a group or raise NotFoundError."""
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group:
        raise NotFoundError("group_not_found")
    return group


def check_group_access(group_id: UUID, user_id: UUID, db: Session) -> Group:
    """Group must exist and user_id must be a member."""
    group = get_group(group_id, db)
    require_member(group_id, user_id, db)
    return group


def member_ids(group_id: UUID, db: Session) -> Set[UUID]:
    """Current member set of a group."""
    rows = db.query(GroupMember.user_id).filter(GroupMember.group_id == group_id).all()
    return {row.user_id for row in rows}


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()
