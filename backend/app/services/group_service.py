"""
Group service: creation, membership changes and group reads.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deadline import Deadline, ensure_deadline
from app.core.errors import ConflictError, NotFoundError, ValidationFailedError
from app.db.session import persistence_errors
from app.models.expense import Expense
from app.models.group import Group, GroupMember
from app.models.user import User
from app.schemas.group import GroupDetailResponse, GroupExpenseResponse, GroupMemberResponse
from app.services.membership_service import (
    check_group_access, get_user_by_email, is_member, require_member
)

logger = logging.getLogger(__name__)


def create_group(
    name: str,
    creator_id: UUID,
    db: Session,
    deadline: Optional[Deadline] = None
) -> Group:
    """
    Create a group and its creator's membership in one transaction.

    Either both rows are committed or neither is; a failure on the
    membership insert rolls the group back too.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationFailedError("empty_group_name")
    deadline = ensure_deadline(deadline)

    with persistence_errors(db, "create_group_failed"):
        group = Group(name=name, created_by=creator_id)
        db.add(group)
        db.flush()

        db.add(GroupMember(group_id=group.id, user_id=creator_id))
        db.flush()
        deadline.check("create_group")

        db.commit()
        db.refresh(group)

    logger.info(f"Group {group.id} created by {creator_id}")
    return group


def add_member(
    group_id: UUID,
    requester_id: UUID,
    target_email: str,
    db: Session,
    deadline: Optional[Deadline] = None
) -> None:
    """
    Add the user owning target_email to the group.

    Checks, in order: the requester is a member (ForbiddenError; a missing
    group has no members), the email belongs to a user (NotFoundError),
    the user is not yet a member (ConflictError). A concurrent add that
    wins the race after these checks is caught by the membership key and
    also reported as ConflictError.
    """
    deadline = ensure_deadline(deadline)

    with persistence_errors(db, "add_member_failed"):
        require_member(group_id, requester_id, db)
        deadline.check("authorize")

        target = get_user_by_email(target_email, db)
        if not target:
            raise NotFoundError("user_not_found")
        target_id = target.id
        if is_member(group_id, target_id, db):
            raise ConflictError("already_member")
        deadline.check("lookup")

        db.add(GroupMember(group_id=group_id, user_id=target_id))
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("already_member") from exc

    logger.info(f"User {target_id} added to group {group_id} by {requester_id}")


def list_user_groups(user_id: UUID, db: Session) -> List[Group]:
    """Groups the user belongs to, newest first."""
    with persistence_errors(db, "list_groups_failed"):
        return db.query(Group).join(
            GroupMember, GroupMember.group_id == Group.id
        ).filter(
            GroupMember.user_id == user_id
        ).order_by(Group.created_at.desc(), Group.id).all()


def get_group_details(
    group_id: UUID,
    user_id: UUID,
    db: Session,
    deadline: Optional[Deadline] = None
) -> GroupDetailResponse:
    """Group with members and expenses; members only."""
    deadline = ensure_deadline(deadline)

    with persistence_errors(db, "group_details_failed"):
        group = check_group_access(group_id, user_id, db)
        deadline.check("authorize")

        members = db.query(User).join(
            GroupMember, GroupMember.user_id == User.id
        ).filter(GroupMember.group_id == group_id).order_by(User.username).all()
        deadline.check("members")

        expenses = db.query(Expense).filter(
            Expense.group_id == group_id
        ).order_by(Expense.created_at.desc(), Expense.id).all()

        return GroupDetailResponse(
            id=group.id,
            name=group.name,
            created_by=group.created_by,
            created_at=group.created_at,
            members=[
                GroupMemberResponse(user_id=m.id, email=m.email, username=m.username)
                for m in members
            ],
            expenses=[GroupExpenseResponse.model_validate(e) for e in expenses]
        )
