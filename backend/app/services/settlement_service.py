"""
Settlement service: recording transfers between members.
"""
import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.deadline import Deadline, ensure_deadline
from app.core.errors import ValidationFailedError
from app.db.session import persistence_errors
from app.models.settlement import Settlement
from app.services.membership_service import check_group_access, member_ids

logger = logging.getLogger(__name__)


def record_settlement(
    group_id: UUID,
    requester_id: UUID,
    to_user: UUID,
    amount: Decimal,
    db: Session,
    from_user: Optional[UUID] = None,
    deadline: Optional[Deadline] = None
) -> Settlement:
    """Record that from_user (default: requester) paid amount to to_user."""
    amount = Decimal(amount)
    if not amount.is_finite():
        raise ValidationFailedError("invalid_amount")
    if amount <= 0:
        raise ValidationFailedError("non_positive_amount")
    if amount.as_tuple().exponent < -2:
        raise ValidationFailedError("too_many_decimal_places")
    from_user = from_user or requester_id
    if from_user == to_user:
        raise ValidationFailedError("self_settlement")
    deadline = ensure_deadline(deadline)

    with persistence_errors(db, "record_settlement_failed"):
        check_group_access(group_id, requester_id, db)
        members = member_ids(group_id, db)
        if from_user not in members or to_user not in members:
            raise ValidationFailedError("settlement_user_not_member")
        deadline.check("authorize")

        settlement = Settlement(
            group_id=group_id,
            from_user=from_user,
            to_user=to_user,
            amount=amount
        )
        db.add(settlement)
        db.commit()
        db.refresh(settlement)

    logger.info(f"Settlement {settlement.id}: {from_user} paid {amount} to {to_user} in group {group_id}")
    return settlement


def list_settlements(group_id: UUID, requester_id: UUID, db: Session) -> List[Settlement]:
    """Settlements of a group, newest first."""
    with persistence_errors(db, "list_settlements_failed"):
        check_group_access(group_id, requester_id, db)
        return db.query(Settlement).filter(
            Settlement.group_id == group_id
        ).order_by(Settlement.created_at.desc(), Settlement.id).all()
