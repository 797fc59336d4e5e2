"""
Expense service for expense-related business logic.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.core.deadline import Deadline, ensure_deadline
from app.core.errors import ValidationFailedError
from app.core.utils import split_evenly
from app.db.session import persistence_errors
from app.models.expense import Expense, ExpenseSplit
from app.services.membership_service import check_group_access, member_ids

logger = logging.getLogger(__name__)


def _resolve_shares(
    total_amount: Decimal,
    payer_id: UUID,
    splits: Optional[Sequence[Tuple[UUID, Decimal]]],
    participant_ids: Optional[Sequence[UUID]]
) -> List[Tuple[UUID, Decimal]]:
    if splits is not None and participant_ids is not None:
        raise ValidationFailedError("splits_and_participants_both_given")

    if splits is not None:
        if not splits:
            raise ValidationFailedError("empty_splits")
        shares = [(user_id, Decimal(amount)) for user_id, amount in splits]
        if not all(amount.is_finite() for _, amount in shares):
            raise ValidationFailedError("invalid_amount")
        if any(amount < 0 for _, amount in shares):
            raise ValidationFailedError("negative_split_amount")
        if sum((amount for _, amount in shares), Decimal("0")) != total_amount:
            raise ValidationFailedError("splits_do_not_sum_to_total")
    elif participant_ids:
        shares = list(zip(participant_ids, split_evenly(total_amount, len(participant_ids))))
    else:
        # No participants: the payer carries the whole expense
        shares = [(payer_id, total_amount)]

    if len({user_id for user_id, _ in shares}) != len(shares):
        raise ValidationFailedError("duplicate_split_user")
    return shares


def create_expense(
    group_id: UUID,
    requester_id: UUID,
    total_amount: Decimal,
    db: Session,
    description: str = "",
    paid_by: Optional[UUID] = None,
    splits: Optional[Sequence[Tuple[UUID, Decimal]]] = None,
    participant_ids: Optional[Sequence[UUID]] = None,
    deadline: Optional[Deadline] = None
) -> Expense:
    """
    Record an expense and its splits atomically.

    The payer defaults to the requester. Splits must sum exactly to the
    total; an even split over participant_ids hands leftover cents to the
    first participants. Payer and every split user must be members.
    """
    total_amount = Decimal(total_amount)
    if not total_amount.is_finite():
        raise ValidationFailedError("invalid_amount")
    if total_amount <= 0:
        raise ValidationFailedError("non_positive_amount")
    if total_amount.as_tuple().exponent < -2:
        raise ValidationFailedError("too_many_decimal_places")
    payer_id = paid_by or requester_id
    shares = _resolve_shares(total_amount, payer_id, splits, participant_ids)
    deadline = ensure_deadline(deadline)

    with persistence_errors(db, "create_expense_failed"):
        check_group_access(group_id, requester_id, db)
        members = member_ids(group_id, db)
        if payer_id not in members:
            raise ValidationFailedError("payer_not_member")
        if any(user_id not in members for user_id, _ in shares):
            raise ValidationFailedError("split_user_not_member")
        deadline.check("authorize")

        expense = Expense(
            group_id=group_id,
            description=(description or "").strip(),
            total_amount=total_amount,
            paid_by=payer_id
        )
        expense.splits = [ExpenseSplit(user_id=user_id, amount=amount) for user_id, amount in shares]
        db.add(expense)
        db.flush()
        deadline.check("insert")

        db.commit()
        db.refresh(expense)

    logger.info(
        f"Expense {expense.id} of {total_amount} recorded in group {group_id}, "
        f"paid by {payer_id}, {len(shares)} splits"
    )
    return expense


def list_expenses(
    group_id: UUID,
    requester_id: UUID,
    db: Session
) -> List[Expense]:
    """Expenses of a group with their splits, newest first."""
    with persistence_errors(db, "list_expenses_failed"):
        check_group_access(group_id, requester_id, db)
        return db.query(Expense).options(selectinload(Expense.splits)).filter(
            Expense.group_id == group_id
        ).order_by(Expense.created_at.desc(), Expense.id).all()
