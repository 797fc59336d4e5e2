"""
Balance service: folds a group's expenses, splits and settlements into
per-member net balances.

Positive balance = the member is owed money, negative = the member owes.
Every expense credits its payer with the total and debits each split user
with their share. A settlement is a debtor paying a creditor back, so it
credits the sender and debits the receiver. Both are balanced transfers,
so the balances of a group always sum to zero as long as each expense's
splits sum to its total and every party is a current member.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.deadline import Deadline, ensure_deadline
from app.core.errors import ForbiddenError
from app.db.session import persistence_errors, read_snapshot
from app.models.expense import Expense, ExpenseSplit
from app.models.group import GroupMember
from app.models.settlement import Settlement
from app.services.membership_service import get_group

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class BalanceAccumulator:
    """
    Running net balance per member for a single computation.

    Only users present at construction are tracked; amounts for anyone else
    (e.g. a former member) are ignored.
    """

    def __init__(self, member_ids: Iterable[UUID]):
        self._balances: Dict[UUID, Decimal] = {uid: ZERO for uid in member_ids}

    def credit(self, user_id: UUID, amount: Decimal) -> None:
        if user_id in self._balances:
            self._balances[user_id] += amount

    def debit(self, user_id: UUID, amount: Decimal) -> None:
        if user_id in self._balances:
            self._balances[user_id] -= amount

    def apply_expense(self, paid_by: UUID, total_amount: Decimal) -> None:
        self.credit(paid_by, total_amount)

    def apply_split(self, user_id: UUID, amount: Decimal) -> None:
        self.debit(user_id, amount)

    def apply_settlement(self, from_user: UUID, to_user: UUID, amount: Decimal) -> None:
        self.credit(from_user, amount)
        self.debit(to_user, amount)

    def total(self) -> Decimal:
        return sum(self._balances.values(), ZERO)

    def result(self) -> Dict[UUID, Decimal]:
        return dict(self._balances)


def compute_balances(
    group_id: UUID,
    db: Session,
    requester_id: Optional[UUID] = None,
    deadline: Optional[Deadline] = None
) -> Dict[UUID, Decimal]:
    """
    Compute net balances for every current member of a group.

    All reads run in one snapshot-isolated transaction, so concurrent
    inserts of expenses or settlements never produce a mapping that
    doesn't sum to zero. If requester_id is given it must be a member of
    the group (checked against the same snapshot).

    Raises NotFoundError for an unknown group, ForbiddenError for a
    non-member requester and InternalError if any read fails or the
    deadline passes; no partial mapping is ever returned.
    """
    deadline = ensure_deadline(deadline)

    with persistence_errors(db, "balance_read_failed"), read_snapshot(db):
        get_group(group_id, db)

        members = [
            row.user_id for row in db.query(GroupMember.user_id).filter(
                GroupMember.group_id == group_id
            ).order_by(GroupMember.user_id).all()
        ]
        if requester_id is not None and requester_id not in members:
            raise ForbiddenError("not_a_member")
        deadline.check("members")

        accumulator = BalanceAccumulator(members)

        expenses = db.query(Expense.paid_by, Expense.total_amount).filter(
            Expense.group_id == group_id
        ).all()
        for paid_by, total_amount in expenses:
            accumulator.apply_expense(paid_by, total_amount)
        deadline.check("expenses")

        splits = db.query(ExpenseSplit.user_id, ExpenseSplit.amount).join(
            Expense, ExpenseSplit.expense_id == Expense.id
        ).filter(Expense.group_id == group_id).all()
        for user_id, amount in splits:
            accumulator.apply_split(user_id, amount)
        deadline.check("splits")

        settlements = db.query(
            Settlement.from_user, Settlement.to_user, Settlement.amount
        ).filter(Settlement.group_id == group_id).all()
        for from_user, to_user, amount in settlements:
            accumulator.apply_settlement(from_user, to_user, amount)
        deadline.check("settlements")

        balances = accumulator.result()
        imbalance = accumulator.total()

    if imbalance != ZERO:
        logger.warning(
            f"Balances for group {group_id} sum to {imbalance}: "
            f"unbalanced splits or rows naming non-members"
        )
    logger.debug(
        f"Computed balances for group {group_id}: {len(balances)} members, "
        f"{len(expenses)} expenses, {len(settlements)} settlements"
    )
    return balances
