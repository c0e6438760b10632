"""
Balance Calculator

Folds an expense list into one net balance per member.

    balance = (sum paid as payer) - (sum of own shares)

Positive means the member is owed money, negative means they owe.

GUARANTEES:
- Pure: inputs are not mutated and nothing is cached between calls
- Integer minor units throughout; equal shares use largest-remainder
  distribution, so a validated ledger sums to exactly zero
- Unknown member ids are never silently dropped unless the caller
  opts into the "skip" policy, and then a warning is logged
"""

from typing import Iterable, Optional, Sequence

import structlog

from tripledger.config import get_settings
from tripledger.errors import EmptyParticipantSetError, UnknownMemberReference
from tripledger.models.ledger import CustomShare, Expense, Member
from tripledger.models.money import split_evenly

logger = structlog.get_logger(__name__)


def expense_shares(expense: Expense) -> list[tuple[str, int]]:
    """
    Allocate an expense to its participants.

    Custom shares are taken literally. Equal shares take their slot of
    an even split of the total across ALL participants, including the
    custom ones, so a mixed expense is not guaranteed to add up.

    Returns (member_id, amount) pairs in participant order.
    """
    if not expense.participants:
        raise EmptyParticipantSetError(
            f"Expense {expense.id} has no participants",
            field="participants",
            expense_id=expense.id,
        )

    slots = split_evenly(expense.amount, len(expense.participants))
    return [
        (p.member_id, p.amount if isinstance(p, CustomShare) else slot)
        for p, slot in zip(expense.participants, slots)
    ]


def compute_balances(
    members: Sequence[Member],
    expenses: Iterable[Expense],
    *,
    unknown_member_policy: Optional[str] = None,
) -> dict[str, int]:
    """
    Compute every member's net balance in minor units.

    Args:
        members: The trip's members; defines the universe of balances
        expenses: All expenses of the trip
        unknown_member_policy: "reject" raises UnknownMemberReference,
            "skip" ignores the reference and logs a warning.
            Defaults to the configured policy.

    Returns:
        member_id -> balance, in member order
    """
    policy = unknown_member_policy or get_settings().unknown_member_policy
    balances = {member.id: 0 for member in members}

    def _known(member_id: str, expense: Expense, role: str) -> bool:
        if member_id in balances:
            return True
        if policy == "skip":
            logger.warning(
                "unknown_member_skipped",
                expense_id=expense.id,
                member_id=member_id,
                role=role,
            )
            return False
        raise UnknownMemberReference(
            f"Expense {expense.id} references unknown {role} {member_id}",
            field="payer_id" if role == "payer" else "participants",
            expense_id=expense.id,
            member_id=member_id,
        )

    for expense in expenses:
        shares = expense_shares(expense)

        if _known(expense.payer_id, expense, "payer"):
            balances[expense.payer_id] += expense.amount

        for member_id, share in shares:
            if _known(member_id, expense, "participant"):
                balances[member_id] -= share

    return balances
