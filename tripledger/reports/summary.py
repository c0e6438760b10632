"""
Trip Reports

Read-only views over a ledger snapshot:
- Per-member totals (what they paid, what they consumed, the net)
- Per-category spend and its share of the trip total

These numbers are DERIVED, never stored. They reuse the engine's share
allocation so a member's summary balance always matches the balance
calculator to the minor unit.
"""

from typing import Iterable, Sequence

from tripledger.engine.balances import expense_shares
from tripledger.models.ledger import (
    CategoryTotal,
    Expense,
    ExpenseCategory,
    Member,
    MemberSummary,
)


def total_spent(expenses: Iterable[Expense]) -> int:
    """Trip total in minor units."""
    return sum(expense.amount for expense in expenses)


def summarize_members(
    members: Sequence[Member],
    expenses: Iterable[Expense],
) -> list[MemberSummary]:
    """
    Build one summary per member, in member order.

    References to members outside ``members`` are ignored here; the
    validator is the place that rejects them.
    """
    paid = {member.id: 0 for member in members}
    consumed = {member.id: 0 for member in members}

    for expense in expenses:
        if expense.payer_id in paid:
            paid[expense.payer_id] += expense.amount
        for member_id, share in expense_shares(expense):
            if member_id in consumed:
                consumed[member_id] += share

    return [
        MemberSummary(
            member_id=member.id,
            name=member.name,
            total_paid=paid[member.id],
            total_consumed=consumed[member.id],
            balance=paid[member.id] - consumed[member.id],
        )
        for member in members
    ]


def category_breakdown(expenses: Iterable[Expense]) -> list[CategoryTotal]:
    """
    Spend per category, in category order.

    Categories with no spend are left out.
    """
    totals = {category: 0 for category in ExpenseCategory}
    for expense in expenses:
        totals[expense.category] += expense.amount

    grand_total = sum(totals.values())
    if grand_total == 0:
        return []

    return [
        CategoryTotal(
            category=category,
            amount=amount,
            share=amount / grand_total,
        )
        for category, amount in totals.items()
        if amount > 0
    ]
