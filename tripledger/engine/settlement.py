"""
Settlement Planner

Turns net balances into a list of pairwise payments.

ALGORITHM: greedy largest-debtor / largest-creditor matching.
1. Split members into debtors (balance < -epsilon) and creditors
   (balance > epsilon)
2. Sort both by size, largest first; ties go to the smaller member id
3. Walk both lists with two pointers. Each step the current debtor pays
   the current creditor min(debt, credit); whichever side drops below
   epsilon moves on

This never needs more than ``debtors + creditors - 1`` transfers. It is
not a global minimum, but it is fast and deterministic, and the emission
order is what the UI shows, so it must stay stable.
"""

from typing import Iterable, Mapping, Optional

from tripledger.config import get_settings
from tripledger.models.ledger import Transfer


def _ranked(entries: list[tuple[str, int]]) -> list[list]:
    """Largest amount first, member id breaks ties."""
    return [
        [member_id, amount]
        for member_id, amount in sorted(entries, key=lambda e: (-e[1], e[0]))
    ]


def plan_settlements(
    balances: Mapping[str, int],
    *,
    epsilon: Optional[int] = None,
) -> list[Transfer]:
    """
    Produce the transfers that settle ``balances``.

    Args:
        balances: member_id -> net balance in minor units
        epsilon: Settled-enough tolerance in minor units.
            Defaults to the configured settlement epsilon.

    Returns:
        Transfers in pointer-walk order. Empty when everyone is settled.
    """
    if epsilon is None:
        epsilon = get_settings().settlement_epsilon_minor

    debtors = _ranked([(m, -b) for m, b in balances.items() if b < -epsilon])
    creditors = _ranked([(m, b) for m, b in balances.items() if b > epsilon])

    transfers: list[Transfer] = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor, creditor = debtors[i], creditors[j]
        payment = min(debtor[1], creditor[1])

        transfers.append(Transfer(
            from_member_id=debtor[0],
            to_member_id=creditor[0],
            amount=payment,
        ))

        debtor[1] -= payment
        creditor[1] -= payment

        if debtor[1] < epsilon or debtor[1] == 0:
            i += 1
        if creditor[1] < epsilon or creditor[1] == 0:
            j += 1

    return transfers


def apply_transfers(
    balances: Mapping[str, int],
    transfers: Iterable[Transfer],
) -> dict[str, int]:
    """
    Apply transfers to balances and return what is left.

    Paying moves the debtor up and the creditor down, so a correct
    plan leaves every balance within epsilon of zero.
    """
    residual = dict(balances)
    for transfer in transfers:
        residual[transfer.from_member_id] = residual.get(transfer.from_member_id, 0) + transfer.amount
        residual[transfer.to_member_id] = residual.get(transfer.to_member_id, 0) - transfer.amount
    return residual
