"""Settlement engine package."""

from tripledger.engine.balances import compute_balances, expense_shares
from tripledger.engine.settlement import apply_transfers, plan_settlements

__all__ = [
    "apply_transfers",
    "compute_balances",
    "expense_shares",
    "plan_settlements",
]
