"""
Trip Ledger - Source Package

The settlement core of a trip expense-splitting app: who paid what,
who owes whom, and the shortest sensible list of payments to square up.

DESIGN PRINCIPLES:
1. Money is integer minor units, never floats
2. Fail early, fail visibly
3. No silent corrections
4. Pure computation over snapshots; storage is someone else's job
"""

__version__ = "1.0.0"
