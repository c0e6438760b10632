"""Expense validation package."""

from tripledger.validation.validator import ExpenseValidator

__all__ = ["ExpenseValidator"]
