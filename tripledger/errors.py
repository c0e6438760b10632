"""
Ledger Validation Errors

Every way an expense can be refused has its own exception type.
They all derive from LedgerValidationError so an action layer can
catch the family and show ``error.message`` to the user.

IMPORTANT: These are raised BEFORE an expense reaches the ledger.
Nothing is ever partially applied.
"""

from typing import Optional


class LedgerValidationError(Exception):
    """Base exception for ledger validation failures."""

    def __init__(
        self,
        message: str,
        field: str = "expense",
        expense_id: Optional[str] = None,
        member_id: Optional[str] = None,
    ):
        self.message = message
        self.field = field
        self.expense_id = expense_id
        self.member_id = member_id
        super().__init__(message)

    def to_dict(self) -> dict:
        """Serializable form for audit details."""
        return {
            "error": type(self).__name__,
            "field": self.field,
            "message": self.message,
            "expense_id": self.expense_id,
            "member_id": self.member_id,
        }


class InvalidAmountError(LedgerValidationError):
    """Amount is not a finite positive number."""
    pass


class UnknownMemberReference(LedgerValidationError):
    """A payer or participant id is not a member of the trip."""
    pass


class EmptyParticipantSetError(LedgerValidationError):
    """An expense has no participants to split between."""
    pass


class DuplicateParticipantError(LedgerValidationError):
    """The same member appears twice in one expense."""
    pass


class MixedSplitModeError(LedgerValidationError):
    """An expense mixes equal and custom shares."""
    pass


class SplitMismatchError(LedgerValidationError):
    """Custom shares do not add up to the expense total."""

    def __init__(
        self,
        message: str,
        expected: int,
        actual: int,
        expense_id: Optional[str] = None,
    ):
        self.expected = expected
        self.actual = actual
        super().__init__(message, field="participants", expense_id=expense_id)

    @property
    def difference(self) -> int:
        return self.actual - self.expected


class EmptyCustomShareError(LedgerValidationError):
    """A custom share was left at zero."""
    pass


class DuplicateExpenseError(LedgerValidationError):
    """Two expenses in one snapshot share an id."""
    pass
