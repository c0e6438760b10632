"""
Expense Validation

DESIGN DECISION: Validation happens at the ledger boundary, before an
expense is folded into any balance. A malformed expense silently breaks
the zero-sum property, so every rule here FAILS LOUDLY instead.

Checks, in order:
1. Amount is a finite positive number
2. Payer is a known member
3. At least one participant (no division by zero later)
4. Every participant is a known member, listed once
5. Split mode is not mixed (unless configured)
6. Custom shares are non-zero and add up to the total exactly

IMPORTANT: The only repair ever made is in build_expense, where a draft
residual already within tolerance is absorbed and logged. A built
Expense must balance to the minor unit.
"""

from typing import Iterable, Optional, Sequence
from uuid import uuid4

import structlog

from tripledger.config import LedgerSettings, get_settings
from tripledger.errors import (
    DuplicateExpenseError,
    DuplicateParticipantError,
    EmptyCustomShareError,
    EmptyParticipantSetError,
    InvalidAmountError,
    MixedSplitModeError,
    SplitMismatchError,
    UnknownMemberReference,
)
from tripledger.models.ledger import (
    CustomShare,
    EqualShare,
    Expense,
    ExpenseDraft,
    Member,
    SplitMode,
)
from tripledger.models.money import convert_currency, to_decimal, to_minor_units

logger = structlog.get_logger(__name__)


class ExpenseValidator:
    """
    Validates expenses against the members of one trip.

    Also builds Expense objects from raw form drafts, converting
    currencies and major units on the way in.
    """

    def __init__(
        self,
        members: Sequence[Member],
        settings: Optional[LedgerSettings] = None,
    ):
        self._member_ids = {member.id for member in members}
        self._settings = settings or get_settings()

    def _check_member(self, member_id: str, expense_id: str, field: str) -> None:
        if member_id not in self._member_ids:
            raise UnknownMemberReference(
                f"Unknown member {member_id}",
                field=field,
                expense_id=expense_id,
                member_id=member_id,
            )

    def validate(self, expense: Expense) -> None:
        """
        Validate a single expense.

        Raises:
            LedgerValidationError subclass describing the first problem found
        """
        if expense.amount <= 0:
            raise InvalidAmountError(
                f"Expense amount must be positive, got {expense.amount}",
                field="amount",
                expense_id=expense.id,
            )

        self._check_member(expense.payer_id, expense.id, "payer_id")

        if not expense.participants:
            raise EmptyParticipantSetError(
                "At least one participant is required",
                field="participants",
                expense_id=expense.id,
            )

        seen: set[str] = set()
        for member_id in expense.participant_ids:
            self._check_member(member_id, expense.id, "participants")
            if member_id in seen:
                raise DuplicateParticipantError(
                    f"Member {member_id} is listed twice",
                    field="participants",
                    expense_id=expense.id,
                    member_id=member_id,
                )
            seen.add(member_id)

        mode = expense.split_mode
        if mode == SplitMode.MIXED and not self._settings.allow_mixed_splits:
            raise MixedSplitModeError(
                "Expense mixes equal and custom shares",
                field="participants",
                expense_id=expense.id,
            )

        if mode == SplitMode.CUSTOM:
            self._validate_custom_shares(expense)

    def _validate_custom_shares(self, expense: Expense) -> None:
        for share in expense.participants:
            if share.amount == 0:
                raise EmptyCustomShareError(
                    f"Custom share for {share.member_id} is zero",
                    field="participants",
                    expense_id=expense.id,
                    member_id=share.member_id,
                )

        total = expense.custom_total
        if total != expense.amount:
            raise SplitMismatchError(
                f"Custom shares add up to {total}, expected {expense.amount}",
                expected=expense.amount,
                actual=total,
                expense_id=expense.id,
            )

    def validate_ledger(self, expenses: Iterable[Expense]) -> None:
        """Validate every expense in a snapshot, plus id uniqueness."""
        seen: set[str] = set()
        for expense in expenses:
            if expense.id in seen:
                raise DuplicateExpenseError(
                    f"Expense id {expense.id} appears twice",
                    field="id",
                    expense_id=expense.id,
                )
            seen.add(expense.id)
            self.validate(expense)

    def build_expense(
        self,
        draft: ExpenseDraft,
        expense_id: Optional[str] = None,
    ) -> Expense:
        """
        Turn a form draft into a validated Expense.

        - Foreign amounts are converted with the draft's exchange rate
        - Major units become minor units with ROUND_HALF_UP
        - A custom split off by no more than the tolerance has its
          residual folded into the largest share

        Raises:
            LedgerValidationError subclass if the draft is not admissible
        """
        expense_id = expense_id or str(uuid4())
        digits = self._settings.minor_unit_digits
        reference = self._settings.reference_currency

        typed_amount = to_decimal(draft.amount)
        if typed_amount <= 0:
            raise InvalidAmountError(
                f"Expense amount must be positive, got {draft.amount}",
                field="amount",
                expense_id=expense_id,
            )

        foreign = draft.currency is not None and draft.currency != reference
        converted = (
            convert_currency(typed_amount, draft.exchange_rate)
            if foreign else typed_amount
        )
        amount = to_minor_units(converted, digits)

        if draft.custom_splits is None:
            participants = [EqualShare(member_id=m) for m in draft.participant_ids]
        else:
            participants = self._custom_participants(draft, amount, expense_id)

        expense = Expense(
            id=expense_id,
            amount=amount,
            payer_id=draft.payer_id,
            date=draft.date,
            participants=participants,
            title=draft.title,
            category=draft.category,
            note=draft.note,
            original_currency=draft.currency if foreign else None,
            original_amount=typed_amount if foreign else None,
        )
        self.validate(expense)
        return expense

    def _custom_participants(
        self,
        draft: ExpenseDraft,
        amount: int,
        expense_id: str,
    ) -> list[CustomShare]:
        digits = self._settings.minor_unit_digits
        shares = []
        for member_id in draft.participant_ids:
            raw = draft.custom_splits.get(member_id)
            if raw is None:
                raise EmptyCustomShareError(
                    f"No custom share entered for {member_id}",
                    field="custom_splits",
                    expense_id=expense_id,
                    member_id=member_id,
                )
            minor = to_minor_units(raw, digits, field="custom_splits")
            if minor < 0:
                raise InvalidAmountError(
                    f"Custom share for {member_id} is negative",
                    field="custom_splits",
                    expense_id=expense_id,
                    member_id=member_id,
                )
            shares.append([member_id, minor])

        residual = amount - sum(minor for _, minor in shares)
        if shares and residual and abs(residual) <= self._settings.split_tolerance_minor:
            largest = max(range(len(shares)), key=lambda i: shares[i][1])
            shares[largest][1] += residual
            logger.warning(
                "split_residual_absorbed",
                expense_id=expense_id,
                member_id=shares[largest][0],
                residual=residual,
            )

        return [CustomShare(member_id=m, amount=a) for m, a in shares]
