"""
Main Orchestrator for Trip Ledger

This module ties the components together and defines the two flows an
action layer calls:
1. Expense admission (form draft -> validate -> Expense)
2. Settlement (members + expenses -> balances -> transfers -> report)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No expense reaches a ledger without passing validation
- No plan is computed from a snapshot that fails validation
- Every step is audited

Both flows are pure with respect to the ledger: they take snapshots by
value and hand results back. Loading and saving are the caller's job.
"""

from typing import Optional, Sequence
from uuid import UUID

from tripledger.audit import AuditLogger, create_correlation_id
from tripledger.config import LedgerSettings, get_settings
from tripledger.engine import compute_balances, plan_settlements
from tripledger.errors import LedgerValidationError
from tripledger.models.ledger import (
    Expense,
    ExpenseDraft,
    Member,
    SettlementReport,
)
from tripledger.reports import category_breakdown, summarize_members, total_spent
from tripledger.validation import ExpenseValidator


class ExpenseAdmissionFlow:
    """
    Orchestrates admitting a new expense.

    Flow:
    1. Convert → currency and major units to minor units
    2. Validate → members, participants, split sums
    3. Audit → admitted or rejected, with the reason

    Rejections are re-raised so the caller can show them.
    """

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger

    def admit(
        self,
        draft: ExpenseDraft,
        members: Sequence[Member],
        expense_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Admit a draft into a trip with the given members.

        Returns:
            The validated Expense, ready for the caller to persist

        Raises:
            LedgerValidationError: If the draft is not admissible
        """
        correlation_id = correlation_id or create_correlation_id()
        validator = ExpenseValidator(members, settings=self._settings)

        try:
            expense = validator.build_expense(draft, expense_id=expense_id)
        except LedgerValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_expense_rejected(e, correlation_id=correlation_id)
            raise

        if self._audit_logger:
            self._audit_logger.log_expense_admitted(
                expense_id=expense.id,
                amount=expense.amount,
                participant_count=len(expense.participants),
                split_mode=expense.split_mode.value,
                correlation_id=correlation_id,
            )

        return expense


class SettlementFlow:
    """
    Orchestrates computing a settlement report.

    Flow:
    1. Validate → the whole snapshot, fail fast
    2. Balances → per-member net position
    3. Plan → greedy transfers
    4. Report → summaries and category totals for display
    """

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger

    def settle(
        self,
        members: Sequence[Member],
        expenses: Sequence[Expense],
        correlation_id: Optional[UUID] = None,
    ) -> SettlementReport:
        """
        Compute balances and the settlement plan for one trip.

        Raises:
            LedgerValidationError: If any expense in the snapshot is invalid
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            ExpenseValidator(members, settings=self._settings).validate_ledger(expenses)
        except LedgerValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_ledger_rejected(e, correlation_id=correlation_id)
            raise

        try:
            balances = compute_balances(
                members,
                expenses,
                unknown_member_policy=self._settings.unknown_member_policy,
            )
            transfers = plan_settlements(
                balances,
                epsilon=self._settings.settlement_epsilon_minor,
            )
        except LedgerValidationError:
            raise
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"stage": "settle"},
                    correlation_id=correlation_id,
                )
            raise

        spent = total_spent(expenses)

        if self._audit_logger:
            self._audit_logger.log_balances_computed(
                member_count=len(members),
                expense_count=len(expenses),
                total_spent=spent,
                correlation_id=correlation_id,
            )
            self._audit_logger.log_settlement_planned(
                transfer_count=len(transfers),
                transferred=sum(t.amount for t in transfers),
                correlation_id=correlation_id,
            )

        return SettlementReport(
            currency=self._settings.reference_currency,
            balances=balances,
            transfers=transfers,
            summaries=summarize_members(members, expenses),
            category_totals=category_breakdown(expenses),
            total_spent=spent,
        )


def create_flows(
    settings: Optional[LedgerSettings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[ExpenseAdmissionFlow, SettlementFlow]:
    """
    Create both flows sharing one configuration and audit logger.

    This is the main entry point for an action layer.
    """
    settings = settings or get_settings()
    audit_logger = audit_logger or AuditLogger()
    return (
        ExpenseAdmissionFlow(settings=settings, audit_logger=audit_logger),
        SettlementFlow(settings=settings, audit_logger=audit_logger),
    )
