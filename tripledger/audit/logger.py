"""
Audit Logger

DESIGN DECISION: Every admission decision and settlement run is logged.
This provides:
1. Traceability of rejected expenses
2. Debugging capability when a balance looks off
3. A history of the plans shown to the group

The audit logger:
- Is synchronous, like the engine it observes
- Gracefully handles sink failures (doesn't crash the flow)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from tripledger.audit.storage import AuditStorageInterface
from tripledger.errors import LedgerValidationError
from tripledger.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit sink, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Sink for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("tripledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_expense_admitted(
        self,
        expense_id: str,
        amount: int,
        participant_count: int,
        split_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an expense passing validation."""
        event = AuditEventBuilder.expense_admitted(
            expense_id=expense_id,
            amount=amount,
            participant_count=participant_count,
            split_mode=split_mode,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_expense_rejected(
        self,
        error: LedgerValidationError,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an expense refused at the boundary."""
        event = AuditEventBuilder.expense_rejected(
            error_code=type(error).__name__,
            error_message=error.message,
            details=error.to_dict(),
            expense_id=error.expense_id,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_ledger_rejected(
        self,
        error: LedgerValidationError,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a snapshot that could not be settled."""
        event = AuditEventBuilder.ledger_rejected(
            error_code=type(error).__name__,
            error_message=error.message,
            details=error.to_dict(),
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_balances_computed(
        self,
        member_count: int,
        expense_count: int,
        total_spent: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a balance computation."""
        event = AuditEventBuilder.balances_computed(
            member_count=member_count,
            expense_count=expense_count,
            total_spent=total_spent,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_settlement_planned(
        self,
        transfer_count: int,
        transferred: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a settlement plan."""
        event = AuditEventBuilder.settlement_planned(
            transfer_count=transfer_count,
            transferred=transferred,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an unexpected error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a request (e.g. one settle call).
    Pass it through all subsequent operations.
    """
    return uuid4()
