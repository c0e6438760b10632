"""
Audit Storage Interface

DESIGN DECISION: The audit trail goes through an abstract sink.
This allows us to:
1. Keep the engine free of any storage dependency
2. Use in-memory storage for testing
3. Let the host application plug in its own database table

The interface is intentionally tiny - append and read back.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from tripledger.models.audit import AuditEvent, AuditEventType


class AuditStorageError(Exception):
    """Base exception for audit sink failures."""
    pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event.

        Returns:
            True if appended successfully

        Raises:
            AuditStorageError: If the append fails
        """
        pass

    @abstractmethod
    def get_events(
        self,
        correlation_id: Optional[UUID] = None,
        event_type: Optional[AuditEventType] = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Retrieve audit events, oldest first.

        Args:
            correlation_id: Only events from one flow
            event_type: Only events of one type
            limit: Maximum number of results
        """
        pass


class InMemoryAuditStorage(AuditStorageInterface):
    """Process-local audit sink. Used in tests and one-shot scripts."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events(
        self,
        correlation_id: Optional[UUID] = None,
        event_type: Optional[AuditEventType] = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        matches = [
            event for event in self._events
            if (correlation_id is None or event.correlation_id == correlation_id)
            and (event_type is None or event.event_type == event_type)
        ]
        return matches[:limit]

    def __len__(self) -> int:
        return len(self._events)
