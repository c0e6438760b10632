"""Audit logging package."""

from tripledger.audit.logger import AuditLogger, create_correlation_id
from tripledger.audit.storage import (
    AuditStorageError,
    AuditStorageInterface,
    InMemoryAuditStorage,
)

__all__ = [
    "AuditLogger",
    "AuditStorageError",
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "create_correlation_id",
]
