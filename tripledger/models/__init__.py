"""
Data Models Package

This package contains all Pydantic models used by Trip Ledger.
All data flowing into and out of the engine conforms to these schemas.
"""

from tripledger.models.ledger import (
    CategoryTotal,
    CustomShare,
    EqualShare,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    Member,
    MemberSummary,
    Participant,
    SettlementReport,
    SplitMode,
    Transfer,
)
from tripledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CategoryTotal",
    "CustomShare",
    "EqualShare",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "Member",
    "MemberSummary",
    "Participant",
    "SettlementReport",
    "SplitMode",
    "Transfer",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
