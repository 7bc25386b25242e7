"""
Data Models Package

This package contains all Pydantic models used by the expense bot.
All data flowing through the system must conform to these schemas.
"""

from expense_bot.models.expense import (
    DateRange,
    ExpenseDraft,
    ExpenseEntry,
    ExpenseRecord,
    StoreResult,
    SummaryRequest,
    SummaryResult,
    WizardOutcome,
    WizardState,
    WizardStep,
)
from expense_bot.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "DateRange",
    "ExpenseDraft",
    "ExpenseEntry",
    "ExpenseRecord",
    "StoreResult",
    "SummaryRequest",
    "SummaryResult",
    "WizardOutcome",
    "WizardState",
    "WizardStep",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
