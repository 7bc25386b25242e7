"""
Audit Models for Expense Bot

Every significant action in the bot is logged for audit purposes.
This provides:
1. Traceability of every saved expense back to the conversation
2. Debugging information when the store misbehaves
3. A record of abandoned and cancelled entries

DESIGN DECISION: Audit events are append-only and never block the
conversation. A failure to log is itself only logged.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Entry wizard
    WIZARD_STARTED = "wizard_started"
    WIZARD_INPUT_REJECTED = "wizard_input_rejected"
    WIZARD_CANCELLED = "wizard_cancelled"
    WIZARD_ABANDONED = "wizard_abandoned"

    # Persistence
    EXPENSE_SAVED = "expense_saved"
    SAVE_FAILED = "save_failed"

    # Query operations
    SUMMARY_EXECUTED = "summary_executed"
    SUMMARY_REJECTED = "summary_rejected"
    CATEGORIES_LISTED = "categories_listed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'wizard', 'summary')"
    )

    # Correlation - all events of one wizard session share this
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.wizard_started(correlation_id)
        event = AuditEventBuilder.expense_saved("Coffee", 20000, "Food", correlation_id)
    """

    @staticmethod
    def wizard_started(correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WIZARD_STARTED,
            entity_type="wizard",
            correlation_id=correlation_id,
            description="Expense entry started",
            is_user_action=True,
        )

    @staticmethod
    def wizard_input_rejected(
        step: str,
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WIZARD_INPUT_REJECTED,
            severity=AuditSeverity.DEBUG,
            entity_type="wizard",
            correlation_id=correlation_id,
            description=f"Input rejected at {step}",
            details={
                "step": step,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def wizard_cancelled(step: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WIZARD_CANCELLED,
            entity_type="wizard",
            correlation_id=correlation_id,
            description=f"Expense entry cancelled at {step}",
            details={"step": step},
            is_user_action=True,
        )

    @staticmethod
    def wizard_abandoned(
        missing_fields: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WIZARD_ABANDONED,
            severity=AuditSeverity.WARNING,
            entity_type="wizard",
            correlation_id=correlation_id,
            description="Expense entry abandoned with an incomplete draft",
            details={"missing_fields": missing_fields},
        )

    @staticmethod
    def expense_saved(
        title: str,
        amount: int,
        category: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_SAVED,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Expense saved: {amount}",
            details={
                "title": title,
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def save_failed(
        title: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Failed to save expense",
            details={"title": title},
            error_message=error_message,
        )

    @staticmethod
    def summary_executed(
        start: datetime,
        end: datetime,
        entry_count: int,
        total: int,
        detail: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_EXECUTED,
            entity_type="summary",
            correlation_id=correlation_id,
            description=f"Summary executed over {entry_count} records",
            details={
                "start": start.isoformat(),
                "end": end.isoformat(),
                "entry_count": entry_count,
                "total": total,
                "detail": detail,
            },
            is_user_action=True,
        )

    @staticmethod
    def summary_rejected(
        arguments: list[str],
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_REJECTED,
            severity=AuditSeverity.DEBUG,
            entity_type="summary",
            correlation_id=correlation_id,
            description="Summary arguments rejected",
            details={
                "arguments": arguments,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def categories_listed(
        count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORIES_LISTED,
            entity_type="category",
            correlation_id=correlation_id,
            description=f"Listed {count} categories",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
                "operation": operation,
            },
            correlation_id=correlation_id,
        )
