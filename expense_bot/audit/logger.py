"""
Audit Logger

DESIGN DECISION: Every significant action in the bot is logged.
This provides:
1. Traceability from a saved expense back to its conversation
2. Debugging capability when the store misbehaves
3. Visibility into abandoned entries

The audit logger:
- Gracefully handles failures (doesn't break a conversation if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Any, Callable, Optional
from uuid import UUID, uuid4

import structlog
from pydantic import ValidationError

from expense_bot.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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

    Writes one structured "audit_event" log line per event.
    """

    def __init__(self, logger_name: str = "expense_bot.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        try:
            log_dict = event.to_log_dict()
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Logging must never take a conversation down with it
            return False

        return True

    def _emit(self, build: Callable[..., AuditEvent], *args: Any, **kwargs: Any) -> bool:
        """Build an event and log it; a malformed event is dropped, not raised."""
        try:
            event = build(*args, **kwargs)
        except ValidationError as e:
            self._logger.warning("audit_event_invalid", builder=build.__name__, error=str(e))
            return False
        return self.log(event)

    def log_wizard_started(self, correlation_id: UUID) -> None:
        """Log start of an expense entry."""
        self._emit(AuditEventBuilder.wizard_started, correlation_id)

    def log_wizard_input_rejected(
        self,
        step: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        """Log a re-prompt caused by invalid input."""
        self._emit(
            AuditEventBuilder.wizard_input_rejected,
            step=step,
            reason=reason,
            correlation_id=correlation_id,
        )

    def log_wizard_cancelled(self, step: str, correlation_id: UUID) -> None:
        """Log explicit cancellation by the user."""
        self._emit(AuditEventBuilder.wizard_cancelled, step, correlation_id)

    def log_wizard_abandoned(
        self,
        missing_fields: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log a wizard that reached the end with an incomplete draft."""
        self._emit(AuditEventBuilder.wizard_abandoned, missing_fields, correlation_id)

    def log_expense_saved(
        self,
        title: str,
        amount: int,
        category: str,
        correlation_id: UUID,
    ) -> None:
        """Log expense save."""
        self._emit(
            AuditEventBuilder.expense_saved,
            title=title,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        )

    def log_save_failed(
        self,
        title: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed expense write."""
        self._emit(AuditEventBuilder.save_failed, title, error_message, correlation_id)

    def log_summary_executed(
        self,
        start,
        end,
        entry_count: int,
        total: int,
        detail: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log summary execution."""
        self._emit(
            AuditEventBuilder.summary_executed,
            start=start,
            end=end,
            entry_count=entry_count,
            total=total,
            detail=detail,
            correlation_id=correlation_id,
        )

    def log_summary_rejected(
        self,
        arguments: list[str],
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log summary arguments that failed to parse."""
        self._emit(AuditEventBuilder.summary_rejected, arguments, reason, correlation_id)

    def log_categories_listed(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._emit(AuditEventBuilder.categories_listed, count, correlation_id)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self._emit(
            AuditEventBuilder.system_error,
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )

    def log_external_service_error(
        self,
        service: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        self._emit(
            AuditEventBuilder.external_service_error,
            service=service,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a summary command).
    The wizard carries its own in WizardState.
    """
    return uuid4()
