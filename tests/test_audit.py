"""Tests for the audit logger."""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

from expense_bot.audit import AuditLogger, create_correlation_id
from expense_bot.models.audit import AuditEventBuilder


@pytest.fixture
def audit_logger():
    audit_logger = AuditLogger()
    audit_logger._logger = MagicMock()
    return audit_logger


class TestAuditLogger:

    def test_info_events(self, audit_logger):
        assert audit_logger.log(AuditEventBuilder.wizard_started(uuid4())) is True

        audit_logger._logger.info.assert_called_once()
        args, kwargs = audit_logger._logger.info.call_args
        assert args == ("audit_event",)
        assert kwargs["event_type"] == "wizard_started"

    def test_severity_selects_level(self, audit_logger):
        audit_logger.log_wizard_abandoned(["date"], uuid4())
        audit_logger.log_external_service_error("notion", "create_record", "timeout")

        audit_logger._logger.warning.assert_called_once()
        audit_logger._logger.error.assert_called_once()

    def test_summary_event_details(self, audit_logger):
        audit_logger.log_summary_executed(
            start=datetime(2024, 5, 1, tzinfo=timezone.utc),
            end=datetime(2024, 5, 31, tzinfo=timezone.utc),
            entry_count=3,
            total=17000,
            detail=False,
        )

        kwargs = audit_logger._logger.info.call_args.kwargs
        assert kwargs["event_type"] == "summary_executed"
        assert kwargs["details"]["total"] == 17000
        assert kwargs["details"]["entry_count"] == 3

    def test_logging_failure_does_not_raise(self, audit_logger):
        audit_logger._logger.info.side_effect = RuntimeError("handler broke")

        assert audit_logger.log(AuditEventBuilder.categories_listed(2)) is False

    def test_user_text_stays_out_of_description(self):
        event = AuditEventBuilder.expense_saved("x" * 600, 20000, "Food", uuid4())
        assert "x" * 10 not in event.description
        assert event.details["title"] == "x" * 600

    def test_event_that_fails_validation_is_dropped(self, audit_logger):
        assert audit_logger._emit(
            AuditEventBuilder.system_error,
            error_type="E" * 600,
            error_message="boom",
        ) is False

        audit_logger._logger.warning.assert_called_once()
        audit_logger._logger.error.assert_not_called()

    def test_correlation_ids_are_unique(self):
        assert create_correlation_id() != create_correlation_id()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
