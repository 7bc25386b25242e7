"""Tests for the summary engine."""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from expense_bot.models.expense import (
    DateRange,
    ExpenseEntry,
    SummaryRequest,
)
from expense_bot.queries import (
    SummaryExecutor,
    aggregate,
    group_detail,
    render_summary,
)
from expense_bot.validation import current_month_range, parse_range_token

from conftest import FIXED_NOW, InMemoryExpenseStore


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 5, day, hour, 0, tzinfo=timezone.utc)


MAY = current_month_range(FIXED_NOW)


@pytest.fixture
def entries() -> list[ExpenseEntry]:
    return [
        ExpenseEntry(title="Lunch", date=_at(2), category="Food", amount=10000),
        ExpenseEntry(title="Bus", date=_at(3), category="Transport", amount=2000),
        ExpenseEntry(title="Snack", date=_at(4), category="Food", amount=5000),
    ]


class TestAggregate:
    """Tests for pure aggregation."""

    def test_totals_and_subtotals(self, entries):
        result = aggregate(entries, MAY)

        assert result.total == 17000
        assert result.per_category == {"Food": 15000, "Transport": 2000}
        assert result.entry_count == 3

    def test_subtotals_add_up_to_total(self, entries):
        result = aggregate(entries, MAY)
        assert sum(result.per_category.values()) == result.total

    def test_empty(self):
        result = aggregate([], MAY)
        assert result.total == 0
        assert result.per_category == {}
        assert result.detail == []

    def test_zero_amount_entries_are_kept(self):
        """Test that entries decoded without an amount still appear."""
        result = aggregate(
            [ExpenseEntry(title="Free sample", date=_at(1), category="Other")],
            MAY,
        )
        assert result.total == 0
        assert result.per_category == {"Other": 0}
        assert result.entry_count == 1


class TestGroupDetail:

    def test_groups_keep_first_seen_order(self, entries):
        groups = group_detail(entries)
        assert list(groups) == ["Food", "Transport"]

    def test_most_recent_first(self, entries):
        groups = group_detail(entries)
        assert [e.title for e in groups["Food"]] == ["Snack", "Lunch"]

    def test_undated_entries_go_last(self):
        groups = group_detail([
            ExpenseEntry(title="Undated", category="Food", amount=1),
            ExpenseEntry(title="Old", date=_at(1), category="Food", amount=1),
            ExpenseEntry(title="New", date=_at(9), category="Food", amount=1),
        ])
        assert [e.title for e in groups["Food"]] == ["New", "Old", "Undated"]


class TestRenderSummary:

    def test_plain_summary(self, entries, app_settings):
        text = render_summary(aggregate(entries, MAY), app_settings)

        assert text.splitlines() == [
            "📊 Total 01/05 - 31/05: Rp 17.000",
            "",
            "Food: Rp 15.000",
            "Transport: Rp 2.000",
        ]

    def test_detail_summary(self, entries, app_settings):
        text = render_summary(aggregate(entries, MAY), app_settings, detail=True)

        assert "🗂 Food (Rp 15.000)" in text
        assert "• 04/05 12:00  Snack  Rp 5.000" in text
        assert "🗂 Transport (Rp 2.000)" in text
        assert text.index("Snack") < text.index("Lunch")

    def test_empty_period(self, app_settings):
        text = render_summary(aggregate([], MAY), app_settings, detail=True)

        assert text.splitlines() == [
            "📊 Total 01/05 - 31/05: Rp 0",
            "",
            "No expenses recorded in this period.",
        ]

    def test_period_label_override(self, entries, app_settings):
        text = render_summary(aggregate(entries, MAY), app_settings, period_label="this month")
        assert text.startswith("📊 Total this month: Rp 17.000")


class TestSummaryExecutor:
    """Tests for running summaries against a store."""

    @pytest.mark.anyio
    async def test_execute_queries_requested_range(self, entries, app_settings):
        store = InMemoryExpenseStore(entries=entries)
        executor = SummaryExecutor(store, settings=app_settings)
        request = SummaryRequest(
            date_range=parse_range_token("03/05-04/05", FIXED_NOW),
            explicit_range=True,
        )

        result = await executor.execute(request)

        assert result.success
        assert result.value.total == 7000
        assert store.query_calls == [(request.date_range.start, request.date_range.end)]

    @pytest.mark.anyio
    async def test_execute_is_idempotent(self, entries, app_settings):
        store = InMemoryExpenseStore(entries=entries)
        executor = SummaryExecutor(store, settings=app_settings)
        request = SummaryRequest(date_range=MAY)

        first = await executor.execute(request)
        second = await executor.execute(request)

        assert first.value == second.value
        assert executor.render(request, first.value) == executor.render(request, second.value)

    @pytest.mark.anyio
    async def test_execute_reports_store_failure(self, app_settings):
        store = InMemoryExpenseStore()
        store.fail_query = True
        executor = SummaryExecutor(store, settings=app_settings)

        result = await executor.execute(SummaryRequest(date_range=MAY))

        assert result.success is False
        assert result.error_message == "query failed"

    @pytest.mark.anyio
    async def test_execute_logs_audit_event(self, entries, app_settings):
        audit_logger = MagicMock()
        executor = SummaryExecutor(
            InMemoryExpenseStore(entries=entries),
            settings=app_settings,
            audit_logger=audit_logger,
        )

        await executor.execute(SummaryRequest(date_range=MAY, detail=True))

        audit_logger.log_summary_executed.assert_called_once()
        kwargs = audit_logger.log_summary_executed.call_args.kwargs
        assert kwargs["entry_count"] == 3
        assert kwargs["total"] == 17000
        assert kwargs["detail"] is True

    def test_render_labels_default_month(self, entries, app_settings):
        executor = SummaryExecutor(InMemoryExpenseStore(), settings=app_settings)
        request = SummaryRequest(date_range=MAY)

        text = executor.render(request, aggregate(entries, MAY))

        assert text.startswith("📊 Total this month (01/05 - 31/05): Rp 17.000")

    def test_render_explicit_range(self, entries, app_settings):
        executor = SummaryExecutor(InMemoryExpenseStore(), settings=app_settings)
        date_range = DateRange(start=_at(1, 0), end=_at(10, 23))
        request = SummaryRequest(date_range=date_range, explicit_range=True)

        text = executor.render(request, aggregate(entries, date_range))

        assert text.startswith("📊 Total 01/05 - 10/05: Rp 17.000")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
