"""
Summary Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and pure.
The store returns decoded entries; everything after that is in-memory
arithmetic. Running the same range twice with no writes in between
gives the same totals.

No entry is ever dropped: a record with no amount counts as zero so
totals stay well-defined when the database holds partial rows.
"""

from datetime import datetime, timezone
from typing import Optional

from expense_bot.audit import AuditLogger
from expense_bot.config import AppSettings, get_settings
from expense_bot.formatting import (
    format_amount,
    format_short_date,
    format_short_datetime,
)
from expense_bot.models.expense import (
    DateRange,
    ExpenseEntry,
    StoreResult,
    SummaryRequest,
    SummaryResult,
)
from expense_bot.services.storage import ExpenseStoreInterface


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def aggregate(entries: list[ExpenseEntry], date_range: DateRange) -> SummaryResult:
    """Compute the total, per-category subtotals and detail list."""
    total = 0
    per_category: dict[str, int] = {}
    detail: list[ExpenseEntry] = []

    for entry in entries:
        total += entry.amount
        per_category[entry.category] = per_category.get(entry.category, 0) + entry.amount
        detail.append(entry)

    return SummaryResult(
        date_range=date_range,
        total=total,
        per_category=per_category,
        detail=detail,
    )


def group_detail(entries: list[ExpenseEntry]) -> dict[str, list[ExpenseEntry]]:
    """
    Group entries by category, most recent first within each group.

    Categories keep the order in which they first appear. Entries
    without a date go to the end of their group.
    """
    groups: dict[str, list[ExpenseEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.category, []).append(entry)

    for items in groups.values():
        items.sort(
            key=lambda e: (e.date is not None, e.date or _OLDEST),
            reverse=True,
        )
    return groups


def render_summary(
    result: SummaryResult,
    settings: AppSettings,
    detail: bool = False,
    period_label: Optional[str] = None,
) -> str:
    """
    Render a summary as a chat message.

    Args:
        result: The aggregated summary
        settings: Display settings (currency, timezone)
        detail: Append the per-category listing
        period_label: Overrides the "DD/MM - DD/MM" period text
    """
    tz = settings.tzinfo
    period = period_label or (
        f"{format_short_date(result.date_range.start, tz)}"
        f" - {format_short_date(result.date_range.end, tz)}"
    )

    lines = [f"📊 Total {period}: {format_amount(result.total, settings)}"]

    if not result.detail:
        lines.append("")
        lines.append("No expenses recorded in this period.")
        return "\n".join(lines)

    lines.append("")
    for category, amount in result.per_category.items():
        lines.append(f"{category}: {format_amount(amount, settings)}")

    if detail:
        for category, items in group_detail(result.detail).items():
            lines.append("")
            lines.append(f"🗂 {category} ({format_amount(result.per_category[category], settings)})")
            for entry in items:
                lines.append(
                    f"• {format_short_datetime(entry.date, tz)}  {entry.title}  "
                    f"{format_amount(entry.amount, settings)}"
                )

    return "\n".join(lines)


class SummaryExecutor:
    """
    Runs summary requests against expense storage.

    GUARANTEES:
    - Only reports real data from storage
    - A store failure is returned as a failed StoreResult, never raised
    """

    def __init__(
        self,
        storage: ExpenseStoreInterface,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings().app
        self._audit_logger = audit_logger

    async def execute(self, request: SummaryRequest) -> StoreResult[SummaryResult]:
        """Query the range and aggregate what comes back."""
        date_range = request.date_range
        queried = await self._storage.query_by_date_range(date_range.start, date_range.end)
        if not queried.success:
            return StoreResult.failure(queried.error_message or "Query failed")

        result = aggregate(queried.value or [], date_range)

        if self._audit_logger:
            self._audit_logger.log_summary_executed(
                start=date_range.start,
                end=date_range.end,
                entry_count=result.entry_count,
                total=result.total,
                detail=request.detail,
            )

        return StoreResult.ok(result)

    def render(self, request: SummaryRequest, result: SummaryResult) -> str:
        """Render a result for the request that produced it."""
        label = None
        if not request.explicit_range:
            tz = self._settings.tzinfo
            label = (
                f"this month ({format_short_date(result.date_range.start, tz)}"
                f" - {format_short_date(result.date_range.end, tz)})"
            )
        return render_summary(result, self._settings, detail=request.detail, period_label=label)
