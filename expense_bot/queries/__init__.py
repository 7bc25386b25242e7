"""Summary query package."""

from expense_bot.queries.summary import (
    SummaryExecutor,
    aggregate,
    group_detail,
    render_summary,
)

__all__ = ["SummaryExecutor", "aggregate", "group_detail", "render_summary"]
