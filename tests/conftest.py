"""
Shared test fixtures.

No real API calls in tests: the store is an in-memory fake and the
Notion client runs on httpx.MockTransport.
"""

from datetime import datetime, timezone
from typing import Optional

import pytest

from expense_bot.config import AppSettings, NotionSettings
from expense_bot.models.expense import (
    DateRange,
    ExpenseEntry,
    ExpenseRecord,
    StoreResult,
)
from expense_bot.services.storage import ExpenseStoreInterface


FIXED_NOW = datetime(2024, 5, 15, 12, 30, tzinfo=timezone.utc)


class InMemoryExpenseStore(ExpenseStoreInterface):
    """Fake store that keeps everything in lists and records every call."""

    def __init__(
        self,
        categories: Optional[list[str]] = None,
        entries: Optional[list[ExpenseEntry]] = None,
    ):
        self.categories = list(categories or [])
        self.entries = list(entries or [])
        self.created: list[ExpenseRecord] = []
        self.query_calls: list[tuple[datetime, datetime]] = []
        self.category_calls = 0

        self.fail_create = False
        self.fail_categories = False
        self.fail_query = False

    async def create_record(self, record: ExpenseRecord) -> StoreResult[None]:
        if self.fail_create:
            return StoreResult.failure("create failed")
        self.created.append(record)
        self.entries.append(ExpenseEntry(
            title=record.title,
            date=record.date,
            category=record.category,
            amount=record.amount,
        ))
        return StoreResult.ok()

    async def list_category_options(self) -> StoreResult[list[str]]:
        self.category_calls += 1
        if self.fail_categories:
            return StoreResult.failure("schema failed")
        return StoreResult.ok(list(self.categories))

    async def query_by_date_range(
        self,
        start: datetime,
        end: datetime,
    ) -> StoreResult[list[ExpenseEntry]]:
        self.query_calls.append((start, end))
        if self.fail_query:
            return StoreResult.failure("query failed")
        date_range = DateRange(start=start, end=end)
        return StoreResult.ok([
            entry for entry in self.entries
            if entry.date is not None and date_range.contains(entry.date)
        ])


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        timezone="UTC",
        currency_symbol="Rp",
        thousands_separator=".",
        default_category="Other",
        untitled_placeholder="(untitled)",
    )


@pytest.fixture
def notion_settings() -> NotionSettings:
    return NotionSettings(
        token="secret-token",
        database_id="db123",
        base_url="https://notion.test/v1",
    )


@pytest.fixture
def store() -> InMemoryExpenseStore:
    return InMemoryExpenseStore(categories=["Food", "Transport", "Bills"])


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
