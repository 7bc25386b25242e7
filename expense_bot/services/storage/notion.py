"""
Notion Storage Implementation

DESIGN DECISION: A Notion database is the storage backend because:
1. Users can browse, edit and chart their expenses in Notion directly
2. No database setup required
3. Category options live in the database schema, editable by the user

TRADEOFFS:
- Rows can be edited by hand, so any field may be missing when read back
  (we default them here, once, at the decoding boundary)
- Query results are paginated (we follow the cursor)
- No transactions (a write is one page creation)
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_bot.config import AppSettings, NotionSettings, get_settings
from expense_bot.models.expense import ExpenseEntry, ExpenseRecord, StoreResult
from expense_bot.services.storage.interface import (
    ConnectionError,
    ExpenseStoreInterface,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)


def _iso(value: datetime) -> str:
    """Format an instant the way Notion echoes it back (UTC, millisecond precision)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_iso(value: Any) -> Optional[datetime]:
    """Parse a Notion date string, returning None for anything unusable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


class NotionClient:
    """
    Low-level Notion API client wrapper.

    Handles authentication headers, error classification and retry
    logic for read calls.
    """

    def __init__(
        self,
        settings: Optional[NotionSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or get_settings().notion
        self._transport = transport

    @property
    def settings(self) -> NotionSettings:
        return self._settings

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.token}",
            "Notion-Version": self._settings.api_version,
            "Content-Type": "application/json",
        }

    @staticmethod
    def _error_text(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.text[:200]

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
    ) -> dict:
        """
        Send one request and return the decoded JSON object.

        Raises:
            ConnectionError: Network failure, timeout, 429 or 5xx
            NotFoundError: 404
            StorageError: Any other failure
        """
        url = f"{self._settings.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._headers(),
                    json=json,
                )
        except httpx.RequestError as e:
            raise ConnectionError(f"Failed to reach Notion: {e}")

        status = response.status_code
        if status == 429 or status >= 500:
            raise ConnectionError(
                f"Notion unavailable ({status}): {self._error_text(response)}"
            )
        if status == 404:
            raise NotFoundError(f"Notion object not found: {self._error_text(response)}")
        if response.is_error:
            raise StorageError(f"Notion rejected request ({status}): {self._error_text(response)}")

        try:
            data = response.json()
        except ValueError:
            raise StorageError("Notion returned a non-JSON response")
        if not isinstance(data, dict):
            raise StorageError("Notion returned an unexpected response shape")
        return data

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ConnectionError),
        reraise=True,
    )
    async def retrieve_database(self) -> dict:
        """Get the database object, including its property schema."""
        return await self._request("GET", f"/databases/{self._settings.database_id}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ConnectionError),
        reraise=True,
    )
    async def query_database(self, body: dict) -> dict:
        """Run one page of a database query."""
        return await self._request(
            "POST",
            f"/databases/{self._settings.database_id}/query",
            json=body,
        )

    async def create_page(self, properties: dict) -> dict:
        """Create a page (row) in the database. Never retried."""
        return await self._request(
            "POST",
            "/pages",
            json={
                "parent": {"database_id": self._settings.database_id},
                "properties": properties,
            },
        )


class NotionExpenseStore(ExpenseStoreInterface):
    """
    Notion implementation of expense storage.

    Each expense is one page in the database with four properties:
    a title, a date, a select category and a number amount.
    """

    def __init__(
        self,
        client: Optional[NotionClient] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._client = client or NotionClient()
        self._settings = self._client.settings
        self._app_settings = app_settings or get_settings().app

    def _record_to_properties(self, record: ExpenseRecord) -> dict:
        """Convert an ExpenseRecord to Notion page properties."""
        s = self._settings
        return {
            s.title_property: {"title": [{"text": {"content": record.title}}]},
            s.date_property: {"date": {"start": _iso(record.date)}},
            s.category_property: {"select": {"name": record.category}},
            s.amount_property: {"number": record.amount},
        }

    def _page_to_entry(self, page: dict) -> ExpenseEntry:
        """
        Convert a Notion page to an ExpenseEntry.

        Every property is optional; missing or malformed values fall
        back to the configured defaults.
        """
        properties = page.get("properties")
        if not isinstance(properties, dict):
            properties = {}

        def prop(name: str) -> dict:
            value = properties.get(name)
            return value if isinstance(value, dict) else {}

        title = self._plain_text(prop(self._settings.title_property).get("title"))

        amount = prop(self._settings.amount_property).get("number")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            amount = 0
        elif not math.isfinite(amount):
            amount = 0

        select = prop(self._settings.category_property).get("select")
        category = select.get("name") if isinstance(select, dict) else None
        if not isinstance(category, str):
            category = None

        date_value = prop(self._settings.date_property).get("date")
        date = _parse_iso(date_value.get("start")) if isinstance(date_value, dict) else None

        return ExpenseEntry(
            title=title or self._app_settings.untitled_placeholder,
            date=date,
            category=category or self._app_settings.default_category,
            amount=int(amount),
        )

    @staticmethod
    def _plain_text(rich_text: Any) -> Optional[str]:
        if not isinstance(rich_text, list):
            return None
        parts = []
        for item in rich_text:
            if not isinstance(item, dict):
                continue
            text = item.get("plain_text")
            if text is None:
                text = (item.get("text") or {}).get("content")
            if isinstance(text, str):
                parts.append(text)
        return "".join(parts).strip() or None

    async def create_record(self, record: ExpenseRecord) -> StoreResult[None]:
        """Save an expense as a new Notion page."""
        try:
            await self._client.create_page(self._record_to_properties(record))
        except StorageError as e:
            logger.warning("notion_create_failed", error=str(e))
            return StoreResult.failure(f"Failed to save expense: {e}")
        return StoreResult.ok()

    async def list_category_options(self) -> StoreResult[list[str]]:
        """Read the select options of the category property."""
        try:
            database = await self._client.retrieve_database()
        except StorageError as e:
            logger.warning("notion_schema_failed", error=str(e))
            return StoreResult.failure(f"Failed to read categories: {e}")

        properties = database.get("properties")
        category = properties.get(self._settings.category_property) if isinstance(properties, dict) else None
        select = category.get("select") if isinstance(category, dict) else None
        options = select.get("options") if isinstance(select, dict) else None
        if not isinstance(options, list):
            return StoreResult.ok([])

        names = [
            option["name"]
            for option in options
            if isinstance(option, dict) and isinstance(option.get("name"), str)
        ]
        return StoreResult.ok(names)

    async def query_by_date_range(
        self,
        start: datetime,
        end: datetime,
    ) -> StoreResult[list[ExpenseEntry]]:
        """Query all pages whose date falls within [start, end]."""
        date_property = self._settings.date_property
        body = {
            "filter": {
                "and": [
                    {"property": date_property, "date": {"on_or_after": _iso(start)}},
                    {"property": date_property, "date": {"on_or_before": _iso(end)}},
                ]
            },
            "page_size": self._settings.page_size,
        }

        entries: list[ExpenseEntry] = []
        cursor: Optional[str] = None
        try:
            while True:
                request = dict(body, start_cursor=cursor) if cursor else body
                data = await self._client.query_database(request)

                results = data.get("results")
                if isinstance(results, list):
                    entries.extend(
                        self._page_to_entry(page)
                        for page in results
                        if isinstance(page, dict)
                    )

                cursor = data.get("next_cursor")
                if not data.get("has_more") or not cursor:
                    break
        except StorageError as e:
            logger.warning("notion_query_failed", error=str(e))
            return StoreResult.failure(f"Failed to query expenses: {e}")

        return StoreResult.ok(entries)
