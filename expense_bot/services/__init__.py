"""Services package."""

from expense_bot.services.storage import (
    ConnectionError,
    ExpenseStoreInterface,
    NotFoundError,
    NotionClient,
    NotionExpenseStore,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "ExpenseStoreInterface",
    "NotFoundError",
    "NotionClient",
    "NotionExpenseStore",
    "StorageError",
]
