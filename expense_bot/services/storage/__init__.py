"""
Storage Services Package

Provides the abstract store interface and its Notion implementation.
"""

from expense_bot.services.storage.interface import (
    ConnectionError,
    ExpenseStoreInterface,
    NotFoundError,
    StorageError,
)
from expense_bot.services.storage.notion import (
    NotionClient,
    NotionExpenseStore,
)

__all__ = [
    # Interfaces
    "ExpenseStoreInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Notion implementation
    "NotionClient",
    "NotionExpenseStore",
]
