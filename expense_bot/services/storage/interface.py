"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Notion for another structured store later
2. Use in-memory storage for testing
3. Keep the wizard and summaries decoupled from HTTP details

The interface is intentionally small - just the three operations the
bot needs. Every operation returns a StoreResult instead of raising,
so callers are forced to handle failure.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from expense_bot.models.expense import ExpenseEntry, ExpenseRecord, StoreResult


class ExpenseStoreInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def create_record(self, record: ExpenseRecord) -> StoreResult[None]:
        """
        Write one expense to storage.

        Not retried: a timed-out write may still have landed.

        Args:
            record: The completed expense

        Returns:
            Success, or failure with a reason
        """
        pass

    @abstractmethod
    async def list_category_options(self) -> StoreResult[list[str]]:
        """
        List the category options defined in the store schema.

        Returns:
            The option names. An empty list if the schema has no
            category field or it has no options.
        """
        pass

    @abstractmethod
    async def query_by_date_range(
        self,
        start: datetime,
        end: datetime,
    ) -> StoreResult[list[ExpenseEntry]]:
        """
        Get all expenses dated within [start, end], both inclusive.

        Args:
            start: First instant of the range
            end: Last instant of the range

        Returns:
            Decoded entries with missing fields already defaulted.
            An empty list if nothing matches.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Database or page not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend, or it is temporarily unavailable."""
    pass
