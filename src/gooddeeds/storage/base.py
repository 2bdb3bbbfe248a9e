"""
ErrorLog - Abstract interface for error log storage backends.

Design Pattern: Adapter Pattern
ErrorLog defines the target interface that all storage adapters implement.
Different backends (SQLite, Memory) adapt to this common interface.

Design Principle: Dependency Inversion (SOLID)
ErrorReporter depends on this abstraction, not on a concrete store, so
tests can use InMemoryErrorLog and the app can persist with SqliteErrorLog.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from gooddeeds.models import ErrorLogEntry

DEFAULT_MAX_ENTRIES = 100
DEFAULT_RETENTION = timedelta(days=30)


class StorageError(Exception):
    """
    Storage operation failed.

    From Dave Cheney: "Errors are values"
    Custom exception with context, not generic Exception.
    """

    pass


class ErrorLog(ABC):
    """
    Abstract storage for reported events.

    Stores keep at most max_entries entries, dropping the oldest first.
    Entries are returned oldest first.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        retention: timedelta = DEFAULT_RETENTION,
    ):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self.retention = retention

    @abstractmethod
    async def append(self, entry: ErrorLogEntry) -> None:
        """
        Store an entry, dropping the oldest entries beyond max_entries.

        Raises:
            StorageError: If the backend operation fails
        """
        pass

    @abstractmethod
    async def entries(
        self, since: datetime | None = None, limit: int | None = None
    ) -> list[ErrorLogEntry]:
        """
        Return stored entries, oldest first.

        Args:
            since: Only entries with timestamp >= since
            limit: Only the most recent `limit` matching entries
        """
        pass

    @abstractmethod
    async def prune(self, older_than: datetime) -> int:
        """
        Delete entries older than a cutoff.

        Returns:
            Number of entries removed
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Delete every entry."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored entries."""
        pass

    async def prune_expired(self, now: datetime | None = None) -> int:
        """Delete entries older than the retention window."""
        now = now or datetime.now()
        return await self.prune(now - self.retention)
