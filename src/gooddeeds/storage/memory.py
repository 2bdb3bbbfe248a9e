"""In-memory error log implementation.

Design Pattern: Adapter Pattern
InMemoryErrorLog adapts a plain list to the ErrorLog interface.

Instance is immediately usable after __init__.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

from gooddeeds.models import ErrorLogEntry
from gooddeeds.storage.base import DEFAULT_MAX_ENTRIES, DEFAULT_RETENTION, ErrorLog


class InMemoryErrorLog(ErrorLog):
    """In-memory error log for tests and short-lived processes.

    Can be substituted for SqliteErrorLog without changing client code.

    Usage:
        store = InMemoryErrorLog(max_entries=50)
        await store.append(entry)
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        retention: timedelta = DEFAULT_RETENTION,
    ):
        super().__init__(max_entries=max_entries, retention=retention)
        self._entries: list[ErrorLogEntry] = []
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"InMemoryErrorLog(max_entries={self.max_entries})"

    async def append(self, entry: ErrorLogEntry) -> None:
        async with self._lock:
            self._entries.append(entry)
            overflow = len(self._entries) - self.max_entries
            if overflow > 0:
                del self._entries[:overflow]

    async def entries(
        self, since: datetime | None = None, limit: int | None = None
    ) -> list[ErrorLogEntry]:
        async with self._lock:
            result = [e for e in self._entries if since is None or e.timestamp >= since]
        if limit is not None:
            result = result[-limit:] if limit > 0 else []
        return result

    async def prune(self, older_than: datetime) -> int:
        async with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e.timestamp >= older_than]
            return before - len(self._entries)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    async def count(self) -> int:
        return len(self._entries)
