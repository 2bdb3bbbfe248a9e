"""SQLite-backed error log implementation.

Design Pattern: Adapter Pattern
SqliteErrorLog adapts an SQLite database to the ErrorLog interface, so
reported events survive app restarts.

Implementation details:
- aiosqlite for async operations
- WAL mode for concurrent reads
- INTEGER microsecond timestamps for ordering and range queries
- metadata stored as JSON text
"""

from __future__ import annotations

import asyncio
import json
import os
from datetime import datetime, timedelta
from pathlib import Path

import aiosqlite

from gooddeeds.models import ErrorLogEntry, ErrorSeverity
from gooddeeds.storage.base import (
    DEFAULT_MAX_ENTRIES,
    DEFAULT_RETENTION,
    ErrorLog,
    StorageError,
)


def _to_micros(ts: datetime) -> int:
    return int(ts.timestamp() * 1_000_000)


class SqliteErrorLog(ErrorLog):
    """SQLite-backed durable error log.

    After __init__, the instance is not yet usable. Call connect() first.
    This follows asyncio best practices (no async in __init__).

    Usage:
        store = SqliteErrorLog("errors.db")
        await store.connect()
        try:
            await store.append(entry)
        finally:
            await store.close()
    """

    def __init__(
        self,
        db_path: str,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        retention: timedelta = DEFAULT_RETENTION,
    ):
        """Initialize storage (connection not opened yet).

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            max_entries: Maximum number of entries kept
            retention: Age after which prune_expired() drops entries
        """
        super().__init__(max_entries=max_entries, retention=retention)
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()  # Serialize access to shared connection

    @classmethod
    async def in_memory(cls, max_entries: int = DEFAULT_MAX_ENTRIES) -> SqliteErrorLog:
        """
        Create a connected in-memory store for testing.

        Example:
            store = await SqliteErrorLog.in_memory()
        """
        instance = cls(":memory:", max_entries=max_entries)
        await instance.connect()
        return instance

    @classmethod
    def from_env(cls) -> SqliteErrorLog:
        """
        Configure the database path from GOODDEEDS_ERROR_LOG_PATH.

        Falls back to an in-memory database when the variable is unset.
        The returned store still needs connect().

        Example:
            # $ export GOODDEEDS_ERROR_LOG_PATH=~/.gooddeeds/errors.db
            store = SqliteErrorLog.from_env()
        """
        path = os.getenv("GOODDEEDS_ERROR_LOG_PATH") or ":memory:"
        if path != ":memory:":
            path = os.path.expanduser(path)
        return cls(path)

    def __repr__(self) -> str:
        if self.db_path == ":memory:":
            return "SqliteErrorLog(in-memory)"
        return f"SqliteErrorLog({self.db_path})"

    async def connect(self) -> None:
        """Open database connection and initialize schema.

        Fixed initialization sequence:
        1. Open connection
        2. Enable WAL mode
        3. Create table and index
        """
        if self._connection is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(
            self.db_path,
            timeout=5.0,
            isolation_level=None,  # Autocommit mode
        )

        # In-memory databases report "memory" and don't support WAL
        cursor = await self._connection.execute("PRAGMA journal_mode=WAL")
        result = await cursor.fetchone()
        await cursor.close()

        if result:
            mode = result[0].upper()
            if mode not in ("WAL", "MEMORY"):
                raise StorageError(f"Failed to enable WAL mode, got: {result[0]}")

        await self._connection.execute("PRAGMA busy_timeout=5000")
        await self._create_schema()

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def _create_schema(self) -> None:
        """Create the error_log table.

        seq breaks ties between entries reported in the same microsecond.
        """
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS error_log (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                code TEXT NOT NULL,
                message TEXT NOT NULL,
                severity TEXT CHECK( severity IN (
                    'INFO','WARNING','ERROR','CRITICAL'
                ) ) NOT NULL,
                ts_us INTEGER NOT NULL,
                timestamp TEXT NOT NULL,
                metadata TEXT NOT NULL DEFAULT '{}',
                stack_trace TEXT
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_error_log_ts
            ON error_log(ts_us)
        """)

    def _check_connected(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StorageError("SqliteErrorLog is not connected. Call connect() first.")
        return self._connection

    async def append(self, entry: ErrorLogEntry) -> None:
        conn = self._check_connected()

        async with self._lock:
            try:
                await conn.execute(
                    """
                    INSERT INTO error_log
                        (id, code, message, severity, ts_us, timestamp, metadata, stack_trace)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        entry.id,
                        entry.code,
                        entry.message,
                        entry.severity.value,
                        _to_micros(entry.timestamp),
                        entry.timestamp.isoformat(),
                        json.dumps(entry.metadata, default=str),
                        entry.stack_trace,
                    ),
                )
                # Keep only the newest max_entries rows
                await conn.execute(
                    """
                    DELETE FROM error_log WHERE seq NOT IN (
                        SELECT seq FROM error_log
                        ORDER BY ts_us DESC, seq DESC
                        LIMIT ?
                    )
                    """,
                    (self.max_entries,),
                )
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to append error log entry: {e}") from e

    async def entries(
        self, since: datetime | None = None, limit: int | None = None
    ) -> list[ErrorLogEntry]:
        conn = self._check_connected()

        query = (
            "SELECT id, code, message, severity, timestamp, metadata, stack_trace "
            "FROM error_log"
        )
        params: list = []
        if since is not None:
            query += " WHERE ts_us >= ?"
            params.append(_to_micros(since))
        query += " ORDER BY ts_us DESC, seq DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(max(limit, 0))

        async with self._lock:
            try:
                cursor = await conn.execute(query, params)
                rows = await cursor.fetchall()
                await cursor.close()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to read error log: {e}") from e

        return [self._row_to_entry(row) for row in reversed(rows)]

    async def prune(self, older_than: datetime) -> int:
        conn = self._check_connected()

        async with self._lock:
            try:
                cursor = await conn.execute(
                    "DELETE FROM error_log WHERE ts_us < ?", (_to_micros(older_than),)
                )
                removed = cursor.rowcount
                await cursor.close()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to prune error log: {e}") from e
        return removed

    async def clear(self) -> None:
        conn = self._check_connected()
        async with self._lock:
            try:
                await conn.execute("DELETE FROM error_log")
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to clear error log: {e}") from e

    async def count(self) -> int:
        conn = self._check_connected()
        async with self._lock:
            try:
                cursor = await conn.execute("SELECT COUNT(*) FROM error_log")
                row = await cursor.fetchone()
                await cursor.close()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to count error log entries: {e}") from e
        return row[0]

    @staticmethod
    def _row_to_entry(row) -> ErrorLogEntry:
        entry_id, code, message, severity, timestamp, metadata, stack_trace = row
        return ErrorLogEntry(
            id=entry_id,
            code=code,
            message=message,
            severity=ErrorSeverity(severity),
            timestamp=datetime.fromisoformat(timestamp),
            metadata=json.loads(metadata) if metadata else {},
            stack_trace=stack_trace,
        )
