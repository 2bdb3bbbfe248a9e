"""Error reporting for backend calls and background work.

ErrorReporter is the observability collaborator handed to
RetryingOperationRunner. A report goes to three places, in order:

1. the standard logging module, at the level matching its severity
2. an ErrorLog store, so recent events can be inspected and summarized
3. registered listeners (e.g. a UI banner)

Reporting is fire-and-forget: log_error() never raises. A failing store or
listener is logged and otherwise ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any, Protocol, runtime_checkable

from uuid_extensions import uuid7

from gooddeeds.models import ErrorLogEntry, ErrorSeverity, HealthStatus
from gooddeeds.storage import ErrorLog, InMemoryErrorLog

logger = logging.getLogger(__name__)

__all__ = ["Reporter", "ErrorReporter", "Listener"]

Listener = Callable[[ErrorLogEntry], None]

HEALTH_WINDOW = timedelta(hours=24)


@runtime_checkable
class Reporter(Protocol):
    """
    What the runner needs from an observability collaborator.

    From Dave Cheney: "Let functions define the behavior they require"
    Tests can pass any object with a matching log_error coroutine.
    """

    async def log_error(
        self,
        code: str,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        metadata: Mapping[str, Any] | None = None,
        stack_trace: str | None = None,
    ) -> ErrorLogEntry | None: ...


class ErrorReporter:
    """
    Logs, stores and broadcasts reported events.

    Construct once at startup and pass it to every runner that should share
    the same log.

    Example:
        ```python
        store = SqliteErrorLog.from_env()
        await store.connect()
        reporter = ErrorReporter(store)
        runner = RetryingOperationRunner(reporter)
        ```
    """

    def __init__(
        self,
        store: ErrorLog | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store if store is not None else InMemoryErrorLog()
        self._clock = clock
        self._listeners: list[Listener] = []

    def __repr__(self) -> str:
        return f"ErrorReporter(store={self._store!r})"

    @property
    def store(self) -> ErrorLog:
        return self._store

    async def log_error(
        self,
        code: str,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        metadata: Mapping[str, Any] | None = None,
        stack_trace: str | None = None,
    ) -> ErrorLogEntry | None:
        """
        Report an event. Never raises.

        Returns:
            The stored entry, or None if the entry could not be built
        """
        try:
            entry = ErrorLogEntry(
                id=str(uuid7()),
                code=code,
                message=message,
                severity=severity,
                timestamp=self._clock(),
                metadata=dict(metadata or {}),
                stack_trace=stack_trace,
            )
        except Exception as e:
            logger.error(f"Failed to build error log entry for {code}: {e}")
            return None

        if entry.metadata:
            logger.log(severity.log_level, f"{code}: {message} {entry.metadata}")
        else:
            logger.log(severity.log_level, f"{code}: {message}")

        try:
            await self._store.append(entry)
        except Exception as e:
            logger.warning(f"Failed to persist error log entry {code}: {e}")

        self._notify(entry)
        return entry

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with every new entry.

        Returns:
            Function that unregisters the listener

        Example:
            ```python
            unsubscribe = reporter.add_listener(banner.show)
            ...
            unsubscribe()
            ```
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, entry: ErrorLogEntry) -> None:
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception as e:
                logger.warning(f"Error listener {listener!r} failed: {e}")

    async def entries(
        self, since: datetime | None = None, limit: int | None = None
    ) -> list[ErrorLogEntry]:
        return await self._store.entries(since=since, limit=limit)

    async def clear(self) -> None:
        await self._store.clear()
        logger.info("Cleared error log")

    async def cleanup(self) -> int:
        """Drop entries older than the store's retention window."""
        removed = await self._store.prune_expired(self._clock())
        if removed:
            logger.info(f"Cleaned up {removed} old error log entries")
        return removed

    async def health_status(self, now: datetime | None = None) -> HealthStatus:
        """Summarize the last 24 hours of reported events."""
        now = now or self._clock()
        recent = await self._store.entries(since=now - HEALTH_WINDOW)
        return HealthStatus.from_entries(recent)
