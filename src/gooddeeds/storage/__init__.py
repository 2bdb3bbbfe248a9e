"""Storage backends for reported events.

Provides multiple storage implementations behind a common interface:
    - ErrorLog: Abstract interface
    - SqliteErrorLog: SQLite-backed storage
    - InMemoryErrorLog: In-memory storage for testing

Design: Adapter Pattern + Dependency Inversion (SOLID)
    ErrorReporter depends on ErrorLog, not on a concrete store.
"""

from gooddeeds.storage.base import ErrorLog, StorageError
from gooddeeds.storage.memory import InMemoryErrorLog


def __getattr__(name: str):
    """Lazy import so aiosqlite is only loaded when SQLite storage is used."""
    if name == "SqliteErrorLog":
        from gooddeeds.storage.sqlite import SqliteErrorLog

        return SqliteErrorLog
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ErrorLog",
    "StorageError",
    "InMemoryErrorLog",
    "SqliteErrorLog",
]
