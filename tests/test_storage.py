"""
Test ErrorLog storage backends.

The same behaviors are checked against InMemoryErrorLog and SqliteErrorLog.
"""

from datetime import datetime, timedelta

import pytest

from gooddeeds.models import ErrorLogEntry, ErrorSeverity
from gooddeeds.storage import InMemoryErrorLog, StorageError
from gooddeeds.storage.sqlite import SqliteErrorLog

BASE = datetime(2026, 10, 1, 12, 0, 0)


def make_entry(n: int, severity: ErrorSeverity = ErrorSeverity.ERROR, **metadata) -> ErrorLogEntry:
    return ErrorLogEntry(
        id=f"entry-{n:04d}",
        code="BACKEND_OPERATION_FAILED",
        message=f"failure {n}",
        severity=severity,
        timestamp=BASE + timedelta(minutes=n),
        metadata=metadata,
    )


@pytest.fixture(params=["memory", "sqlite"])
async def store(request):
    if request.param == "memory":
        yield InMemoryErrorLog(max_entries=5)
    else:
        store = await SqliteErrorLog.in_memory(max_entries=5)
        yield store
        await store.close()


@pytest.mark.asyncio
async def test_append_and_read_back(store):
    entry = make_entry(1, operation="fetch_reminders", attempt=2)
    await store.append(entry)

    entries = await store.entries()
    assert entries == [entry]
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_entries_oldest_first(store):
    for n in (1, 2, 3):
        await store.append(make_entry(n))
    assert [e.id for e in await store.entries()] == ["entry-0001", "entry-0002", "entry-0003"]


@pytest.mark.asyncio
async def test_bounded_drops_oldest(store):
    for n in range(8):
        await store.append(make_entry(n))

    entries = await store.entries()
    assert await store.count() == 5
    assert [e.id for e in entries] == [f"entry-{n:04d}" for n in range(3, 8)]


@pytest.mark.asyncio
async def test_entries_since_and_limit(store):
    for n in range(5):
        await store.append(make_entry(n))

    since = await store.entries(since=BASE + timedelta(minutes=2))
    assert [e.id for e in since] == ["entry-0002", "entry-0003", "entry-0004"]

    limited = await store.entries(limit=2)
    assert [e.id for e in limited] == ["entry-0003", "entry-0004"]

    assert await store.entries(limit=0) == []


@pytest.mark.asyncio
async def test_prune(store):
    for n in range(4):
        await store.append(make_entry(n))

    removed = await store.prune(BASE + timedelta(minutes=2))

    assert removed == 2
    assert [e.id for e in await store.entries()] == ["entry-0002", "entry-0003"]


@pytest.mark.asyncio
async def test_prune_expired_uses_retention(store):
    await store.append(make_entry(0))
    await store.append(make_entry(60 * 24 * 40))

    removed = await store.prune_expired(BASE + timedelta(days=35))

    assert removed == 1
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_clear(store):
    for n in range(3):
        await store.append(make_entry(n))
    await store.clear()
    assert await store.count() == 0
    assert await store.entries() == []


def test_max_entries_must_be_positive():
    with pytest.raises(ValueError):
        InMemoryErrorLog(max_entries=0)


# =============================================================================
# SQLite specifics
# =============================================================================


@pytest.mark.asyncio
async def test_sqlite_requires_connect():
    store = SqliteErrorLog(":memory:")
    with pytest.raises(StorageError, match="not connected"):
        await store.append(make_entry(1))


@pytest.mark.asyncio
async def test_sqlite_duplicate_id_raises_storage_error(sqlite_memory_store):
    await sqlite_memory_store.append(make_entry(1))
    with pytest.raises(StorageError):
        await sqlite_memory_store.append(make_entry(1))


@pytest.mark.asyncio
async def test_sqlite_persists_across_connections(temp_db_path):
    first = SqliteErrorLog(str(temp_db_path))
    await first.connect()
    await first.append(make_entry(1, ErrorSeverity.WARNING, operation="sign_in"))
    await first.close()

    second = SqliteErrorLog(str(temp_db_path))
    await second.connect()
    try:
        entries = await second.entries()
    finally:
        await second.close()

    assert len(entries) == 1
    assert entries[0].severity is ErrorSeverity.WARNING
    assert entries[0].metadata == {"operation": "sign_in"}
    assert entries[0].timestamp == BASE + timedelta(minutes=1)


@pytest.mark.asyncio
async def test_sqlite_errors_wrapped_in_storage_error(sqlite_memory_store):
    """Every operation reports driver failures as StorageError."""
    await sqlite_memory_store._connection.execute("DROP TABLE error_log")

    with pytest.raises(StorageError, match="clear"):
        await sqlite_memory_store.clear()
    with pytest.raises(StorageError, match="count"):
        await sqlite_memory_store.count()
    with pytest.raises(StorageError):
        await sqlite_memory_store.entries()
    with pytest.raises(StorageError):
        await sqlite_memory_store.prune(BASE)


@pytest.mark.asyncio
async def test_sqlite_connect_is_idempotent(sqlite_memory_store):
    await sqlite_memory_store.connect()
    await sqlite_memory_store.append(make_entry(1))
    assert await sqlite_memory_store.count() == 1


def test_sqlite_from_env(monkeypatch, temp_db_path):
    monkeypatch.setenv("GOODDEEDS_ERROR_LOG_PATH", str(temp_db_path))
    assert SqliteErrorLog.from_env().db_path == str(temp_db_path)

    monkeypatch.delenv("GOODDEEDS_ERROR_LOG_PATH")
    assert SqliteErrorLog.from_env().db_path == ":memory:"


def test_storage_package_exports_sqlite_lazily():
    from gooddeeds import storage

    assert storage.SqliteErrorLog is SqliteErrorLog
    with pytest.raises(AttributeError):
        storage.RedisErrorLog  # noqa: B018


# =============================================================================
# Entry serialization
# =============================================================================


def test_entry_dict_round_trip():
    entry = make_entry(3, operation="save", attempt=1)
    assert ErrorLogEntry.from_dict(entry.to_dict()) == entry


def test_entry_from_dict_unknown_severity_is_error():
    data = make_entry(3).to_dict()
    data["severity"] = "FATAL"
    assert ErrorLogEntry.from_dict(data).severity is ErrorSeverity.ERROR
