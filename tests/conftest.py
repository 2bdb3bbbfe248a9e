"""
Pytest configuration and fixtures for gooddeeds tests.

Provides reusable fixtures for stores, reporters, runners and clocks, plus
hypothesis strategies for retry policies.
"""

import asyncio
import random
import shutil
import tempfile
from collections.abc import AsyncGenerator
from datetime import datetime
from pathlib import Path

import pytest
from hypothesis import strategies as st

from gooddeeds.executor import RetryingOperationRunner
from gooddeeds.models import RetryPolicy
from gooddeeds.reporting import ErrorReporter
from gooddeeds.storage import InMemoryErrorLog
from gooddeeds.storage.sqlite import SqliteErrorLog

# Wednesday, 14:00
FIXED_NOW = datetime(2026, 10, 21, 14, 0, 0)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


class FlakyOperation:
    """Operation that raises the given errors in order, then returns value."""

    def __init__(self, errors: list[BaseException], value=None):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


@pytest.fixture
def in_memory_store() -> InMemoryErrorLog:
    return InMemoryErrorLog()


@pytest.fixture
async def sqlite_memory_store() -> AsyncGenerator[SqliteErrorLog, None]:
    """Async SQLite in-memory store with automatic cleanup."""
    store = await SqliteErrorLog.in_memory()
    yield store
    await store.close()


@pytest.fixture
def temp_db_path():
    """Temporary database file path with automatic cleanup."""
    tmpdir = Path(tempfile.mkdtemp())
    db_path = tmpdir / "errors.db"
    yield db_path
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def reporter(in_memory_store: InMemoryErrorLog) -> ErrorReporter:
    return ErrorReporter(in_memory_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def runner(reporter: ErrorReporter, recording_sleep: RecordingSleep) -> RetryingOperationRunner:
    """Runner that never really sleeps and uses a seeded jitter source."""
    return RetryingOperationRunner(
        reporter,
        sleep=recording_sleep,
        rng=random.Random(1234),
    )


@pytest.fixture
def fast_policy() -> RetryPolicy:
    return RetryPolicy(
        max_retries=3,
        base_delay_ms=100,
        max_delay_ms=1000,
        backoff_multiplier=2.0,
        jitter_factor=0.0,
    )


# Hypothesis strategies for property-based testing


@st.composite
def retry_policy_strategy(draw):
    """Strategy for generating valid RetryPolicy objects."""
    base = draw(st.integers(min_value=0, max_value=5000))
    return RetryPolicy(
        max_retries=draw(st.integers(min_value=0, max_value=8)),
        base_delay_ms=base,
        max_delay_ms=draw(st.integers(min_value=base, max_value=base + 60000)),
        backoff_multiplier=draw(
            st.floats(min_value=1.01, max_value=5.0, allow_nan=False, allow_infinity=False)
        ),
        jitter_factor=draw(
            st.floats(min_value=0.0, max_value=1.0, allow_nan=False, allow_infinity=False)
        ),
    )
