"""
Property-based tests for gooddeeds using Hypothesis.

These tests generate many cases to find edge cases in:
- Retry policy delay calculations
- Retry loop attempt counts and fallback handling
- Countdown formatting
- Error log bounds
"""

import random
from datetime import datetime, timedelta

import pytest
from conftest import FIXED_NOW, FlakyOperation, RecordingSleep, retry_policy_strategy
from hypothesis import given, settings
from hypothesis import strategies as st

from gooddeeds.countdown import CountdownFormatter
from gooddeeds.executor import RetryingOperationRunner, is_failure, is_success
from gooddeeds.models import (
    ErrorLogEntry,
    ErrorSeverity,
    QueryError,
    ReminderSchedule,
    ReminderStatus,
    RetryPolicy,
    Urgency,
)
from gooddeeds.reporting import ErrorReporter
from gooddeeds.storage import InMemoryErrorLog

# ==============================================================================
# PROPERTY 1: Retry policy delays
# ==============================================================================


@pytest.mark.property
@given(policy=retry_policy_strategy(), attempt=st.integers(min_value=1, max_value=12))
def test_delay_bounded_by_max_delay(policy, attempt):
    """
    Property: Every delay lies in [0, max_delay_ms * (1 + jitter_factor)].
    """
    delay = policy.jittered_delay_ms(attempt, random.Random(attempt))
    if attempt > policy.max_retries:
        assert delay is None
    else:
        assert 0 <= delay <= policy.max_delay_ms * (1 + policy.jitter_factor)


@pytest.mark.property
@given(policy=retry_policy_strategy())
def test_delays_non_decreasing(policy):
    """
    Property: Un-jittered delays never shrink from one attempt to the next.
    """
    delays = [policy.delay_for_attempt(a) for a in range(1, policy.max_retries + 1)]
    assert delays == sorted(delays)


# ==============================================================================
# PROPERTY 2: Retry loop
# ==============================================================================


@pytest.mark.property
@pytest.mark.asyncio
@given(max_retries=st.integers(min_value=0, max_value=6))
@settings(max_examples=30, deadline=None)
async def test_always_retryable_runs_max_retries_plus_one(max_retries):
    """
    Property: A permanently retryable failure is attempted exactly n + 1 times.
    """
    policy = RetryPolicy(
        max_retries=max_retries, base_delay_ms=10, max_delay_ms=100, backoff_multiplier=2.0
    )
    sleep = RecordingSleep()
    runner = RetryingOperationRunner(sleep=sleep)
    operation = FlakyOperation([ConnectionError("down")] * 100)

    outcome = await runner.run(operation, "always_down", policy)

    assert is_failure(outcome)
    assert operation.calls == max_retries + 1
    assert outcome.attempts == max_retries + 1
    assert len(sleep.delays) == max_retries


@pytest.mark.property
@pytest.mark.asyncio
@given(
    failures=st.integers(min_value=0, max_value=10),
    max_retries=st.integers(min_value=0, max_value=5),
)
@settings(max_examples=50, deadline=None)
async def test_fallback_never_yields_failure(failures, max_retries):
    """
    Property: With a fallback supplied, the outcome is always Success.
    """
    policy = RetryPolicy(
        max_retries=max_retries, base_delay_ms=1, max_delay_ms=10, backoff_multiplier=2.0
    )
    runner = RetryingOperationRunner(sleep=RecordingSleep())
    operation = FlakyOperation([QueryError("upstream", status_code=503)] * failures, value="real")

    outcome = await runner.run(operation, "fetch", policy, fallback="cached")

    assert is_success(outcome)
    if failures <= max_retries:
        assert outcome.value == "real" and not outcome.used_fallback
    else:
        assert outcome.value == "cached" and outcome.used_fallback


@pytest.mark.property
@pytest.mark.asyncio
@given(max_retries=st.integers(min_value=0, max_value=5))
@settings(max_examples=20, deadline=None)
async def test_non_retryable_invoked_once(max_retries):
    runner = RetryingOperationRunner(sleep=RecordingSleep())
    operation = FlakyOperation([ValueError("bad input")])

    outcome = await runner.run(operation, "save", RetryPolicy.with_max_retries(max_retries))

    assert is_failure(outcome)
    assert operation.calls == 1


# ==============================================================================
# PROPERTY 3: Countdown formatting
# ==============================================================================


@pytest.mark.property
@given(offset_minutes=st.integers(min_value=-60 * 24 * 400, max_value=60 * 24 * 400))
def test_countdown_idempotent_and_tagged(offset_minutes):
    """
    Property: Same inputs give the same label; past instants are Overdue.
    """
    formatter = CountdownFormatter()
    schedule = ReminderSchedule(FIXED_NOW + timedelta(minutes=offset_minutes))

    first = formatter.format(schedule, FIXED_NOW)

    assert first == formatter.format(schedule, FIXED_NOW)
    assert (first.urgency is Urgency.OVERDUE) == (offset_minutes < 0)
    assert first.text


@pytest.mark.property
@given(
    when=st.one_of(st.none(), st.datetimes(), st.text(max_size=30)),
    status=st.sampled_from([ReminderStatus.PAUSED, ReminderStatus.COMPLETED]),
)
def test_inactive_reminders_ignore_instant(when, status):
    display = CountdownFormatter().format(ReminderSchedule(when, status), FIXED_NOW)
    assert display.urgency is Urgency.INACTIVE
    assert display.text == ("Paused" if status is ReminderStatus.PAUSED else "Completed")


# ==============================================================================
# PROPERTY 4: Error log bounds
# ==============================================================================


@pytest.mark.property
@pytest.mark.asyncio
@given(
    max_entries=st.integers(min_value=1, max_value=20),
    reports=st.integers(min_value=0, max_value=60),
)
@settings(max_examples=50, deadline=None)
async def test_error_log_never_exceeds_bound(max_entries, reports):
    """
    Property: The store holds min(reports, max_entries) entries, newest kept.
    """
    store = InMemoryErrorLog(max_entries=max_entries)
    ticks = iter(datetime(2026, 1, 1) + timedelta(seconds=i) for i in range(reports))
    reporter = ErrorReporter(store, clock=lambda: next(ticks))

    logged: list[ErrorLogEntry] = []
    for n in range(reports):
        logged.append(await reporter.log_error("TEST", f"report {n}", ErrorSeverity.INFO))

    assert await store.count() == min(reports, max_entries)
    kept = await store.entries()
    assert kept == logged[len(logged) - len(kept):]
