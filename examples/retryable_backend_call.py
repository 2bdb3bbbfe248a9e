"""
Retrying Backend Calls - Proof of Concept

This example demonstrates:
- Transient failures (network drop) are retried with exponential backoff
- Permanent failures (invalid credentials) fail after a single call
- A fallback value turns exhausted retries into a Success
- Every attempt is reported to the ErrorReporter and stored in SQLite

## Scenario
Three calls run side by side against a fake backend. Scenario A loses the
connection twice and then returns the user's reminders. Scenario B signs in
with a wrong password. Scenario C never reaches the server, but the caller
supplies an empty list as fallback.

## Run with
```bash
GOODDEEDS_RETRY_BASE_DELAY_MS=50 PYTHONPATH=src python examples/retryable_backend_call.py
```
"""

import asyncio
import logging

from gooddeeds import (
    AuthError,
    ErrorReporter,
    RetryingOperationRunner,
    RetryPolicy,
    is_failure,
    is_success,
)
from gooddeeds.storage import SqliteErrorLog

FETCH_CALLS = 0
SIGN_IN_CALLS = 0


async def fetch_reminders():
    global FETCH_CALLS
    FETCH_CALLS += 1
    if FETCH_CALLS < 3:
        raise ConnectionError("Connection reset by peer")
    return [{"id": "r1", "title": "Call mom"}]


async def sign_in():
    global SIGN_IN_CALLS
    SIGN_IN_CALLS += 1
    raise AuthError("Invalid login credentials", status_code=400)


async def sync_offline_queue():
    raise TimeoutError("request timed out")


async def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    store = SqliteErrorLog.from_env()
    await store.connect()
    try:
        reporter = ErrorReporter(store)
        runner = RetryingOperationRunner(reporter, default_policy=RetryPolicy.from_env())

        result_a, result_b, result_c = await asyncio.gather(
            runner.run(fetch_reminders, "fetch_reminders"),
            runner.run(sign_in, "sign_in"),
            runner.run(
                sync_offline_queue,
                "sync_offline_queue",
                policy=RetryPolicy.with_max_retries(1),
                fallback=[],
            ),
        )

        print()
        print(f"Scenario A: {result_a}")
        print(f"Scenario B: {result_b}")
        if is_failure(result_b):
            print(f"  shown to user: {result_b.classification.user_message}")
        print(f"Scenario C: {result_c}")

        status = await reporter.health_status()
        print(f"Health: {status.level} ({status.recent_count} events in the last 24h)")

        assert FETCH_CALLS == 3, f"Expected 3 calls for Scenario A, got {FETCH_CALLS}"
        assert SIGN_IN_CALLS == 1, f"Expected 1 call for Scenario B, got {SIGN_IN_CALLS}"
        assert is_success(result_a) and result_a.attempts == 3
        assert is_success(result_c) and result_c.used_fallback

        print("[PASS] All assertions passed!")
    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
