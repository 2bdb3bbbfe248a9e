"""Retrying execution of backend calls.

Handles the three ways a run can end:
- Success: the operation returned a value (or a fallback masked the failure)
- Failure: non-retryable error, or retries exhausted without a fallback
- Cancelled: the caller's cancel token fired during an attempt or a wait

Design: Information Hiding (Parnas)
Retry, backoff and reporting logic is isolated here, so call sites only
supply the operation and read the outcome.

Every attempt, retry decision and final outcome is reported to the
Reporter. Reporting never changes control flow or the returned outcome.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from gooddeeds.executor.classifier import ErrorClassifier
from gooddeeds.executor.outcome import (
    Cancelled,
    Failure,
    OperationOutcome,
    Success,
    _CancelRequested,
)
from gooddeeds.models import ErrorClassification, ErrorSeverity, RetryPolicy
from gooddeeds.reporting import Reporter

logger = logging.getLogger(__name__)

__all__ = ["RetryingOperationRunner", "NO_FALLBACK"]

T = TypeVar("T")


class _NoFallback:
    """Sentinel type: None is a legitimate fallback value."""

    def __repr__(self) -> str:
        return "NO_FALLBACK"


NO_FALLBACK: Any = _NoFallback()


class RetryingOperationRunner:
    """
    Run an async backend call with bounded exponential backoff.

    The runner holds no per-call state, so one instance can serve many
    concurrent run() calls.

    Args:
        reporter: Observability collaborator; events are only logged when None
        classifier: Maps exceptions to ErrorClassification
        default_policy: Policy used when run() gets none
        sleep: Coroutine used for backoff waits (injectable for tests)
        rng: Source of jitter

    Example:
        ```python
        runner = RetryingOperationRunner(reporter)

        outcome = await runner.run(
            lambda: client.table("reminders").select("*").execute(),
            "fetch_reminders",
            policy=RetryPolicy.STANDARD,
            fallback=[],
        )
        ```
    """

    def __init__(
        self,
        reporter: Reporter | None = None,
        classifier: ErrorClassifier | None = None,
        default_policy: RetryPolicy = RetryPolicy.STANDARD,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self._reporter = reporter
        self._classifier = classifier or ErrorClassifier()
        self._default_policy = default_policy
        self._sleep = sleep
        self._rng = rng or random.Random()

    @property
    def classifier(self) -> ErrorClassifier:
        return self._classifier

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        operation_name: str,
        policy: RetryPolicy | None = None,
        fallback: T = NO_FALLBACK,
        cancel: asyncio.Event | None = None,
    ) -> OperationOutcome[T]:
        """Run operation until it succeeds, fails for good, or is cancelled.

        Args:
            operation: Zero-argument coroutine function
            operation_name: Label used in reports and classifications
            policy: Retry policy (default_policy when None)
            fallback: Value returned as Success when every attempt failed
            cancel: Event that, once set, stops the run with a Cancelled outcome

        Returns:
            Success, Failure or Cancelled

        Raises:
            asyncio.CancelledError: If the task running run() is cancelled
        """
        policy = policy or self._default_policy
        attempt = 1

        while True:
            if cancel is not None and cancel.is_set():
                return await self._cancelled(operation_name, attempt - 1)

            if attempt > 1:
                await self._report(
                    "BACKEND_RETRY_ATTEMPT",
                    f"Retrying {operation_name} (attempt {attempt}/{policy.max_retries + 1})",
                    ErrorSeverity.INFO,
                    {
                        "operation": operation_name,
                        "attempt": attempt,
                        "max_retries": policy.max_retries,
                    },
                )

            try:
                value = await self._until_cancelled(operation(), cancel)
            except _CancelRequested:
                return await self._cancelled(operation_name, attempt)
            except asyncio.CancelledError:
                logger.info(f"{operation_name} task cancelled during attempt {attempt}")
                raise
            except Exception as error:
                classification = self._classifier.classify(error, operation_name)
                will_retry = classification.is_retryable and attempt <= policy.max_retries

                await self._report(
                    "BACKEND_OPERATION_FAILED",
                    f"{operation_name} failed (attempt {attempt}/{policy.max_retries + 1}): "
                    f"{classification.user_message}",
                    ErrorSeverity.WARNING if will_retry else ErrorSeverity.ERROR,
                    {
                        "operation": operation_name,
                        "attempt": attempt,
                        "max_retries": policy.max_retries,
                        "error": classification.technical_message,
                        "error_kind": classification.kind.value,
                        "retryable": classification.is_retryable,
                        "will_retry": will_retry,
                    },
                )

                if not will_retry:
                    return await self._give_up(
                        operation_name, classification, attempt, fallback
                    )

                delay_ms = policy.jittered_delay_ms(attempt, self._rng)
                logger.debug(
                    f"{operation_name} will retry after {delay_ms:.0f}ms "
                    f"(attempt {attempt + 1}/{policy.max_retries + 1})"
                )
                try:
                    await self._until_cancelled(self._sleep(delay_ms / 1000.0), cancel)
                except _CancelRequested:
                    return await self._cancelled(operation_name, attempt)

                attempt += 1
                continue

            if attempt > 1:
                await self._report(
                    "BACKEND_RETRY_SUCCESS",
                    f"{operation_name} succeeded after {attempt} attempts",
                    ErrorSeverity.INFO,
                    {"operation": operation_name, "attempts": attempt},
                )
            return Success(value, attempts=attempt)

    async def call(
        self,
        operation: Callable[[], Awaitable[T]],
        operation_name: str,
        policy: RetryPolicy | None = None,
        fallback: T = NO_FALLBACK,
        cancel: asyncio.Event | None = None,
    ) -> T:
        """
        Like run(), but return the value directly.

        Raises:
            BackendError: On Failure (str() is the user message)
            OperationCancelledError: On Cancelled
        """
        outcome = await self.run(operation, operation_name, policy, fallback, cancel)
        return outcome.unwrap()

    async def _give_up(
        self,
        operation_name: str,
        classification: ErrorClassification,
        attempts: int,
        fallback: Any,
    ) -> OperationOutcome:
        await self._report(
            "BACKEND_OPERATION_FINAL_FAILURE",
            f"{operation_name} failed after {attempts} attempts: {classification.user_message}",
            ErrorSeverity.ERROR,
            {
                "operation": operation_name,
                "total_attempts": attempts,
                "final_error": classification.technical_message,
                "error_kind": classification.kind.value,
                "user_message": classification.user_message,
            },
        )

        if fallback is NO_FALLBACK:
            return Failure(classification, attempts=attempts)

        await self._report(
            "BACKEND_FALLBACK_USED",
            f"Using fallback value for {operation_name}",
            ErrorSeverity.WARNING,
            {"operation": operation_name, "fallback_value": repr(fallback)},
        )
        return Success(fallback, attempts=attempts, used_fallback=True)

    async def _cancelled(self, operation_name: str, attempts: int) -> Cancelled:
        await self._report(
            "BACKEND_OPERATION_CANCELLED",
            f"{operation_name} cancelled after {attempts} attempts",
            ErrorSeverity.INFO,
            {"operation": operation_name, "attempts": attempts},
        )
        return Cancelled(operation_name, attempts=attempts)

    async def _until_cancelled(self, awaitable: Awaitable[T], cancel: asyncio.Event | None) -> T:
        """Await awaitable, abandoning it if cancel is set first.

        Raises:
            _CancelRequested: If cancel fired before awaitable completed
        """
        if cancel is None:
            return await awaitable

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            waiter.cancel()
            raise

        waiter.cancel()
        if work.done():
            # Finished before (or together with) the cancel token
            return work.result()

        work.cancel()
        await asyncio.wait({work})
        if not work.cancelled():
            # Retrieve so asyncio doesn't warn about an unobserved exception
            work.exception()
        raise _CancelRequested()

    async def _report(
        self,
        code: str,
        message: str,
        severity: ErrorSeverity,
        metadata: Mapping[str, Any],
    ) -> None:
        if self._reporter is None:
            logger.log(severity.log_level, f"{code}: {message}")
            return
        try:
            await self._reporter.log_error(code, message, severity=severity, metadata=metadata)
        except Exception as e:
            logger.warning(f"Reporter failed for {code}: {e}")
