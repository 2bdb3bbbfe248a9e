"""
Outcomes of a retried backend operation.

This module defines the OperationOutcome union returned by
RetryingOperationRunner.run().

Design Pattern: State Machine using Union types
The runner never raises for operation failures. The caller receives one of
three variants and decides how to react:

Example:
    ```python
    outcome = await runner.run(fetch_reminders, "fetch_reminders")

    match outcome:
        case Success(value):
            show(value)
        case Failure(classification):
            show_error(classification.user_message)
        case Cancelled():
            pass
    ```
"""

from dataclasses import dataclass
from typing import Generic, TypeGuard, TypeVar

from gooddeeds.models.errors import BackendError, ErrorClassification, OperationCancelledError

__all__ = [
    "Success",
    "Failure",
    "Cancelled",
    "OperationOutcome",
    "is_success",
    "is_failure",
    "is_cancelled",
    "_CancelRequested",
]

T = TypeVar("T")


# =============================================================================
# Run Control Signals (Not Errors)
# =============================================================================


class _RunControl(BaseException):
    """
    Base class for run control signals.

    These inherit from BaseException (not Exception) so that the runner's
    `except Exception` around the operation never mistakes them for an
    operation failure.
    """

    pass


class _CancelRequested(_RunControl):  # noqa: N818
    """
    Signal that the caller's cancel token fired during an attempt or a wait.

    Internal to the runner; converted into a Cancelled outcome before run()
    returns.
    """

    pass


@dataclass(frozen=True)
class Success(Generic[T]):
    """
    Operation produced a value.

    Attributes:
        value: Operation result, or the fallback when used_fallback is True
        attempts: Number of invocations of the operation
        used_fallback: True when every attempt failed and the caller's
            fallback value is being returned instead
    """

    value: T
    attempts: int = 1
    used_fallback: bool = False

    def unwrap(self) -> T:
        return self.value

    def __str__(self) -> str:
        if self.used_fallback:
            return f"Success(fallback={self.value!r}, attempts={self.attempts})"
        return f"Success({self.value!r}, attempts={self.attempts})"


@dataclass(frozen=True)
class Failure:
    """
    Operation failed with a non-retryable error or ran out of retries.

    Attributes:
        classification: User-facing classification of the last error
        attempts: Number of invocations of the operation
    """

    classification: ErrorClassification
    attempts: int = 1

    def unwrap(self):
        """
        Raise the failure as a BackendError.

        Example:
            ```python
            try:
                reminders = outcome.unwrap()
            except BackendError as e:
                show_error(str(e))  # user message only
            ```
        """
        raise BackendError(self.classification)

    def __str__(self) -> str:
        return f"Failure({self.classification}, attempts={self.attempts})"


@dataclass(frozen=True)
class Cancelled:
    """
    Caller cancelled the run through its cancel token.

    Attributes:
        operation_name: Label of the cancelled operation
        attempts: Invocations started before cancellation
    """

    operation_name: str
    attempts: int = 0

    def unwrap(self):
        raise OperationCancelledError(self.operation_name, self.attempts)

    def __str__(self) -> str:
        return f"Cancelled({self.operation_name!r}, attempts={self.attempts})"


# =============================================================================
# OPERATION OUTCOME UNION TYPE
# =============================================================================

# Pattern matching (Python 3.10+):
#     match outcome:
#         case Success(value):
#             ...
#         case Failure(classification):
#             ...
#         case Cancelled():
#             ...
OperationOutcome = Success[T] | Failure | Cancelled


# =============================================================================
# TYPE GUARDS FOR OPERATION OUTCOME
# =============================================================================


def is_success(outcome: OperationOutcome[T]) -> TypeGuard[Success[T]]:
    """
    Check if outcome is Success (including a fallback value).

    Example:
        ```python
        if is_success(outcome):
            print(outcome.value)
        ```
    """
    return isinstance(outcome, Success)


def is_failure(outcome: OperationOutcome[T]) -> TypeGuard[Failure]:
    """Check if outcome is Failure."""
    return isinstance(outcome, Failure)


def is_cancelled(outcome: OperationOutcome[T]) -> TypeGuard[Cancelled]:
    """Check if outcome is Cancelled."""
    return isinstance(outcome, Cancelled)
