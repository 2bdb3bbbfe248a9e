"""Retrying execution of backend calls.

    - RetryingOperationRunner: bounded exponential backoff with jitter
    - ErrorClassifier: exception → user-facing ErrorClassification
    - Success / Failure / Cancelled: the OperationOutcome union
"""

from gooddeeds.executor.classifier import ErrorClassifier
from gooddeeds.executor.outcome import (
    Cancelled,
    Failure,
    OperationOutcome,
    Success,
    is_cancelled,
    is_failure,
    is_success,
)
from gooddeeds.executor.runner import NO_FALLBACK, RetryingOperationRunner

__all__ = [
    "Cancelled",
    "ErrorClassifier",
    "Failure",
    "NO_FALLBACK",
    "OperationOutcome",
    "RetryingOperationRunner",
    "Success",
    "is_cancelled",
    "is_failure",
    "is_success",
]
