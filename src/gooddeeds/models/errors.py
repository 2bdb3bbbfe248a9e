"""
Error taxonomy for backend calls.

Two families live here:
- Structured errors raised by backend adapters (BackendCallError and its
  subclasses), which the classifier reads before falling back to message
  keywords.
- The user-facing result of classification (ErrorClassification) and the
  exception that carries it out of OperationOutcome.unwrap() (BackendError).

From Dave Cheney: "Errors are values"
Each failure is classified once into an immutable value; the UI only ever
sees user_message, technical_message is for logs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """
    Category of a classified backend failure.

    Lifecycle: produced once per failure by ErrorClassifier, never mutated.
    """

    AUTHENTICATION = "AUTHENTICATION"
    DATABASE = "DATABASE"
    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    SERVER = "SERVER"
    VALIDATION = "VALIDATION"
    PERMISSION = "PERMISSION"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"

    @property
    def is_transient(self) -> bool:
        """Kinds the runner retries locally."""
        return self in (ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.SERVER)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ErrorClassification:
    """
    User-facing classification of a failed backend call.

    Attributes:
        kind: Error category
        user_message: Pre-written, non-technical text safe to show in UI
        technical_message: Raw error detail, for logs only
        is_retryable: Whether the runner may retry the operation
        operation_name: Label of the operation that failed
    """

    kind: ErrorKind
    user_message: str
    technical_message: str
    is_retryable: bool
    operation_name: str = ""

    def __str__(self) -> str:
        return f"{self.kind}: {self.user_message} (operation={self.operation_name!r})"


# =============================================================================
# Structured errors raised by backend adapters
# =============================================================================


class BackendCallError(Exception):
    """
    Base class for errors raised by backend client adapters.

    Carries the optional HTTP status code so classification can use a
    structured field before falling back to message keywords.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(BackendCallError):
    """Sign in, sign up or sign out failed at the authentication endpoint."""

    def __repr__(self) -> str:
        return f"AuthError(message={self.message!r}, status_code={self.status_code})"


class QueryError(BackendCallError):
    """
    Row-level data operation failed.

    Attributes:
        code: Backend error code, e.g. "PGRST116" (no rows) or a SQLSTATE
            such as "23505" (unique violation) or "42501" (insufficient
            privilege)
        details: Extra detail returned by the backend, if any
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        details: Any = None,
    ):
        super().__init__(message, status_code=status_code)
        self.code = code
        self.details = details

    def __repr__(self) -> str:
        return (
            f"QueryError(message={self.message!r}, code={self.code!r}, "
            f"status_code={self.status_code})"
        )


# =============================================================================
# Errors surfaced to callers
# =============================================================================


class BackendError(Exception):
    """
    A backend operation failed for good.

    Raised by Failure.unwrap(). str() yields the user message, so the
    exception can be shown directly in UI without leaking technical detail.
    """

    def __init__(
        self, classification: ErrorClassification, original: BaseException | None = None
    ):
        super().__init__(classification.user_message)
        self.classification = classification
        self.original = original

    @property
    def kind(self) -> ErrorKind:
        return self.classification.kind

    @property
    def user_message(self) -> str:
        return self.classification.user_message

    @property
    def technical_message(self) -> str:
        return self.classification.technical_message

    @property
    def is_retryable(self) -> bool:
        return self.classification.is_retryable

    def __str__(self) -> str:
        return self.classification.user_message

    def __repr__(self) -> str:
        return f"BackendError({self.classification!r})"


class OperationCancelledError(Exception):
    """Raised by Cancelled.unwrap() when the caller cancelled the run."""

    def __init__(self, operation_name: str, attempts: int):
        super().__init__(f"{operation_name} cancelled after {attempts} attempt(s)")
        self.operation_name = operation_name
        self.attempts = attempts
