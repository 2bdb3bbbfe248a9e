"""
gooddeeds: core logic of the Good Deeds Reminder app.

Design Pattern: Façade Pattern
This module re-exports the public API so call sites import from one place:

- RetryingOperationRunner wraps a backend call with bounded exponential
  backoff and turns the last error into a user-facing classification.
- CountdownFormatter turns a reminder's next occurrence into a label such as
  "In 5 minutes" or "Tomorrow at 9:15 AM".
- ErrorReporter logs, stores and broadcasts what happened.

Example:
    ```python
    import asyncio
    from gooddeeds import (
        ErrorReporter,
        RetryingOperationRunner,
        RetryPolicy,
        Success,
    )

    async def main():
        reporter = ErrorReporter()
        runner = RetryingOperationRunner(reporter)

        outcome = await runner.run(fetch_reminders, "fetch_reminders", RetryPolicy.STANDARD)
        if isinstance(outcome, Success):
            print(outcome.value)
        else:
            print(outcome.classification.user_message)

    asyncio.run(main())
    ```
"""

from gooddeeds.countdown import CountdownFormatter, FormatError, FormatErrorReason
from gooddeeds.executor import (
    NO_FALLBACK,
    Cancelled,
    ErrorClassifier,
    Failure,
    OperationOutcome,
    RetryingOperationRunner,
    Success,
    is_cancelled,
    is_failure,
    is_success,
)
from gooddeeds.models import (
    AuthError,
    BackendCallError,
    BackendError,
    CountdownDisplay,
    DelayOption,
    ErrorClassification,
    ErrorKind,
    ErrorLogEntry,
    ErrorSeverity,
    HealthLevel,
    HealthStatus,
    OperationCancelledError,
    QueryError,
    ReminderSchedule,
    ReminderStatus,
    ReminderTemplate,
    RetryPolicy,
    TemplateCategory,
    Urgency,
    format_duration,
)
from gooddeeds.reporting import ErrorReporter, Reporter
from gooddeeds.storage import ErrorLog, InMemoryErrorLog, StorageError
from gooddeeds.templates import TemplateService

__version__ = "0.1.0"

__all__ = [
    # Retrying backend calls
    "RetryingOperationRunner",
    "RetryPolicy",
    "ErrorClassifier",
    "NO_FALLBACK",
    "OperationOutcome",
    "Success",
    "Failure",
    "Cancelled",
    "is_success",
    "is_failure",
    "is_cancelled",
    # Errors
    "ErrorKind",
    "ErrorClassification",
    "BackendCallError",
    "AuthError",
    "QueryError",
    "BackendError",
    "OperationCancelledError",
    # Countdown
    "CountdownFormatter",
    "CountdownDisplay",
    "FormatError",
    "FormatErrorReason",
    "ReminderSchedule",
    "ReminderStatus",
    "Urgency",
    # Reporting
    "Reporter",
    "ErrorReporter",
    "ErrorLogEntry",
    "ErrorSeverity",
    "HealthLevel",
    "HealthStatus",
    "ErrorLog",
    "InMemoryErrorLog",
    "StorageError",
    # Delays and templates
    "DelayOption",
    "format_duration",
    "ReminderTemplate",
    "TemplateCategory",
    "TemplateService",
    # Metadata
    "__version__",
]
