"""Core data models for backend calls, countdowns and reporting.

Design: Dependency-Free Models
These types have no dependencies on executor or storage modules to
prevent circular imports and enable clean layering.
"""

from gooddeeds.models.delay import DelayOption, format_duration
from gooddeeds.models.errors import (
    AuthError,
    BackendCallError,
    BackendError,
    ErrorClassification,
    ErrorKind,
    OperationCancelledError,
    QueryError,
)
from gooddeeds.models.log_entry import ErrorLogEntry, ErrorSeverity, HealthLevel, HealthStatus
from gooddeeds.models.retry import RetryPolicy
from gooddeeds.models.schedule import CountdownDisplay, ReminderSchedule, ReminderStatus, Urgency
from gooddeeds.models.template import ReminderTemplate, TemplateCategory

__all__ = [
    "AuthError",
    "BackendCallError",
    "BackendError",
    "CountdownDisplay",
    "DelayOption",
    "ErrorClassification",
    "ErrorKind",
    "ErrorLogEntry",
    "ErrorSeverity",
    "HealthLevel",
    "HealthStatus",
    "OperationCancelledError",
    "QueryError",
    "ReminderSchedule",
    "ReminderStatus",
    "ReminderTemplate",
    "RetryPolicy",
    "TemplateCategory",
    "Urgency",
    "format_duration",
]
