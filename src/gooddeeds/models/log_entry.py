"""
Records kept by the error reporter.

ErrorLogEntry is what gets persisted in an ErrorLog store; HealthStatus is
derived from recent entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Severity of a reported event, ordered from least to most severe."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def log_level(self) -> int:
        """Matching level of the standard logging module."""
        return _LOG_LEVELS[self]

    @property
    def is_error(self) -> bool:
        return self in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)

    def __str__(self) -> str:
        return self.value


_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass(frozen=True)
class ErrorLogEntry:
    """
    One reported event.

    Attributes:
        id: Time-ordered unique identifier (uuid7)
        code: Event code, e.g. BACKEND_RETRY_ATTEMPT
        message: Log message
        severity: Event severity
        timestamp: When the event was reported
        metadata: Structured context (operation, attempt, error kind, ...)
        stack_trace: Formatted traceback, if one was supplied
    """

    id: str
    code: str
    message: str
    severity: ErrorSeverity
    timestamp: datetime
    metadata: dict[str, Any] = field(default_factory=dict)
    stack_trace: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "metadata": dict(self.metadata),
            "stack_trace": self.stack_trace,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorLogEntry:
        """Inverse of to_dict(). Unknown severities fall back to ERROR."""
        try:
            severity = ErrorSeverity(data.get("severity"))
        except ValueError:
            severity = ErrorSeverity.ERROR

        return cls(
            id=data["id"],
            code=data["code"],
            message=data["message"],
            severity=severity,
            timestamp=datetime.fromisoformat(data["timestamp"]),
            metadata=dict(data.get("metadata") or {}),
            stack_trace=data.get("stack_trace"),
        )


class HealthLevel(Enum):
    """Overall health derived from recent log entries."""

    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HealthStatus:
    """Summary of the last 24 hours of reported events."""

    level: HealthLevel
    recent_count: int
    error_count: int
    warning_count: int
    last_error_at: datetime | None = None

    @classmethod
    def from_entries(cls, entries: list[ErrorLogEntry]) -> HealthStatus:
        """
        Derive health from a window of entries.

        CRITICAL: more than 5 errors
        WARNING: any error, or more than 10 warnings
        DEGRADED: any warning
        HEALTHY: otherwise
        """
        errors = [e for e in entries if e.severity.is_error]
        warnings = [e for e in entries if e.severity == ErrorSeverity.WARNING]

        if len(errors) > 5:
            level = HealthLevel.CRITICAL
        elif errors or len(warnings) > 10:
            level = HealthLevel.WARNING
        elif warnings:
            level = HealthLevel.DEGRADED
        else:
            level = HealthLevel.HEALTHY

        return cls(
            level=level,
            recent_count=len(entries),
            error_count=len(errors),
            warning_count=len(warnings),
            last_error_at=errors[-1].timestamp if errors else None,
        )
