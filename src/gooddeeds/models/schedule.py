"""
Reminder schedule input and countdown output records.

These replace the loosely typed reminder row mappings the app used to pass
around; fields are explicit and validated once at the boundary.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class ReminderStatus(Enum):
    """
    Status of a reminder as stored by the reminder data source.

    Lifecycle:
    ACTIVE ⇄ PAUSED → COMPLETED
    """

    ACTIVE = "active"
    """Reminder fires at next_occurrence."""

    PAUSED = "paused"
    """Reminder is suspended by the user; no countdown is shown."""

    COMPLETED = "completed"
    """Reminder has run its course; no countdown is shown."""

    @property
    def is_active(self) -> bool:
        return self == ReminderStatus.ACTIVE

    def __str__(self) -> str:
        return self.value


class Urgency(Enum):
    """Urgency tag attached to a countdown label, used to pick its color."""

    OVERDUE = "overdue"
    IMMINENT = "imminent"
    SOON = "soon"
    LATER = "later"
    INACTIVE = "inactive"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ReminderSchedule:
    """
    The part of a reminder the countdown formatter reads.

    Attributes:
        next_occurrence: Absolute instant of the next occurrence. A string is
            accepted as stored (ISO 8601) and parsed by the formatter.
        status: Reminder status
    """

    next_occurrence: datetime | str | None
    status: ReminderStatus = ReminderStatus.ACTIVE

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ReminderSchedule:
        """
        Build a schedule from a reminder row.

        Accepts both the app's camelCase columns (nextOccurrenceDateTime) and
        snake_case columns (next_occurrence_at).

        Raises:
            ValueError: If the status is missing or unknown

        Example:
            schedule = ReminderSchedule.from_record(
                {"status": "active", "nextOccurrenceDateTime": "2026-10-20T09:15:00"}
            )
        """
        raw_status = record.get("status")
        if not isinstance(raw_status, str):
            raise ValueError(f"Reminder record has no status: {raw_status!r}")

        try:
            status = ReminderStatus(raw_status.strip().lower())
        except ValueError as e:
            raise ValueError(f"Unknown reminder status: {raw_status!r}") from e

        next_occurrence = record.get("nextOccurrenceDateTime")
        if next_occurrence is None:
            next_occurrence = record.get("next_occurrence_at")

        return cls(next_occurrence=next_occurrence, status=status)


@dataclass(frozen=True)
class CountdownDisplay:
    """
    Human-readable countdown label and its urgency.

    Recomputed on every format call; carries no identity.
    """

    text: str
    urgency: Urgency

    def __str__(self) -> str:
        return self.text
