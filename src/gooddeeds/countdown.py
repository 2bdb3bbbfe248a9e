"""Countdown labels for upcoming reminders.

CountdownFormatter turns (schedule, now) into a short label such as
"In 5 minutes" or "Tomorrow at 9:15 AM" plus an Urgency tag used to pick the
label's color. It is a pure function of its inputs: no timer, no I/O. The
caller re-formats at least once a minute while a countdown is on screen.

Calendar-day comparisons ("Today", "Tomorrow", weekday) are made in the
time zone of `now`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from gooddeeds.models import CountdownDisplay, ReminderSchedule, ReminderStatus, Urgency

logger = logging.getLogger(__name__)

__all__ = ["CountdownFormatter", "FormatError", "FormatErrorReason", "format_time_of_day"]

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_PAUSED = CountdownDisplay("Paused", Urgency.INACTIVE)
_COMPLETED = CountdownDisplay("Completed", Urgency.INACTIVE)


class FormatErrorReason(Enum):
    MISSING_INSTANT = "MISSING_INSTANT"
    INVALID_INSTANT = "INVALID_INSTANT"


class FormatError(ValueError):
    """An active reminder has no usable next occurrence."""

    def __init__(self, reason: FormatErrorReason, detail: str = ""):
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)
        self.reason = reason


def format_time_of_day(moment: datetime) -> str:
    """12-hour clock, e.g. "9:05 AM", "12:00 PM", "12:30 AM"."""
    hour = moment.hour % 12 or 12
    period = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {period}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


class CountdownFormatter:
    """
    Format time remaining until a reminder's next occurrence.

    Args:
        clock: Source of "now" used when format() is called without one

    Example:
        ```python
        formatter = CountdownFormatter()
        display = formatter.format(ReminderSchedule(next_occurrence=when))
        label.set_text(display.text)
        ```
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def format(self, schedule: ReminderSchedule, now: datetime | None = None) -> CountdownDisplay:
        """
        Build the countdown label for a schedule.

        Raises:
            FormatError: If the reminder is active and next_occurrence is
                missing or cannot be parsed
        """
        if schedule.status == ReminderStatus.PAUSED:
            return _PAUSED
        if schedule.status == ReminderStatus.COMPLETED:
            return _COMPLETED

        now = now if now is not None else self._clock()
        target = self._resolve_instant(schedule.next_occurrence, now)

        diff = target - now
        if diff.total_seconds() < 0:
            return CountdownDisplay("Overdue", Urgency.OVERDUE)

        total_minutes = diff.total_seconds() / 60
        if total_minutes < 1:
            return CountdownDisplay("Now", Urgency.IMMINENT)

        if total_minutes < 60:
            minutes = int(total_minutes)
            urgency = Urgency.IMMINENT if minutes < 5 else Urgency.SOON
            return CountdownDisplay(f"In {_plural(minutes, 'minute')}", urgency)

        at_time = format_time_of_day(target)
        days_ahead = (target.date() - now.date()).days

        if days_ahead == 0:
            if total_minutes < 720:
                hours = int(total_minutes // 60)
                return CountdownDisplay(f"In {_plural(hours, 'hour')}", Urgency.SOON)
            return CountdownDisplay(f"Today at {at_time}", Urgency.LATER)

        if days_ahead == 1:
            return CountdownDisplay(f"Tomorrow at {at_time}", Urgency.LATER)

        if 2 <= days_ahead <= 6:
            weekday = _WEEKDAYS[target.weekday()]
            return CountdownDisplay(f"{weekday} at {at_time}", Urgency.LATER)

        date_text = f"{_MONTHS[target.month - 1]} {target.day}"
        if target.year != now.year:
            date_text += f", {target.year}"
        return CountdownDisplay(f"{date_text} at {at_time}", Urgency.LATER)

    def format_record(self, record, now: datetime | None = None) -> CountdownDisplay:
        """Format a raw reminder row (see ReminderSchedule.from_record)."""
        return self.format(ReminderSchedule.from_record(record), now)

    @staticmethod
    def _resolve_instant(value: datetime | str | None, now: datetime) -> datetime:
        """Parse value and bring it into now's time zone."""
        if value is None or (isinstance(value, str) and not value.strip()):
            raise FormatError(FormatErrorReason.MISSING_INSTANT)

        if isinstance(value, str):
            try:
                target = datetime.fromisoformat(value.strip())
            except ValueError as e:
                logger.warning(f"Unparsable next occurrence {value!r}: {e}")
                raise FormatError(FormatErrorReason.INVALID_INSTANT, value) from e
        elif isinstance(value, datetime):
            target = value
        else:
            raise FormatError(FormatErrorReason.INVALID_INSTANT, repr(value))

        now_aware = now.tzinfo is not None
        target_aware = target.tzinfo is not None
        if now_aware and target_aware:
            return target.astimezone(now.tzinfo)
        if target_aware:
            # Naive now is local wall-clock time
            return target.astimezone().replace(tzinfo=None)
        if now_aware:
            return target.replace(tzinfo=now.tzinfo)
        return target
