"""Snooze options offered when a reminder is completed later."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, cast


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_duration(duration: timedelta) -> str:
    """
    Format a delay for display.

    Example:
        format_duration(timedelta(hours=1, minutes=30))  # "1h 30m"
        format_duration(timedelta(minutes=15))  # "15 minutes"
    """
    total_seconds = int(duration.total_seconds())
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    if days > 0:
        return _plural(days, "day")
    if hours > 0:
        if minutes > 0:
            return f"{hours}h {minutes}m"
        return _plural(hours, "hour")
    if minutes > 0:
        return _plural(minutes, "minute")
    return _plural(seconds, "second")


@dataclass(frozen=True)
class DelayOption:
    """
    A "remind me again in ..." choice.

    The custom option starts with a zero duration; the user picks one and
    with_duration() produces the concrete option.
    """

    id: str
    label: str
    duration: timedelta
    is_custom: bool = False

    if TYPE_CHECKING:
        PRESETS: tuple[DelayOption, ...]
    else:
        PRESETS = cast("tuple[DelayOption, ...]", ())

    def with_duration(self, duration: timedelta) -> DelayOption:
        """Copy of this option with a user-chosen duration and matching label."""
        if duration < timedelta(0):
            raise ValueError(f"Delay must not be negative, got {duration}")
        return DelayOption(
            id=self.id,
            label=format_duration(duration),
            duration=duration,
            is_custom=self.is_custom,
        )

    @property
    def display_text(self) -> str:
        if self.is_custom and self.duration == timedelta(0):
            return self.label
        return format_duration(self.duration)


DelayOption.PRESETS = (
    DelayOption(id="1min", label="1 minute", duration=timedelta(minutes=1)),
    DelayOption(id="5min", label="5 minutes", duration=timedelta(minutes=5)),
    DelayOption(id="15min", label="15 minutes", duration=timedelta(minutes=15)),
    DelayOption(id="1hr", label="1 hour", duration=timedelta(hours=1)),
    DelayOption(id="custom", label="Custom time", duration=timedelta(0), is_custom=True),
)
