"""
Countdown Labels

Prints the countdown label and urgency for a handful of reminders relative
to a fixed "now", the way the reminder list renders them.

## Run with
```bash
PYTHONPATH=src python examples/countdown_labels.py
```
"""

from datetime import datetime, timedelta

from gooddeeds import CountdownFormatter, FormatError, ReminderSchedule, ReminderStatus

NOW = datetime(2026, 10, 21, 14, 0)

REMINDERS = [
    ("Drink water", ReminderSchedule(NOW - timedelta(minutes=3))),
    ("Take medication", ReminderSchedule(NOW + timedelta(seconds=20))),
    ("Call mom", ReminderSchedule(NOW + timedelta(minutes=4))),
    ("Go for a walk", ReminderSchedule(NOW + timedelta(minutes=90))),
    ("Read one page of Quran", ReminderSchedule("2026-10-22T09:15:00")),
    ("Visit family", ReminderSchedule(NOW + timedelta(days=4))),
    ("Pay bills", ReminderSchedule(NOW + timedelta(days=40))),
    ("Exercise", ReminderSchedule(None, ReminderStatus.PAUSED)),
    ("Help a neighbor", ReminderSchedule(None)),
]


def main():
    formatter = CountdownFormatter(clock=lambda: NOW)
    for title, schedule in REMINDERS:
        try:
            display = formatter.format(schedule)
        except FormatError as e:
            print(f"{title:<24} <{e.reason.value}>")
            continue
        print(f"{title:<24} {display.text:<28} [{display.urgency}]")


if __name__ == "__main__":
    main()
