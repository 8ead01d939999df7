"""
FILE: taskflow/core/dates.py
PURPOSE: Timestamp parsing and calendar arithmetic for due dates and recurrence
EXPORTS:
  - parse_timestamp(value) -> Optional[datetime]
  - to_iso(dt) -> str
  - start_of_day(dt) -> datetime
  - whole_days_between(later, earlier) -> int
  - weekday_index(dt) -> int
  - next_weekday(now, day) -> datetime
  - quick_pick(choice, now) -> datetime
  - parse_due_input(value, now) -> Optional[datetime]
  - is_same_day(a, b) -> bool
DEPENDENCIES:
  - datetime (stdlib)
NOTES:
  - Timestamps are naive local ISO-8601 strings, like datetime.now().isoformat()
  - Aware inputs (e.g. trailing "Z") are converted to naive local time
  - Weekday indexes use Sunday=0 to match the stored recurringDay values
"""

from datetime import datetime, timedelta
from typing import Optional

from .constants import WEEKDAY_NAMES
from .exceptions import ValidationError


QUICK_PICKS = ("today", "tomorrow", "next-week")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 string into a naive local datetime.

    Returns None for None/empty input. Raises ValueError for garbage and
    TypeError for non-strings, so callers decide whether a bad value is fatal.
    """
    if not value:
        return None
    if not isinstance(value, str):
        raise TypeError(f"Timestamp must be a string, got {type(value).__name__}")
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime the way the store writes timestamps."""
    return dt.isoformat() if dt is not None else None


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def whole_days_between(later: datetime, earlier: datetime) -> int:
    """Number of full 24h periods between two instants, truncated toward zero."""
    return int((later - earlier) / timedelta(days=1))


def weekday_index(dt: datetime) -> int:
    """Day of week with Sunday=0 ... Saturday=6."""
    return (dt.weekday() + 1) % 7


def next_weekday(now: datetime, day: int) -> datetime:
    """
    Next occurrence of weekday `day` after now, keeping now's time of day.

    If today already is that weekday the result is one week out,
    never the same day.
    """
    offset = (day - weekday_index(now) + 7) % 7
    return now + timedelta(days=offset or 7)


def quick_pick(choice: str, now: datetime) -> datetime:
    """
    Resolve a due-date quick pick to a midnight timestamp.

    Args:
        choice: "today", "tomorrow" or "next-week"
        now: Current time

    Raises:
        ValidationError: If choice is not a known quick pick
    """
    offsets = {"today": 0, "tomorrow": 1, "next-week": 7}
    if choice not in offsets:
        raise ValidationError(
            f"Invalid due date '{choice}'. Must be one of: {', '.join(QUICK_PICKS)}",
            field="due_date",
        )
    return start_of_day(now + timedelta(days=offsets[choice]))


def weekday_from_name(value: str) -> Optional[int]:
    """Map 'wed' / 'Wednesday' to 3, or None if it isn't a weekday name."""
    text = value.strip().lower()
    if len(text) < 3:
        return None
    for index, name in enumerate(WEEKDAY_NAMES):
        if text.startswith(name.lower()):
            return index
    return None


def parse_due_input(value: str, now: datetime) -> Optional[datetime]:
    """
    Parse user input for a due date.

    Accepts quick picks, weekday names (next occurrence, at midnight),
    "none"/"clear" (returns None) and custom YYYY-MM-DD dates.

    Raises:
        ValidationError: If the input cannot be understood
    """
    text = value.strip().lower()
    if text in ("none", "clear", ""):
        return None
    if text in QUICK_PICKS:
        return quick_pick(text, now)

    day = weekday_from_name(text)
    if day is not None:
        return start_of_day(next_weekday(now, day))

    try:
        return start_of_day(datetime.strptime(text, "%Y-%m-%d"))
    except ValueError:
        raise ValidationError(
            f"Invalid due date '{value}'. Use today, tomorrow, next-week, a weekday or YYYY-MM-DD",
            field="due_date",
        )


def is_same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()
