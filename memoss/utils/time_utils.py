"""Time and timezone utilities.

Reminder datetimes are stored in UTC and shown in the user's calendar zone.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")

# Largest unit first: (seconds per unit, singular name)
_UNITS = [(86400, "day"), (3600, "hour"), (60, "minute")]


def to_utc(dt: datetime, tz: str) -> datetime:
    """Convert a reminder time to UTC for storage.

    Naive values are wall-clock times in tz.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt.astimezone(UTC)


def from_utc(dt: datetime, tz: str) -> datetime:
    """Convert a stored UTC time to the calendar zone tz."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(ZoneInfo(tz))


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''}"


def format_relative_time(dt: datetime, now: datetime | None = None) -> str:
    """Describe when a reminder fires relative to now.

    Upcoming reminders read "in 5 minutes", "in 2 hours", "tomorrow" or
    "in 4 days"; past ones read "3 hours ago".
    """
    if now is None:
        now = datetime.now(UTC)

    seconds = (dt - now).total_seconds()

    if 86400 <= seconds < 172800:
        return "tomorrow"

    magnitude = abs(seconds)
    for unit_seconds, unit in _UNITS:
        if magnitude >= unit_seconds or unit == "minute":
            text = _plural(int(magnitude / unit_seconds), unit)
            break

    return f"{text} ago" if seconds < 0 else f"in {text}"
