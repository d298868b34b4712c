"""Recurrence rule value types."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Union

MIN_WEEKDAY, MAX_WEEKDAY = 1, 7
MIN_DAY, MAX_DAY = 1, 31


@dataclass(frozen=True)
class NoRecurrence:
    """A one-shot reminder."""


@dataclass(frozen=True)
class Hourly:
    """Repeats every hour."""


@dataclass(frozen=True)
class Daily:
    """Repeats every calendar day at the same wall-clock time."""


@dataclass(frozen=True)
class Weekly:
    """Repeats on one day of the week.

    weekday uses 1 = Sunday .. 7 = Saturday regardless of locale.
    """

    weekday: int

    @property
    def normalized_weekday(self) -> int:
        # Out-of-range values are clamped, never rejected
        return min(max(self.weekday, MIN_WEEKDAY), MAX_WEEKDAY)


@dataclass(frozen=True)
class Monthly:
    """Repeats on one day of the month (1-31), clamped to the month length."""

    day: int

    @property
    def normalized_day(self) -> int:
        return min(max(self.day, MIN_DAY), MAX_DAY)


RecurrenceRule = Union[NoRecurrence, Hourly, Daily, Weekly, Monthly]

NONE = NoRecurrence()
HOURLY = Hourly()
DAILY = Daily()


def is_recurring(rule: RecurrenceRule) -> bool:
    """Check if a rule produces more than one occurrence."""
    return not isinstance(rule, NoRecurrence)


def weekday_number(dt: datetime) -> int:
    """Weekday of a datetime as 1 = Sunday .. 7 = Saturday."""
    return dt.isoweekday() % 7 + 1


def weekly_on_current_day(dt: datetime) -> Weekly:
    """Create a weekly rule for the weekday of dt."""
    return Weekly(weekday=weekday_number(dt))


def monthly_on_current_day(dt: datetime) -> Monthly:
    """Create a monthly rule for the day of month of dt."""
    return Monthly(day=dt.day)


def presets() -> List[RecurrenceRule]:
    """Rules offered without any date context."""
    return [NONE, DAILY]
