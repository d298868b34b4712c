"""Recurrence engine: next occurrence and bounded occurrence sequences.

All arithmetic happens on wall-clock time in a calendar timezone. The
calendar is the ``tz`` argument when given, otherwise the anchor's own
tzinfo; naive anchors are read in ``Config.TIMEZONE``.
"""

import logging
import re
from datetime import datetime, timedelta, tzinfo
from typing import List
from zoneinfo import ZoneInfo

from dateutil import tz as dateutil_tz
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from memoss.config import Config
from memoss.engine.rules import (
    DAILY,
    HOURLY,
    NONE,
    Daily,
    Hourly,
    Monthly,
    RecurrenceRule,
    Weekly,
    is_recurring,
)
from memoss.utils.constants import WEEKDAY_NUMBERS

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")

TimezoneArg = str | tzinfo | None

# Indexed by weekday number - 1 (1 = Sunday)
_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)


def _zone(tz: TimezoneArg) -> tzinfo:
    if tz is None:
        return ZoneInfo(Config.TIMEZONE)
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def to_calendar(dt: datetime, tz: TimezoneArg = None) -> datetime:
    """Express dt as wall-clock time in the calendar timezone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=_zone(tz))
    if tz is None:
        return dt
    return dt.astimezone(_zone(tz))


def is_after(a: datetime, b: datetime) -> bool:
    """Check if instant a is later than instant b.

    Plain comparison of two datetimes sharing a tzinfo ignores fold, so the
    second 01:30 of a fall-back night would compare equal to the first.
    """
    return a.astimezone(UTC) > b.astimezone(UTC)


def _resolve(dt: datetime) -> datetime:
    """Shift a wall-clock time that falls in a DST gap forward past the gap."""
    if dateutil_tz.datetime_exists(dt):
        return dt
    resolved = dateutil_tz.resolve_imaginary(dt)
    logger.debug(f"Nonexistent local time {dt.isoformat()} resolved to {resolved.isoformat()}")
    return resolved


def _next_weekly(local: datetime, weekday: int) -> datetime:
    target = _WEEKDAYS[weekday - 1]

    # Start the day after the anchor, land on the first matching weekday
    # (at most 7 days out) and reapply the anchor's time of day.
    found = local + relativedelta(
        days=+1,
        weekday=target(+1),
        hour=local.hour,
        minute=local.minute,
        second=0,
        microsecond=0,
    )
    return _resolve(found)


def _next_monthly(local: datetime, day: int) -> datetime:
    # relativedelta clamps day to the length of the month it lands in
    same_month = _resolve(local + relativedelta(day=day, second=0, microsecond=0))
    if is_after(same_month, local):
        return same_month

    return _resolve(local + relativedelta(months=+1, day=day, second=0, microsecond=0))


def next_occurrence(
    rule: RecurrenceRule, anchor: datetime, tz: TimezoneArg = None
) -> datetime | None:
    """Get the next occurrence strictly after anchor.

    Args:
        rule: Recurrence rule to evaluate
        anchor: Reference point in time, usually the current scheduled date
        tz: Calendar timezone (name or tzinfo) for wall-clock arithmetic

    Returns:
        Next occurrence as a timezone-aware datetime in the calendar
        timezone, or None for a non-recurring rule
    """
    if not is_recurring(rule):
        return None

    local = to_calendar(anchor, tz)

    if isinstance(rule, Hourly):
        # One elapsed hour, independent of wall-clock jumps
        return (local.astimezone(UTC) + timedelta(hours=1)).astimezone(local.tzinfo)

    if isinstance(rule, Daily):
        return _resolve(local + relativedelta(days=+1))

    if isinstance(rule, Weekly):
        return _next_weekly(local, rule.normalized_weekday)

    if isinstance(rule, Monthly):
        return _next_monthly(local, rule.normalized_day)

    raise TypeError(f"Unsupported recurrence rule: {rule!r}")


def occurrences(
    rule: RecurrenceRule,
    start: datetime,
    count: int,
    end: datetime | None = None,
    now: datetime | None = None,
    tz: TimezoneArg = None,
) -> List[datetime]:
    """Generate up to count occurrences beginning at start.

    start itself is included only when it is after now. The series end date
    is accepted but not applied here: deciding when a series is over belongs
    to the caller (see memoss.engine.series).

    Returns:
        Strictly increasing list of at most count datetimes
    """
    if now is None:
        now = datetime.now(UTC)

    if count <= 0:
        return []

    current = to_calendar(start, tz)
    reference = to_calendar(now, tz)

    if not is_recurring(rule):
        return [current] if is_after(current, reference) else []

    dates: List[datetime] = []

    # Include the start date if it's in the future
    if is_after(current, reference):
        dates.append(current)

    while len(dates) < count:
        next_date = next_occurrence(rule, current, tz)
        if next_date is None:
            break
        current = next_date
        dates.append(current)

    if end is not None:
        logger.debug(f"Series end {end.isoformat()} left to the caller for truncation")

    return dates


def build_rule_from_text(recurrence_text: str) -> RecurrenceRule | None:
    """Build a recurrence rule from natural language.

    Examples:
        "never" -> NONE
        "every hour" -> HOURLY
        "every day" -> DAILY
        "every monday" -> Weekly(weekday=2)
        "monthly on the 15th" -> Monthly(day=15)
        "every 31st" -> Monthly(day=31)

    Returns:
        RecurrenceRule or None if not recognized
    """
    text = recurrence_text.lower().strip()

    if text in ("never", "none", "once", "no"):
        return NONE

    # Fixed intervals other than one unit are not supported
    if re.match(r"every\s+\d+\s+(?:sec(?:ond)?|min(?:ute)?|h(?:ou)?r|day|w(?:ee)?k|month|year)s?\b", text):
        return None

    # Simple frequencies
    if "hourly" in text or text == "every hour":
        return HOURLY
    if "daily" in text or text in ("every day", "everyday"):
        return DAILY

    # Every specific day of month (1st, 15th, etc.)
    match = re.search(r"(?:every|on the|monthly on)\s+(\d{1,2})(?:st|nd|rd|th)?\b", text)
    if match:
        day = int(match.group(1))
        if 1 <= day <= 31:
            return Monthly(day=day)
        return None

    # Every weekday
    for day_name, number in WEEKDAY_NUMBERS.items():
        if day_name in text:
            return Weekly(weekday=number)

    return None
