"""Series advancement for recurring reminders.

A recurring reminder moves through three states::

    scheduled --(advance)--> scheduled      (date moves forward)
    scheduled --(advance)--> series_ended   (next date is past the end date)

series_ended is terminal. Completing a one-shot reminder is handled by the
scheduler, not here.
"""

import enum
import logging
from datetime import datetime
from typing import List

from memoss.config import Config
from memoss.db.models import Reminder
from memoss.engine.recurrence import (
    TimezoneArg,
    is_after,
    next_occurrence,
    occurrences,
    to_calendar,
)

logger = logging.getLogger(__name__)


class AdvanceOutcome(enum.Enum):
    """Result of advancing a reminder past its current occurrence."""

    NOT_RECURRING = "not_recurring"
    ADVANCED = "advanced"
    SERIES_ENDED = "series_ended"


def advance_to_next_occurrence(
    reminder: Reminder, tz: TimezoneArg = None
) -> AdvanceOutcome:
    """Move a recurring reminder to its next occurrence.

    Mutates reminder in place: scheduled_at moves forward on ADVANCED, and
    status becomes "series_ended" when the next occurrence falls after
    recurrence_end_date. A non-recurring reminder is left untouched.
    """
    if reminder.status == "series_ended":
        return AdvanceOutcome.SERIES_ENDED

    next_date = next_occurrence(reminder.recurrence_rule, reminder.scheduled_at, tz)
    if next_date is None:
        return AdvanceOutcome.NOT_RECURRING

    # Check if we've passed the end date; a naive end date is read in the
    # calendar the occurrence was computed in
    if reminder.recurrence_end_date is not None:
        end_date = to_calendar(reminder.recurrence_end_date, next_date.tzinfo)
        if is_after(next_date, end_date):
            reminder.status = "series_ended"
            logger.info(
                f"Series for reminder {reminder.id} ended "
                f"(next {next_date.isoformat()} is after {end_date.isoformat()})"
            )
            return AdvanceOutcome.SERIES_ENDED

    reminder.scheduled_at = next_date
    reminder.status = "scheduled"
    return AdvanceOutcome.ADVANCED


def upcoming_occurrences(
    reminder: Reminder,
    count: int | None = None,
    now: datetime | None = None,
    tz: TimezoneArg = None,
) -> List[datetime]:
    """Upcoming occurrences of a reminder, cut off at its series end date."""
    if count is None:
        count = Config.OCCURRENCE_PREVIEW_COUNT

    if reminder.status != "scheduled":
        return []

    dates = occurrences(
        reminder.recurrence_rule,
        reminder.scheduled_at,
        count,
        end=reminder.recurrence_end_date,
        now=now,
        tz=tz,
    )

    if reminder.recurrence_end_date is None or not dates:
        return dates

    end_date = to_calendar(reminder.recurrence_end_date, dates[0].tzinfo)
    return [d for d in dates if not is_after(d, end_date)]
