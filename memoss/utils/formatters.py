"""Human-readable text for rules and reminders."""

from datetime import datetime
from zoneinfo import ZoneInfo

from memoss.db.models import Reminder
from memoss.engine.rules import Daily, Hourly, Monthly, NoRecurrence, RecurrenceRule, Weekly
from memoss.utils.constants import WEEKDAY_NAMES
from memoss.utils.time_utils import format_relative_time, from_utc


def day_suffix(day: int) -> str:
    """Ordinal suffix for a day of month: 1 -> "st", 22 -> "nd", 13 -> "th"."""
    if day in (1, 21, 31):
        return "st"
    if day in (2, 22):
        return "nd"
    if day in (3, 23):
        return "rd"
    return "th"


def rule_display_name(rule: RecurrenceRule) -> str:
    """Long description, e.g. "Every Monday" or "Monthly on the 31st"."""
    if isinstance(rule, NoRecurrence):
        return "Never"
    if isinstance(rule, Hourly):
        return "Hourly"
    if isinstance(rule, Daily):
        return "Daily"
    if isinstance(rule, Weekly):
        return f"Every {WEEKDAY_NAMES[rule.normalized_weekday]}"
    if isinstance(rule, Monthly):
        day = rule.normalized_day
        return f"Monthly on the {day}{day_suffix(day)}"
    raise TypeError(f"Unsupported recurrence rule: {rule!r}")


def rule_short_name(rule: RecurrenceRule) -> str:
    if isinstance(rule, NoRecurrence):
        return "Once"
    if isinstance(rule, Hourly):
        return "Hourly"
    if isinstance(rule, Daily):
        return "Daily"
    if isinstance(rule, Weekly):
        return "Weekly"
    if isinstance(rule, Monthly):
        return "Monthly"
    raise TypeError(f"Unsupported recurrence rule: {rule!r}")


def format_reminder(reminder: Reminder, tz: str, now: datetime | None = None) -> str:
    """Format a reminder as plain text lines."""
    if now is None:
        now = datetime.now(ZoneInfo("UTC"))

    lines = [reminder.title if reminder.id is None else f"{reminder.title} (ID: {reminder.id})"]

    scheduled_local = from_utc(reminder.scheduled_at, tz)
    scheduled_str = scheduled_local.strftime("%b %d, %Y at %I:%M %p")
    relative = format_relative_time(reminder.scheduled_at, now)
    lines.append(f"Scheduled: {scheduled_str} ({relative})")

    if reminder.is_recurring:
        line = f"Repeats: {rule_display_name(reminder.recurrence_rule)}"
        if reminder.recurrence_end_date:
            end_local = from_utc(reminder.recurrence_end_date, tz)
            line += f" until {end_local.strftime('%b %d, %Y')}"
        lines.append(line)

    if reminder.tags:
        lines.append("Tags: " + ", ".join(tag.name for tag in reminder.tags))

    if reminder.status == "series_ended":
        lines.append("Series ended")
    elif reminder.status == "done":
        lines.append("Done")

    if reminder.notes:
        lines.append(f"\n{reminder.notes}")

    return "\n".join(lines)
