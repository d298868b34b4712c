"""Notification scheduler - arming, completion, snooze and the heartbeat."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from memoss.config import Config
from memoss.db.models import Reminder
from memoss.db.repository import Repository
from memoss.engine.recurrence import TimezoneArg
from memoss.engine.series import AdvanceOutcome, advance_to_next_occurrence
from memoss.utils.constants import NOTIFICATION_TITLE
from memoss.utils.formatters import format_reminder, rule_display_name

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised by a notifier when a notification could not be delivered."""


@dataclass
class NotificationRequest:
    """A single notification to show for a reminder."""

    identifier: str  # reminder id, so a later request replaces this one
    title: str
    body: str
    fire_at: datetime


class Notifier(Protocol):
    """Delivery transport for notifications."""

    async def deliver(self, request: NotificationRequest) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes deliveries to the log."""

    async def deliver(self, request: NotificationRequest) -> None:
        logger.info(
            f"[{request.title}] {request.body} "
            f"(reminder {request.identifier}, due {request.fire_at.isoformat()})"
        )


def build_notification_request(reminder: Reminder, fire_at: datetime | None = None) -> NotificationRequest:
    """Build the notification shown for a reminder."""
    return NotificationRequest(
        identifier=str(reminder.id),
        title=NOTIFICATION_TITLE,
        body=reminder.title,
        fire_at=fire_at or reminder.notify_at or reminder.scheduled_at,
    )


def arm(reminder: Reminder, now: datetime | None = None) -> bool:
    """Arm the notification for a reminder's scheduled date.

    Only future dates are armed; anything else clears the trigger.

    Returns:
        True if a notification is armed
    """
    if now is None:
        now = datetime.now(ZoneInfo("UTC"))

    if reminder.status == "scheduled" and reminder.scheduled_at > now:
        reminder.notify_at = reminder.scheduled_at
        return True

    reminder.notify_at = None
    return False


async def complete_reminder(
    repo: Repository,
    reminder: Reminder,
    now: datetime | None = None,
    tz: TimezoneArg = None,
) -> AdvanceOutcome:
    """Mark the current occurrence of a reminder as completed.

    One-shot reminders become done. Recurring reminders move to their next
    occurrence and are re-armed, unless that occurrence is past the series
    end date, in which case the series ends.
    """
    if tz is None:
        tz = Config.TIMEZONE

    outcome = advance_to_next_occurrence(reminder, tz)

    if outcome is AdvanceOutcome.NOT_RECURRING:
        reminder.status = "done"
        reminder.notify_at = None
        logger.info(f"Reminder {reminder.id} completed")
    elif outcome is AdvanceOutcome.ADVANCED:
        if not arm(reminder, now):
            logger.warning(
                f"Reminder {reminder.id} advanced to {reminder.scheduled_at.isoformat()}, "
                "which is already past; not arming a notification"
            )
        logger.info(
            f"Reminder {reminder.id} advanced to {reminder.scheduled_at.isoformat()} "
            f"({rule_display_name(reminder.recurrence_rule)})"
        )
    else:
        reminder.notify_at = None

    await repo.update_reminder(reminder)
    return outcome


async def snooze_reminder(
    repo: Repository,
    reminder: Reminder,
    minutes: int | None = None,
    now: datetime | None = None,
) -> datetime:
    """Re-arm a reminder's notification a few minutes from now.

    The scheduled date is unchanged; only the notification moves.
    """
    if now is None:
        now = datetime.now(ZoneInfo("UTC"))
    if minutes is None:
        minutes = Config.SNOOZE_MINUTES

    reminder.notify_at = now + timedelta(minutes=minutes)
    await repo.update_reminder(reminder)

    logger.info(f"Snoozed reminder {reminder.id} for {minutes} minutes")
    return reminder.notify_at


async def heartbeat(notifier: Notifier, repo: Repository, now: datetime | None = None) -> int:
    """Deliver every notification that is due.

    This runs every HEARTBEAT_INTERVAL seconds and:
    1. Queries for scheduled reminders where notify_at <= now
    2. Delivers a notification for each
    3. Disarms delivered reminders

    A reminder whose delivery fails stays armed and is retried next time.

    Returns:
        Number of notifications delivered
    """
    if now is None:
        now = datetime.now(ZoneInfo("UTC"))

    delivered = 0

    try:
        due_reminders = await repo.get_due_notifications(now)

        if not due_reminders:
            return 0

        logger.info(f"Heartbeat: {len(due_reminders)} notifications due")

        for reminder in due_reminders:
            try:
                request = build_notification_request(reminder)

                try:
                    await notifier.deliver(request)
                except NotificationError as e:
                    logger.error(f"Failed to deliver notification for reminder {reminder.id}: {e}")
                    continue

                reminder.notify_at = None
                await repo.update_reminder(reminder)
                delivered += 1

            except Exception as e:
                logger.error(f"Error processing reminder {reminder.id}: {e}")
                continue

    except Exception as e:
        logger.error(f"Heartbeat error: {e}")

    return delivered


async def startup_recovery(repo: Repository, now: datetime | None = None) -> int:
    """Recovery on startup: arm scheduled reminders that lost their trigger.

    Returns:
        Number of reminders re-armed
    """
    if now is None:
        now = datetime.now(ZoneInfo("UTC"))

    rearmed = 0

    try:
        for reminder in await repo.get_reminders(status="scheduled"):
            if reminder.notify_at is None and arm(reminder, now):
                await repo.update_reminder(reminder)
                logger.debug(f"Re-armed:\n{format_reminder(reminder, Config.TIMEZONE, now)}")
                rearmed += 1

        if rearmed:
            logger.info(f"Startup recovery: re-armed {rearmed} reminders")

    except Exception as e:
        logger.error(f"Startup recovery error: {e}")

    return rearmed
