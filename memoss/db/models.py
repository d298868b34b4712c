"""Data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal

from memoss.engine.rules import NONE, RecurrenceRule, is_recurring


ReminderStatus = Literal["scheduled", "done", "series_ended"]


@dataclass
class Tag:
    """A user-defined label attached to reminders."""

    name: str
    color_hex: str
    created_at: datetime | None = None
    id: int | None = None


@dataclass
class Reminder:
    """A reminder, optionally repeating on a recurrence rule."""

    title: str
    scheduled_at: datetime  # timezone-aware
    status: ReminderStatus = "scheduled"
    notes: str | None = None
    recurrence_rule: RecurrenceRule = NONE
    recurrence_end_date: datetime | None = None  # series end, inclusive
    tags: List[Tag] = field(default_factory=list)
    notify_at: datetime | None = None  # armed notification trigger
    remote_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: int | None = None

    @property
    def is_recurring(self) -> bool:
        return is_recurring(self.recurrence_rule)
