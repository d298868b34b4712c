"""Database repository - all SQL queries."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List
from zoneinfo import ZoneInfo

import aiosqlite

from memoss.config import Config
from memoss.db.codec import RecurrenceDecodeError, dumps_rule, loads_rule
from memoss.db.models import Reminder, Tag
from memoss.engine.rules import NONE, NoRecurrence, RecurrenceRule
from memoss.utils.time_utils import to_utc

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")


def _ts(dt: datetime | None) -> str | None:
    """Format a datetime for storage: UTC, fixed width, sortable as text."""
    if dt is None:
        return None
    return to_utc(dt, Config.TIMEZONE).isoformat(timespec="microseconds")


def _dt(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(value)


class Repository:
    """Database access layer."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection."""
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA foreign_keys = ON")
        logger.info(f"Connected to database at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise RuntimeError("Database not connected")
        return self._db

    # Tag operations

    async def create_tag(self, name: str, color_hex: str) -> Tag:
        """Create a new tag."""
        async with self.db.execute(
            "INSERT INTO tags (name, color_hex) VALUES (?, ?) RETURNING *",
            (name, color_hex),
        ) as cursor:
            row = await cursor.fetchone()
        await self.db.commit()
        return self._row_to_tag(row)

    async def get_tags(self) -> List[Tag]:
        """Get all tags ordered by name."""
        async with self.db.execute("SELECT * FROM tags ORDER BY name") as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_tag(row) for row in rows]

    async def get_tag_by_name(self, name: str) -> Tag | None:
        """Get a tag by name."""
        async with self.db.execute("SELECT * FROM tags WHERE name = ?", (name,)) as cursor:
            row = await cursor.fetchone()
            return self._row_to_tag(row) if row else None

    async def delete_tag(self, tag_id: int) -> None:
        """Delete a tag; reminders keep existing without it."""
        await self.db.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
        await self.db.commit()

    async def set_reminder_tags(self, reminder_id: int, tag_ids: Iterable[int]) -> None:
        """Replace the tags attached to a reminder."""
        await self.db.execute("DELETE FROM reminder_tags WHERE reminder_id = ?", (reminder_id,))
        await self.db.executemany(
            "INSERT OR IGNORE INTO reminder_tags (reminder_id, tag_id) VALUES (?, ?)",
            [(reminder_id, tag_id) for tag_id in tag_ids],
        )
        await self.db.commit()

    async def _get_reminder_tags(self, reminder_id: int) -> List[Tag]:
        async with self.db.execute(
            """
            SELECT tags.* FROM tags
            JOIN reminder_tags ON reminder_tags.tag_id = tags.id
            WHERE reminder_tags.reminder_id = ?
            ORDER BY tags.name
            """,
            (reminder_id,),
        ) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_tag(row) for row in rows]

    # Reminder operations

    async def create_reminder(self, reminder: Reminder) -> Reminder:
        """Create a new reminder, attaching any tags that already have ids."""
        async with self.db.execute(
            """
            INSERT INTO reminders (
                title, notes, scheduled_at, status, recurrence_rule,
                recurrence_end_date, notify_at, remote_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            RETURNING *
            """,
            (
                reminder.title,
                reminder.notes,
                _ts(reminder.scheduled_at),
                reminder.status,
                self._encode_rule(reminder.recurrence_rule),
                _ts(reminder.recurrence_end_date),
                _ts(reminder.notify_at),
                reminder.remote_id,
            ),
        ) as cursor:
            row = await cursor.fetchone()
        await self.db.commit()

        tag_ids = [tag.id for tag in reminder.tags if tag.id is not None]
        if tag_ids:
            await self.set_reminder_tags(row["id"], tag_ids)

        created = self._row_to_reminder(row)
        created.tags = await self._get_reminder_tags(created.id)  # type: ignore
        logger.debug(f"Created reminder {created.id}: {created.title}")
        return created

    async def get_reminder(self, reminder_id: int) -> Reminder | None:
        """Get a reminder by ID."""
        async with self.db.execute(
            "SELECT * FROM reminders WHERE id = ?", (reminder_id,)
        ) as cursor:
            row = await cursor.fetchone()
        if not row:
            return None
        reminder = self._row_to_reminder(row)
        reminder.tags = await self._get_reminder_tags(reminder_id)
        return reminder

    async def get_reminders(self, status: str | None = None) -> List[Reminder]:
        """Get all reminders, optionally filtered by status."""
        if status:
            query = "SELECT * FROM reminders WHERE status = ? ORDER BY scheduled_at"
            params: tuple = (status,)
        else:
            query = "SELECT * FROM reminders ORDER BY scheduled_at"
            params = ()

        async with self.db.execute(query, params) as cursor:
            rows = await cursor.fetchall()

        reminders = [self._row_to_reminder(row) for row in rows]
        for reminder in reminders:
            reminder.tags = await self._get_reminder_tags(reminder.id)  # type: ignore
        return reminders

    async def get_due_notifications(self, now: datetime | None = None) -> List[Reminder]:
        """Get scheduled reminders whose armed notification is due."""
        if now is None:
            now = datetime.now(UTC)

        async with self.db.execute(
            """
            SELECT * FROM reminders
            WHERE status = 'scheduled'
            AND notify_at IS NOT NULL
            AND notify_at <= ?
            ORDER BY notify_at
            """,
            (_ts(now),),
        ) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_reminder(row) for row in rows]

    async def update_reminder(self, reminder: Reminder) -> None:
        """Update a reminder's fields (tags are managed separately)."""
        await self.db.execute(
            """
            UPDATE reminders SET
                title = ?,
                notes = ?,
                scheduled_at = ?,
                status = ?,
                recurrence_rule = ?,
                recurrence_end_date = ?,
                notify_at = ?,
                remote_id = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                reminder.title,
                reminder.notes,
                _ts(reminder.scheduled_at),
                reminder.status,
                self._encode_rule(reminder.recurrence_rule),
                _ts(reminder.recurrence_end_date),
                _ts(reminder.notify_at),
                reminder.remote_id,
                _ts(datetime.now(UTC)),
                reminder.id,
            ),
        )
        await self.db.commit()

    async def delete_reminder(self, reminder_id: int) -> None:
        """Delete a reminder."""
        await self.db.execute("DELETE FROM reminders WHERE id = ?", (reminder_id,))
        await self.db.commit()

    # Helper methods

    @staticmethod
    def _encode_rule(rule: RecurrenceRule) -> str | None:
        if isinstance(rule, NoRecurrence):
            return None
        return dumps_rule(rule)

    @staticmethod
    def _decode_rule(reminder_id: int, text: str | None) -> RecurrenceRule:
        if text is None:
            return NONE
        try:
            return loads_rule(text)
        except RecurrenceDecodeError as e:
            # Unreadable rule degrades to a one-shot reminder
            logger.warning(f"Reminder {reminder_id} has an unreadable recurrence rule: {e}")
            return NONE

    def _row_to_tag(self, row: aiosqlite.Row) -> Tag:
        """Convert a database row to a Tag object."""
        return Tag(
            id=row["id"],
            name=row["name"],
            color_hex=row["color_hex"],
            created_at=_dt(row["created_at"]),
        )

    def _row_to_reminder(self, row: aiosqlite.Row) -> Reminder:
        """Convert a database row to a Reminder object."""
        return Reminder(
            id=row["id"],
            title=row["title"],
            notes=row["notes"],
            scheduled_at=datetime.fromisoformat(row["scheduled_at"]),
            status=row["status"],  # type: ignore
            recurrence_rule=self._decode_rule(row["id"], row["recurrence_rule"]),
            recurrence_end_date=_dt(row["recurrence_end_date"]),
            notify_at=_dt(row["notify_at"]),
            remote_id=row["remote_id"],
            created_at=_dt(row["created_at"]),
            updated_at=_dt(row["updated_at"]),
        )
