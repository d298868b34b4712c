"""Tests for the SQLite repository."""

import asyncio
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from memoss.db.migrations import run_migrations
from memoss.db.models import Reminder
from memoss.db.repository import Repository
from memoss.engine.rules import NONE, Monthly, Weekly

UTC = ZoneInfo("UTC")


async def open_repo(tmp_path) -> Repository:
    db_path = tmp_path / "memoss.db"
    await run_migrations(db_path)
    repo = Repository(db_path)
    await repo.connect()
    return repo


def test_reminder_round_trip(tmp_path):
    """Test a reminder with rule, end date and tags is stored and read back."""

    async def scenario():
        repo = await open_repo(tmp_path)
        try:
            work = await repo.create_tag("work", "3B82F6")
            home = await repo.create_tag("home", "22C55E")

            created = await repo.create_reminder(
                Reminder(
                    title="Pay rent",
                    notes="Landlord account",
                    scheduled_at=datetime(2026, 3, 31, 9, 0, tzinfo=UTC),
                    recurrence_rule=Monthly(day=31),
                    recurrence_end_date=datetime(2026, 12, 31, tzinfo=UTC),
                    tags=[work, home],
                )
            )
            return created, await repo.get_reminder(created.id)
        finally:
            await repo.close()

    created, fetched = asyncio.run(scenario())

    assert created.id is not None
    assert fetched.title == "Pay rent"
    assert fetched.notes == "Landlord account"
    assert fetched.scheduled_at == datetime(2026, 3, 31, 9, 0, tzinfo=UTC)
    assert fetched.recurrence_rule == Monthly(day=31)
    assert fetched.recurrence_end_date == datetime(2026, 12, 31, tzinfo=UTC)
    assert fetched.status == "scheduled"
    assert [tag.name for tag in fetched.tags] == ["home", "work"]
    assert fetched.created_at is not None


def test_update_reminder(tmp_path):
    """Test updates replace the rule wholesale."""

    async def scenario():
        repo = await open_repo(tmp_path)
        try:
            reminder = await repo.create_reminder(
                Reminder(title="Gym", scheduled_at=datetime(2026, 3, 2, 18, 0, tzinfo=UTC))
            )
            assert reminder.recurrence_rule == NONE

            reminder.recurrence_rule = Weekly(weekday=2)
            reminder.status = "done"
            await repo.update_reminder(reminder)
            return await repo.get_reminder(reminder.id)
        finally:
            await repo.close()

    fetched = asyncio.run(scenario())

    assert fetched.recurrence_rule == Weekly(weekday=2)
    assert fetched.status == "done"


def test_get_due_notifications(tmp_path):
    """Test only armed, scheduled, due reminders are returned."""
    now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    async def scenario():
        repo = await open_repo(tmp_path)
        try:
            due = await repo.create_reminder(
                Reminder(title="due", scheduled_at=now, notify_at=now - timedelta(minutes=1))
            )
            await repo.create_reminder(
                Reminder(title="later", scheduled_at=now, notify_at=now + timedelta(minutes=1))
            )
            await repo.create_reminder(Reminder(title="unarmed", scheduled_at=now))
            await repo.create_reminder(
                Reminder(title="done", scheduled_at=now, status="done", notify_at=now)
            )
            return due, await repo.get_due_notifications(now)
        finally:
            await repo.close()

    due, results = asyncio.run(scenario())

    assert [r.id for r in results] == [due.id]


def test_unreadable_rule_reads_as_none(tmp_path):
    """Test a corrupt stored rule degrades to a one-shot reminder."""

    async def scenario():
        repo = await open_repo(tmp_path)
        try:
            reminder = await repo.create_reminder(
                Reminder(
                    title="Water plants",
                    scheduled_at=datetime(2026, 3, 2, 8, 0, tzinfo=UTC),
                    recurrence_rule=Weekly(weekday=3),
                )
            )
            await repo.db.execute(
                "UPDATE reminders SET recurrence_rule = ? WHERE id = ?",
                ('{"type": "fortnightly"}', reminder.id),
            )
            await repo.db.commit()
            return await repo.get_reminder(reminder.id)
        finally:
            await repo.close()

    fetched = asyncio.run(scenario())

    assert fetched.recurrence_rule == NONE
    assert not fetched.is_recurring


def test_delete_reminder_removes_tag_links(tmp_path):
    """Test deleting a reminder keeps its tags but drops the links."""

    async def scenario():
        repo = await open_repo(tmp_path)
        try:
            tag = await repo.create_tag("errands", "F97316")
            reminder = await repo.create_reminder(
                Reminder(
                    title="Groceries",
                    scheduled_at=datetime(2026, 3, 2, 17, 0, tzinfo=UTC),
                    tags=[tag],
                )
            )
            await repo.delete_reminder(reminder.id)

            async with repo.db.execute("SELECT COUNT(*) FROM reminder_tags") as cursor:
                (links,) = await cursor.fetchone()

            return await repo.get_reminder(reminder.id), await repo.get_tags(), links
        finally:
            await repo.close()

    fetched, tags, links = asyncio.run(scenario())

    assert fetched is None
    assert [t.name for t in tags] == ["errands"]
    assert links == 0


def test_migrations_are_idempotent(tmp_path):
    """Test running migrations twice keeps existing data."""

    async def scenario():
        repo = await open_repo(tmp_path)
        try:
            await repo.create_tag("work", "3B82F6")
        finally:
            await repo.close()

        await run_migrations(tmp_path / "memoss.db")

        repo = Repository(tmp_path / "memoss.db")
        await repo.connect()
        try:
            return await repo.get_tag_by_name("work")
        finally:
            await repo.close()

    tag = asyncio.run(scenario())

    assert tag is not None
    assert tag.color_hex == "3B82F6"
