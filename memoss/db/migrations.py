"""Database migration runner."""

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


async def init_database(db: aiosqlite.Connection) -> None:
    """Create all tables from schema.sql."""
    schema_path = Path(__file__).parent / "schema.sql"

    with open(schema_path) as f:
        schema_sql = f.read()

    await db.executescript(schema_sql)


async def run_migrations(db_path: Path) -> None:
    """Bring the database at db_path up to SCHEMA_VERSION.

    The applied version is tracked in SQLite's user_version pragma.
    """
    async with aiosqlite.connect(db_path) as db:
        async with db.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
            current = row[0] if row else 0

        if current >= SCHEMA_VERSION:
            logger.debug(f"Database at {db_path} already at version {current}")
            return

        await init_database(db)
        await db.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        await db.commit()

        logger.info(f"Database at {db_path} migrated from version {current} to {SCHEMA_VERSION}")
