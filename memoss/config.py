"""Configuration management from environment variables."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from memoss.utils.constants import DEFAULT_SNOOZE_MINUTES, DEFAULT_TIMEZONE

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Database
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "./data/memoss.db"))

    # Calendar used for naive datetimes and wall-clock arithmetic
    TIMEZONE: str = os.getenv("MEMOSS_TIMEZONE", DEFAULT_TIMEZONE)

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Scheduler
    HEARTBEAT_INTERVAL: int = int(os.getenv("HEARTBEAT_INTERVAL", "60"))
    SNOOZE_MINUTES: int = int(os.getenv("SNOOZE_MINUTES", str(DEFAULT_SNOOZE_MINUTES)))
    OCCURRENCE_PREVIEW_COUNT: int = int(os.getenv("OCCURRENCE_PREVIEW_COUNT", "5"))

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        try:
            ZoneInfo(cls.TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone in MEMOSS_TIMEZONE: {cls.TIMEZONE}") from e

        if cls.HEARTBEAT_INTERVAL <= 0:
            raise ValueError("HEARTBEAT_INTERVAL must be a positive number of seconds")

        if cls.SNOOZE_MINUTES <= 0:
            raise ValueError("SNOOZE_MINUTES must be a positive number of minutes")

        # Ensure database directory exists
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
