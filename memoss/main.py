"""Main entry point for the Memoss reminder service."""

import asyncio
import logging
import sys

from memoss.config import Config
from memoss.db.migrations import run_migrations
from memoss.db.repository import Repository
from memoss.engine.scheduler import LoggingNotifier, Notifier, heartbeat, startup_recovery

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


async def run(notifier: Notifier) -> None:
    """Initialize storage and run the heartbeat until cancelled."""
    await run_migrations(Config.DATABASE_PATH)

    repo = Repository(Config.DATABASE_PATH)
    await repo.connect()

    try:
        await startup_recovery(repo)
        logger.info(f"Heartbeat scheduled (interval: {Config.HEARTBEAT_INTERVAL}s)")

        while True:
            await heartbeat(notifier, repo)
            await asyncio.sleep(Config.HEARTBEAT_INTERVAL)
    finally:
        await repo.close()
        logger.info("Memoss shut down")


def main() -> None:
    """Start the service."""
    # Validate configuration
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logger.info("Starting Memoss...")
    try:
        asyncio.run(run(LoggingNotifier()))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
