"""
Database setup script.

Creates the emails table. Run this once at boot, before anything calls
into the subscriber store. Exits non-zero if the schema cannot be created.

Usage:
    python -m scripts.setup_db
"""

import asyncio
import sys

from core.config import settings
from core.database import create_engine, dispose_engine
from core.errors import StorageError
from core.logging import configure_logging, get_logger
from core.storage import SubscriberRepository


logger = get_logger(__name__)


async def setup_database() -> None:
    """Create the subscriber schema on the configured database."""
    engine = create_engine(settings)
    try:
        await SubscriberRepository(engine).setup()
    finally:
        await dispose_engine(engine)


def main() -> int:
    configure_logging()
    logger.info("Setting up database", database_url=settings.database_url)

    try:
        asyncio.run(setup_database())
    except StorageError:
        # Already logged by the store
        return 1

    logger.info("Database setup complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
