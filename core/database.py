"""
Engine construction for composing applications.

The subscriber store never owns its engine: whoever boots the process
builds one here, hands it to SubscriberRepository, and disposes it on
shutdown.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from core.logging import get_logger


if TYPE_CHECKING:
    from core.config import Settings


logger = get_logger(__name__)


def create_engine(settings: "Settings") -> AsyncEngine:
    """
    Create an async SQLAlchemy engine from settings.

    Args:
        settings: Application settings

    Returns:
        An engine that has not connected yet
    """
    options: dict[str, Any] = {"echo": settings.database_echo}

    if not settings.is_sqlite:
        options.update(pool_pre_ping=True, pool_size=5, max_overflow=10)

    engine = create_async_engine(settings.database_url, **options)
    logger.info("Database engine created", dialect=engine.dialect.name)
    return engine


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections held by the engine."""
    await engine.dispose()
    logger.info("Database engine disposed")
