"""
Pytest configuration and fixtures.
"""

import os

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

# Set test environment
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from core.storage import SubscriberRepository  # noqa: E402


@pytest.fixture
def database_url(tmp_path):
    """A fresh SQLite file per test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'subscribers.db'}"


@pytest_asyncio.fixture
async def engine(database_url):
    engine = create_async_engine(database_url)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def repository(engine):
    """Subscriber store with the schema already created."""
    repo = SubscriberRepository(engine)
    await repo.setup()
    return repo


@pytest.fixture
def count_rows(engine):
    """Count rows in the emails table, optionally for one email."""

    async def _count(email=None):
        query = "SELECT COUNT(*) FROM emails"
        params = {}
        if email is not None:
            query += " WHERE email = :email"
            params["email"] = email
        async with engine.connect() as conn:
            result = await conn.execute(text(query), params)
            return result.scalar_one()

    return _count
