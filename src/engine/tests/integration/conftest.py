"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance. Tests are skipped
when the database cannot be reached.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.dependencies import create_schema
from infrastructure.database.engines import create_engine
from infrastructure.database.exceptions import DatabaseConnectionError
from infrastructure.settings import DatabaseSettings

# Deletion order respects the membership foreign keys
DIRECTORY_TABLES = ("user_groups", "users", "groups", "provisioning_jobs")


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        DIRECTORY_DB_HOST, DIRECTORY_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("DIRECTORY_DB_HOST", "localhost"),
        port=int(os.getenv("DIRECTORY_DB_PORT", "5432")),
        database=os.getenv("DIRECTORY_DB_DATABASE", "directory"),
        username=os.getenv("DIRECTORY_DB_USERNAME", "directory"),
        password=SecretStr(os.getenv("DIRECTORY_DB_PASSWORD", "directory_dev")),
        pool_max_connections=2,
    )


@pytest_asyncio.fixture
async def engine(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncEngine, None]:
    """Engine on a database with the directory schema in place."""
    engine = create_engine(integration_db_settings)
    try:
        await create_schema(engine)
    except DatabaseConnectionError as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not available: {e}")

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session on emptied directory tables."""
    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)

    async with sessionmaker() as session:
        async with session.begin():
            for table in DIRECTORY_TABLES:
                await session.execute(text(f"DELETE FROM {table}"))
        yield session
