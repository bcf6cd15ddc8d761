"""Unit tests for the database engine and session lifecycle."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from infrastructure.database import dependencies
from infrastructure.database.dependencies import (
    close_database_connections,
    create_schema,
    get_engine,
    get_sessionmaker,
    session_scope,
)
from infrastructure.database.exceptions import DatabaseConnectionError


@pytest.fixture(autouse=True)
def mock_probe():
    probe = MagicMock()
    with patch.object(dependencies, "_probe", probe):
        yield probe


@pytest.mark.asyncio
async def test_get_engine_is_singleton():
    engine = get_engine()

    assert isinstance(engine, AsyncEngine)
    assert engine.url.drivername == "postgresql+asyncpg"
    assert get_engine() is engine

    await close_database_connections()


@pytest.mark.asyncio
async def test_session_scope_yields_session_on_shared_engine():
    engine = get_engine()

    async with session_scope() as session:
        assert isinstance(session, AsyncSession)
        assert session.bind.sync_engine is engine.sync_engine

    await close_database_connections()


@pytest.mark.asyncio
async def test_close_database_connections_resets_engine(mock_probe):
    engine = get_engine()
    sessionmaker = get_sessionmaker()

    await close_database_connections()

    assert get_engine() is not engine
    assert get_sessionmaker() is not sessionmaker
    mock_probe.pool_closed.assert_called_once()

    await close_database_connections()


@pytest.mark.asyncio
async def test_close_without_engine_is_noop(mock_probe):
    await close_database_connections()
    mock_probe.reset_mock()

    await close_database_connections()

    mock_probe.pool_closed.assert_not_called()


@pytest.mark.asyncio
async def test_create_schema_creates_directory_tables(mock_probe):
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    await create_schema(engine)

    async with engine.connect() as conn:
        tables = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).get_table_names()
        )
    assert {"users", "groups", "user_groups", "provisioning_jobs"} <= set(
        tables
    )
    mock_probe.schema_created.assert_called_once()

    await engine.dispose()


@pytest.mark.asyncio
async def test_create_schema_reports_unreachable_database(mock_probe):
    engine = MagicMock()
    engine.begin.side_effect = OperationalError("connect", {}, OSError("refused"))

    with pytest.raises(DatabaseConnectionError):
        await create_schema(engine)

    mock_probe.connection_failed.assert_called_once()
    mock_probe.schema_created.assert_not_called()
