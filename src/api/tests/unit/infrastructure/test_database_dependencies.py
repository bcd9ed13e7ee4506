"""Unit tests for the process-wide engine and session factory."""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from infrastructure.database.dependencies import (
    close_database_connections,
    get_engine,
    get_session_factory,
)


@pytest.mark.asyncio
async def test_engine_is_a_singleton():
    engine = get_engine()

    assert isinstance(engine, AsyncEngine)
    assert get_engine() is engine

    await close_database_connections()


@pytest.mark.asyncio
async def test_session_factory_is_bound_to_engine():
    engine = get_engine()

    async with get_session_factory()() as session:
        assert isinstance(session, AsyncSession)
        assert session.bind is engine

    await close_database_connections()


@pytest.mark.asyncio
async def test_close_database_connections_resets_engine():
    engine = get_engine()

    await close_database_connections()

    new_engine = get_engine()
    assert new_engine is not engine

    await close_database_connections()
