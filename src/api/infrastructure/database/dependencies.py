"""Process-wide async engine and session factory.

The engine is created lazily on first use and disposed on application
shutdown. Sessions are not handed to routes directly; the SQLAlchemy
record store opens them from ``get_session_factory()``.
"""

from __future__ import annotations

import threading

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_engine
from infrastructure.observability import DefaultDatabaseProbe
from infrastructure.settings import get_database_settings

_probe = DefaultDatabaseProbe()

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_engine() -> AsyncEngine:
    """Get the database engine (singleton).

    Creates the engine and its sessionmaker on first call, using
    double-check locking for thread-safe initialization.
    """
    global _engine, _sessionmaker
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                settings = get_database_settings()
                _engine = create_engine(settings)
                _sessionmaker = async_sessionmaker(
                    _engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _probe.engine_created(
                    host=settings.host,
                    database=settings.database,
                    pool_size=settings.pool_max_connections,
                )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker bound to the engine."""
    get_engine()
    assert _sessionmaker is not None
    return _sessionmaker


async def close_database_connections() -> None:
    """Dispose the engine so the application can shut down cleanly."""
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _probe.engine_disposed()
        _engine = None
        _sessionmaker = None
