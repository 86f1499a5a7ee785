"""Async engine, session dependencies and the declarative Base.

The engine is built on first use, not at import, so models and migrations
can be imported without a configured DATABASE_URL. Without one, the session
dependencies raise DatabaseNotConfiguredException (503) and the rest of the
API keeps answering.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import get_settings
from app.domain.exceptions import DatabaseNotConfiguredException
from app.shared.telemetry.telemetry import get_telemetry

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    pass


def configured_session_factory() -> async_sessionmaker[AsyncSession] | None:
    """Session factory for DATABASE_URL, built once; None when no URL is set."""
    global _engine, _sessions
    if _sessions is not None:
        return _sessions
    settings = get_settings()
    if not settings.database_url:
        return None

    connect_args: dict[str, Any] = {}
    if settings.database_url.startswith("postgresql"):
        connect_args["command_timeout"] = settings.db_command_timeout
    _engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=3600,
        connect_args=connect_args,
    )
    _sessions = async_sessionmaker(_engine, expire_on_commit=False, autoflush=False)

    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.instrument_sqlalchemy(_engine)
    return _sessions


def _require_sessions() -> async_sessionmaker[AsyncSession]:
    sessions = configured_session_factory()
    if sessions is None:
        logger.error("DATABASE_URL is not set; workspace storage is unavailable")
        raise DatabaseNotConfiguredException()
    return sessions


async def dispose_engine() -> None:
    global _engine, _sessions
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessions = None


async def get_db() -> AsyncIterator[AsyncSession]:
    """Session for reads; never commits."""
    async with _require_sessions()() as session:
        yield session


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """Session wrapped in a transaction: committed when the request succeeds, rolled back otherwise."""
    async with _require_sessions()() as session, session.begin():
        yield session
