from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from ordertracker.core.settings import Settings
from ordertracker.domain.base import Base

logger = logging.getLogger(__name__)

SessionFactory = async_sessionmaker[AsyncSession]


def _engine_kwargs(settings: Settings) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"echo": settings.sql_echo}
    if settings.is_sqlite:
        # aiosqlite connections are cheap; pooling them across event loops is not.
        kwargs["poolclass"] = NullPool
        return kwargs
    kwargs.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
        pool_recycle=settings.db_pool_recycle,
    )
    return kwargs


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    try:
        parsed = make_url(settings.database_url_async)
    except ArgumentError as exc:  # pragma: no cover - configuration guard
        raise RuntimeError(f"Invalid DATABASE_URL: {exc}") from exc

    logger.info(
        "Database dialect: %s (%s)",
        parsed.drivername,
        parsed.render_as_string(hide_password=True),
    )

    engine = create_async_engine(settings.database_url_async, **_engine_kwargs(settings))
    if settings.is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: AsyncEngine) -> SessionFactory:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create missing tables."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "SessionFactory",
    "build_engine",
    "build_session_factory",
    "init_models",
]
