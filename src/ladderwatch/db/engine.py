"""Async SQLAlchemy engine and session factory (SQLite-only).

Usage:
    engine = create_engine(settings.database_url)
    await create_tables(engine)
    async with get_session(engine) as session:
        ...
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ladderwatch.db.models import Base

logger = logging.getLogger(__name__)


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    WAL mode and a busy timeout let the refresh cycle write ladders while a
    request handler reads clubs without "database is locked" errors.
    """
    engine = create_async_engine(database_url, echo=False, connect_args={"timeout": 15})

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragmas(dbapi_conn: object, connection_record: object) -> None:
        cursor = dbapi_conn.cursor()  # type: ignore[union-attr]
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA busy_timeout=15000")
        cursor.close()

    return engine


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables. Existing rows are left alone."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db_tables_ready url=%s", engine.url.render_as_string(hide_password=True))


_session_factories: dict[AsyncEngine, async_sessionmaker[AsyncSession]] = {}


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for ``engine``, built on first use and cached per engine."""
    factory = _session_factories.get(engine)
    if factory is None:
        factory = async_sessionmaker(engine, expire_on_commit=False)
        _session_factories[engine] = factory
    return factory


@asynccontextmanager
async def get_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """One unit of work: commits when the block completes, rolls back if it raises."""
    async with create_session_factory(engine)() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()
