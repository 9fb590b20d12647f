"""Persistent ladder cache: a durable grade id -> snapshot map.

The orchestrator only needs two operations, ``upsert`` and ``read_all``, so it
depends on the ``LadderCacheStore`` protocol rather than on SQLAlchemy.
``SQLLadderCacheStore`` is the SQLite implementation used by the app.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncEngine

from ladderwatch.db.engine import get_session
from ladderwatch.db.repository import Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedLadderRecord:
    """One persisted ladder snapshot."""

    grade_id: str
    grade_name: str
    payload: bytes
    fetched_at: datetime


class LadderCacheStore(Protocol):
    async def upsert(
        self, grade_id: str, grade_name: str, payload: bytes, fetched_at: datetime
    ) -> None: ...

    async def read_all(self) -> list[CachedLadderRecord]: ...


class SQLLadderCacheStore:
    """``LadderCacheStore`` backed by the ``cached_ladders`` table.

    Each call runs in its own session/transaction, so a failed write never
    leaves a half-committed row behind.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    async def upsert(
        self, grade_id: str, grade_name: str, payload: bytes, fetched_at: datetime
    ) -> None:
        async with get_session(self.engine) as session:
            await Repository(session).upsert_cached_ladder(
                grade_id, grade_name, payload, fetched_at=fetched_at
            )
        logger.debug("ladder_cache_upsert grade=%s bytes=%d", grade_id, len(payload))

    async def read_all(self) -> list[CachedLadderRecord]:
        async with get_session(self.engine) as session:
            rows = await Repository(session).get_all_cached_ladders()
            return [
                CachedLadderRecord(
                    grade_id=row.grade_id,
                    grade_name=row.grade_name,
                    payload=row.payload,
                    fetched_at=_as_utc(row.fetched_at),
                )
                for row in rows
            ]


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo; everything is written in UTC.
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value
