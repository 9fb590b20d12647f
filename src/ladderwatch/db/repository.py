"""Repository pattern for database access.

Wraps SQLAlchemy async sessions. Clubs are plain rows; cached ladders are
upserted by grade id so there is never more than one row per grade.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ladderwatch.db.models import CachedLadderRow, ClubRow
from ladderwatch.models.club import Club


class Repository:
    """Async repository for all database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- Clubs ---

    async def add_club(self, club: Club) -> ClubRow:
        row = ClubRow(
            org_id=club.org_id,
            display_name=club.display_name,
            short_name=club.short_name,
            logo_url=club.logo_url,
        )
        if club.added_at is not None:
            row.added_at = club.added_at
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_club(self, org_id: str) -> ClubRow | None:
        return await self.session.get(ClubRow, org_id)

    async def list_clubs(self) -> list[ClubRow]:
        """All tracked clubs, oldest first."""
        stmt = select(ClubRow).order_by(ClubRow.added_at, ClubRow.org_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_club(self, org_id: str) -> bool:
        """Remove a club row. Returns False if it was not tracked.

        Cached ladders are left in place: a grade can be shared by several clubs.
        """
        result = await self.session.execute(delete(ClubRow).where(ClubRow.org_id == org_id))
        return bool(result.rowcount)  # type: ignore[attr-defined]

    # --- Cached ladders ---

    async def upsert_cached_ladder(
        self,
        grade_id: str,
        grade_name: str,
        payload: bytes,
        fetched_at: datetime | None = None,
    ) -> None:
        """Insert or replace the snapshot for ``grade_id`` in a single statement."""
        fetched_at = fetched_at or datetime.now(UTC)
        stmt = insert(CachedLadderRow).values(
            grade_id=grade_id,
            grade_name=grade_name,
            payload=payload,
            fetched_at=fetched_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CachedLadderRow.grade_id],
            set_={
                "grade_name": stmt.excluded.grade_name,
                "payload": stmt.excluded.payload,
                "fetched_at": stmt.excluded.fetched_at,
            },
        )
        await self.session.execute(stmt)

    async def get_all_cached_ladders(self) -> list[CachedLadderRow]:
        stmt = select(CachedLadderRow).order_by(CachedLadderRow.grade_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
