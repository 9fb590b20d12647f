"""Adding, listing and removing tracked clubs.

The club registry lives in the database; the orchestrator mirrors it in
``CacheState.clubs``. These helpers keep the two in step.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncEngine

from ladderwatch.core.orchestrator import CacheOrchestrator
from ladderwatch.db.engine import get_session
from ladderwatch.db.models import ClubRow
from ladderwatch.db.repository import Repository
from ladderwatch.models.club import Club, Organisation
from ladderwatch.remote.errors import InvalidRequest

logger = logging.getLogger(__name__)


class ClubAlreadyTracked(Exception):
    def __init__(self, org_id: str, name: str) -> None:
        self.org_id = org_id
        self.name = name
        super().__init__(f"{name} is already added.")


class OrganisationLookup(Protocol):
    async def fetch_organisation(self, org_id: str) -> Organisation: ...


def club_from_row(row: ClubRow) -> Club:
    return Club(
        org_id=row.org_id,
        display_name=row.display_name,
        short_name=row.short_name,
        logo_url=row.logo_url,
        added_at=row.added_at,
    )


async def load_tracked_clubs(engine: AsyncEngine) -> list[Club]:
    """All persisted clubs, oldest first."""
    async with get_session(engine) as session:
        rows = await Repository(session).list_clubs()
        return [club_from_row(row) for row in rows]


async def lookup_club(client: OrganisationLookup, engine: AsyncEngine, org_id: str) -> Organisation:
    """Fetch an organisation so the user can confirm it before tracking.

    Raises ``InvalidRequest`` for a blank id, ``ClubAlreadyTracked`` if it is
    already in the registry, or any ``FetchError`` from the lookup itself.
    """
    org_id = org_id.strip()
    if not org_id:
        raise InvalidRequest("Organisation id must not be empty")
    org = await client.fetch_organisation(org_id)
    async with get_session(engine) as session:
        if await Repository(session).get_club(org.organisation_guid) is not None:
            raise ClubAlreadyTracked(org.organisation_guid, org.name)
    return org


async def track_club(
    engine: AsyncEngine,
    orchestrator: CacheOrchestrator,
    org: Organisation,
) -> Club:
    """Persist a confirmed organisation, then load its teams."""
    club = Club.from_organisation(org)
    async with get_session(engine) as session:
        repo = Repository(session)
        if await repo.get_club(club.org_id) is not None:
            raise ClubAlreadyTracked(club.org_id, club.display_name)
        row = await repo.add_club(club)
        club = club_from_row(row)
    orchestrator.track_club(club)
    logger.info("club_tracked org=%s name=%s", club.org_id, club.display_name)
    await orchestrator.load_teams_for_club(club.org_id)
    return club


async def untrack_club(engine: AsyncEngine, orchestrator: CacheOrchestrator, org_id: str) -> bool:
    """Remove a club from the registry and drop its teams and season from the cache."""
    async with get_session(engine) as session:
        removed = await Repository(session).delete_club(org_id)
    await orchestrator.forget_club(org_id)
    return removed
