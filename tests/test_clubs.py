"""Tests for the tracked-club registry helpers."""

import pytest
from ladder_fixtures import FakeSource, MemoryStore, season_json, team_json
from sqlalchemy.ext.asyncio import AsyncEngine

from ladderwatch.core.clubs import (
    ClubAlreadyTracked,
    load_tracked_clubs,
    lookup_club,
    track_club,
    untrack_club,
)
from ladderwatch.core.orchestrator import CacheOrchestrator
from ladderwatch.models.club import Organisation
from ladderwatch.remote.errors import HTTPStatusFailure, InvalidRequest


class FakeOrganisations:
    def __init__(self, *orgs: Organisation) -> None:
        self.orgs = {org.organisation_guid: org for org in orgs}
        self.requested: list[str] = []

    async def fetch_organisation(self, org_id: str) -> Organisation:
        self.requested.append(org_id)
        if org_id not in self.orgs:
            raise HTTPStatusFailure(404)
        return self.orgs[org_id]


def _org(org_id: str, name: str) -> Organisation:
    return Organisation(organisation_guid=org_id, name=name, short_name=name[:3])


@pytest.fixture
def source() -> FakeSource:
    source = FakeSource()
    source.set_seasons("org-1", season_json("s-1", current=True))
    source.set_teams("org-1", "s-1", team_json("t-1"))
    return source


@pytest.fixture
def orchestrator(source: FakeSource) -> CacheOrchestrator:
    return CacheOrchestrator(source, MemoryStore())


class TestLookup:
    async def test_trims_and_fetches(self, engine: AsyncEngine):
        orgs = FakeOrganisations(_org("org-1", "Northern CC"))
        org = await lookup_club(orgs, engine, "  org-1 ")
        assert org.name == "Northern CC"
        assert orgs.requested == ["org-1"]

    async def test_blank_id(self, engine: AsyncEngine):
        orgs = FakeOrganisations()
        with pytest.raises(InvalidRequest):
            await lookup_club(orgs, engine, "   ")
        assert orgs.requested == []

    async def test_unknown_org_propagates(self, engine: AsyncEngine):
        with pytest.raises(HTTPStatusFailure):
            await lookup_club(FakeOrganisations(), engine, "org-9")

    async def test_already_tracked(self, engine: AsyncEngine, orchestrator):
        org = _org("org-1", "Northern CC")
        await track_club(engine, orchestrator, org)
        with pytest.raises(ClubAlreadyTracked, match="Northern CC is already added."):
            await lookup_club(FakeOrganisations(org), engine, "org-1")


class TestTrackUntrack:
    async def test_track_persists_and_loads(self, engine: AsyncEngine, orchestrator):
        club = await track_club(engine, orchestrator, _org("org-1", "Northern CC"))

        assert club.short_name == "Nor"
        assert club.added_at is not None
        assert [c.org_id for c in await load_tracked_clubs(engine)] == ["org-1"]
        assert orchestrator.all_tracked_org_ids() == {"org-1"}
        assert orchestrator.team_ids("org-1") == {"t-1"}

    async def test_track_twice(self, engine: AsyncEngine, orchestrator):
        await track_club(engine, orchestrator, _org("org-1", "Northern CC"))
        with pytest.raises(ClubAlreadyTracked):
            await track_club(engine, orchestrator, _org("org-1", "Northern CC"))

    async def test_untrack(self, engine: AsyncEngine, orchestrator):
        await track_club(engine, orchestrator, _org("org-1", "Northern CC"))

        assert await untrack_club(engine, orchestrator, "org-1") is True
        assert await load_tracked_clubs(engine) == []
        assert orchestrator.all_tracked_org_ids() == set()
        assert orchestrator.team_ids("org-1") == set()

    async def test_untrack_unknown(self, engine: AsyncEngine, orchestrator):
        assert await untrack_club(engine, orchestrator, "org-x") is False
