"""Payload builders and a scriptable fake remote source shared by the tests."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import UTC, datetime

from ladderwatch.core.store import CachedLadderRecord
from ladderwatch.models.club import Club
from ladderwatch.models.ladder import Ladder
from ladderwatch.models.season import Season, Team
from ladderwatch.remote.errors import FetchError


def season_json(season_id: str, *, current: bool = False, name: str | None = None) -> dict:
    return {
        "id": season_id,
        "name": name or f"Season {season_id}",
        "startDate": "2025-09-01",
        "isCurrentSeason": current,
    }


def grade_json(grade_id: str, name: str, *, current: bool | None = None) -> dict:
    data: dict = {"id": grade_id, "name": name}
    if current is not None:
        data["isCurrent"] = current
    return data


def team_json(team_id: str, *, grade: dict | None = None, grades: list[dict] | None = None) -> dict:
    data: dict = {"id": team_id, "name": f"Team {team_id}"}
    if grade is not None:
        data["grade"] = grade
    if grades is not None:
        data["grades"] = grades
    return data


def ladder_json(grade_id: str, grade_name: str = "Under 12 Blue", *, points: int = 10) -> dict:
    return {
        "grade": {
            "id": grade_id,
            "name": grade_name,
            "organisation": {"id": "assoc-1", "name": "Metro Cricket Association"},
        },
        "ladders": [
            {
                "name": "Overall",
                "columns": [
                    {"id": "runsFor", "heading": "RF"},
                    {"id": "played", "heading": "P", "description": "Played"},
                    {"id": "competitionPoints", "heading": "Pts"},
                    {"id": "oversFaced", "heading": "OF"},
                ],
                "pools": [
                    {
                        "teams": [
                            {
                                "id": "t-2",
                                "displayName": "Second XI",
                                "owningOrganisation": {"id": "org-2"},
                                "rank": 2,
                                "ladderData": [
                                    {"id": "played", "val": 5},
                                    {"id": "competitionPoints", "val": points - 2},
                                    {"id": "runsFor", "val": 612.0},
                                    {"id": "oversFaced", "val": 98.3333},
                                ],
                            },
                            {
                                "id": "t-1",
                                "displayName": "First XI",
                                "owningOrganisation": {"id": "org-1"},
                                "rank": 1,
                                "ladderData": [
                                    {"id": "played", "val": 5},
                                    {"id": "competitionPoints", "val": points},
                                    {"id": "runsFor", "val": 701},
                                    {"id": "oversFaced", "val": "DNB"},
                                ],
                            },
                        ]
                    }
                ],
            },
            {"name": "Points only", "columns": [], "pools": []},
        ],
    }


def make_ladder(grade_id: str, grade_name: str = "Under 12 Blue", *, points: int = 10) -> Ladder:
    return Ladder.model_validate(ladder_json(grade_id, grade_name, points=points))


def make_club(org_id: str, name: str | None = None) -> Club:
    return Club(org_id=org_id, display_name=name or f"Club {org_id}")


class FakeSource:
    """Scriptable stand-in for ``CricketClient``.

    Responses and failures are set per key. ``gates`` lets a test hold a fetch
    open until it sets the event, to observe what runs concurrently.
    """

    def __init__(self) -> None:
        self.seasons: dict[str, list[Season]] = {}
        self.teams: dict[tuple[str, str], list[Team]] = {}
        self.ladders: dict[str, Ladder] = {}
        self.failures: dict[str, FetchError] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, ...]] = []
        self.active: dict[str, int] = defaultdict(int)
        self.max_active: dict[str, int] = defaultdict(int)

    def set_seasons(self, org_id: str, *seasons: dict) -> None:
        self.seasons[org_id] = [Season.model_validate(s) for s in seasons]

    def set_teams(self, org_id: str, season_id: str, *teams: dict) -> None:
        self.teams[(org_id, season_id)] = [Team.model_validate(t) for t in teams]

    async def _enter(self, key: str, call: tuple[str, ...]) -> None:
        self.calls.append(call)
        self.active[key] += 1
        self.max_active[key] = max(self.max_active[key], self.active[key])
        try:
            gate = self.gates.get(key)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(0)
            if key in self.failures:
                raise self.failures[key]
        finally:
            self.active[key] -= 1

    async def fetch_seasons(self, org_id: str) -> list[Season]:
        await self._enter(f"seasons:{org_id}", ("seasons", org_id))
        return self.seasons.get(org_id, [])

    async def fetch_teams(self, org_id: str, season_id: str) -> list[Team]:
        await self._enter(f"teams:{org_id}", ("teams", org_id, season_id))
        return self.teams.get((org_id, season_id), [])

    async def fetch_ladders(self, grade_id: str) -> Ladder:
        await self._enter(f"ladder:{grade_id}", ("ladder", grade_id))
        return self.ladders[grade_id]

    def call_count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


class MemoryStore:
    """Dict-backed ``LadderCacheStore``."""

    def __init__(self) -> None:
        self.records: dict[str, CachedLadderRecord] = {}
        self.upserts = 0

    async def upsert(
        self, grade_id: str, grade_name: str, payload: bytes, fetched_at: datetime
    ) -> None:
        self.upserts += 1
        self.records[grade_id] = CachedLadderRecord(grade_id, grade_name, payload, fetched_at)

    async def read_all(self) -> list[CachedLadderRecord]:
        return list(self.records.values())

    def put_raw(self, grade_id: str, payload: bytes, grade_name: str = "") -> None:
        self.records[grade_id] = CachedLadderRecord(
            grade_id, grade_name or grade_id, payload, datetime(2025, 1, 1, tzinfo=UTC)
        )
