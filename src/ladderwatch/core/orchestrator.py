"""Cache orchestrator: keeps club teams, seasons and grade ladders fresh.

The orchestrator owns ``CacheState`` and is the only writer to it. Network
fetches run concurrently; writes are serialized per key with ``KeyedLocks``
(``club:<org_id>`` and ``grade:<grade_id>``), so two loads for the same key
queue behind each other while loads for different keys run in parallel.

Failures are contained per key: a failed fetch records an error message and
leaves whatever was cached for that key untouched. Batch operations
(``load_all_clubs``, ``refresh_all``) never abort because one key failed.

The only suspension points while holding a key lock are the remote fetch and
the persistent store write. Map updates happen synchronously after the fetch
returns, so readers see either the old value or the new one.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ladderwatch.core import event_bus as events
from ladderwatch.core.event_bus import EventBus
from ladderwatch.core.state import CacheState, club_key, grade_key
from ladderwatch.core.store import LadderCacheStore
from ladderwatch.models.club import Club
from ladderwatch.models.ladder import Ladder
from ladderwatch.models.season import Grade, Season, Team
from ladderwatch.remote.errors import FetchError, NotYetAvailable

logger = logging.getLogger(__name__)


class LadderSource(Protocol):
    """The slice of ``CricketClient`` the orchestrator calls."""

    async def fetch_seasons(self, org_id: str) -> list[Season]: ...

    async def fetch_teams(self, org_id: str, season_id: str) -> list[Team]: ...

    async def fetch_ladders(self, grade_id: str) -> Ladder: ...


def select_season(seasons: Sequence[Season]) -> Season | None:
    """The current season, else the first listed, else None."""
    for season in seasons:
        if season.is_current_season:
            return season
    return seasons[0] if seasons else None


class KeyedLocks:
    """One ``asyncio.Lock`` per key, created on demand and dropped when idle."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: Counter[str] = Counter()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] <= 0:
                del self._holders[key]
                self._locks.pop(key, None)

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


class CacheOrchestrator:
    """Owns the in-memory cache and coordinates fetches into it.

    Usage:
        orchestrator = CacheOrchestrator(client, SQLLadderCacheStore(engine), bus)
        await orchestrator.hydrate_from_store()
        await orchestrator.load_all_clubs(clubs)
        grades = orchestrator.grades_for_club(org_id)
        await asyncio.gather(*(orchestrator.load_ladder(g.id) for g in grades))
    """

    def __init__(
        self,
        client: LadderSource,
        store: LadderCacheStore,
        event_bus: EventBus | None = None,
        state: CacheState | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.event_bus = event_bus or EventBus()
        self.state = state or CacheState()
        self._locks = KeyedLocks()

    # --- Clubs & teams ---

    def track_club(self, club: Club) -> None:
        """Add (or update) a club in the tracked set without loading it."""
        self.state.clubs[club.org_id] = club

    async def forget_club(self, org_id: str) -> None:
        """Drop a club and its derived team/season entries.

        Waits for any in-flight load of the club so it cannot write back
        afterwards. Ladder entries stay: grades can be shared between clubs.
        """
        async with self._locks.hold(club_key(org_id)):
            self.state.clubs.pop(org_id, None)
            self.state.teams.pop(org_id, None)
            self.state.seasons.pop(org_id, None)
            self.state.errors.pop(club_key(org_id), None)
        self._publish(events.CLUB_FORGOTTEN, {"org_id": org_id})
        logger.info("club_forgotten org=%s", org_id)

    async def load_teams_for_club(self, org_id: str) -> None:
        """Resolve the club's season (once) and replace its team list."""
        await self._load_teams(org_id, only_if_tracked=False)

    async def _load_teams(self, org_id: str, *, only_if_tracked: bool) -> None:
        key = club_key(org_id)
        async with self._locks.hold(key):
            if only_if_tracked and org_id not in self.state.clubs:
                logger.debug("club_load_skipped org=%s reason=untracked", org_id)
                return

            season = self.state.seasons.get(org_id)
            newly_selected = season is None
            try:
                if season is None:
                    season = select_season(await self.client.fetch_seasons(org_id))
                    if season is None:
                        logger.info("club_season_not_yet_available org=%s", org_id)
                        return
                teams = await self.client.fetch_teams(org_id, season.id)
            except FetchError as exc:
                self._record_error(key, exc)
                return

            # Both fetches succeeded: commit season and teams together.
            if newly_selected:
                self.state.seasons[org_id] = season
                self._publish(
                    events.SEASON_SELECTED,
                    {"org_id": org_id, "season_id": season.id, "season_name": season.name},
                )
            self.state.teams[org_id] = tuple(teams)
            self.state.errors.pop(key, None)
        self._publish(events.TEAMS_UPDATED, {"org_id": org_id, "team_count": len(teams)})
        logger.info("club_teams_loaded org=%s season=%s teams=%d", org_id, season.id, len(teams))

    async def load_all_clubs(self, clubs: Iterable[Club]) -> None:
        """Track ``clubs`` and load them all concurrently.

        Returns once every club has finished, successfully or not. The previous
        error message is cleared up front so it reflects this batch only.
        """
        clubs = list(clubs)
        for club in clubs:
            self.track_club(club)

        self.state.is_loading = True
        self.state.last_error = None
        try:
            await self._gather_isolated(
                [club.org_id for club in clubs],
                lambda org_id: self._load_teams(org_id, only_if_tracked=False),
                key_fn=club_key,
            )
        finally:
            self.state.is_loading = False
            self.state.last_updated = datetime.now(UTC)
        logger.info("clubs_loaded count=%d", len(clubs))

    def require_season(self, org_id: str) -> Season:
        """The selected season for ``org_id``; raises ``NotYetAvailable`` if unresolved."""
        season = self.state.seasons.get(org_id)
        if season is None:
            raise NotYetAvailable(org_id)
        return season

    # --- Ladders ---

    async def load_ladder(self, grade_id: str) -> None:
        """Fetch a grade's ladder, replace the cached copy and persist it."""
        key = grade_key(grade_id)
        async with self._locks.hold(key):
            try:
                ladder = await self.client.fetch_ladders(grade_id)
            except FetchError as exc:
                self._record_error(key, exc)
                return

            fetched_at = datetime.now(UTC)
            self.state.ladders[grade_id] = ladder
            self.state.ladder_fetched_at[grade_id] = fetched_at
            self.state.errors.pop(key, None)
            self._publish(
                events.LADDER_UPDATED,
                {"grade_id": grade_id, "grade_name": ladder.grade_name},
            )

            try:
                await self.store.upsert(
                    grade_id, ladder.grade_name, ladder.to_payload(), fetched_at
                )
            except SQLAlchemyError as exc:
                self._record_error(key, exc, message=f"Failed to save ladder {grade_id}: {exc}")
                return
        logger.info("ladder_loaded grade=%s formats=%d", grade_id, len(ladder.formats))

    def ladder(self, grade_id: str) -> Ladder | None:
        return self.state.ladders.get(grade_id)

    async def evict_ladder(self, grade_id: str) -> bool:
        """Remove a ladder from memory. The persisted snapshot is kept.

        Waits for an in-flight load of the grade, so it cannot write back afterwards.
        """
        async with self._locks.hold(grade_key(grade_id)):
            removed = self.state.ladders.pop(grade_id, None) is not None
            self.state.ladder_fetched_at.pop(grade_id, None)
        if removed:
            self._publish(events.LADDER_EVICTED, {"grade_id": grade_id})
        return removed

    async def hydrate_from_store(self) -> int:
        """Load every persisted ladder into memory. Returns how many were loaded.

        Records that fail to decode are skipped; that grade stays absent until
        its next successful fetch. Grades already in memory are not replaced,
        since a live fetch is at least as new as the snapshot.
        """
        try:
            records = await self.store.read_all()
        except SQLAlchemyError as exc:
            self._record_error("store", exc, message=f"Failed to read ladder cache: {exc}")
            return 0

        loaded = 0
        for record in records:
            try:
                ladder = Ladder.from_payload(record.payload)
            except ValidationError:
                logger.warning("ladder_cache_corrupt grade=%s skipped", record.grade_id)
                continue
            if record.grade_id in self.state.ladders:
                continue
            self.state.ladders[record.grade_id] = ladder
            self.state.ladder_fetched_at[record.grade_id] = record.fetched_at
            loaded += 1
        logger.info("ladder_cache_hydrated loaded=%d records=%d", loaded, len(records))
        return loaded

    # --- Refresh ---

    async def refresh_all(self) -> None:
        """One refresh cycle over the current working set.

        Reloads every tracked club, then every grade present in the ladder map
        at that point. Per-key locks make overlapping cycles safe.
        """
        org_ids = list(self.state.clubs)
        await self._gather_isolated(
            org_ids,
            lambda org_id: self._load_teams(org_id, only_if_tracked=True),
            key_fn=club_key,
        )
        grade_ids = list(self.state.ladders)
        await self._gather_isolated(grade_ids, self.load_ladder, key_fn=grade_key)

        self.state.last_updated = datetime.now(UTC)
        self._publish(
            events.REFRESH_COMPLETED,
            {"clubs": len(org_ids), "grades": len(grade_ids)},
        )
        logger.info("refresh_cycle_completed clubs=%d grades=%d", len(org_ids), len(grade_ids))

    # --- Derived read-only views ---

    def team_ids(self, org_id: str) -> set[str]:
        return {team.id for team in self.state.teams.get(org_id, ())}

    def all_tracked_team_ids(self) -> set[str]:
        ids: set[str] = set()
        for teams in list(self.state.teams.values()):
            ids.update(team.id for team in teams)
        return ids

    def all_tracked_org_ids(self) -> set[str]:
        return set(self.state.clubs)

    def grades_for_club(self, org_id: str) -> list[Grade]:
        """Distinct grades the club's teams play in, sorted by name.

        Duplicates keep their first occurrence; equal names keep encounter order.
        """
        seen: set[str] = set()
        grades: list[Grade] = []
        for team in self.state.teams.get(org_id, ()):
            grade = team.resolve_grade()
            if grade is None or grade.id in seen:
                continue
            seen.add(grade.id)
            grades.append(grade)
        return sorted(grades, key=lambda g: g.name)

    # --- Internals ---

    async def _gather_isolated(
        self,
        keys: list[str],
        load: Callable[[str], Awaitable[None]],
        *,
        key_fn: Callable[[str], str],
    ) -> None:
        """Run ``load(key)`` for every key concurrently; one failure never stops the rest.

        Loads already catch ``FetchError``. Anything else escaping a load is a
        bug, so it is logged with a traceback and recorded against its key.
        """
        results = await asyncio.gather(*(load(k) for k in keys), return_exceptions=True)
        for k, result in zip(keys, results, strict=True):
            if isinstance(result, Exception):
                logger.error("load_failed key=%s", key_fn(k), exc_info=result)
                self._record_error(key_fn(k), result)
            elif isinstance(result, BaseException):
                raise result

    def _record_error(self, key: str, exc: BaseException, *, message: str | None = None) -> None:
        message = message or str(exc) or type(exc).__name__
        self.state.errors[key] = message
        self.state.last_error = message
        logger.warning("cache_load_error key=%s error=%s", key, message)
        self._publish(events.CACHE_ERROR, {"key": key, "message": message})

    def _publish(self, event_type: str, data: dict[str, Any]) -> None:
        self.event_bus.publish(event_type, data)
