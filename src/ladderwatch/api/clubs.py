"""Club endpoints: the tracked set, search, add/remove, and per-club grades."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ladderwatch.api.deps import ClientDep, ClubSearchDep, EngineDep, OrchestratorDep
from ladderwatch.core.clubs import ClubAlreadyTracked, lookup_club, track_club, untrack_club
from ladderwatch.core.state import club_key
from ladderwatch.remote.errors import FetchError, InvalidRequest

router = APIRouter(prefix="/api", tags=["clubs"])


class AddClubRequest(BaseModel):
    org_id: str


@router.get("/clubs")
async def list_clubs(orchestrator: OrchestratorDep) -> dict:
    state = orchestrator.state
    data = []
    for club in state.clubs.values():
        season = state.seasons.get(club.org_id)
        data.append(
            {
                "org_id": club.org_id,
                "display_name": club.display_name,
                "short_name": club.short_name,
                "logo_url": club.logo_url,
                "season": season.model_dump() if season else None,
                "team_count": len(state.teams.get(club.org_id, ())),
                "error": state.errors.get(club_key(club.org_id)),
            }
        )
    return {"data": data}


@router.get("/clubs/search")
async def search_clubs(term: str, search: ClubSearchDep) -> dict:
    """Debounced club search.

    A request superseded by a newer one before its quiet period ends returns
    the newest completed results, flagged ``superseded``.
    """
    search.submit(term)
    await search.wait()
    return {
        "term": search.term,
        "superseded": search.term != term.strip(),
        "error": search.error,
        "data": [
            {
                "org_id": hit.id,
                "name": hit.name,
                "short_name": hit.short_name,
                "state_name": hit.state_name,
                "logo_url": hit.logo_url,
            }
            for hit in search.results
        ],
    }


@router.post("/clubs", status_code=201)
async def add_club(
    body: AddClubRequest,
    client: ClientDep,
    engine: EngineDep,
    orchestrator: OrchestratorDep,
) -> dict:
    """Look up an organisation, persist it as a tracked club and load its teams."""
    try:
        org = await lookup_club(client, engine, body.org_id)
        club = await track_club(engine, orchestrator, org)
    except ClubAlreadyTracked as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {
        "org_id": club.org_id,
        "display_name": club.display_name,
        "team_count": len(orchestrator.state.teams.get(club.org_id, ())),
    }


@router.delete("/clubs/{org_id}", status_code=204)
async def remove_club(org_id: str, engine: EngineDep, orchestrator: OrchestratorDep) -> None:
    if not await untrack_club(engine, orchestrator, org_id):
        raise HTTPException(status_code=404, detail=f"Club {org_id} is not tracked")


@router.get("/clubs/{org_id}/grades")
async def club_grades(org_id: str, orchestrator: OrchestratorDep) -> dict:
    """Grades the club's teams play in, each with whether a ladder is cached."""
    if org_id not in orchestrator.state.clubs:
        raise HTTPException(status_code=404, detail=f"Club {org_id} is not tracked")
    grades = orchestrator.grades_for_club(org_id)
    return {
        "data": [
            {
                "id": grade.id,
                "name": grade.name,
                "ladder_cached": grade.id in orchestrator.state.ladders,
            }
            for grade in grades
        ]
    }
