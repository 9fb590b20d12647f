"""Ladder endpoints: standings served from the cache, status, and manual refresh."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, HTTPException

from ladderwatch.api.deps import OrchestratorDep
from ladderwatch.core.standings import (
    DEFAULT_FORMAT_NAME,
    cell_text,
    display_columns,
    is_highlighted,
    ranked_standings,
    select_format,
)
from ladderwatch.core.state import grade_key

router = APIRouter(prefix="/api", tags=["ladders"])


@router.get("/ladders/{grade_id}")
async def get_ladder(
    grade_id: str,
    orchestrator: OrchestratorDep,
    background: BackgroundTasks,
    format: str = DEFAULT_FORMAT_NAME,  # noqa: A002
) -> dict:
    """Serve a grade's ladder, loading it into the cache on first request.

    A cached ladder is returned as-is and reloaded after the response is sent.
    An uncached grade is fetched before responding; 404 only if that fails.
    Either way the grade joins the refresh working set. Tracked teams (or
    teams owned by a tracked club) are flagged ``highlighted``.
    """
    ladder = orchestrator.ladder(grade_id)
    if ladder is None:
        await orchestrator.load_ladder(grade_id)
        ladder = orchestrator.ladder(grade_id)
        if ladder is None:
            error = orchestrator.state.errors.get(grade_key(grade_id), "unknown error")
            raise HTTPException(
                status_code=404,
                detail=f"Ladder for grade {grade_id} is unavailable: {error}",
            )
    else:
        background.add_task(orchestrator.load_ladder, grade_id)

    fmt = select_format(ladder, format)
    fetched_at = orchestrator.state.ladder_fetched_at.get(grade_id)
    body: dict = {
        "grade_id": grade_id,
        "grade_name": ladder.grade_name,
        "formats": [f.name for f in ladder.formats],
        "fetched_at": fetched_at.isoformat() if fetched_at else None,
        "format": None,
    }
    if fmt is None:
        return body

    team_ids = orchestrator.all_tracked_team_ids()
    org_ids = orchestrator.all_tracked_org_ids()
    columns = display_columns(fmt)
    body["format"] = {
        "name": fmt.name,
        "columns": [{"id": c.id, "heading": c.heading} for c in columns],
        "rows": [
            {
                "id": team.id,
                "rank": team.rank,
                "display_name": team.display_name,
                "highlighted": is_highlighted(team, team_ids, org_ids),
                "cells": {c.id: cell_text(team, c.id) for c in columns},
            }
            for team in ranked_standings(fmt)
        ],
    }
    return body


@router.get("/status")
async def cache_status(orchestrator: OrchestratorDep) -> dict:
    state = orchestrator.state
    return {
        "is_loading": state.is_loading,
        "last_error": state.last_error,
        "last_updated": state.last_updated.isoformat() if state.last_updated else None,
        "clubs": len(state.clubs),
        "ladders": len(state.ladders),
    }


@router.post("/refresh", status_code=202)
async def trigger_refresh(orchestrator: OrchestratorDep, background: BackgroundTasks) -> dict:
    """Run one refresh cycle after the response is sent."""
    background.add_task(orchestrator.refresh_all)
    return {"status": "scheduled"}
