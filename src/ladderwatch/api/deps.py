"""FastAPI dependency injection for the engine, remote client and cache orchestrator."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from ladderwatch.core.orchestrator import CacheOrchestrator
from ladderwatch.core.search import ClubSearchDebouncer
from ladderwatch.remote.client import CricketClient


async def get_engine(request: Request) -> AsyncEngine:
    """Get the database engine from app state."""
    return request.app.state.engine


async def get_orchestrator(request: Request) -> CacheOrchestrator:
    """Get the cache orchestrator from app state."""
    return request.app.state.orchestrator


async def get_client(request: Request) -> CricketClient:
    return request.app.state.client


async def get_club_search(request: Request) -> ClubSearchDebouncer:
    return request.app.state.club_search


EngineDep = Annotated[AsyncEngine, Depends(get_engine)]
OrchestratorDep = Annotated[CacheOrchestrator, Depends(get_orchestrator)]
ClientDep = Annotated[CricketClient, Depends(get_client)]
ClubSearchDep = Annotated[ClubSearchDebouncer, Depends(get_club_search)]
