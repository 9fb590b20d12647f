"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ladderwatch import __version__
from ladderwatch.api.clubs import router as clubs_router
from ladderwatch.api.ladders import router as ladders_router
from ladderwatch.config import Settings
from ladderwatch.core.clubs import load_tracked_clubs
from ladderwatch.core.event_bus import EventBus
from ladderwatch.core.orchestrator import CacheOrchestrator
from ladderwatch.core.refresh import RefreshScheduler
from ladderwatch.core.search import ClubSearchDebouncer
from ladderwatch.core.store import SQLLadderCacheStore
from ladderwatch.db.engine import create_engine, create_tables
from ladderwatch.remote.client import CricketClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create tables, hydrate the cache, kick off the first load, arm the refresh timer."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await create_tables(engine)
    app.state.engine = engine

    injected_client: CricketClient | None = getattr(app.state, "client", None)
    client = injected_client or CricketClient(
        base_url=settings.ladder_api_base_url,
        search_base_url=settings.ladder_search_base_url,
        timeout=settings.ladder_request_timeout,
    )
    app.state.client = client
    app.state.event_bus = EventBus()
    orchestrator = CacheOrchestrator(client, SQLLadderCacheStore(engine), app.state.event_bus)
    app.state.orchestrator = orchestrator
    app.state.club_search = ClubSearchDebouncer(client, delay=settings.ladder_search_debounce)

    # Cached ladders are servable before any network call returns.
    await orchestrator.hydrate_from_store()
    clubs = await load_tracked_clubs(engine)
    initial_load = asyncio.create_task(orchestrator.load_all_clubs(clubs), name="initial-club-load")
    logger.info("startup_club_load_started clubs=%d", len(clubs))

    refresh = None
    if settings.ladder_auto_refresh:
        refresh = RefreshScheduler(orchestrator, interval_seconds=settings.ladder_refresh_interval)
        refresh.start()
    else:
        logger.info("refresh_scheduler_disabled")
    app.state.refresh_scheduler = refresh

    yield

    if refresh is not None:
        refresh.shutdown()
    app.state.club_search.cancel()
    if not initial_load.done():
        initial_load.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await initial_load
    if injected_client is None:
        await client.aclose()
    await engine.dispose()
    logger.info("shutdown_complete")


def create_app(settings: Settings | None = None, client: CricketClient | None = None) -> FastAPI:
    """Create and configure the Ladderwatch FastAPI application.

    ``client`` replaces the default remote client (tests pass one built on
    ``httpx.MockTransport``); an injected client is not closed on shutdown.
    """
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.ladder_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Ladderwatch",
        version=__version__,
        description="Cached, background-refreshed cricket ladders for tracked clubs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.client = client

    app.include_router(clubs_router)
    app.include_router(ladders_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
