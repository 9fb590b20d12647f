"""Shared test fixtures."""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from ladderwatch.config import Settings
from ladderwatch.db.engine import create_engine, create_tables


@pytest.fixture
def settings() -> Settings:
    """Test settings: in-memory database, no background refresh."""
    return Settings(database_url="sqlite+aiosqlite:///:memory:", ladder_auto_refresh=False)


@pytest.fixture
async def engine() -> AsyncEngine:
    """An in-memory SQLite engine with all tables."""
    eng = create_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(eng)
    yield eng
    await eng.dispose()
