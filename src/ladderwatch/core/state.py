"""In-memory cache state owned by the orchestrator.

Every map value is replaced wholesale on write (teams are stored as tuples,
models are frozen), so a reader holding a reference never sees it change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ladderwatch.models.club import Club
from ladderwatch.models.ladder import Ladder
from ladderwatch.models.season import Season, Team


def club_key(org_id: str) -> str:
    return f"club:{org_id}"


def grade_key(grade_id: str) -> str:
    return f"grade:{grade_id}"


@dataclass
class CacheState:
    """What the presentation layer reads.

    ``clubs`` is the tracked set; ``teams`` and ``seasons`` are keyed by org id,
    ``ladders`` and ``ladder_fetched_at`` by grade id. ``errors`` holds the most
    recent failure per key (``club:<id>`` / ``grade:<id>``) and is cleared when
    that key next succeeds; ``last_error`` is the most recent one overall.
    """

    clubs: dict[str, Club] = field(default_factory=dict)
    teams: dict[str, tuple[Team, ...]] = field(default_factory=dict)
    seasons: dict[str, Season] = field(default_factory=dict)
    ladders: dict[str, Ladder] = field(default_factory=dict)
    ladder_fetched_at: dict[str, datetime] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    last_error: str | None = None
    last_updated: datetime | None = None
    is_loading: bool = False
