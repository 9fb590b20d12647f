"""Ordering and display helpers for a cached ladder.

Pure functions over ``Ladder`` models; the presentation layer calls these
instead of re-implementing rank order or column order.
"""

from __future__ import annotations

from collections.abc import Set

from ladderwatch.models.ladder import Column, Ladder, LadderFormat, TeamStanding

DEFAULT_FORMAT_NAME = "Overall"

# Key columns first, in this order; anything else follows in API order.
PREFERRED_COLUMN_ORDER: tuple[str, ...] = (
    "played",
    "competitionPoints",
    "quotient",
    "netRunRate",
    "won",
    "lost",
    "ties",
    "noResults",
    "drawn",
    "winOutright",
    "winFirstInnings",
    "drawFirstInnings",
    "byes",
    "forfeits",
    "adjustments",
    "runsFor",
    "oversFaced",
    "wicketsLost",
    "runsAgainst",
    "oversBowled",
    "wicketsTaken",
)
_COLUMN_RANK = {column_id: i for i, column_id in enumerate(PREFERRED_COLUMN_ORDER)}


def select_format(ladder: Ladder, name: str = DEFAULT_FORMAT_NAME) -> LadderFormat | None:
    """The format called ``name``, else the first format, else None."""
    for fmt in ladder.formats:
        if fmt.name == name:
            return fmt
    return ladder.formats[0] if ladder.formats else None


def ranked_standings(fmt: LadderFormat) -> list[TeamStanding]:
    """All pools flattened into one list ordered by rank. Ties keep API order."""
    teams = [team for pool in fmt.pools for team in pool.teams]
    return sorted(teams, key=lambda t: t.rank)


def display_columns(fmt: LadderFormat) -> list[Column]:
    return sorted(fmt.columns, key=lambda c: _COLUMN_RANK.get(c.id, len(PREFERRED_COLUMN_ORDER)))


def is_highlighted(standing: TeamStanding, team_ids: Set[str], org_ids: Set[str]) -> bool:
    """True if the team, or the organisation that owns it, is tracked."""
    if standing.id in team_ids:
        return True
    org = standing.owning_organisation
    return org is not None and org.id in org_ids


def cell_text(standing: TeamStanding, column_id: str) -> str:
    value = standing.value_for(column_id)
    return value.display(column_id) if value is not None else ""
