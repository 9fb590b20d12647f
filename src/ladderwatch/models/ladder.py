"""Ladder (standings) models.

Ordering and display helpers live in ``ladderwatch.core.standings``.
"""

from __future__ import annotations

from pydantic import Field

from ladderwatch.models.base import WireModel
from ladderwatch.models.values import LadderValue


class LadderOrganisation(WireModel):
    id: str
    name: str | None = None


class LadderGrade(WireModel):
    id: str
    name: str
    organisation: LadderOrganisation | None = None


class Column(WireModel):
    id: str
    heading: str
    description: str | None = None


class StandingOrganisation(WireModel):
    id: str


class LadderDatum(WireModel):
    """One cell: a column id and its value."""

    id: str
    val: LadderValue


class TeamStanding(WireModel):
    id: str
    display_name: str
    owning_organisation: StandingOrganisation | None = None
    rank: int
    includes_adjustments: bool | None = None
    includes_unofficial: bool | None = None
    ladder_data: list[LadderDatum] = Field(default_factory=list)

    def value_for(self, column_id: str) -> LadderValue | None:
        for datum in self.ladder_data:
            if datum.id == column_id:
                return datum.val
        return None


class Pool(WireModel):
    teams: list[TeamStanding] = Field(default_factory=list)


class LadderFormat(WireModel):
    """One way of ranking the grade (e.g. "Overall", "Points only")."""

    name: str
    columns: list[Column] = Field(default_factory=list)
    pools: list[Pool] = Field(default_factory=list)


class Ladder(WireModel):
    """Standings document for a grade, as served by the ladders endpoint."""

    grade: LadderGrade
    formats: list[LadderFormat] = Field(default_factory=list, alias="ladders")

    @property
    def grade_id(self) -> str:
        return self.grade.id

    @property
    def grade_name(self) -> str:
        return self.grade.name

    @property
    def organisation(self) -> LadderOrganisation | None:
        return self.grade.organisation

    def to_payload(self) -> bytes:
        """Serialize for the persistent cache."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_payload(cls, payload: bytes | str) -> Ladder:
        return cls.model_validate_json(payload)
