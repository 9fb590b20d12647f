"""Season, Team and Grade models as returned by the fixtures API."""

from __future__ import annotations

from pydantic import Field

from ladderwatch.models.base import WireModel


class Season(WireModel):
    id: str
    name: str
    start_date: str | None = None
    is_current_season: bool = False


class SeasonsResponse(WireModel):
    seasons: list[Season] = Field(default_factory=list)


class GradeOrganisation(WireModel):
    """The organisation that runs a grade."""

    id: str
    name: str | None = None
    short_name: str | None = None
    logo_url: str | None = None


class Grade(WireModel):
    """A competition division. Ladders are always fetched per grade."""

    id: str
    name: str
    is_current: bool | None = None
    owning_organisation: GradeOrganisation | None = None


class Team(WireModel):
    """A club's team in one season.

    The API sets ``grade`` for most teams; some only carry a ``grades`` list.
    """

    id: str
    name: str
    grade: Grade | None = None
    grades: list[Grade] | None = None

    def resolve_grade(self) -> Grade | None:
        """The team's grade: direct, else first current, else first listed."""
        if self.grade is not None:
            return self.grade
        if not self.grades:
            return None
        for grade in self.grades:
            if grade.is_current:
                return grade
        return self.grades[0]


class TeamsResponse(WireModel):
    teams: list[Team] = Field(default_factory=list)
