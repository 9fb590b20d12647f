"""Club and organisation models.

A *club* is an organisation the user has chosen to track. The remote API calls
the same thing an organisation; ``Organisation`` and ``ClubSearchResult`` are
what it returns, ``Club`` is what we keep.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ladderwatch.models.base import WireModel


class Organisation(WireModel):
    """Response of the organisation lookup endpoint."""

    organisation_guid: str
    name: str
    short_name: str | None = None
    logo_url: str | None = Field(default=None, alias="logoURL")
    description: str | None = None


class ClubSearchResult(WireModel):
    """One hit from the club search endpoint."""

    organisation_guid: str
    name: str
    short_name: str | None = None
    state_name: str | None = None
    logo_url: str | None = Field(default=None, alias="logoURL")

    @property
    def id(self) -> str:
        return self.organisation_guid


class SearchPageInfo(WireModel):
    page: int
    num_pages: int
    page_size: int
    num_entries: int


class SearchResults(WireModel):
    page_info: SearchPageInfo
    items: list[ClubSearchResult] = Field(default_factory=list)


class ClubSearchResponse(WireModel):
    """Envelope of the search endpoint. ``clubs`` is absent when nothing matched."""

    clubs: SearchResults | None = None


class Club(BaseModel):
    """A tracked club."""

    org_id: str
    display_name: str
    short_name: str = ""
    logo_url: str | None = None
    added_at: datetime | None = None

    @classmethod
    def from_organisation(cls, org: Organisation) -> Club:
        return cls(
            org_id=org.organisation_guid,
            display_name=org.name,
            short_name=org.short_name or "",
            logo_url=org.logo_url,
        )
