"""Async client for the grassroots cricket fixtures/ladders API.

Stateless apart from the underlying ``httpx.AsyncClient`` connection pool:
no caching, no retries. Every call goes to the network and either returns a
decoded model or raises a ``FetchError`` subclass.

Usage:
    async with CricketClient() as client:
        ladder = await client.fetch_ladders("grade-guid")
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ladderwatch.config import DEFAULT_API_BASE_URL, DEFAULT_SEARCH_BASE_URL
from ladderwatch.models.club import ClubSearchResponse, ClubSearchResult, Organisation
from ladderwatch.models.ladder import Ladder
from ladderwatch.models.season import Season, SeasonsResponse, Team, TeamsResponse
from ladderwatch.remote.errors import (
    DecodeFailure,
    HTTPStatusFailure,
    InvalidRequest,
    TransportFailure,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30.0
SEARCH_PAGE_SIZE = 20

# Every fixtures endpoint wants this flag or it returns a reduced payload.
_JSCONFIG = {"jsconfig": "eccn:true"}

ModelT = TypeVar("ModelT", bound=BaseModel)


class CricketClient:
    """Five read operations against the remote API.

    Pass an existing ``httpx.AsyncClient`` to share a pool (or to inject a
    ``MockTransport`` in tests); otherwise the client owns one and closes it
    in ``aclose()``.
    """

    def __init__(
        self,
        http: httpx.AsyncClient | None = None,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        search_base_url: str = DEFAULT_SEARCH_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.search_base_url = search_base_url.rstrip("/")

    async def __aenter__(self) -> CricketClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # --- Operations ---

    async def fetch_organisation(self, org_id: str) -> Organisation:
        org_id = _require_id(org_id, "org_id")
        url = f"{self.base_url}/orgsproducts/organisation/{org_id}"
        params = {"responseModifier": "includePrograms", **_JSCONFIG}
        return await self._get(url, params, Organisation)

    async def fetch_seasons(self, org_id: str) -> list[Season]:
        org_id = _require_id(org_id, "org_id")
        url = f"{self.base_url}/fixturesladders/organisations/{org_id}/seasons"
        response = await self._get(url, dict(_JSCONFIG), SeasonsResponse)
        return list(response.seasons)

    async def fetch_teams(self, org_id: str, season_id: str) -> list[Team]:
        org_id = _require_id(org_id, "org_id")
        season_id = _require_id(season_id, "season_id")
        url = f"{self.base_url}/fixturesladders/organisations/{org_id}/teams"
        params = {"seasonId": season_id, **_JSCONFIG}
        response = await self._get(url, params, TeamsResponse)
        return list(response.teams)

    async def search_clubs(self, term: str) -> list[ClubSearchResult]:
        """First page of clubs matching ``term``. A blank term matches nothing."""
        term = term.strip()
        if not term:
            return []
        url = f"{self.search_base_url}/ca-search/v1/playCommunity"
        params: dict[str, Any] = {
            "types": "PLAYCOMM_CLUB",
            "term": term,
            "size": SEARCH_PAGE_SIZE,
            "page": 0,
            "sorting": "ASC",
            "tags": "search",
        }
        response = await self._get(url, params, ClubSearchResponse)
        if response.clubs is None:
            return []
        return list(response.clubs.items)

    async def fetch_ladders(self, grade_id: str) -> Ladder:
        grade_id = _require_id(grade_id, "grade_id")
        url = f"{self.base_url}/fixturesladders/grades/{grade_id}/ladders"
        return await self._get(url, dict(_JSCONFIG), Ladder)

    # --- Transport ---

    async def _get(self, url: str, params: dict[str, Any], model: type[ModelT]) -> ModelT:
        """GET ``url`` and decode the JSON body into ``model``.

        httpx percent-encodes the query parameters, including free-text terms.
        """
        try:
            resp = await self._http.get(url, params=params, timeout=self._timeout)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise InvalidRequest(f"Invalid URL: {url}") from exc
        except httpx.TimeoutException as exc:
            raise TransportFailure(f"Request timed out: {url}") from exc
        except httpx.TransportError as exc:
            raise TransportFailure(f"Request failed: {exc}") from exc
        except httpx.DecodingError as exc:
            raise DecodeFailure(f"Failed to decode response body from {url}: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportFailure(f"Request failed: {exc}") from exc

        if not resp.is_success:
            logger.warning("remote_http_error status=%d url=%s", resp.status_code, url)
            raise HTTPStatusFailure(resp.status_code, url)

        try:
            return model.model_validate_json(resp.content)
        except ValidationError as exc:
            raise DecodeFailure(
                f"Failed to decode response from {url}: {exc.error_count()} error(s)"
            ) from exc


def _require_id(value: str, name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidRequest(f"{name} must not be empty")
    if "/" in value or "?" in value or "#" in value:
        raise InvalidRequest(f"{name} contains characters not allowed in a path: {value!r}")
    return value
