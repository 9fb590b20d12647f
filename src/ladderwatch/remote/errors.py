"""Errors raised by the remote fetch client.

Every failure of a remote read surfaces as a subclass of ``FetchError`` so the
orchestrator can catch one type per key. ``str(exc)`` is the human-readable
message that ends up in ``CacheState.last_error``.
"""

from __future__ import annotations


class FetchError(Exception):
    """Base class for remote read failures."""


class InvalidRequest(FetchError):
    """The request could not be built (empty id, malformed URL)."""


class TransportFailure(FetchError):
    """Connection error or timeout before a response arrived."""


class HTTPStatusFailure(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str = "") -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP error {status_code}")


class DecodeFailure(FetchError):
    """The body was not JSON or did not match the expected shape."""


class NotYetAvailable(Exception):
    """Season or team data for a club has not been resolved yet.

    A transient state, not a fetch failure: the club may have no seasons
    published, or the first load has not finished.
    """

    def __init__(self, org_id: str) -> None:
        self.org_id = org_id
        super().__init__(f"No season available yet for club {org_id}")
