"""Debounced club search for search-as-you-type inputs.

Each keystroke calls ``submit(term)``. The previous pending lookup is
cancelled and a new one fires after a quiet period. Only the most recently
submitted lookup may write ``results``; a superseded or cancelled lookup
drops whatever it fetched.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

from ladderwatch.models.club import ClubSearchResult
from ladderwatch.remote.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


class ClubSearcher(Protocol):
    async def search_clubs(self, term: str) -> list[ClubSearchResult]: ...


class ClubSearchDebouncer:
    def __init__(self, client: ClubSearcher, delay: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        self._client = client
        self._delay = delay
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self.term = ""
        self.results: list[ClubSearchResult] = []
        self.error: str | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, term: str) -> asyncio.Task[None] | None:
        """Schedule a lookup for ``term``, replacing any pending one.

        A blank term clears the results immediately and schedules nothing.
        """
        self.cancel()
        term = term.strip()
        if not term:
            self.term = ""
            self.results = []
            self.error = None
            return None
        generation = self._generation
        self._task = asyncio.create_task(self._lookup(term, generation), name=f"club-search:{term}")
        return self._task

    def cancel(self) -> None:
        """Cancel the pending lookup, if any. Its result will never be applied."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the pending lookup to finish (or be cancelled)."""
        task = self._task
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _lookup(self, term: str, generation: int) -> None:
        await asyncio.sleep(self._delay)
        try:
            results = await self._client.search_clubs(term)
        except FetchError as exc:
            if generation == self._generation:
                self.error = str(exc)
                logger.warning("club_search_failed term=%r error=%s", term, exc)
            return
        if generation != self._generation:
            logger.debug("club_search_superseded term=%r", term)
            return
        self.term = term
        self.results = results
        self.error = None
        logger.debug("club_search_done term=%r hits=%d", term, len(results))
