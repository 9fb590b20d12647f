"""In-memory async event bus for cache change notifications.

The orchestrator publishes an event after every successful map mutation (and
after every recorded error). Presentation code subscribes instead of polling.
Each subscriber gets its own bounded asyncio.Queue. Events are fire-and-forget:
with no subscribers they are dropped, and a full queue drops the newest event
for that subscriber only.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)

TEAMS_UPDATED = "cache.teams_updated"
SEASON_SELECTED = "cache.season_selected"
LADDER_UPDATED = "cache.ladder_updated"
LADDER_EVICTED = "cache.ladder_evicted"
CLUB_FORGOTTEN = "cache.club_forgotten"
CACHE_ERROR = "cache.error"
REFRESH_COMPLETED = "cache.refresh_completed"

Event = dict[str, Any]


class EventBus:
    """Async pub/sub keyed by event type, with wildcard (``None``) subscriptions.

    Usage:
        bus = EventBus()

        async with bus.subscribe(LADDER_UPDATED) as sub:
            event = await sub.get(timeout=5.0)

        bus.publish(LADDER_UPDATED, {"grade_id": "g-1"})
    """

    def __init__(self) -> None:
        self._subscribers: dict[str | None, list[asyncio.Queue[Event]]] = defaultdict(list)

    def publish(self, event_type: str, data: dict[str, Any]) -> int:
        """Deliver to typed and wildcard subscribers. Returns the delivery count.

        Never awaits, so a publish right after a map assignment cannot let
        another task run in between.
        """
        envelope: Event = {"type": event_type, "data": data}
        count = 0
        for queue in (*self._subscribers.get(event_type, ()), *self._subscribers.get(None, ())):
            try:
                queue.put_nowait(envelope)
                count += 1
            except asyncio.QueueFull:
                logger.warning("event_dropped type=%s reason=slow_subscriber", event_type)
        return count

    def subscribe(self, event_type: str | None = None, max_size: int = 100) -> Subscription:
        """Subscription to one event type, or to everything when ``event_type`` is None.

        Use as an async context manager so the queue is unregistered on exit.
        """
        return Subscription(self, asyncio.Queue(maxsize=max_size), event_type)

    def _register(self, queue: asyncio.Queue[Event], event_type: str | None) -> None:
        self._subscribers[event_type].append(queue)

    def _unregister(self, queue: asyncio.Queue[Event], event_type: str | None) -> None:
        with contextlib.suppress(ValueError):
            self._subscribers[event_type].remove(queue)

    @property
    def subscriber_count(self) -> int:
        return sum(len(subs) for subs in self._subscribers.values())


class Subscription:
    """A listener's queue on the bus.

    Registered only inside ``async with``; iterate it with ``async for`` to
    consume change events until the block exits.
    """

    def __init__(self, bus: EventBus, queue: asyncio.Queue[Event], event_type: str | None) -> None:
        self._bus = bus
        self._queue = queue
        self.event_type = event_type
        self._registered = False

    async def __aenter__(self) -> Subscription:
        self._bus._register(self._queue, self.event_type)
        self._registered = True
        return self

    async def __aexit__(self, *args: object) -> None:
        self._registered = False
        self._bus._unregister(self._queue, self.event_type)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> Event:
        if not self._registered:
            raise StopAsyncIteration
        return await self._queue.get()

    async def get(self, timeout: float | None = None) -> Event | None:
        """The next event, or None once ``timeout`` seconds pass without one."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except TimeoutError:
            return None

    def drain(self) -> list[Event]:
        """Pop every queued event without waiting."""
        drained: list[Event] = []
        while not self._queue.empty():
            drained.append(self._queue.get_nowait())
        return drained
