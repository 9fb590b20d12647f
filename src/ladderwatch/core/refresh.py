"""Periodic refresh of everything the orchestrator tracks.

A single APScheduler interval job drives ``CacheOrchestrator.refresh_all``.
The job has a fixed id, so ``start()`` always replaces rather than adds and
there is never more than one refresh timer.

If a cycle is still running when the next one is due, APScheduler skips the
late tick (``max_instances=1``, ``coalesce=True``). Overlap with manually
triggered refreshes is still safe because the orchestrator serializes writes
per key.
"""

from __future__ import annotations

import contextlib
import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ladderwatch.core.orchestrator import CacheOrchestrator

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "refresh_cycle"
DEFAULT_REFRESH_INTERVAL_SECONDS = 300


class RefreshScheduler:
    """Start/stop wrapper around the refresh job.

    ``start()`` and ``stop()`` are idempotent. ``shutdown()`` also stops the
    underlying scheduler and is called once at application exit.
    """

    def __init__(
        self,
        orchestrator: CacheOrchestrator,
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        if interval_seconds <= 0:
            msg = f"interval_seconds must be positive, got {interval_seconds}"
            raise ValueError(msg)
        self.orchestrator = orchestrator
        self.interval_seconds = interval_seconds
        self._scheduler = scheduler or AsyncIOScheduler()

    @property
    def is_running(self) -> bool:
        return self._scheduler.get_job(REFRESH_JOB_ID) is not None

    def start(self) -> None:
        """Arm the refresh timer, cancelling any timer already armed."""
        self.stop()
        if not self._scheduler.running:
            self._scheduler.start()
        self._scheduler.add_job(
            self.run_cycle,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=REFRESH_JOB_ID,
            name="Refresh tracked clubs and ladders",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info("refresh_scheduler_started interval=%ss", self.interval_seconds)

    def stop(self) -> None:
        """Cancel the refresh timer. Safe to call when nothing is armed."""
        with contextlib.suppress(JobLookupError):
            self._scheduler.remove_job(REFRESH_JOB_ID)
            logger.info("refresh_scheduler_stopped")

    def shutdown(self) -> None:
        self.stop()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    async def run_cycle(self) -> None:
        """One tick. Errors are logged, never propagated, so the timer keeps running."""
        try:
            await self.orchestrator.refresh_all()
        except Exception:
            logger.exception("refresh_cycle_failed")
