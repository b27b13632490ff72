"""
Per-view job data state. A feed owns the current snapshot and its stats; the view state (search, sort, page)
lives elsewhere, so a refresh only ever swaps data.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Optional

from dashboard.core.config import settings
from dashboard.core.errors import ReconciliationError, describe_error
from dashboard.refresh.scheduler import RefreshScheduler
from dashboard.stats.aggregate import compute_job_stats
from dashboard.sync.reconcile import JobSnapshot, fetch_snapshot

logger = logging.getLogger(__name__)

SnapshotSource = Callable[[], Awaitable[JobSnapshot]]


class JobFeed:
    """Last-known-good job data for one view.
    A failed cycle sets error and keeps the previous snapshot; a cycle that finishes after close() is discarded."""

    def __init__(
        self,
        source: SnapshotSource = fetch_snapshot,
        *,
        name: str = "jobs",
        window_minutes: Optional[int] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.name = name
        self.window_minutes = window_minutes or settings.completion_window_minutes
        self._source = source
        self._clock = clock
        self.snapshot = JobSnapshot.empty()
        self.stats = compute_job_stats((), now=clock(), window_minutes=self.window_minutes)
        self.error: Optional[str] = None
        self.last_error: Optional[BaseException] = None
        self.loading = True
        self.last_success_at: Optional[datetime] = None
        self.closed = False

    async def refresh(self) -> bool:
        """Run one reconcile cycle and publish it. Returns True when a new snapshot was published."""
        if self.closed:
            return False
        try:
            snapshot = await self._source()
        except ReconciliationError as e:
            if self.closed:
                logger.info("refresh_result_discarded", extra={"feed": self.name})
                return False
            logger.warning("refresh_failed", exc_info=True, extra={"feed": self.name})
            self.error = describe_error(e)
            self.last_error = e
            self.loading = False
            return False

        if self.closed:
            logger.info("refresh_result_discarded", extra={"feed": self.name})
            return False
        self._publish(snapshot)
        return True

    def _publish(self, snapshot: JobSnapshot) -> None:
        stats = compute_job_stats(snapshot.jobs, now=self._clock(), window_minutes=self.window_minutes)
        # no await between these assignments: readers never see snapshot and stats from different cycles
        self.snapshot = snapshot
        self.stats = stats
        self.error = None
        self.last_error = None
        self.loading = False
        self.last_success_at = snapshot.fetched_at

    def close(self) -> None:
        self.closed = True

    def scheduler(self, interval: float, max_backoff: Optional[float] = None) -> RefreshScheduler:
        return RefreshScheduler(
            self.refresh,
            interval,
            max_backoff=max_backoff if max_backoff is not None else settings.refresh_max_backoff_seconds,
            name=self.name,
        )


def jobs_feed(source: SnapshotSource = fetch_snapshot) -> JobFeed:
    """Feed behind the jobs table and stat cards."""
    return JobFeed(source, name="jobs")


def analytics_feed(source: SnapshotSource = fetch_snapshot) -> JobFeed:
    """Feed behind the analytics page; refreshed on its own, slower timer."""
    return JobFeed(source, name="analytics")


@asynccontextmanager
async def mounted(feed: JobFeed, interval: float, max_backoff: Optional[float] = None) -> AsyncIterator[RefreshScheduler]:
    """Arm a refresh timer for feed on entry; on exit close the feed and disarm the timer so nothing outlives the view."""
    scheduler = feed.scheduler(interval, max_backoff)
    scheduler.start()
    try:
        yield scheduler
    finally:
        feed.close()
        await scheduler.stop()
