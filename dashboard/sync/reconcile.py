"""
Reconciliation of the live and historical job sources into one snapshot.
Live records win on id conflicts; the merged set is ordered newest first by created_at.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from dashboard.client.adapter import JobSourceClient
from dashboard.core.errors import ReconciliationError, TransportError
from dashboard.models.job import Job

logger = logging.getLogger(__name__)


def merge_jobs(live: Iterable[Job], historical: Iterable[Job]) -> List[Job]:
    """Merge two job collections by id, live first, then sort by created_at descending.
    Historical records are only used for ids the live side does not have. Equal created_at keeps insertion order (sorted() is stable)."""
    merged: Dict[str, Job] = {}
    for job in live:
        merged[job.id] = job
    for job in historical:
        if job.id not in merged:
            merged[job.id] = job
    return sorted(merged.values(), key=lambda j: j.created_at, reverse=True)


@dataclass(frozen=True)
class JobSnapshot:
    """A complete reconciled job set. Replaced wholesale on every refresh, never edited.
    Why available: Readers (stats, table, export) always see one consistent cycle's data."""

    jobs: Tuple[Job, ...] = ()
    by_id: Mapping[str, Job] = field(default_factory=lambda: MappingProxyType({}))
    fetched_at: Optional[datetime] = None
    live_count: int = 0
    historical_count: int = 0

    @classmethod
    def build(
        cls,
        jobs: Iterable[Job],
        fetched_at: Optional[datetime] = None,
        live_count: int = 0,
        historical_count: int = 0,
    ) -> "JobSnapshot":
        ordered = tuple(jobs)
        return cls(
            jobs=ordered,
            by_id=MappingProxyType({j.id: j for j in ordered}),
            fetched_at=fetched_at or datetime.now(timezone.utc),
            live_count=live_count,
            historical_count=historical_count,
        )

    @classmethod
    def empty(cls) -> "JobSnapshot":
        return cls()

    def __len__(self) -> int:
        return len(self.jobs)

    def get(self, job_id: str) -> Optional[Job]:
        return self.by_id.get(job_id)


async def reconcile(client: JobSourceClient) -> JobSnapshot:
    """Fetch both sources concurrently and merge them. Raises ReconciliationError if either fetch fails; no partial merge is returned."""
    t0 = time.perf_counter()
    live_result, historical_result = await asyncio.gather(
        client.fetch_live_jobs(),
        client.fetch_historical_jobs(),
        return_exceptions=True,
    )
    for outcome in (live_result, historical_result):
        if isinstance(outcome, TransportError):
            raise ReconciliationError(outcome) from outcome
        if isinstance(outcome, BaseException):
            raise outcome

    merged = merge_jobs(live_result, historical_result)
    snapshot = JobSnapshot.build(
        merged,
        live_count=len(live_result),
        historical_count=len(historical_result),
    )
    logger.info(
        "reconcile_done",
        extra={
            "live": snapshot.live_count,
            "historical": snapshot.historical_count,
            "merged": len(snapshot),
            "latency_ms": round((time.perf_counter() - t0) * 1000.0, 2),
        },
    )
    return snapshot


async def fetch_snapshot(base_url: Optional[str] = None) -> JobSnapshot:
    """Open a client, reconcile once and close it. Used where no long-lived event loop exists (Streamlit reruns)."""
    async with JobSourceClient(base_url=base_url) as client:
        return await reconcile(client)
