"""
Aggregate statistics over a reconciled job set: counts per status, thread demand and recent latency.
Pure functions, no I/O; recomputed on every refresh cycle.
"""
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from dashboard.core.config import settings
from dashboard.models.job import STATUS_ORDER, Job, JobStatus
from dashboard.models.schemas import JobStats

NO_DATA = "No data"


def _mean(values: List[float]) -> Optional[float]:
    """Mean of values, or None for an empty list (never 0 or NaN)."""
    if not values:
        return None
    return sum(values) / len(values)


def compute_job_stats(
    jobs: Iterable[Job],
    now: Optional[datetime] = None,
    window_minutes: Optional[int] = None,
) -> JobStats:
    """Compute dashboard stats: total and per-status counts, in-flight count, total and active thread demand, and average completion/queue latency of jobs completed within the recent window.
    Only Running jobs count toward active thread demand; Pending jobs have not claimed threads yet.
    Why available: Feeds the stat cards and analytics page from the same snapshot the table shows."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    window_minutes = window_minutes or settings.completion_window_minutes
    cutoff = now - timedelta(minutes=window_minutes)

    counts: Counter = Counter()
    total = 0
    finished = 0
    total_threads = 0
    active_threads = 0
    completion_ms: List[float] = []
    queue_ms: List[float] = []

    for job in jobs:
        total += 1
        counts[job.status] += 1
        if job.is_terminal:
            finished += 1
        total_threads += job.thread_demand
        if job.status == JobStatus.RUNNING:
            active_threads += job.thread_demand
        if job.status != JobStatus.COMPLETED or job.completed_at is None:
            continue
        if job.completed_at < cutoff:
            continue
        execution = job.execution_ms
        if execution is None:
            continue
        completion_ms.append(execution)
        queued = job.queue_ms
        if queued is not None:
            queue_ms.append(queued)

    return JobStats(
        total=total,
        by_status={s.value: counts[s] for s in STATUS_ORDER},
        in_flight=counts[JobStatus.PENDING] + counts[JobStatus.RUNNING],
        finished=finished,
        total_thread_demand=total_threads,
        active_thread_demand=active_threads,
        average_completion_ms=_mean(completion_ms),
        average_queue_ms=_mean(queue_ms),
        completion_samples=len(completion_ms),
        window_minutes=window_minutes,
        computed_at=now,
    )


def percent_of_total(count: int, total: int) -> float:
    """Share of total as a percentage. The denominator is clamped to 1 so an empty set gives 0.0, not NaN."""
    return 100.0 * count / max(total, 1)


def status_breakdown(stats: JobStats) -> List[Dict[str, Any]]:
    """Per-status rows (status, count, percent) in lifecycle order. Used by the analytics page."""
    return [
        {
            "status": status.value,
            "count": stats.count(status),
            "percent": percent_of_total(stats.count(status), stats.total),
        }
        for status in STATUS_ORDER
    ]


def format_duration_ms(ms: Optional[float]) -> str:
    """Format a latency: "No data" for None, "850 ms" under a second, "12.3 s" under a minute, "M:SS" above."""
    if ms is None:
        return NO_DATA
    if ms < 0:
        ms = 0
    if ms < 1000:
        return f"{ms:.0f} ms"
    seconds = ms / 1000.0
    if seconds < 60:
        return f"{seconds:.1f} s"
    whole = int(seconds)
    m = whole // 60
    s = whole % 60
    return f"{m}:{s:02d}"


def format_stats_overview(stats: JobStats) -> str:
    """One-line summary for captions: totals, active threads and average completion."""
    parts = [f"{stats.total} jobs"]
    parts.append(f"{stats.in_flight} in flight")
    parts.append(f"{stats.active_thread_demand} active threads")
    avg = format_duration_ms(stats.average_completion_ms)
    parts.append(f"avg completion ({stats.window_minutes} min): {avg}")
    return " · ".join(parts)
