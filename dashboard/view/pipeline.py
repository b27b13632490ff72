"""
Table pipeline: filter -> sort -> paginate, or filter -> sort -> window once the result set passes the
virtualization threshold. Pure functions over a snapshot's jobs and a ViewState.
"""
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from dashboard.core.config import settings
from dashboard.models.job import Job
from dashboard.view.state import ALL_STATUSES, SORT_COLUMNS, ViewState
from dashboard.view.virtual import VirtualWindow, compute_window, row_height

MODE_PAGINATED = "paginated"
MODE_VIRTUALIZED = "virtualized"


def _contains_in_order(needle: str, hay: str) -> bool:
    it = iter(hay)
    return all(ch in it for ch in needle)


def matches_search(job: Job, needle: str) -> bool:
    """Case-insensitive substring match of needle against id, type or the stringified result.
    The short type names also match when the needle's characters occur in order ("img" finds "resize_image")."""
    needle = needle.lower()
    if needle in job.id.lower() or needle in job.result_text().lower():
        return True
    job_type = job.type.lower()
    return needle in job_type or _contains_in_order(needle, job_type)


def filter_jobs(jobs: Iterable[Job], status_filter: str = ALL_STATUSES, search_text: str = "") -> List[Job]:
    needle = (search_text or "").strip()
    out = []
    for job in jobs:
        if status_filter != ALL_STATUSES and job.status.value != status_filter:
            continue
        if needle and not matches_search(job, needle):
            continue
        out.append(job)
    return out


_SORT_KEYS: dict = {
    "created_at": lambda j: j.created_at.timestamp(),
    "priority": lambda j: j.priority,
    "status": lambda j: j.status.value,
    "type": lambda j: j.type,
}


def sort_key_for(column: str) -> Callable[[Job], object]:
    if column not in SORT_COLUMNS:
        raise ValueError(f"unknown sort column: {column}")
    return _SORT_KEYS[column]


def sort_jobs(jobs: Iterable[Job], column: str, descending: bool = False) -> List[Job]:
    """Stable sort; jobs with equal keys keep their input order in both directions."""
    return sorted(jobs, key=sort_key_for(column), reverse=descending)


def page_count(total: int, page_size: int) -> int:
    """ceil(total / page_size), at least 1 so an empty table still has a page to show."""
    if page_size <= 0:
        raise ValueError("page_size must be > 0")
    return max(1, math.ceil(total / page_size))


@dataclass(frozen=True)
class Page:
    items: List[Job]
    number: int
    total_pages: int
    total_count: int
    page_size: int

    @property
    def has_prev(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages

    @property
    def start_index(self) -> int:
        """1-based position of the first row on this page (0 for an empty table)."""
        if not self.items:
            return 0
        return (self.number - 1) * self.page_size + 1

    @property
    def end_index(self) -> int:
        if not self.items:
            return 0
        return self.start_index + len(self.items) - 1


def paginate(jobs: Sequence[Job], page: int, page_size: int) -> Page:
    """Slice one page. The requested page is clamped to [1, total_pages]."""
    total_pages = page_count(len(jobs), page_size)
    number = min(max(1, page), total_pages)
    start = (number - 1) * page_size
    return Page(
        items=list(jobs[start:start + page_size]),
        number=number,
        total_pages=total_pages,
        total_count=len(jobs),
        page_size=page_size,
    )


@dataclass(frozen=True)
class TableView:
    """Everything the table renders for one pass of the pipeline.
    rows is the filtered and sorted set before pagination; export uses it."""

    rows: List[Job]
    mode: str
    page: Optional[Page] = None
    window: Optional[VirtualWindow] = None
    expanded: Optional[Job] = None

    @property
    def visible_rows(self) -> List[Job]:
        if self.mode == MODE_VIRTUALIZED and self.window is not None:
            return self.rows[self.window.start:self.window.end]
        return self.page.items if self.page is not None else []

    @property
    def interactive(self) -> bool:
        """Row expansion and per-row copy are only offered in paginated mode."""
        return self.mode == MODE_PAGINATED


def build_table(
    jobs: Iterable[Job],
    state: ViewState,
    threshold: Optional[int] = None,
    viewport_px: Optional[int] = None,
) -> TableView:
    """Run the full pipeline for the current state. Does not modify state; callers copy back page.number if they want the clamp to stick."""
    threshold = threshold or settings.virtualize_threshold
    viewport_px = viewport_px or settings.table_viewport_px

    rows = filter_jobs(jobs, state.status_filter, state.search_text)
    rows = sort_jobs(rows, state.sort_key, state.sort_desc)

    if len(rows) > threshold:
        window = compute_window(len(rows), state.scroll_offset_px, viewport_px, row_height(state.compact))
        return TableView(rows=rows, mode=MODE_VIRTUALIZED, window=window)

    page = paginate(rows, state.page, state.page_size)
    expanded = None
    if state.expanded_id is not None:
        expanded = next((j for j in page.items if j.id == state.expanded_id), None)
    return TableView(rows=rows, mode=MODE_PAGINATED, page=page, expanded=expanded)
