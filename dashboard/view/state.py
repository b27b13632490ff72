"""
Operator-controlled table state: search, status filter, sort, page, expanded row and density.
It is independent of the job data: refresh cycles replace the snapshot but never touch this object.
"""
from dataclasses import dataclass, field
from typing import Optional

from dashboard.core.config import settings
from dashboard.models.job import STATUS_ORDER
from dashboard.view.debounce import Debouncer

ALL_STATUSES = "All"
STATUS_FILTERS = (ALL_STATUSES,) + tuple(s.value for s in STATUS_ORDER)
SORT_COLUMNS = ("created_at", "priority", "status", "type")


def _search_debouncer() -> Debouncer:
    return Debouncer(settings.search_debounce_ms / 1000.0)


@dataclass
class ViewState:
    """Table view state for one dashboard session.
    Changing a filter criterion (applied search text, status filter, page size) resets page to 1; sorting does not."""

    search_raw: str = ""
    search_text: str = ""  # debounced value the pipeline filters on
    status_filter: str = ALL_STATUSES
    sort_key: str = "created_at"
    sort_desc: bool = True
    page_size: int = field(default_factory=lambda: settings.default_page_size)
    page: int = 1
    expanded_id: Optional[str] = None
    compact: bool = False
    scroll_offset_px: int = 0
    debouncer: Debouncer = field(default_factory=_search_debouncer, repr=False, compare=False)

    def type_search(self, text: str) -> None:
        """Record raw search input. The filter only changes once flush_search releases it."""
        self.search_raw = text or ""
        self.debouncer.push(self.search_raw)

    def flush_search(self, force: bool = False) -> bool:
        """Apply the debounced search text if the quiet period has passed (or force). Returns True when the applied text changed."""
        value = self.debouncer.flush() if force else self.debouncer.poll()
        if value is None:
            return False
        value = value.strip()
        if value == self.search_text:
            return False
        self.search_text = value
        self._reset_position()
        return True

    def set_status_filter(self, status: str) -> None:
        if status not in STATUS_FILTERS:
            raise ValueError(f"unknown status filter: {status}")
        if status == self.status_filter:
            return
        self.status_filter = status
        self._reset_position()

    def set_page_size(self, size: int) -> None:
        if size <= 0:
            raise ValueError("page size must be > 0")
        if size == self.page_size:
            return
        self.page_size = size
        self._reset_position()

    def toggle_sort(self, column: str) -> None:
        """Sort by column. Choosing the active column flips direction; a new column starts ascending."""
        if column not in SORT_COLUMNS:
            raise ValueError(f"unknown sort column: {column}")
        if column == self.sort_key:
            self.sort_desc = not self.sort_desc
        else:
            self.sort_key = column
            self.sort_desc = False

    def go_to_page(self, page: int) -> None:
        # upper bound depends on the row count; paginate() clamps it
        self.page = max(1, int(page))

    def toggle_expanded(self, job_id: str) -> None:
        self.expanded_id = None if self.expanded_id == job_id else job_id

    def set_compact(self, compact: bool) -> None:
        self.compact = bool(compact)

    def scroll_to(self, offset_px: int) -> None:
        self.scroll_offset_px = max(0, int(offset_px))

    def _reset_position(self) -> None:
        self.page = 1
        self.scroll_offset_px = 0
