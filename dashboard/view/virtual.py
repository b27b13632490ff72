"""Windowed rendering math for large result sets: which rows of a fixed-row-height list are in view."""
import math
from dataclasses import dataclass

from dashboard.core.config import settings

DEFAULT_OVERSCAN = 5


@dataclass(frozen=True)
class VirtualWindow:
    start: int
    end: int  # exclusive
    total_rows: int
    row_height_px: int
    top_pad_px: int
    bottom_pad_px: int
    scroll_offset_px: int

    @property
    def count(self) -> int:
        return self.end - self.start


def row_height(compact: bool) -> int:
    return settings.compact_row_height_px if compact else settings.row_height_px


def max_scroll_offset(total_rows: int, viewport_px: int, row_height_px: int) -> int:
    return max(0, total_rows * row_height_px - viewport_px)


def compute_window(
    total_rows: int,
    scroll_offset_px: int,
    viewport_px: int,
    row_height_px: int,
    overscan: int = DEFAULT_OVERSCAN,
) -> VirtualWindow:
    """Rows to materialize for the given scroll position, plus the padding that stands in for the rest.
    The offset is clamped to the scrollable range; overscan rows are added on both sides."""
    if row_height_px <= 0:
        raise ValueError("row_height_px must be > 0")
    if viewport_px <= 0:
        raise ValueError("viewport_px must be > 0")
    total_rows = max(0, total_rows)
    offset = min(max(0, scroll_offset_px), max_scroll_offset(total_rows, viewport_px, row_height_px))

    first_visible = offset // row_height_px
    visible_count = math.ceil(viewport_px / row_height_px)
    start = max(0, first_visible - overscan)
    end = min(total_rows, first_visible + visible_count + overscan)
    start = min(start, end)

    return VirtualWindow(
        start=start,
        end=end,
        total_rows=total_rows,
        row_height_px=row_height_px,
        top_pad_px=start * row_height_px,
        bottom_pad_px=(total_rows - end) * row_height_px,
        scroll_offset_px=offset,
    )
