"""CSV export of the filtered job list: every field quoted, embedded quotes doubled."""
import csv
import io
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional

from dashboard.models.job import Job

EXPORT_COLUMNS = (
    "id",
    "type",
    "status",
    "priority",
    "thread_demand",
    "created_at",
    "started_at",
    "completed_at",
)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def export_row(job: Job) -> List[str]:
    return [_cell(getattr(job, column)) for column in EXPORT_COLUMNS]


def jobs_to_csv(jobs: Iterable[Job], include_header: bool = True) -> str:
    """Serialize jobs in EXPORT_COLUMNS order. Pass the filtered, pre-pagination rows so the file matches what the operator filtered."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, doublequote=True, lineterminator="\n")
    if include_header:
        writer.writerow(EXPORT_COLUMNS)
    for job in jobs:
        writer.writerow(export_row(job))
    return buf.getvalue()


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"jobs_export_{now:%Y%m%d_%H%M%S}.csv"
