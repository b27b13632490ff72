"""
Job record model: lifecycle states, job kinds, per-kind payload shapes and tolerant parsing of backend records.
The backend may send records that break the timestamp invariants; parsing keeps them and the derived properties return None instead of raising.
"""
import json
import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"


STATUS_ORDER = (JobStatus.PENDING, JobStatus.RUNNING, JobStatus.COMPLETED, JobStatus.FAILED)
TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


class JobType(str, Enum):
    ADD_NUMBERS = "add_numbers"
    REVERSE_STRING = "reverse_string"
    RESIZE_IMAGE = "resize_image"
    LARGE_ARRAY_SUM = "large_array_sum"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class AddNumbersPayload(BaseModel):
    x: int = 0
    y: int = 0


class ReverseStringPayload(BaseModel):
    text: str = ""


class ResizeImagePayload(BaseModel):
    url: str = ""
    width: int = 800
    height: int = 600


class LargeArraySumPayload(BaseModel):
    array: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])


PAYLOAD_MODELS: Dict[JobType, Type[BaseModel]] = {
    JobType.ADD_NUMBERS: AddNumbersPayload,
    JobType.REVERSE_STRING: ReverseStringPayload,
    JobType.RESIZE_IMAGE: ResizeImagePayload,
    JobType.LARGE_ARRAY_SUM: LargeArraySumPayload,
}

# Go encodes time.Time with nanoseconds; Python datetimes stop at microseconds.
_EXTRA_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def _normalize_timestamp(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        return _EXTRA_FRACTION_RE.sub(r"\1", value)
    return value


def _is_zero_time(value: datetime) -> bool:
    # Go's zero time.Time (0001-01-01T00:00:00Z) stands for "never set"
    return value.year <= 1


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _millis_between(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    if start is None or end is None:
        return None
    delta = (end - start).total_seconds() * 1000.0
    if delta < 0:
        return None
    return delta


class Job(BaseModel):
    """One job as reported by either backend source. Immutable once parsed.
    Why available: Canonical record the reconciliation, aggregation and view layers all read."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Opaque id, stable across live and historical sources")
    type: str = Field(..., description="Job kind, normally one of JobType")
    status: JobStatus
    priority: int = 0
    thread_demand: int = Field(1, description="Threads claimed while Running")
    payload: Any = None
    result: Any = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @field_validator("id", "type", mode="before")
    @classmethod
    def coerce_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("thread_demand", mode="before")
    @classmethod
    def at_least_one_thread(cls, v):
        if v is None:
            return 1
        try:
            return max(1, int(v))
        except (TypeError, ValueError):
            return 1

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, v):
        return 0 if v is None else v

    @field_validator("created_at", "started_at", "completed_at", mode="before")
    @classmethod
    def normalize_timestamp(cls, v):
        return _normalize_timestamp(v)

    @field_validator("created_at")
    @classmethod
    def created_at_required(cls, v: datetime) -> datetime:
        if _is_zero_time(v):
            raise ValueError("created_at is the zero time")
        return _as_utc(v)

    @field_validator("started_at", "completed_at")
    @classmethod
    def optional_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None or _is_zero_time(v):
            return None
        return _as_utc(v)

    @property
    def job_type(self) -> Optional[JobType]:
        try:
            return JobType(self.type)
        except ValueError:
            return None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def execution_ms(self) -> Optional[float]:
        """Milliseconds from start to completion, or None when either end is missing or out of order."""
        return _millis_between(self.started_at, self.completed_at)

    @property
    def queue_ms(self) -> Optional[float]:
        """Milliseconds spent waiting between creation and start."""
        return _millis_between(self.created_at, self.started_at)

    def typed_payload(self) -> Optional[BaseModel]:
        """Return the payload as its per-kind model, or None when the kind is unknown or the payload does not fit.
        Why available: The payload is opaque to the core, but the UI renders known kinds with field labels."""
        job_type = self.job_type
        if job_type is None or not isinstance(self.payload, dict):
            return None
        try:
            return PAYLOAD_MODELS[job_type].model_validate(self.payload)
        except ValidationError:
            return None

    def result_text(self) -> str:
        """Stringified result used by search; empty when no result is present."""
        if self.result is None:
            return ""
        if isinstance(self.result, str):
            return self.result
        return json.dumps(self.result, default=str, ensure_ascii=False)


def parse_job(raw: Any) -> Job:
    return Job.model_validate(raw)


def parse_jobs(raw_items: Optional[Iterable[Any]], source: str = "backend") -> List[Job]:
    """Parse a backend job array, skipping malformed records with a warning. None (Go's nil slice) parses as empty.
    Why available: One bad record must not blank the dashboard; the rest of the collection is still usable."""
    jobs: List[Job] = []
    if raw_items is None:
        return jobs
    for index, raw in enumerate(raw_items):
        try:
            jobs.append(Job.model_validate(raw))
        except ValidationError as e:
            record_id = raw.get("id") if isinstance(raw, dict) else None
            logger.warning(
                "job_record_skipped",
                extra={"source": source, "index": index, "job_id": record_id, "errors": e.error_count()},
            )
    return jobs


def default_payload(job_type: JobType) -> Dict[str, Any]:
    """Initial payload for a kind, as the submission form first shows it."""
    return PAYLOAD_MODELS[job_type]().model_dump()


def parse_int_list(text: str) -> List[int]:
    """Parse a comma-separated list of integers, dropping entries that are not numbers ("1, x, 3" -> [1, 3])."""
    out: List[int] = []
    for part in (text or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            out.append(int(part))
        except ValueError:
            continue
    return out
