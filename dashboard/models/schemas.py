from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from dashboard.models.job import JobStatus, JobType


class JobSubmission(BaseModel):
    """Request body for POST /jobs. Why available: The submission form hands this to the adapter unchanged; no bounds are enforced here."""

    type: JobType
    priority: int = Field(1, description="Operator-assigned priority; the form offers 1-10")
    thread_demand: int = Field(1, description="Threads the job claims while running; the form offers 1-8")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Kind-specific payload, see PAYLOAD_MODELS")


class JobStats(BaseModel):
    """Aggregate statistics over one reconciled snapshot. Why available: Stat cards and the analytics page render from this shape."""

    total: int = Field(0, ge=0)
    by_status: Dict[str, int] = Field(default_factory=lambda: {s.value: 0 for s in JobStatus})
    in_flight: int = Field(0, ge=0, description="Pending + Running")
    finished: int = Field(0, ge=0, description="Completed + Failed")
    total_thread_demand: int = Field(0, ge=0)
    active_thread_demand: int = Field(0, ge=0, description="Thread demand of Running jobs only")
    average_completion_ms: Optional[float] = Field(None, description="Mean run time of recently completed jobs; None means no data")
    average_queue_ms: Optional[float] = Field(None, description="Mean wait before start over the same jobs")
    completion_samples: int = Field(0, ge=0)
    window_minutes: int = Field(..., gt=0)
    computed_at: datetime

    def count(self, status: JobStatus) -> int:
        return self.by_status.get(status.value, 0)
