"""
Remote job source adapter: the four backend calls the dashboard makes.
No retries and no caching happen here; the refresh scheduler owns retry policy.
"""
import logging
from typing import Any, List, Optional

import httpx

from dashboard.core.config import settings
from dashboard.core.errors import TransportError
from dashboard.models.job import Job, parse_job, parse_jobs
from dashboard.models.schemas import JobSubmission
from dashboard.observability.hooks import EVENT_HOOKS

logger = logging.getLogger(__name__)

LIVE_JOBS_PATH = "/jobs"
HISTORICAL_JOBS_PATH = "/db/jobs"

DEFAULT_HEADERS = {"Accept": "application/json"}


def _error_detail(response: httpx.Response) -> str:
    """Best-effort message from an error body: the backend answers {"error": "..."} on failure."""
    try:
        body = response.json()
    except ValueError:
        return (response.text or "").strip()[:200]
    if isinstance(body, dict):
        for key in ("error", "detail", "message"):
            if body.get(key):
                return str(body[key])
    return ""


class JobSourceClient:
    """Async HTTP client for the job backend: live jobs, historical jobs, one job, and submission."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.job_api_base
        self.timeout = timeout or settings.request_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=DEFAULT_HEADERS,
            transport=transport,
            event_hooks=EVENT_HOOKS,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send one request and decode its JSON body. Raises TransportError on network failure, non-2xx status or invalid JSON."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            detail = _error_detail(response)
            message = f"{method} {path} failed" + (f": {detail}" if detail else "")
            raise TransportError(message, status_code=response.status_code, reason=response.reason_phrase)

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"{method} {path} returned invalid JSON",
                status_code=response.status_code,
                reason=response.reason_phrase,
            ) from e

    async def _fetch_list(self, path: str, source: str) -> List[Job]:
        data = await self._request("GET", path)
        if data is not None and not isinstance(data, list):
            raise TransportError(f"GET {path} returned {type(data).__name__}, expected a JSON array")
        jobs = parse_jobs(data, source=source)
        logger.debug("jobs_fetched", extra={"source": source, "count": len(jobs)})
        return jobs

    async def fetch_live_jobs(self) -> List[Job]:
        """GET /jobs: jobs the backend still holds in memory."""
        return await self._fetch_list(LIVE_JOBS_PATH, "live")

    async def fetch_historical_jobs(self) -> List[Job]:
        """GET /db/jobs: jobs archived to the backend database."""
        return await self._fetch_list(HISTORICAL_JOBS_PATH, "historical")

    async def fetch_job(self, job_id: str) -> Job:
        """GET /jobs/{id}. A missing job surfaces as TransportError with status_code 404."""
        data = await self._request("GET", f"{LIVE_JOBS_PATH}/{job_id}")
        try:
            return parse_job(data)
        except ValueError as e:
            raise TransportError(f"GET {LIVE_JOBS_PATH}/{job_id} returned a malformed job") from e

    async def submit_job(self, submission: JobSubmission) -> Job:
        """POST /jobs. Returns the created job as echoed by the backend (id, Pending status, created_at)."""
        data = await self._request("POST", LIVE_JOBS_PATH, json=submission.model_dump(mode="json"))
        try:
            job = parse_job(data)
        except ValueError as e:
            raise TransportError(f"POST {LIVE_JOBS_PATH} returned a malformed job") from e
        logger.info("job_submitted", extra={"job_id": job.id, "job_type": job.type})
        return job
