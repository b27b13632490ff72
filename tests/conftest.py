import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Ensure repo root is on sys.path so `import dashboard...` works in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dashboard.client.adapter import JobSourceClient  # noqa: E402
from dashboard.models.job import Job  # noqa: E402

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def pretty_json(obj) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False, sort_keys=True, default=str)


def _iso(offset_s: Optional[float]) -> Optional[str]:
    if offset_s is None:
        return None
    return (BASE_TIME + timedelta(seconds=offset_s)).isoformat()


def job_dict(
    job_id: str,
    status: str = "Completed",
    job_type: str = "add_numbers",
    priority: int = 1,
    thread_demand: int = 1,
    created: float = 0,
    started: Optional[float] = None,
    completed: Optional[float] = None,
    payload: Any = None,
    result: Any = None,
) -> Dict[str, Any]:
    """Backend-shaped job record; timestamps are seconds relative to BASE_TIME."""
    return {
        "id": job_id,
        "type": job_type,
        "status": status,
        "priority": priority,
        "thread_demand": thread_demand,
        "payload": payload if payload is not None else {"x": 1, "y": 2},
        "result": result,
        "created_at": _iso(created),
        "started_at": _iso(started),
        "completed_at": _iso(completed),
    }


@pytest.fixture
def make_job():
    def _make(job_id: str, **kwargs) -> Job:
        return Job.model_validate(job_dict(job_id, **kwargs))
    return _make


class FakeBackend:
    """In-memory stand-in for the scheduler API: GET /jobs, GET /db/jobs, GET /jobs/{id}, POST /jobs."""

    def __init__(self):
        self.live: Any = []
        self.historical: Any = []
        self.submitted: List[dict] = []
        self.requests: List[dict] = []
        self.failures: Dict[Tuple[str, str], Tuple[int, str]] = {}
        self.app = self._build_app()

    def fail(self, method: str, path: str, status_code: int = 500, error: str = "database unavailable") -> None:
        self.failures[(method, path)] = (status_code, error)

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        backend = self

        @app.middleware("http")
        async def record_and_fail(request: Request, call_next):
            backend.requests.append(
                {
                    "method": request.method,
                    "path": request.url.path,
                    "request_id": request.headers.get("x-request-id"),
                }
            )
            failure = backend.failures.get((request.method, request.url.path))
            if failure:
                return JSONResponse(status_code=failure[0], content={"error": failure[1]})
            return await call_next(request)

        @app.get("/jobs")
        def live_jobs():
            return backend.live

        @app.get("/db/jobs")
        def historical_jobs():
            return backend.historical

        @app.get("/jobs/{job_id}")
        def get_job(job_id: str):
            for record in list(backend.live or []) + list(backend.historical or []):
                if record["id"] == job_id:
                    return record
            return JSONResponse(status_code=404, content={"error": "job not found"})

        @app.post("/jobs")
        async def submit_job(request: Request):
            body = await request.json()
            backend.submitted.append(body)
            created = dict(
                body,
                id=f"job-{len(backend.submitted)}",
                status="Pending",
                created_at=BASE_TIME.isoformat(),
            )
            return JSONResponse(status_code=202, content=created)

        return app


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_client(backend):
    """Factory for an adapter wired to the fake backend. Build it inside the coroutine that uses it."""
    def _make() -> JobSourceClient:
        return JobSourceClient(
            base_url="http://testserver",
            transport=httpx.ASGITransport(app=backend.app),
        )
    return _make


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Attach request/response payloads into pytest-html report.

    In tests, store payloads like:
      item._api_logs = [{"title": "...", "request": ..., "response": ...}, ...]
    """
    outcome = yield
    rep = outcome.get_result()

    if rep.when != "call":
        return

    api_logs = getattr(item, "_api_logs", None)
    if not api_logs:
        return

    extras = getattr(rep, "extra", [])

    # Only attach if pytest-html is installed/enabled
    try:
        from pytest_html import extras as html_extras
    except ImportError:
        rep.extra = extras
        return

    for entry in api_logs:
        title = entry.get("title", "API Call")
        req = entry.get("request", {})
        res = entry.get("response", {})

        html = f"""
        <div style="font-family: ui-monospace, SFMono-Regular, Menlo, Monaco, Consolas, monospace;">
          <h4 style="margin:8px 0;">{title}</h4>
          <details style="margin:6px 0;">
            <summary><b>Request</b></summary>
            <pre style="background:#0b1020;color:#cfe3ff;padding:10px;border-radius:8px;overflow:auto;">{pretty_json(req)}</pre>
          </details>
          <details style="margin:6px 0;">
            <summary><b>Response</b></summary>
            <pre style="background:#0b1020;color:#cfe3ff;padding:10px;border-radius:8px;overflow:auto;">{pretty_json(res)}</pre>
          </details>
        </div>
        """
        extras.append(html_extras.html(html))

    rep.extra = extras
