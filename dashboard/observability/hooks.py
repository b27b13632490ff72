import logging
import time
import uuid

import httpx

logger = logging.getLogger(__name__)


async def tag_request(request: httpx.Request) -> None:
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.headers["x-request-id"] = rid
    request.extensions["dashboard.started_at"] = time.perf_counter()


async def log_response(response: httpx.Response) -> None:
    request = response.request
    started = request.extensions.get("dashboard.started_at")
    dur_ms = (time.perf_counter() - started) * 1000.0 if started is not None else 0.0
    # simple structured log line (JSON-ish)
    logger.info(
        '{"request_id":"%s","path":"%s","method":"%s","status":%d,"latency_ms":%.2f}',
        get_request_id(request),
        request.url.path,
        request.method,
        response.status_code,
        dur_ms,
    )


def get_request_id(request: httpx.Request) -> str:
    # tag_request sets this
    return request.headers.get("x-request-id", "unknown")


EVENT_HOOKS = {"request": [tag_request], "response": [log_response]}
