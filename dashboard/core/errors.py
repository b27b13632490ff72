"""Error taxonomy shared by the adapter, reconciliation and refresh layers."""
from typing import Optional


class DashboardError(Exception):
    """Base class for every error the dashboard core raises."""


class TransportError(DashboardError):
    """Network failure or non-2xx response from the job backend.
    status_code is None when the backend could not be reached at all."""

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.reason = reason

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        reason = f" {self.reason}" if self.reason else ""
        return f"{self.message} ({self.status_code}{reason})"


class ReconciliationError(DashboardError):
    """One or both job fetches failed, so no merged snapshot was produced.
    Why available: Lets the refresh layer tell a failed cycle apart from a programming error while keeping the transport cause."""

    def __init__(self, cause: TransportError):
        super().__init__(f"Job reconciliation failed: {cause}")
        self.cause = cause


class ValidationError(DashboardError):
    """Reserved for job payload validation. The submission path is a passthrough and never raises it."""


def describe_error(exc: BaseException) -> str:
    """One-line operator-facing text for an error banner."""
    if isinstance(exc, ReconciliationError):
        exc = exc.cause
    if isinstance(exc, TransportError):
        if exc.status_code is None:
            return f"Backend unreachable: {exc.message}"
        return f"Backend returned {exc.status_code}{' ' + exc.reason if exc.reason else ''}: {exc.message}"
    return "Something went wrong."
