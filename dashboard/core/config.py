import os
from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

load_dotenv()


PAGE_SIZE_OPTIONS = (10, 25, 50, 100)


class Settings(BaseModel):
    """Dashboard settings loaded from environment: backend base address, HTTP timeout, refresh intervals, debounce, table sizing and the stats window.
    Why available: Single source of configuration so the feeds, view engine and UI agree on intervals and thresholds."""
    job_api_base: str = os.getenv("JOB_API_BASE", "http://localhost:8080")
    request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))
    job_refresh_seconds: float = float(os.getenv("JOB_REFRESH_SECONDS", "5"))
    analytics_refresh_seconds: float = float(os.getenv("ANALYTICS_REFRESH_SECONDS", "10"))
    refresh_max_backoff_seconds: float = float(os.getenv("REFRESH_MAX_BACKOFF_SECONDS", "60"))
    search_debounce_ms: int = int(os.getenv("SEARCH_DEBOUNCE_MS", "300"))
    virtualize_threshold: int = int(os.getenv("VIRTUALIZE_THRESHOLD", "200"))  # rows before windowed rendering
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    row_height_px: int = int(os.getenv("ROW_HEIGHT_PX", "44"))
    compact_row_height_px: int = int(os.getenv("COMPACT_ROW_HEIGHT_PX", "32"))
    table_viewport_px: int = int(os.getenv("TABLE_VIEWPORT_PX", "600"))
    completion_window_minutes: int = int(os.getenv("COMPLETION_WINDOW_MINUTES", "60"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @field_validator(
        "request_timeout_seconds",
        "job_refresh_seconds",
        "analytics_refresh_seconds",
        "refresh_max_backoff_seconds",
        "search_debounce_ms",
        "virtualize_threshold",
        "default_page_size",
        "row_height_px",
        "compact_row_height_px",
        "table_viewport_px",
        "completion_window_minutes",
    )
    @classmethod
    def must_be_positive(cls, v):
        """Ensure numeric tunables are positive. Prevents a zero interval or page size from env."""
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("job_api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")


settings = Settings()
