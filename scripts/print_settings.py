#!/usr/bin/env python3
"""Print the effective dashboard settings (from env / .env). Run from repo root: python scripts/print_settings.py"""
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from dashboard.core.config import PAGE_SIZE_OPTIONS, settings


def main():
    """Print backend address, refresh cadence, table thresholds and the stats window."""
    print("Job dashboard settings")
    print("----------------------")
    print(f"  JOB_API_BASE                = {settings.job_api_base}")
    print(f"  REQUEST_TIMEOUT_SECONDS     = {settings.request_timeout_seconds}")
    print(f"  JOB_REFRESH_SECONDS         = {settings.job_refresh_seconds} (jobs table + stat cards)")
    print(f"  ANALYTICS_REFRESH_SECONDS   = {settings.analytics_refresh_seconds} (analytics page)")
    print(f"  REFRESH_MAX_BACKOFF_SECONDS = {settings.refresh_max_backoff_seconds} (cap while backend is failing)")
    print(f"  SEARCH_DEBOUNCE_MS          = {settings.search_debounce_ms}")
    print(f"  VIRTUALIZE_THRESHOLD        = {settings.virtualize_threshold} rows")
    print(f"  DEFAULT_PAGE_SIZE           = {settings.default_page_size} (options: {', '.join(map(str, PAGE_SIZE_OPTIONS))})")
    print(f"  ROW_HEIGHT_PX               = {settings.row_height_px} (compact: {settings.compact_row_height_px})")
    print(f"  COMPLETION_WINDOW_MINUTES   = {settings.completion_window_minutes}")


if __name__ == "__main__":
    main()
