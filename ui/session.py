# Per-session dashboard objects kept in st.session_state so they survive reruns and refreshes.
import asyncio
from typing import Any, Coroutine, Tuple

import streamlit as st

from dashboard.core.config import settings
from dashboard.refresh.feed import JobFeed, analytics_feed, jobs_feed
from dashboard.refresh.scheduler import RefreshScheduler
from dashboard.view.state import ViewState


def run_async(coro: Coroutine) -> Any:
    """Run a coroutine to completion from the script thread (Streamlit scripts have no running loop)."""
    return asyncio.run(coro)


def view_state() -> ViewState:
    if "view_state" not in st.session_state:
        st.session_state.view_state = ViewState()
    return st.session_state.view_state


def _feed(key: str, factory, interval: float) -> Tuple[JobFeed, RefreshScheduler]:
    if key not in st.session_state:
        feed = factory()
        st.session_state[key] = (feed, feed.scheduler(interval))
    return st.session_state[key]


def jobs_feed_and_scheduler() -> Tuple[JobFeed, RefreshScheduler]:
    return _feed("jobs_feed", jobs_feed, settings.job_refresh_seconds)


def analytics_feed_and_scheduler() -> Tuple[JobFeed, RefreshScheduler]:
    return _feed("analytics_feed", analytics_feed, settings.analytics_refresh_seconds)


def refresh_if_due(scheduler: RefreshScheduler) -> None:
    """Run one refresh cycle when the scheduler says one is due; a cycle already in flight is skipped."""
    run_async(scheduler.tick_if_due())
