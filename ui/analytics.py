# Analytics page: per-status breakdown and latency figures, refreshed on its own slower timer.
import streamlit as st

from dashboard.core.config import settings
from dashboard.models.job import JobStatus
from dashboard.stats.aggregate import format_duration_ms, format_stats_overview, percent_of_total, status_breakdown
from ui.session import analytics_feed_and_scheduler, refresh_if_due


@st.fragment(run_every=settings.analytics_refresh_seconds)
def _analytics_fragment() -> None:
    feed, scheduler = analytics_feed_and_scheduler()
    refresh_if_due(scheduler)

    if feed.error:
        st.error(f"{feed.error} Showing the last loaded data.")
    if feed.loading:
        st.markdown(
            '<div style="background:#e9ecef;border-radius:10px;height:150px;"></div>',
            unsafe_allow_html=True,
        )
        return

    stats = feed.stats
    st.caption(format_stats_overview(stats))

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Threads Requested", stats.total_thread_demand)
    c2.metric("Active Threads", stats.active_thread_demand)
    c3.metric("Avg Completion", format_duration_ms(stats.average_completion_ms))
    c4.metric("Avg Queue Time", format_duration_ms(stats.average_queue_ms))
    st.caption(f"Latency figures use {stats.completion_samples} jobs completed in the last {stats.window_minutes} minutes.")

    st.subheader("Jobs by status")
    for row in status_breakdown(stats):
        st.write(f"{row['status']}: {row['count']} ({row['percent']:.1f}%)")
        st.progress(min(100, int(round(row["percent"]))))

    if stats.finished:
        failed = stats.count(JobStatus.FAILED)
        st.caption(f"Failure rate among finished jobs: {percent_of_total(failed, stats.finished):.1f}%")


def run_analytics() -> None:
    st.title("Analytics")
    _analytics_fragment()
