# Jobs page for the Job Dashboard: stat cards, filterable job table, CSV export and job submission.
import json
import time
from datetime import datetime
from typing import List, Optional

import streamlit as st

from dashboard.core.config import PAGE_SIZE_OPTIONS, settings
from dashboard.models.job import Job, JobStatus
from dashboard.observability.logs import configure_logging
from dashboard.refresh.feed import JobFeed
from dashboard.stats.aggregate import format_duration_ms
from dashboard.view.export import export_filename, jobs_to_csv
from dashboard.view.pipeline import TableView, build_table
from dashboard.view.state import SORT_COLUMNS, STATUS_FILTERS, ViewState
from dashboard.view.virtual import max_scroll_offset, row_height
from ui.analytics import run_analytics
from ui.session import jobs_feed_and_scheduler, refresh_if_due, view_state
from ui.submit_form import render_submit_form

STATUS_COLORS = {
    JobStatus.COMPLETED: "#28a745",
    JobStatus.PENDING: "#d4a017",
    JobStatus.RUNNING: "#0d6efd",
    JobStatus.FAILED: "#dc3545",
}

COLUMN_LABELS = {
    "created_at": "Created",
    "priority": "Priority",
    "status": "Status",
    "type": "Type",
}


def _fmt_ts(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


def _status_badge(status: JobStatus) -> str:
    color = STATUS_COLORS.get(status, "#6c757d")
    return (
        f'<span style="background:{color};color:white;padding:2px 10px;border-radius:6px;'
        f'font-size:0.8em;font-weight:500;">{status.value}</span>'
    )


def _loading_skeleton(count: int = 6) -> None:
    """Render grey placeholder cards while the first refresh is in flight."""
    cols = st.columns(count)
    for col in cols:
        with col:
            st.markdown(
                '<div style="background:#e9ecef;border-radius:10px;height:90px;"></div>',
                unsafe_allow_html=True,
            )


def _render_stat_cards(feed: JobFeed) -> None:
    if feed.loading:
        _loading_skeleton()
        return
    stats = feed.stats
    cols = st.columns(6)
    cols[0].metric("Total Jobs", stats.total)
    cols[1].metric("Completed", stats.count(JobStatus.COMPLETED))
    cols[2].metric("In Flight", stats.in_flight, help="Pending + Running")
    cols[3].metric("Failed", stats.count(JobStatus.FAILED))
    cols[4].metric("Active Threads", stats.active_thread_demand, help="Thread demand of Running jobs")
    cols[5].metric(
        "Avg Completion",
        format_duration_ms(stats.average_completion_ms),
        help=f"Completed jobs in the last {stats.window_minutes} minutes",
    )


# -------------------------
# Widget callbacks (mutate ViewState only)
# -------------------------

def _on_search_change() -> None:
    view_state().type_search(st.session_state.get("job_search", ""))


def _on_status_change() -> None:
    view_state().set_status_filter(st.session_state.get("job_status_filter", STATUS_FILTERS[0]))


def _on_page_size_change() -> None:
    view_state().set_page_size(int(st.session_state.get("job_page_size", settings.default_page_size)))


def _on_compact_change() -> None:
    view_state().set_compact(bool(st.session_state.get("job_compact", False)))


def _on_scroll_change() -> None:
    state = view_state()
    state.scroll_to(int(st.session_state.get("job_scroll_row", 0)) * row_height(state.compact))


def _render_filter_bar(state: ViewState) -> None:
    c1, c2, c3, c4 = st.columns([4, 2, 1, 1])
    with c1:
        st.text_input(
            "Search",
            value=state.search_raw,
            placeholder="Search by id, type or result",
            key="job_search",
            on_change=_on_search_change,
        )
    with c2:
        st.selectbox(
            "Status",
            STATUS_FILTERS,
            index=STATUS_FILTERS.index(state.status_filter),
            key="job_status_filter",
            on_change=_on_status_change,
        )
    with c3:
        st.selectbox(
            "Page size",
            PAGE_SIZE_OPTIONS,
            index=PAGE_SIZE_OPTIONS.index(state.page_size) if state.page_size in PAGE_SIZE_OPTIONS else 0,
            key="job_page_size",
            on_change=_on_page_size_change,
        )
    with c4:
        st.toggle("Compact", value=state.compact, key="job_compact", on_change=_on_compact_change)

    # Debounce: wait out the quiet period; a newer keystroke interrupts this run and starts over.
    if state.debouncer.pending:
        time.sleep(state.debouncer.remaining())
        state.flush_search()


def _render_sort_bar(state: ViewState) -> None:
    cols = st.columns(len(SORT_COLUMNS))
    for col, column in zip(cols, SORT_COLUMNS):
        label = COLUMN_LABELS[column]
        if column == state.sort_key:
            label += " ↓" if state.sort_desc else " ↑"
        col.button(label, key=f"sort_{column}", on_click=state.toggle_sort, args=(column,), use_container_width=True)


def _job_row(job: Job) -> dict:
    return {
        "id": job.id,
        "type": job.type,
        "status": job.status.value,
        "priority": job.priority,
        "threads": job.thread_demand,
        "created": _fmt_ts(job.created_at),
        "started": _fmt_ts(job.started_at),
        "completed": _fmt_ts(job.completed_at),
    }


def _render_job_detail(job: Job) -> None:
    """Expanded row: copyable id, payload and result."""
    st.code(job.id, language=None)
    typed = job.typed_payload()
    left, right = st.columns(2)
    with left:
        st.caption("Payload")
        st.json(typed.model_dump() if typed is not None else (job.payload or {}))
    with right:
        st.caption("Result")
        if job.result is None:
            st.markdown("-")
        else:
            st.json(job.result if isinstance(job.result, (dict, list)) else json.dumps(job.result))
    q, e = job.queue_ms, job.execution_ms
    st.caption(f"Queued {format_duration_ms(q)} · Ran {format_duration_ms(e)}")


def _render_paginated(view: TableView, state: ViewState) -> None:
    page = view.page
    header = st.columns([3, 2, 1.3, 0.8, 0.8, 2, 2, 2, 0.8])
    for col, title in zip(header, ("ID", "Type", "Status", "Priority", "Threads", "Created", "Started", "Completed", "")):
        col.markdown(f"**{title}**")

    for job in page.items:
        cols = st.columns([3, 2, 1.3, 0.8, 0.8, 2, 2, 2, 0.8])
        cols[0].markdown(f"`{job.id}`")
        cols[1].write(job.type)
        cols[2].markdown(_status_badge(job.status), unsafe_allow_html=True)
        cols[3].write(job.priority)
        cols[4].write(job.thread_demand)
        cols[5].write(_fmt_ts(job.created_at))
        cols[6].write(_fmt_ts(job.started_at))
        cols[7].write(_fmt_ts(job.completed_at))
        expanded = view.expanded is not None and view.expanded.id == job.id
        cols[8].button(
            "▾" if expanded else "▸",
            key=f"expand_{job.id}",
            on_click=state.toggle_expanded,
            args=(job.id,),
        )
        if expanded:
            with st.container(border=True):
                _render_job_detail(job)

    prev_col, info_col, next_col = st.columns([1, 4, 1])
    prev_col.button(
        "← Prev",
        key="page_prev",
        disabled=not page.has_prev,
        on_click=state.go_to_page,
        args=(page.number - 1,),
    )
    info_col.caption(
        f"Page {page.number} of {page.total_pages} · rows {page.start_index}-{page.end_index} of {page.total_count}"
    )
    next_col.button(
        "Next →",
        key="page_next",
        disabled=not page.has_next,
        on_click=state.go_to_page,
        args=(page.number + 1,),
    )


def _render_virtualized(view: TableView, state: ViewState) -> None:
    window = view.window
    rh = window.row_height_px
    max_row = max_scroll_offset(window.total_rows, settings.table_viewport_px, rh) // rh
    st.slider(
        "Scroll",
        min_value=0,
        max_value=max(1, max_row),
        value=min(window.scroll_offset_px // rh, max(1, max_row)),
        key="job_scroll_row",
        on_change=_on_scroll_change,
        label_visibility="collapsed",
    )
    rows: List[dict] = [_job_row(job) for job in view.visible_rows]
    st.dataframe(rows, hide_index=True, use_container_width=True, height=settings.table_viewport_px)
    st.caption(
        f"{window.total_rows} matching jobs · showing rows {window.start + 1}-{window.end} "
        f"(windowed view above {settings.virtualize_threshold} rows; expansion disabled)"
    )


def _render_table(feed: JobFeed, state: ViewState) -> None:
    st.subheader("All Jobs")
    _render_filter_bar(state)
    _render_sort_bar(state)

    view = build_table(feed.snapshot.jobs, state)
    if view.page is not None:
        state.page = view.page.number

    if not view.rows:
        st.info("No jobs match the current filters." if feed.snapshot.jobs else "No jobs yet.")
    elif view.interactive:
        _render_paginated(view, state)
    else:
        _render_virtualized(view, state)

    st.download_button(
        "Export CSV",
        data=jobs_to_csv(view.rows),
        file_name=export_filename(),
        mime="text/csv",
        key="export_csv",
        disabled=not view.rows,
    )


@st.fragment(run_every=settings.job_refresh_seconds)
def _jobs_fragment() -> None:
    """Timer-driven section: refresh data when due, then re-derive cards and table from data + view state."""
    feed, scheduler = jobs_feed_and_scheduler()
    refresh_if_due(scheduler)

    if feed.error:
        st.error(f"{feed.error} Showing the last loaded data.")
    _render_stat_cards(feed)
    if feed.loading:
        return
    if feed.last_success_at:
        st.caption(f"Updated {_fmt_ts(feed.last_success_at)} UTC")
    _render_table(feed, view_state())


def run_main() -> None:
    """Render the dashboard (jobs page or analytics page, chosen in the sidebar)."""
    st.set_page_config(page_title="Job Dashboard", layout="wide", initial_sidebar_state="expanded")
    configure_logging(settings.log_level)

    page = st.sidebar.radio("Navigate", ("Jobs", "Analytics"), key="nav_page")
    if page == "Analytics":
        run_analytics()
        return

    st.title("Job Dashboard")
    st.caption("Live and archived jobs from the scheduler backend.")
    render_submit_form()
    _jobs_fragment()
