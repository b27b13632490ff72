# Job submission form. A passthrough: whatever the operator enters is posted as-is.
import logging

import streamlit as st

from dashboard.client.adapter import JobSourceClient
from dashboard.core.errors import TransportError, describe_error
from dashboard.models.job import Job, JobType, default_payload, parse_int_list
from dashboard.models.schemas import JobSubmission
from ui.session import run_async

logger = logging.getLogger(__name__)


async def _submit(submission: JobSubmission) -> Job:
    async with JobSourceClient() as client:
        return await client.submit_job(submission)


def _payload_fields(job_type: JobType) -> dict:
    """Render the per-kind payload inputs and return the payload dict."""
    defaults = default_payload(job_type)
    if job_type == JobType.ADD_NUMBERS:
        c1, c2 = st.columns(2)
        x = c1.number_input("X Value", value=defaults["x"], step=1)
        y = c2.number_input("Y Value", value=defaults["y"], step=1)
        return {"x": int(x), "y": int(y)}
    if job_type == JobType.REVERSE_STRING:
        return {"text": st.text_input("Text to Reverse", value=defaults["text"])}
    if job_type == JobType.RESIZE_IMAGE:
        url = st.text_input("Image URL", value=defaults["url"])
        c1, c2 = st.columns(2)
        width = c1.number_input("Width", value=defaults["width"], step=1)
        height = c2.number_input("Height", value=defaults["height"], step=1)
        return {"url": url, "width": int(width), "height": int(height)}
    raw = st.text_input(
        "Array (comma-separated numbers)",
        value=", ".join(str(n) for n in defaults["array"]),
    )
    return {"array": parse_int_list(raw)}


def render_submit_form() -> None:
    """Create New Job: kind selector outside the form (payload fields depend on it), the rest submitted together."""
    with st.expander("Create New Job", expanded=False):
        job_type = st.selectbox(
            "Job Type",
            list(JobType),
            format_func=lambda t: t.label,
            key="submit_job_type",
        )
        with st.form("submit_job_form", clear_on_submit=False):
            c1, c2 = st.columns(2)
            priority = c1.number_input("Priority", min_value=1, max_value=10, value=1, step=1)
            thread_demand = c2.number_input("Thread Demand", min_value=1, max_value=8, value=1, step=1)
            payload = _payload_fields(job_type)
            submitted = st.form_submit_button("Submit Job")

        if not submitted:
            return
        submission = JobSubmission(
            type=job_type,
            priority=int(priority),
            thread_demand=int(thread_demand),
            payload=payload,
        )
        try:
            job = run_async(_submit(submission))
        except TransportError as e:
            logger.warning("job_submit_failed", exc_info=True, extra={"job_type": job_type.value})
            st.error(f"Failed to submit job. Please try again. ({describe_error(e)})")
            return
        # the new job shows up in the table on a later refresh cycle
        st.success(f"Job {job.id} submitted ({job.status.value}).")
