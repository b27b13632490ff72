"""Unit tests for job record parsing and derived values."""
from datetime import timezone

import pytest
from pydantic import ValidationError

from dashboard.models.job import (
    AddNumbersPayload,
    Job,
    JobStatus,
    JobType,
    default_payload,
    parse_int_list,
    parse_jobs,
)
from dashboard.models.schemas import JobSubmission


def _raw(**overrides):
    raw = {
        "id": "a1",
        "type": "add_numbers",
        "status": "Completed",
        "priority": 2,
        "thread_demand": 2,
        "payload": {"x": 1, "y": 2},
        "result": 3,
        "created_at": "2024-05-01T12:00:00Z",
        "started_at": "2024-05-01T12:00:01.250Z",
        "completed_at": "2024-05-01T12:00:03.250Z",
    }
    raw.update(overrides)
    return raw


def test_parses_go_timestamps_with_nanoseconds():
    job = Job.model_validate(_raw(started_at="2024-05-01T12:00:01.123456789Z"))
    assert job.started_at.microsecond == 123456
    assert job.started_at.tzinfo is not None


def test_naive_timestamps_are_utc():
    job = Job.model_validate(_raw(created_at="2024-05-01T12:00:00"))
    assert job.created_at.tzinfo == timezone.utc


def test_go_zero_time_and_empty_strings_are_absent():
    job = Job.model_validate(_raw(status="Pending", started_at="0001-01-01T00:00:00Z", completed_at=""))
    assert job.started_at is None
    assert job.completed_at is None
    assert job.execution_ms is None


def test_zero_created_at_is_rejected():
    with pytest.raises(ValidationError):
        Job.model_validate(_raw(created_at="0001-01-01T00:00:00Z"))


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        Job.model_validate(_raw(status="Queued"))


def test_parse_jobs_skips_malformed_records():
    jobs = parse_jobs([_raw(id="ok"), _raw(id="bad", status="Cancelled"), {"id": "no-created"}, "junk"])
    assert [j.id for j in jobs] == ["ok"]


def test_parse_jobs_treats_null_as_empty():
    assert parse_jobs(None) == []


def test_thread_demand_is_at_least_one():
    assert Job.model_validate(_raw(thread_demand=0)).thread_demand == 1
    assert Job.model_validate(_raw(thread_demand=None)).thread_demand == 1


def test_numeric_id_is_text():
    assert Job.model_validate(_raw(id=42)).id == "42"


def test_execution_and_queue_ms():
    job = Job.model_validate(_raw())
    assert job.execution_ms == pytest.approx(2000.0)
    assert job.queue_ms == pytest.approx(1250.0)


def test_out_of_order_timestamps_give_no_duration():
    job = Job.model_validate(_raw(completed_at="2024-05-01T11:00:00Z"))
    assert job.execution_ms is None


def test_typed_payload_by_kind():
    job = Job.model_validate(_raw())
    assert job.job_type == JobType.ADD_NUMBERS
    assert job.typed_payload() == AddNumbersPayload(x=1, y=2)

    unknown = Job.model_validate(_raw(type="compress_video"))
    assert unknown.job_type is None
    assert unknown.typed_payload() is None

    mismatched = Job.model_validate(_raw(type="resize_image", payload={"width": "wide"}))
    assert mismatched.typed_payload() is None
    assert mismatched.payload == {"width": "wide"}


def test_result_text():
    assert Job.model_validate(_raw(result=None)).result_text() == ""
    assert Job.model_validate(_raw(result="olleh")).result_text() == "olleh"
    assert Job.model_validate(_raw(result={"Sum": 15})).result_text() == '{"Sum": 15}'


def test_jobs_are_immutable():
    job = Job.model_validate(_raw())
    with pytest.raises(ValidationError):
        job.status = JobStatus.FAILED


def test_default_payloads_match_form_defaults():
    assert default_payload(JobType.ADD_NUMBERS) == {"x": 0, "y": 0}
    assert default_payload(JobType.RESIZE_IMAGE) == {"url": "", "width": 800, "height": 600}
    assert default_payload(JobType.LARGE_ARRAY_SUM) == {"array": [1, 2, 3, 4, 5]}


def test_parse_int_list_drops_non_numbers():
    assert parse_int_list("1, 2, x, 3,, ") == [1, 2, 3]
    assert parse_int_list("") == []


def test_submission_dumps_wire_shape():
    body = JobSubmission(type=JobType.REVERSE_STRING, priority=3, thread_demand=2, payload={"text": "abc"})
    assert body.model_dump(mode="json") == {
        "type": "reverse_string",
        "priority": 3,
        "thread_demand": 2,
        "payload": {"text": "abc"},
    }
