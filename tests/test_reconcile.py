"""Unit tests for merging live and historical job sources."""
import asyncio

import pytest

from dashboard.core.errors import ReconciliationError, TransportError
from dashboard.sync.reconcile import JobSnapshot, merge_jobs, reconcile


class StubSource:
    """Adapter stand-in returning fixed lists or raising per source."""

    def __init__(self, live=None, historical=None, live_error=None, historical_error=None):
        self.live = live or []
        self.historical = historical or []
        self.live_error = live_error
        self.historical_error = historical_error
        self.calls = []

    async def fetch_live_jobs(self):
        self.calls.append("live")
        await asyncio.sleep(0)
        if self.live_error:
            raise self.live_error
        return self.live

    async def fetch_historical_jobs(self):
        self.calls.append("historical")
        await asyncio.sleep(0)
        if self.historical_error:
            raise self.historical_error
        return self.historical


def test_live_version_wins_on_conflict(make_job):
    live = [make_job("1", status="Running", priority=9, created=10)]
    historical = [make_job("1", status="Completed", priority=1, created=10), make_job("2", created=5)]
    merged = merge_jobs(live, historical)
    by_id = {j.id: j for j in merged}
    assert by_id["1"].status.value == "Running"
    assert by_id["1"].priority == 9
    assert set(by_id) == {"1", "2"}


def test_output_is_unique_and_newest_first(make_job):
    live = [make_job("a", created=30), make_job("b", created=10)]
    historical = [make_job("c", created=20), make_job("a", created=99), make_job("d", created=40)]
    merged = merge_jobs(live, historical)
    ids = [j.id for j in merged]
    assert len(ids) == len(set(ids))
    assert ids == ["d", "a", "c", "b"]
    created = [j.created_at for j in merged]
    assert created == sorted(created, reverse=True)


def test_equal_created_at_keeps_insertion_order(make_job):
    live = [make_job("live-1", created=0), make_job("live-2", created=0)]
    historical = [make_job("hist-1", created=0), make_job("hist-2", created=0)]
    assert [j.id for j in merge_jobs(live, historical)] == ["live-1", "live-2", "hist-1", "hist-2"]


def test_merge_of_empty_sources():
    assert merge_jobs([], []) == []


def test_reconcile_fetches_both_sources(make_job):
    source = StubSource(live=[make_job("1", created=1)], historical=[make_job("2", created=2)])
    snapshot = asyncio.run(reconcile(source))
    assert [j.id for j in snapshot.jobs] == ["2", "1"]
    assert snapshot.live_count == 1
    assert snapshot.historical_count == 1
    assert snapshot.fetched_at is not None
    assert sorted(source.calls) == ["historical", "live"]


@pytest.mark.parametrize("side", ["live", "historical"])
def test_reconcile_fails_whole_cycle_when_one_source_fails(make_job, side):
    error = TransportError("GET failed", status_code=503, reason="Service Unavailable")
    source = StubSource(
        live=[make_job("1")],
        historical=[make_job("2")],
        **{f"{side}_error": error},
    )
    with pytest.raises(ReconciliationError) as info:
        asyncio.run(reconcile(source))
    assert info.value.cause is error
    assert info.value.cause.status_code == 503


def test_programming_errors_are_not_wrapped():
    source = StubSource(live_error=KeyError("oops"))
    with pytest.raises(KeyError):
        asyncio.run(reconcile(source))


def test_snapshot_lookup_is_read_only(make_job):
    snapshot = JobSnapshot.build([make_job("1"), make_job("2")])
    assert snapshot.get("1").id == "1"
    assert snapshot.get("missing") is None
    assert len(snapshot) == 2
    with pytest.raises(TypeError):
        snapshot.by_id["3"] = make_job("3")


def test_empty_snapshot():
    snapshot = JobSnapshot.empty()
    assert len(snapshot) == 0
    assert snapshot.fetched_at is None
