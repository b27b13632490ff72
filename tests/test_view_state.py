"""Unit tests for view state transitions and search debounce."""
import pytest

from dashboard.view.debounce import Debouncer
from dashboard.view.state import ViewState


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _state(clock: FakeClock) -> ViewState:
    return ViewState(page_size=10, debouncer=Debouncer(0.3, clock=clock))


def test_status_filter_change_resets_page():
    state = _state(FakeClock())
    state.go_to_page(5)
    state.set_status_filter("Failed")
    assert state.page == 1


def test_same_status_filter_keeps_page():
    state = _state(FakeClock())
    state.go_to_page(5)
    state.set_status_filter("All")
    assert state.page == 5


def test_unknown_status_filter():
    with pytest.raises(ValueError):
        _state(FakeClock()).set_status_filter("Queued")


def test_page_size_change_resets_page_but_not_search():
    clock = FakeClock()
    state = _state(clock)
    state.type_search("resize")
    state.flush_search(force=True)
    state.go_to_page(4)
    state.set_page_size(25)
    assert state.page == 1
    assert state.search_text == "resize"
    assert state.search_raw == "resize"


def test_sort_change_keeps_page_and_search():
    state = _state(FakeClock())
    state.type_search("abc")
    state.flush_search(force=True)
    state.go_to_page(3)
    state.toggle_sort("priority")
    assert state.page == 3
    assert state.search_text == "abc"
    assert (state.sort_key, state.sort_desc) == ("priority", False)
    state.toggle_sort("priority")
    assert state.sort_desc is True


def test_initial_sort_is_newest_first():
    state = _state(FakeClock())
    assert (state.sort_key, state.sort_desc) == ("created_at", True)
    state.toggle_sort("created_at")
    assert state.sort_desc is False


def test_search_applies_only_after_quiet_period():
    clock = FakeClock()
    state = _state(clock)
    state.go_to_page(5)

    state.type_search("re")
    clock.advance(0.1)
    state.type_search("res")
    clock.advance(0.2)
    assert state.flush_search() is False
    assert state.search_text == ""
    assert state.page == 5

    clock.advance(0.15)
    assert state.flush_search() is True
    assert state.search_text == "res"
    assert state.page == 1


def test_unchanged_search_does_not_reset_page():
    clock = FakeClock()
    state = _state(clock)
    state.type_search("abc")
    state.flush_search(force=True)
    state.go_to_page(2)
    state.type_search("abc ")
    clock.advance(1)
    assert state.flush_search() is False
    assert state.page == 2


def test_toggle_expanded_and_scroll():
    state = _state(FakeClock())
    state.toggle_expanded("7")
    assert state.expanded_id == "7"
    state.toggle_expanded("7")
    assert state.expanded_id is None
    state.scroll_to(-20)
    assert state.scroll_offset_px == 0


def test_debouncer_releases_value_once():
    clock = FakeClock()
    debouncer = Debouncer(0.3, clock=clock)
    assert debouncer.poll() is None
    debouncer.push("a")
    assert debouncer.pending
    assert debouncer.remaining() == pytest.approx(0.3)
    clock.advance(0.3)
    assert debouncer.poll() == "a"
    assert debouncer.poll() is None
    assert not debouncer.pending


def test_debouncer_cancel():
    debouncer = Debouncer(0.3, clock=FakeClock())
    debouncer.push("a")
    debouncer.cancel()
    assert debouncer.flush() is None
