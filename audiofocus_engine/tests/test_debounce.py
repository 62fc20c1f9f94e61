from __future__ import annotations

import threading

import pytest

from audiofocus_engine import debounce
from audiofocus_engine.debounce import ProposalDebouncer


@pytest.fixture
def timers(monkeypatch):
    created = []

    class FakeTimer:
        def __init__(self, interval, function):
            self.interval = interval
            self.function = function
            self.started = False
            self.cancelled = False
            created.append(self)

        def start(self) -> None:
            self.started = True

        def is_alive(self) -> bool:
            return self.started and not self.cancelled

        def cancel(self) -> None:
            self.cancelled = True

    monkeypatch.setattr(debounce.threading, "Timer", FakeTimer)
    return created


def test_burst_arms_one_timer_and_delivers_latest(timers):
    delivered = []
    debouncer = ProposalDebouncer(delivered.append, 0.12)

    debouncer.submit("first")
    debouncer.submit("second")
    debouncer.submit("third")

    assert len(timers) == 1
    assert timers[0].interval == 0.12
    assert timers[0].started
    assert delivered == []
    assert debouncer.pending is True

    timers[0].function()

    assert delivered == ["third"]
    assert debouncer.pending is False


def test_submission_after_delivery_opens_new_window(timers):
    delivered = []
    debouncer = ProposalDebouncer(delivered.append, 0.12)

    debouncer.submit(1)
    timers[0].function()
    debouncer.submit(2)

    assert len(timers) == 2
    timers[1].function()
    assert delivered == [1, 2]


def test_configure_delay_rearms_pending_timer(timers):
    debouncer = ProposalDebouncer(lambda _value: None, 1.0)

    debouncer.submit("value")
    first = timers[-1]
    debouncer.configure_delay(0.2)

    assert first.cancelled is True
    latest = timers[-1]
    assert latest is not first
    assert latest.interval == 0.2
    assert latest.started
    assert debouncer.debounce_seconds == 0.2


def test_configure_delay_without_pending_timer_only_updates_window(timers):
    debouncer = ProposalDebouncer(lambda _value: None, 1.0)
    debouncer.configure_delay(0.3)

    assert timers == []
    assert debouncer.debounce_seconds == 0.3


def test_flush_delivers_immediately(timers):
    delivered = []
    debouncer = ProposalDebouncer(delivered.append, 0.12)

    assert debouncer.flush() is False
    debouncer.submit("now")
    assert debouncer.flush() is True
    assert timers[0].cancelled is True
    assert delivered == ["now"]


def test_cancel_drops_pending_value(timers):
    delivered = []
    debouncer = ProposalDebouncer(delivered.append, 0.12)

    debouncer.submit("dropped")
    debouncer.cancel()
    timers[0].function()

    assert delivered == []
    assert debouncer.pending is False


def test_delivery_errors_are_contained(timers):
    def _broken(_value):
        raise RuntimeError("listener exploded")

    debouncer = ProposalDebouncer(_broken, 0.12)
    debouncer.submit("value")

    assert timers[0].function() is True
    assert debouncer.pending is False


def test_real_timer_delivers_last_value():
    delivered = []
    done = threading.Event()

    def _deliver(value):
        delivered.append(value)
        done.set()

    debouncer = ProposalDebouncer(_deliver, 0.2)
    for value in range(5):
        debouncer.submit(value)

    assert done.wait(2.0)
    assert delivered == [4]
