"""Tests for the thread-backed activation poller."""

from __future__ import annotations

import threading

import pytest
from pydantic import ValidationError

from twallet.application.polling import ActivationPoller, PollerState, PollingConfig
from tests.fixtures import FAST_POLLING, ScriptedStatus

JOIN_TIMEOUT = 5.0


class Recorder:
    def __init__(self) -> None:
        self.ids: list[str] = []

    def __call__(self, vc_cid: str) -> None:
        self.ids.append(vc_cid)


class TestPollingConfig:
    def test_defaults(self) -> None:
        config = PollingConfig()
        assert config.interval == 5.0
        assert config.ceiling == 300.0
        assert config.max_attempts == 60

    def test_fast_config_keeps_sixty_attempts(self) -> None:
        assert FAST_POLLING.max_attempts == 60

    def test_partial_interval_rounds_up(self) -> None:
        assert PollingConfig(interval=5, ceiling=7).max_attempts == 2

    @pytest.mark.parametrize("field", ["interval", "ceiling"])
    def test_rejects_non_positive_values(self, field: str) -> None:
        with pytest.raises(ValidationError):
            PollingConfig(**{field: 0})


def test_times_out_after_sixty_attempts_without_callback() -> None:
    fetch = ScriptedStatus(None)
    on_activated = Recorder()

    poller = ActivationPoller(fetch, on_activated, FAST_POLLING).start()

    assert poller.join(JOIN_TIMEOUT)
    assert poller.state is PollerState.TIMED_OUT
    assert fetch.calls == 60
    assert poller.attempts == 60
    assert on_activated.ids == []


def test_activates_on_fourth_tick_and_stops_fetching() -> None:
    fetch = ScriptedStatus(None, None, None, "cid-42")
    on_activated = Recorder()

    poller = ActivationPoller(fetch, on_activated, FAST_POLLING).start()

    assert poller.join(JOIN_TIMEOUT)
    assert poller.state is PollerState.ACTIVATED
    assert poller.activation_id == "cid-42"
    assert on_activated.ids == ["cid-42"]
    assert fetch.calls == 4


def test_fetch_error_ends_session_without_callback() -> None:
    boom = RuntimeError("connection reset")
    fetch = ScriptedStatus(None, boom, "cid-never")
    on_activated = Recorder()

    poller = ActivationPoller(fetch, on_activated, FAST_POLLING).start()

    assert poller.join(JOIN_TIMEOUT)
    assert poller.state is PollerState.FAILED
    assert poller.error is boom
    assert fetch.calls == 2
    assert on_activated.ids == []


def test_empty_string_counts_as_not_activated() -> None:
    fetch = ScriptedStatus("", "", "cid-1")
    on_activated = Recorder()

    poller = ActivationPoller(fetch, on_activated, FAST_POLLING).start()

    assert poller.join(JOIN_TIMEOUT)
    assert on_activated.ids == ["cid-1"]
    assert fetch.calls == 3


def test_cancel_before_first_tick() -> None:
    fetch = ScriptedStatus(None)
    on_activated = Recorder()
    poller = ActivationPoller(
        fetch, on_activated, PollingConfig(interval=10, ceiling=300)
    ).start()

    poller.cancel()

    assert poller.join(JOIN_TIMEOUT)
    assert poller.state is PollerState.CANCELLED
    assert fetch.calls == 0
    assert on_activated.ids == []


def test_cancel_during_fetch_skips_callback() -> None:
    in_fetch = threading.Event()
    release = threading.Event()
    on_activated = Recorder()

    def fetch() -> str:
        in_fetch.set()
        release.wait(JOIN_TIMEOUT)
        return "cid-late"

    poller = ActivationPoller(fetch, on_activated, FAST_POLLING).start()
    assert in_fetch.wait(JOIN_TIMEOUT)
    poller.cancel()
    release.set()

    assert poller.join(JOIN_TIMEOUT)
    assert poller.state is PollerState.CANCELLED
    assert on_activated.ids == []


def test_callback_error_does_not_change_outcome() -> None:
    def on_activated(vc_cid: str) -> None:
        raise ValueError("handler bug")

    poller = ActivationPoller(
        ScriptedStatus("cid-1"), on_activated, FAST_POLLING
    ).start()

    assert poller.join(JOIN_TIMEOUT)
    assert poller.state is PollerState.ACTIVATED
    assert poller.error is None


def test_cancel_after_activation_keeps_state() -> None:
    poller = ActivationPoller(ScriptedStatus("cid-1"), Recorder(), FAST_POLLING).start()
    assert poller.join(JOIN_TIMEOUT)

    poller.cancel()

    assert poller.state is PollerState.ACTIVATED


def test_cannot_start_twice() -> None:
    poller = ActivationPoller(ScriptedStatus(None), Recorder(), FAST_POLLING).start()
    try:
        with pytest.raises(RuntimeError):
            poller.start()
    finally:
        poller.cancel()
        poller.join(JOIN_TIMEOUT)


def test_is_running_until_terminal_state() -> None:
    poller = ActivationPoller(
        ScriptedStatus(None), Recorder(), PollingConfig(interval=10, ceiling=300)
    )
    assert poller.state is PollerState.RUNNING
    assert not poller.done
    poller.start()
    assert not poller.done
    poller.cancel()
    assert poller.join(JOIN_TIMEOUT)
    assert poller.done
