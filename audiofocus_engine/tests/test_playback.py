from __future__ import annotations

from audiofocus_engine.playback import (
    PlaybackSignal,
    TransportState,
    is_actively_playing,
    is_explicitly_inactive,
)

APP = "com.spotify.music"
NOW = 500.0


def _signal(state: TransportState, *, updated: float = 0.0, speed: float = 0.0) -> PlaybackSignal:
    return PlaybackSignal(APP, state, last_position_update=updated, speed=speed)


def test_playing_with_speed_is_active() -> None:
    assert is_actively_playing(_signal(TransportState.PLAYING, speed=1.0), now=NOW)


def test_playing_with_recent_position_update_is_active() -> None:
    assert is_actively_playing(_signal(TransportState.PLAYING, updated=NOW - 1.5), now=NOW)


def test_playing_but_stalled_is_not_active() -> None:
    assert not is_actively_playing(_signal(TransportState.PLAYING, updated=NOW - 3.0), now=NOW)
    assert not is_actively_playing(_signal(TransportState.PLAYING, speed=0.005), now=NOW)
    assert not is_actively_playing(_signal(TransportState.PLAYING), now=NOW)


def test_stale_window_is_configurable() -> None:
    signal = _signal(TransportState.PLAYING, updated=NOW - 3.0)
    assert is_actively_playing(signal, now=NOW, stale_seconds=5.0)


def test_buffering_counts_as_playing() -> None:
    assert is_actively_playing(_signal(TransportState.BUFFERING), now=NOW)


def test_clock_is_used_when_now_is_omitted() -> None:
    signal = _signal(TransportState.PLAYING, updated=NOW - 1.0)
    assert is_actively_playing(signal, clock=lambda: NOW)
    assert not is_actively_playing(signal, clock=lambda: NOW + 10.0)


def test_explicitly_inactive_states() -> None:
    for state in (TransportState.PAUSED, TransportState.STOPPED, TransportState.ERROR, TransportState.NONE):
        signal = _signal(state, speed=1.0)
        assert is_explicitly_inactive(signal)
        assert not is_actively_playing(signal, now=NOW)
    assert not is_explicitly_inactive(_signal(TransportState.PLAYING))
    assert not is_explicitly_inactive(_signal(TransportState.BUFFERING))


def test_missing_signal_is_neither_playing_nor_explicit() -> None:
    assert not is_actively_playing(None, now=NOW)
    assert not is_explicitly_inactive(None)


def test_transport_state_parse() -> None:
    assert TransportState.parse("PLAYING") is TransportState.PLAYING
    assert TransportState.parse(" buffering ") is TransportState.BUFFERING
    assert TransportState.parse("rewinding") is TransportState.NONE
    assert TransportState.parse(None) is TransportState.NONE
