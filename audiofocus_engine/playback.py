"""Interpretation of media-session transport state."""
from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

SPEED_EPSILON = 0.01
POSITION_STALE_SECONDS = 2.0


class TransportState(str, Enum):
    PLAYING = "playing"
    BUFFERING = "buffering"
    PAUSED = "paused"
    STOPPED = "stopped"
    ERROR = "error"
    NONE = "none"

    @classmethod
    def parse(cls, raw: object) -> "TransportState":
        token = str(raw or "").strip().lower()
        for member in cls:
            if member.value == token:
                return member
        return cls.NONE


_INACTIVE_STATES = frozenset(
    {TransportState.PAUSED, TransportState.STOPPED, TransportState.ERROR, TransportState.NONE}
)


@dataclass(frozen=True)
class PlaybackSignal:
    """Point-in-time transport facts for one media session.

    ``last_position_update`` shares the clock passed to :func:`is_actively_playing`
    (``time.monotonic`` by default); zero means the session never reported one.
    """

    app_id: str
    state: TransportState
    last_position_update: float = 0.0
    speed: float = 0.0


def _is_advancing(signal: PlaybackSignal, now: float, stale_seconds: float) -> bool:
    if abs(signal.speed) > SPEED_EPSILON:
        return True
    if signal.last_position_update <= 0.0:
        return False
    return (now - signal.last_position_update) <= stale_seconds


def is_actively_playing(
    signal: Optional[PlaybackSignal],
    *,
    now: Optional[float] = None,
    stale_seconds: float = POSITION_STALE_SECONDS,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Buffering counts as playing; PLAYING must also be advancing."""

    if signal is None:
        return False
    if signal.state is TransportState.BUFFERING:
        return True
    if signal.state is not TransportState.PLAYING:
        return False
    current = clock() if now is None else now
    return _is_advancing(signal, current, stale_seconds)


def is_explicitly_inactive(signal: Optional[PlaybackSignal]) -> bool:
    """Paused, stopped, errored or idle. A missing signal is not explicit."""

    if signal is None:
        return False
    return signal.state in _INACTIVE_STATES
