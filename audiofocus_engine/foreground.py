"""Best-guess foreground application from recent usage events."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from audiofocus_engine.config import EngineConfig

_LOGGER = logging.getLogger("AudioFocus.Engine.Foreground")

DEFAULT_WINDOW_SECONDS = 60.0


class UsageEventKind(str, Enum):
    MOVE_TO_FOREGROUND = "move_to_foreground"
    ACTIVITY_RESUMED = "activity_resumed"
    MOVE_TO_BACKGROUND = "move_to_background"
    ACTIVITY_PAUSED = "activity_paused"
    ACTIVITY_STOPPED = "activity_stopped"
    OTHER = "other"


FOREGROUND_EVENTS = frozenset({UsageEventKind.MOVE_TO_FOREGROUND, UsageEventKind.ACTIVITY_RESUMED})
BACKGROUND_EVENTS = frozenset(
    {UsageEventKind.MOVE_TO_BACKGROUND, UsageEventKind.ACTIVITY_PAUSED, UsageEventKind.ACTIVITY_STOPPED}
)


@dataclass(frozen=True)
class UsageEvent:
    app_id: str
    kind: UsageEventKind
    timestamp: float


@dataclass(frozen=True)
class ForegroundSignal:
    """``app_id`` is None when the last known app moved to the background."""

    app_id: Optional[str]
    observed_at: float
    validity_seconds: float = DEFAULT_WINDOW_SECONDS

    def is_valid(self, now: float) -> bool:
        return 0.0 <= now - self.observed_at <= self.validity_seconds

    def names(self, app_id: str, now: float) -> Optional[bool]:
        """True/False while valid; None once expired (unknown, not "backgrounded")."""

        if not self.is_valid(now):
            return None
        return self.app_id == app_id


EventQuery = Callable[[float, float], Optional[Iterable[UsageEvent]]]


class ForegroundResolver:
    """Replays the recent usage-event window (60 s by default) to find the top application.

    When the query yields nothing, the previous answer is reused while it is
    still inside the window so sparse event streams do not flap to unknown.
    """

    def __init__(
        self,
        query_events: Optional[EventQuery],
        *,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._query_events = query_events
        self._window_seconds = max(1.0, float(window_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._cached: Optional[ForegroundSignal] = None

    @classmethod
    def from_config(
        cls,
        query_events: Optional[EventQuery],
        config: EngineConfig,
        *,
        clock: Callable[[], float] = time.time,
    ) -> "ForegroundResolver":
        return cls(query_events, window_seconds=config.foreground_window_seconds, clock=clock)

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def resolve(self) -> Optional[ForegroundSignal]:
        with self._lock:
            now = self._clock()
            events = self._query(now - self._window_seconds, now)
            if events is None:
                return self._cached_within_window(now)
            start = now - self._window_seconds
            current: Optional[str] = None
            latest: Optional[float] = None
            saw_event = False
            for event in sorted(events, key=lambda item: item.timestamp):
                if event.timestamp < start:
                    continue
                if event.kind in FOREGROUND_EVENTS:
                    current = event.app_id
                    latest = event.timestamp
                    saw_event = True
                elif event.kind in BACKGROUND_EVENTS:
                    saw_event = True
                    if current == event.app_id and (latest is None or event.timestamp >= latest):
                        current = None
                        latest = event.timestamp
            if not saw_event:
                return self._cached_within_window(now)
            signal = ForegroundSignal(
                app_id=current,
                observed_at=latest if latest is not None else now,
                validity_seconds=self._window_seconds,
            )
            self._cached = signal
            return signal

    def _query(self, start: float, end: float) -> Optional[list]:
        if self._query_events is None:
            return None
        try:
            events = self._query_events(start, end)
        except Exception as exc:
            _LOGGER.debug("Usage event query failed: %s", exc)
            return None
        if events is None:
            return None
        return list(events)

    def _cached_within_window(self, now: float) -> Optional[ForegroundSignal]:
        cached = self._cached
        if cached is None or not cached.is_valid(now):
            return None
        return cached
