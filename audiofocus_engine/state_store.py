"""Holds the single published :class:`OverlayState` and fans out changes."""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from audiofocus_engine.overlay_state import INACTIVE_STATE, OverlayState

StateListener = Callable[[OverlayState], None]

_LOGGER = logging.getLogger("AudioFocus.Engine.StateStore")


class OverlayStateStore:
    """Thread-safe cell with change-only notifications.

    ``propose`` runs compare, replace and notify under one re-entrant lock so
    concurrent proposals are linearised and listeners observe transitions in
    order. Listeners run synchronously on the proposing thread.
    """

    def __init__(self, initial: OverlayState = INACTIVE_STATE) -> None:
        self._lock = threading.RLock()
        self._state = initial
        self._listeners: List[StateListener] = []

    def get(self) -> OverlayState:
        return self._state

    def add_listener(self, listener: StateListener, *, replay: bool = False) -> None:
        """Register ``listener``; with ``replay`` it first receives the current state.

        The replay runs under the lock, so no concurrent transition can reach the
        listener ahead of the state it started from.
        """

        with self._lock:
            if listener in self._listeners:
                return
            self._listeners.append(listener)
            if replay:
                try:
                    listener(self._state)
                except Exception as exc:
                    _LOGGER.warning("Overlay state listener %r failed on replay: %s", listener, exc)

    def remove_listener(self, listener: StateListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def propose(self, candidate: OverlayState) -> bool:
        """Publish ``candidate`` if it differs from the current state. Returns True on change."""

        with self._lock:
            previous = self._state
            if candidate == previous:
                return False
            self._state = candidate
            _LOGGER.debug("Overlay state %s -> %s", previous.to_dict(), candidate.to_dict())
            for listener in list(self._listeners):
                try:
                    listener(candidate)
                except Exception as exc:
                    _LOGGER.warning("Overlay state listener %r failed: %s", listener, exc)
            return True

    def update(self, transform: Callable[[OverlayState], Optional[OverlayState]]) -> bool:
        """Atomically derive the next state from the current one; ``None`` keeps it."""

        with self._lock:
            candidate = transform(self._state)
            if candidate is None:
                return False
            return self.propose(candidate)
