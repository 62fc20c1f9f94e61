"""Coalesces bursts of classification results into a single proposal."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

_LOGGER = logging.getLogger("AudioFocus.Engine.Debounce")


class ProposalDebouncer(Generic[T]):
    """Delivers only the latest submitted value once the debounce window closes.

    The timer is armed once per window: submissions while it is pending just
    replace the value that will be delivered and never re-arm or queue timers.
    """

    def __init__(
        self,
        deliver: Callable[[T], None],
        debounce_seconds: float = 0.12,
        *,
        name: str = "ui",
    ) -> None:
        self._deliver = deliver
        self._debounce_seconds = max(0.01, float(debounce_seconds))
        self._name = name
        self._lock = threading.Lock()
        self._pending: Optional[T] = None
        self._has_pending = False
        self._timer: Optional[threading.Timer] = None

    @property
    def debounce_seconds(self) -> float:
        return self._debounce_seconds

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._has_pending

    def submit(self, value: T) -> None:
        with self._lock:
            self._pending = value
            self._has_pending = True
            if self._timer is not None and self._timer.is_alive():
                return
            timer = threading.Timer(self._debounce_seconds, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def configure_delay(self, debounce_seconds: float) -> None:
        """Change the window; a pending delivery is re-armed with the new delay."""

        with self._lock:
            self._debounce_seconds = max(0.01, float(debounce_seconds))
            timer = self._timer
            if timer is None or not timer.is_alive():
                return
            timer.cancel()
            replacement = threading.Timer(self._debounce_seconds, self._fire)
            replacement.daemon = True
            self._timer = replacement
            replacement.start()

    def flush(self) -> bool:
        """Deliver a pending value immediately. Returns False when nothing was pending."""

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        return self._fire()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
            self._has_pending = False

    def _fire(self) -> bool:
        with self._lock:
            self._timer = None
            if not self._has_pending:
                return False
            value = self._pending
            self._pending = None
            self._has_pending = False
        try:
            self._deliver(value)  # type: ignore[arg-type]
        except Exception as exc:
            _LOGGER.warning("Debounced %s delivery failed: %s", self._name, exc)
        return True
