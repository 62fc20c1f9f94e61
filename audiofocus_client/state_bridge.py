"""Qt side of the change-notification hook."""
from __future__ import annotations

import logging
import threading
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from audiofocus_client.visibility_helper import should_show
from audiofocus_engine.overlay_state import OverlayState
from audiofocus_engine.state_store import OverlayStateStore

_LOGGER = logging.getLogger("AudioFocus.Client.StateBridge")


class OverlayStateBridge(QObject):
    """Forwards store transitions to the Qt thread.

    Store listeners run on whichever thread proposed the change; emitting a
    signal lets Qt queue delivery onto the receiver's thread.
    """

    state_changed = pyqtSignal(object)
    visibility_changed = pyqtSignal(bool)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._store: Optional[OverlayStateStore] = None
        self._lock = threading.Lock()
        self._last_visible: Optional[bool] = None

    def attach(self, store: OverlayStateStore) -> None:
        if self._store is store:
            return
        self.detach()
        self._store = store
        store.add_listener(self._on_state, replay=True)

    def detach(self) -> None:
        store = self._store
        self._store = None
        if store is not None:
            store.remove_listener(self._on_state)

    def current(self) -> Optional[OverlayState]:
        store = self._store
        return store.get() if store is not None else None

    def _on_state(self, state: OverlayState) -> None:
        visible = should_show(state)
        with self._lock:
            visibility_flipped = visible != self._last_visible
            self._last_visible = visible
        self.state_changed.emit(state)
        if visibility_flipped:
            _LOGGER.debug("Overlay %s requested for %s", "start" if visible else "stop", state.app_kind.value)
            self.visibility_changed.emit(visible)
