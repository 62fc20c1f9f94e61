"""Entry points where playback, foreground and UI-change signals meet the store.

Each signal source calls in from its own thread. Playback and foreground
decisions are applied straight to the store; UI-change classifications go
through a :class:`ProposalDebouncer` so a burst of accessibility events yields
one proposal built from the last snapshot.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from audiofocus_engine.config import EngineConfig
from audiofocus_engine.debounce import ProposalDebouncer
from audiofocus_engine.foreground import ForegroundSignal
from audiofocus_engine.mode_resolver import PACKAGE_BY_KIND, ModeResolver, app_kind_for
from audiofocus_engine.overlay_state import (
    INACTIVE_STATE,
    AppKind,
    ModeCandidate,
    OverlayState,
    PlayMode,
)
from audiofocus_engine.playback import PlaybackSignal, is_actively_playing, is_explicitly_inactive
from audiofocus_engine.snapshot import Snapshot, Window
from audiofocus_engine.state_store import OverlayStateStore, StateListener

_LOGGER = logging.getLogger("AudioFocus.Engine.Signals")

PlaybackSource = Callable[[str], Optional[PlaybackSignal]]
ForegroundSource = Callable[[], Optional[ForegroundSignal]]


@dataclass(frozen=True)
class _UiProposal:
    app_kind: AppKind
    candidate: ModeCandidate


class FocusCoordinator:
    """Fans the three signal sources into one :class:`OverlayStateStore`."""

    def __init__(
        self,
        *,
        playback_source: PlaybackSource,
        foreground_source: ForegroundSource,
        config: Optional[EngineConfig] = None,
        store: Optional[OverlayStateStore] = None,
        resolver: Optional[ModeResolver] = None,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or EngineConfig()
        self._store = store or OverlayStateStore()
        self._resolver = resolver or ModeResolver(self._config)
        self._playback_source = playback_source
        self._foreground_source = foreground_source
        self._clock = clock
        self._monotonic = monotonic
        self._ui_debouncer: ProposalDebouncer[_UiProposal] = ProposalDebouncer(
            self._apply_ui_proposal,
            self._config.debounce_seconds,
            name="ui",
        )

    @property
    def store(self) -> OverlayStateStore:
        return self._store

    def current_state(self) -> OverlayState:
        return self._store.get()

    def add_listener(self, listener: StateListener) -> None:
        self._store.add_listener(listener)

    def remove_listener(self, listener: StateListener) -> None:
        self._store.remove_listener(listener)

    def shutdown(self) -> None:
        self._ui_debouncer.cancel()

    # Playback -----------------------------------------------------------------

    def on_playback_changed(self, app_id: str) -> None:
        kind = app_kind_for(app_id)
        if kind is AppKind.NONE:
            _LOGGER.debug("Ignoring playback change for unsupported app %s", app_id)
            return
        signal = self._read_playback(app_id)
        if signal is None or is_explicitly_inactive(signal):
            _LOGGER.debug(
                "Playback inactive for %s (state=%s)", app_id, signal.state.value if signal else "no session"
            )
            self._publish_inactive(kind)
            return
        if not self._is_playing(signal):
            _LOGGER.debug("Playback for %s is not advancing; holding current state", app_id)
            return
        foreground = self._foreground_names(app_id)
        if foreground is None:
            _LOGGER.debug("Foreground unknown while %s plays; holding current state", app_id)
            return
        if not foreground:
            _LOGGER.debug("%s plays in the background", app_id)
            self._publish_inactive(kind)
            return
        self._publish_active(kind)

    def on_sessions_changed(self, app_ids: Iterable[str]) -> None:
        """Pick the first supported session that plays in the foreground, else go inactive."""

        for app_id in app_ids:
            kind = app_kind_for(app_id)
            if kind is AppKind.NONE:
                continue
            signal = self._read_playback(app_id)
            if not self._is_playing(signal):
                continue
            if self._foreground_names(app_id) is not True:
                continue
            _LOGGER.debug("Active session selected: %s", app_id)
            self._publish_active(kind)
            return
        _LOGGER.debug("No active foreground session")
        self._store.propose(INACTIVE_STATE)

    # Foreground ---------------------------------------------------------------

    def on_foreground_poll(self) -> None:
        signal = self._read_foreground()
        if signal is None or not signal.is_valid(self._clock()):
            return
        current = self._store.get()
        if current.app_kind is not AppKind.NONE:
            package = PACKAGE_BY_KIND.get(current.app_kind)
            if signal.app_id != package:
                _LOGGER.debug("Foreground moved from %s to %s", package, signal.app_id)
                self._publish_inactive(current.app_kind)
        if signal.app_id and app_kind_for(signal.app_id) is not AppKind.NONE:
            if self._store.get().app_kind is not app_kind_for(signal.app_id):
                self.on_playback_changed(signal.app_id)

    # UI changes ---------------------------------------------------------------

    def on_ui_changed(
        self,
        app_id: str,
        snapshot: Optional[Snapshot],
        windows: Optional[Sequence[Window]] = None,
    ) -> None:
        kind = app_kind_for(app_id)
        if kind is AppKind.NONE:
            return
        current = self._store.get()
        if current.app_kind is not kind or not current.is_playing:
            return
        candidate = self._resolver.resolve(
            app_id,
            snapshot if snapshot is not None else Snapshot.empty(),
            list(windows or ()),
            previous=current,
        )
        if candidate is None:
            return
        self._ui_debouncer.submit(_UiProposal(kind, candidate))

    def flush_pending(self) -> bool:
        return self._ui_debouncer.flush()

    def _apply_ui_proposal(self, proposal: _UiProposal) -> None:
        def _merge(current: OverlayState) -> Optional[OverlayState]:
            # The session may have ended or switched apps while the timer was pending.
            if current.app_kind is not proposal.app_kind or not current.is_playing:
                return None
            return current.with_candidate(proposal.candidate)

        self._store.update(_merge)

    # Helpers ------------------------------------------------------------------

    def _is_playing(self, signal: Optional[PlaybackSignal]) -> bool:
        return is_actively_playing(
            signal,
            now=self._monotonic(),
            stale_seconds=self._config.position_stale_seconds,
        )

    def _publish_active(self, kind: AppKind) -> None:
        def _activate(current: OverlayState) -> OverlayState:
            if current.app_kind is kind:
                return OverlayState(kind, True, current.play_mode, current.mask_enabled, current.hole)
            return OverlayState(kind, True, PlayMode.NONE, False, None)

        self._store.update(_activate)

    def _publish_inactive(self, kind: AppKind) -> None:
        def _deactivate(current: OverlayState) -> Optional[OverlayState]:
            if current.app_kind is not kind:
                return None
            return INACTIVE_STATE

        self._store.update(_deactivate)

    def _read_playback(self, app_id: str) -> Optional[PlaybackSignal]:
        try:
            return self._playback_source(app_id)
        except Exception as exc:
            _LOGGER.warning("Playback source failed for %s: %s", app_id, exc)
            return None

    def _read_foreground(self) -> Optional[ForegroundSignal]:
        try:
            return self._foreground_source()
        except Exception as exc:
            _LOGGER.warning("Foreground source failed: %s", exc)
            return None

    def _foreground_names(self, app_id: str) -> Optional[bool]:
        signal = self._read_foreground()
        if signal is None:
            return None
        return signal.names(app_id, self._clock())
