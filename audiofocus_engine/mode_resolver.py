"""Per-application combination of classifier outputs into a :class:`ModeCandidate`.

Every supported application shares the same precedence and differs only in
the hooks it overrides:

1. picture-in-picture window
2. short-form UI
3. explicit mode selector (tabs / toggle labels)
4. video surface share against the app threshold
5. nothing captured -> no candidate
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence, Tuple, Type

from audiofocus_engine import classifiers
from audiofocus_engine import vocabulary as vocab
from audiofocus_engine.config import EngineConfig
from audiofocus_engine.geometry import Rect
from audiofocus_engine.overlay_state import NO_CANDIDATE, AppKind, ModeCandidate, OverlayState, PlayMode
from audiofocus_engine.snapshot import Snapshot, Window

_LOGGER = logging.getLogger("AudioFocus.Engine.Resolver")


class AppClassifier:
    """Shared precedence; subclasses plug in the heuristics that apply to their app."""

    kind: AppKind = AppKind.NONE
    package: str = ""
    toggle_keywords: vocab.ToggleKeywords = vocab.GENERIC_TOGGLE

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self._config = config or EngineConfig()

    @property
    def video_threshold(self) -> float:
        return self._config.video_threshold(self.package)

    def classify(
        self,
        snapshot: Snapshot,
        windows: Sequence[Window] = (),
        *,
        allow_hidden: bool = False,
    ) -> ModeCandidate:
        pip = classifiers.detect_picture_in_picture(
            windows, self.package, snapshot.screen_area, self._config.pip_max_fraction
        )
        if pip is not None:
            return ModeCandidate(PlayMode.PICTURE_IN_PICTURE, True, None)
        if snapshot.is_empty:
            return NO_CANDIDATE
        if self.detect_short_form(snapshot):
            return ModeCandidate(PlayMode.SHORT_FORM, True, None)
        fraction = classifiers.video_surface_fraction(snapshot, allow_hidden)
        mode = self.select_mode(snapshot)
        if mode is None:
            mode = PlayMode.VIDEO if fraction >= self.video_threshold else PlayMode.AUDIO
        return self.apply_overrides(snapshot, self._with_hole(snapshot, mode, fraction))

    # Hooks ------------------------------------------------------------------

    def detect_short_form(self, snapshot: Snapshot) -> bool:
        return False

    def select_mode(self, snapshot: Snapshot) -> Optional[PlayMode]:
        return None

    def find_toggle(self, snapshot: Snapshot) -> Optional[Rect]:
        return classifiers.find_toggle_region(snapshot, self.toggle_keywords, self._config.toggle_padding_dp)

    def apply_overrides(self, snapshot: Snapshot, candidate: ModeCandidate) -> ModeCandidate:
        return candidate

    # ------------------------------------------------------------------------

    def _with_hole(self, snapshot: Snapshot, mode: PlayMode, fraction: float) -> ModeCandidate:
        if mode is not PlayMode.VIDEO:
            return ModeCandidate(mode, False, None)
        if fraction >= self._config.near_fullscreen_fraction:
            return ModeCandidate(mode, True, None)
        hole = self.find_toggle(snapshot)
        if hole is None:
            hole = classifiers.top_band(snapshot, self._config.top_band_fraction)
        return ModeCandidate(mode, True, hole)


class YouTubeClassifier(AppClassifier):
    kind = AppKind.YOUTUBE
    package = vocab.YOUTUBE_PACKAGE

    def detect_short_form(self, snapshot: Snapshot) -> bool:
        return classifiers.is_short_form_ui(snapshot)


class YouTubeMusicClassifier(AppClassifier):
    kind = AppKind.YOUTUBE_MUSIC
    package = vocab.YOUTUBE_MUSIC_PACKAGE
    toggle_keywords = vocab.YOUTUBE_MUSIC_TOGGLE

    def select_mode(self, snapshot: Snapshot) -> Optional[PlayMode]:
        return classifiers.selected_mode_from_tabs(snapshot)

    def apply_overrides(self, snapshot: Snapshot, candidate: ModeCandidate) -> ModeCandidate:
        # A collapsed player is never masked, whatever video node sits beneath it.
        if candidate.mask_enabled and classifiers.find_collapsed_player(snapshot) is not None:
            return ModeCandidate(candidate.play_mode, False, None)
        return candidate


class SpotifyClassifier(AppClassifier):
    kind = AppKind.SPOTIFY
    package = vocab.SPOTIFY_PACKAGE
    toggle_keywords = vocab.SPOTIFY_TOGGLE

    def select_mode(self, snapshot: Snapshot) -> Optional[PlayMode]:
        mode = classifiers.selected_mode_from_tabs(snapshot)
        if mode is not None:
            return mode
        match = classifiers.find_toggle_match(snapshot, self.toggle_keywords, self._config.toggle_padding_dp)
        return match.mode_hint if match is not None else None

    def find_toggle(self, snapshot: Snapshot) -> Optional[Rect]:
        rect = super().find_toggle(snapshot)
        if rect is not None:
            return rect
        match = classifiers.find_toggle_by_id(
            snapshot, vocab.SPOTIFY_TOGGLE_ID_HINTS, self._config.toggle_padding_dp
        )
        return match.rect if match is not None else None


class NewPipeClassifier(AppClassifier):
    kind = AppKind.NEWPIPE
    package = vocab.NEWPIPE_PACKAGE


CLASSIFIER_TYPES: Tuple[Type[AppClassifier], ...] = (
    YouTubeClassifier,
    YouTubeMusicClassifier,
    SpotifyClassifier,
    NewPipeClassifier,
)

SUPPORTED_PACKAGES: Dict[str, AppKind] = {cls.package: cls.kind for cls in CLASSIFIER_TYPES}
PACKAGE_BY_KIND: Dict[AppKind, str] = {kind: package for package, kind in SUPPORTED_PACKAGES.items()}


def app_kind_for(app_id: Optional[str]) -> AppKind:
    if not app_id:
        return AppKind.NONE
    return SUPPORTED_PACKAGES.get(app_id, AppKind.NONE)


class ModeResolver:
    """Dispatches a snapshot to the classifier registered for its application."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self._config = config or EngineConfig()
        self._classifiers: Dict[str, AppClassifier] = {
            cls.package: cls(self._config) for cls in CLASSIFIER_TYPES
        }

    def classifier_for(self, app_id: str) -> Optional[AppClassifier]:
        return self._classifiers.get(app_id)

    def resolve(
        self,
        app_id: str,
        snapshot: Snapshot,
        windows: Sequence[Window] = (),
        previous: Optional[OverlayState] = None,
    ) -> Optional[ModeCandidate]:
        classifier = self.classifier_for(app_id)
        if classifier is None:
            return None
        allow_hidden = bool(
            previous is not None and previous.mask_enabled and previous.app_kind is classifier.kind
        )
        try:
            candidate = classifier.classify(snapshot, windows, allow_hidden=allow_hidden)
        except Exception as exc:  # pragma: no cover - classifiers are total
            _LOGGER.warning("Classifier for %s failed: %s", app_id, exc)
            return None
        _LOGGER.debug(
            "Resolved %s: mode=%s mask=%s hole=%s allow_hidden=%s elements=%d windows=%d",
            app_id,
            candidate.play_mode.value,
            candidate.mask_enabled,
            candidate.hole.as_tuple() if candidate.hole is not None else None,
            allow_hidden,
            len(snapshot),
            len(windows),
        )
        return candidate
