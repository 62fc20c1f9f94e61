"""Published overlay state and the resolver's candidate triple."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from audiofocus_engine.geometry import Rect


class AppKind(str, Enum):
    NONE = "none"
    YOUTUBE = "youtube"
    YOUTUBE_MUSIC = "youtube_music"
    SPOTIFY = "spotify"
    NEWPIPE = "newpipe"


class PlayMode(str, Enum):
    NONE = "none"
    AUDIO = "audio"
    VIDEO = "video"
    SHORT_FORM = "short_form"
    PICTURE_IN_PICTURE = "picture_in_picture"


@dataclass(frozen=True)
class ModeCandidate:
    """Resolver output for one snapshot: (mode, mask, hole)."""

    play_mode: PlayMode = PlayMode.NONE
    mask_enabled: bool = False
    hole: Optional[Rect] = None

    def __post_init__(self) -> None:
        if not self.mask_enabled and self.hole is not None:
            object.__setattr__(self, "hole", None)


NO_CANDIDATE = ModeCandidate()


@dataclass(frozen=True)
class OverlayState:
    """The single reconciled state read by the renderer and the visibility decision.

    Construction normalises the invariants: the hole only exists while masking,
    and nothing is masked without a target application.
    """

    app_kind: AppKind = AppKind.NONE
    is_playing: bool = False
    play_mode: PlayMode = PlayMode.NONE
    mask_enabled: bool = False
    hole: Optional[Rect] = None

    def __post_init__(self) -> None:
        if self.app_kind is AppKind.NONE and self.mask_enabled:
            object.__setattr__(self, "mask_enabled", False)
        if not self.mask_enabled and self.hole is not None:
            object.__setattr__(self, "hole", None)

    @property
    def candidate(self) -> ModeCandidate:
        return ModeCandidate(self.play_mode, self.mask_enabled, self.hole)

    def with_candidate(self, candidate: ModeCandidate) -> "OverlayState":
        return replace(
            self,
            play_mode=candidate.play_mode,
            mask_enabled=candidate.mask_enabled,
            hole=candidate.hole,
        )

    def blocks_touch_at(self, x: float, y: float) -> bool:
        """Whether the mask swallows a touch at ``(x, y)``; the hole always passes through."""

        if not self.mask_enabled:
            return False
        if self.hole is None:
            return True
        return not self.hole.contains_point(x, y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app": self.app_kind.value,
            "playing": self.is_playing,
            "mode": self.play_mode.value,
            "mask": self.mask_enabled,
            "hole": list(self.hole.as_tuple()) if self.hole is not None else None,
        }


INACTIVE_STATE = OverlayState()
