"""Keyword vocabularies and tuning constants used by the heuristic classifiers.

Every keyword is lowercase; callers lowercase the element strings before matching.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

YOUTUBE_PACKAGE = "com.google.android.youtube"
YOUTUBE_MUSIC_PACKAGE = "com.google.android.apps.youtube.music"
SPOTIFY_PACKAGE = "com.spotify.music"
NEWPIPE_PACKAGE = "org.schabi.newpipe"

SURFACE_TYPE_TAGS: Tuple[str, ...] = ("surfaceview", "textureview", "playerview", "videoview")
VIDEO_PLAYER_MATCHES: Tuple[str, ...] = (
    "video_player",
    "watch_player",
    "player_view",
    "video player",
    "shorts player",
    "surface_view",
)

SHORT_FORM_KEYWORDS: Tuple[str, ...] = ("shorts", "reel")
PAGER_TYPE_TAGS: Tuple[str, ...] = ("recyclerview", "viewpager", "pager", "listview")

COLLAPSED_PLAYER_MATCHES: Tuple[str, ...] = (
    "mini_player",
    "miniplayer",
    "mini player",
    "collapsed_player",
    "collapsed player",
    "expand player",
)

AUDIO_MODE_TOKENS: Tuple[str, ...] = ("song", "audio")
VIDEO_MODE_TOKENS: Tuple[str, ...] = ("video",)

SELECTION_PHRASES: Tuple[str, ...] = ("currently playing", "now playing", ", selected")
DESELECTION_PHRASES: Tuple[str, ...] = ("switch to", "tap to watch", "tap to listen", "not selected")

SELECTED_SCORE = 100
CHECKED_SCORE = 100
ACTIVATED_SCORE = 80
FOCUSED_SCORE = 20
PHRASE_SCORE = 90
ANCESTOR_PENALTY = 5
MAX_ANCESTOR_DEPTH = 4

TOGGLE_PADDING_DP = 12.0
TOGGLE_WIDEN_RATIO = 0.9
TOGGLE_MAX_CONTAINER_FRACTION = 0.25

PIP_MAX_FRACTION = 0.40
NEAR_FULLSCREEN_FRACTION = 0.45
TOP_BAND_FRACTION = 0.15

COLLAPSED_PLAYER_BOTTOM_REGION = 0.30
COLLAPSED_PLAYER_MAX_HEIGHT = 0.20


@dataclass(frozen=True)
class ToggleKeywords:
    """Labels identifying an audio/video toggle: whole-label matches and contained phrases."""

    exact: Tuple[str, ...] = ()
    phrases: Tuple[str, ...] = ()

    def matches(self, label: str) -> bool:
        value = label.strip().lower()
        if not value:
            return False
        if any(value == key for key in self.exact):
            return True
        return any(key in value for key in self.phrases)


# The bare "Song"/"Video" tab labels are left to the tab scorer; only the
# accessibility action labels locate the toggle.
YOUTUBE_MUSIC_TOGGLE = ToggleKeywords(
    phrases=("switch to audio", "switch to song", "switch to video"),
)
SPOTIFY_TOGGLE = ToggleKeywords(
    phrases=("show video", "hide video", "switch to video", "switch to audio", "video"),
)
GENERIC_TOGGLE = ToggleKeywords(phrases=("switch to audio", "switch to video", "background play"))

SPOTIFY_TOGGLE_ID_HINTS: Tuple[str, ...] = (":id/video", ":id/player_video", ":id/toggle", ":id/switch")

VIDEO_SHOWING_HINTS: Tuple[str, ...] = ("hide video", "switch to audio", "switch to song")
AUDIO_SHOWING_HINTS: Tuple[str, ...] = ("show video", "switch to video")
