"""Stateless heuristics over a :class:`Snapshot` and the on-screen window list.

Each classifier is a total function: empty or malformed input yields the
"no evidence" answer (0.0, False or None) and nothing here raises or mutates
its arguments.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from audiofocus_engine import vocabulary as vocab
from audiofocus_engine.geometry import Rect, area_fraction, clamp_to_bounds
from audiofocus_engine.overlay_state import PlayMode
from audiofocus_engine.snapshot import Element, Snapshot, Window


@dataclass(frozen=True)
class SelectionConfidence:
    """Evidence for and against a tab representing the active mode."""

    selected_score: int = 0
    unselected_score: int = 0

    @property
    def margin(self) -> int:
        return self.selected_score - self.unselected_score

    def merge(self, other: "SelectionConfidence") -> "SelectionConfidence":
        return SelectionConfidence(
            max(self.selected_score, other.selected_score),
            max(self.unselected_score, other.unselected_score),
        )


@dataclass(frozen=True)
class ToggleMatch:
    rect: Rect
    mode_hint: Optional[PlayMode] = None


def _contains_any(value: str, keys: Iterable[str]) -> bool:
    return bool(value) and any(key in value for key in keys)


def _searchable(element: Element) -> str:
    return " ".join(part for part in (element.view_id, element.description, element.text) if part).lower()


def _screen_rect(snapshot: Snapshot, rect: Rect) -> Rect:
    return clamp_to_bounds(rect, snapshot.screen_width, snapshot.screen_height)


# Video surfaces ---------------------------------------------------------------


def _is_video_surface(element: Element) -> bool:
    if _contains_any(element.type_tag.lower(), vocab.SURFACE_TYPE_TAGS):
        return True
    return _contains_any(_searchable(element), vocab.VIDEO_PLAYER_MATCHES)


def video_surface_fraction(snapshot: Snapshot, allow_hidden: bool = False) -> float:
    """Largest share of the screen covered by a video surface, in [0, 1].

    ``allow_hidden`` keeps invisible surfaces in play: once the mask is up the
    real player may be reported as obscured by the mask itself.
    """

    total = snapshot.screen_area
    if total <= 0:
        return 0.0
    best = 0.0
    for element in snapshot:
        if not element.visible and not allow_hidden:
            continue
        if element.bounds.is_empty or not _is_video_surface(element):
            continue
        best = max(best, area_fraction(_screen_rect(snapshot, element.bounds), total))
    return min(1.0, max(0.0, best))


# Short-form -----------------------------------------------------------------


def is_short_form_ui(snapshot: Snapshot) -> bool:
    """Detect a vertically paged short-video surface (YouTube Shorts, reels).

    A matching identifier or type is conclusive. Matching text alone is not
    (a "Shorts" menu entry exists everywhere), so it must coincide with a
    separate scrollable pager.
    """

    text_matches = []
    pagers = []
    for element in snapshot:
        structural = f"{element.view_id} {element.type_tag}".lower()
        if _contains_any(structural, vocab.SHORT_FORM_KEYWORDS):
            return True
        words = f"{element.text} {element.description}".lower()
        if _contains_any(words, vocab.SHORT_FORM_KEYWORDS):
            text_matches.append(element.index)
        if element.scrollable and _contains_any(element.type_tag.lower(), vocab.PAGER_TYPE_TAGS):
            pagers.append(element.index)
    return any(pager != match for pager in pagers for match in text_matches)


# Picture-in-picture -------------------------------------------------------------


def detect_picture_in_picture(
    windows: Optional[Sequence[Window]],
    app_id: str,
    screen_area: float,
    max_fraction: float = vocab.PIP_MAX_FRACTION,
) -> Optional[Window]:
    """Smallest window of ``app_id`` covering at most ``max_fraction`` of the screen."""

    if not windows or not app_id or screen_area <= 0:
        return None
    limit = screen_area * max_fraction
    candidates = [window for window in windows if window.owner == app_id and 0 < window.area <= limit]
    if not candidates:
        return None
    return min(candidates, key=lambda window: (window.area, window.bounds.top, window.bounds.left))


# Toggle controls -----------------------------------------------------------------


def _mode_hint(label: str) -> Optional[PlayMode]:
    lowered = label.lower()
    if _contains_any(lowered, vocab.VIDEO_SHOWING_HINTS):
        return PlayMode.VIDEO
    if _contains_any(lowered, vocab.AUDIO_SHOWING_HINTS):
        return PlayMode.AUDIO
    return None


def _widen_to_control(snapshot: Snapshot, element: Element, rect: Rect) -> Rect:
    best = rect
    total = snapshot.screen_area
    for ancestor in snapshot.ancestors(element, vocab.MAX_ANCESTOR_DEPTH):
        if ancestor.bounds.is_empty:
            continue
        candidate = _screen_rect(snapshot, ancestor.bounds)
        if candidate.is_empty:
            continue
        if area_fraction(candidate, total) > vocab.TOGGLE_MAX_CONTAINER_FRACTION:
            continue
        ratio = vocab.TOGGLE_WIDEN_RATIO
        if candidate.width >= best.width * ratio and candidate.height >= best.height * ratio:
            best = candidate
    return best


def _control_rect(snapshot: Snapshot, element: Element, padding_dp: float) -> Optional[Rect]:
    padding = max(0.0, padding_dp) * snapshot.density
    padded = _screen_rect(snapshot, element.bounds.inset(-padding, -padding))
    if padded.is_empty:
        return None
    return _widen_to_control(snapshot, element, padded)


def find_toggle_match(
    snapshot: Snapshot,
    keywords: vocab.ToggleKeywords,
    padding_dp: float = vocab.TOGGLE_PADDING_DP,
) -> Optional[ToggleMatch]:
    """First visible element (breadth-first) labelled like an audio/video toggle."""

    for element in snapshot.walk():
        if not element.visible or element.bounds.is_empty:
            continue
        label = next((value for value in (element.text, element.description) if keywords.matches(value)), None)
        if label is None:
            continue
        rect = _control_rect(snapshot, element, padding_dp)
        if rect is None:
            continue
        return ToggleMatch(rect, _mode_hint(label))
    return None


def find_toggle_region(
    snapshot: Snapshot,
    keywords: vocab.ToggleKeywords,
    padding_dp: float = vocab.TOGGLE_PADDING_DP,
) -> Optional[Rect]:
    match = find_toggle_match(snapshot, keywords, padding_dp)
    return match.rect if match is not None else None


def find_toggle_by_id(
    snapshot: Snapshot,
    id_hints: Sequence[str],
    padding_dp: float = vocab.TOGGLE_PADDING_DP,
) -> Optional[ToggleMatch]:
    for element in snapshot.walk():
        if not element.visible or element.bounds.is_empty:
            continue
        if not _contains_any(element.view_id.lower(), id_hints):
            continue
        rect = _control_rect(snapshot, element, padding_dp)
        if rect is not None:
            return ToggleMatch(rect)
    return None


# Tab selection ----------------------------------------------------------------------


def _tab_mode(element: Element) -> Optional[PlayMode]:
    label = element.label.lower()
    if not label:
        return None
    if label.startswith(vocab.AUDIO_MODE_TOKENS):
        return PlayMode.AUDIO
    if label.startswith(vocab.VIDEO_MODE_TOKENS):
        return PlayMode.VIDEO
    return None


def _level_scores(element: Element) -> Tuple[int, int]:
    words = f"{element.text} {element.description}".lower()
    selected = 0
    if element.selected:
        selected = max(selected, vocab.SELECTED_SCORE)
    if element.checked:
        selected = max(selected, vocab.CHECKED_SCORE)
    if element.activated:
        selected = max(selected, vocab.ACTIVATED_SCORE)
    if element.focused:
        selected = max(selected, vocab.FOCUSED_SCORE)
    if _contains_any(words, vocab.SELECTION_PHRASES):
        selected = max(selected, vocab.PHRASE_SCORE)
    unselected = vocab.PHRASE_SCORE if _contains_any(words, vocab.DESELECTION_PHRASES) else 0
    return selected, unselected


def selection_confidence(snapshot: Snapshot, element: Element) -> SelectionConfidence:
    """Score an element and up to four ancestors; each level up costs five points."""

    best_selected = 0
    best_unselected = 0
    levels = [element, *snapshot.ancestors(element, vocab.MAX_ANCESTOR_DEPTH)]
    for depth, node in enumerate(levels):
        selected, unselected = _level_scores(node)
        penalty = depth * vocab.ANCESTOR_PENALTY
        if selected:
            best_selected = max(best_selected, selected - penalty)
        if unselected:
            best_unselected = max(best_unselected, unselected - penalty)
    return SelectionConfidence(max(0, best_selected), max(0, best_unselected))


def resolve_selection(scores: Mapping[PlayMode, SelectionConfidence]) -> Optional[PlayMode]:
    """Pick the selected mode from aggregated evidence, or None when it is ambiguous."""

    if not scores:
        return None
    positive = [mode for mode, confidence in scores.items() if confidence.margin > 0]
    if len(positive) == 1:
        return positive[0]
    if len(scores) == 2:
        (first, first_conf), (second, second_conf) = scores.items()
        if _eliminated(first_conf) and second_conf.unselected_score == 0:
            return second
        if _eliminated(second_conf) and first_conf.unselected_score == 0:
            return first
    top = max(confidence.selected_score for confidence in scores.values())
    if top <= 0:
        return None
    leaders = [mode for mode, confidence in scores.items() if confidence.selected_score == top]
    return leaders[0] if len(leaders) == 1 else None


def _eliminated(confidence: SelectionConfidence) -> bool:
    return confidence.unselected_score > 0 and confidence.selected_score == 0


def tab_selection_scores(snapshot: Snapshot) -> Dict[PlayMode, SelectionConfidence]:
    scores: Dict[PlayMode, SelectionConfidence] = {}
    for element in snapshot.walk():
        if not element.visible:
            continue
        mode = _tab_mode(element)
        if mode is None:
            continue
        confidence = selection_confidence(snapshot, element)
        previous = scores.get(mode)
        scores[mode] = confidence if previous is None else previous.merge(confidence)
    return scores


def selected_mode_from_tabs(snapshot: Snapshot) -> Optional[PlayMode]:
    return resolve_selection(tab_selection_scores(snapshot))


# Layout fallbacks ------------------------------------------------------------------


def find_collapsed_player(snapshot: Snapshot) -> Optional[Rect]:
    """A short, bottom-anchored mini player bar, if one is on screen."""

    height = snapshot.screen_height
    if height <= 0:
        return None
    floor = height * (1.0 - vocab.COLLAPSED_PLAYER_BOTTOM_REGION)
    max_height = height * vocab.COLLAPSED_PLAYER_MAX_HEIGHT
    for element in snapshot.walk():
        if not element.visible or element.bounds.is_empty:
            continue
        if not _contains_any(_searchable(element), vocab.COLLAPSED_PLAYER_MATCHES):
            continue
        rect = _screen_rect(snapshot, element.bounds)
        if rect.is_empty:
            continue
        if rect.bottom >= floor and rect.height <= max_height:
            return rect
    return None


def top_band(snapshot: Snapshot, fraction: float = vocab.TOP_BAND_FRACTION) -> Optional[Rect]:
    """Full-width band at the top of the content area, used when no toggle was located."""

    root = snapshot.root
    content: Optional[Rect] = None
    if root is not None and not root.bounds.is_empty:
        content = _screen_rect(snapshot, root.bounds)
    if content is None or content.is_empty:
        content = Rect(0.0, 0.0, float(snapshot.screen_width), float(snapshot.screen_height))
    if content.is_empty:
        return None
    share = min(1.0, max(0.01, fraction))
    return Rect(content.left, content.top, content.right, content.top + content.height * share)
