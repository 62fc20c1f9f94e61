from __future__ import annotations

from audiofocus_client.visibility_helper import OverlayVisibility, should_show
from audiofocus_engine.geometry import Rect
from audiofocus_engine.overlay_state import INACTIVE_STATE, AppKind, OverlayState, PlayMode


class FakeWindow:
    def __init__(self) -> None:
        self.visible = False
        self.calls = []

    def is_visible(self) -> bool:
        return self.visible

    def show(self) -> None:
        self.visible = True
        self.calls.append("show")

    def hide(self) -> None:
        self.visible = False
        self.calls.append("hide")

    def raise_(self) -> None:
        self.calls.append("raise")

    def apply_mask(self, enabled, hole) -> None:
        self.calls.append(("mask", enabled, hole))

    def set_click_through(self, enabled) -> None:
        self.calls.append(("click_through", enabled))


def _apply(helper: OverlayVisibility, window: FakeWindow, state: OverlayState) -> bool:
    return helper.apply(
        state,
        is_visible_fn=window.is_visible,
        show_fn=window.show,
        hide_fn=window.hide,
        raise_fn=window.raise_,
        apply_mask_fn=window.apply_mask,
        set_click_through_fn=window.set_click_through,
    )


def test_should_show_requires_supported_playing_app():
    assert should_show(OverlayState(AppKind.SPOTIFY, True)) is True
    assert should_show(OverlayState(AppKind.SPOTIFY, False)) is False
    assert should_show(INACTIVE_STATE) is False


def test_masked_state_shows_window_and_blocks_touches():
    logs = []
    helper = OverlayVisibility(lambda *args: logs.append(args))
    window = FakeWindow()
    hole = Rect(0, 0, 1080, 351)

    assert _apply(helper, window, OverlayState(AppKind.YOUTUBE, True, PlayMode.VIDEO, True, hole)) is True

    assert window.calls == [("mask", True, hole), ("click_through", False), "show", "raise"]
    assert len(logs) == 1


def test_unmasked_playback_is_click_through():
    helper = OverlayVisibility(lambda *args: None)
    window = FakeWindow()

    _apply(helper, window, OverlayState(AppKind.YOUTUBE_MUSIC, True, PlayMode.AUDIO, False))

    assert ("click_through", True) in window.calls
    assert ("mask", False, None) in window.calls


def test_repeated_state_does_not_reapply_mask():
    logs = []
    helper = OverlayVisibility(lambda *args: logs.append(args))
    window = FakeWindow()
    state = OverlayState(AppKind.YOUTUBE, True, PlayMode.VIDEO, True, None)

    _apply(helper, window, state)
    window.calls.clear()
    _apply(helper, window, state)

    assert window.calls == []
    assert len(logs) == 1


def test_inactive_state_hides_window_and_resets_mask():
    helper = OverlayVisibility(lambda *args: None)
    window = FakeWindow()
    masked = OverlayState(AppKind.YOUTUBE, True, PlayMode.VIDEO, True, None)

    _apply(helper, window, masked)
    assert _apply(helper, window, INACTIVE_STATE) is False
    assert window.calls[-1] == "hide"

    window.calls.clear()
    _apply(helper, window, masked)
    assert window.calls[0] == ("mask", True, None)
