from __future__ import annotations

from typing import Callable, Optional

from audiofocus_engine.geometry import Rect
from audiofocus_engine.overlay_state import AppKind, OverlayState


def should_show(state: OverlayState) -> bool:
    """The mask window exists only while a supported app is playing."""

    return state.app_kind is not AppKind.NONE and state.is_playing


class OverlayVisibility:
    """Manages show/hide and mask flow for the overlay window while keeping Qt calls injected."""

    def __init__(self, log_fn: Callable[..., None]) -> None:
        self._last_state: bool | None = None
        self._last_mask: Optional[tuple] = None
        self._log = log_fn

    def apply(
        self,
        state: OverlayState,
        *,
        is_visible_fn: Callable[[], bool],
        show_fn: Callable[[], None],
        hide_fn: Callable[[], None],
        raise_fn: Callable[[], None],
        apply_mask_fn: Callable[[bool, Optional[Rect]], None],
        set_click_through_fn: Callable[[bool], None],
    ) -> bool:
        show = should_show(state)
        if show:
            mask_key = (state.mask_enabled, state.hole)
            if mask_key != self._last_mask:
                apply_mask_fn(state.mask_enabled, state.hole)
                # An unmasked overlay must never eat touches meant for the app.
                set_click_through_fn(not state.mask_enabled)
                self._last_mask = mask_key
            if not is_visible_fn():
                show_fn()
                raise_fn()
        else:
            if is_visible_fn():
                hide_fn()
            self._last_mask = None
        if self._last_state != show:
            self._log(
                "Overlay visibility set to %s; app=%s mode=%s mask=%s",
                "visible" if show else "hidden",
                state.app_kind.value,
                state.play_mode.value,
                state.mask_enabled,
            )
            self._last_state = show
        return show
