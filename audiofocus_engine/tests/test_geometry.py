from __future__ import annotations

import pytest

from audiofocus_engine.geometry import EMPTY_RECT, Rect, area_fraction, clamp_to_bounds, screen_area


def test_clamp_to_bounds_trims_to_screen() -> None:
    clamped = clamp_to_bounds(Rect(-10, -5, 2000, 3000), 1080, 2340)
    assert clamped == Rect(0, 0, 1080, 2340)


def test_clamp_to_bounds_never_inverts_edges() -> None:
    clamped = clamp_to_bounds(Rect(1200, 10, 1300, 20), 1080, 2340)
    assert clamped.left == 1080
    assert clamped.right == 1080
    assert clamped.is_empty


def test_area_fraction_is_bounded() -> None:
    total = screen_area(1080, 2340)
    assert area_fraction(Rect(0, 0, 540, 1170), total) == pytest.approx(0.25)
    assert area_fraction(Rect(0, 0, 5000, 5000), total) == 1.0
    assert area_fraction(Rect(0, 0, 10, 10), 0.0) == 0.0
    assert screen_area(0, 2340) == 0.0


def test_inset_and_containment() -> None:
    label = Rect(100, 100, 120, 120)
    padded = label.inset(-12, -12)
    assert padded == Rect(88, 88, 132, 132)
    assert padded.contains(label)
    assert not label.contains(padded)
    assert not EMPTY_RECT.contains(label)
    assert padded.contains_point(88, 88)
    assert not padded.contains_point(132, 100)


def test_from_sequence_tolerates_malformed_bounds() -> None:
    assert Rect.from_sequence([1, 2, 3, 4]) == Rect(1, 2, 3, 4)
    assert Rect.from_sequence(None) is EMPTY_RECT
    assert Rect.from_sequence([1, 2, 3]) is EMPTY_RECT
    assert Rect.from_sequence(["a", 2, 3, 4]) is EMPTY_RECT
    assert Rect.from_sequence(7) is EMPTY_RECT  # type: ignore[arg-type]


def test_from_sequence_rejects_non_finite_values() -> None:
    assert Rect.from_sequence([0, 0, float("inf"), 100]) is EMPTY_RECT
    assert Rect.from_sequence([0, float("nan"), 10, 100]) is EMPTY_RECT
    assert Rect.from_sequence([0, 0, "-inf", 100]) is EMPTY_RECT
