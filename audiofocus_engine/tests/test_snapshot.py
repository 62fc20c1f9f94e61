from __future__ import annotations

import json

import pytest

from audiofocus_engine.geometry import Rect
from audiofocus_engine.snapshot import Snapshot, windows_from_sequence


def _payload() -> dict:
    return {
        "screen": {"width": 1080, "height": 2340, "density": 2.75},
        "root": {
            "bounds": [0, 0, 1080, 2340],
            "children": [
                {
                    "bounds": [0, 0, 1080, 600],
                    "view_id": "app:id/header",
                    "children": [{"bounds": [10, 10, 200, 80], "text": "Song", "selected": True}],
                },
                {"bounds": [0, 600, 1080, 2340], "type": "android.view.SurfaceView", "visible": False},
            ],
        },
    }


def test_from_mapping_flattens_breadth_first() -> None:
    snapshot = Snapshot.from_mapping(_payload())

    assert len(snapshot) == 4
    assert snapshot.root is not None and snapshot.root.index == 0
    header, surface, label = snapshot.element(1), snapshot.element(2), snapshot.element(3)
    assert header.view_id == "app:id/header"
    assert surface.type_tag == "android.view.SurfaceView"
    assert surface.visible is False
    assert label.selected is True
    assert label.parent == 1
    assert snapshot.children(snapshot.root) == [header, surface]
    assert [element.index for element in snapshot.walk()] == [0, 1, 2, 3]
    assert snapshot.density == 2.75


def test_ancestors_are_nearest_first_and_limited() -> None:
    snapshot = Snapshot.from_mapping(_payload())
    label = snapshot.element(3)

    assert [element.index for element in snapshot.ancestors(label, 4)] == [1, 0]
    assert [element.index for element in snapshot.ancestors(label, 1)] == [1]
    assert snapshot.parent(snapshot.element(0)) is None


def test_label_prefers_text_over_description() -> None:
    payload = {
        "root": {
            "bounds": [0, 0, 100, 100],
            "children": [
                {"bounds": [0, 0, 10, 10], "text": "  ", "description": "Switch to video"},
                {"bounds": [0, 0, 10, 10], "text": "Video", "description": "ignored"},
            ],
        }
    }
    snapshot = Snapshot.from_mapping(payload)

    assert snapshot.element(1).label == "Switch to video"
    assert snapshot.element(2).label == "Video"


def test_missing_screen_metrics_fall_back_to_root_bounds() -> None:
    snapshot = Snapshot.from_mapping({"root": {"bounds": [0, 0, 720, 1600]}})

    assert snapshot.screen_width == 720
    assert snapshot.screen_height == 1600
    assert snapshot.density == 1.0


def test_malformed_payload_degrades_to_empty_snapshot() -> None:
    snapshot = Snapshot.from_mapping({"screen": {"width": "wide", "height": 2340}, "root": "nope"})

    assert snapshot.is_empty
    assert snapshot.root is None
    assert list(snapshot.walk()) == []
    assert snapshot.screen_width == 0
    assert snapshot.screen_area == 0.0


def test_non_mapping_children_are_skipped() -> None:
    snapshot = Snapshot.from_mapping({"root": {"bounds": [0, 0, 10, 10], "children": [None, 3, {"text": "ok"}]}})

    assert len(snapshot) == 2
    assert snapshot.element(1).text == "ok"
    assert snapshot.element(1).bounds == Rect(0, 0, 0, 0)


def test_windows_from_sequence_skips_malformed_entries() -> None:
    windows = windows_from_sequence(
        [
            {"owner": "com.google.android.youtube", "bounds": [700, 1800, 1060, 2000]},
            {"owner": "", "bounds": [0, 0, 10, 10]},
            "junk",
            {"owner": "com.spotify.music"},
        ]
    )

    assert [window.owner for window in windows] == ["com.google.android.youtube", "com.spotify.music"]
    assert windows[0].area == 360 * 200
    assert windows[1].area == 0.0
    assert windows_from_sequence(None) == []


@pytest.mark.parametrize(
    "raw",
    [
        '{"screen": {"width": Infinity, "height": 2340}, "root": {"bounds": [0, 0, 1080, 2340]}}',
        '{"root": {"bounds": [0, 0, NaN, NaN]}}',
        '{"root": {"bounds": [0, 0, Infinity, 100]}}',
        '{"screen": {"width": 1080, "height": 2340, "density": Infinity}, "root": {"bounds": [0, 0, 1080, 2340]}}',
    ],
)
def test_non_finite_numbers_degrade_instead_of_raising(raw) -> None:
    snapshot = Snapshot.from_mapping(json.loads(raw))

    assert snapshot.root is not None
    assert 0 <= snapshot.screen_width < 1_000_000
    assert 0 <= snapshot.screen_height < 1_000_000
    assert snapshot.density == 1.0


def test_non_finite_bounds_become_empty() -> None:
    snapshot = Snapshot.from_mapping(json.loads('{"root": {"bounds": [0, 0, Infinity, 100]}}'))

    assert snapshot.root.bounds == Rect(0, 0, 0, 0)
    assert snapshot.screen_area == 0.0
