#!/usr/bin/env python3
"""Replay a captured UI snapshot through the classifiers and print the result.

Capture files are JSON::

    {
      "app_id": "com.google.android.youtube",
      "screen": {"width": 1080, "height": 2340, "density": 2.75},
      "root": {"bounds": [0, 0, 1080, 2340], "children": [...]},
      "windows": [{"owner": "com.google.android.youtube", "bounds": [...]}],
      "previous": {"app": "youtube", "mask": true}
    }
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from audiofocus_engine import classifiers
from audiofocus_engine.config import load_engine_config, resolve_config_path
from audiofocus_engine.logging_utils import configure_engine_logger, resolve_logs_dir
from audiofocus_engine.mode_resolver import ModeResolver, app_kind_for
from audiofocus_engine.overlay_state import AppKind, OverlayState
from audiofocus_engine.snapshot import Snapshot, windows_from_sequence


class CaptureError(Exception):
    """Raised when a capture file cannot be used."""


def load_capture(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CaptureError(f"capture not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise CaptureError(f"failed to read capture {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise CaptureError(f"capture {path} is not a JSON object")
    if not isinstance(data.get("app_id"), str) or not data["app_id"].strip():
        raise CaptureError(f"capture {path} has no app_id")
    return data


def _previous_state(raw: object, app_id: str) -> Optional[OverlayState]:
    if not isinstance(raw, Mapping):
        return None
    try:
        kind = AppKind(str(raw.get("app", app_kind_for(app_id).value)))
    except ValueError:
        kind = AppKind.NONE
    return OverlayState(app_kind=kind, is_playing=True, mask_enabled=bool(raw.get("mask", False)))


def classify_capture(data: Mapping[str, Any], resolver: ModeResolver) -> Dict[str, Any]:
    app_id = str(data["app_id"]).strip()
    snapshot = Snapshot.from_mapping(data)
    windows = windows_from_sequence(data.get("windows"))
    previous = _previous_state(data.get("previous"), app_id)
    candidate = resolver.resolve(app_id, snapshot, windows, previous=previous)
    pip = classifiers.detect_picture_in_picture(windows, app_id, snapshot.screen_area)
    report: Dict[str, Any] = {
        "app_id": app_id,
        "app": app_kind_for(app_id).value,
        "elements": len(snapshot),
        "signals": {
            "surface_fraction": round(classifiers.video_surface_fraction(snapshot), 4),
            "short_form": classifiers.is_short_form_ui(snapshot),
            "picture_in_picture": list(pip.bounds.as_tuple()) if pip is not None else None,
            "tab_mode": _value(classifiers.selected_mode_from_tabs(snapshot)),
        },
        "candidate": None,
    }
    if candidate is not None:
        report["candidate"] = {
            "mode": candidate.play_mode.value,
            "mask": candidate.mask_enabled,
            "hole": list(candidate.hole.as_tuple()) if candidate.hole is not None else None,
        }
    return report


def _value(mode: object) -> Optional[str]:
    return getattr(mode, "value", None)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify captured UI snapshots with the AudioFocus engine")
    parser.add_argument("captures", nargs="+", type=Path, help="Capture JSON files")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to audiofocus.json (default: ./audiofocus.json when present)",
    )
    parser.add_argument("--debug", action="store_true", help="Log classifier decisions to stderr")
    parser.add_argument("--log-file", action="store_true", help="Also write engine logs to the default log directory")
    parser.add_argument("--log-dir", type=Path, help="Write engine logs to this directory")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    config = load_engine_config(args.config if args.config is not None else resolve_config_path())
    log_dir: Optional[Path] = args.log_dir
    if log_dir is None and args.log_file:
        log_dir = resolve_logs_dir()
    logger = configure_engine_logger(args.debug or config.debug, log_dir=log_dir)
    if args.debug and not logger.handlers:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(stream)
    resolver = ModeResolver(config)

    exit_code = 0
    for path in args.captures:
        try:
            data = load_capture(path)
        except CaptureError as exc:
            print(f"error: {exc}", file=sys.stderr)
            exit_code = 2
            continue
        print(json.dumps(classify_capture(data, resolver), indent=2, sort_keys=True))
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
