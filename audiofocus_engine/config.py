"""Engine tuning loaded from ``audiofocus.json`` with environment overrides."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from audiofocus_engine import vocabulary as vocab

CONFIG_FILENAME = "audiofocus.json"
DEBOUNCE_ENV_VAR = "AUDIOFOCUS_DEBOUNCE_MS"
DEBUG_ENV_VAR = "AUDIOFOCUS_DEBUG"

DEFAULT_VIDEO_THRESHOLDS: Dict[str, float] = {
    vocab.YOUTUBE_PACKAGE: 0.15,
    vocab.YOUTUBE_MUSIC_PACKAGE: 0.20,
    vocab.SPOTIFY_PACKAGE: 0.30,
    vocab.NEWPIPE_PACKAGE: 0.15,
}


@dataclass(frozen=True)
class EngineConfig:
    debounce_ms: int = 120
    near_fullscreen_fraction: float = vocab.NEAR_FULLSCREEN_FRACTION
    pip_max_fraction: float = vocab.PIP_MAX_FRACTION
    toggle_padding_dp: float = vocab.TOGGLE_PADDING_DP
    top_band_fraction: float = vocab.TOP_BAND_FRACTION
    foreground_window_seconds: float = 60.0
    position_stale_seconds: float = 2.0
    video_thresholds: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_VIDEO_THRESHOLDS))
    debug: bool = False

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    def video_threshold(self, app_id: str, fallback: float = 0.2) -> float:
        return float(self.video_thresholds.get(app_id, fallback))


def _coerce_int(raw: object, fallback: int, *, minimum: int, maximum: Optional[int] = None) -> int:
    try:
        value = int(raw)  # type: ignore[call-overload]
    except Exception:
        value = fallback
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _coerce_float(raw: object, fallback: float, *, minimum: float, maximum: Optional[float] = None) -> float:
    try:
        value = float(raw)  # type: ignore[arg-type]
    except Exception:
        value = fallback
    if value != value:  # NaN
        value = fallback
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _coerce_bool(raw: object, fallback: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        token = raw.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
        return fallback
    if isinstance(raw, (int, float)):
        return bool(raw)
    return fallback


def _coerce_thresholds(raw: object) -> Dict[str, float]:
    thresholds = dict(DEFAULT_VIDEO_THRESHOLDS)
    if not isinstance(raw, Mapping):
        return thresholds
    for key, value in raw.items():
        if not isinstance(key, str) or not key.strip():
            continue
        thresholds[key.strip()] = _coerce_float(value, thresholds.get(key.strip(), 0.2), minimum=0.0, maximum=1.0)
    return thresholds


def config_from_mapping(data: Mapping[str, Any]) -> EngineConfig:
    defaults = EngineConfig()
    return EngineConfig(
        debounce_ms=_coerce_int(data.get("debounce_ms"), defaults.debounce_ms, minimum=10, maximum=2000),
        near_fullscreen_fraction=_coerce_float(
            data.get("near_fullscreen_fraction"), defaults.near_fullscreen_fraction, minimum=0.0, maximum=1.0
        ),
        pip_max_fraction=_coerce_float(
            data.get("pip_max_fraction"), defaults.pip_max_fraction, minimum=0.01, maximum=1.0
        ),
        toggle_padding_dp=_coerce_float(data.get("toggle_padding_dp"), defaults.toggle_padding_dp, minimum=0.0),
        top_band_fraction=_coerce_float(
            data.get("top_band_fraction"), defaults.top_band_fraction, minimum=0.01, maximum=1.0
        ),
        foreground_window_seconds=_coerce_float(
            data.get("foreground_window_seconds"), defaults.foreground_window_seconds, minimum=1.0
        ),
        position_stale_seconds=_coerce_float(
            data.get("position_stale_seconds"), defaults.position_stale_seconds, minimum=0.1
        ),
        video_thresholds=_coerce_thresholds(data.get("video_thresholds")),
        debug=_coerce_bool(data.get("debug"), defaults.debug),
    )


def apply_env_overrides(config: EngineConfig, env: Optional[Mapping[str, str]] = None) -> EngineConfig:
    source = os.environ if env is None else env
    updated = config
    debounce_raw = source.get(DEBOUNCE_ENV_VAR)
    if debounce_raw:
        updated = replace(
            updated,
            debounce_ms=_coerce_int(debounce_raw, updated.debounce_ms, minimum=10, maximum=2000),
        )
    debug_raw = source.get(DEBUG_ENV_VAR)
    if debug_raw is not None:
        updated = replace(updated, debug=_coerce_bool(debug_raw, updated.debug))
    return updated


def load_engine_config(path: Optional[Path], env: Optional[Mapping[str, str]] = None) -> EngineConfig:
    """Read the config file; missing or malformed files fall back to defaults."""

    data: Mapping[str, Any] = {}
    if path is not None:
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
        except (FileNotFoundError, OSError, json.JSONDecodeError):
            loaded = {}
        if isinstance(loaded, dict):
            data = loaded
    return apply_env_overrides(config_from_mapping(data), env)


def resolve_config_path(root: Optional[Path] = None) -> Path:
    base = root if root is not None else Path.cwd()
    return base / CONFIG_FILENAME
