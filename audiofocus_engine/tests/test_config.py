from __future__ import annotations

import json

import pytest

from audiofocus_engine import vocabulary as vocab
from audiofocus_engine.config import (
    EngineConfig,
    apply_env_overrides,
    config_from_mapping,
    load_engine_config,
    resolve_config_path,
)


def test_defaults_match_tuning_constants() -> None:
    config = EngineConfig()
    assert config.debounce_ms == 120
    assert config.debounce_seconds == pytest.approx(0.12)
    assert config.pip_max_fraction == 0.40
    assert config.near_fullscreen_fraction == 0.45
    assert config.video_threshold(vocab.YOUTUBE_PACKAGE) == 0.15
    assert config.video_threshold(vocab.SPOTIFY_PACKAGE) == 0.30
    assert config.video_threshold("com.example.player") == 0.2


def test_missing_file_uses_defaults(tmp_path) -> None:
    assert load_engine_config(tmp_path / "absent.json", env={}) == EngineConfig()
    assert load_engine_config(None, env={}) == EngineConfig()


def test_malformed_file_uses_defaults(tmp_path) -> None:
    path = tmp_path / "audiofocus.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_engine_config(path, env={}) == EngineConfig()
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert load_engine_config(path, env={}) == EngineConfig()


def test_file_values_are_coerced_and_clamped(tmp_path) -> None:
    path = resolve_config_path(tmp_path)
    path.write_text(
        json.dumps(
            {
                "debounce_ms": "5",
                "pip_max_fraction": 2,
                "top_band_fraction": "0.2",
                "toggle_padding_dp": "bogus",
                "debug": "yes",
                "video_thresholds": {vocab.NEWPIPE_PACKAGE: 0.5, "": 0.9, "org.example": -1},
            }
        ),
        encoding="utf-8",
    )

    config = load_engine_config(path, env={})

    assert path.name == "audiofocus.json"
    assert config.debounce_ms == 10
    assert config.pip_max_fraction == 1.0
    assert config.top_band_fraction == 0.2
    assert config.toggle_padding_dp == vocab.TOGGLE_PADDING_DP
    assert config.debug is True
    assert config.video_threshold(vocab.NEWPIPE_PACKAGE) == 0.5
    assert config.video_threshold(vocab.YOUTUBE_PACKAGE) == 0.15
    assert config.video_threshold("org.example") == 0.0
    assert "" not in config.video_thresholds


def test_env_overrides_win_over_file() -> None:
    config = config_from_mapping({"debounce_ms": 300, "debug": True})
    updated = apply_env_overrides(config, {"AUDIOFOCUS_DEBOUNCE_MS": "150", "AUDIOFOCUS_DEBUG": "off"})

    assert updated.debounce_ms == 150
    assert updated.debug is False
    assert config.debounce_ms == 300


def test_invalid_env_values_keep_current_settings() -> None:
    config = EngineConfig(debounce_ms=200)
    updated = apply_env_overrides(config, {"AUDIOFOCUS_DEBOUNCE_MS": "fast", "AUDIOFOCUS_DEBUG": "maybe"})

    assert updated.debounce_ms == 200
    assert updated.debug is False


def test_env_defaults_to_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("AUDIOFOCUS_DEBOUNCE_MS", "90")
    monkeypatch.delenv("AUDIOFOCUS_DEBUG", raising=False)

    assert apply_env_overrides(EngineConfig()).debounce_ms == 90
