"""Tests for settings persistence."""

import json

from lanefall.config import DEFAULT_LANE_KEYS
from lanefall.settings import GameSettings, load_settings, save_settings


def test_defaults_when_missing(tmp_path):
    settings = load_settings(tmp_path / "settings.json")
    assert settings.lane_keys == list(DEFAULT_LANE_KEYS)


def test_round_trip(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    save_settings(GameSettings(soundfont="/sf/piano.sf2", lane_keys=["a", "s", "d", "f"]), path)
    loaded = load_settings(path)
    assert loaded.soundfont == "/sf/piano.sf2"
    assert loaded.lane_keys == ["a", "s", "d", "f"]


def test_invalid_lane_keys_fall_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"lane_keys": ["a", "a", "d", "f"], "unknown": 1}))
    assert load_settings(path).lane_keys == list(DEFAULT_LANE_KEYS)


def test_corrupt_file_falls_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_settings(path) == GameSettings()
