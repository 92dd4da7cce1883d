"""Tests for the UI preferences record."""

from __future__ import annotations

from bluehour.preferences import DEFAULT_PREFERENCES, load_preferences, normalize, save_preferences
from bluehour.storage import MemoryStore


def test_defaults_when_missing():
    assert load_preferences(MemoryStore()) == DEFAULT_PREFERENCES


def test_defaults_when_corrupt():
    assert load_preferences(MemoryStore({"preferences": "x"})) == DEFAULT_PREFERENCES


def test_unknown_theme_and_font_fall_back():
    p = normalize({"theme": "neon", "font": "comic"})
    assert p["theme"] == "blue"
    assert p["font"] == "system"


def test_background_dim_is_clamped():
    assert normalize({"background": {"dim": 5}})["background"]["dim"] == 0.70
    assert normalize({"background": {"dim": 0}})["background"]["dim"] == 0.15
    assert normalize({"background": {"dim": "dark"}})["background"]["dim"] == 0.38


def test_background_type_and_path():
    bg = normalize({"background": {"path": "  /tmp/a.png ", "type": "gif"}})["background"]
    assert bg == {"path": "/tmp/a.png", "type": "image", "dim": 0.38}
    assert normalize({"background": {"type": "video"}})["background"]["type"] == "video"


def test_save_normalizes_and_persists():
    store = MemoryStore()
    saved = save_preferences(store, {"theme": "dusk", "background": {"dim": 0.5}})
    assert saved["theme"] == "dusk"
    assert load_preferences(store) == saved
