import logging

from .settings import clamp

LOGGER = logging.getLogger(__name__)

PREFERENCES_KEY = "preferences"

THEMES = ("blue", "dusk", "forest", "mono")
FONTS = ("system", "serif", "mono")

DEFAULT_BACKGROUND = {"path": "", "type": "image", "dim": 0.38}
DEFAULT_PREFERENCES = {"theme": "blue", "font": "system", "background": DEFAULT_BACKGROUND}


def _background(raw) -> dict:
    if not isinstance(raw, dict):
        return dict(DEFAULT_BACKGROUND)
    try:
        dim = float(raw.get("dim", DEFAULT_BACKGROUND["dim"]))
    except (TypeError, ValueError):
        dim = DEFAULT_BACKGROUND["dim"]
    path = raw.get("path")
    return {
        "path": path.strip() if isinstance(path, str) else "",
        "type": "video" if raw.get("type") == "video" else "image",
        "dim": clamp(dim, 0.15, 0.70),
    }


def normalize(raw) -> dict:
    if not isinstance(raw, dict):
        raw = {}
    return {
        "theme": raw.get("theme") if raw.get("theme") in THEMES else DEFAULT_PREFERENCES["theme"],
        "font": raw.get("font") if raw.get("font") in FONTS else DEFAULT_PREFERENCES["font"],
        "background": _background(raw.get("background")),
    }


def load_preferences(store) -> dict:
    raw = store.get(PREFERENCES_KEY, None)
    if raw is not None and not isinstance(raw, dict):
        LOGGER.warning("Ignoring malformed preferences record")
    return normalize(raw)


def save_preferences(store, prefs: dict) -> dict:
    prefs = normalize(prefs)
    store.set(PREFERENCES_KEY, prefs)
    return prefs
