import json
import logging
import os
import platform
import time
from pathlib import Path

APP_NAME = "BlueHour"

LOGGER = logging.getLogger(__name__)


def app_data_dir() -> Path:
    env = os.environ.get("BLUEHOUR_DATA")
    if env:
        p = Path(env).expanduser()
    elif platform.system() == "Darwin":
        p = Path.home() / "Library" / "Application Support" / APP_NAME
    elif platform.system() == "Windows":
        p = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming")) / APP_NAME
    else:
        p = Path.home() / f".{APP_NAME.lower()}"
    p.mkdir(parents=True, exist_ok=True)
    return p


class JsonStore:
    """Key-value persistence, one JSON document per logical key.

    Reads never raise: a missing file yields the default, a corrupt one is
    moved aside to ``<key>.corrupt-<ts>.json`` and also yields the default.
    """

    def __init__(self, base_dir=None):
        self.base_dir = Path(base_dir) if base_dir is not None else app_data_dir()

    def path_for(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def get(self, key: str, default=None):
        path = self.path_for(key)
        try:
            txt = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return default
        except OSError as e:
            LOGGER.warning("Failed to read %s: %s", path, e)
            return default
        if not txt:
            return default
        try:
            return json.loads(txt)
        except json.JSONDecodeError:
            backup = path.with_name(f"{key}.corrupt-{int(time.time())}.json")
            LOGGER.warning("Corrupt record %s, moved to %s", path, backup.name)
            try:
                os.replace(path, backup)
            except OSError:
                pass
            return default

    def set(self, key: str, value) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        payload = json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            # storage being unavailable must not stop the countdown
            LOGGER.error("Failed to save %s: %s", path, e)

    def delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            LOGGER.error("Failed to delete %s: %s", key, e)


class MemoryStore:
    def __init__(self, initial=None):
        self.data = dict(initial or {})

    def get(self, key, default=None):
        return json.loads(json.dumps(self.data[key])) if key in self.data else default

    def set(self, key, value):
        self.data[key] = json.loads(json.dumps(value))

    def delete(self, key):
        self.data.pop(key, None)
