import logging
from dataclasses import dataclass, asdict
from enum import Enum

LOGGER = logging.getLogger(__name__)


class Mode(str, Enum):
    POMODORO = "pomodoro"
    SHORT = "short"
    LONG = "long"


ALARM_KINDS = ("soft", "bell", "digital", "none")

# field -> (default, low, high)
MINUTE_BOUNDS = {
    "pomodoro_minutes": (25, 1, 120),
    "short_minutes": (5, 1, 60),
    "long_minutes": (15, 1, 90),
}

_MODE_FIELDS = {
    Mode.POMODORO: "pomodoro_minutes",
    Mode.SHORT: "short_minutes",
    Mode.LONG: "long_minutes",
}


def clamp(n, lo, hi):
    return max(lo, min(hi, n))


def parse_minutes(value, field: str) -> int:
    """Coerce user or stored input into the bounded minute range of ``field``.

    Non-numeric input falls back to the field default; numbers are truncated
    and clamped, so ``0`` becomes the lower bound.
    """
    default, lo, hi = MINUTE_BOUNDS[field]
    try:
        val = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return default
    return clamp(val, lo, hi)


def parse_alarm(value) -> str:
    return value if value in ALARM_KINDS else "soft"


def parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class Settings:
    pomodoro_minutes: int = 25
    short_minutes: int = 5
    long_minutes: int = 15
    alarm_kind: str = "soft"
    auto_next: bool = False

    def __post_init__(self):
        # frozen, so normalized values go through object.__setattr__
        for field in MINUTE_BOUNDS:
            object.__setattr__(self, field, parse_minutes(getattr(self, field), field))
        object.__setattr__(self, "alarm_kind", parse_alarm(self.alarm_kind))
        object.__setattr__(self, "auto_next", parse_bool(self.auto_next))

    @classmethod
    def from_dict(cls, raw) -> "Settings":
        if not isinstance(raw, dict):
            return cls()
        return cls(
            pomodoro_minutes=raw.get("pomodoro_minutes"),
            short_minutes=raw.get("short_minutes"),
            long_minutes=raw.get("long_minutes"),
            alarm_kind=raw.get("alarm_kind"),
            auto_next=raw.get("auto_next", False),
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def minutes_for(self, mode: Mode) -> int:
        return getattr(self, _MODE_FIELDS[Mode(mode)])


def seconds_for(mode: Mode, settings: Settings) -> int:
    return settings.minutes_for(mode) * 60


def load_settings(store) -> Settings:
    raw = store.get("settings", None)
    if raw is None:
        return Settings()
    if not isinstance(raw, dict):
        LOGGER.warning("Ignoring malformed settings record: %r", raw)
        return Settings()
    return Settings.from_dict(raw)


def save_settings(store, settings: Settings) -> None:
    store.set("settings", settings.to_dict())
    LOGGER.info("Saved settings %s", settings)
