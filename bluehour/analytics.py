import logging
from dataclasses import dataclass
from datetime import date, timedelta

import pandas as pd

LOGGER = logging.getLogger(__name__)

ANALYTICS_KEY = "analytics"


def current_date_key(today=date.today) -> str:
    return today().isoformat()


@dataclass
class DayRecord:
    key: str
    focus_seconds: int = 0
    completed_sessions: int = 0

    @property
    def minutes(self) -> int:
        return self.focus_seconds // 60

    def to_dict(self) -> dict:
        return {
            "focus_seconds": self.focus_seconds,
            "minutes": self.minutes,
            "completed_sessions": self.completed_sessions,
        }

    @classmethod
    def from_dict(cls, key: str, raw) -> "DayRecord":
        if not isinstance(raw, dict):
            return cls(key)
        return cls(
            key,
            focus_seconds=_non_negative(raw.get("focus_seconds")),
            completed_sessions=_non_negative(raw.get("completed_sessions")),
        )


def _non_negative(v) -> int:
    try:
        return max(0, int(v))
    except (TypeError, ValueError):
        return 0


def _is_day_key(key) -> bool:
    try:
        date.fromisoformat(str(key))
        return True
    except ValueError:
        return False


class AnalyticsAggregator:
    """Per-day focus statistics, persisted on every mutation.

    ``today`` is consulted on every call, so accumulation that crosses
    midnight lands in the new day's record from the first tick after it.
    """

    def __init__(self, store, today=date.today):
        self.store = store
        self.today = today
        self.days = self._load()

    def _load(self) -> dict:
        raw = self.store.get(ANALYTICS_KEY, None)
        if raw is None:
            return {}
        if not isinstance(raw, dict) or not isinstance(raw.get("days"), dict):
            LOGGER.warning("Ignoring malformed analytics store")
            return {}
        return {
            k: DayRecord.from_dict(k, v)
            for k, v in raw["days"].items()
            if _is_day_key(k)
        }

    def _save(self) -> None:
        self.store.set(ANALYTICS_KEY, {"days": {k: r.to_dict() for k, r in self.days.items()}})

    def date_key(self) -> str:
        return current_date_key(self.today)

    def _record_for_today(self) -> DayRecord:
        k = self.date_key()
        if k not in self.days:
            self.days[k] = DayRecord(k)
        return self.days[k]

    def add_focus_seconds(self, n: int = 1) -> None:
        if n <= 0:
            return
        rec = self._record_for_today()
        rec.focus_seconds += int(n)
        self._save()

    def record_session_completed(self) -> None:
        rec = self._record_for_today()
        rec.completed_sessions += 1
        self._save()
        LOGGER.info("Completed focus session %d for %s", rec.completed_sessions, rec.key)

    def today_record(self) -> DayRecord:
        k = self.date_key()
        rec = self.days.get(k)
        return DayRecord(k, rec.focus_seconds, rec.completed_sessions) if rec else DayRecord(k)

    def sessions_today(self) -> int:
        return self.today_record().completed_sessions

    def last_7_days(self) -> list:
        end = pd.Timestamp(self.today())
        out = []
        for ts in pd.date_range(end=end, periods=7, freq="D"):
            k = ts.date().isoformat()
            rec = self.days.get(k)
            if rec is None:
                out.append(DayRecord(k))
            else:
                out.append(DayRecord(k, rec.focus_seconds, rec.completed_sessions))
        return out

    def summary(self) -> dict:
        days = self.last_7_days()
        return {
            "week_minutes": sum(d.minutes for d in days),
            "week_sessions": sum(d.completed_sessions for d in days),
            "today_minutes": days[-1].minutes,
        }

    def clear_all(self) -> None:
        self.days = {}
        self.store.delete(ANALYTICS_KEY)
        LOGGER.info("Cleared analytics")

    def to_frame(self) -> pd.DataFrame:
        return records_frame(self.days.values())

    def streaks(self) -> tuple:
        return compute_streak(
            [date.fromisoformat(r.key) for r in self.days.values() if r.focus_seconds > 0],
            self.today(),
        )


def records_frame(records) -> pd.DataFrame:
    rows = [
        {"day": pd.Timestamp(r.key), "minutes": r.minutes, "sessions": r.completed_sessions}
        for r in records
    ]
    df = pd.DataFrame(rows, columns=["day", "minutes", "sessions"])
    return df.sort_values("day").reset_index(drop=True)


def compute_streak(dates, today: date) -> tuple:
    """Return ``(current, longest)`` runs of consecutive active days.

    The current run may end yesterday; today's session might not have
    happened yet.
    """
    if not dates:
        return 0, 0
    norm = sorted(set(dates))
    longest = 0
    cur_len = 0
    prev = None
    for d in norm:
        if prev is None or (d - prev).days == 1:
            cur_len += 1
        else:
            cur_len = 1
        prev = d
        longest = max(longest, cur_len)
    active = set(norm)
    cur = today if today in active else today - timedelta(days=1)
    current = 0
    while cur in active:
        current += 1
        cur -= timedelta(days=1)
    return current, longest
