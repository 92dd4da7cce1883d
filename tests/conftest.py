from __future__ import annotations

from datetime import date

import matplotlib

matplotlib.use("Agg")

import pytest

from bluehour.analytics import AnalyticsAggregator
from bluehour.settings import Settings
from bluehour.storage import MemoryStore
from bluehour.timer import CountdownTimer


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeScheduler:
    """Deterministic stand-in for the tk ``after`` loop, driven by FakeClock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.pending = {}
        self._next = 0

    def call_later(self, delay_ms, fn):
        self._next += 1
        self.pending[self._next] = (self.clock.now + delay_ms / 1000, self._next, fn)
        return self._next

    def cancel(self, handle):
        self.pending.pop(handle, None)

    def run_due(self):
        """Fire everything due at the current clock time."""
        self._run_until(self.clock.now)

    def advance(self, seconds: float):
        target = self.clock.now + seconds
        self._run_until(target)
        self.clock.now = target

    def _run_until(self, target: float):
        for _ in range(1_000_000):
            due = [v for v in self.pending.values() if v[0] <= target]
            if not due:
                return
            when, handle, fn = min(due)
            del self.pending[handle]
            self.clock.now = max(self.clock.now, when)
            fn()
        raise AssertionError("scheduler did not settle")


class RecordingSink:
    def __init__(self):
        self.times = []
        self.statuses = []
        self.modes = []

    def render_time(self, minutes, seconds):
        self.times.append((minutes, seconds))

    def set_status(self, text):
        self.statuses.append(text)

    def highlight_mode(self, mode):
        self.modes.append(mode)


class FakePlayer:
    def __init__(self, fail: bool = False):
        self.played = []
        self.fail = fail

    def play_alarm(self, kind):
        self.played.append(kind)
        if self.fail:
            raise RuntimeError("no audio device")


class MutableToday:
    def __init__(self, d: date):
        self.d = d

    def __call__(self) -> date:
        return self.d


@pytest.fixture()
def today():
    return MutableToday(date(2026, 3, 14))


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def aggregator(store, today):
    return AnalyticsAggregator(store, today=today)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def scheduler(clock):
    return FakeScheduler(clock)


@pytest.fixture()
def sink():
    return RecordingSink()


@pytest.fixture()
def player():
    return FakePlayer()


@pytest.fixture()
def failing_player():
    return FakePlayer(fail=True)


@pytest.fixture()
def make_timer(aggregator, sink, scheduler, player, clock):
    def _make(**settings):
        return CountdownTimer(Settings(**settings), aggregator, sink, scheduler, player=player, clock=clock)

    return _make
