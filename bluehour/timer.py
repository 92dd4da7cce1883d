"""Countdown state machine driving focus and break sessions.

The machine never owns a thread. Ticks are requested from a scheduler
(``call_later(delay_ms, fn)`` / ``cancel(handle)``), which is the tk event
loop in the window and a fake in tests. Each firing is reconciled against a
monotonic clock, so a throttled or late callback catches up on the seconds
that really elapsed instead of drifting.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .alarm import notify_completion
from .policy import AUTO_START_DELAY_MS, next_mode
from .settings import Mode, Settings, seconds_for

LOGGER = logging.getLogger(__name__)


class Status(str, Enum):
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


STATUS_TEXT = {
    "ready": "Ready.",
    "focus": "Focusing…",
    "break": "Break…",
    "paused": "Paused.",
    "complete": "Session complete.",
}


class RenderSink(Protocol):
    def render_time(self, minutes: int, seconds: int) -> None: ...

    def set_status(self, text: str) -> None: ...

    def highlight_mode(self, mode: Mode) -> None: ...


@dataclass(frozen=True)
class TimerState:
    mode: Mode
    remaining_seconds: int
    running: bool
    status: Status


def format_mmss(secs: int) -> str:
    secs = max(0, int(secs))
    return f"{secs // 60:02d}:{secs % 60:02d}"


class CountdownTimer:
    def __init__(self, settings: Settings, aggregator, sink: RenderSink, scheduler,
                 player=None, clock=time.monotonic):
        self.settings = settings
        self.aggregator = aggregator
        self.sink = sink
        self.scheduler = scheduler
        self.player = player
        self.clock = clock
        self.mode = Mode.POMODORO
        self.remaining = seconds_for(self.mode, settings)
        self.status = Status.READY
        self._tick_handle = None
        self._auto_start_handle = None
        self._anchor = 0.0
        self._ticks_done = 0
        self._generation = 0

    @property
    def running(self) -> bool:
        return self.status is Status.RUNNING

    @property
    def auto_start_pending(self) -> bool:
        return self._auto_start_handle is not None

    def state(self) -> TimerState:
        return TimerState(self.mode, self.remaining, self.running, self.status)

    def refresh(self) -> None:
        """Push the whole current state to the sink."""
        self.sink.highlight_mode(self.mode)
        self._render_time()
        if self.running:
            self.sink.set_status(self._running_text())
        elif self.status is Status.PAUSED:
            self.sink.set_status(STATUS_TEXT["paused"])
        elif self.status is Status.COMPLETED:
            self.sink.set_status(STATUS_TEXT["complete"])
        else:
            self.sink.set_status(STATUS_TEXT["ready"])

    # ---------- controls ----------

    def start(self) -> None:
        if self.running:
            return
        self._cancel_auto_start()
        if self.remaining <= 0:
            self.remaining = seconds_for(self.mode, self.settings)
            self._render_time()
        self.status = Status.RUNNING
        self._generation += 1
        self._anchor = self.clock()
        self._ticks_done = 0
        self.sink.set_status(self._running_text())
        LOGGER.debug("Started %s with %ss left", self.mode.value, self.remaining)
        self._schedule_next()

    def pause(self) -> None:
        if not self.running:
            return
        self._cancel_tick()
        self.status = Status.PAUSED
        self.sink.set_status(STATUS_TEXT["paused"])
        LOGGER.debug("Paused %s at %ss", self.mode.value, self.remaining)

    def toggle(self) -> None:
        if self.running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        self._cancel_tick()
        self._cancel_auto_start()
        self.remaining = seconds_for(self.mode, self.settings)
        self.status = Status.READY
        self._render_time()
        self.sink.set_status(STATUS_TEXT["ready"])

    def set_mode(self, mode: Mode) -> None:
        if self.running:
            LOGGER.debug("Ignoring mode switch to %s while running", mode)
            return
        self._cancel_auto_start()
        self.mode = Mode(mode)
        self.remaining = seconds_for(self.mode, self.settings)
        self.status = Status.READY
        self.sink.highlight_mode(self.mode)
        self._render_time()
        self.sink.set_status(STATUS_TEXT["ready"])

    def apply_settings(self, settings: Settings) -> None:
        self.settings = settings
        if self.running:
            return
        self._cancel_auto_start()
        self.remaining = seconds_for(self.mode, settings)
        self.status = Status.READY
        self._render_time()
        self.sink.set_status(STATUS_TEXT["ready"])

    # ---------- ticking ----------

    def tick(self) -> None:
        """One logical second of countdown."""
        self._advance(1)

    def _advance(self, n: int) -> None:
        """Count down ``n`` seconds with a single analytics write."""
        if not self.running or n <= 0:
            return
        n = min(n, self.remaining)
        self._ticks_done += n
        if self.mode is Mode.POMODORO:
            self.aggregator.add_focus_seconds(n)
        self.remaining -= n
        self._render_time()
        if self.remaining == 0:
            self._complete()

    def _schedule_next(self) -> None:
        due_at = self._anchor + self._ticks_done + 1
        delay_ms = max(0, int(round((due_at - self.clock()) * 1000)))
        gen = self._generation
        self._tick_handle = self.scheduler.call_later(delay_ms, lambda: self._on_fire(gen))

    def _on_fire(self, gen: int) -> None:
        if gen != self._generation or not self.running:
            return
        self._tick_handle = None
        due = int(self.clock() - self._anchor) - self._ticks_done
        if due > 1:
            LOGGER.debug("Catching up %d ticks", due)
        self._advance(due)
        if self.running:
            self._schedule_next()

    def _complete(self) -> None:
        self._cancel_tick()
        self.status = Status.COMPLETED
        finished = self.mode
        if finished is Mode.POMODORO:
            self.aggregator.record_session_completed()
        self.sink.set_status(STATUS_TEXT["complete"])
        LOGGER.info("%s session complete", finished.value)
        notify_completion(self.settings.alarm_kind, self.player)
        if not self.settings.auto_next:
            return
        nxt = next_mode(finished, self.aggregator.sessions_today())
        self.set_mode(nxt)
        self._auto_start_handle = self.scheduler.call_later(AUTO_START_DELAY_MS, self._auto_start)

    def _auto_start(self) -> None:
        self._auto_start_handle = None
        self.start()

    # ---------- helpers ----------

    def _running_text(self) -> str:
        return STATUS_TEXT["focus"] if self.mode is Mode.POMODORO else STATUS_TEXT["break"]

    def _render_time(self) -> None:
        self.sink.render_time(self.remaining // 60, self.remaining % 60)

    def _cancel_tick(self) -> None:
        self._generation += 1
        if self._tick_handle is not None:
            self.scheduler.cancel(self._tick_handle)
            self._tick_handle = None

    def _cancel_auto_start(self) -> None:
        if self._auto_start_handle is not None:
            self.scheduler.cancel(self._auto_start_handle)
            self._auto_start_handle = None
