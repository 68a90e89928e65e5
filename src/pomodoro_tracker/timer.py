from __future__ import annotations

"""Pomodoro session timer.

Features:
 - WORK -> SHORT_BREAK / LONG_BREAK -> WORK cycle with a configurable
   long-break cadence.
 - Does not auto-start the next session; each completion stops the timer.
 - On a finished work session: credits the active task, bumps today's ledger
   entry and the today/total counters.
 - Notification + one-shot sound hook on every completion.

Design notes:
 - The countdown is driven by a Scheduler handle that only exists while
   running; pause/reset/completion/close cancel it.
 - Completion is detected by the tick that brings the remaining time to zero,
   so zero is never observable while idle and ``start`` at zero is a no-op.
 - The "today" counter carries the local date it belongs to and restarts at
   zero once that date is no longer today.
"""

import logging
from typing import Any, Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .daily_stats import DailyStatsLedger
from .models import LONG_BREAK, SHORT_BREAK, WORK, SessionState, SessionType
from .notifications import NotificationEmitter
from .scheduler import CancelHandle, Scheduler
from .settings import WORK_MINUTES, Settings, SettingsError, full_duration
from .task_store import TaskStore

TICK_INTERVAL_MS = 1000

SESSION_LABELS = {
    WORK: "Focus Time",
    SHORT_BREAK: "Short Break",
    LONG_BREAK: "Long Break",
}

_log = logging.getLogger(__name__)


def format_time(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


def session_label(session_type: SessionType) -> str:
    return SESSION_LABELS.get(session_type, SESSION_LABELS[WORK])


def focus_hours(total_sessions: int, work_minutes: int) -> int:
    return (total_sessions * work_minutes) // 60


class SessionTimer(QObject):
    tick = pyqtSignal(int, str)  # remaining_seconds, session_type
    state_changed = pyqtSignal(object)  # SessionState
    session_completed = pyqtSignal(str, str)  # finished type, next type
    counts_changed = pyqtSignal(int, int)  # today, total
    settings_changed = pyqtSignal(object)  # Settings
    error = pyqtSignal(str)

    def __init__(
        self,
        scheduler: Scheduler,
        task_store: TaskStore,
        ledger: DailyStatsLedger,
        notifier: NotificationEmitter,
        settings: Settings | None = None,
        completion_signal: Callable[[], None] | None = None,
        tick_interval_ms: int = TICK_INTERVAL_MS,
    ):
        super().__init__()
        self._scheduler = scheduler
        self._tasks = task_store
        self._ledger = ledger
        self._notifier = notifier
        self._completion_signal = completion_signal
        self._tick_interval_ms = tick_interval_ms
        self._tick_handle: Optional[CancelHandle] = None

        self._settings = settings or Settings()
        self._session_type: SessionType = WORK
        self._remaining: int = full_duration(WORK, self._settings)
        self._running = False
        self._today_count = 0
        self._total_count = 0
        self._counts_date: str = ledger.today_key()

    # --- Properties -----------------------------------------------------
    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def session_type(self) -> SessionType:
        return self._session_type

    @property
    def time_remaining(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def completed_work_sessions_today(self) -> int:
        if self._counts_date != self._ledger.today_key():
            return 0
        return self._today_count

    @property
    def completed_work_sessions_total(self) -> int:
        return self._total_count

    def full_duration(self) -> int:
        return full_duration(self._session_type, self._settings)

    def progress(self) -> float:
        full = self.full_duration()
        return (full - self._remaining) / full

    def state(self) -> SessionState:
        return SessionState(
            time_remaining=self._remaining,
            is_running=self._running,
            session_type=self._session_type,
            completed_work_sessions_today=self.completed_work_sessions_today,
            completed_work_sessions_total=self._total_count,
        )

    def counts_record(self) -> dict[str, Any]:
        return {
            "sessionCount": self.completed_work_sessions_today,
            "totalSessions": self._total_count,
            "date": self._ledger.today_key(),
        }

    # --- Loading --------------------------------------------------------
    def load(self, settings: Settings, today_count: int, total_count: int, counts_date: str | None = None) -> None:
        self._cancel_tick()
        self._settings = settings
        self._today_count = max(0, int(today_count))
        self._total_count = max(0, int(total_count))
        self._counts_date = counts_date or self._ledger.today_key()
        self._running = False
        self._session_type = WORK
        self._remaining = full_duration(WORK, settings)
        self._emit_state()

    # --- Public API -----------------------------------------------------
    def start(self) -> None:
        if self._running or self._remaining <= 0:
            return
        self._running = True
        self._tick_handle = self._scheduler.schedule_repeating(self._tick_interval_ms, self.on_tick)
        self._emit_state()

    def pause(self) -> None:
        self._cancel_tick()
        if not self._running:
            return
        self._running = False
        self._emit_state()

    def toggle(self) -> None:
        if self._running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        self._cancel_tick()
        self._running = False
        self._session_type = WORK
        self._remaining = full_duration(WORK, self._settings)
        self._emit_state()

    def close(self) -> None:
        self._cancel_tick()
        self._running = False

    def on_tick(self) -> None:
        if not self._running or self._remaining <= 0:
            return
        self._remaining -= 1
        self.tick.emit(self._remaining, self._session_type)
        if self._remaining == 0:
            self._complete_session()
        else:
            self._emit_state()

    def update_setting(self, key: str, value: Any) -> bool:
        try:
            new_settings = self._settings.with_value(key, value)
        except SettingsError as e:
            self.error.emit(str(e))
            return False
        self._settings = new_settings
        full = self.full_duration()
        if key == WORK_MINUTES and not self._running and self._session_type == WORK:
            self._remaining = full
        elif self._remaining > full:
            self._remaining = full
        self.settings_changed.emit(new_settings)
        self._emit_state()
        return True

    # --- Internal -------------------------------------------------------
    def _complete_session(self) -> None:
        self._cancel_tick()
        self._running = False
        finished = self._session_type
        if finished == WORK:
            today = self._ledger.today_key()
            if self._counts_date != today:
                self._today_count = 0
                self._counts_date = today
            self._today_count += 1
            self._total_count += 1
            self._tasks.credit_active_pomodoro()
            self._ledger.increment_pomodoro(today)
            if self._today_count % self._settings.long_break_interval == 0:
                self._switch_to(LONG_BREAK)
                self._notifier.show("Work Complete!", "Time for a long break")
            else:
                self._switch_to(SHORT_BREAK)
                self._notifier.show("Work Complete!", "Time for a short break")
            self.counts_changed.emit(self._today_count, self._total_count)
        else:
            self._switch_to(WORK)
            self._notifier.show("Break Complete!", "Time to get back to work")
        _log.info(
            "session completed",
            extra={"_json_finished": finished, "_json_next": self._session_type},
        )
        self.session_completed.emit(finished, self._session_type)
        self._emit_state()
        self._play_signal()

    def _switch_to(self, session_type: SessionType) -> None:
        self._session_type = session_type
        self._remaining = full_duration(session_type, self._settings)

    def _play_signal(self) -> None:
        if self._completion_signal is None:
            return
        try:
            self._completion_signal()
        except Exception as e:
            _log.debug("completion signal unavailable: %s", e)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _emit_state(self) -> None:
        self.state_changed.emit(self.state())


__all__ = ["SessionTimer", "format_time", "session_label", "focus_hours", "SESSION_LABELS"]
