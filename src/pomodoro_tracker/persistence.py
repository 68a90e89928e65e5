from __future__ import annotations

"""Mirror session state to the record store and hydrate it back.

Each entity is written as the full current snapshot of its own record kind
whenever its signal fires, so concurrent pending writes resolve as
last-write-wins. Hydration reads once and fills anything missing with
defaults.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .daily_stats import DailyStatsLedger
from .models import DailyStatEntry, Task
from .settings import Settings
from .stores import LayeredStore
from .task_store import TaskStore
from .timer import SessionTimer

_log = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionSnapshot:
    settings: Settings = field(default_factory=Settings)
    tasks: List[Task] = field(default_factory=list)
    active_task_id: Optional[str] = None
    session_count: int = 0
    total_sessions: int = 0
    counts_date: Optional[str] = None
    daily_stats: Dict[str, DailyStatEntry] = field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        stats: dict[str, Any] = {
            "sessionCount": self.session_count,
            "totalSessions": self.total_sessions,
        }
        if self.counts_date:
            stats["date"] = self.counts_date
        return {
            "settings": self.settings.to_record(),
            "tasks": [t.to_record() for t in self.tasks],
            "activeTaskId": self.active_task_id,
            "stats": stats,
            "dailyStats": {k: v.to_record() for k, v in self.daily_stats.items()},
        }

    @classmethod
    def from_record(cls, record: dict[str, Any] | None) -> "SessionSnapshot":
        """Build a snapshot from a stored record, dropping anything malformed.

        Bad fields fall back to their defaults and bad ledger days are
        skipped, so a damaged document never stops a session from opening.
        """
        record = record if isinstance(record, dict) else {}
        snap = cls()
        if isinstance(record.get("settings"), dict):
            snap.settings = Settings.from_record(record["settings"])
        raw_tasks = record.get("tasks")
        for raw in raw_tasks if isinstance(raw_tasks, list) else []:
            try:
                snap.tasks.append(Task.from_record(raw))
            except (KeyError, TypeError, ValueError) as e:
                _log.warning("skipping malformed task record: %s", e)
        active = record.get("activeTaskId")
        snap.active_task_id = str(active) if active else None
        stats = record.get("stats")
        if isinstance(stats, dict):
            snap.session_count = _count(stats.get("sessionCount"))
            snap.total_sessions = _count(stats.get("totalSessions"))
            snap.counts_date = stats.get("date") if isinstance(stats.get("date"), str) else None
        elif stats is not None:
            _log.warning("ignoring malformed stats record")
        daily = record.get("dailyStats")
        for key, raw in (daily.items() if isinstance(daily, dict) else ()):
            try:
                snap.daily_stats[str(key)] = DailyStatEntry.from_record(raw)
            except (AttributeError, TypeError, ValueError) as e:
                _log.warning("skipping malformed daily entry %s: %s", key, e)
        return snap


def _count(value: Any) -> int:
    """Non-negative int from a stored counter; anything unreadable is 0."""
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        _log.warning("ignoring malformed counter %r", value)
        return 0


class PersistenceSync:
    def __init__(self, store: LayeredStore, uid: str | None):
        self._store = store
        self._uid = uid
        self._timer: SessionTimer | None = None
        self._tasks: TaskStore | None = None
        self._ledger: DailyStatsLedger | None = None

    @property
    def uid(self) -> str | None:
        return self._uid

    # --- Hydration ------------------------------------------------------
    def hydrate(self) -> SessionSnapshot:
        try:
            record = self._store.read(self._uid)
        except Exception as e:
            _log.warning("hydration failed; starting from defaults: %s", e)
            record = None
        snap = SessionSnapshot.from_record(record)
        _log.info(
            "session hydrated",
            extra={"_json_tasks": len(snap.tasks), "_json_days": len(snap.daily_stats)},
        )
        return snap

    # --- Wiring ---------------------------------------------------------
    def attach(self, timer: SessionTimer, tasks: TaskStore, ledger: DailyStatsLedger) -> None:
        self.detach()
        self._timer, self._tasks, self._ledger = timer, tasks, ledger
        timer.settings_changed.connect(self.save_settings)
        timer.counts_changed.connect(self.save_stats)
        tasks.changed.connect(self.save_tasks)
        ledger.changed.connect(self.save_daily_stats)

    def detach(self) -> None:
        if self._timer is not None:
            self._timer.settings_changed.disconnect(self.save_settings)
            self._timer.counts_changed.disconnect(self.save_stats)
        if self._tasks is not None:
            self._tasks.changed.disconnect(self.save_tasks)
        if self._ledger is not None:
            self._ledger.changed.disconnect(self.save_daily_stats)
        self._timer = self._tasks = self._ledger = None

    # --- Writers --------------------------------------------------------
    def save_settings(self, *_args) -> None:
        if self._timer is not None:
            self._write({"settings": self._timer.settings.to_record()})

    def save_stats(self, *_args) -> None:
        if self._timer is not None:
            self._write({"stats": self._timer.counts_record()})

    def save_tasks(self, *_args) -> None:
        if self._tasks is not None:
            self._write(
                {
                    "tasks": [t.to_record() for t in self._tasks.tasks()],
                    "activeTaskId": self._tasks.active_task_id,
                }
            )

    def save_daily_stats(self, *_args) -> None:
        if self._ledger is not None:
            entries = self._ledger.entries()
            self._write({"dailyStats": {k: v.to_record() for k, v in entries.items()}})

    def _write(self, partial: dict) -> None:
        try:
            self._store.write(self._uid, partial)
        except Exception as e:
            _log.warning("persisting %s failed: %s", sorted(partial), e)


__all__ = ["PersistenceSync", "SessionSnapshot"]
