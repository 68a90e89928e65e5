from __future__ import annotations

"""TaskStore keeps the ordered task list and the single active task reference."""

import time
from dataclasses import replace
from typing import Callable, Iterable, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .daily_stats import DailyStatsLedger
from .models import Task, utc_now_iso

_UPDATABLE = {"title", "completed", "pomodoro_count"}


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class TaskStore(QObject):
    changed = pyqtSignal()
    error = pyqtSignal(str)

    def __init__(self, ledger: DailyStatsLedger, clock_ms: Callable[[], int] | None = None):
        super().__init__()
        self._ledger = ledger
        self._clock_ms = clock_ms or _epoch_ms
        self._tasks: List[Task] = []
        self._active_id: Optional[str] = None
        self._last_id = 0

    # --- Loading --------------------------------------------------------
    def load(self, tasks: Iterable[Task], active_task_id: str | None) -> None:
        self._tasks = [replace(t) for t in tasks]
        self._last_id = max((int(t.id) for t in self._tasks if t.id.isdigit()), default=0)
        active = self.get(active_task_id) if active_task_id else None
        self._active_id = active.id if active and not active.completed else None
        self.changed.emit()

    # --- CRUD -----------------------------------------------------------
    def add(self, title: str) -> Optional[Task]:
        if not title or not title.strip():
            self.error.emit("Title required")
            return None
        task = Task(id=self._next_id(), title=title.strip(), created_at=utc_now_iso())
        self._tasks.append(task)
        self.changed.emit()
        return replace(task)

    def update(self, task_id: str, **fields) -> bool:
        task = self._find(task_id)
        if task is None:
            self.error.emit(f"Unknown task: {task_id}")
            return False
        unknown = set(fields) - _UPDATABLE
        if unknown:
            self.error.emit(f"Cannot update fields: {', '.join(sorted(unknown))}")
            return False
        if "title" in fields:
            title = fields["title"]
            if not isinstance(title, str) or not title.strip():
                self.error.emit("Title required")
                return False
            fields["title"] = title.strip()
        if "completed" in fields:
            if not isinstance(fields["completed"], bool):
                self.error.emit("Completed must be true or false")
                return False
            if task.completed and not fields["completed"]:
                self.error.emit("Completed tasks cannot be reopened")
                return False
        if "pomodoro_count" in fields:
            try:
                fields["pomodoro_count"] = int(fields["pomodoro_count"])
            except (TypeError, ValueError):
                self.error.emit("Pomodoro count must be an integer")
                return False
            if fields["pomodoro_count"] < task.pomodoro_count:
                self.error.emit("Pomodoro count cannot decrease")
                return False

        newly_completed = fields.get("completed", False) and not task.completed
        for key, value in fields.items():
            setattr(task, key, value)
        if newly_completed:
            if self._active_id == task.id:
                self._active_id = None
            self._ledger.increment_completed_task()
        self.changed.emit()
        return True

    def complete(self, task_id: str) -> bool:
        return self.update(task_id, completed=True)

    def delete(self, task_id: str) -> bool:
        idx = next((i for i, t in enumerate(self._tasks) if t.id == task_id), None)
        if idx is None:
            return False
        del self._tasks[idx]
        if self._active_id == task_id:
            self._active_id = None
        self.changed.emit()
        return True

    # --- Active task ----------------------------------------------------
    def set_active(self, task_id: str | None) -> bool:
        if task_id is None:
            if self._active_id is not None:
                self._active_id = None
                self.changed.emit()
            return True
        task = self._find(task_id)
        if task is None:
            self.error.emit(f"Unknown task: {task_id}")
            return False
        if task.completed:
            self.error.emit("Completed tasks cannot be active")
            return False
        if self._active_id != task_id:
            self._active_id = task_id
            self.changed.emit()
        return True

    def credit_active_pomodoro(self) -> Optional[Task]:
        task = self._find(self._active_id) if self._active_id else None
        if task is None:
            return None
        task.pomodoro_count += 1
        self.changed.emit()
        return replace(task)

    # --- Access ---------------------------------------------------------
    @property
    def active_task_id(self) -> Optional[str]:
        return self._active_id

    def active_task(self) -> Optional[Task]:
        return self.get(self._active_id) if self._active_id else None

    def tasks(self) -> List[Task]:
        return [replace(t) for t in self._tasks]

    def get(self, task_id: str | None) -> Optional[Task]:
        task = self._find(task_id)
        return replace(task) if task else None

    def _find(self, task_id: str | None) -> Optional[Task]:
        return next((t for t in self._tasks if t.id == task_id), None)

    def _next_id(self) -> str:
        self._last_id = max(self._clock_ms(), self._last_id + 1)
        return str(self._last_id)


__all__ = ["TaskStore"]
