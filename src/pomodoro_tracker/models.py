from __future__ import annotations

"""Dataclass models for tasks, daily statistics and timer state."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Optional

SessionType = Literal["WORK", "SHORT_BREAK", "LONG_BREAK"]

WORK: SessionType = "WORK"
SHORT_BREAK: SessionType = "SHORT_BREAK"
LONG_BREAK: SessionType = "LONG_BREAK"
SESSION_TYPES: tuple[SessionType, ...] = (WORK, SHORT_BREAK, LONG_BREAK)


def utc_now_iso() -> str:
    return datetime.utcnow().replace(microsecond=0).isoformat() + "Z"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    completed: bool = False
    pomodoro_count: int = 0
    created_at: Optional[str] = None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "pomodoroCount": self.pomodoro_count,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            completed=bool(data.get("completed", False)),
            pomodoro_count=int(data.get("pomodoroCount") or 0),
            created_at=data.get("createdAt"),
        )


@dataclass(slots=True, frozen=True)
class DailyStatEntry:
    pomodoros: int = 0
    completed_tasks: int = 0

    def to_record(self) -> dict[str, int]:
        return {"pomodoros": self.pomodoros, "completedTasks": self.completed_tasks}

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "DailyStatEntry":
        return cls(
            pomodoros=int(data.get("pomodoros") or 0),
            completed_tasks=int(data.get("completedTasks") or 0),
        )


@dataclass(slots=True, frozen=True)
class MonthlyTotals:
    pomodoros: int = 0
    completed_tasks: int = 0


@dataclass(slots=True, frozen=True)
class SessionState:
    time_remaining: int
    is_running: bool
    session_type: SessionType
    completed_work_sessions_today: int
    completed_work_sessions_total: int


@dataclass(slots=True, frozen=True)
class Notification:
    title: str
    message: str


__all__ = [
    "SessionType",
    "WORK",
    "SHORT_BREAK",
    "LONG_BREAK",
    "SESSION_TYPES",
    "Task",
    "DailyStatEntry",
    "MonthlyTotals",
    "SessionState",
    "Notification",
    "utc_now_iso",
]
