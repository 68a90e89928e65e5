from __future__ import annotations

"""Per-day pomodoro / completed-task counters and calendar aggregation.

Design notes:
 - Keys are local calendar dates (``YYYY-MM-DD``) taken at the moment of the
   increment, never UTC.
 - Entries are created lazily and only ever incremented.
 - ``month_days`` and ``intensity_level`` back the statistics calendar.
"""

import calendar
from datetime import date
from typing import Callable, Dict, List, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from .models import DailyStatEntry, MonthlyTotals

TodayProvider = Callable[[], date]

_ZERO = DailyStatEntry()


def date_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def intensity_level(pomodoros: int) -> int:
    if pomodoros <= 0:
        return 0
    if pomodoros <= 2:
        return 1
    if pomodoros <= 4:
        return 2
    if pomodoros <= 6:
        return 3
    return 4


class DailyStatsLedger(QObject):
    changed = pyqtSignal()

    def __init__(self, today: TodayProvider | None = None):
        super().__init__()
        self._today: TodayProvider = today or date.today
        self._entries: Dict[str, DailyStatEntry] = {}

    # --- Loading --------------------------------------------------------
    def load(self, entries: Dict[str, DailyStatEntry]) -> None:
        self._entries = dict(entries)
        self.changed.emit()

    def entries(self) -> Dict[str, DailyStatEntry]:
        return dict(self._entries)

    # --- Increments -----------------------------------------------------
    def today_key(self) -> str:
        return date_key(self._today())

    def increment_pomodoro(self, key: str | None = None) -> DailyStatEntry:
        key = key or self.today_key()
        entry = self._entries.get(key, _ZERO)
        return self._store(key, DailyStatEntry(entry.pomodoros + 1, entry.completed_tasks))

    def increment_completed_task(self, key: str | None = None) -> DailyStatEntry:
        key = key or self.today_key()
        entry = self._entries.get(key, _ZERO)
        return self._store(key, DailyStatEntry(entry.pomodoros, entry.completed_tasks + 1))

    def _store(self, key: str, entry: DailyStatEntry) -> DailyStatEntry:
        self._entries[key] = entry
        self.changed.emit()
        return entry

    # --- Access ---------------------------------------------------------
    def get_entry(self, key: str) -> DailyStatEntry:
        return self._entries.get(key, _ZERO)

    def today_entry(self) -> DailyStatEntry:
        return self.get_entry(self.today_key())

    def month_days(self, year: int, month: int) -> List[Tuple[date, DailyStatEntry]]:
        _, days_in_month = calendar.monthrange(year, month)
        days = []
        for day in range(1, days_in_month + 1):
            d = date(year, month, day)
            days.append((d, self.get_entry(date_key(d))))
        return days

    def monthly_totals(self, year: int, month: int) -> MonthlyTotals:
        pomodoros = 0
        completed = 0
        for _, entry in self.month_days(year, month):
            pomodoros += entry.pomodoros
            completed += entry.completed_tasks
        return MonthlyTotals(pomodoros=pomodoros, completed_tasks=completed)


__all__ = ["DailyStatsLedger", "TodayProvider", "date_key", "intensity_level"]
