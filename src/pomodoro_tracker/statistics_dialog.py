from __future__ import annotations

"""Statistics dialog.

Features:
 - "Today" tab with today's pomodoros / completed tasks.
 - "Monthly" tab: calendar shaded by pomodoro intensity, month totals,
   tooltip per day.

Design notes:
 - Reads everything from DailyStatsLedger; the calendar re-renders on page
   navigation and on ledger changes.
"""

from datetime import date

from PyQt6.QtCore import QDate, Qt
from PyQt6.QtGui import QColor, QTextCharFormat
from PyQt6.QtWidgets import (
    QCalendarWidget,
    QDialog,
    QLabel,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from .daily_stats import DailyStatsLedger, intensity_level

INTENSITY_COLORS = ["#ffffff", "#ffe0dc", "#ffb3a8", "#ff7b6b", "#e5392a"]


class StatisticsDialog(QDialog):  # pragma: no cover heavy UI
    def __init__(self, ledger: DailyStatsLedger, parent: QWidget | None = None):
        super().__init__(parent)
        # Opened once per click; the ledger connection goes away with the dialog
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        self.setWindowTitle("Statistics")
        self._ledger = ledger

        self.today_label = QLabel()
        today_page = QWidget()
        tl = QVBoxLayout(today_page)
        tl.addWidget(self.today_label)
        tl.addStretch(1)

        self.calendar = QCalendarWidget()
        self.calendar.setGridVisible(True)
        self.month_label = QLabel()
        month_page = QWidget()
        ml = QVBoxLayout(month_page)
        ml.addWidget(self.month_label)
        ml.addWidget(self.calendar)

        tabs = QTabWidget()
        tabs.addTab(today_page, "Today")
        tabs.addTab(month_page, "Monthly")
        tabs.setCurrentIndex(1)
        layout = QVBoxLayout(self)
        layout.addWidget(tabs)

        self.calendar.currentPageChanged.connect(lambda y, m: self._render_month(y, m))
        self._ledger.changed.connect(self.refresh)
        self.refresh()

    def refresh(self) -> None:
        entry = self._ledger.today_entry()
        self.today_label.setText(
            f"Pomodoros today: {entry.pomodoros}\nTasks completed today: {entry.completed_tasks}"
        )
        self._render_month(self.calendar.yearShown(), self.calendar.monthShown())

    def _render_month(self, year: int, month: int) -> None:
        totals = self._ledger.monthly_totals(year, month)
        self.month_label.setText(
            f"{date(year, month, 1):%B %Y}: {totals.pomodoros} pomodoros, "
            f"{totals.completed_tasks} tasks completed"
        )
        for day, entry in self._ledger.month_days(year, month):
            fmt = QTextCharFormat()
            fmt.setBackground(QColor(INTENSITY_COLORS[intensity_level(entry.pomodoros)]))
            fmt.setToolTip(f"{entry.pomodoros} pomodoros, {entry.completed_tasks} tasks completed")
            self.calendar.setDateTextFormat(QDate(day.year, day.month, day.day), fmt)


__all__ = ["StatisticsDialog", "INTENSITY_COLORS"]
