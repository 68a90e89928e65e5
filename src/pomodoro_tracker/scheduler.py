from __future__ import annotations

"""Tick source abstraction.

The timer and the notification slot never create QTimers themselves; they ask
a Scheduler for a repeating or one-shot callback and keep the returned handle
so they can cancel it. ``QtScheduler`` is the production implementation and
runs callbacks on the Qt event loop, which serializes them with UI commands.
"""

from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer


class CancelHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule_repeating(self, interval_ms: int, fn: Callable[[], None]) -> CancelHandle: ...

    def schedule_once(self, delay_ms: int, fn: Callable[[], None]) -> CancelHandle: ...


class _QtTimerHandle:
    def __init__(self, timer: QTimer):
        self._timer: QTimer | None = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()


class QtScheduler(QObject):
    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)

    def schedule_repeating(self, interval_ms: int, fn: Callable[[], None]) -> _QtTimerHandle:
        timer = QTimer(self)
        timer.setInterval(interval_ms)
        timer.timeout.connect(fn)
        timer.start()
        return _QtTimerHandle(timer)

    def schedule_once(self, delay_ms: int, fn: Callable[[], None]) -> _QtTimerHandle:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(delay_ms)
        handle = _QtTimerHandle(timer)

        def fire() -> None:
            handle.cancel()
            fn()

        timer.timeout.connect(fire)
        timer.start()
        return handle


__all__ = ["Scheduler", "CancelHandle", "QtScheduler"]
