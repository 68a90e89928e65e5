from __future__ import annotations

"""Transient notification slot.

One message at a time: ``show`` overwrites whatever is displayed and restarts
the clear countdown, so the slot empties a fixed delay after the most recent
call. There is no queue.
"""

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .models import Notification
from .scheduler import CancelHandle, Scheduler

NOTIFICATION_TIMEOUT_MS = 3000

_log = logging.getLogger(__name__)


class NotificationEmitter(QObject):
    changed = pyqtSignal(object)  # Notification | None

    def __init__(self, scheduler: Scheduler, timeout_ms: int = NOTIFICATION_TIMEOUT_MS):
        super().__init__()
        self._scheduler = scheduler
        self._timeout_ms = timeout_ms
        self._current: Optional[Notification] = None
        self._clear_handle: Optional[CancelHandle] = None

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    def show(self, title: str, message: str) -> Notification:
        self._cancel_pending()
        self._current = Notification(title=title, message=message)
        self._clear_handle = self._scheduler.schedule_once(self._timeout_ms, self._expire)
        _log.info("notification shown", extra={"_json_title": title})
        self.changed.emit(self._current)
        return self._current

    def clear(self) -> None:
        self._cancel_pending()
        if self._current is None:
            return
        self._current = None
        self.changed.emit(None)

    def close(self) -> None:
        self._cancel_pending()

    def _expire(self) -> None:
        self._clear_handle = None
        self.clear()

    def _cancel_pending(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None


__all__ = ["NotificationEmitter", "NOTIFICATION_TIMEOUT_MS"]
