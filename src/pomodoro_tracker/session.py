from __future__ import annotations

"""SessionContext: everything one signed-in user's session owns.

Nothing here is global; tests and the app can hold several contexts side by
side. The UI issues commands through this object and reads state back from
it (or from the component signals).
"""

import logging
from datetime import date
from typing import Any, Callable, List, Optional

from .auth import User
from .daily_stats import DailyStatsLedger, TodayProvider
from .models import Notification, SessionState, Task
from .notifications import NOTIFICATION_TIMEOUT_MS, NotificationEmitter
from .persistence import PersistenceSync, SessionSnapshot
from .scheduler import Scheduler
from .settings import Settings
from .stores import LayeredStore
from .task_store import TaskStore
from .timer import TICK_INTERVAL_MS, SessionTimer

_log = logging.getLogger(__name__)


class SessionContext:
    def __init__(
        self,
        user: User | None,
        store: LayeredStore,
        scheduler: Scheduler,
        *,
        today: TodayProvider | None = None,
        clock_ms: Callable[[], int] | None = None,
        completion_signal: Callable[[], None] | None = None,
        notification_timeout_ms: int = NOTIFICATION_TIMEOUT_MS,
        tick_interval_ms: int = TICK_INTERVAL_MS,
    ):
        self.user = user
        self.ledger = DailyStatsLedger(today=today or date.today)
        self.tasks = TaskStore(self.ledger, clock_ms=clock_ms)
        self.notifications = NotificationEmitter(scheduler, timeout_ms=notification_timeout_ms)
        self.timer = SessionTimer(
            scheduler,
            self.tasks,
            self.ledger,
            self.notifications,
            completion_signal=completion_signal,
            tick_interval_ms=tick_interval_ms,
        )
        self.sync = PersistenceSync(store, user.uid if user else None)
        self._opened = False

    # --- Lifecycle ------------------------------------------------------
    def open(self) -> SessionSnapshot:
        snap = self.sync.hydrate()
        self.restore(snap)
        self.sync.attach(self.timer, self.tasks, self.ledger)
        self._opened = True
        _log.info("session opened", extra={"_json_uid": self.sync.uid or "<none>"})
        return snap

    def restore(self, snap: SessionSnapshot) -> None:
        self.ledger.load(snap.daily_stats)
        self.tasks.load(snap.tasks, snap.active_task_id)
        self.timer.load(snap.settings, snap.session_count, snap.total_sessions, snap.counts_date)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            settings=self.timer.settings,
            tasks=self.tasks.tasks(),
            active_task_id=self.tasks.active_task_id,
            session_count=self.timer.completed_work_sessions_today,
            total_sessions=self.timer.completed_work_sessions_total,
            counts_date=self.ledger.today_key(),
            daily_stats=self.ledger.entries(),
        )

    def close(self) -> None:
        self.timer.close()
        self.notifications.close()
        if self._opened:
            self.sync.detach()
            self._opened = False

    # --- Timer commands -------------------------------------------------
    def start(self) -> None:
        self.timer.start()

    def pause(self) -> None:
        self.timer.pause()

    def toggle(self) -> None:
        self.timer.toggle()

    def reset(self) -> None:
        self.timer.reset()

    def update_setting(self, key: str, value: Any) -> bool:
        return self.timer.update_setting(key, value)

    # --- Task commands --------------------------------------------------
    def add_task(self, title: str) -> Optional[Task]:
        return self.tasks.add(title)

    def update_task(self, task_id: str, **fields) -> bool:
        return self.tasks.update(task_id, **fields)

    def complete_task(self, task_id: str) -> bool:
        return self.tasks.complete(task_id)

    def delete_task(self, task_id: str) -> bool:
        return self.tasks.delete(task_id)

    def set_active_task(self, task_id: str | None) -> bool:
        return self.tasks.set_active(task_id)

    # --- Reads ----------------------------------------------------------
    @property
    def settings(self) -> Settings:
        return self.timer.settings

    @property
    def notification(self) -> Optional[Notification]:
        return self.notifications.current

    def state(self) -> SessionState:
        return self.timer.state()

    def task_list(self) -> List[Task]:
        return self.tasks.tasks()


__all__ = ["SessionContext"]
