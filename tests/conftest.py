from dataclasses import dataclass
from datetime import date
from pathlib import Path
import os
import sys
from typing import Callable, Optional

import pytest

# Run Qt headless unless a platform is explicitly configured
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Ensure src/ is on sys.path for direct test invocation without an editable install
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from pomodoro_tracker.database_manager import DBConfig, DatabaseManager
from pomodoro_tracker.daily_stats import DailyStatsLedger
from pomodoro_tracker.notifications import NotificationEmitter
from pomodoro_tracker.settings import Settings
from pomodoro_tracker.task_store import TaskStore
from pomodoro_tracker.timer import SessionTimer


@dataclass
class _Job:
    due: int
    interval: Optional[int]
    fn: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Deterministic scheduler; time only moves through ``advance``."""

    def __init__(self):
        self.now_ms = 0
        self._jobs: list[_Job] = []

    def schedule_repeating(self, interval_ms, fn):
        job = _Job(self.now_ms + interval_ms, interval_ms, fn)
        self._jobs.append(job)
        return job

    def schedule_once(self, delay_ms, fn):
        job = _Job(self.now_ms + delay_ms, None, fn)
        self._jobs.append(job)
        return job

    @property
    def active_jobs(self) -> int:
        return sum(1 for j in self._jobs if not j.cancelled)

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            self._jobs = [j for j in self._jobs if not j.cancelled]
            due = [j for j in self._jobs if j.due <= target]
            if not due:
                break
            job = min(due, key=lambda j: j.due)
            self.now_ms = job.due
            if job.interval is None:
                job.cancelled = True
            else:
                job.due += job.interval
            job.fn()
        self.now_ms = target


class FakeToday:
    def __init__(self, value: date):
        self.value = value

    def __call__(self) -> date:
        return self.value


class FakeEpochMs:
    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now


@pytest.fixture()
def db(tmp_path: Path):
    config = DBConfig(path=tmp_path / "test.sqlite")
    manager = DatabaseManager(config)
    manager.init_db()
    yield manager
    manager.close()


@pytest.fixture()
def scheduler():
    return FakeScheduler()


@pytest.fixture()
def today():
    return FakeToday(date(2025, 3, 14))


@pytest.fixture()
def ledger(qtbot, today):
    return DailyStatsLedger(today=today)


@pytest.fixture()
def task_store(ledger):
    return TaskStore(ledger, clock_ms=FakeEpochMs())


@pytest.fixture()
def notifier(scheduler):
    return NotificationEmitter(scheduler)


@pytest.fixture()
def sounds():
    return []


@pytest.fixture()
def timer(scheduler, task_store, ledger, notifier, sounds):
    t = SessionTimer(
        scheduler,
        task_store,
        ledger,
        notifier,
        settings=Settings(25, 5, 15, 4),
        completion_signal=lambda: sounds.append("beep"),
    )
    yield t
    t.close()


def run_session(timer: SessionTimer, scheduler: FakeScheduler) -> None:
    """Start the timer and let the current session run to completion."""
    timer.start()
    scheduler.advance(timer.time_remaining * 1000)


def test_init_idempotent(db: DatabaseManager):
    # Second call should not raise and should not duplicate migrations
    db.init_db()
    rows = db.query_all("SELECT COUNT(*) as c FROM schema_migrations")
    assert rows[0]["c"] == 1
