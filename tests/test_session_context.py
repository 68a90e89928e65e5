import pytest

from pomodoro_tracker.auth import DEV_USER, User
from pomodoro_tracker.models import LONG_BREAK, WORK
from pomodoro_tracker.session import SessionContext
from pomodoro_tracker.settings import Settings, WORK_MINUTES
from pomodoro_tracker.stores import LayeredStore, LocalRecordStore

from conftest import FakeScheduler, run_session


def _context(db, scheduler, today, user=DEV_USER):
    return SessionContext(
        user,
        LayeredStore(None, LocalRecordStore(db)),
        scheduler,
        today=today,
        completion_signal=lambda: None,
    )


def test_fresh_session_starts_from_defaults(db, scheduler, today, qtbot):
    ctx = _context(db, scheduler, today)
    ctx.open()
    state = ctx.state()
    assert ctx.settings == Settings()
    assert state.session_type == WORK and state.time_remaining == 25 * 60
    assert ctx.task_list() == [] and ctx.tasks.active_task_id is None
    assert ctx.ledger.entries() == {}
    ctx.close()


def test_four_work_sessions_reach_long_break(db, scheduler, today, qtbot):
    ctx = _context(db, scheduler, today)
    ctx.open()
    for i in range(4):
        run_session(ctx.timer, scheduler)
        if i < 3:
            run_session(ctx.timer, scheduler)
    state = ctx.state()
    assert state.session_type == LONG_BREAK
    assert state.time_remaining == 15 * 60
    assert state.completed_work_sessions_today == 4
    assert ctx.ledger.today_entry().pomodoros == 4
    ctx.close()


def test_state_survives_reopen(db, today, qtbot):
    scheduler = FakeScheduler()
    ctx = _context(db, scheduler, today)
    ctx.open()
    task = ctx.add_task("Write report")
    ctx.set_active_task(task.id)
    ctx.update_setting(WORK_MINUTES, 2)
    run_session(ctx.timer, scheduler)
    ctx.complete_task(task.id)
    before = ctx.snapshot()
    ctx.close()

    again = _context(db, FakeScheduler(), today)
    restored = again.open()
    assert restored == before
    assert again.task_list()[0].pomodoro_count == 1
    assert again.ledger.today_entry().completed_tasks == 1
    assert again.state().completed_work_sessions_total == 1
    again.close()


def test_contexts_are_independent(db, tmp_path, today, qtbot):
    from pomodoro_tracker.database_manager import DBConfig, DatabaseManager

    other_db = DatabaseManager(DBConfig(path=tmp_path / "other.sqlite"))
    other_db.init_db()
    s1, s2 = FakeScheduler(), FakeScheduler()
    a = _context(db, s1, today)
    b = _context(other_db, s2, today, user=User(uid="someone-else"))
    a.open()
    b.open()
    a.start()
    a.add_task("Only in A")
    s1.advance(5_000)
    assert a.state().time_remaining == 25 * 60 - 5
    assert b.state().time_remaining == 25 * 60
    assert b.task_list() == []
    a.close()
    b.close()
    other_db.close()


def test_close_cancels_tick_source(db, scheduler, today, qtbot):
    ctx = _context(db, scheduler, today)
    ctx.open()
    ctx.toggle()
    ctx.close()
    assert scheduler.active_jobs == 0
    assert not ctx.state().is_running


def test_notification_exposed_and_cleared(db, scheduler, today, qtbot):
    ctx = _context(db, scheduler, today)
    ctx.open()
    ctx.update_setting(WORK_MINUTES, 1)
    run_session(ctx.timer, scheduler)
    assert ctx.notification.title == "Work Complete!"
    scheduler.advance(3_000)
    assert ctx.notification is None
    ctx.close()


def test_stale_today_counter_restarts_after_reopen(db, today, qtbot):
    from datetime import date

    scheduler = FakeScheduler()
    ctx = _context(db, scheduler, today)
    ctx.open()
    ctx.update_setting(WORK_MINUTES, 1)
    run_session(ctx.timer, scheduler)
    ctx.close()

    today.value = date(2025, 3, 16)
    again = _context(db, FakeScheduler(), today)
    again.open()
    state = again.state()
    assert state.completed_work_sessions_today == 0
    assert state.completed_work_sessions_total == 1
    again.close()


class FixedPrimary:
    def __init__(self, doc):
        self.doc = doc

    def read(self, uid):
        return self.doc

    def write(self, uid, partial):
        pass


@pytest.mark.parametrize(
    "doc",
    [
        {"stats": {"sessionCount": "n/a"}},
        {"dailyStats": {"2025-03-14": {"pomodoros": "x"}}},
        {"stats": [1, 2]},
    ],
)
def test_open_survives_damaged_remote_document(db, scheduler, today, qtbot, doc):
    ctx = SessionContext(
        DEV_USER,
        LayeredStore(FixedPrimary(doc), LocalRecordStore(db)),
        scheduler,
        today=today,
        completion_signal=lambda: None,
    )
    ctx.open()
    state = ctx.state()
    assert state.completed_work_sessions_today == 0
    assert state.completed_work_sessions_total == 0
    assert ctx.ledger.today_entry().pomodoros == 0
    ctx.close()
