from pomodoro_tracker.models import LONG_BREAK, SHORT_BREAK, WORK
from pomodoro_tracker.settings import LONG_BREAK_INTERVAL, SHORT_BREAK_MINUTES, WORK_MINUTES, Settings
from pomodoro_tracker.timer import focus_hours, format_time, session_label

from conftest import run_session


def test_initial_state(timer):
    state = timer.state()
    assert state.session_type == WORK
    assert state.time_remaining == 25 * 60
    assert state.is_running is False
    assert timer.progress() == 0.0


def test_ticks_only_decrease_and_stop_at_zero(timer, scheduler):
    timer.start()
    seen = [timer.time_remaining]
    for _ in range(25 * 60 - 1):
        scheduler.advance(1000)
        seen.append(timer.time_remaining)
    assert all(b == a - 1 for a, b in zip(seen, seen[1:]))
    assert timer.time_remaining == 1
    scheduler.advance(1000)
    # Completion switched to the break; remaining never went negative
    assert timer.session_type == SHORT_BREAK
    assert timer.time_remaining == 5 * 60
    assert timer.is_running is False


def test_pause_stops_ticking_and_is_idempotent(timer, scheduler):
    timer.start()
    scheduler.advance(10_000)
    timer.pause()
    timer.pause()
    scheduler.advance(60_000)
    assert timer.time_remaining == 25 * 60 - 10
    assert scheduler.active_jobs == 0


def test_start_twice_keeps_single_tick_source(timer, scheduler):
    timer.start()
    timer.start()
    scheduler.advance(5_000)
    assert timer.time_remaining == 25 * 60 - 5
    assert scheduler.active_jobs == 1


def test_toggle_starts_and_pauses(timer):
    timer.toggle()
    assert timer.is_running
    timer.toggle()
    assert not timer.is_running


def test_manual_tick_ignored_when_idle(timer):
    timer.on_tick()
    assert timer.time_remaining == 25 * 60


def test_work_completion_goes_to_short_break(timer, scheduler, ledger, notifier, sounds):
    run_session(timer, scheduler)
    assert timer.session_type == SHORT_BREAK
    assert timer.time_remaining == 5 * 60
    assert timer.completed_work_sessions_today == 1
    assert timer.completed_work_sessions_total == 1
    assert ledger.today_entry().pomodoros == 1
    assert notifier.current.title == "Work Complete!"
    assert notifier.current.message == "Time for a short break"
    assert sounds == ["beep"]


def test_break_completion_returns_to_work(timer, scheduler, notifier):
    run_session(timer, scheduler)
    run_session(timer, scheduler)
    assert timer.session_type == WORK
    assert timer.time_remaining == 25 * 60
    assert notifier.current.title == "Break Complete!"
    # Breaks do not count as work sessions
    assert timer.completed_work_sessions_total == 1


def test_long_break_after_interval(timer, scheduler, ledger, notifier):
    for _ in range(3):
        run_session(timer, scheduler)  # work
        assert timer.session_type == SHORT_BREAK
        run_session(timer, scheduler)  # break
    run_session(timer, scheduler)
    assert timer.session_type == LONG_BREAK
    assert timer.time_remaining == 15 * 60
    assert timer.completed_work_sessions_today == 4
    assert ledger.today_entry().pomodoros == 4
    assert notifier.current.message == "Time for a long break"
    run_session(timer, scheduler)
    assert timer.session_type == WORK
    assert timer.time_remaining == 25 * 60


def test_interval_of_one_always_long_break(timer, scheduler):
    timer.update_setting(LONG_BREAK_INTERVAL, 1)
    run_session(timer, scheduler)
    assert timer.session_type == LONG_BREAK


def test_active_task_credited(timer, scheduler, task_store):
    task = task_store.add("Write report")
    task_store.set_active(task.id)
    run_session(timer, scheduler)
    assert task_store.get(task.id).pomodoro_count == 1


def test_completion_without_active_task(timer, scheduler, task_store):
    task = task_store.add("Idle task")
    run_session(timer, scheduler)
    assert task_store.get(task.id).pomodoro_count == 0


def test_reset_is_idempotent(timer, scheduler):
    run_session(timer, scheduler)
    timer.start()
    scheduler.advance(3_000)
    timer.reset()
    first = timer.state()
    timer.reset()
    assert timer.state() == first
    assert first.session_type == WORK
    assert first.is_running is False
    assert first.time_remaining == 25 * 60
    # Counts untouched
    assert first.completed_work_sessions_total == 1
    assert scheduler.active_jobs == 0


def test_update_work_setting_resizes_idle_work_session(timer):
    assert timer.update_setting(WORK_MINUTES, "30")
    assert timer.settings.work_minutes == 30
    assert timer.time_remaining == 30 * 60


def test_update_work_setting_does_not_touch_running_session(timer, scheduler):
    timer.start()
    scheduler.advance(2_000)
    timer.update_setting(WORK_MINUTES, 50)
    assert timer.time_remaining == 25 * 60 - 2


def test_shrinking_duration_clamps_remaining(timer, scheduler):
    timer.start()
    scheduler.advance(2_000)
    timer.update_setting(WORK_MINUTES, 10)
    assert timer.time_remaining == 10 * 60
    assert 0.0 <= timer.progress() <= 1.0


def test_update_setting_during_break_keeps_break_time(timer, scheduler):
    run_session(timer, scheduler)
    timer.update_setting(WORK_MINUTES, 40)
    assert timer.session_type == SHORT_BREAK
    assert timer.time_remaining == 5 * 60


def test_invalid_setting_rejected(timer, qtbot):
    errors = []
    timer.error.connect(errors.append)
    before = timer.settings
    assert timer.update_setting(SHORT_BREAK_MINUTES, "abc") is False
    assert timer.update_setting(SHORT_BREAK_MINUTES, 0) is False
    assert timer.update_setting("colour", 3) is False
    assert timer.settings == before
    assert len(errors) == 3


def test_completion_signal_failure_is_swallowed(scheduler, task_store, ledger, notifier):
    from pomodoro_tracker.timer import SessionTimer

    def broken():
        raise RuntimeError("no audio device")

    t = SessionTimer(scheduler, task_store, ledger, notifier, settings=Settings(1, 1, 1, 4), completion_signal=broken)
    run_session(t, scheduler)
    assert t.session_type == SHORT_BREAK


def test_today_counter_resets_on_new_day(timer, scheduler, today, ledger):
    from datetime import date

    run_session(timer, scheduler)
    run_session(timer, scheduler)
    assert timer.completed_work_sessions_today == 1
    today.value = date(2025, 3, 15)
    assert timer.completed_work_sessions_today == 0
    run_session(timer, scheduler)
    assert timer.completed_work_sessions_today == 1
    assert timer.completed_work_sessions_total == 2
    assert ledger.get_entry("2025-03-14").pomodoros == 1
    assert ledger.get_entry("2025-03-15").pomodoros == 1


def test_signals_emitted_on_completion(timer, scheduler, qtbot):
    completed = []
    counts = []
    timer.session_completed.connect(lambda a, b: completed.append((a, b)))
    timer.counts_changed.connect(lambda a, b: counts.append((a, b)))
    run_session(timer, scheduler)
    assert completed == [(WORK, SHORT_BREAK)]
    assert counts == [(1, 1)]


def test_display_helpers():
    assert format_time(25 * 60) == "25:00"
    assert format_time(65) == "01:05"
    assert format_time(0) == "00:00"
    assert session_label(WORK) == "Focus Time"
    assert session_label(LONG_BREAK) == "Long Break"
    assert focus_hours(5, 25) == 2
