from pomodoro_tracker.models import Task


def test_add_appends_in_order(task_store):
    a = task_store.add("First")
    b = task_store.add("  Second  ")
    assert [t.title for t in task_store.tasks()] == ["First", "Second"]
    assert int(a.id) < int(b.id)
    assert a.created_at.endswith("Z")
    assert a.completed is False and a.pomodoro_count == 0


def test_add_rejects_blank_title(task_store, qtbot):
    errors = []
    task_store.error.connect(errors.append)
    assert task_store.add("") is None
    assert task_store.add("   ") is None
    assert task_store.tasks() == []
    assert errors == ["Title required", "Title required"]


def test_ids_unique_with_frozen_clock(task_store):
    ids = {task_store.add(f"T{i}").id for i in range(5)}
    assert len(ids) == 5


def test_completing_increments_ledger_once(task_store, ledger):
    t = task_store.add("Report")
    assert task_store.complete(t.id)
    assert ledger.today_entry().completed_tasks == 1
    # Marking it completed again is not a new completion
    assert task_store.update(t.id, completed=True)
    assert ledger.today_entry().completed_tasks == 1


def test_completed_cannot_be_reopened(task_store):
    t = task_store.add("Report")
    task_store.complete(t.id)
    assert task_store.update(t.id, completed=False) is False
    assert task_store.get(t.id).completed is True


def test_completing_active_task_clears_reference(task_store):
    t = task_store.add("Report")
    task_store.set_active(t.id)
    task_store.complete(t.id)
    assert task_store.active_task_id is None


def test_completing_other_task_keeps_active(task_store):
    a = task_store.add("A")
    b = task_store.add("B")
    task_store.set_active(a.id)
    task_store.complete(b.id)
    assert task_store.active_task_id == a.id


def test_delete_active_clears_reference(task_store):
    t = task_store.add("Report")
    task_store.set_active(t.id)
    assert task_store.delete(t.id)
    assert task_store.active_task_id is None
    assert task_store.tasks() == []


def test_delete_non_active_keeps_reference(task_store):
    a = task_store.add("A")
    b = task_store.add("B")
    task_store.set_active(a.id)
    task_store.delete(b.id)
    assert task_store.active_task_id == a.id


def test_delete_unknown_returns_false(task_store):
    assert task_store.delete("nope") is False


def test_set_active_refuses_completed_and_unknown(task_store):
    t = task_store.add("Done")
    task_store.complete(t.id)
    assert task_store.set_active(t.id) is False
    assert task_store.set_active("missing") is False
    assert task_store.active_task_id is None


def test_set_active_none_clears(task_store):
    t = task_store.add("A")
    task_store.set_active(t.id)
    assert task_store.set_active(None)
    assert task_store.active_task() is None


def test_update_merges_title_and_validates(task_store):
    t = task_store.add("Draft")
    assert task_store.update(t.id, title=" Final ")
    assert task_store.get(t.id).title == "Final"
    assert task_store.update(t.id, title=" ") is False
    assert task_store.update(t.id, colour="red") is False
    assert task_store.update("missing", title="x") is False


def test_pomodoro_count_is_monotonic(task_store):
    t = task_store.add("Count")
    assert task_store.update(t.id, pomodoro_count=3)
    assert task_store.update(t.id, pomodoro_count=2) is False
    assert task_store.get(t.id).pomodoro_count == 3


def test_returned_tasks_are_copies(task_store):
    t = task_store.add("Copy")
    t.title = "Mutated"
    task_store.tasks()[0].completed = True
    stored = task_store.get(t.id)
    assert stored.title == "Copy" and stored.completed is False


def test_changed_signal_fires(task_store, qtbot):
    with qtbot.waitSignal(task_store.changed, timeout=100):
        task_store.add("Signal")


def test_load_drops_invalid_active_reference(task_store):
    tasks = [Task(id="10", title="Open"), Task(id="11", title="Closed", completed=True)]
    task_store.load(tasks, "11")
    assert task_store.active_task_id is None
    task_store.load(tasks, "10")
    assert task_store.active_task_id == "10"
    task_store.load(tasks, "404")
    assert task_store.active_task_id is None


def test_non_integer_pomodoro_count_is_rejected(task_store, qtbot):
    errors = []
    task_store.error.connect(errors.append)
    t = task_store.add("Count")
    assert task_store.update(t.id, pomodoro_count="abc") is False
    assert task_store.update(t.id, pomodoro_count=None) is False
    assert task_store.get(t.id).pomodoro_count == 0
    assert errors == ["Pomodoro count must be an integer"] * 2


def test_completed_flag_must_be_a_bool(task_store, ledger, qtbot):
    errors = []
    task_store.error.connect(errors.append)
    t = task_store.add("Report")
    assert task_store.update(t.id, completed="false") is False
    assert task_store.get(t.id).completed is False
    assert ledger.today_entry().completed_tasks == 0
    assert errors == ["Completed must be true or false"]
