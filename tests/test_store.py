from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from itertools import count

from taskboard.models import UNPARSABLE_DAYS_LEFT, Priority
from taskboard.store import Store

TODAY = date(2026, 10, 19)


class FakeClock:
    def __init__(self) -> None:
        self.today = TODAY
        self.now = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)

    def tick(self, minutes: int = 25) -> None:
        self.now += timedelta(minutes=minutes)


class FakePersistence:
    """Records every save as a list of plain tuples."""

    def __init__(self) -> None:
        self.task_saves: list[list[tuple]] = []
        self.session_saves: list[list[tuple]] = []

    def save_tasks(self, tasks) -> None:
        self.task_saves.append([(t.id, t.title, t.due, t.completed, t.tags) for t in tasks])

    def save_sessions(self, sessions) -> None:
        self.session_saves.append(
            [(s.id, s.task_id, s.start, s.end, s.completed) for s in sessions]
        )

    def load_tasks(self):
        return []

    def load_sessions(self):
        return []


def _sequential_ids(prefix: str = "id"):
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


def _build_store(clock: FakeClock | None = None, persistence=None) -> Store:
    clock = clock or FakeClock()
    return Store(
        persistence,
        today=lambda: clock.today,
        now=lambda: clock.now,
        id_factory=_sequential_ids(),
    )


def _due_in(days: int) -> str:
    return (TODAY + timedelta(days=days)).isoformat()


def test_add_task_returns_id_and_lists_derived_fields():
    store = _build_store()

    task_id = store.add_task("Write report", _due_in(2), "work")

    [task] = store.list_tasks()
    assert task.id == task_id
    assert task.title == "Write report"
    assert task.completed is False
    assert task.tags == "work"
    assert task.priority is Priority.HIGH
    assert task.days_left == 2


def test_add_task_defaults_due_to_today():
    store = _build_store()

    task_id = store.add_task("Today")

    assert store.get_task(task_id).due == TODAY.isoformat()


def test_add_task_accepts_malformed_due():
    store = _build_store()

    task_id = store.add_task("Someday", "next week", "")

    task = store.get_task(task_id)
    assert task.due == "next week"
    assert task.priority is Priority.LOW
    assert task.days_left == UNPARSABLE_DAYS_LEFT


def test_list_tasks_sorts_by_priority_then_days_left():
    store = _build_store()
    store.add_task("ten", _due_in(10))
    store.add_task("two", _due_in(2))
    store.add_task("five", _due_in(5))

    listed = store.list_tasks()

    assert [t.title for t in listed] == ["two", "five", "ten"]
    assert [t.priority for t in listed] == [Priority.HIGH, Priority.MEDIUM, Priority.LOW]


def test_list_tasks_puts_overdue_first_and_unparsable_last():
    store = _build_store()
    store.add_task("broken", "??")
    store.add_task("later", _due_in(40))
    store.add_task("overdue", _due_in(-1))

    assert [t.title for t in store.list_tasks()] == ["overdue", "later", "broken"]


def test_list_tasks_keeps_insertion_order_for_ties():
    store = _build_store()
    store.add_task("first", _due_in(1))
    store.add_task("second", _due_in(1))

    assert [t.title for t in store.list_tasks()] == ["first", "second"]


def test_list_tasks_recomputes_against_current_date():
    clock = FakeClock()
    store = _build_store(clock)
    store.add_task("Review", _due_in(9))
    assert store.list_tasks()[0].priority is Priority.LOW

    clock.today = TODAY + timedelta(days=3)

    [task] = store.list_tasks()
    assert task.days_left == 6
    assert task.priority is Priority.MEDIUM


def test_export_rows_keep_insertion_order():
    store = _build_store()
    store.add_task("ten", _due_in(10))
    store.add_task("two", _due_in(2))

    assert [t.title for t in store.export_rows()] == ["ten", "two"]


def test_edit_task_keeps_title_and_due_when_empty_and_always_sets_tags():
    store = _build_store()
    task_id = store.add_task("Write report", _due_in(2), "work")

    store.edit_task(task_id, "", "", "urgent")

    task = store.get_task(task_id)
    assert task.title == "Write report"
    assert task.due == _due_in(2)
    assert task.tags == "urgent"

    store.edit_task(task_id, "", "", "")
    assert store.get_task(task_id).tags == ""


def test_edit_task_updates_due_and_recomputes_priority():
    store = _build_store()
    task_id = store.add_task("Write report", _due_in(2))

    store.edit_task(task_id, "Final report", _due_in(6), "")

    task = store.get_task(task_id)
    assert task.title == "Final report"
    assert task.priority is Priority.MEDIUM
    assert task.days_left == 6


def test_edit_unknown_task_is_a_noop():
    store = _build_store()
    store.add_task("Write report", _due_in(2), "work")
    before = store.list_tasks()

    store.edit_task("missing", "New", _due_in(1), "x")

    assert store.list_tasks() == before


def test_delete_task_is_idempotent():
    store = _build_store()
    keep_id = store.add_task("keep", _due_in(1))
    drop_id = store.add_task("drop", _due_in(1))

    store.delete_task(drop_id)
    once = store.list_tasks()
    store.delete_task(drop_id)

    assert store.list_tasks() == once
    assert [t.id for t in once] == [keep_id]


def test_delete_task_removes_every_match():
    store = Store(today=lambda: TODAY, id_factory=lambda: "dup")
    store.add_task("one", _due_in(1))
    store.add_task("two", _due_in(2))

    store.delete_task("dup")

    assert store.list_tasks() == []


def test_toggle_complete_twice_restores_state():
    store = _build_store()
    task_id = store.add_task("Write report", _due_in(2))

    store.toggle_complete(task_id)
    assert store.get_task(task_id).completed is True

    store.toggle_complete(task_id)
    assert store.get_task(task_id).completed is False


def test_toggle_unknown_task_is_a_noop():
    store = _build_store()
    task_id = store.add_task("Write report", _due_in(2))

    store.toggle_complete("missing")

    assert store.get_task(task_id).completed is False
    assert store.get_task("missing") is None


def test_session_lifecycle_and_stats():
    clock = FakeClock()
    store = _build_store(clock)
    task_id = store.add_task("Write report", _due_in(2))

    session_id = store.start_session(task_id)
    [session] = store.list_sessions()
    assert session.start == "2026-10-19T09:00:00+00:00"
    assert session.end == ""
    assert session.completed is False

    clock.tick()
    store.stop_session(session_id)

    [session] = store.list_sessions()
    assert session.end == "2026-10-19T09:25:00+00:00"
    assert session.completed is True

    stats = store.session_stats()
    assert stats.total_sessions == 1
    assert stats.per_task == {task_id: 1}


def test_stop_session_again_overwrites_end():
    clock = FakeClock()
    store = _build_store(clock)
    session_id = store.start_session("t1")
    clock.tick()
    store.stop_session(session_id)
    clock.tick(5)

    store.stop_session(session_id)

    [session] = store.list_sessions()
    assert session.end == "2026-10-19T09:30:00+00:00"


def test_stop_unknown_session_is_a_noop():
    store = _build_store()
    store.start_session("t1")

    store.stop_session("missing")

    [session] = store.list_sessions()
    assert session.completed is False


def test_session_stats_count_open_sessions_and_deleted_tasks():
    store = _build_store()
    task_id = store.add_task("Write report", _due_in(2))
    first = store.start_session(task_id)
    store.start_session(task_id)
    store.start_session("gone")
    store.stop_session(first)
    store.delete_task(task_id)

    stats = store.session_stats()

    assert stats.total_sessions == 3
    assert stats.per_task == {task_id: 2, "gone": 1}


def test_list_sessions_returns_copies():
    store = _build_store()
    store.start_session("t1")

    store.list_sessions()[0].completed = True

    assert store.list_sessions()[0].completed is False


def test_every_mutation_saves_the_full_collection():
    persistence = FakePersistence()
    store = _build_store(persistence=persistence)

    task_id = store.add_task("Write report", _due_in(2), "work")
    store.edit_task(task_id, "", "", "urgent")
    store.toggle_complete(task_id)
    store.toggle_complete("missing")
    store.delete_task(task_id)

    assert persistence.task_saves == [
        [(task_id, "Write report", _due_in(2), False, "work")],
        [(task_id, "Write report", _due_in(2), False, "urgent")],
        [(task_id, "Write report", _due_in(2), True, "urgent")],
        [(task_id, "Write report", _due_in(2), True, "urgent")],
        [],
    ]

    session_id = store.start_session(task_id)
    store.stop_session(session_id)

    assert len(persistence.session_saves) == 2
    assert persistence.session_saves[-1][0][4] is True


def test_reads_do_not_save():
    persistence = FakePersistence()
    store = _build_store(persistence=persistence)
    store.add_task("Write report", _due_in(2))
    store.start_session("t1")

    store.list_tasks()
    store.export_rows()
    store.session_stats()
    store.list_sessions()

    assert len(persistence.task_saves) == 1
    assert len(persistence.session_saves) == 1


def test_concurrent_adds_are_all_recorded():
    store = Store(today=lambda: TODAY)

    with ThreadPoolExecutor(max_workers=8) as executor:
        ids = list(
            executor.map(lambda n: store.add_task(f"task {n}", _due_in(n % 10)), range(200))
        )

    assert len(set(ids)) == 200
    assert len(store.list_tasks()) == 200


def test_end_to_end_task_and_session_flow():
    store = _build_store()
    task_id = store.add_task("Prepare demo", _due_in(2), "")

    task = store.get_task(task_id)
    assert task.priority is Priority.HIGH
    assert task.days_left == 2

    store.edit_task(task_id, "", "", "urgent")
    task = store.get_task(task_id)
    assert task.title == "Prepare demo"
    assert task.tags == "urgent"

    session_id = store.start_session(task_id)
    store.stop_session(session_id)

    stats = store.session_stats()
    assert stats.per_task[task_id] == 1
    assert stats.total_sessions == 1
    [session] = store.list_sessions()
    assert session.completed is True
    assert session.end != ""
