import random
from datetime import date, timedelta

import pytest

from gantt_editor import actions as act
from gantt_editor.models import GanttState
from gantt_editor.reducer import reduce
from gantt_editor.sessions import (
    MoveSession,
    ReorderSession,
    ResizeSession,
    clamp_resize,
    display_tasks,
)
from gantt_editor.tree import find_task

from factories import make_task

DAY_WIDTH = 48
DAY_10 = date(2025, 7, 10)
DAY_12 = date(2025, 7, 12)


class Harness:
    """Minimal store stand-in recording every dispatched action."""

    def __init__(self, tasks) -> None:
        self.state = GanttState(tasks=tasks)
        self.dispatched = []

    def dispatch(self, action):
        self.dispatched.append(action)
        self.state = reduce(self.state, action)
        return self.state

    def task(self, task_id):
        return find_task(self.state.tasks, task_id)


@pytest.fixture
def harness() -> Harness:
    return Harness((make_task("T", start=DAY_10, end=DAY_12), make_task("M", start=DAY_10)))


def test_move_shifts_both_dates(harness) -> None:
    session = MoveSession(harness.dispatch)
    session.begin(harness.task("T"), 100, DAY_WIDTH)

    session.move(100 + 3 * DAY_WIDTH)
    session.release()

    task = harness.task("T")
    assert task.start_date == date(2025, 7, 13)
    assert task.end_date == date(2025, 7, 15)
    assert not session.is_active


def test_move_is_computed_from_anchor(harness) -> None:
    session = MoveSession(harness.dispatch)
    session.begin(harness.task("T"), 0, DAY_WIDTH)

    for x in range(0, 5 * DAY_WIDTH, 7):
        session.move(x)
    session.move(2 * DAY_WIDTH + 10)

    assert harness.task("T").start_date == DAY_10 + timedelta(days=2)
    assert harness.task("T").end_date == DAY_12 + timedelta(days=2)


def test_move_skips_sub_day_jitter(harness) -> None:
    session = MoveSession(harness.dispatch)
    session.begin(harness.task("T"), 200, DAY_WIDTH)

    assert session.move(210) is False
    assert session.move(190) is False
    assert harness.dispatched == []


def test_move_back_to_zero_delta_dispatches_nothing(harness) -> None:
    session = MoveSession(harness.dispatch)
    session.begin(harness.task("T"), 0, DAY_WIDTH)

    assert session.move(2 * DAY_WIDTH) is True
    assert session.move(0) is False

    assert len(harness.dispatched) == 1
    assert harness.task("T").start_date == DAY_10 + timedelta(days=2)


def test_resize_back_to_zero_delta_dispatches_nothing(harness) -> None:
    session = ResizeSession(harness.dispatch)
    session.begin(harness.task("T"), "end", 0, DAY_WIDTH)

    session.move(2 * DAY_WIDTH)
    session.move(10)
    session.release()

    assert [type(action) for action in harness.dispatched] == [act.StartResize, act.ResizeTask, act.EndResize]
    assert harness.task("T").end_date == DAY_12 + timedelta(days=2)


def test_move_cancel_restores_anchor(harness) -> None:
    session = MoveSession(harness.dispatch)
    session.begin(harness.task("T"), 0, DAY_WIDTH)
    session.move(-4 * DAY_WIDTH)

    session.cancel()

    assert harness.task("T").start_date == DAY_10
    assert harness.task("T").end_date == DAY_12
    assert not session.is_active


def test_move_ignores_events_without_gesture(harness) -> None:
    session = MoveSession(harness.dispatch)

    assert session.move(500) is False
    session.release()
    session.cancel()
    assert harness.dispatched == []


def test_resize_end_handle_is_clamped(harness) -> None:
    session = ResizeSession(harness.dispatch)
    session.begin(harness.task("T"), "end", 0, DAY_WIDTH)

    session.move(-5 * DAY_WIDTH)

    task = harness.task("T")
    assert task.start_date == DAY_10
    assert task.end_date == date(2025, 7, 11)


def test_resize_start_handle_is_clamped(harness) -> None:
    session = ResizeSession(harness.dispatch)
    session.begin(harness.task("T"), "start", 0, DAY_WIDTH)

    session.move(10 * DAY_WIDTH)

    assert harness.task("T").start_date == date(2025, 7, 11)
    assert harness.task("T").end_date == DAY_12


def test_resize_brackets_gesture(harness) -> None:
    session = ResizeSession(harness.dispatch)
    session.begin(harness.task("T"), "start", 0, DAY_WIDTH)

    assert harness.state.is_resizing
    assert harness.state.resize_handle == "start"
    assert harness.state.selected_task_id == "T"

    session.move(-DAY_WIDTH)
    session.release()

    assert not harness.state.is_resizing
    assert harness.state.resize_handle is None
    assert [type(action) for action in harness.dispatched] == [act.StartResize, act.ResizeTask, act.EndResize]


def test_resize_milestone_gets_one_day_span(harness) -> None:
    session = ResizeSession(harness.dispatch)
    session.begin(harness.task("M"), "end", 0, DAY_WIDTH)

    session.move(-2 * DAY_WIDTH)

    task = harness.task("M")
    assert task.end_date - task.start_date == timedelta(days=1)


def test_resize_milestone_start_handle_keeps_one_day_span(harness) -> None:
    session = ResizeSession(harness.dispatch)
    session.begin(harness.task("M"), "start", 0, DAY_WIDTH)

    session.move(3 * DAY_WIDTH)

    task = harness.task("M")
    assert task.end_date == DAY_10
    assert task.start_date == DAY_10 - timedelta(days=1)


def test_resize_cancel_restores_and_ends(harness) -> None:
    session = ResizeSession(harness.dispatch)
    session.begin(harness.task("T"), "end", 0, DAY_WIDTH)
    session.move(6 * DAY_WIDTH)

    session.cancel()

    assert harness.task("T").end_date == DAY_12
    assert not harness.state.is_resizing
    assert session.handle is None


def test_resize_rejects_unknown_handle(harness) -> None:
    with pytest.raises(ValueError):
        ResizeSession(harness.dispatch).begin(harness.task("T"), "middle", 0, DAY_WIDTH)


@pytest.mark.parametrize("seed", range(5))
def test_resize_sequences_keep_start_before_end(seed: int) -> None:
    rng = random.Random(seed)
    harness = Harness((make_task("T", start=DAY_10, end=DAY_12),))
    for _ in range(20):
        session = ResizeSession(harness.dispatch)
        session.begin(harness.task("T"), rng.choice(["start", "end"]), 0, DAY_WIDTH)
        for _ in range(5):
            session.move(rng.randint(-15, 15) * DAY_WIDTH)
        session.release()
        task = harness.task("T")
        assert task.start_date < task.end_date


def test_clamp_resize_directly() -> None:
    assert clamp_resize(DAY_10, DAY_12, "end", -5) == (DAY_10, date(2025, 7, 11))
    assert clamp_resize(DAY_10, DAY_12, "start", 2) == (date(2025, 7, 11), DAY_12)
    assert clamp_resize(DAY_10, DAY_12, "start", -3) == (date(2025, 7, 7), DAY_12)


def test_reorder_over_full_list() -> None:
    harness = Harness((make_task("A"), make_task("B"), make_task("C")))
    session = ReorderSession(harness.dispatch)
    session.begin(harness.task("A"), harness.state.tasks)

    assert harness.state.dragged_task.id == "A"
    assert session.drop("C", harness.state.tasks) is True

    assert [task.id for task in harness.state.tasks] == ["B", "C", "A"]
    assert harness.state.dragged_task is None


def test_reorder_resolves_filtered_positions_by_id() -> None:
    roots = (
        make_task("A", status="in-progress"),
        make_task("X", status="completed"),
        make_task("B", status="in-progress"),
        make_task("C", status="in-progress"),
    )
    harness = Harness(roots)
    shown = display_tasks(harness.state.tasks, status="in-progress")
    session = ReorderSession(harness.dispatch)
    session.begin(shown[0], shown)

    session.drop("C", harness.state.tasks)

    assert harness.dispatched[1] == act.ReorderTasks(0, 3)
    assert [task.id for task in harness.state.tasks] == ["X", "B", "C", "A"]


def test_reorder_drop_on_self_or_nothing_only_ends_drag() -> None:
    harness = Harness((make_task("A"), make_task("B")))
    session = ReorderSession(harness.dispatch)
    session.begin(harness.task("A"), harness.state.tasks)

    assert session.drop("A", harness.state.tasks) is False
    assert [type(action) for action in harness.dispatched] == [act.StartDrag, act.EndDrag]
    assert not session.is_active


def test_display_tasks_filters_and_sorts() -> None:
    roots = [
        make_task("1", name="Design", priority="high", progress=50),
        make_task("2", name="Build", priority="low", progress=10),
        make_task("3", name="Design review", priority="high", progress=90),
    ]

    assert [t.id for t in display_tasks(roots, search="design")] == ["1", "3"]
    assert [t.id for t in display_tasks(roots, priority="low")] == ["2"]
    assert [t.id for t in display_tasks(roots, sort_key="progress", descending=True)] == ["3", "1", "2"]
    assert [t.id for t in display_tasks(roots, sort_key="name")] == ["2", "1", "3"]
