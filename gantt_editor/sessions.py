"""Gesture sessions translating pointer movement into dispatched actions.

Move and resize sessions snapshot the task's dates and the pointer position
when the gesture starts and compute every update from that anchor, so a long
drag never accumulates rounding drift. Each pointer event dispatches at most
one action.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .actions import Action, EndDrag, EndResize, ReorderTasks, ResizeTask, StartDrag, StartResize, UpdateTask
from .models import Task
from .timeline import pixels_to_days, shift_date

logger = logging.getLogger(__name__)

Dispatch = Callable[[Action], Any]

_ONE_DAY = timedelta(days=1)


@dataclass(slots=True)
class DragAnchor:
    task_id: str
    start: date
    end: date
    pointer_x: float
    day_width: float
    applied_delta: int = 0


class _AnchoredSession:
    def __init__(self, dispatch: Dispatch) -> None:
        self._dispatch = dispatch
        self._anchor: Optional[DragAnchor] = None

    @property
    def is_active(self) -> bool:
        return self._anchor is not None

    @property
    def task_id(self) -> Optional[str]:
        return self._anchor.task_id if self._anchor else None

    def _snapshot(self, task: Task, pointer_x: float, day_width: float) -> None:
        self._anchor = DragAnchor(
            task_id=task.id,
            start=task.start_date,
            end=task.end_date,
            pointer_x=pointer_x,
            day_width=day_width,
        )

    def _delta_for(self, pointer_x: float) -> Optional[int]:
        """Whole-day offset from the anchor; None for a zero or already applied offset."""
        anchor = self._anchor
        if anchor is None:
            return None
        days = pixels_to_days(pointer_x - anchor.pointer_x, anchor.day_width)
        if days == 0 or days == anchor.applied_delta:
            return None
        anchor.applied_delta = days
        return days


class MoveSession(_AnchoredSession):
    """Drags a bar along the time axis, shifting both dates together."""

    def begin(self, task: Task, pointer_x: float, day_width: float) -> None:
        if self.is_active:
            self.release()
        self._snapshot(task, pointer_x, day_width)
        logger.debug("Move started for %s", task.id)

    def move(self, pointer_x: float) -> bool:
        days = self._delta_for(pointer_x)
        if days is None:
            return False
        anchor = self._anchor
        self._dispatch(
            UpdateTask(
                anchor.task_id,
                {"start_date": shift_date(anchor.start, days), "end_date": shift_date(anchor.end, days)},
            )
        )
        return True

    def release(self) -> None:
        if self._anchor is not None:
            logger.debug("Move finished for %s", self._anchor.task_id)
        self._anchor = None

    def cancel(self) -> None:
        """Abort the drag and put the task back on its anchored dates."""
        anchor = self._anchor
        if anchor is None:
            return
        if anchor.applied_delta:
            self._dispatch(UpdateTask(anchor.task_id, {"start_date": anchor.start, "end_date": anchor.end}))
        logger.debug("Move cancelled for %s", anchor.task_id)
        self._anchor = None


class ResizeSession(_AnchoredSession):
    """Drags one edge of a bar; the span never shrinks below one day."""

    def __init__(self, dispatch: Dispatch) -> None:
        super().__init__(dispatch)
        self._handle: Optional[str] = None

    @property
    def handle(self) -> Optional[str]:
        return self._handle

    def begin(self, task: Task, handle: str, pointer_x: float, day_width: float) -> None:
        if handle not in ("start", "end"):
            raise ValueError(f"Unknown resize handle: {handle!r}")
        if self.is_active:
            self.release()
        self._snapshot(task, pointer_x, day_width)
        self._handle = handle
        self._dispatch(StartResize(task.id, handle))
        logger.debug("Resize (%s) started for %s", handle, task.id)

    def move(self, pointer_x: float) -> bool:
        days = self._delta_for(pointer_x)
        if days is None:
            return False
        anchor = self._anchor
        start, end = clamp_resize(anchor.start, anchor.end, self._handle, days)
        self._dispatch(ResizeTask(anchor.task_id, start, end))
        return True

    def release(self) -> None:
        if self._anchor is None:
            return
        logger.debug("Resize finished for %s", self._anchor.task_id)
        self._finish()

    def cancel(self) -> None:
        """Abort the resize, restoring the anchored dates."""
        anchor = self._anchor
        if anchor is None:
            return
        if anchor.applied_delta:
            self._dispatch(ResizeTask(anchor.task_id, anchor.start, anchor.end))
        logger.debug("Resize cancelled for %s", anchor.task_id)
        self._finish()

    def _finish(self) -> None:
        self._anchor = None
        self._handle = None
        self._dispatch(EndResize())


def clamp_resize(start: date, end: date, handle: str, days: int) -> Tuple[date, date]:
    """Apply `days` to one edge of `(start, end)` keeping at least a one-day span."""
    if handle == "start":
        new_start = shift_date(start, days)
        if new_start >= end:
            new_start = end - _ONE_DAY
        return new_start, end
    new_end = shift_date(end, days)
    if new_end <= start:
        new_end = start + _ONE_DAY
    return start, new_end


class ReorderSession:
    """Row drag-and-drop over the root entries currently on screen.

    Positions are taken from the displayed (possibly filtered or sorted)
    list, then resolved by id to indices in the full root list before
    `ReorderTasks` is dispatched.
    """

    def __init__(self, dispatch: Dispatch) -> None:
        self._dispatch = dispatch
        self._task: Optional[Task] = None
        self._displayed: Tuple[str, ...] = ()

    @property
    def is_active(self) -> bool:
        return self._task is not None

    def begin(self, task: Task, displayed: Sequence[Task]) -> None:
        if self.is_active:
            self.cancel()
        self._task = task
        self._displayed = tuple(entry.id for entry in displayed)
        self._dispatch(StartDrag(task))

    def drop(self, target_id: Optional[str], roots: Sequence[Task]) -> bool:
        """Finish the drag over `target_id`; returns True if a reorder was dispatched."""
        task = self._task
        if task is None:
            return False
        dispatched = False
        if target_id is not None and target_id != task.id:
            indices = self._resolve(task.id, target_id, roots)
            if indices is not None:
                self._dispatch(ReorderTasks(*indices))
                dispatched = True
        self._end()
        return dispatched

    def cancel(self) -> None:
        if self._task is not None:
            self._end()

    def _resolve(self, source_id: str, target_id: str, roots: Sequence[Task]) -> Optional[Tuple[int, int]]:
        if source_id not in self._displayed or target_id not in self._displayed:
            return None
        root_ids = [root.id for root in roots]
        if source_id not in root_ids or target_id not in root_ids:
            return None
        return root_ids.index(source_id), root_ids.index(target_id)

    def _end(self) -> None:
        self._task = None
        self._displayed = ()
        self._dispatch(EndDrag())


def display_tasks(
    roots: Sequence[Task],
    search: str = "",
    status: str = "all",
    priority: str = "all",
    sort_key: Optional[str] = None,
    descending: bool = False,
) -> List[Task]:
    """Filter and sort root tasks the way the task table shows them."""
    needle = search.strip().lower()
    shown = [
        task
        for task in roots
        if needle in task.name.lower()
        and (status == "all" or task.status == status)
        and (priority == "all" or task.priority == priority)
    ]
    if sort_key:

        def sort_value(task: Task) -> Tuple[bool, Any]:
            # Missing values sort last in ascending order.
            value = getattr(task, sort_key, None)
            return value is None, value

        shown.sort(key=sort_value, reverse=descending)
    return shown
