"""Owned state container: the single mutation entry point for collaborators."""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from .actions import Action
from .models import GanttState, Task
from .reducer import reduce

logger = logging.getLogger(__name__)


class GanttStore(QObject):
    """Holds the current `GanttState` and applies actions through `reduce`.

    Views read `state` and call `dispatch`; they never touch task nodes
    directly. `state_changed` fires with the new state after every
    transition that produced a different state object.
    """

    state_changed = pyqtSignal(object)

    def __init__(self, initial: Optional[GanttState] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._state = initial if initial is not None else GanttState(tasks=demo_tasks())

    @property
    def state(self) -> GanttState:
        return self._state

    def dispatch(self, action: Action) -> GanttState:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state is previous:
            logger.debug("%s left the state unchanged", getattr(action, "type", action))
        else:
            self.state_changed.emit(self._state)
        return self._state


def demo_tasks() -> Tuple[Task, ...]:
    """Seed schedule shown when the editor starts."""
    planning_children = (
        Task(
            id="2",
            name="Requirements Analysis",
            start_date=date(2025, 7, 15),
            end_date=date(2025, 7, 22),
            progress=100,
            color="#22c55e",
            parent_id="1",
            order=0,
            priority="high",
            status="completed",
        ),
        Task(
            id="3",
            name="System Design",
            start_date=date(2025, 7, 23),
            end_date=date(2025, 7, 30),
            progress=75,
            color="#3b82f6",
            parent_id="1",
            order=1,
            priority="high",
            status="in-progress",
        ),
        Task(
            id="4",
            name="UI/UX Design",
            start_date=date(2025, 8, 1),
            end_date=date(2025, 8, 8),
            progress=50,
            color="#a855f7",
            parent_id="1",
            order=2,
            priority="medium",
            status="in-progress",
        ),
    )
    development_children = (
        Task(
            id="7",
            name="Backend Development",
            start_date=date(2025, 7, 17),
            end_date=date(2025, 8, 15),
            progress=45,
            color="#f59e0b",
            parent_id="6",
            order=0,
            priority="high",
            status="in-progress",
        ),
        Task(
            id="8",
            name="Frontend Development",
            start_date=date(2025, 7, 20),
            end_date=date(2025, 8, 18),
            progress=20,
            color="#06b6d4",
            parent_id="6",
            order=1,
            priority="high",
            status="in-progress",
        ),
    )
    return (
        Task(
            id="1",
            name="Project Planning",
            start_date=date(2025, 7, 13),
            end_date=date(2025, 8, 10),
            progress=25,
            color="#6366f1",
            is_expanded=True,
            order=0,
            priority="high",
            status="in-progress",
            children=planning_children,
        ),
        Task(
            id="5",
            name="Project Milestone",
            start_date=date(2025, 8, 9),
            end_date=date(2025, 8, 9),
            progress=0,
            color="#000000",
            order=1,
            priority="high",
            status="not-started",
        ),
        Task(
            id="6",
            name="Development Phase",
            start_date=date(2025, 7, 14),
            end_date=date(2025, 8, 20),
            progress=30,
            color="#ef4444",
            is_expanded=False,
            order=2,
            priority="high",
            status="in-progress",
            children=development_children,
        ),
    )
