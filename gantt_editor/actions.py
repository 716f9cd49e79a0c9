"""Closed vocabulary of actions accepted by the reducer."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, ClassVar, Mapping, Optional, Sequence

from .models import Task


@dataclass(frozen=True)
class Action:
    type: ClassVar[str] = "ACTION"


@dataclass(frozen=True)
class SetTasks(Action):
    type: ClassVar[str] = "SET_TASKS"
    tasks: Sequence[Task]


@dataclass(frozen=True)
class AddTask(Action):
    type: ClassVar[str] = "ADD_TASK"
    task: Task


@dataclass(frozen=True)
class AddTaskAtPosition(Action):
    type: ClassVar[str] = "ADD_TASK_AT_POSITION"
    task: Task
    position: str  # "above", "below" or "subtask"
    target_task_id: str


@dataclass(frozen=True)
class UpdateTask(Action):
    type: ClassVar[str] = "UPDATE_TASK"
    id: str
    updates: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteTask(Action):
    type: ClassVar[str] = "DELETE_TASK"
    id: str


@dataclass(frozen=True)
class SelectTask(Action):
    type: ClassVar[str] = "SELECT_TASK"
    id: Optional[str]


@dataclass(frozen=True)
class ToggleTaskExpansion(Action):
    type: ClassVar[str] = "TOGGLE_TASK_EXPANSION"
    id: str


@dataclass(frozen=True)
class SetViewMode(Action):
    type: ClassVar[str] = "SET_VIEW_MODE"
    view_mode: str


@dataclass(frozen=True)
class ToggleMaximize(Action):
    type: ClassVar[str] = "TOGGLE_MAXIMIZE"


@dataclass(frozen=True)
class SetZoomLevel(Action):
    type: ClassVar[str] = "SET_ZOOM_LEVEL"
    zoom_level: float


@dataclass(frozen=True)
class StartDrag(Action):
    type: ClassVar[str] = "START_DRAG"
    task: Task


@dataclass(frozen=True)
class EndDrag(Action):
    type: ClassVar[str] = "END_DRAG"


@dataclass(frozen=True)
class ReorderTasks(Action):
    type: ClassVar[str] = "REORDER_TASKS"
    source_index: int
    destination_index: int


@dataclass(frozen=True)
class MoveTaskToParent(Action):
    type: ClassVar[str] = "MOVE_TASK_TO_PARENT"
    task_id: str
    new_parent_id: Optional[str]
    new_index: int


@dataclass(frozen=True)
class StartResize(Action):
    type: ClassVar[str] = "START_RESIZE"
    task_id: str
    handle: str  # "start" or "end"


@dataclass(frozen=True)
class EndResize(Action):
    type: ClassVar[str] = "END_RESIZE"


@dataclass(frozen=True)
class ResizeTask(Action):
    type: ClassVar[str] = "RESIZE_TASK"
    task_id: str
    new_start_date: Optional[date] = None
    new_end_date: Optional[date] = None
