"""Data models shared across the Gantt editor."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, Optional, Tuple

Priority = Literal["low", "medium", "high"]
Status = Literal["not-started", "in-progress", "completed", "on-hold"]
ViewMode = Literal["day", "week", "month"]
ResizeHandle = Literal["start", "end"]

PRIORITIES: Tuple[str, ...] = ("low", "medium", "high")
STATUSES: Tuple[str, ...] = ("not-started", "in-progress", "completed", "on-hold")
VIEW_MODES: Tuple[str, ...] = ("day", "week", "month")

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_TASK_COLOR = "#3b82f6"
FALLBACK_COLOR = "#6b7280"

_STATUS_COLORS = {
    "completed": "#22c55e",
    "in-progress": "#3b82f6",
    "on-hold": "#f59e0b",
    "not-started": "#6b7280",
}

_PRIORITY_COLORS = {
    "high": "#ef4444",
    "medium": "#f59e0b",
    "low": "#22c55e",
}


@dataclass(frozen=True)
class Task:
    """Immutable node of the task forest.

    `children` is owned by the node: dropping a task drops its whole subtree.
    `parent_id` mirrors the structural parent and is kept in sync by the
    helpers in `gantt_editor.tree`; containment is the source of truth.
    """

    id: str
    name: str
    start_date: date
    end_date: date
    progress: int = 0
    color: str = DEFAULT_TASK_COLOR
    order: int = 0
    parent_id: Optional[str] = None
    children: Tuple["Task", ...] = ()
    is_expanded: bool = False
    dependencies: Tuple[str, ...] = ()
    resources: Tuple[str, ...] = ()
    notes: str = ""
    priority: Priority = "medium"
    status: Status = "not-started"

    def __post_init__(self) -> None:
        # Sequences are stored as tuples so nodes stay hashable and shareable.
        for name in ("children", "dependencies", "resources"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value or ()))

    @property
    def is_milestone(self) -> bool:
        """Return True for single-day tasks."""
        return self.start_date == self.end_date

    @property
    def has_children(self) -> bool:
        return bool(self.children)


@dataclass(frozen=True)
class GanttState:
    """Whole-editor state; replaced, never mutated, on every transition."""

    tasks: Tuple[Task, ...] = ()
    selected_task_id: Optional[str] = None
    view_mode: ViewMode = "day"
    is_maximized: bool = False
    zoom_level: float = 1.0
    dragged_task: Optional[Task] = None
    is_resizing: bool = False
    resize_handle: Optional[ResizeHandle] = None

    def __post_init__(self) -> None:
        if not isinstance(self.tasks, tuple):
            object.__setattr__(self, "tasks", tuple(self.tasks or ()))


def get_status_color(status: Optional[str]) -> str:
    """Map a task status to its badge color."""
    return _STATUS_COLORS.get(status or "", FALLBACK_COLOR)


def get_priority_color(priority: Optional[str]) -> str:
    """Map a task priority to its badge color."""
    return _PRIORITY_COLORS.get(priority or "", FALLBACK_COLOR)


def format_task_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_task_date(text: str) -> date:
    """Parse calendar-date text (YYYY-MM-DD); raises ValueError when invalid."""
    return datetime.strptime(text.strip(), DATE_FORMAT).date()
