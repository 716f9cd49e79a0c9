"""Date <-> pixel geometry for the timeline."""
from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Tuple

from .models import Task

BAR_GUTTER = 4
MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_STEP = 0.2
DEFAULT_ZOOM = 1.0

BASE_DAY_WIDTH = {
    "day": 48,
    "week": 24,
    "month": 8,
}

_DAY_VIEW_WINDOW = (date(2025, 7, 13), date(2025, 8, 31))
_WEEK_VIEW_DAYS = 84  # 12 weeks
_MONTH_VIEW_DAYS = 365


@dataclass(frozen=True)
class TaskPosition:
    left: float
    width: float


@dataclass(frozen=True)
class TimelineWindow:
    """Visible date range and pixel scale for a view mode."""

    start: date
    end: date
    base_day_width: int

    def day_count(self) -> int:
        return days_between(self.start, self.end) + 1

    def dates(self) -> Tuple[date, ...]:
        return tuple(self.start + timedelta(days=offset) for offset in range(self.day_count()))


def days_between(start: date, end: date) -> int:
    """Signed whole-day difference `end - start`."""
    return (end - start).days


def task_duration(start: date, end: date) -> int:
    """Inclusive duration in days; a same-day task lasts one day."""
    return max(1, days_between(start, end) + 1)


def effective_day_width(base_day_width: float, zoom_level: float) -> float:
    return base_day_width * zoom_level


def task_position(task: Task, origin: date, day_width: float, gutter: float = BAR_GUTTER) -> TaskPosition:
    """Compute the bar rectangle for `task` against a timeline starting at `origin`.

    The width never drops below half a day so milestones stay clickable.
    """
    start_offset = max(0, days_between(origin, task.start_date))
    duration = task_duration(task.start_date, task.end_date)
    return TaskPosition(
        left=start_offset * day_width,
        width=max(day_width * 0.5, duration * day_width - gutter),
    )


def pixels_to_days(pixel_delta: float, day_width: float) -> int:
    """Convert a horizontal pointer delta into whole days, rounding halves up."""
    if day_width <= 0:
        return 0
    # round() would round halves to even.
    return math.floor(pixel_delta / day_width + 0.5)


def shift_date(value: date, days: int) -> date:
    return value + timedelta(days=days)


def clamp_zoom(level: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, level))


def timeline_window(view_mode: str, today: Optional[date] = None) -> TimelineWindow:
    """Return the visible window for `view_mode`.

    The day view is pinned to the demo schedule; week and month views are
    anchored on `today` (defaults to the current date).
    """
    today = today or date.today()
    if view_mode == "week":
        # Weeks start on Sunday.
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        return TimelineWindow(start, start + timedelta(days=_WEEK_VIEW_DAYS), BASE_DAY_WIDTH["week"])
    if view_mode == "month":
        start = today.replace(day=1)
        horizon = start + timedelta(days=_MONTH_VIEW_DAYS)
        last_day = calendar.monthrange(horizon.year, horizon.month)[1]
        return TimelineWindow(start, horizon.replace(day=last_day), BASE_DAY_WIDTH["month"])
    start, end = _DAY_VIEW_WINDOW
    return TimelineWindow(start, end, BASE_DAY_WIDTH["day"])
