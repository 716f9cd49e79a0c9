"""Coercion between task-edit form fields and task payloads."""
from __future__ import annotations

import itertools
import time
from datetime import date, timedelta
from typing import Any, Dict, Mapping, Optional

from .models import DEFAULT_TASK_COLOR, PRIORITIES, STATUSES, Task, format_task_date, parse_task_date

_LIST_FIELDS = ("resources", "dependencies")

# Epoch milliseconds alone repeat when two tasks are created in the same tick.
_id_counter = itertools.count(1)


def task_to_form(task: Task) -> Dict[str, Any]:
    """Render a task as the text-oriented values an edit dialog shows."""
    return {
        "name": task.name,
        "start_date": format_task_date(task.start_date),
        "end_date": format_task_date(task.end_date),
        "progress": task.progress,
        "color": task.color,
        "notes": task.notes,
        "priority": task.priority,
        "status": task.status,
        "resources": ", ".join(task.resources),
        "dependencies": ", ".join(task.dependencies),
    }


def blank_form(today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    return {
        "name": "",
        "start_date": format_task_date(today),
        "end_date": format_task_date(today),
        "progress": 0,
        "color": DEFAULT_TASK_COLOR,
        "notes": "",
        "priority": "medium",
        "status": "not-started",
        "resources": "",
        "dependencies": "",
    }


def parse_task_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn submitted form values into a partial update for `UpdateTask`.

    Only keys present in `form` are returned. Dates must be `YYYY-MM-DD`
    (ValueError otherwise); an inverted date pair is swapped.
    """
    updates: Dict[str, Any] = {}
    if "name" in form:
        updates["name"] = str(form["name"] or "").strip()
    for key in ("start_date", "end_date"):
        if form.get(key) not in (None, ""):
            updates[key] = _coerce_date(form[key])
    if "progress" in form:
        updates["progress"] = _coerce_progress(form["progress"])
    if "color" in form:
        updates["color"] = str(form["color"] or DEFAULT_TASK_COLOR)
    if "notes" in form:
        updates["notes"] = str(form["notes"] or "")
    if "priority" in form:
        updates["priority"] = form["priority"] if form["priority"] in PRIORITIES else "medium"
    if "status" in form:
        updates["status"] = form["status"] if form["status"] in STATUSES else "not-started"
    for key in _LIST_FIELDS:
        if key in form:
            updates[key] = split_list(form[key])

    start, end = updates.get("start_date"), updates.get("end_date")
    if start is not None and end is not None and start > end:
        updates["start_date"], updates["end_date"] = end, start
    return updates


def new_task_from_form(
    form: Mapping[str, Any],
    root_count: int,
    today: Optional[date] = None,
    task_id: Optional[str] = None,
) -> Task:
    """Build a new root task, filling anything the form left empty."""
    today = today or date.today()
    updates = parse_task_form(form)
    start = updates.pop("start_date", None) or today
    end = updates.pop("end_date", None) or start + timedelta(days=1)
    if not updates.get("name"):
        updates["name"] = "New Task"
    return Task(
        id=task_id or f"task-{int(time.time() * 1000)}-{next(_id_counter)}",
        start_date=start,
        end_date=max(start, end),
        order=root_count,
        **updates,
    )


def split_list(value: Any) -> tuple:
    """Split comma-separated text into trimmed, non-empty entries."""
    if value is None:
        return ()
    if isinstance(value, str):
        parts = value.split(",")
    else:
        parts = [str(item) for item in value]
    return tuple(part.strip() for part in parts if part.strip())


def _coerce_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return parse_task_date(str(value))


def _coerce_progress(value: Any) -> int:
    try:
        progress = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, min(progress, 100))
