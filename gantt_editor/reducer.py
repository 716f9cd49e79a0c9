"""Pure state transitions for the Gantt editor.

`reduce` never raises for a well-formed action and never mutates its input:
misses (unknown ids, unknown actions, out-of-range indices) hand back the
state unchanged, and out-of-range values are clamped.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Type

from . import actions as act
from . import tree
from .models import VIEW_MODES, GanttState
from .timeline import clamp_zoom

logger = logging.getLogger(__name__)

_Handler = Callable[[GanttState, act.Action], GanttState]


def reduce(state: GanttState, action: object) -> GanttState:
    """Apply `action` to `state`, returning the next state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        logger.debug("Ignoring unknown action %r", action)
        return state
    logger.debug("Applying %s", action.type)  # type: ignore[attr-defined]
    return handler(state, action)  # type: ignore[arg-type]


def _with_tasks(state: GanttState, tasks: tree.Forest) -> GanttState:
    if tasks is state.tasks:
        return state
    return replace(state, tasks=tasks)


def _set_tasks(state: GanttState, action: act.SetTasks) -> GanttState:
    return replace(state, tasks=tuple(action.tasks))


def _add_task(state: GanttState, action: act.AddTask) -> GanttState:
    root = replace(action.task, parent_id=None) if action.task.parent_id else action.task
    return replace(state, tasks=state.tasks + (root,))


def _add_task_at_position(state: GanttState, action: act.AddTaskAtPosition) -> GanttState:
    tasks = tree.insert_task_at(state.tasks, action.task, action.position, action.target_task_id)
    return _with_tasks(state, tasks)


def _update_task(state: GanttState, action: act.UpdateTask) -> GanttState:
    return _with_tasks(state, tree.update_task(state.tasks, action.id, action.updates))


def _delete_task(state: GanttState, action: act.DeleteTask) -> GanttState:
    return _with_tasks(state, tree.delete_task(state.tasks, action.id))


def _select_task(state: GanttState, action: act.SelectTask) -> GanttState:
    return replace(state, selected_task_id=action.id)


def _toggle_task_expansion(state: GanttState, action: act.ToggleTaskExpansion) -> GanttState:
    return _with_tasks(state, tree.toggle_expansion(state.tasks, action.id))


def _set_view_mode(state: GanttState, action: act.SetViewMode) -> GanttState:
    if action.view_mode not in VIEW_MODES:
        logger.debug("Ignoring unknown view mode %r", action.view_mode)
        return state
    return replace(state, view_mode=action.view_mode)


def _toggle_maximize(state: GanttState, action: act.ToggleMaximize) -> GanttState:
    return replace(state, is_maximized=not state.is_maximized)


def _set_zoom_level(state: GanttState, action: act.SetZoomLevel) -> GanttState:
    return replace(state, zoom_level=clamp_zoom(action.zoom_level))


def _start_drag(state: GanttState, action: act.StartDrag) -> GanttState:
    return replace(state, dragged_task=action.task)


def _end_drag(state: GanttState, action: act.EndDrag) -> GanttState:
    return replace(state, dragged_task=None)


def _reorder_tasks(state: GanttState, action: act.ReorderTasks) -> GanttState:
    """Splice the root entry at `source_index` into `destination_index`."""
    count = len(state.tasks)
    source, destination = action.source_index, action.destination_index
    if not (0 <= source < count and 0 <= destination < count):
        logger.debug("Reorder indices %s -> %s out of range for %d roots", source, destination, count)
        return state
    if source == destination:
        return state
    reordered = list(state.tasks)
    moved = reordered.pop(source)
    reordered.insert(destination, moved)
    return replace(state, tasks=tuple(reordered))


def _move_task_to_parent(state: GanttState, action: act.MoveTaskToParent) -> GanttState:
    tasks = tree.move_task_to_parent(state.tasks, action.task_id, action.new_parent_id, action.new_index)
    return _with_tasks(state, tasks)


def _start_resize(state: GanttState, action: act.StartResize) -> GanttState:
    if action.handle not in ("start", "end"):
        return state
    return replace(
        state,
        is_resizing=True,
        resize_handle=action.handle,
        selected_task_id=action.task_id,
    )


def _end_resize(state: GanttState, action: act.EndResize) -> GanttState:
    return replace(state, is_resizing=False, resize_handle=None)


def _resize_task(state: GanttState, action: act.ResizeTask) -> GanttState:
    updates = {}
    if action.new_start_date is not None:
        updates["start_date"] = action.new_start_date
    if action.new_end_date is not None:
        updates["end_date"] = action.new_end_date
    if not updates:
        return state
    return _with_tasks(state, tree.update_task(state.tasks, action.task_id, updates))


_HANDLERS: Dict[Type[act.Action], _Handler] = {
    act.SetTasks: _set_tasks,
    act.AddTask: _add_task,
    act.AddTaskAtPosition: _add_task_at_position,
    act.UpdateTask: _update_task,
    act.DeleteTask: _delete_task,
    act.SelectTask: _select_task,
    act.ToggleTaskExpansion: _toggle_task_expansion,
    act.SetViewMode: _set_view_mode,
    act.ToggleMaximize: _toggle_maximize,
    act.SetZoomLevel: _set_zoom_level,
    act.StartDrag: _start_drag,
    act.EndDrag: _end_drag,
    act.ReorderTasks: _reorder_tasks,
    act.MoveTaskToParent: _move_task_to_parent,
    act.StartResize: _start_resize,
    act.EndResize: _end_resize,
    act.ResizeTask: _resize_task,
}
