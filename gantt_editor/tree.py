"""Persistent operations over the task forest.

Every helper returns a new top-level tuple and leaves its input untouched.
Only the nodes on the path from a root to the edited node are rebuilt; all
other subtrees are shared with the previous forest. Ids are assumed to be
unique, so the first pre-order match wins.
"""
from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence, Tuple

from .models import Task

logger = logging.getLogger(__name__)

Forest = Tuple[Task, ...]

POSITIONS = ("above", "below", "subtask")

_TASK_FIELDS = frozenset(f.name for f in fields(Task))
# Structural fields are derived from containment and cannot be merged in.
_STRUCTURAL_FIELDS = frozenset({"parent_id"})


def find_task(forest: Sequence[Task], task_id: str) -> Optional[Task]:
    """Return the first task with `task_id` in pre-order, or None."""
    for task in forest:
        if task.id == task_id:
            return task
        if task.children:
            found = find_task(task.children, task_id)
            if found is not None:
                return found
    return None


def update_task(forest: Sequence[Task], task_id: str, updates: Mapping[str, Any]) -> Forest:
    """Shallow-merge `updates` into the matching task.

    Unknown keys and `parent_id` are ignored. Replacing `children` re-stamps
    the new children's `parent_id`.
    """
    clean = _clean_updates(updates)

    def merge(task: Task) -> Task:
        merged = replace(task, **clean)
        if "children" in clean:
            merged = replace(merged, children=_stamp_parent(merged.children, merged.id))
        return merged

    return _apply_to(forest, task_id, merge)


def toggle_expansion(forest: Sequence[Task], task_id: str) -> Forest:
    """Flip `is_expanded` on the matching task."""
    return _apply_to(forest, task_id, lambda task: replace(task, is_expanded=not task.is_expanded))


def insert_task_at(forest: Sequence[Task], new_task: Task, position: str, target_id: str) -> Forest:
    """Insert `new_task` above, below or as the last child of `target_id`.

    The forest is returned unchanged when the target is missing or the
    position is not one of `POSITIONS`.
    """
    tasks = tuple(forest)
    if position == "subtask":

        def adopt(target: Task) -> Task:
            child = replace(new_task, parent_id=target.id)
            return replace(target, children=target.children + (child,), is_expanded=True)

        return _apply_to(tasks, target_id, adopt)
    if position not in ("above", "below"):
        logger.debug("Ignoring insert with unknown position %r", position)
        return tasks
    offset = 0 if position == "above" else 1
    inserted = _insert_sibling(tasks, new_task, target_id, offset, None)
    if inserted is None:
        logger.debug("Insert target %s not found", target_id)
        return tasks
    return inserted


def delete_task(forest: Sequence[Task], task_id: str) -> Forest:
    """Remove the matching task together with its entire subtree."""
    return _prune(tuple(forest), task_id)


def move_task_to_parent(
    forest: Sequence[Task],
    task_id: str,
    new_parent_id: Optional[str],
    new_index: int,
) -> Forest:
    """Detach `task_id` and re-attach it under `new_parent_id` (None for root).

    Refuses, returning the forest unchanged, when the task or new parent is
    missing or when the new parent lies inside the moved subtree.
    """
    tasks = tuple(forest)
    task = find_task(tasks, task_id)
    if task is None:
        return tasks
    if new_parent_id is not None:
        if new_parent_id == task_id or find_task(task.children, new_parent_id) is not None:
            logger.debug("Refusing to move %s under its own subtree", task_id)
            return tasks
        if find_task(tasks, new_parent_id) is None:
            return tasks

    moved = replace(task, parent_id=new_parent_id)
    detached = _prune(tasks, task_id)
    if new_parent_id is None:
        return _insert_clamped(detached, moved, new_index)

    def attach(parent: Task) -> Task:
        return replace(parent, children=_insert_clamped(parent.children, moved, new_index))

    return _apply_to(detached, new_parent_id, attach)


def parent_of(forest: Sequence[Task], task_id: str) -> Optional[str]:
    """Derive the structural parent id of `task_id` (None for roots or misses)."""
    for task in forest:
        if not task.children:
            continue
        if any(child.id == task_id for child in task.children):
            return task.id
        found = parent_of(task.children, task_id)
        if found is not None:
            return found
    return None


def iter_tasks(forest: Sequence[Task]) -> Iterator[Task]:
    """Yield every task in pre-order."""
    for task in forest:
        yield task
        if task.children:
            yield from iter_tasks(task.children)


def count_tasks(forest: Sequence[Task]) -> int:
    return sum(1 for _ in iter_tasks(forest))


def visible_rows(forest: Sequence[Task], depth: int = 0) -> Iterator[Tuple[Task, int]]:
    """Yield `(task, depth)` for each row shown, skipping collapsed subtrees."""
    for task in forest:
        yield task, depth
        if task.children and task.is_expanded:
            yield from visible_rows(task.children, depth + 1)


# --- Internal helpers ---------------------------------------------------------


def _apply_to(forest: Sequence[Task], task_id: str, fn: Callable[[Task], Task]) -> Forest:
    tasks = tuple(forest)
    rebuilt = _rebuild_path(tasks, task_id, fn)
    if rebuilt is None:
        logger.debug("Task %s not found; forest unchanged", task_id)
        return tasks
    return rebuilt


def _rebuild_path(tasks: Forest, task_id: str, fn: Callable[[Task], Task]) -> Optional[Forest]:
    """Apply `fn` to the match and rebuild its ancestors; None on a miss."""
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return tasks[:index] + (fn(task),) + tasks[index + 1:]
        if task.children:
            children = _rebuild_path(task.children, task_id, fn)
            if children is not None:
                return tasks[:index] + (replace(task, children=children),) + tasks[index + 1:]
    return None


def _insert_sibling(
    tasks: Forest,
    new_task: Task,
    target_id: str,
    offset: int,
    parent_id: Optional[str],
) -> Optional[Forest]:
    for index, task in enumerate(tasks):
        if task.id == target_id:
            at = index + offset
            return tasks[:at] + (replace(new_task, parent_id=parent_id),) + tasks[at:]
        if task.children:
            children = _insert_sibling(task.children, new_task, target_id, offset, task.id)
            if children is not None:
                return tasks[:index] + (replace(task, children=children),) + tasks[index + 1:]
    return None


def _prune(tasks: Forest, task_id: str) -> Forest:
    kept = []
    changed = False
    for task in tasks:
        if task.id == task_id:
            changed = True
            continue
        if task.children:
            children = _prune(task.children, task_id)
            if children is not task.children:
                task = replace(task, children=children)
                changed = True
        kept.append(task)
    return tuple(kept) if changed else tasks


def _insert_clamped(tasks: Forest, task: Task, index: int) -> Forest:
    at = max(0, min(index, len(tasks)))
    return tasks[:at] + (task,) + tasks[at:]


def _stamp_parent(children: Forest, parent_id: str) -> Forest:
    return tuple(
        child if child.parent_id == parent_id else replace(child, parent_id=parent_id)
        for child in children
    )


def _clean_updates(updates: Mapping[str, Any]) -> Dict[str, Any]:
    clean: Dict[str, Any] = {}
    for key, value in updates.items():
        if key not in _TASK_FIELDS or key in _STRUCTURAL_FIELDS:
            logger.debug("Dropping non-mergeable task field %r", key)
            continue
        clean[key] = value
    return clean
