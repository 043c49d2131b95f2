# trellis/tree.py
"""Routine-tree and todo-tree operations.

All functions are pure: they take tuples of frozen model objects and return
new tuples. Callers own persistence.
"""

from __future__ import annotations

import uuid as _uuid
from dataclasses import replace
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple

from .model import DateRange, Priority, RepeatSettings, Routine, Todo
from .util.timeparse import utc_now_iso

Routines = Tuple[Routine, ...]
Todos = Tuple[Todo, ...]


class InputError(ValueError):
    """Raised for user input that cannot be applied (shown to the user as-is)."""


def new_id() -> str:
    return str(_uuid.uuid4())


# --- Routines -----------------------------------------------------------------


def iter_routines(routines: Sequence[Routine], level: int = 0) -> Iterator[Tuple[Routine, int]]:
    """Depth-first (pre-order) walk yielding (routine, level)."""
    for r in routines:
        yield r, level
        yield from iter_routines(r.children, level + 1)


def find_routine(routines: Sequence[Routine], routine_id: str) -> Optional[Routine]:
    for r, _lvl in iter_routines(routines):
        if r.id == routine_id:
            return r
    return None


def routine_options(routines: Sequence[Routine]) -> List[Tuple[str, str, int]]:
    """(id, name, level) rows for an indented routine picker."""
    return [(r.id, r.name, lvl) for r, lvl in iter_routines(routines)]


def descendant_ids(routine: Routine) -> Set[str]:
    """Ids of `routine` and every routine below it."""
    return {r.id for r, _lvl in iter_routines((routine,))}


def _update_routine(
    routines: Sequence[Routine],
    routine_id: str,
    fn: Callable[[Routine], Routine],
) -> Routines:
    out: List[Routine] = []
    for r in routines:
        if r.id == routine_id:
            out.append(fn(r))
        else:
            out.append(replace(r, children=_update_routine(r.children, routine_id, fn)))
    return tuple(out)


def _check_routine_name(name: str, siblings: Sequence[Routine], *, skip_id: Optional[str] = None) -> str:
    nm = (name or "").strip()
    if not nm:
        raise InputError("Routine name cannot be empty.")
    for s in siblings:
        if s.id != skip_id and s.name == nm:
            raise InputError("A routine with this name already exists.")
    return nm


def _siblings_of(routines: Sequence[Routine], routine_id: str) -> Sequence[Routine]:
    if any(r.id == routine_id for r in routines):
        return routines
    for r in routines:
        found = _siblings_of(r.children, routine_id)
        if found:
            return found
    return ()


def add_routine(
    routines: Sequence[Routine],
    name: str,
    parent_id: Optional[str] = None,
    routine_id: Optional[str] = None,
) -> Tuple[Routines, Routine]:
    """Append a routine at top level or as the last child of `parent_id`."""
    if parent_id is None:
        nm = _check_routine_name(name, routines)
        created = Routine(id=routine_id or new_id(), name=nm)
        return tuple(routines) + (created,), created

    parent = find_routine(routines, parent_id)
    if parent is None:
        raise InputError(f"Unknown routine: {parent_id}")
    nm = _check_routine_name(name, parent.children)
    created = Routine(id=routine_id or new_id(), name=nm)
    out = _update_routine(routines, parent_id, lambda p: replace(p, children=p.children + (created,)))
    return out, created


def rename_routine(routines: Sequence[Routine], routine_id: str, name: str) -> Routines:
    if find_routine(routines, routine_id) is None:
        raise InputError(f"Unknown routine: {routine_id}")
    nm = _check_routine_name(name, _siblings_of(routines, routine_id), skip_id=routine_id)
    return _update_routine(routines, routine_id, lambda r: replace(r, name=nm))


def _remove_routine(routines: Sequence[Routine], routine_id: str) -> Routines:
    return tuple(
        replace(r, children=_remove_routine(r.children, routine_id))
        for r in routines
        if r.id != routine_id
    )


def delete_routine(
    routines: Sequence[Routine],
    todos: Sequence[Todo],
    routine_id: str,
) -> Tuple[Routines, Todos]:
    """Remove a routine, its descendants, and every todo filed under them."""
    target = find_routine(routines, routine_id)
    if target is None:
        raise InputError(f"Unknown routine: {routine_id}")
    doomed = descendant_ids(target)
    kept = tuple(t for t in todos if t.routine_id not in doomed)
    return _remove_routine(routines, routine_id), kept


def routine_progress(routines: Sequence[Routine], todos: Sequence[Todo]) -> Dict[str, Tuple[int, int]]:
    """routine id -> (completed, total) over the routine's own todos and sub-todos."""
    out: Dict[str, Tuple[int, int]] = {r.id: (0, 0) for r, _lvl in iter_routines(routines)}
    for t in all_todos(todos):
        if t.routine_id in out:
            done, total = out[t.routine_id]
            out[t.routine_id] = (done + (1 if t.completed else 0), total + 1)
    return out


# --- Todos --------------------------------------------------------------------


def iter_todos(todos: Sequence[Todo], level: int = 0) -> Iterator[Tuple[Todo, int]]:
    for t in todos:
        yield t, level
        yield from iter_todos(t.sub_todos, level + 1)


def all_todos(todos: Sequence[Todo]) -> List[Todo]:
    """Every todo, sub-todos included, in pre-order."""
    return [t for t, _lvl in iter_todos(todos)]


def find_todo(todos: Sequence[Todo], todo_id: str) -> Optional[Todo]:
    for t, _lvl in iter_todos(todos):
        if t.id == todo_id:
            return t
    return None


def update_todo(todos: Sequence[Todo], todo_id: str, fn: Callable[[Todo], Todo]) -> Todos:
    """Apply `fn` to the todo with `todo_id`, wherever it sits in the forest."""
    out: List[Todo] = []
    for t in todos:
        if t.id == todo_id:
            out.append(fn(t))
        elif t.sub_todos:
            out.append(replace(t, sub_todos=update_todo(t.sub_todos, todo_id, fn)))
        else:
            out.append(t)
    return tuple(out)


def _require_todo(todos: Sequence[Todo], todo_id: str) -> Todo:
    t = find_todo(todos, todo_id)
    if t is None:
        raise InputError(f"Unknown todo: {todo_id}")
    return t


def add_todo(
    todos: Sequence[Todo],
    routines: Sequence[Routine],
    text: str,
    *,
    routine_id: Optional[str] = None,
    parent_id: Optional[str] = None,
    due_date: Optional[str] = None,
    date_range: Optional[DateRange] = None,
    repeat: Optional[RepeatSettings] = None,
    priority: Optional[str] = None,
    todo_id: Optional[str] = None,
    created_at: Optional[str] = None,
) -> Tuple[Todos, Todo]:
    txt = (text or "").strip()
    if not txt:
        raise InputError("Todo text cannot be empty.")
    if priority is not None and priority not in Priority.ALL:
        raise InputError(f"Unknown priority: {priority}")

    parent: Optional[Todo] = None
    if parent_id is not None:
        parent = _require_todo(todos, parent_id)
        if routine_id is None:
            routine_id = parent.routine_id
        elif parent.routine_id != routine_id:
            raise InputError("A sub-todo must belong to the same routine as its parent.")

    if routine_id is not None and find_routine(routines, routine_id) is None:
        raise InputError(f"Unknown routine: {routine_id}")

    created = Todo(
        id=todo_id or new_id(),
        text=txt,
        completed=False,
        created_at=created_at or utc_now_iso(),
        routine_id=routine_id,
        parent_id=parent_id,
        due_date=due_date,
        date_range=date_range,
        repeat=repeat,
        priority=priority,
    )
    if parent is None:
        return tuple(todos) + (created,), created
    out = update_todo(todos, parent.id, lambda p: replace(p, sub_todos=p.sub_todos + (created,)))
    return out, created


def toggle_todo(todos: Sequence[Todo], todo_id: str) -> Todos:
    _require_todo(todos, todo_id)
    return update_todo(todos, todo_id, lambda t: replace(t, completed=not t.completed))


def set_priority(todos: Sequence[Todo], todo_id: str, priority: Optional[str]) -> Todos:
    if priority is not None and priority not in Priority.ALL:
        raise InputError(f"Unknown priority: {priority}")
    _require_todo(todos, todo_id)
    return update_todo(todos, todo_id, lambda t: replace(t, priority=priority))


def _remove_todo(todos: Sequence[Todo], todo_id: str) -> Todos:
    return tuple(
        replace(t, sub_todos=_remove_todo(t.sub_todos, todo_id)) if t.sub_todos else t
        for t in todos
        if t.id != todo_id
    )


def delete_todo(todos: Sequence[Todo], todo_id: str) -> Todos:
    """Remove a todo together with its sub-todos."""
    _require_todo(todos, todo_id)
    return _remove_todo(todos, todo_id)


__all__ = [
    "InputError",
    "new_id",
    "iter_routines",
    "find_routine",
    "routine_options",
    "descendant_ids",
    "add_routine",
    "rename_routine",
    "delete_routine",
    "routine_progress",
    "iter_todos",
    "all_todos",
    "find_todo",
    "update_todo",
    "add_todo",
    "toggle_todo",
    "set_priority",
    "delete_todo",
]
