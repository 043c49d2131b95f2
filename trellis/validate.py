"""Document validation helpers (library-facing)."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set

from .model import FREQUENCIES, Priority, Routine, Todo
from .tree import iter_routines, iter_todos


class DocumentValidationError(ValueError):
    """Raised when a routines/todos document fails validation."""


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _validate_routines(routines: Sequence[Routine], errs: List[str]) -> None:
    seen: Set[str] = set()
    for r, _lvl in iter_routines(routines):
        _require(r.id not in seen, f"routines: duplicate id {r.id!r}", errs)
        seen.add(r.id)
        _require(bool(r.name.strip()), f"routines[{r.id!r}]: name must be non-empty", errs)

        names = [c.name for c in r.children]
        _require(len(names) == len(set(names)), f"routines[{r.id!r}]: duplicate child names", errs)

    top = [r.name for r in routines]
    _require(len(top) == len(set(top)), "routines: duplicate top-level names", errs)


def _validate_todo(t: Todo, container: Optional[Todo], errs: List[str]) -> None:
    label = f"todos[{t.id!r}]"
    _require(bool(t.text.strip()), f"{label}: text must be non-empty", errs)

    if container is not None:
        _require(
            t.parent_id == container.id,
            f"{label}: parentId {t.parent_id!r} does not match containing todo {container.id!r}",
            errs,
        )
    else:
        _require(t.parent_id is None, f"{label}: top-level todo has parentId {t.parent_id!r}", errs)

    if t.date_range is not None:
        _require(t.date_range.start <= t.date_range.end, f"{label}: dateRange end before start", errs)

    if t.repeat is not None:
        _require(t.repeat.frequency in FREQUENCIES, f"{label}: unknown repeat frequency", errs)
        if t.repeat.end_date is not None:
            _require(
                t.repeat.start_date <= t.repeat.end_date,
                f"{label}: repeatSettings endDate before startDate",
                errs,
            )

    if t.priority is not None:
        _require(t.priority in Priority.ALL, f"{label}: unknown priority {t.priority!r}", errs)

    for s in t.sub_todos:
        _validate_todo(s, t, errs)


def validate_document(routines: Sequence[Routine], todos: Sequence[Todo]) -> List[str]:
    errs: List[str] = []
    _validate_routines(routines, errs)

    by_id: Dict[str, Todo] = {}
    for t, _lvl in iter_todos(todos):
        if t.id in by_id:
            errs.append(f"todos: duplicate id {t.id!r}")
        by_id[t.id] = t

    for t in todos:
        _validate_todo(t, None, errs)

    # Sub-todos share their parent's routine.
    for t in by_id.values():
        if t.parent_id is None:
            continue
        parent = by_id.get(t.parent_id)
        if parent is None:
            errs.append(f"todos[{t.id!r}]: parentId {t.parent_id!r} not found")
            continue
        _require(
            parent.routine_id == t.routine_id,
            f"todos[{t.id!r}]: routine {t.routine_id!r} differs from parent routine {parent.routine_id!r}",
            errs,
        )
    return errs


def assert_valid_document(routines: Sequence[Routine], todos: Sequence[Todo]) -> None:
    errs = validate_document(routines, todos)
    if errs:
        raise DocumentValidationError(errs[0])


__all__ = [
    "DocumentValidationError",
    "validate_document",
    "assert_valid_document",
]
