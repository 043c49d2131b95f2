"""trellis.api

Stable *library* entrypoint for TRELLIS.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional, Union

from trellis.calendar_marks import marked_dates, todos_due_on, todos_occurring_on
from trellis.dateinfo import describe_schedule
from trellis.matrix import group_by_quadrant, parse_priority
from trellis.model import DateRange, Priority, RepeatSettings, Routine, Todo
from trellis.recurrence import expand
from trellis.reorder import FlatItem, apply_reorder, build_flat_list, flatten_todos, move_item, reconstruct
from trellis.schema import normalize_document
from trellis.store import JsonStore, default_store_path
from trellis.tree import (
    InputError,
    add_routine,
    add_todo,
    all_todos,
    delete_routine,
    delete_todo,
    find_routine,
    find_todo,
    rename_routine,
    routine_options,
    routine_progress,
    set_priority,
    toggle_todo,
)
from trellis.util.tz import resolve_tz
from trellis.validate import DocumentValidationError, assert_valid_document, validate_document
from trellis.workspace import Workspace

StorePath = Union[str, Path]


def open_workspace(path: Optional[StorePath] = None, *, tz: Optional[str] = "local") -> Workspace:
    """Open (or start) the store at `path` (default: TRELLIS_STORE or ~/.trellis/store.json).

    `tz` buckets due datetimes into calendar days; it accepts "local", "UTC",
    an IANA name or a fixed offset. Raises ValueError for an unknown zone.
    """
    tzinfo: dt.tzinfo = resolve_tz(tz)
    store = JsonStore(Path(path) if path is not None else default_store_path())
    return Workspace.open(store, tzinfo)


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
# Prefer append-only unless you are intentionally reshaping the public surface.
_PUBLIC_EXPORTS = (
    "DateRange",
    "DocumentValidationError",
    "FlatItem",
    "InputError",
    "JsonStore",
    "Priority",
    "RepeatSettings",
    "Routine",
    "Todo",
    "Workspace",
    "add_routine",
    "add_todo",
    "all_todos",
    "apply_reorder",
    "assert_valid_document",
    "build_flat_list",
    "delete_routine",
    "delete_todo",
    "describe_schedule",
    "expand",
    "find_routine",
    "find_todo",
    "flatten_todos",
    "group_by_quadrant",
    "marked_dates",
    "move_item",
    "normalize_document",
    "open_workspace",
    "parse_priority",
    "reconstruct",
    "rename_routine",
    "routine_options",
    "routine_progress",
    "set_priority",
    "todos_due_on",
    "todos_occurring_on",
    "toggle_todo",
    "validate_document",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
