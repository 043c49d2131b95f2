# trellis/matrix.py
"""Eisenhower matrix: urgent/important quadrants over todos."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .model import Priority, Todo
from .tree import all_todos

UNPRIORITIZED = "unprioritized"

QUADRANTS: Tuple[Tuple[str, str], ...] = (
    (Priority.URGENT_IMPORTANT, "Urgent & important"),
    (Priority.NOT_URGENT_IMPORTANT, "Important, not urgent"),
    (Priority.URGENT_NOT_IMPORTANT, "Urgent, not important"),
    (Priority.NOT_URGENT_NOT_IMPORTANT, "Neither urgent nor important"),
)

_ALIASES = {
    "ui": Priority.URGENT_IMPORTANT,
    "1": Priority.URGENT_IMPORTANT,
    "ni": Priority.NOT_URGENT_IMPORTANT,
    "2": Priority.NOT_URGENT_IMPORTANT,
    "un": Priority.URGENT_NOT_IMPORTANT,
    "3": Priority.URGENT_NOT_IMPORTANT,
    "nn": Priority.NOT_URGENT_NOT_IMPORTANT,
    "4": Priority.NOT_URGENT_NOT_IMPORTANT,
}


def quadrant_label(priority: Optional[str]) -> str:
    for key, label in QUADRANTS:
        if key == priority:
            return label
    return "No priority"


def parse_priority(s: Optional[str]) -> Optional[str]:
    """Accept a quadrant key, a short alias (ui/ni/un/nn or 1-4) or none/"".

    Raises ValueError on anything else.
    """
    if s is None:
        return None
    v = s.strip().lower().replace("-", "_")
    if v in {"", "none"}:
        return None
    if v in Priority.ALL:
        return v
    if v in _ALIASES:
        return _ALIASES[v]
    raise ValueError(f"Unknown priority: {s!r}")


def group_by_quadrant(todos: Sequence[Todo], *, include_completed: bool = False) -> Dict[str, List[Todo]]:
    """Quadrant key -> todos, in QUADRANTS order, then UNPRIORITIZED."""
    out: Dict[str, List[Todo]] = {key: [] for key, _label in QUADRANTS}
    out[UNPRIORITIZED] = []
    for t in all_todos(todos):
        if t.completed and not include_completed:
            continue
        out[t.priority if t.priority in out else UNPRIORITIZED].append(t)
    return out


__all__ = [
    "UNPRIORITIZED",
    "QUADRANTS",
    "quadrant_label",
    "parse_priority",
    "group_by_quadrant",
]
