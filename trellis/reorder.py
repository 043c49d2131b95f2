# trellis/reorder.py
"""Flat, reorderable rendering of the todo forest.

A list screen shows todos as one linear sequence grouped under routine
headers, each todo annotated with its nesting level. After the user moves
rows around, `reconstruct` rebuilds the forest from the new order:

    stack keyed by level; for each todo row pop entries whose level is >= the
    row's level, the remaining top (if any) is the parent.

Levels are the ones recorded before the move. A row keeps its level after a
drop, so its new parent is simply the nearest preceding row in the same
section with a smaller level.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .model import Routine, Todo
from .tree import Todos, all_todos, iter_routines

UNCATEGORIZED_ID = "uncategorized"
UNCATEGORIZED_NAME = "Uncategorized"


@dataclass(frozen=True)
class FlatItem:
    kind: str  # "routine" | "todo"
    id: str
    level: int
    name: str = ""  # header label (routine rows)
    todo: Optional[Todo] = None  # todo rows
    routine_id: Optional[str] = None  # section routine; None for uncategorized

    @property
    def is_header(self) -> bool:
        return self.kind == "routine"


def flatten_todos(todos: Sequence[Todo], level: int = 0, routine_id: Optional[str] = None) -> List[FlatItem]:
    """Pre-order rows; each sub-todo sits one level below its parent."""
    out: List[FlatItem] = []
    for t in todos:
        out.append(FlatItem(kind="todo", id=t.id, level=level, todo=t, routine_id=routine_id))
        out.extend(flatten_todos(t.sub_todos, level + 1, routine_id))
    return out


def _header(routine_id: Optional[str], name: str) -> FlatItem:
    return FlatItem(
        kind="routine",
        id=routine_id if routine_id is not None else UNCATEGORIZED_ID,
        level=0,
        name=name,
        routine_id=routine_id,
    )


def build_flat_list(
    routines: Sequence[Routine],
    todos: Sequence[Todo],
    collapsed: Iterable[str] = (),
) -> List[FlatItem]:
    """Header + todo rows for every routine that has todos, then uncategorized.

    Routines come in tree order. A collapsed section (by routine id, or
    "uncategorized") keeps its header but hides its rows.
    """
    hidden = set(collapsed)
    known: Set[str] = set()
    out: List[FlatItem] = []

    for r, _lvl in iter_routines(routines):
        known.add(r.id)
        group = [t for t in todos if t.routine_id == r.id]
        if not group:
            continue
        out.append(_header(r.id, r.name))
        if r.id not in hidden:
            out.extend(flatten_todos(group, 0, r.id))

    loose = [t for t in todos if t.routine_id is None or t.routine_id not in known]
    if loose:
        out.append(_header(None, UNCATEGORIZED_NAME))
        if UNCATEGORIZED_ID not in hidden:
            out.extend(flatten_todos(loose, 0, None))
    return out


class _Node:
    __slots__ = ("todo", "routine_id", "parent_id", "children")

    def __init__(self, todo: Todo, routine_id: Optional[str], parent_id: Optional[str]) -> None:
        self.todo = todo
        self.routine_id = routine_id
        self.parent_id = parent_id
        self.children: List["_Node"] = []

    def build(self) -> Todo:
        return replace(
            self.todo,
            routine_id=self.routine_id,
            parent_id=self.parent_id,
            sub_todos=tuple(c.build() for c in self.children),
        )


def reconstruct(items: Sequence[FlatItem]) -> Todos:
    """Rebuild the todo forest from flat rows.

    Every rebuilt todo takes `routineId` from the header above it and
    `parentId` from its position, so a sub-todo always shares its parent's
    routine. Rows before the first header keep their own routine unless they
    nest under another row. A root row under the uncategorized header keeps a
    routine id that has no header in `items` (a deleted routine), so orphans
    survive a reorder unchanged. Sub-todos come only from the rows given.
    """
    sections = {it.routine_id for it in items if it.is_header and it.routine_id is not None}
    roots: List[_Node] = []
    stack: List[Tuple[int, _Node]] = []
    section: Optional[str] = None
    in_section = False

    for it in items:
        if it.is_header:
            stack.clear()
            section = it.routine_id
            in_section = True
            continue
        if it.todo is None:
            continue

        while stack and stack[-1][0] >= it.level:
            stack.pop()
        parent = stack[-1][1] if stack else None

        if parent is not None:
            node = _Node(it.todo, parent.routine_id, parent.todo.id)
            parent.children.append(node)
        else:
            own = it.todo.routine_id
            if not in_section:
                rid = own
            elif section is None and own is not None and own not in sections:
                rid = own
            else:
                rid = section
            node = _Node(it.todo, rid, None)
            roots.append(node)
        stack.append((it.level, node))

    return tuple(n.build() for n in roots)


def _block_end(items: Sequence[FlatItem], start: int) -> int:
    lvl = items[start].level
    end = start + 1
    while end < len(items) and not items[end].is_header and items[end].level > lvl:
        end += 1
    return end


def move_item(items: Sequence[FlatItem], src: int, dst: int, *, with_children: bool = True) -> List[FlatItem]:
    """Move the todo row at `src` so that it lands at index `dst`.

    With `with_children` the row's sub-todo rows travel along. `dst` is the
    index of the moved row in the resulting list. Header rows cannot move.
    """
    n = len(items)
    if not (0 <= src < n):
        raise IndexError(f"source index out of range: {src}")
    if items[src].is_header:
        raise ValueError("routine headers cannot be moved")

    end = _block_end(items, src) if with_children else src + 1
    block = list(items[src:end])
    rest = list(items[:src]) + list(items[end:])
    if not (0 <= dst <= len(rest)):
        raise IndexError(f"destination index out of range: {dst}")
    if dst == 0 and rest and rest[0].is_header:
        raise ValueError("cannot move a todo above the first routine header")
    return rest[:dst] + block + rest[dst:]


def apply_reorder(todos: Sequence[Todo], items: Sequence[FlatItem]) -> Todos:
    """Reconstruct visible rows and keep todos hidden behind collapsed headers."""
    rebuilt = reconstruct(items)
    placed = {t.id for t in all_todos(rebuilt)}
    hidden = tuple(t for t in todos if t.id not in placed)
    return rebuilt + hidden


__all__ = [
    "UNCATEGORIZED_ID",
    "UNCATEGORIZED_NAME",
    "FlatItem",
    "flatten_todos",
    "build_flat_list",
    "reconstruct",
    "move_item",
    "apply_reorder",
]
