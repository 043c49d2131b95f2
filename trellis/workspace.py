# trellis/workspace.py
from __future__ import annotations

import datetime as dt
from typing import Dict, Iterable, List, Optional, Tuple

from . import tree
from .calendar_marks import DayMark, marked_dates, todos_due_on
from .matrix import group_by_quadrant
from .model import DateRange, RepeatSettings, Routine, Todo
from .recurrence import Window
from .reorder import FlatItem, apply_reorder, build_flat_list, move_item
from .store import JsonStore
from .util.tz import today_date


class Workspace:
    """In-memory routines/todos backed by a JsonStore.

    Every mutating method applies a pure operation from `trellis.tree` or
    `trellis.reorder` and then saves both collections wholesale. A failed save
    is logged by the store; the in-memory state stays as mutated.
    """

    def __init__(
        self,
        store: JsonStore,
        tzinfo: dt.tzinfo,
        routines: Tuple[Routine, ...] = (),
        todos: Tuple[Todo, ...] = (),
    ) -> None:
        self.store = store
        self.tzinfo = tzinfo
        self.routines = routines
        self.todos = todos
        self.collapsed: set[str] = set()
        self.last_save_ok = True

    @classmethod
    def open(cls, store: JsonStore, tzinfo: dt.tzinfo) -> "Workspace":
        routines, todos = store.load_document()
        return cls(store, tzinfo, routines, todos)

    def _commit(self, routines: Tuple[Routine, ...], todos: Tuple[Todo, ...]) -> None:
        self.routines = routines
        self.todos = todos
        self.last_save_ok = self.store.save_document(routines, todos)

    def today(self) -> dt.date:
        return today_date(self.tzinfo)

    # --- routines -------------------------------------------------------------

    def add_routine(self, name: str, parent_id: Optional[str] = None) -> Routine:
        routines, created = tree.add_routine(self.routines, name, parent_id)
        self._commit(routines, self.todos)
        return created

    def rename_routine(self, routine_id: str, name: str) -> None:
        self._commit(tree.rename_routine(self.routines, routine_id, name), self.todos)

    def delete_routine(self, routine_id: str) -> None:
        routines, todos = tree.delete_routine(self.routines, self.todos, routine_id)
        self.collapsed.discard(routine_id)
        self._commit(routines, todos)

    def progress(self) -> Dict[str, Tuple[int, int]]:
        return tree.routine_progress(self.routines, self.todos)

    # --- todos ----------------------------------------------------------------

    def add_todo(
        self,
        text: str,
        *,
        routine_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        due_date: Optional[str] = None,
        date_range: Optional[DateRange] = None,
        repeat: Optional[RepeatSettings] = None,
        priority: Optional[str] = None,
    ) -> Todo:
        todos, created = tree.add_todo(
            self.todos,
            self.routines,
            text,
            routine_id=routine_id,
            parent_id=parent_id,
            due_date=due_date,
            date_range=date_range,
            repeat=repeat,
            priority=priority,
        )
        self._commit(self.routines, todos)
        return created

    def toggle_todo(self, todo_id: str) -> None:
        self._commit(self.routines, tree.toggle_todo(self.todos, todo_id))

    def delete_todo(self, todo_id: str) -> None:
        self._commit(self.routines, tree.delete_todo(self.todos, todo_id))

    def set_priority(self, todo_id: str, priority: Optional[str]) -> None:
        self._commit(self.routines, tree.set_priority(self.todos, todo_id, priority))

    # --- views ----------------------------------------------------------------

    def toggle_collapsed(self, section_id: str) -> None:
        if section_id in self.collapsed:
            self.collapsed.discard(section_id)
        else:
            self.collapsed.add(section_id)

    def flat_list(self) -> List[FlatItem]:
        return build_flat_list(self.routines, self.todos, self.collapsed)

    def move(self, src: int, dst: int, *, with_children: bool = True) -> List[FlatItem]:
        items = move_item(self.flat_list(), src, dst, with_children=with_children)
        self._commit(self.routines, apply_reorder(self.todos, items))
        return self.flat_list()

    def reorder(self, items: Iterable[FlatItem]) -> None:
        self._commit(self.routines, apply_reorder(self.todos, list(items)))

    def due_on(self, day: Optional[dt.date] = None) -> List[Todo]:
        return todos_due_on(self.todos, day or self.today(), self.tzinfo)

    def calendar(self, window: Optional[Window] = None) -> Dict[str, DayMark]:
        return marked_dates(self.todos, self.today(), self.tzinfo, window)

    def matrix(self, *, include_completed: bool = False) -> Dict[str, List[Todo]]:
        return group_by_quadrant(self.todos, include_completed=include_completed)
