# trellis/calendar_marks.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .model import Todo
from .recurrence import Occurrence, Window, expand
from .tree import all_todos
from .util.console import warn
from .util.timeparse import day_of

DOT_COLORS = {
    "due": "blue",
    "weekly": "red",
    "monthly": "green",
    "yearly": "purple",
}
RANGE_COLOR = "lightblue"


@dataclass(frozen=True)
class Dot:
    key: str  # todo id
    color: str
    name: str  # todo text


@dataclass(frozen=True)
class Period:
    starting_day: bool
    ending_day: bool
    color: str = RANGE_COLOR


@dataclass
class DayMark:
    dots: List[Dot] = field(default_factory=list)
    period: Optional[Period] = None

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {}
        if self.dots:
            out["dots"] = [{"key": d.key, "color": d.color, "name": d.name} for d in self.dots]
        if self.period is not None:
            out["startingDay"] = self.period.starting_day
            out["endingDay"] = self.period.ending_day
            out["color"] = self.period.color
        return out


def _mark_one(marks: Dict[str, DayMark], todo: Todo, occ: Occurrence) -> None:
    key = occ.day.isoformat()
    m = marks.get(key)
    if m is None:
        m = marks[key] = DayMark()

    if occ.kind == "range":
        rng = todo.date_range
        if rng is None:
            return
        # Later ranges overwrite earlier ones on shared days.
        m.period = Period(starting_day=occ.day == rng.start, ending_day=occ.day == rng.end)
        return
    m.dots.append(Dot(key=todo.id, color=DOT_COLORS[occ.kind], name=todo.text))


def marked_dates(
    todos: Sequence[Todo],
    today: dt.date,
    tzinfo: dt.tzinfo,
    window: Optional[Window] = None,
) -> Dict[str, DayMark]:
    """Calendar markings for every todo in the forest, keyed by YYYY-MM-DD."""
    marks: Dict[str, DayMark] = {}
    for t in all_todos(todos):
        for occ in expand(t, today, tzinfo, window):
            _mark_one(marks, t, occ)
    return dict(sorted(marks.items()))


def todos_due_on(todos: Sequence[Todo], day: dt.date, tzinfo: dt.tzinfo) -> List[Todo]:
    """Todos whose single due date falls on `day` (the "today" list)."""
    out: List[Todo] = []
    for t in all_todos(todos):
        if not t.due_date:
            continue
        try:
            if day_of(t.due_date, tzinfo) == day:
                out.append(t)
        except ValueError:
            warn("trellis.calendar_marks", f"skipping unparseable dueDate on todo {t.id!r}")
    return out


def todos_occurring_on(
    todos: Sequence[Todo],
    day: dt.date,
    today: dt.date,
    tzinfo: dt.tzinfo,
) -> List[Todo]:
    """Todos with any occurrence (due, range, or repeat) on `day`."""
    win = (day, day)
    return [t for t in all_todos(todos) if expand(t, today, tzinfo, win)]


__all__ = [
    "DOT_COLORS",
    "RANGE_COLOR",
    "Dot",
    "Period",
    "DayMark",
    "marked_dates",
    "todos_due_on",
    "todos_occurring_on",
]
