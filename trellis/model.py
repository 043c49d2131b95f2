# trellis/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .util.timeparse import parse_day

JsonDict = Dict[str, Any]

# Weekday names in datetime.date.weekday() order (Monday=0).
WEEKDAY_NAMES: Tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

FREQUENCIES: Tuple[str, ...] = ("weekly", "monthly", "yearly")


class Priority:
    """Eisenhower quadrants as stored in `todo.priority`."""

    URGENT_IMPORTANT = "urgent_important"
    NOT_URGENT_IMPORTANT = "not_urgent_important"
    URGENT_NOT_IMPORTANT = "urgent_not_important"
    NOT_URGENT_NOT_IMPORTANT = "not_urgent_not_important"

    ALL: Tuple[str, ...] = (
        URGENT_IMPORTANT,
        NOT_URGENT_IMPORTANT,
        URGENT_NOT_IMPORTANT,
        NOT_URGENT_NOT_IMPORTANT,
    )


@dataclass(frozen=True)
class DateRange:
    start: dt.date
    end: dt.date  # inclusive

    @classmethod
    def from_dict(cls, d: JsonDict) -> "DateRange":
        return cls(start=parse_day(d.get("start")), end=parse_day(d.get("end")))

    def to_dict(self) -> JsonDict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class RepeatSettings:
    frequency: str  # "weekly" | "monthly" | "yearly"
    start_date: dt.date
    end_date: Optional[dt.date] = None
    weekdays: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, d: JsonDict) -> "RepeatSettings":
        freq = str(d.get("frequency") or "")
        if freq not in FREQUENCIES:
            raise ValueError(f"unknown repeat frequency: {freq!r}")
        end_raw = d.get("endDate")
        wd = d.get("weekdays") or {}
        if not isinstance(wd, dict):
            raise ValueError("repeatSettings.weekdays must be an object")
        return cls(
            frequency=freq,
            start_date=parse_day(d.get("startDate")),
            end_date=parse_day(end_raw) if end_raw else None,
            weekdays=tuple(n for n in WEEKDAY_NAMES if wd.get(n) is True),
        )

    def to_dict(self) -> JsonDict:
        out: JsonDict = {"frequency": self.frequency, "startDate": self.start_date.isoformat()}
        if self.end_date is not None:
            out["endDate"] = self.end_date.isoformat()
        if self.frequency == "weekly":
            out["weekdays"] = {n: (n in self.weekdays) for n in WEEKDAY_NAMES}
        return out


@dataclass(frozen=True)
class Todo:
    id: str
    text: str
    completed: bool = False
    created_at: str = ""
    routine_id: Optional[str] = None
    parent_id: Optional[str] = None
    due_date: Optional[str] = None
    date_range: Optional[DateRange] = None
    repeat: Optional[RepeatSettings] = None
    priority: Optional[str] = None
    sub_todos: Tuple["Todo", ...] = ()

    @classmethod
    def from_dict(cls, d: JsonDict) -> "Todo":
        tid = str(d.get("id") or "").strip()
        if not tid:
            raise ValueError("todo.id must be a non-empty string")
        dr = d.get("dateRange")
        rs = d.get("repeatSettings")
        subs = d.get("subTodos") or []
        return cls(
            id=tid,
            text=str(d.get("text") or ""),
            completed=bool(d.get("completed")),
            created_at=str(d.get("createdAt") or ""),
            routine_id=d.get("routineId") or None,
            parent_id=d.get("parentId") or None,
            due_date=d.get("dueDate") or None,
            date_range=DateRange.from_dict(dr) if isinstance(dr, dict) else None,
            repeat=RepeatSettings.from_dict(rs) if isinstance(rs, dict) else None,
            priority=d.get("priority") or None,
            sub_todos=tuple(cls.from_dict(x) for x in subs if isinstance(x, dict)),
        )

    def to_dict(self) -> JsonDict:
        out: JsonDict = {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "createdAt": self.created_at,
        }
        if self.routine_id is not None:
            out["routineId"] = self.routine_id
        if self.parent_id is not None:
            out["parentId"] = self.parent_id
        if self.due_date is not None:
            out["dueDate"] = self.due_date
        if self.date_range is not None:
            out["dateRange"] = self.date_range.to_dict()
        if self.repeat is not None:
            out["repeatSettings"] = self.repeat.to_dict()
        if self.priority is not None:
            out["priority"] = self.priority
        if self.sub_todos:
            out["subTodos"] = [t.to_dict() for t in self.sub_todos]
        return out


@dataclass(frozen=True)
class Routine:
    id: str
    name: str
    children: Tuple["Routine", ...] = ()

    @classmethod
    def from_dict(cls, d: JsonDict) -> "Routine":
        rid = str(d.get("id") or "").strip()
        if not rid:
            raise ValueError("routine.id must be a non-empty string")
        kids = d.get("children") or []
        return cls(
            id=rid,
            name=str(d.get("name") or ""),
            children=tuple(cls.from_dict(x) for x in kids if isinstance(x, dict)),
        )

    def to_dict(self) -> JsonDict:
        out: JsonDict = {"id": self.id, "name": self.name}
        if self.children:
            out["children"] = [c.to_dict() for c in self.children]
        return out


__all__ = [
    "WEEKDAY_NAMES",
    "FREQUENCIES",
    "Priority",
    "DateRange",
    "RepeatSettings",
    "Todo",
    "Routine",
]
