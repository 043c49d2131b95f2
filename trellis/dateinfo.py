# trellis/dateinfo.py
from __future__ import annotations

import datetime as dt
from typing import Optional

from .model import WEEKDAY_NAMES, Todo
from .util.timeparse import parse_instant

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def relative_day(d: dt.date, today: dt.date) -> str:
    if d == today:
        return "Today"
    if d == today + dt.timedelta(days=1):
        return "Tomorrow"
    return f"{_MONTHS[d.month - 1]} {d.day} ({_DAYS[d.weekday()]})"


def short_day(d: dt.date) -> str:
    return f"{_MONTHS[d.month - 1]} {d.day}"


def describe_schedule(todo: Todo, now: dt.datetime, tzinfo: dt.tzinfo) -> Optional[str]:
    """One-line schedule label shown next to a todo, or None.

    Precedence: due date, then date range, then repeat rule.
    """
    today = now.astimezone(tzinfo).date() if now.tzinfo else now.date()

    if todo.due_date:
        try:
            when, has_time = parse_instant(todo.due_date, tzinfo)
        except ValueError:
            return None
        label = relative_day(when.date(), today)
        return f"{label} {when:%H:%M}" if has_time else label

    if todo.date_range is not None:
        return f"{short_day(todo.date_range.start)} - {short_day(todo.date_range.end)}"

    if todo.repeat is not None:
        freq = todo.repeat.frequency
        if freq == "weekly":
            picked = [_DAYS[WEEKDAY_NAMES.index(n)] for n in todo.repeat.weekdays]
            return f"Every {', '.join(picked)}" if picked else "Every (no days)"
        if freq == "monthly":
            return "Monthly"
        if freq == "yearly":
            return "Yearly"
    return None
