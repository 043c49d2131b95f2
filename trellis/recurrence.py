# trellis/recurrence.py
"""Expand a todo's schedule into concrete calendar days.

Rules:
  - dueDate: the day it falls on (datetimes are bucketed in `tzinfo`)
  - dateRange: every day in [start, end], inclusive
  - weekly: walk day by day from startDate, keep selected weekdays
  - monthly / yearly: step 1 month / 1 year from startDate

Open-ended repeats stop at a horizon counted from `today`:
weekly 365 days, monthly 5 years, yearly 20 years.

Month and year steps are anchored on the start date and clamp to the last
day of a short month, so Jan 31 gives Feb 28/29 then Mar 31, and Feb 29
gives Feb 28 in common years.
"""

from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .model import WEEKDAY_NAMES, RepeatSettings, Todo
from .util.console import warn
from .util.timeparse import day_of

WEEKLY_HORIZON_DAYS = 365
MONTHLY_HORIZON_YEARS = 5
YEARLY_HORIZON_YEARS = 20

Window = Tuple[dt.date, dt.date]


@dataclass(frozen=True)
class Occurrence:
    day: dt.date
    kind: str  # "due" | "range" | "weekly" | "monthly" | "yearly"


def add_months(d: dt.date, months: int) -> dt.date:
    idx = d.year * 12 + (d.month - 1) + months
    year, month0 = divmod(idx, 12)
    month = month0 + 1
    last = calendar.monthrange(year, month)[1]
    return dt.date(year, month, min(d.day, last))


def add_years(d: dt.date, years: int) -> dt.date:
    return add_months(d, 12 * years)


def default_until(rule: RepeatSettings, today: dt.date) -> dt.date:
    if rule.frequency == "weekly":
        return today + dt.timedelta(days=WEEKLY_HORIZON_DAYS)
    if rule.frequency == "monthly":
        return add_years(today, MONTHLY_HORIZON_YEARS)
    return add_years(today, YEARLY_HORIZON_YEARS)


def _clip(first: dt.date, last: dt.date, window: Optional[Window]) -> Tuple[dt.date, dt.date]:
    if window is None:
        return first, last
    return max(first, window[0]), min(last, window[1])


def iter_days(first: dt.date, last: dt.date) -> Iterator[dt.date]:
    d = first
    one = dt.timedelta(days=1)
    while d <= last:
        yield d
        d += one


def expand_repeat(rule: RepeatSettings, today: dt.date, window: Optional[Window] = None) -> List[dt.date]:
    until = rule.end_date if rule.end_date is not None else default_until(rule, today)
    if until < rule.start_date:
        return []

    if rule.frequency == "weekly":
        wanted = {WEEKDAY_NAMES.index(n) for n in rule.weekdays}
        if not wanted:
            return []
        first, last = _clip(rule.start_date, until, window)
        return [d for d in iter_days(first, last) if d.weekday() in wanted]

    step_months = 1 if rule.frequency == "monthly" else 12
    out: List[dt.date] = []
    n = 0
    while True:
        d = add_months(rule.start_date, n * step_months)
        if d > until or (window is not None and d > window[1]):
            break
        if window is None or d >= window[0]:
            out.append(d)
        n += 1
    return out


def expand(
    todo: Todo,
    today: dt.date,
    tzinfo: dt.tzinfo,
    window: Optional[Window] = None,
) -> List[Occurrence]:
    """All occurrences contributed by one todo (sub-todos not included)."""
    out: List[Occurrence] = []

    if todo.due_date:
        try:
            d = day_of(todo.due_date, tzinfo)
        except ValueError:
            warn("trellis.recurrence", f"skipping unparseable dueDate on todo {todo.id!r}")
        else:
            if window is None or window[0] <= d <= window[1]:
                out.append(Occurrence(d, "due"))

    if todo.date_range is not None:
        first, last = _clip(todo.date_range.start, todo.date_range.end, window)
        out.extend(Occurrence(d, "range") for d in iter_days(first, last))

    if todo.repeat is not None:
        kind = todo.repeat.frequency
        out.extend(Occurrence(d, kind) for d in expand_repeat(todo.repeat, today, window))

    return out


__all__ = [
    "WEEKLY_HORIZON_DAYS",
    "MONTHLY_HORIZON_YEARS",
    "YEARLY_HORIZON_YEARS",
    "Occurrence",
    "add_months",
    "add_years",
    "default_until",
    "iter_days",
    "expand_repeat",
    "expand",
]
