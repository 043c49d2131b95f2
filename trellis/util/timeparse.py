# trellis/util/timeparse.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional, Tuple

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DATE_PREFIX_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]")


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def _fromiso(s: str) -> dt.datetime:
    ss = s.strip()
    if ss.endswith(("Z", "z")):
        ss = ss[:-1] + "+00:00"
    return dt.datetime.fromisoformat(ss)


def parse_day(s: Optional[str]) -> dt.date:
    """Parse a stored calendar day.

    Accepts "YYYY-MM-DD" and full ISO datetimes; for the latter the date is
    taken as written (no timezone shift), matching how day pickers store
    range and repeat boundaries.
    """
    if not isinstance(s, str) or not s.strip():
        raise ValueError(f"Invalid date: {s!r}")
    ss = s.strip()
    if _DATE_RE.match(ss):
        return parse_date_yyyy_mm_dd(ss)
    m = _DATE_PREFIX_RE.match(ss)
    if m:
        _fromiso(ss)
        return parse_date_yyyy_mm_dd(m.group(1))
    raise ValueError(f"Invalid date: {s!r}")


def parse_instant(s: Optional[str], tz: dt.tzinfo) -> Tuple[dt.datetime, bool]:
    """Parse a due date into an aware datetime in `tz`.

    Returns (when, has_time). Date-only values become midnight in `tz`;
    naive datetimes are read as wall time in `tz`.
    """
    if not isinstance(s, str) or not s.strip():
        raise ValueError(f"Invalid datetime: {s!r}")
    ss = s.strip()
    if _DATE_RE.match(ss):
        d = parse_date_yyyy_mm_dd(ss)
        return dt.datetime(d.year, d.month, d.day, tzinfo=tz), False
    try:
        when = _fromiso(ss)
    except ValueError as ex:
        raise ValueError(f"Invalid datetime: {s!r}") from ex
    if when.tzinfo is None:
        return when.replace(tzinfo=tz), True
    return when.astimezone(tz), True


def day_of(s: Optional[str], tz: dt.tzinfo) -> dt.date:
    return parse_instant(s, tz)[0].date()


def format_iso_utc(when: dt.datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    if when.tzinfo is None:
        raise ValueError("format_iso_utc needs an aware datetime")
    u = when.astimezone(dt.timezone.utc)
    return u.strftime("%Y-%m-%dT%H:%M:%S.") + f"{u.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    return format_iso_utc(dt.datetime.now(tz=dt.timezone.utc))
