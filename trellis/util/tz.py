# trellis/util/tz.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional
from zoneinfo import ZoneInfo

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (resolve to the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Asia/Seoul"
      - Fixed offsets: "+09:00", "+0900", "-05:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"

    return s


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        tz = dt.datetime.now().astimezone().tzinfo
        return tz or dt.timezone.utc

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    try:
        return ZoneInfo(tz_name)
    except Exception as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def today_date(tz: dt.tzinfo) -> dt.date:
    return dt.datetime.now(tz=tz).date()


def now_in(tz: dt.tzinfo) -> dt.datetime:
    return dt.datetime.now(tz=tz)
