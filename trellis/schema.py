# trellis/schema.py
"""Normalization of stored routine/todo documents.

The app went through several storage shapes. Everything read from the store
passes through `normalize_document`, which upgrades the older shapes to the
current camelCase wire format:

  - `categoryId` (first draft) -> `routineId`
  - routines with embedded `todos` (project-tree drafts) -> hoisted into the
    flat todo list with `routineId` pointing at the owner
  - `dateRange` as {startDate, endDate} or {from, to} -> {start, end}
  - `repeatSettings.type` -> `frequency`
  - `weekdays` as JS day numbers (0=Sunday) -> {monday: true, ...}
  - sub-todos without `parentId` / `routineId` -> inherited from the parent

Malformed optional fields are dropped (logged when TRELLIS_OBS_LOG is on).
Normalizing an already-normalized document returns an equal document.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Tuple

from .model import FREQUENCIES, WEEKDAY_NAMES, Priority, Routine, Todo
from .util.console import warn
from .util.timeparse import parse_day, parse_instant

JsonDict = Dict[str, Any]

_SRC = "trellis.schema"

# JS Date.getDay() numbering.
_JS_DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def _coerce_id(v: Any) -> Optional[str]:
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return str(int(v))
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def _list_field(raw: JsonDict, key: str, owner: str) -> List[Any]:
    v = raw.get(key)
    if v is None or isinstance(v, list):
        return v or []
    warn(_SRC, f"dropping non-list {key} on {owner}: {type(v).__name__}")
    return []


def _valid_day(v: Any) -> Optional[str]:
    if not isinstance(v, str) or not v.strip():
        return None
    try:
        return parse_day(v).isoformat()
    except ValueError:
        return None


def _normalize_range(raw: Any, tid: str) -> Optional[JsonDict]:
    if not isinstance(raw, dict):
        return None
    start = raw.get("start", raw.get("startDate", raw.get("from")))
    end = raw.get("end", raw.get("endDate", raw.get("to")))
    s = _valid_day(start)
    e = _valid_day(end)
    if s is None or e is None:
        warn(_SRC, f"dropping incomplete dateRange on todo {tid!r}: {raw!r}")
        return None
    return {"start": s, "end": e}


def _normalize_weekdays(raw: Any) -> JsonDict:
    out = {n: False for n in WEEKDAY_NAMES}
    if isinstance(raw, dict):
        for k, v in raw.items():
            key = str(k).lower()
            if key in out and v is True:
                out[key] = True
    elif isinstance(raw, list):
        for x in raw:
            if isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= 6:
                out[_JS_DAY_NAMES[x]] = True
    return out


def _normalize_repeat(raw: Any, tid: str, created_at: str) -> Optional[JsonDict]:
    if not isinstance(raw, dict):
        return None
    freq = raw.get("frequency", raw.get("type"))
    if freq not in FREQUENCIES:
        warn(_SRC, f"dropping repeatSettings with unknown frequency on todo {tid!r}: {freq!r}")
        return None

    start = _valid_day(raw.get("startDate"))
    if start is None:
        # Early drafts let the start default to the creation day.
        start = _valid_day(created_at)
    if start is None:
        warn(_SRC, f"dropping repeatSettings without a start date on todo {tid!r}")
        return None

    out: JsonDict = {"frequency": freq, "startDate": start}
    end = _valid_day(raw.get("endDate"))
    if end is not None:
        out["endDate"] = end
    if freq == "weekly":
        out["weekdays"] = _normalize_weekdays(raw.get("weekdays"))
    return out


def _normalize_todo(
    raw: Any,
    *,
    routine_id: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> Optional[JsonDict]:
    if not isinstance(raw, dict):
        return None
    tid = _coerce_id(raw.get("id"))
    if tid is None:
        warn(_SRC, f"dropping todo without id: {raw!r}")
        return None

    created_at = raw.get("createdAt")
    created_s = created_at if isinstance(created_at, str) else ""

    if parent_id is not None:
        # Nested: the container decides both links.
        rid = routine_id
        pid: Optional[str] = parent_id
    else:
        rid = _coerce_id(raw.get("routineId"))
        if rid is None:
            rid = _coerce_id(raw.get("categoryId"))
        if rid is None:
            rid = _coerce_id(raw.get("projectId"))
        if rid is None:
            rid = routine_id
        pid = _coerce_id(raw.get("parentId"))

    out: JsonDict = {
        "id": tid,
        "text": str(raw.get("text") or ""),
        "completed": raw.get("completed") is True,
        "createdAt": created_s,
    }
    if rid is not None:
        out["routineId"] = rid
    if pid is not None:
        out["parentId"] = pid

    due = raw.get("dueDate")
    if isinstance(due, str) and due.strip():
        try:
            parse_instant(due, dt.timezone.utc)
            out["dueDate"] = due.strip()
        except ValueError:
            warn(_SRC, f"dropping unparseable dueDate on todo {tid!r}: {due!r}")

    dr = _normalize_range(raw.get("dateRange"), tid)
    if dr is not None:
        out["dateRange"] = dr

    rs = _normalize_repeat(raw.get("repeatSettings"), tid, created_s)
    if rs is not None:
        out["repeatSettings"] = rs

    prio = raw.get("priority")
    if prio in Priority.ALL:
        out["priority"] = prio
    elif prio is not None:
        warn(_SRC, f"dropping unknown priority on todo {tid!r}: {prio!r}")

    subs: List[JsonDict] = []
    for s in _list_field(raw, "subTodos", f"todo {tid!r}"):
        n = _normalize_todo(s, routine_id=rid, parent_id=tid)
        if n is not None:
            subs.append(n)
    if subs:
        out["subTodos"] = subs
    return out


def _normalize_routine(raw: Any, hoisted: List[JsonDict]) -> Optional[JsonDict]:
    if not isinstance(raw, dict):
        return None
    rid = _coerce_id(raw.get("id"))
    if rid is None:
        warn(_SRC, f"dropping routine without id: {raw!r}")
        return None

    out: JsonDict = {"id": rid, "name": str(raw.get("name") or "")}

    for t in _list_field(raw, "todos", f"routine {rid!r}"):
        n = _normalize_todo(t, routine_id=rid)
        if n is not None:
            hoisted.append(n)

    kids: List[JsonDict] = []
    for c in _list_field(raw, "children", f"routine {rid!r}"):
        n = _normalize_routine(c, hoisted)
        if n is not None:
            kids.append(n)
    if kids:
        out["children"] = kids
    return out


def normalize_document(routines_raw: Any, todos_raw: Any) -> Tuple[List[JsonDict], List[JsonDict]]:
    """Return (routines, todos) as canonical wire dicts."""
    hoisted: List[JsonDict] = []
    routines: List[JsonDict] = []
    if isinstance(routines_raw, list):
        for r in routines_raw:
            n = _normalize_routine(r, hoisted)
            if n is not None:
                routines.append(n)
    elif routines_raw is not None:
        warn(_SRC, f"routines must be a list; got {type(routines_raw).__name__}")

    todos: List[JsonDict] = []
    if isinstance(todos_raw, list):
        for t in todos_raw:
            n = _normalize_todo(t)
            if n is not None:
                todos.append(n)
    elif todos_raw is not None:
        warn(_SRC, f"todos must be a list; got {type(todos_raw).__name__}")

    seen = {t["id"] for t in todos}
    for t in hoisted:
        if t["id"] not in seen:
            todos.append(t)
            seen.add(t["id"])
    return routines, _nest_flat_children(todos)


def _index_todos(todos: List[JsonDict], out: Dict[str, JsonDict]) -> None:
    for t in todos:
        out.setdefault(t["id"], t)
        _index_todos(t.get("subTodos") or [], out)


def _relink(t: JsonDict, parent: JsonDict) -> None:
    t["parentId"] = parent["id"]
    if "routineId" in parent:
        t["routineId"] = parent["routineId"]
    else:
        t.pop("routineId", None)
    for s in t.get("subTodos") or []:
        _relink(s, t)


def _nest_flat_children(todos: List[JsonDict]) -> List[JsonDict]:
    """Move top-level todos that carry a parentId under that parent.

    Flat storage of sub-todos (parentId only, no subTodos) was how the list
    screens persisted nesting; the tree form is canonical here.
    """
    by_id: Dict[str, JsonDict] = {}
    _index_todos(todos, by_id)

    roots: List[JsonDict] = []
    for t in todos:
        pid = t.get("parentId")
        if pid is None:
            roots.append(t)
            continue

        parent = by_id.get(pid)
        cyclic = False
        cur = parent
        hops = 0
        while cur is not None and hops <= len(by_id):
            if cur is t:
                cyclic = True
                break
            nxt = cur.get("parentId")
            cur = by_id.get(nxt) if nxt is not None else None
            hops += 1

        if parent is None or cyclic:
            warn(_SRC, f"dropping dangling parentId on todo {t['id']!r}: {pid!r}")
            t.pop("parentId", None)
            roots.append(t)
            continue

        _relink(t, parent)
        parent.setdefault("subTodos", []).append(t)
    return roots


def parse_document(routines_raw: Any, todos_raw: Any) -> Tuple[Tuple[Routine, ...], Tuple[Todo, ...]]:
    """Normalize, then build model objects."""
    routines_d, todos_d = normalize_document(routines_raw, todos_raw)
    return (
        tuple(Routine.from_dict(r) for r in routines_d),
        tuple(Todo.from_dict(t) for t in todos_d),
    )


def dump_routines(routines) -> List[JsonDict]:
    return [r.to_dict() for r in routines]


def dump_todos(todos) -> List[JsonDict]:
    return [t.to_dict() for t in todos]
