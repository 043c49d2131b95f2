from __future__ import annotations

import argparse
import datetime as dt
import os
import sys
from typing import List, Optional, Tuple

import orjson

from .dateinfo import describe_schedule
from .matrix import QUADRANTS, UNPRIORITIZED, parse_priority, quadrant_label
from .model import WEEKDAY_NAMES, DateRange, RepeatSettings
from .store import JsonStore, default_store_path
from .tree import InputError, iter_routines
from .util.timeparse import parse_date_yyyy_mm_dd, parse_instant
from .util.tz import normalize_tz_name, now_in, resolve_tz
from .workspace import Workspace


def _parse_date(s: str, flag: str) -> dt.date:
    try:
        return parse_date_yyyy_mm_dd(s)
    except ValueError:
        raise SystemExit(f"Invalid {flag} value: {s!r} (expected YYYY-MM-DD)")


def _parse_weekdays(s: Optional[str]) -> Tuple[str, ...]:
    if not s:
        return ("monday",)
    picked = set()
    for part in s.split(","):
        p = part.strip().lower()
        if not p:
            continue
        hits = [n for n in WEEKDAY_NAMES if p in (n, n[:3])]
        if not hits:
            raise SystemExit(f"Invalid --weekdays entry: {part!r}")
        picked.add(hits[0])
    return tuple(n for n in WEEKDAY_NAMES if n in picked)


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="trellis", description="Routines and todos from the command line.")
    ap.add_argument(
        "--store",
        default=None,
        help="Store file (default: env TRELLIS_STORE or ~/.trellis/store.json)",
    )
    ap.add_argument(
        "--tz",
        default=os.getenv("TRELLIS_TZ", "local"),
        help="Timezone for day boundaries (default: env TRELLIS_TZ or 'local')",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("routines", help="Show the routine tree with progress")

    p = sub.add_parser("add-routine", help="Create a routine")
    p.add_argument("name")
    p.add_argument("--parent", default=None, help="Parent routine id")

    p = sub.add_parser("rename-routine", help="Rename a routine")
    p.add_argument("routine_id")
    p.add_argument("name")

    p = sub.add_parser("delete-routine", help="Delete a routine, its sub-routines and their todos")
    p.add_argument("routine_id")

    p = sub.add_parser("list", help="Show todos grouped by routine, with row numbers for 'move'")
    p.add_argument("--collapse", action="append", default=[], help="Hide rows under this routine id")

    p = sub.add_parser("add", help="Create a todo")
    p.add_argument("text")
    p.add_argument("--routine", default=None, help="Routine id")
    p.add_argument("--parent", default=None, help="Parent todo id (creates a sub-todo)")
    when = p.add_mutually_exclusive_group()
    when.add_argument("--due", default=None, help="Due date YYYY-MM-DD or ISO datetime")
    when.add_argument("--range", nargs=2, metavar=("START", "END"), default=None, help="Inclusive date range")
    when.add_argument("--repeat", choices=("weekly", "monthly", "yearly"), default=None)
    p.add_argument("--start", default=None, help="Repeat start YYYY-MM-DD (default: today)")
    p.add_argument("--end", default=None, help="Repeat end YYYY-MM-DD (default: open-ended)")
    p.add_argument("--weekdays", default=None, help="Weekly days, e.g. mon,wed (default: mon)")
    p.add_argument("--priority", default=None, help="Eisenhower quadrant (ui/ni/un/nn or full key)")

    p = sub.add_parser("toggle", help="Toggle a todo's completed flag")
    p.add_argument("todo_id")

    p = sub.add_parser("delete", help="Delete a todo and its sub-todos")
    p.add_argument("todo_id")

    p = sub.add_parser("priority", help="Set or clear a todo's priority")
    p.add_argument("todo_id")
    p.add_argument("priority", help="ui/ni/un/nn, full key, or 'none'")

    p = sub.add_parser("today", help="Todos due on a day")
    p.add_argument("--date", default=None, help="Day YYYY-MM-DD (default: today in --tz)")

    p = sub.add_parser("calendar", help="Marked calendar days")
    p.add_argument("--from", dest="start", default=None, help="First day YYYY-MM-DD (default: today)")
    p.add_argument("--days", type=int, default=31, help="Number of days (default: 31)")
    p.add_argument("--json", action="store_true", help="Emit JSON instead of text")

    p = sub.add_parser("matrix", help="Todos by Eisenhower quadrant")
    p.add_argument("--all", action="store_true", help="Include completed todos")

    p = sub.add_parser("move", help="Move a row of 'list' to a new position")
    p.add_argument("src", type=int)
    p.add_argument("dst", type=int)
    p.add_argument("--alone", action="store_true", help="Leave sub-todo rows in place")
    p.add_argument("--collapse", action="append", default=[], help="Routine ids collapsed in 'list'")
    return ap


def _print_list(ws: Workspace, now: dt.datetime) -> None:
    for i, it in enumerate(ws.flat_list()):
        if it.is_header:
            mark = "+" if it.id in ws.collapsed else "-"
            print(f"[{i}] {mark} {it.name}")
            continue
        t = it.todo
        if t is None:
            continue
        box = "[x]" if t.completed else "[ ]"
        label = describe_schedule(t, now, ws.tzinfo)
        tail = f"  ({label})" if label else ""
        print(f"[{i}] {'  ' * (it.level + 1)}{box} {t.text}{tail}  {t.id}")


def _run(ws: Workspace, args: argparse.Namespace) -> None:
    now = now_in(ws.tzinfo)
    cmd = args.command

    if cmd == "routines":
        progress = ws.progress()
        for r, lvl in iter_routines(ws.routines):
            done, total = progress.get(r.id, (0, 0))
            print(f"{'  ' * lvl}{r.name}  [{done}/{total}]  {r.id}")
    elif cmd == "add-routine":
        print(ws.add_routine(args.name, args.parent).id)
    elif cmd == "rename-routine":
        ws.rename_routine(args.routine_id, args.name)
    elif cmd == "delete-routine":
        ws.delete_routine(args.routine_id)
    elif cmd == "list":
        ws.collapsed.update(args.collapse)
        _print_list(ws, now)
    elif cmd == "add":
        due = None
        if args.due:
            try:
                parse_instant(args.due, ws.tzinfo)
            except ValueError:
                raise SystemExit(f"Invalid --due value: {args.due!r}")
            due = args.due
        rng = None
        if args.range:
            rng = DateRange(_parse_date(args.range[0], "--range"), _parse_date(args.range[1], "--range"))
            if rng.end < rng.start:
                raise SystemExit("Invalid --range: END is before START")
        if not args.repeat:
            for flag, val in (("--start", args.start), ("--end", args.end), ("--weekdays", args.weekdays)):
                if val is not None:
                    raise SystemExit(f"{flag} needs --repeat")
        elif args.weekdays is not None and args.repeat != "weekly":
            raise SystemExit("--weekdays needs --repeat weekly")
        rep = None
        if args.repeat:
            start = _parse_date(args.start, "--start") if args.start else now.date()
            end = _parse_date(args.end, "--end") if args.end else None
            if end is not None and end < start:
                raise SystemExit("Invalid --end: before --start")
            days = _parse_weekdays(args.weekdays) if args.repeat == "weekly" else ()
            rep = RepeatSettings(frequency=args.repeat, start_date=start, end_date=end, weekdays=days)
        try:
            prio = parse_priority(args.priority)
        except ValueError as e:
            raise SystemExit(str(e))
        created = ws.add_todo(
            args.text,
            routine_id=args.routine,
            parent_id=args.parent,
            due_date=due,
            date_range=rng,
            repeat=rep,
            priority=prio,
        )
        print(created.id)
    elif cmd == "toggle":
        ws.toggle_todo(args.todo_id)
    elif cmd == "delete":
        ws.delete_todo(args.todo_id)
    elif cmd == "priority":
        try:
            prio = parse_priority(args.priority)
        except ValueError as e:
            raise SystemExit(str(e))
        ws.set_priority(args.todo_id, prio)
    elif cmd == "today":
        day = _parse_date(args.date, "--date") if args.date else now.date()
        for t in ws.due_on(day):
            box = "[x]" if t.completed else "[ ]"
            print(f"{box} {t.text}  ({describe_schedule(t, now, ws.tzinfo)})  {t.id}")
    elif cmd == "calendar":
        first = _parse_date(args.start, "--from") if args.start else now.date()
        if args.days < 1:
            raise SystemExit("--days must be >= 1")
        marks = ws.calendar((first, first + dt.timedelta(days=args.days - 1)))
        if args.json:
            data = {k: v.to_dict() for k, v in marks.items()}
            print(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8"))
        else:
            for day, m in marks.items():
                bits = [f"{d.name} ({d.color})" for d in m.dots]
                if m.period is not None:
                    bits.append("range")
                print(f"{day}  " + "; ".join(bits))
    elif cmd == "matrix":
        groups = ws.matrix(include_completed=bool(args.all))
        for key in [k for k, _label in QUADRANTS] + [UNPRIORITIZED]:
            items = groups.get(key) or []
            print(f"{quadrant_label(key)} ({len(items)})")
            for t in items:
                print(f"  - {t.text}  {t.id}")
    elif cmd == "move":
        ws.collapsed.update(args.collapse)
        try:
            ws.move(args.src, args.dst, with_children=not args.alone)
        except (IndexError, ValueError) as e:
            raise SystemExit(f"Cannot move: {e}")
        _print_list(ws, now)


def main(argv: List[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        tzinfo = resolve_tz(normalize_tz_name(args.tz))
    except ValueError as e:
        raise SystemExit(f"Invalid --tz value: {e}")

    store = JsonStore(args.store if args.store else default_store_path())
    ws = Workspace.open(store, tzinfo)

    try:
        _run(ws, args)
    except InputError as e:
        raise SystemExit(str(e))

    if not ws.last_save_ok:
        print("[trellis] ERROR: changes were not saved", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
