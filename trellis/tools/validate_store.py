#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List

import orjson

from trellis.schema import normalize_document, parse_document
from trellis.store import LEGACY_ROUTINES_KEY, ROUTINES_KEY, TODOS_KEY
from trellis.validate import validate_document


def _die(msg: str, rc: int = 2) -> int:
    print(f"[trellis-validate-store] ERROR: {msg}", file=sys.stderr)
    return rc


def _load_store(p: Path) -> Dict[str, Any]:
    obj = orjson.loads(p.read_bytes())
    if not isinstance(obj, dict):
        raise ValueError(f"store must be a JSON object; got {type(obj).__name__}")
    return obj


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="trellis-validate-store",
        description=(
            "Validate a TRELLIS store file.\n"
            "Legacy shapes are upgraded first (as on load); use --write-json to keep the result."
        ),
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Store JSON path")
    ap.add_argument(
        "--write-json",
        default=None,
        help="Write the normalized store (routines + todos) to this path",
    )
    ns = ap.parse_args(argv)

    p = Path(ns.in_json)
    if not p.exists():
        return _die(f"Missing store file: {p}")

    try:
        raw = _load_store(p)
        routines_raw = raw.get(ROUTINES_KEY, raw.get(LEGACY_ROUTINES_KEY))
        routines, todos = parse_document(routines_raw, raw.get(TODOS_KEY))
    except (OSError, ValueError) as e:
        return _die(f"Failed to load store: {p} ({e})")

    if ns.write_json:
        routines_d, todos_d = normalize_document(routines_raw, raw.get(TODOS_KEY))
        out = Path(ns.write_json)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(
            orjson.dumps({ROUTINES_KEY: routines_d, TODOS_KEY: todos_d}, option=orjson.OPT_INDENT_2) + b"\n"
        )

    errs = validate_document(routines, todos)
    if errs:
        print("[trellis-validate-store] FAIL", file=sys.stderr)
        for e in errs:
            print(f"  - {e}", file=sys.stderr)
        return 3

    print(f"[trellis-validate-store] OK ({len(routines)} routines, {len(todos)} todos)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
