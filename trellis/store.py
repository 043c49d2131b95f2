# trellis/store.py
"""JSON key-value store for routines and todos.

One file holds a JSON object; each key maps to a whole collection. Every
save rewrites the collections in full (no partial updates). Read failures are
logged and fall back to empty collections; write failures are logged and
reported as False.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple, Union

import orjson

from .model import Routine, Todo
from .schema import dump_routines, dump_todos, parse_document
from .util.console import error

ROUTINES_KEY = "routines"
TODOS_KEY = "todos"
# First-draft name of the routines collection.
LEGACY_ROUTINES_KEY = "categories"

_SRC = "trellis.store"

PathLike = Union[str, Path]


class StoreError(RuntimeError):
    """Raised by JsonStore primitives when the backing file is unusable."""


def default_store_path() -> Path:
    env = (os.getenv("TRELLIS_STORE", "") or "").strip()
    if env:
        return Path(env).expanduser()
    return Path.home() / ".trellis" / "store.json"


class JsonStore:
    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)

    # --- primitives -----------------------------------------------------------

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = orjson.loads(self.path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as ex:
            raise StoreError(f"cannot read {self.path}: {ex}") from ex
        if not isinstance(data, dict):
            raise StoreError(f"{self.path} must hold a JSON object; got {type(data).__name__}")
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(orjson.dumps(data, option=orjson.OPT_INDENT_2))
                    f.write(b"\n")
                os.replace(tmp, self.path)
            except BaseException:
                try:
                    os.unlink(tmp)
                except OSError:
                    pass
                raise
        except (OSError, TypeError) as ex:
            raise StoreError(f"cannot write {self.path}: {ex}") from ex

    def get_item(self, key: str) -> Any:
        return self._read_all().get(key)

    def set_items(self, items: Dict[str, Any]) -> None:
        data = self._read_all()
        data.update(items)
        self._write_all(data)

    def set_item(self, key: str, value: Any) -> None:
        self.set_items({key: value})

    # --- collections ----------------------------------------------------------

    def load_document(self) -> Tuple[Tuple[Routine, ...], Tuple[Todo, ...]]:
        try:
            data = self._read_all()
        except StoreError as ex:
            error(_SRC, f"failed to load routines and todos ({ex})")
            return (), ()
        routines_raw = data.get(ROUTINES_KEY)
        if routines_raw is None:
            routines_raw = data.get(LEGACY_ROUTINES_KEY)
        try:
            return parse_document(routines_raw, data.get(TODOS_KEY))
        except (TypeError, ValueError) as ex:
            error(_SRC, f"failed to load routines and todos ({ex})")
            return (), ()

    def load_routines(self) -> Tuple[Routine, ...]:
        return self.load_document()[0]

    def load_todos(self) -> Tuple[Todo, ...]:
        return self.load_document()[1]

    def save_document(self, routines: Sequence[Routine], todos: Sequence[Todo]) -> bool:
        try:
            self.set_items({ROUTINES_KEY: dump_routines(routines), TODOS_KEY: dump_todos(todos)})
        except StoreError as ex:
            error(_SRC, f"failed to save routines and todos ({ex})")
            return False
        return True

    def save_routines(self, routines: Sequence[Routine]) -> bool:
        try:
            self.set_item(ROUTINES_KEY, dump_routines(routines))
        except StoreError as ex:
            error(_SRC, f"failed to save routines ({ex})")
            return False
        return True

    def save_todos(self, todos: Sequence[Todo]) -> bool:
        try:
            self.set_item(TODOS_KEY, dump_todos(todos))
        except StoreError as ex:
            error(_SRC, f"failed to save todos ({ex})")
            return False
        return True


__all__ = [
    "ROUTINES_KEY",
    "TODOS_KEY",
    "StoreError",
    "JsonStore",
    "default_store_path",
]
