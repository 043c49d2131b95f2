from __future__ import annotations

import unittest

from trellis.model import Routine, Todo
from trellis.reorder import (
    UNCATEGORIZED_ID,
    apply_reorder,
    build_flat_list,
    flatten_todos,
    move_item,
    reconstruct,
)
from trellis.tree import all_todos


def _t(tid: str, rid: str | None, parent: str | None = None, subs=()) -> Todo:
    return Todo(id=tid, text=f"todo {tid}", routine_id=rid, parent_id=parent, sub_todos=tuple(subs))


def _shape(todos):
    """(id, routine, parent, [children]) nested tuples for structural comparison."""
    return [(t.id, t.routine_id, t.parent_id, _shape(t.sub_todos)) for t in todos]


ROUTINES = (
    Routine(id="home", name="Home", children=(Routine(id="garden", name="Garden"),)),
    Routine(id="work", name="Work"),
)

TODOS = (
    _t("a", "home", subs=[
        _t("a1", "home", "a", subs=[_t("a1x", "home", "a1")]),
        _t("a2", "home", "a"),
    ]),
    _t("b", "work"),
    _t("c", "garden", subs=[_t("c1", "garden", "c")]),
    _t("d", None),
    _t("e", "gone"),
)


class TestFlattenContract(unittest.TestCase):
    def test_flatten_is_preorder_with_levels(self) -> None:
        rows = flatten_todos(TODOS[:1])
        self.assertEqual([(r.id, r.level) for r in rows], [("a", 0), ("a1", 1), ("a1x", 2), ("a2", 1)])

    def test_flat_list_groups_by_routine_in_tree_order(self) -> None:
        rows = build_flat_list(ROUTINES, TODOS)
        got = [(r.kind, r.id) for r in rows]
        self.assertEqual(
            got,
            [
                ("routine", "home"),
                ("todo", "a"),
                ("todo", "a1"),
                ("todo", "a1x"),
                ("todo", "a2"),
                ("routine", "garden"),
                ("todo", "c"),
                ("todo", "c1"),
                ("routine", "work"),
                ("todo", "b"),
                ("routine", UNCATEGORIZED_ID),
                ("todo", "d"),
                ("todo", "e"),
            ],
        )

    def test_routines_without_todos_get_no_header(self) -> None:
        rows = build_flat_list(ROUTINES, (_t("b", "work"),))
        self.assertEqual([r.id for r in rows if r.is_header], ["work"])

    def test_collapsed_section_keeps_header_only(self) -> None:
        rows = build_flat_list(ROUTINES, TODOS, collapsed=["home"])
        ids = [r.id for r in rows]
        self.assertIn("home", ids)
        self.assertNotIn("a", ids)
        self.assertNotIn("a1x", ids)


class TestReconstructContract(unittest.TestCase):
    def test_flatten_then_reconstruct_is_isomorphic(self) -> None:
        known = TODOS[:4]
        rebuilt = reconstruct(build_flat_list(ROUTINES, known))
        self.assertEqual(sorted(_shape(rebuilt)), sorted(_shape(known)))

    def test_reconstruct_without_headers_keeps_routines(self) -> None:
        rebuilt = reconstruct(flatten_todos(TODOS[:1]))
        self.assertEqual(_shape(rebuilt), _shape(TODOS[:1]))

    def test_skipped_level_attaches_to_nearest_shallower_row(self) -> None:
        rows = flatten_todos((_t("p", "home"),))
        deep = flatten_todos((_t("q", "home"),), level=3)
        sib = flatten_todos((_t("r", "home"),), level=1)
        rebuilt = reconstruct(rows + deep + sib)
        self.assertEqual(len(rebuilt), 1)
        self.assertEqual([s.id for s in rebuilt[0].sub_todos], ["q", "r"])

    def test_unknown_routine_id_survives_round_trip(self) -> None:
        known = (_t("e", "gone", subs=[_t("e1", "gone", "e")]), _t("d", None))
        rebuilt = reconstruct(build_flat_list(ROUTINES, known))
        self.assertEqual(_shape(rebuilt), _shape(known))

    def test_todo_dropped_into_uncategorized_loses_routine(self) -> None:
        rows = build_flat_list(ROUTINES, (_t("b", "work"), _t("e", "gone")))
        # rows: 0 work, 1 b, 2 uncategorized, 3 e
        rebuilt = apply_reorder((), move_item(rows, 1, 3))
        by_id = {t.id: t for t in rebuilt}
        self.assertIsNone(by_id["b"].routine_id)
        self.assertEqual(by_id["e"].routine_id, "gone")


class TestMoveContract(unittest.TestCase):
    def test_moving_into_another_section_relinks_routine_and_parent(self) -> None:
        rows = build_flat_list(ROUTINES, TODOS[:3])
        # rows: 0 home, 1 a, 2 a1, 3 a1x, 4 a2, 5 garden, 6 c, 7 c1, 8 work, 9 b
        moved = move_item(rows, 9, 8)  # b lands after c1, as a sibling of c
        rebuilt = apply_reorder(TODOS[:3], moved)
        b = [t for t in all_todos(rebuilt) if t.id == "b"][0]
        self.assertEqual(b.routine_id, "garden")
        self.assertIsNone(b.parent_id)

    def test_sub_todo_dropped_under_new_parent(self) -> None:
        rows = build_flat_list(ROUTINES, TODOS[:3])
        moved = move_item(rows, 4, 7)  # a2 (level 1) right after c1 in garden
        rebuilt = apply_reorder(TODOS[:3], moved)
        a2 = [t for t in all_todos(rebuilt) if t.id == "a2"][0]
        self.assertEqual(a2.parent_id, "c")
        self.assertEqual(a2.routine_id, "garden")
        a = [t for t in rebuilt if t.id == "a"][0]
        self.assertEqual([s.id for s in a.sub_todos], ["a1"])

    def test_block_move_carries_children(self) -> None:
        rows = build_flat_list(ROUTINES, TODOS[:3])
        moved = move_item(rows, 1, 4)  # a + a1 + a1x + a2 after garden's c1
        ids = [r.id for r in moved]
        self.assertEqual(ids[:3], ["home", "garden", "c"])
        rebuilt = apply_reorder(TODOS[:3], moved)
        a = [t for t in all_todos(rebuilt) if t.id == "a"][0]
        self.assertEqual(a.routine_id, "garden")
        self.assertEqual([t.routine_id for t in all_todos(a.sub_todos)], ["garden"] * 3)

    def test_headers_cannot_move(self) -> None:
        rows = build_flat_list(ROUTINES, TODOS[:3])
        with self.assertRaises(ValueError):
            move_item(rows, 0, 3)

    def test_out_of_range(self) -> None:
        rows = build_flat_list(ROUTINES, TODOS[:3])
        with self.assertRaises(IndexError):
            move_item(rows, 99, 0)

    def test_collapsed_todos_survive_reorder(self) -> None:
        rows = build_flat_list(ROUTINES, TODOS[:3], collapsed=["home"])
        # rows: 0 home(collapsed), 1 garden, 2 c, 3 c1, 4 work, 5 b
        moved = move_item(rows, 5, 2)
        rebuilt = apply_reorder(TODOS[:3], moved)
        ids = {t.id for t in all_todos(rebuilt)}
        self.assertEqual(ids, {t.id for t in all_todos(TODOS[:3])})


if __name__ == "__main__":
    unittest.main(verbosity=2)
