from __future__ import annotations

import unittest

from trellis.model import Priority, Routine, Todo
from trellis.tree import (
    InputError,
    add_routine,
    add_todo,
    all_todos,
    delete_routine,
    delete_todo,
    find_routine,
    find_todo,
    rename_routine,
    routine_options,
    routine_progress,
    set_priority,
    toggle_todo,
)


def _routines():
    return (
        Routine(id="home", name="Home", children=(Routine(id="garden", name="Garden"),)),
        Routine(id="work", name="Work"),
    )


def _todos():
    return (
        Todo(
            id="a",
            text="weed beds",
            routine_id="garden",
            sub_todos=(Todo(id="a1", text="buy gloves", routine_id="garden", parent_id="a", completed=True),),
        ),
        Todo(id="b", text="tidy", routine_id="home"),
        Todo(id="c", text="report", routine_id="work"),
        Todo(id="d", text="loose end"),
    )


class TestRoutineTreeContract(unittest.TestCase):
    def test_add_top_level_and_child(self) -> None:
        routines, created = add_routine(_routines(), "Errands")
        self.assertEqual([r.name for r in routines], ["Home", "Work", "Errands"])
        self.assertTrue(created.id)

        routines, child = add_routine(routines, "Shed", parent_id="garden")
        garden = find_routine(routines, "garden")
        self.assertEqual([c.id for c in garden.children], [child.id])

    def test_names_are_trimmed_and_checked_among_siblings(self) -> None:
        with self.assertRaises(InputError) as cm:
            add_routine(_routines(), "   ")
        self.assertEqual(str(cm.exception), "Routine name cannot be empty.")

        with self.assertRaises(InputError) as cm:
            add_routine(_routines(), "Work")
        self.assertEqual(str(cm.exception), "A routine with this name already exists.")

        # Same name under a different parent is fine.
        routines, created = add_routine(_routines(), "Work", parent_id="home")
        self.assertEqual(created.name, "Work")
        _routines2, trimmed = add_routine(_routines(), "  Chores  ")
        self.assertEqual(trimmed.name, "Chores")

    def test_unknown_parent(self) -> None:
        with self.assertRaises(InputError):
            add_routine(_routines(), "x", parent_id="nope")

    def test_rename(self) -> None:
        routines = rename_routine(_routines(), "garden", "Yard")
        self.assertEqual(find_routine(routines, "garden").name, "Yard")
        # Keeping its own name is not a clash.
        rename_routine(_routines(), "work", "Work")
        with self.assertRaises(InputError):
            rename_routine(_routines(), "work", "Home")

    def test_delete_cascades_to_descendants_and_their_todos(self) -> None:
        routines, todos = delete_routine(_routines(), _todos(), "home")
        self.assertEqual([r.id for r in routines], ["work"])
        self.assertIsNone(find_routine(routines, "garden"))
        self.assertEqual([t.id for t in todos], ["c", "d"])

    def test_delete_child_routine_only(self) -> None:
        routines, todos = delete_routine(_routines(), _todos(), "garden")
        self.assertEqual(find_routine(routines, "home").children, ())
        self.assertEqual([t.id for t in all_todos(todos)], ["b", "c", "d"])

    def test_options_are_indented_preorder(self) -> None:
        self.assertEqual(
            routine_options(_routines()),
            [("home", "Home", 0), ("garden", "Garden", 1), ("work", "Work", 0)],
        )

    def test_progress_counts_own_todos_and_sub_todos(self) -> None:
        p = routine_progress(_routines(), _todos())
        self.assertEqual(p["garden"], (1, 2))
        self.assertEqual(p["home"], (0, 1))
        self.assertEqual(p["work"], (0, 1))


class TestTodoTreeContract(unittest.TestCase):
    def test_add_validates_text_and_routine(self) -> None:
        with self.assertRaises(InputError) as cm:
            add_todo(_todos(), _routines(), "  ")
        self.assertEqual(str(cm.exception), "Todo text cannot be empty.")
        with self.assertRaises(InputError):
            add_todo(_todos(), _routines(), "x", routine_id="nope")
        with self.assertRaises(InputError):
            add_todo(_todos(), _routines(), "x", priority="whenever")

    def test_add_top_level_todo(self) -> None:
        todos, created = add_todo(_todos(), _routines(), " call mum ", routine_id="home", priority=Priority.URGENT_IMPORTANT)
        self.assertEqual(todos[-1], created)
        self.assertEqual(created.text, "call mum")
        self.assertFalse(created.completed)
        self.assertTrue(created.created_at.endswith("Z"))
        self.assertIsNone(created.parent_id)

    def test_sub_todo_inherits_parent_routine(self) -> None:
        todos, created = add_todo(_todos(), _routines(), "compost", parent_id="a")
        self.assertEqual(created.routine_id, "garden")
        self.assertEqual(created.parent_id, "a")
        self.assertEqual([s.id for s in find_todo(todos, "a").sub_todos], ["a1", created.id])
        self.assertEqual(len(todos), len(_todos()))

    def test_sub_todo_routine_must_match_parent(self) -> None:
        with self.assertRaises(InputError) as cm:
            add_todo(_todos(), _routines(), "x", parent_id="a", routine_id="work")
        self.assertEqual(str(cm.exception), "A sub-todo must belong to the same routine as its parent.")

    def test_toggle_nested(self) -> None:
        todos = toggle_todo(_todos(), "a1")
        self.assertFalse(find_todo(todos, "a1").completed)
        todos = toggle_todo(todos, "a1")
        self.assertTrue(find_todo(todos, "a1").completed)
        with self.assertRaises(InputError):
            toggle_todo(_todos(), "zzz")

    def test_delete_removes_subtree(self) -> None:
        todos = delete_todo(_todos(), "a")
        self.assertEqual([t.id for t in all_todos(todos)], ["b", "c", "d"])
        todos = delete_todo(_todos(), "a1")
        self.assertEqual(find_todo(todos, "a").sub_todos, ())

    def test_set_and_clear_priority(self) -> None:
        todos = set_priority(_todos(), "a1", Priority.NOT_URGENT_IMPORTANT)
        self.assertEqual(find_todo(todos, "a1").priority, Priority.NOT_URGENT_IMPORTANT)
        todos = set_priority(todos, "a1", None)
        self.assertIsNone(find_todo(todos, "a1").priority)
        with self.assertRaises(InputError):
            set_priority(_todos(), "a1", "soon")

    def test_inputs_are_not_mutated(self) -> None:
        before = _todos()
        toggle_todo(before, "a")
        self.assertEqual(before, _todos())


if __name__ == "__main__":
    unittest.main(verbosity=2)
