from __future__ import annotations

import datetime as dt
import unittest

from trellis.calendar_marks import RANGE_COLOR, marked_dates, todos_due_on, todos_occurring_on
from trellis.model import DateRange, RepeatSettings, Todo

UTC = dt.timezone.utc
SEOUL = dt.timezone(dt.timedelta(hours=9))
TODAY = dt.date(2024, 3, 1)


def _fixture():
    sub = Todo(
        id="s1",
        text="pay rent",
        routine_id="home",
        parent_id="t3",
        repeat=RepeatSettings("monthly", dt.date(2024, 3, 5), dt.date(2024, 3, 5)),
    )
    return (
        Todo(id="t1", text="dentist", due_date="2024-03-05"),
        Todo(
            id="t2",
            text="gym",
            repeat=RepeatSettings("weekly", dt.date(2024, 3, 1), dt.date(2024, 3, 31), ("monday",)),
        ),
        Todo(
            id="t3",
            text="trip",
            routine_id="home",
            date_range=DateRange(dt.date(2024, 3, 4), dt.date(2024, 3, 6)),
            sub_todos=(sub,),
        ),
    )


class TestMarkedDatesContract(unittest.TestCase):
    def test_keys_are_sorted_days(self) -> None:
        marks = marked_dates(_fixture(), TODAY, UTC)
        self.assertEqual(list(marks), sorted(marks))
        self.assertEqual(
            list(marks),
            ["2024-03-04", "2024-03-05", "2024-03-06", "2024-03-11", "2024-03-18", "2024-03-25"],
        )

    def test_dot_colors_by_kind_and_sub_todos_included(self) -> None:
        marks = marked_dates(_fixture(), TODAY, UTC)
        day = marks["2024-03-05"]
        self.assertEqual([(d.key, d.color) for d in day.dots], [("t1", "blue"), ("s1", "green")])
        self.assertEqual(day.dots[0].name, "dentist")
        self.assertEqual([d.color for d in marks["2024-03-11"].dots], ["red"])

    def test_range_period_flags(self) -> None:
        marks = marked_dates(_fixture(), TODAY, UTC)
        first, mid, last = (marks[k].period for k in ("2024-03-04", "2024-03-05", "2024-03-06"))
        self.assertTrue(first.starting_day)
        self.assertFalse(first.ending_day)
        self.assertFalse(mid.starting_day)
        self.assertFalse(mid.ending_day)
        self.assertTrue(last.ending_day)
        self.assertEqual(last.color, RANGE_COLOR)

    def test_day_mark_wire_shape(self) -> None:
        marks = marked_dates(_fixture(), TODAY, UTC)
        self.assertEqual(
            marks["2024-03-06"].to_dict(),
            {"startingDay": False, "endingDay": True, "color": "lightblue"},
        )
        self.assertEqual(
            marks["2024-03-18"].to_dict(),
            {"dots": [{"key": "t2", "color": "red", "name": "gym"}]},
        )

    def test_window_limits_marked_days(self) -> None:
        marks = marked_dates(_fixture(), TODAY, UTC, (dt.date(2024, 3, 10), dt.date(2024, 3, 20)))
        self.assertEqual(list(marks), ["2024-03-11", "2024-03-18"])

    def test_single_day_range_is_start_and_end(self) -> None:
        t = Todo(id="r", text="fair", date_range=DateRange(dt.date(2024, 4, 1), dt.date(2024, 4, 1)))
        p = marked_dates((t,), TODAY, UTC)["2024-04-01"].period
        self.assertTrue(p.starting_day and p.ending_day)


class TestDueOnContract(unittest.TestCase):
    def test_due_on_matches_only_due_dates(self) -> None:
        got = todos_due_on(_fixture(), dt.date(2024, 3, 5), UTC)
        self.assertEqual([t.id for t in got], ["t1"])

    def test_due_on_buckets_datetimes_in_timezone(self) -> None:
        t = Todo(id="late", text="call", due_date="2024-03-05T23:30:00.000Z")
        self.assertEqual([x.id for x in todos_due_on((t,), dt.date(2024, 3, 5), UTC)], ["late"])
        self.assertEqual(todos_due_on((t,), dt.date(2024, 3, 5), SEOUL), [])
        self.assertEqual([x.id for x in todos_due_on((t,), dt.date(2024, 3, 6), SEOUL)], ["late"])

    def test_occurring_on_includes_ranges_and_repeats(self) -> None:
        got = todos_occurring_on(_fixture(), dt.date(2024, 3, 5), TODAY, UTC)
        self.assertEqual([t.id for t in got], ["t1", "t3", "s1"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
