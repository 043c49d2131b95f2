from __future__ import annotations

import datetime as dt
import unittest

from trellis.api import open_workspace
from trellis.util.tz import normalize_tz_name, resolve_tz


class TestTimezoneResolutionContract(unittest.TestCase):
    def test_valid_timezone_identifiers_resolve(self) -> None:
        self.assertEqual(resolve_tz("UTC"), dt.timezone.utc)
        self.assertEqual(resolve_tz("z"), dt.timezone.utc)
        self.assertIsNotNone(resolve_tz("local"))
        self.assertEqual(resolve_tz("+02:00").utcoffset(None), dt.timedelta(hours=2))
        self.assertEqual(resolve_tz("-0530").utcoffset(None), -dt.timedelta(hours=5, minutes=30))

    def test_invalid_timezone_identifiers_raise(self) -> None:
        with self.assertRaises(ValueError):
            resolve_tz("No/Such_Zone")
        with self.assertRaises(ValueError):
            resolve_tz("+25:00")

    def test_blank_means_local(self) -> None:
        self.assertEqual(normalize_tz_name(None), "local")
        self.assertEqual(normalize_tz_name("  "), "local")
        self.assertEqual(normalize_tz_name("System"), "local")

    def test_open_workspace_rejects_bad_zone(self) -> None:
        with self.assertRaises(ValueError):
            open_workspace("/nonexistent/store.json", tz="Mars/Olympus")


if __name__ == "__main__":
    unittest.main(verbosity=2)
