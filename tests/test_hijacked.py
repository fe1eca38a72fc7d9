"""Tests for the live hijacked analysis and baseline capture."""

from __future__ import annotations

import io
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from p4chimari.config import BaselineStore
from p4chimari.console import Console
from p4chimari.hijacked import capture_baseline, show_baseline, show_hijacked_status, split_real_and_hijacked
from p4chimari.p4 import P4Client
from p4chimari.ui_theme import PLAIN_THEME

from fake_p4 import FakeRunner


OPENED = "\n".join(
    [
        "//depot/a.txt#1 - edit default change (text)",
        "//depot/b.txt#2 - edit default change (text)",
        "//depot/c.txt#5 - edit change 42 (text)",
    ]
)


class HijackedAnalysisTests(unittest.TestCase):
    def test_split_maps_local_unchanged_paths_to_depot_paths(self) -> None:
        runner = FakeRunner(
            {
                ("opened",): (0, OPENED, ""),
                ("diff", "-sr"): (0, "/ws/c.txt\n/ws/a.txt\n", ""),
                ("where", "/ws/c.txt"): (0, "//depot/c.txt //alice-ws/c.txt /ws/c.txt\n", ""),
                ("where", "/ws/a.txt"): (0, "//depot/a.txt //alice-ws/a.txt /ws/a.txt\n", ""),
            }
        )
        real, hijacked = split_real_and_hijacked(P4Client(runner=runner))
        self.assertEqual(real, ["//depot/b.txt"])
        self.assertEqual(hijacked, ["//depot/a.txt", "//depot/c.txt"])

    def test_unmappable_unchanged_path_is_kept_raw(self) -> None:
        runner = FakeRunner(
            {
                ("opened",): (0, OPENED, ""),
                ("diff", "-sr"): (0, "/ws/a.txt\n//depot/b.txt\n", ""),
                ("where", "/ws/a.txt"): (1, "", "/ws/a.txt - file(s) not in client view.\n"),
            }
        )
        with self.assertLogs("p4chimari.hijacked", level="WARNING"):
            real, hijacked = split_real_and_hijacked(P4Client(runner=runner))
        self.assertEqual(real, ["//depot/a.txt", "//depot/c.txt"])
        self.assertEqual(hijacked, ["//depot/b.txt"])
        self.assertNotIn(("where", "//depot/b.txt"), runner.calls)

    def test_status_with_nothing_opened_reports_zero_percent(self) -> None:
        runner = FakeRunner(
            {
                ("opened",): (1, "", "File(s) not opened on this client.\n"),
                ("diff", "-sr"): (1, "", "File(s) not opened on this client.\n"),
            }
        )
        out = io.StringIO()
        real, hijacked = show_hijacked_status(P4Client(runner=runner), Console(io.StringIO(), out, PLAIN_THEME))
        self.assertEqual((real, hijacked), ([], []))
        self.assertIn("Total opened files:     0", out.getvalue())
        self.assertIn("(0%)", out.getvalue())


class BaselineCaptureTests(unittest.TestCase):
    def test_capture_persists_opened_files(self) -> None:
        runner = FakeRunner({("opened",): (0, OPENED, "")})
        moment = datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
        with tempfile.TemporaryDirectory() as tmp:
            store = BaselineStore(Path(tmp) / "baseline.json", legacy_path=None)
            baseline = capture_baseline(P4Client(runner=runner), store, now=moment)
            self.assertEqual(baseline.files, ("//depot/a.txt", "//depot/b.txt", "//depot/c.txt"))
            self.assertEqual(store.load(), baseline)

            out = io.StringIO()
            show_baseline(store.load(), Console(io.StringIO(), out, PLAIN_THEME))
            self.assertIn("2024-02-03 04:05:06", out.getvalue())
            self.assertIn("3 file(s)", out.getvalue())

    def test_show_missing_baseline(self) -> None:
        out = io.StringIO()
        show_baseline(None, Console(io.StringIO(), out, PLAIN_THEME))
        self.assertIn("No baseline found", out.getvalue())


if __name__ == "__main__":
    unittest.main()
