"""Tests for diff preview rendering and terminal-text sanitization."""

from __future__ import annotations

import unittest
from unittest import mock

from p4chimari.diffview import render_diff, sanitize_terminal_text

DIFF_TEXT = "--- //depot/a.txt\t2024/01/01\n+++ /ws/a.txt\t2024/01/02\n@@ -1 +1 @@\n-old\n+new\n"


class DiffViewTests(unittest.TestCase):
    def test_plain_rendering_returns_text_unchanged(self) -> None:
        self.assertEqual(render_diff(DIFF_TEXT, no_color=True), DIFF_TEXT)

    def test_colored_rendering_uses_ansi_sequences(self) -> None:
        rendered = render_diff(DIFF_TEXT)
        self.assertIn("\x1b[", rendered)
        self.assertIn("new", rendered)

    def test_highlight_failure_falls_back_to_plain_text(self) -> None:
        with mock.patch("p4chimari.diffview.highlight_diff", return_value=None):
            self.assertEqual(render_diff(DIFF_TEXT), DIFF_TEXT)

    def test_empty_diff_has_placeholder(self) -> None:
        self.assertEqual(render_diff("  \n", no_color=True), "(no differences)\n")

    def test_control_bytes_are_escaped(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\x07b\x1b[2Jc\n\td"), "a\\x07b\\x1b[2Jc\n\td")


if __name__ == "__main__":
    unittest.main()
