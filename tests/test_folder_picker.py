"""Folder chooser tests driven through scripted console input."""

from __future__ import annotations

import io
import tempfile
import unittest
from pathlib import Path

from p4chimari.config import PreferenceStore
from p4chimari.console import Console
from p4chimari.folder_picker import browse_directories, content_root, list_subdirectories, pick_folders
from p4chimari.ui_theme import PLAIN_THEME


def _console(answers: str) -> tuple[Console, io.StringIO]:
    out = io.StringIO()
    return Console(stdin=io.StringIO(answers), stdout=out, theme=PLAIN_THEME), out


class PickFoldersTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.content = content_root(str(self.root))
        (self.content / "Alpha").mkdir(parents=True)
        (self.content / "Beta").mkdir()
        (self.content / "readme.txt").write_text("x", encoding="utf-8")
        self.store = PreferenceStore(path=self.root / "config.json")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_browse_toggle_and_confirm_records_recent(self) -> None:
        console, _out = _console("b\n2\ndone\n")
        folders = pick_folders(str(self.root), self.store, console)
        self.assertEqual(folders, [str(self.content / "Beta")])
        self.assertEqual([folder.path for folder in self.store.recent_folders()], [str(self.content / "Beta")])

    def test_select_all_then_clear_then_toggle(self) -> None:
        console, out = _console("b\na\nn\ndone\n1\ndone\n")
        folders = pick_folders(str(self.root), self.store, console)
        self.assertEqual(folders, [str(self.content / "Alpha")])
        self.assertIn("No folders selected!", out.getvalue())

    def test_scan_all_of_content(self) -> None:
        console, _out = _console("a\n")
        self.assertEqual(pick_folders(str(self.root), self.store, console), [str(self.content)])

    def test_empty_answer_cancels(self) -> None:
        console, _out = _console("")
        self.assertIsNone(pick_folders(str(self.root), self.store, console))
        self.assertEqual(self.store.recent_folders(), [])

    def test_missing_custom_path_is_rejected(self) -> None:
        console, out = _console("c\nNope\n")
        self.assertIsNone(pick_folders(str(self.root), self.store, console))
        self.assertIn("Path does not exist", out.getvalue())

    def test_recent_folder_reuse_bumps_use_count(self) -> None:
        self.store.add_recent_folder("/ws/Recent")
        console, out = _console("r\n1\n")
        self.assertEqual(pick_folders(str(self.root), self.store, console), ["/ws/Recent"])
        self.assertIn("/ws/Recent (used 1 times)", out.getvalue())
        self.assertEqual(self.store.recent_folders()[0].use_count, 2)


class BrowseDirectoriesTests(unittest.TestCase):
    def test_noise_directories_are_hidden(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for name in ("src", ".git", "node_modules", "bin", "docs"):
                (root / name).mkdir()
            self.assertEqual(list_subdirectories(root, skip_noise=True), ["docs", "src"])
            self.assertEqual(len(list_subdirectories(root)), 5)

    def test_descend_up_and_select(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "Project" / "Source").mkdir(parents=True)
            console, out = _console("1\n1\nu\ns\n")
            self.assertEqual(browse_directories(str(root), console), str(root / "Project"))
            self.assertIn("Current: /Project/Source", out.getvalue())

    def test_cancel_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            console, out = _console("c\n")
            self.assertIsNone(browse_directories(tmp, console))
            self.assertIn("(No subdirectories)", out.getvalue())


if __name__ == "__main__":
    unittest.main()
