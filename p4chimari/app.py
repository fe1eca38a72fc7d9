"""Menu-driven console session on top of the scanner and action modules.

``App.run`` checks the connection, moves into the workspace root when needed,
and loops over the main menu until the operator exits.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import replace

from .actions import checkout_files, filter_by_action, force_sync_files, reconcile_folders, revert_unchanged_files
from .config import BaselineStore, PreferenceStore
from .console import Console
from .diffview import render_diff
from .folder_picker import browse_directories, pick_folders
from .hijacked import capture_baseline, show_baseline, show_hijacked_status
from .models import ACTION_ADD, ACTION_DELETE, ACTION_EDIT, ChangelistCategory, ModifiedFile, P4Info, ScanResult
from .p4 import P4Client, P4Error, P4NotFoundError, folder_wildcard
from .parsing import DEFAULT_CHANGELIST
from .scanner import ScanError, scan_workspace
from .selection import parse_selection
from .spinner import spinner_factory

logger = logging.getLogger(__name__)

BUCKET_PREVIEW_LIMIT = 15

BANNER = r"""
           _______________
          /               \
         |   |  O     O  |  |
          \  |    \_/    |  /
           \_|___________|_/

          P 4 C H I M A R I
"""

SELECTION_HELP = (
    "Enter selection:",
    "  - Single: 1",
    "  - Multiple: 1,3,5",
    "  - Range: 1-5",
    "  - All: all",
    "  - Cancel: cancel or press Enter",
)


def is_under_root(current_dir: str, client_root: str) -> bool:
    return current_dir.lower().startswith(client_root.lower())


def changelist_categories(groups: dict[str, list[str]]) -> list[ChangelistCategory]:
    """Default changelist first, then numbered ones in ascending order."""
    categories = [ChangelistCategory(name="Default Changelist", files=tuple(groups.get(DEFAULT_CHANGELIST, [])))]
    numbered = [change for change in groups if change != DEFAULT_CHANGELIST]
    numbered.sort(key=lambda change: (not change.isdigit(), int(change) if change.isdigit() else 0, change))
    for change in numbered:
        categories.append(ChangelistCategory(name=f"Changelist {change}", files=tuple(groups[change])))
    return categories


def parse_scan_categories(text: str) -> tuple[bool, bool, bool] | None:
    """Parse the ``1,2,3`` category answer; any unknown token rejects the answer."""
    flags = [False, False, False]
    for token in text.split(","):
        token = token.strip()
        if token not in ("1", "2", "3"):
            return None
        flags[int(token) - 1] = True
    return flags[0], flags[1], flags[2]


class App:
    def __init__(
        self,
        client: P4Client,
        console: Console,
        preferences: PreferenceStore,
        baselines: BaselineStore,
        no_color: bool = False,
    ) -> None:
        self.client = client
        self.console = console
        self.preferences = preferences
        self.baselines = baselines
        self.no_color = no_color
        self.info = P4Info()

    # -- startup -----------------------------------------------------------

    def connect(self) -> bool:
        console = self.console
        try:
            info = self.client.info()
        except P4NotFoundError:
            console.error("❌ Status: NOT CONNECTED")
            console.write("Error: p4 command not found. Please ensure the Perforce CLI is installed and in PATH.")
            return False
        except P4Error as exc:
            console.error("❌ Status: NOT CONNECTED")
            console.write(f"Error: Unable to connect to P4.\n{exc}")
            return False

        if info.client_root and not is_under_root(info.current_dir, info.client_root):
            console.warning("⚠ WARNING: Not in workspace directory!")
            console.write(f"  Current Dir: {info.current_dir}")
            console.write(f"  Workspace Root: {info.client_root}")
            console.write("\nChanging to workspace root...")
            try:
                os.chdir(info.client_root)
            except OSError as exc:
                console.error(f"Error: Could not change to workspace root: {exc}")
                return False
            info = replace(info, current_dir=os.getcwd())

        self.info = info
        return True

    def print_connection(self) -> None:
        info = self.info
        console = self.console
        console.ok("✓ Status: CONNECTED")
        console.write("\nConnection Details:")
        console.divider()
        console.write(f"  User:            {info.user_name}")
        console.write(f"  Workspace:       {info.client_name}")
        console.write(f"  Host:            {info.client_host}")
        console.write(f"  Root:            {info.client_root}")
        console.write(f"  Server:          {info.server_address}")
        if info.server_uptime:
            console.write(f"  Server Uptime:   {info.server_uptime}")
        console.write(f"  Current Dir:     {info.current_dir}")
        console.divider()

    def run(self) -> int:
        self.console.write(self.console.style(BANNER, self.console.theme.heading))
        if not self.connect():
            return 1
        self.print_connection()

        handlers = {
            "1": self.view_changes,
            "2": self.scan_and_act,
            "3": self.reconcile_project,
            "4": self.hijacked_status,
            "5": self.revert_hijacked,
            "6": self.baseline_menu,
        }
        while True:
            self.console.section("MAIN MENU")
            self.console.menu(
                [
                    ("1", "View changes (pending changelists)"),
                    ("2", "Scan & show modified files"),
                    ("3", "Reconcile all files in Project folder"),
                    ("4", "🎯 Show hijacked files - opened files with NO changes"),
                    ("5", "🧹 Auto-revert unchanged files - clean up hijacked files"),
                    ("6", "📸 Baseline snapshot (capture / show / clear)"),
                    ("7", "Exit"),
                ]
            )
            choice = self.console.ask("\nEnter choice (1-7): ")
            if choice == "7" or self.console.at_eof:
                self.console.write("Exiting.")
                return 0
            handler = handlers.get(choice)
            if handler is None:
                self.console.write("Invalid choice.")
                continue
            try:
                handler()
            except (P4Error, ScanError) as exc:
                logger.debug("menu action %s failed", choice, exc_info=True)
                self.console.error(f"Error: {exc}")
            self.console.pause()

    # -- main menu actions -------------------------------------------------

    def view_changes(self) -> None:
        console = self.console
        while True:
            categories = changelist_categories(self.client.opened_by_changelist())
            console.section(f"VIEW CHANGES - {self.info.client_name}")
            for index, category in enumerate(categories, start=1):
                console.write(f"  {index}. {category.name} ({category.count})")
            console.write("\nCommands:")
            console.write("  [number] - Show files in changelist")
            console.write("  [r]      - Refresh")
            console.write("  [q]      - Back")
            answer = console.ask("\nEnter command: ").lower()
            if answer in ("", "q"):
                return
            if answer == "r":
                continue
            try:
                index = int(answer)
            except ValueError:
                console.write("Invalid choice.")
                continue
            if not 1 <= index <= len(categories):
                console.write("Invalid choice.")
                continue
            category = categories[index - 1]
            console.section(f"{category.name} - {category.count} file(s)")
            if not category.files:
                console.write("  No files in this category.")
            for number, path in enumerate(category.files, start=1):
                console.write(f"  {number}. {path}")
            console.pause()

    def reconcile_project(self) -> None:
        reconcile_folders(self.client, [os.path.join(self.info.client_root, "Project")], self.console)

    def hijacked_status(self) -> None:
        show_hijacked_status(self.client, self.console)

    def revert_hijacked(self) -> None:
        revert_unchanged_files(self.client, self.console)

    def baseline_menu(self) -> None:
        console = self.console
        console.section("BASELINE SNAPSHOT")
        console.menu([("1", "Capture baseline (opened files now)"), ("2", "Show baseline"), ("3", "Clear baseline"), ("4", "Back")])
        choice = console.ask("\nEnter choice (1-4): ")
        if choice == "1":
            baseline = capture_baseline(self.client, self.baselines)
            console.ok(f"✓ Captured {len(baseline.files)} opened file(s)")
            console.write(f"  Saved to: {self.baselines.path}")
            console.bullet_list(list(baseline.files))
        elif choice == "2":
            show_baseline(self.baselines.load(), console)
        elif choice == "3":
            self.baselines.clear()
            console.ok("✓ Baseline cleared")

    # -- scan flow ---------------------------------------------------------

    def choose_scope(self) -> str | None:
        """Return the ``p4 diff`` scope ("" for whole workspace) or ``None``."""
        console = self.console
        console.section("SELECT SCAN SCOPE")
        console.warning("⚠  Large workspaces: limit scope for faster scans!")
        console.menu(
            [
                ("1", "Entire workspace (all opened files)"),
                ("2", "Project folder only"),
                ("3", "Current directory only"),
                ("4", "Browse and select directory"),
                ("5", "Custom path (type manually)"),
                ("6", "Cancel"),
            ]
        )
        choice = console.ask("\nEnter choice (1-6): ")
        if choice == "1":
            console.write("\n📂 Scope: Entire workspace")
            return ""
        if choice == "2":
            scope = folder_wildcard(os.path.join(self.info.client_root, "Project"))
        elif choice == "3":
            scope = folder_wildcard(os.getcwd())
        elif choice == "4":
            selected = browse_directories(self.info.client_root, console)
            if selected is None:
                console.write("Cancelled.")
                return None
            scope = folder_wildcard(selected)
        elif choice == "5":
            custom = console.ask("\nEnter directory path (relative to workspace root): ")
            if not custom:
                console.write("Cancelled.")
                return None
            scope = folder_wildcard(os.path.join(self.info.client_root, custom))
        elif choice in ("6", ""):
            console.write("Cancelled.")
            return None
        else:
            console.write("Invalid choice.")
            return None
        console.write(f"\n📂 Scope: {scope}")
        return scope

    def choose_categories(self) -> tuple[bool, bool, bool] | None:
        console = self.console
        console.section("SELECT WHAT TO SCAN FOR")
        console.menu(
            [
                ("1", "Opened files with changes"),
                ("2", "Opened files without changes (hijacked)"),
                ("3", "Modified files not opened yet"),
            ]
        )
        console.write("\nEnter selection (comma-separated):")
        console.write("  Quick:  1,2")
        console.write("  Full:   1,2,3")
        answer = console.ask("\nYour choice: ")
        if not answer:
            console.write("Cancelled.")
            return None
        flags = parse_scan_categories(answer)
        if flags is None:
            console.write(f"Invalid selection: {answer}")
            return None
        return flags

    def print_scan_results(self, result: ScanResult) -> None:
        console = self.console
        theme = console.theme
        console.section("WORKSPACE MODIFICATION SCAN RESULTS")
        console.write("📊 Summary:")
        console.write(f"  Total files found:            {result.total_scanned}")
        console.write(f"  ✓ Opened with changes:        {len(result.opened_with_changes)}")
        console.write(f"  ⚠ Opened without changes:     {len(result.opened_without_changes)} (hijacked)")
        console.write(f"  📝 Modified but not opened:   {len(result.not_opened_but_modified)}")
        console.write(f"  ⏱ Scan duration:              {result.duration:.1f}s")

        buckets = (
            ("✓ Files Opened with REAL Changes", result.opened_with_changes, theme.changed, True),
            ("⚠ Hijacked Files (Opened but NO changes)", result.opened_without_changes, theme.hijacked, False),
            ("📝 Modified Files NOT Opened", result.not_opened_but_modified, theme.unopened, True),
        )
        for title, files, color, show_action in buckets:
            if not files:
                continue
            console.write()
            console.divider()
            console.write(console.style(f"{title} ({len(files)}):", color))
            for file in files[:BUCKET_PREVIEW_LIMIT]:
                console.write(f"  [{file.action.upper()}] {file.path}" if show_action else f"  {file.path}")
            if len(files) > BUCKET_PREVIEW_LIMIT:
                console.write(f"  ... and {len(files) - BUCKET_PREVIEW_LIMIT} more")

        if result.total_scanned == 0:
            console.ok("✨ All clean! No modifications found in your workspace.")

    def select_files(self, files: Sequence[ModifiedFile], title: str) -> list[ModifiedFile]:
        """Show a numbered list and resolve the operator's selection expression."""
        console = self.console
        console.section(title)
        for index, file in enumerate(files, start=1):
            console.write(f"  {index}. [{file.status_label}] [{file.action.upper()}] {file.path}")
        console.write()
        for line in SELECTION_HELP:
            console.write(console.style(line, console.theme.dim))
        selected = parse_selection(console.ask("\nYour choice: "), files)
        if selected is None:
            console.write("Cancelled.")
            return []
        if not selected:
            console.write("No valid files selected.")
        return selected

    def scan_and_act(self) -> None:
        console = self.console
        scope = self.choose_scope()
        if scope is None:
            return
        flags = self.choose_categories()
        if flags is None:
            return
        with_changes, without_changes, not_opened = flags

        folders: list[str] = []
        if not_opened:
            picked = pick_folders(self.info.client_root, self.preferences, console)
            if picked is None:
                console.write("Cancelled.")
                return
            folders = picked

        console.write("\n🔍 Scanning workspace...")
        result = scan_workspace(
            self.client,
            scope=scope,
            folders=folders,
            include_opened_with_changes=with_changes,
            include_opened_without_changes=without_changes,
            include_not_opened=not_opened,
            busy=spinner_factory(console.stdout),
        )
        self.print_scan_results(result)
        if result.total_scanned == 0:
            return
        self.actions_menu(result, folders)

    def actions_menu(self, result: ScanResult, folders: list[str]) -> None:
        console = self.console
        revertable = result.revertable_files()
        unopened = list(result.not_opened_but_modified)

        console.section("Actions")
        console.menu(
            [
                ("1", "Filter by action (add/edit/delete)"),
                ("2", "Checkout selected files"),
                ("3", "Reconcile all in scanned folders"),
                ("4", "Force sync selected files (p4 sync -f)"),
                ("5", "View diff of an opened file"),
                ("6", "Back to main menu"),
            ]
        )
        choice = console.ask("\nEnter choice (1-6): ")
        if choice == "1":
            self.filter_menu(revertable)
        elif choice == "2":
            if not unopened:
                console.write("No files to checkout.")
                return
            selected = self.select_files(unopened, "CHECKOUT FILES (p4 edit)")
            if selected:
                checkout_files(self.client, selected, console)
        elif choice == "3":
            if not folders:
                console.write("No folders were scanned for unopened files.")
                return
            reconcile_folders(self.client, folders, console)
        elif choice == "4":
            if not revertable:
                console.write("No files with actual modifications to revert.")
                return
            console.warning("⚠  WARNING: This will DISCARD your local changes!")
            selected = self.select_files(revertable, "FORCE GET REVISION (p4 sync -f)")
            if selected:
                force_sync_files(self.client, selected, console)
        elif choice == "5":
            self.view_diff(list(result.opened_with_changes))

    def filter_menu(self, files: list[ModifiedFile]) -> None:
        console = self.console
        console.section("Filter by action type")
        console.menu([("1", "Show only Edits"), ("2", "Show only Adds"), ("3", "Show only Deletes"), ("4", "Show All")])
        choice = console.ask("\nEnter choice (1-4): ")
        actions = {"1": ACTION_EDIT, "2": ACTION_ADD, "3": ACTION_DELETE}
        if choice in actions:
            filtered = filter_by_action(files, actions[choice])
        elif choice == "4":
            filtered = list(files)
        else:
            console.write("Invalid choice.")
            return
        if not filtered:
            console.write("No matching files.")
            return

        console.write(f"\n{len(filtered)} file(s)")
        console.menu([("1", "Checkout these files"), ("2", "Force sync these files"), ("3", "Back")])
        choice = console.ask("\nEnter choice: ")
        if choice == "1":
            selected = self.select_files(filtered, "CHECKOUT FILES (p4 edit)")
            if selected:
                checkout_files(self.client, selected, console)
        elif choice == "2":
            selected = self.select_files(filtered, "FORCE GET REVISION (p4 sync -f)")
            if selected:
                force_sync_files(self.client, selected, console)

    def view_diff(self, files: list[ModifiedFile]) -> None:
        console = self.console
        if not files:
            console.write("No opened files with changes to diff.")
            return
        console.section("VIEW DIFF")
        for index, file in enumerate(files, start=1):
            console.write(f"  {index}. {file.path}")
        answer = console.ask("\nEnter number: ")
        try:
            index = int(answer)
        except ValueError:
            console.write("Cancelled.")
            return
        if not 1 <= index <= len(files):
            console.write("Invalid choice.")
            return
        console.stdout.write(render_diff(self.client.diff(files[index - 1].path), no_color=self.no_color))
        console.stdout.flush()
