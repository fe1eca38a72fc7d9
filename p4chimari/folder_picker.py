"""Interactive folder choosers used before reconcile-preview scans.

Offers recent folders, multi-select browsing of Content subfolders, the whole
Content tree, or a typed path. Every confirmed choice is recorded as recent.
"""

from __future__ import annotations

import os
from pathlib import Path

from .config import PreferenceStore
from .console import Console

RECENT_PREVIEW_LIMIT = 5
BROWSE_PAGE_LIMIT = 20
SKIPPED_DIR_NAMES = {"node_modules", "bin", "obj"}


def content_root(client_root: str) -> Path:
    return Path(client_root) / "Project" / "Content"


def list_subdirectories(path: Path, skip_noise: bool = False) -> list[str]:
    """Return sorted child directory names.

    ``skip_noise`` hides dot-directories and common build output folders.
    """
    names: list[str] = []
    with os.scandir(path) as entries:
        for entry in entries:
            if not entry.is_dir():
                continue
            if skip_noise and (entry.name.startswith(".") or entry.name in SKIPPED_DIR_NAMES):
                continue
            names.append(entry.name)
    return sorted(names)


def _remember(store: PreferenceStore, folders: list[str]) -> list[str]:
    for folder in folders:
        store.add_recent_folder(folder)
    return folders


def select_recent_folder(store: PreferenceStore, console: Console) -> list[str] | None:
    recent = store.recent_folders()[:RECENT_PREVIEW_LIMIT]
    if not recent:
        console.write("No recent folders found.")
        return None
    console.write("\nSelect a recent folder:")
    for index, folder in enumerate(recent, start=1):
        console.write(f"  {index}. {folder.path}")
    answer = console.ask("\nEnter number: ")
    try:
        index = int(answer)
    except ValueError:
        console.write("Invalid selection.")
        return None
    if not 1 <= index <= len(recent):
        console.write("Invalid selection.")
        return None
    return _remember(store, [recent[index - 1].path])


def browse_content_folders(root: Path, store: PreferenceStore, console: Console) -> list[str] | None:
    """Multi-select toggle list over the direct subfolders of ``root``."""
    try:
        folders = list_subdirectories(root)
    except OSError as exc:
        console.error(f"Error reading directory: {exc}")
        return None
    if not folders:
        console.write(f"No subfolders found in {root}.")
        return None

    selected: set[int] = set()
    while True:
        console.section("SELECT FOLDERS (Multi-select)")
        for index, name in enumerate(folders):
            checkbox = "[✓]" if index in selected else "[ ]"
            console.write(f"  {index + 1}. {checkbox} {name}")
        console.write(f"\nSelected: {len(selected)} folder(s)")
        console.write("\nCommands:")
        console.write("  [number]  - Toggle selection")
        console.write("  [a]       - Select all")
        console.write("  [n]       - Clear selection")
        console.write("  [done]    - Confirm selection")
        console.write("  [cancel]  - Go back")
        answer = console.ask("\nEnter command: ").lower()

        if answer in ("", "cancel"):
            return None
        if answer == "done":
            if not selected:
                console.warning("No folders selected!")
                continue
            return _remember(store, [str(root / folders[index]) for index in sorted(selected)])
        if answer == "a":
            selected = set(range(len(folders)))
        elif answer == "n":
            selected.clear()
        else:
            try:
                index = int(answer) - 1
            except ValueError:
                continue
            if 0 <= index < len(folders):
                selected ^= {index}


def enter_custom_folder(root: Path, store: PreferenceStore, console: Console) -> list[str] | None:
    answer = console.ask(f"\nEnter custom path (relative to {root}): ")
    if not answer:
        console.write("Cancelled.")
        return None
    target = root / answer
    if not target.exists():
        console.error(f"Path does not exist: {target}")
        return None
    return _remember(store, [str(target)])


def pick_folders(client_root: str, store: PreferenceStore, console: Console) -> list[str] | None:
    """Ask which folders to scan; ``None`` means the operator cancelled."""
    root = content_root(client_root)
    while True:
        console.section("SELECT FOLDERS TO SCAN")
        recent = store.recent_folders()[:RECENT_PREVIEW_LIMIT]
        if recent:
            console.write("📌 Recent Folders:")
            for index, folder in enumerate(recent, start=1):
                console.write(f"  {index}. {folder.path} (used {folder.use_count} times)")
            console.write()
        console.write("Options:")
        console.menu(
            [
                ("b", "Browse Content subfolders"),
                ("r", "Use recent folder"),
                ("a", "Scan all of Content"),
                ("c", "Custom path"),
                ("q", "Cancel"),
            ]
        )
        answer = console.ask("\nEnter choice: ").lower()

        if answer in ("", "q"):
            return None
        if answer == "b":
            return browse_content_folders(root, store, console)
        if answer == "r":
            if recent:
                return select_recent_folder(store, console)
            console.write("No recent folders found.")
            continue
        if answer == "a":
            return _remember(store, [str(root)])
        if answer == "c":
            return enter_custom_folder(root, store, console)
        console.write("Invalid choice.")


def browse_directories(root: str, console: Console) -> str | None:
    """Walk down from ``root`` one level at a time and return the chosen directory."""
    top = Path(root)
    current = top
    while True:
        try:
            dirs = list_subdirectories(current, skip_noise=True)
        except OSError as exc:
            console.error(f"Error reading directory: {exc}")
            return None

        relative = current.relative_to(top).as_posix() if current != top else ""
        console.section(f"Current: /{relative}")
        if not dirs:
            console.write("  (No subdirectories)")
        for index, name in enumerate(dirs[:BROWSE_PAGE_LIMIT], start=1):
            console.write(f"  {index}. {name}")
        if len(dirs) > BROWSE_PAGE_LIMIT:
            console.write(f"  ... and {len(dirs) - BROWSE_PAGE_LIMIT} more")
        console.write("\nCommands:")
        console.write(f"  [1-{BROWSE_PAGE_LIMIT}]  - Enter subdirectory")
        console.write("  [s]     - Select this directory")
        console.write("  [u]     - Go up one level")
        console.write("  [c]     - Cancel")
        answer = console.ask("\nEnter command: ").lower()

        if answer == "s":
            return str(current)
        if answer in ("", "c"):
            return None
        if answer == "u":
            if current != top:
                current = current.parent
            continue
        try:
            index = int(answer)
        except ValueError:
            console.write("Invalid choice.")
            continue
        if 1 <= index <= min(len(dirs), BROWSE_PAGE_LIMIT):
            current = current / dirs[index - 1]
        else:
            console.write("Invalid choice.")
