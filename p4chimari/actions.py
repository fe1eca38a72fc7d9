"""Per-file ``p4`` actions: checkout, reconcile, force sync, revert unchanged.

Every file (or folder) gets its own ``p4`` call. Failures are reported and
the loop moves on; nothing is batched or rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .console import Console
from .models import ModifiedFile
from .p4 import DIFF_UNCHANGED, CommandOutcome, P4Client, folder_wildcard

logger = logging.getLogger(__name__)

CONFIRM_TOKEN = "YES"
HIJACKED_PREVIEW_LIMIT = 20


def filter_by_action(files: Iterable[ModifiedFile], action: str) -> list[ModifiedFile]:
    return [file for file in files if file.action == action]


def _report(console: Console, outcome: CommandOutcome) -> None:
    output = outcome.output.strip()
    if outcome.ok:
        console.ok(f"    ✓ {output}" if output else "    ✓ done")
        return
    logger.debug("%s failed: %s", " ".join(outcome.args), output)
    console.error("    ✗ Error: command failed")
    if output:
        console.write(f"    {output}")


def checkout_files(client: P4Client, files: Sequence[ModifiedFile], console: Console) -> list[CommandOutcome]:
    """Open each file for edit."""
    if not files:
        console.write("No files to checkout.")
        return []
    console.write(f"\nChecking out {len(files)} file(s)...")
    outcomes: list[CommandOutcome] = []
    for file in files:
        console.write(f"  p4 edit {file.path}")
        outcome = client.edit(file.path)
        _report(console, outcome)
        outcomes.append(outcome)
    console.write("\nDone!")
    return outcomes


def reconcile_folders(client: P4Client, folders: Sequence[str], console: Console) -> list[CommandOutcome]:
    """Open files for add/edit/delete so each folder matches the filesystem."""
    console.write("\nReconciling files in selected folders...")
    console.write("This will open files for add, edit, or delete to match your workspace.")
    outcomes: list[CommandOutcome] = []
    for folder in folders:
        console.write(f"\nReconciling: {folder_wildcard(folder)}")
        outcome = client.reconcile(folder)
        outcomes.append(outcome)
        output = outcome.output.strip()
        if not outcome.ok and not output:
            console.error("  Error: reconcile failed with no output")
            continue
        if output:
            console.write(output)
        if "opened for" in output:
            console.ok("  ✓ Files have been opened for change!")
        elif "no file(s) to reconcile" in output:
            console.write("  No changes to reconcile.")
    console.ok("\n✓ Done!")
    return outcomes


def force_sync_files(client: P4Client, files: Sequence[ModifiedFile], console: Console) -> list[CommandOutcome]:
    """Discard local content and restore the have revision, after confirmation.

    The operator sees the exact file list and must type ``YES``; any other
    answer returns without calling ``p4``.
    """
    if not files:
        console.write("No valid files selected.")
        return []

    console.warning(f"\n⚠  FINAL CONFIRMATION: Force sync {len(files)} file(s)?")
    console.write("This will DISCARD your local changes and restore from P4!")
    console.write("\nFiles to be force synced:")
    console.bullet_list([file.path for file in files])
    if console.ask("\nType 'YES' to confirm: ") != CONFIRM_TOKEN:
        console.write("Cancelled.")
        return []

    console.write("\nForce syncing files...")
    outcomes: list[CommandOutcome] = []
    for file in files:
        console.write(f"  p4 sync -f {file.path}")
        outcome = client.sync_force(file.path)
        _report(console, outcome)
        outcomes.append(outcome)
    console.ok("\n✓ Done! Files have been force synced from P4.")
    return outcomes


def revert_unchanged_files(client: P4Client, console: Console) -> CommandOutcome | None:
    """Revert every opened file without content changes via ``p4 revert -a``.

    Returns ``None`` when nothing was hijacked or the operator declined.
    """
    console.write("\nFinding hijacked files (opened but unchanged)...")
    console.divider()
    hijacked = client.diff_summary(DIFF_UNCHANGED)
    if not hijacked:
        console.ok("✓ No hijacked files found - all opened files have changes!")
        return None

    console.write(f"Found {len(hijacked)} hijacked file(s):")
    console.bullet_list(hijacked, limit=HIJACKED_PREVIEW_LIMIT)
    console.warning(f"\n⚠  This will revert {len(hijacked)} unchanged file(s)")
    answer = console.ask("Proceed? (yes/no): ").lower()
    if answer not in ("yes", "y"):
        console.write("Cancelled.")
        return None

    console.write("\nReverting hijacked files...")
    outcome = client.revert_unchanged()
    output = outcome.output.strip()
    if not outcome.ok and not output:
        console.error("Error: revert failed with no output")
        return outcome
    if output:
        console.write(output)
    console.ok("\n✓ Done! Hijacked files have been reverted.")
    console.write("  Your real changes remain checked out.")
    return outcome
