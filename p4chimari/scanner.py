"""Workspace classifier: which files really changed and which are hijacked.

Runs up to three independent ``p4`` queries and builds one bucket per query.
Buckets keep tool output order and are never cross-deduplicated.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import ContextManager

from .models import ACTION_EDIT, ModifiedFile, ScanResult
from .p4 import DIFF_CHANGED, DIFF_UNCHANGED, P4Client, P4Error
from .parsing import parse_reconcile_line

logger = logging.getLogger(__name__)

BusyFactory = Callable[[str], ContextManager[object]]


class ScanError(Exception):
    """A category query failed outright; the whole scan is aborted."""


def _no_busy(_label: str) -> ContextManager[object]:
    return contextlib.nullcontext()


def _opened_files(lines: Iterable[str], has_changes: bool) -> list[ModifiedFile]:
    return [
        ModifiedFile(path=line, action=ACTION_EDIT, has_changes=has_changes, is_opened=True)
        for line in lines
    ]


def opened_with_changes(client: P4Client, scope: str = "", busy: BusyFactory = _no_busy) -> list[ModifiedFile]:
    with busy(f"p4 diff -se {scope}".rstrip()):
        lines = client.diff_summary(DIFF_CHANGED, scope)
    return _opened_files(lines, has_changes=True)


def opened_without_changes(client: P4Client, scope: str = "", busy: BusyFactory = _no_busy) -> list[ModifiedFile]:
    with busy(f"p4 diff -sr {scope}".rstrip()):
        lines = client.diff_summary(DIFF_UNCHANGED, scope)
    return _opened_files(lines, has_changes=False)


def to_local_path(client: P4Client, depot_path: str) -> str:
    local_path = client.where(depot_path)
    if not local_path:
        logger.warning("could not map %s to a local path; keeping depot path", depot_path)
        return depot_path
    return local_path


def not_opened_but_modified(
    client: P4Client,
    folders: Iterable[str] = (),
    busy: BusyFactory = _no_busy,
) -> list[ModifiedFile]:
    """Preview-reconcile each folder and collect files that need opening."""
    folders = list(folders) or ["."]
    files: list[ModifiedFile] = []
    for folder in folders:
        with busy(f"p4 reconcile -n {folder}/..."):
            lines = client.reconcile_preview(folder)
        for line in lines:
            entry = parse_reconcile_line(line)
            if entry is None:
                continue
            files.append(replace(entry, path=to_local_path(client, entry.path)))
    return files


def scan_workspace(
    client: P4Client,
    scope: str = "",
    folders: Iterable[str] = (),
    include_opened_with_changes: bool = True,
    include_opened_without_changes: bool = True,
    include_not_opened: bool = True,
    busy: BusyFactory | None = None,
) -> ScanResult:
    """Classify workspace files into the three enabled buckets.

    ``scope`` filters both ``p4 diff`` queries (empty means the whole
    workspace); ``folders`` are preview-reconciled for unopened changes.
    Raises ``ScanError`` when any enabled query fails.
    """
    busy = busy or _no_busy
    started = time.monotonic()

    with_changes: list[ModifiedFile] = []
    without_changes: list[ModifiedFile] = []
    not_opened: list[ModifiedFile] = []

    if include_opened_with_changes:
        try:
            with_changes = opened_with_changes(client, scope, busy)
        except P4Error as exc:
            raise ScanError(f"failed to get opened files with changes: {exc}") from exc

    if include_opened_without_changes:
        try:
            without_changes = opened_without_changes(client, scope, busy)
        except P4Error as exc:
            raise ScanError(f"failed to get hijacked files: {exc}") from exc

    if include_not_opened:
        try:
            not_opened = not_opened_but_modified(client, folders, busy)
        except P4Error as exc:
            raise ScanError(f"failed to get modified files: {exc}") from exc

    result = ScanResult(
        opened_with_changes=tuple(with_changes),
        opened_without_changes=tuple(without_changes),
        not_opened_but_modified=tuple(not_opened),
        duration=time.monotonic() - started,
    )
    logger.debug(
        "scan finished: %d with changes, %d hijacked, %d not opened",
        len(result.opened_with_changes),
        len(result.opened_without_changes),
        len(result.not_opened_but_modified),
    )
    return result
