"""Hijacked-file analysis and the manual baseline snapshot.

The live analysis compares ``p4 opened`` with ``p4 diff -sr``. The baseline
is a separately captured list of opened files; the two are never compared.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .config import Baseline, BaselineStore
from .console import Console
from .p4 import DIFF_UNCHANGED, P4Client
from .parsing import DEPOT_MARKER

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _as_depot_path(client: P4Client, path: str) -> str:
    if path.startswith(DEPOT_MARKER):
        return path
    depot_path = client.depot_path_of(path)
    if depot_path is None:
        logger.warning("could not map %s to a depot path; keeping it as is", path)
        return path
    return depot_path


def split_real_and_hijacked(client: P4Client) -> tuple[list[str], list[str]]:
    """Partition opened files into ``(real_changes, hijacked)`` in opened order.

    ``p4 opened`` lists depot paths while ``p4 diff -sr`` lists local ones,
    so unchanged files are mapped back through ``p4 where`` before matching.
    """
    opened = client.opened()
    if not opened:
        return [], []
    unchanged = {_as_depot_path(client, path) for path in client.diff_summary(DIFF_UNCHANGED)}
    real: list[str] = []
    hijacked: list[str] = []
    for path in opened:
        (hijacked if path in unchanged else real).append(path)
    return real, hijacked


def _percent(part: int, total: int) -> float:
    return (part / total) * 100.0 if total else 0.0


def show_hijacked_status(client: P4Client, console: Console) -> tuple[list[str], list[str]]:
    console.write("\n📊 Hijacked Files Analysis")
    console.divider()
    real, hijacked = split_real_and_hijacked(client)
    total = len(real) + len(hijacked)

    console.write(f"Total opened files:     {total}")
    console.write(f"  Real changes:         {len(real)} ({_percent(len(real), total):.0f}%)")
    console.write(f"  Hijacked (unchanged): {len(hijacked)} ({_percent(len(hijacked), total):.0f}%)")
    console.divider()

    if real:
        console.write(console.style("\n✓ Real Changes:", console.theme.changed))
        console.bullet_list(real)
    if hijacked:
        console.write(console.style("\n⚠  Hijacked Files (unchanged):", console.theme.hijacked))
        console.bullet_list(hijacked)
    return real, hijacked


def capture_baseline(client: P4Client, store: BaselineStore, now: datetime | None = None) -> Baseline:
    """Snapshot the currently opened files and persist them."""
    baseline = Baseline(
        timestamp=now or datetime.now().astimezone(),
        files=tuple(client.opened()),
    )
    store.save(baseline)
    return baseline


def show_baseline(baseline: Baseline | None, console: Console) -> None:
    if baseline is None:
        console.write("No baseline found - capture one first.")
        return
    console.write(f"Baseline from {baseline.timestamp.strftime(TIMESTAMP_FORMAT)}")
    console.write(f"  {len(baseline.files)} file(s) opened at capture time")
    console.bullet_list(list(baseline.files))
