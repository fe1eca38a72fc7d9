"""Thin wrapper around the ``p4`` command-line client.

Each call runs ``p4`` exactly once and returns its text output.
Failure classification keeps "tool failed" apart from "nothing matched".
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .models import P4Info
from .parsing import (
    group_opened_by_changelist,
    output_lines,
    parse_info,
    parse_opened_files,
    parse_where_depot_path,
    parse_where_output,
)

logger = logging.getLogger(__name__)

DIFF_CHANGED = "e"
DIFF_UNCHANGED = "r"

# stderr phrases ``p4`` uses when a query ran fine but matched nothing.
EMPTY_RESULT_MARKERS = (
    "file(s) not opened",
    "no such file(s)",
    "no file(s) to reconcile",
    "file(s) not on client",
    "file(s) up-to-date",
    "not in client view",
)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class P4Error(Exception):
    """Base error for ``p4`` invocations."""


class P4NotFoundError(P4Error):
    """The ``p4`` executable could not be launched."""


class P4CommandError(P4Error):
    def __init__(self, args: Sequence[str], returncode: int, output: str) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        detail = output.strip() or "no output"
        super().__init__(f"{' '.join(self.args_list)} exited with status {returncode}: {detail}")


@dataclass(frozen=True)
class CommandOutcome:
    """Result of one state-changing ``p4`` call."""

    args: tuple[str, ...]
    ok: bool
    output: str


def is_empty_result_message(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in EMPTY_RESULT_MARKERS)


def join_output(stdout: str, stderr: str) -> str:
    """Concatenate both streams so the last stdout line stays its own line."""
    return "\n".join(part for part in (stdout, stderr) if part)


def folder_wildcard(folder: str) -> str:
    """Return the recursive ``p4`` file spec for ``folder``."""
    return folder.rstrip("/\\") + "/..." if folder else "..."


class P4Client:
    """Runs ``p4`` subcommands and parses their output."""

    def __init__(self, executable: str = "p4", runner: Runner | None = None) -> None:
        self.executable = executable
        self._runner = runner if runner is not None else subprocess.run

    def run(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Run ``p4 <args>`` once and return the completed process.

        Raises ``P4NotFoundError`` when the executable cannot be started. Exit
        status is never checked here.
        """
        command = [self.executable, *args]
        logger.debug("running %s", " ".join(command))
        try:
            proc = self._runner(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise P4NotFoundError(f"{self.executable} could not be started: {exc}") from exc
        logger.debug("%s exited with status %s", " ".join(command), proc.returncode)
        return proc

    def query(self, *args: str, include_stderr: bool = False) -> str:
        """Run a read-only query and return its usable text output.

        Non-zero exit with stdout content still returns that content. Non-zero
        exit with a "nothing matched" message returns ``""``. Anything else
        with no output raises ``P4CommandError``.
        """
        proc = self.run(*args)
        stdout = proc.stdout or ""
        stderr = proc.stderr or ""
        if proc.returncode == 0 or stdout.strip():
            return join_output(stdout, stderr) if include_stderr else stdout
        if is_empty_result_message(stderr):
            return stderr if include_stderr else ""
        raise P4CommandError([self.executable, *args], proc.returncode, stderr)

    def execute(self, *args: str) -> CommandOutcome:
        """Run a state-changing command; failures come back as ``ok=False``."""
        proc = self.run(*args)
        output = join_output(proc.stdout or "", proc.stderr or "")
        return CommandOutcome(args=(self.executable, *args), ok=proc.returncode == 0, output=output)

    def info(self) -> P4Info:
        info = parse_info(self.query("info"), current_dir=os.getcwd())
        if not info.client_name:
            raise P4Error("could not determine client name")
        return info

    def opened(self) -> list[str]:
        return parse_opened_files(self.query("opened"))

    def opened_by_changelist(self) -> dict[str, list[str]]:
        return group_opened_by_changelist(self.query("opened"))

    def diff_summary(self, mode: str, scope: str = "") -> list[str]:
        """Return paths from ``p4 diff -s<mode> [scope]``.

        ``DIFF_CHANGED`` lists opened files whose content differs from the
        have revision, ``DIFF_UNCHANGED`` those with no difference.
        """
        args = ["diff", f"-s{mode}"]
        if scope:
            args.append(scope)
        return output_lines(self.query(*args))

    def reconcile_preview(self, folder: str) -> list[str]:
        return output_lines(self.query("reconcile", "-n", folder_wildcard(folder), include_stderr=True))

    def _where_text(self, path: str) -> str:
        try:
            proc = self.run("where", path)
        except P4NotFoundError:
            return ""
        if proc.returncode != 0:
            return ""
        return proc.stdout or ""

    def where(self, depot_path: str) -> str | None:
        """Map a depot path to a local path, or ``None`` when lookup fails."""
        return parse_where_output(self._where_text(depot_path))

    def depot_path_of(self, local_path: str) -> str | None:
        """Map a local path to its depot path, or ``None`` when lookup fails."""
        return parse_where_depot_path(self._where_text(local_path))

    def diff(self, path: str) -> str:
        return self.query("diff", "-du", path)

    def reconcile(self, folder: str) -> CommandOutcome:
        return self.execute("reconcile", folder_wildcard(folder))

    def edit(self, path: str) -> CommandOutcome:
        return self.execute("edit", path)

    def sync_force(self, path: str) -> CommandOutcome:
        return self.execute("sync", "-f", path)

    def revert_unchanged(self) -> CommandOutcome:
        return self.execute("revert", "-a")
