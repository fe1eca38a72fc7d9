"""Line-oriented parsers for ``p4`` text output.

Each helper maps raw tool text to plain records and never runs a process.
Matching is substring based because ``p4`` is consumed without ``-ztag``.
"""

from __future__ import annotations

from pathlib import Path

from .models import ACTION_ADD, ACTION_DELETE, ACTION_EDIT, ModifiedFile, P4Info

DEPOT_MARKER = "//"
RECONCILE_MARKERS = (" - opened for ", " - reconcile to ", "- currently opened for")
DEFAULT_CHANGELIST = "default"

_INFO_FIELDS = {
    "User name:": "user_name",
    "Client name:": "client_name",
    "Client host:": "client_host",
    "Client root:": "client_root",
    "Server address:": "server_address",
    "Server uptime:": "server_uptime",
}


def output_lines(text: str) -> list[str]:
    """Return stripped, non-empty lines in output order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def extract_value(line: str) -> str:
    """Return the text after the first ``:`` of a ``key: value`` line."""
    _key, sep, value = line.partition(":")
    return value.strip() if sep else ""


def parse_info(text: str, current_dir: str = "") -> P4Info:
    values: dict[str, str] = {}
    for line in output_lines(text):
        for prefix, attr in _INFO_FIELDS.items():
            if line.startswith(prefix):
                values[attr] = extract_value(line)
                break
    return P4Info(current_dir=current_dir, **values)


def depot_path_from_line(line: str) -> str:
    """Extract the leading depot path of a ``p4`` status line.

    The path ends at the revision marker ``#`` when present, otherwise at the
    first ``" - "`` separator.
    """
    if "#" in line:
        return line.split("#", 1)[0].strip()
    return line.split(" - ", 1)[0].strip()


def infer_action(line: str) -> str:
    # Plain substring search: a path containing "add" or "delete" also matches.
    if ACTION_ADD in line:
        return ACTION_ADD
    if ACTION_DELETE in line:
        return ACTION_DELETE
    return ACTION_EDIT


def parse_reconcile_line(line: str) -> ModifiedFile | None:
    """Parse one ``p4 reconcile -n`` line into an unopened modified file.

    Returns ``None`` for headers, blank lines, error text, and any line that
    lacks a depot marker plus one of the reconcile phrases. The returned path
    is still in depot form.
    """
    line = line.strip()
    if not line or DEPOT_MARKER not in line:
        return None
    if not any(marker in line for marker in RECONCILE_MARKERS):
        return None

    depot_path = depot_path_from_line(line)
    if not depot_path:
        return None
    return ModifiedFile(
        path=depot_path,
        action=infer_action(line),
        has_changes=True,
        is_opened=False,
    )


def parse_opened_files(text: str) -> list[str]:
    """Return depot paths listed by ``p4 opened``."""
    files: list[str] = []
    for line in output_lines(text):
        depot_path = line.split("#", 1)[0].strip()
        if depot_path:
            files.append(depot_path)
    return files


def changelist_of_line(line: str) -> str:
    """Return the pending change number of a ``p4 opened`` line, or ``default``."""
    if "default change" in line:
        return DEFAULT_CHANGELIST
    tokens = line.split()
    for index, token in enumerate(tokens[:-1]):
        if token == "change":
            return tokens[index + 1]
    return DEFAULT_CHANGELIST


def group_opened_by_changelist(text: str) -> dict[str, list[str]]:
    """Group ``p4 opened`` lines by pending changelist, preserving line order."""
    groups: dict[str, list[str]] = {}
    for line in output_lines(text):
        if " - " not in line:
            continue
        groups.setdefault(changelist_of_line(line), []).append(line.split("#", 1)[0].strip())
    return groups


def parse_where_output(text: str) -> str | None:
    """Return the local path column of ``p4 where`` output.

    Output is ``depot-path client-path local-path``; anything shorter yields
    ``None``.
    """
    fields = text.split()
    if len(fields) < 3:
        return None
    return str(Path(fields[2]))


def parse_where_depot_path(text: str) -> str | None:
    """Return the depot path column of ``p4 where`` output, or ``None``."""
    fields = text.split()
    if len(fields) < 3 or not fields[0].startswith(DEPOT_MARKER):
        return None
    return fields[0]
