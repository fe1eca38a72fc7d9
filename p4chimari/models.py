"""Value types shared by the scanner, actions, and menu layers.

Everything here is immutable and carries no ``p4`` process concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field

ACTION_EDIT = "edit"
ACTION_ADD = "add"
ACTION_DELETE = "delete"


@dataclass(frozen=True)
class ModifiedFile:
    """One classified workspace file."""

    path: str
    action: str = ACTION_EDIT
    has_changes: bool = True
    is_opened: bool = True

    @property
    def status_label(self) -> str:
        return "OPENED" if self.is_opened else "MODIFIED"


@dataclass(frozen=True)
class ScanResult:
    """Three disjoint buckets produced by one workspace scan."""

    opened_with_changes: tuple[ModifiedFile, ...] = ()
    opened_without_changes: tuple[ModifiedFile, ...] = ()
    not_opened_but_modified: tuple[ModifiedFile, ...] = ()
    duration: float = 0.0

    @property
    def total_scanned(self) -> int:
        return (
            len(self.opened_with_changes)
            + len(self.opened_without_changes)
            + len(self.not_opened_but_modified)
        )

    def revertable_files(self) -> list[ModifiedFile]:
        """Files with real content changes, in display order."""
        return [*self.opened_with_changes, *self.not_opened_but_modified]


@dataclass(frozen=True)
class P4Info:
    """Connection details parsed from ``p4 info``."""

    user_name: str = ""
    client_name: str = ""
    client_host: str = ""
    client_root: str = ""
    server_address: str = ""
    server_uptime: str = ""
    current_dir: str = ""


@dataclass(frozen=True)
class ChangelistCategory:
    name: str
    files: tuple[str, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.files)
