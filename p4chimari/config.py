"""Persistent JSON preferences: recent folders and the baseline snapshot.

Both documents live in the platform config directory, with the older
home-directory files read as a fallback. All loading is defensive: missing or
malformed data comes back empty, and write failures are logged and ignored.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "p4chimari"
CONFIG_FILENAME = "config.json"
BASELINE_FILENAME = "baseline.json"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
DEFAULT_CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME
DEFAULT_BASELINE_PATH = CONFIG_DIR / BASELINE_FILENAME
LEGACY_CONFIG_PATH = Path.home() / ".p4chimari.json"
LEGACY_BASELINE_PATH = Path.home() / ".p4chimari_baseline.json"

MAX_RECENT_FOLDERS = 10

_LONG_FRACTION_RE = re.compile(r"(\.\d{6})\d+")

Clock = Callable[[], datetime]


def _now() -> datetime:
    return datetime.now().astimezone()


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning ``None`` for anything invalid.

    Fractions longer than microseconds are truncated and naive values are
    treated as local time.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = _LONG_FRACTION_RE.sub(r"\1", value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo is not None else parsed.astimezone()


def _coerce_positive_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 1
    return max(1, value)


def _load_path(primary: Path, legacy: Path | None) -> Path:
    """Return ``primary`` unless only the legacy file exists."""
    if primary.exists():
        return primary
    if legacy is not None and legacy.exists():
        return legacy
    return primary


def load_json_object(path: Path) -> dict[str, object]:
    """Load a top-level JSON object, or ``{}`` when missing or malformed."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_json_object(path: Path, data: dict[str, object]) -> bool:
    """Persist ``data`` as pretty-printed JSON; returns ``False`` on failure."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception as exc:
        logger.warning("could not write %s: %s", path, exc)
        return False
    return True


@dataclass(frozen=True)
class RecentFolder:
    path: str
    last_used: datetime
    use_count: int = 1

    def to_json(self) -> dict[str, object]:
        return {
            "path": self.path,
            "last_used": self.last_used.isoformat(),
            "use_count": self.use_count,
        }


@dataclass(frozen=True)
class Baseline:
    """Snapshot of opened files captured on demand."""

    timestamp: datetime
    files: tuple[str, ...] = ()

    def to_json(self) -> dict[str, object]:
        return {"timestamp": self.timestamp.isoformat(), "files": list(self.files)}


def _parse_recent_folders(value: object) -> list[RecentFolder]:
    """Validate the ``recent_folders`` list, dropping malformed entries."""
    if not isinstance(value, list):
        return []
    folders: list[RecentFolder] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        path = raw.get("path")
        last_used = parse_timestamp(raw.get("last_used"))
        if not isinstance(path, str) or not path or last_used is None:
            continue
        folders.append(RecentFolder(path=path, last_used=last_used, use_count=_coerce_positive_int(raw.get("use_count"))))
    return folders[-MAX_RECENT_FOLDERS:]


class PreferenceStore:
    """Bounded most-recently-used folder list, saved on every change."""

    def __init__(
        self,
        path: Path = DEFAULT_CONFIG_PATH,
        recent: list[RecentFolder] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.path = path
        self._recent: list[RecentFolder] = list(recent or [])
        self._clock = clock or _now

    @classmethod
    def load(
        cls,
        path: Path = DEFAULT_CONFIG_PATH,
        legacy_path: Path | None = LEGACY_CONFIG_PATH,
        clock: Clock | None = None,
    ) -> PreferenceStore:
        data = load_json_object(_load_path(path, legacy_path))
        return cls(path=path, recent=_parse_recent_folders(data.get("recent_folders")), clock=clock)

    def save(self) -> bool:
        return save_json_object(self.path, {"recent_folders": [folder.to_json() for folder in self._recent]})

    def add_recent_folder(self, path: str) -> None:
        """Record a folder use.

        An existing entry has its timestamp and use count updated in place;
        a new one is appended and only the newest ``MAX_RECENT_FOLDERS`` kept.
        """
        now = self._clock()
        for index, folder in enumerate(self._recent):
            if folder.path == path:
                self._recent[index] = RecentFolder(path=path, last_used=now, use_count=folder.use_count + 1)
                break
        else:
            self._recent.append(RecentFolder(path=path, last_used=now, use_count=1))
            overflow = len(self._recent) - MAX_RECENT_FOLDERS
            if overflow > 0:
                del self._recent[:overflow]
        self.save()

    def recent_folders(self) -> list[RecentFolder]:
        """Return entries with the most recently used first."""
        return sorted(self._recent, key=lambda folder: folder.last_used, reverse=True)


class BaselineStore:
    """Single-snapshot JSON document; written only on explicit capture."""

    def __init__(
        self,
        path: Path = DEFAULT_BASELINE_PATH,
        legacy_path: Path | None = LEGACY_BASELINE_PATH,
    ) -> None:
        self.path = path
        self.legacy_path = legacy_path

    def save(self, baseline: Baseline) -> bool:
        return save_json_object(self.path, baseline.to_json())

    def load(self) -> Baseline | None:
        """Return the saved baseline, or ``None`` when absent or corrupt."""
        data = load_json_object(_load_path(self.path, self.legacy_path))
        timestamp = parse_timestamp(data.get("timestamp"))
        if timestamp is None:
            return None
        raw_files = data.get("files")
        if raw_files is None:
            raw_files = []
        if not isinstance(raw_files, list):
            return None
        files = tuple(item for item in raw_files if isinstance(item, str) and item)
        return Baseline(timestamp=timestamp, files=files)

    def clear(self) -> None:
        """Delete the snapshot and any legacy copy; missing files are fine."""
        for path in (self.path, self.legacy_path):
            if path is None:
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("could not remove %s: %s", path, exc)
