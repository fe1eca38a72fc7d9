"""Elapsed-time spinner shown while a long ``p4`` query blocks.

Purely cosmetic: the worker thread only reads the wall clock and writes to
the terminal. Non-TTY streams get a no-op spinner.
"""

from __future__ import annotations

import threading
import time
from typing import TextIO

SPINNER_FRAMES = ("|", "/", "-", "\\")
SPINNER_INTERVAL_SECONDS = 0.1


class Spinner:
    def __init__(
        self,
        stream: TextIO,
        prefix: str = "  ",
        interval: float = SPINNER_INTERVAL_SECONDS,
        enabled: bool | None = None,
    ) -> None:
        self.stream = stream
        self.prefix = prefix
        self.interval = interval
        if enabled is None:
            try:
                enabled = bool(stream.isatty())
            except (AttributeError, ValueError):
                enabled = False
        self.enabled = enabled
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._started = 0.0

    def _worker(self) -> None:
        frame = 0
        while not self._stop.is_set():
            elapsed = time.monotonic() - self._started
            self.stream.write(f"\r{self.prefix}{SPINNER_FRAMES[frame % len(SPINNER_FRAMES)]} Working... ({elapsed:.0f}s)")
            self.stream.flush()
            frame += 1
            self._stop.wait(self.interval)

    def start(self) -> None:
        if not self.enabled or self._thread is not None:
            return
        self._started = time.monotonic()
        self._stop.clear()
        self._thread = threading.Thread(target=self._worker, name="p4chimari-spinner", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None
        elapsed = time.monotonic() - self._started
        self.stream.write(f"\r{self.prefix}done ({elapsed:.1f}s)          \n")
        self.stream.flush()

    def __enter__(self) -> Spinner:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


def spinner_factory(stream: TextIO, prefix: str = "  "):
    """Return a ``label -> Spinner`` factory that echoes the command label."""

    def _busy(label: str) -> Spinner:
        if label:
            stream.write(f"{prefix}Executing: {label}\n")
            stream.flush()
        return Spinner(stream, prefix)

    return _busy
