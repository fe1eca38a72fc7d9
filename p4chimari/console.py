"""Line-based prompt and print seam for the interactive menus.

Wraps input/output streams plus a theme so menus can be driven by tests.
End of input reads as an empty answer, which every prompt treats as cancel.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TextIO

from .ui_theme import DEFAULT_THEME, UITheme

DIVIDER = "─" * 37
PREVIEW_LIMIT = 10


class Console:
    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        theme: UITheme = DEFAULT_THEME,
    ) -> None:
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.theme = theme
        self.at_eof = False

    def is_interactive(self) -> bool:
        try:
            return bool(self.stdout.isatty())
        except (AttributeError, ValueError):
            return False

    def style(self, text: str, color: str) -> str:
        if not color:
            return text
        return f"{color}{text}{self.theme.reset}"

    def write(self, text: str = "") -> None:
        self.stdout.write(text + "\n")
        self.stdout.flush()

    def ask(self, prompt: str) -> str:
        """Prompt for one line and return it stripped.

        End of input returns ``""`` and sets ``at_eof``.
        """
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            self.at_eof = True
            self.stdout.write("\n")
            return ""
        return line.strip()

    def pause(self) -> None:
        self.ask("\nPress Enter to continue...")

    def divider(self) -> None:
        self.write(self.style(DIVIDER, self.theme.divider))

    def section(self, title: str) -> None:
        self.write()
        self.divider()
        self.write(self.style(title, self.theme.heading))
        self.divider()

    def ok(self, text: str) -> None:
        self.write(self.style(text, self.theme.ok))

    def error(self, text: str) -> None:
        self.write(self.style(text, self.theme.error))

    def warning(self, text: str) -> None:
        self.write(self.style(text, self.theme.warning))

    def menu(self, options: Sequence[tuple[str, str]]) -> None:
        for key, label in options:
            self.write(f"  {self.style(key, self.theme.menu_key)}. {label}")

    def bullet_list(self, items: Sequence[str], limit: int = PREVIEW_LIMIT, indent: str = "  ") -> None:
        """Print at most ``limit`` items followed by an ``... and N more`` line."""
        for item in items[:limit]:
            self.write(f"{indent}• {item}")
        if len(items) > limit:
            self.write(f"{indent}... and {len(items) - limit} more")
