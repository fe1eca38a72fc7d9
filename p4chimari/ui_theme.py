"""UI theme definitions and selection helpers.

Themes are ANSI palettes for menus, bucket headings, and status marks.
Diff colouring is handled separately by pygments.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the console."""

    name: str
    reset: str
    divider: str
    heading: str
    menu_key: str
    dim: str
    ok: str
    error: str
    warning: str
    changed: str
    hijacked: str
    unopened: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    divider="\033[2m",
    heading="\033[1;38;5;81m",
    menu_key="\033[38;5;229m",
    dim="\033[2;38;5;250m",
    ok="\033[38;5;42m",
    error="\033[1;38;5;203m",
    warning="\033[38;5;214m",
    changed="\033[38;5;42m",
    hijacked="\033[38;5;214m",
    unopened="\033[38;5;110m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    divider="",
    heading="",
    menu_key="",
    dim="",
    ok="",
    error="",
    warning="",
    changed="",
    hijacked="",
    unopened="",
)


def resolve_theme(no_color: bool = False) -> UITheme:
    """Return ``plain`` when colour is off, else the default palette."""
    return PLAIN_THEME if no_color else DEFAULT_THEME
