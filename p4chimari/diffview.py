"""Colourised ``p4 diff`` output for a single file.

Uses Pygments' diff lexer when colour is on and falls back to plain text.
Terminal control bytes are escaped before anything reaches the screen.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def sanitize_terminal_text(text: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(text) is None:
        return text
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", text)


def highlight_diff(text: str) -> str | None:
    """Return ANSI-highlighted diff text, or ``None`` when Pygments fails."""
    try:
        from pygments import highlight as pygments_highlight
        from pygments.formatters import TerminalFormatter
        from pygments.lexers import DiffLexer

        return pygments_highlight(text, DiffLexer(), TerminalFormatter())
    except Exception as exc:
        logger.debug("diff highlighting unavailable: %s", exc)
        return None


def render_diff(text: str, no_color: bool = False) -> str:
    clean = sanitize_terminal_text(text)
    if not clean.strip():
        return "(no differences)\n"
    if no_color:
        return clean
    return highlight_diff(clean) or clean
