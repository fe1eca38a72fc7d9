"""Selection-expression parsing for numbered file lists.

Grammar: ``all``, ``cancel``/empty, or comma-separated ``n`` and ``a-b``
tokens (1-based, inclusive). Bad tokens are dropped without error.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

SELECT_ALL = "all"
SELECT_CANCEL = "cancel"


def _parse_int(text: str) -> int | None:
    # ASCII digits only: int() would also take "+2", "1_0" and non-Latin digits.
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def is_cancel(text: str) -> bool:
    normalized = text.strip().lower()
    return normalized == "" or normalized == SELECT_CANCEL


def parse_selection(text: str, items: Sequence[T]) -> list[T] | None:
    """Resolve a selection expression against ``items``.

    Returns ``None`` when the operator cancelled (empty input or ``cancel``).
    Otherwise returns the selected items in token order; out-of-range and
    unparseable tokens are skipped and overlapping tokens yield duplicates.
    """
    normalized = text.strip().lower()
    if is_cancel(normalized):
        return None
    if normalized == SELECT_ALL:
        return list(items)

    count = len(items)
    selected: list[T] = []
    for token in normalized.split(","):
        token = token.strip()
        if "-" in token:
            parts = token.split("-")
            if len(parts) != 2:
                continue
            start = _parse_int(parts[0])
            end = _parse_int(parts[1])
            if start is None or end is None:
                continue
            if 1 <= start <= end <= count:
                selected.extend(items[start - 1 : end])
            continue

        index = _parse_int(token)
        if index is not None and 1 <= index <= count:
            selected.append(items[index - 1])
    return selected
