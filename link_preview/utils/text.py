"""Display-string helpers for preview titles and descriptions."""

from __future__ import annotations

import re
import unicodedata

MAX_DISPLAY_CHARACTERS = 2048

_HORIZONTAL_WHITESPACE = re.compile(r"[^\S\n]+")
# Bidi overrides and isolates can visually reorder the rest of a message.
_UNSAFE_FORMAT_CHARACTERS = {
    "\u202a",
    "\u202b",
    "\u202c",
    "\u202d",
    "\u202e",
    "\u2066",
    "\u2067",
    "\u2068",
    "\u2069",
}


def filter_for_display(value: str | None) -> str | None:
    """Strip control and bidi override characters and surrounding whitespace."""
    if value is None:
        return None
    kept = []
    for char in value:
        if char == "\n":
            kept.append(char)
        elif char in _UNSAFE_FORMAT_CHARACTERS:
            continue
        elif unicodedata.category(char) == "Cc":
            kept.append(" ")
        else:
            kept.append(char)
    return "".join(kept).strip()


def normalize_string(value: str, max_lines: int) -> str:
    """Fold text into at most ``max_lines`` display lines.

    Line endings are unified, runs of spaces and tabs collapse to a single
    space, blank lines are dropped and the result is capped at
    MAX_DISPLAY_CHARACTERS.

    Args:
        value: Raw text from page metadata.
        max_lines: Maximum number of lines to keep.

    Returns:
        The normalized string, possibly empty.
    """
    unified = value.replace("\r\n", "\n").replace("\r", "\n")
    lines = []
    for line in unified.split("\n"):
        folded = _HORIZONTAL_WHITESPACE.sub(" ", line).strip()
        if folded:
            lines.append(folded)
        if len(lines) == max_lines:
            break

    result = "\n".join(lines)[:MAX_DISPLAY_CHARACTERS]
    return filter_for_display(result) or ""
