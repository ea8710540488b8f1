from __future__ import annotations

from typing import Protocol

from link_preview.core.logging import get_logger

logger = get_logger(__name__)

CALL_LINK_LINK_PREVIEW_DESCRIPTION = "CALL_LINK_LINK_PREVIEW_DESCRIPTION"
SIGNAL_CALL = "SIGNAL_CALL"

DEFAULT_STRINGS = {
    # Shown in a message bubble when a call link is sent in a chat
    CALL_LINK_LINK_PREVIEW_DESCRIPTION: "Use this link to join a Signal call",
    # Name shown for call links that were never given one
    SIGNAL_CALL: "Signal Call",
}


class Localizer(Protocol):
    def localized(self, key: str) -> str: ...


class DefaultLocalizer:
    """English strings, optionally overridden per key."""

    def __init__(self, overrides: dict[str, str] | None = None):
        self._strings = {**DEFAULT_STRINGS, **(overrides or {})}

    def localized(self, key: str) -> str:
        value = self._strings.get(key)
        if value is None:
            logger.warning(f"Missing localized string: {key}")
            return key
        return value
