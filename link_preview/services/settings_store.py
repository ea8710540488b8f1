from __future__ import annotations

from typing import Protocol

from link_preview.core.settings import Settings, get_settings


class LinkPreviewSettingStore(Protocol):
    def are_link_previews_enabled(self) -> bool: ...


class SettingsLinkPreviewSettingStore:
    """Reads the feature flag from application settings."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings

    def are_link_previews_enabled(self) -> bool:
        settings = self._settings or get_settings()
        return settings.link_previews_enabled
