"""Data models produced by the link preview pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class PreviewThumbnail:
    """A derived still image ready to attach to a draft."""

    image_data: bytes
    mime_type: str


class LinkPreviewDraft(BaseModel):
    """Unsent preview data for a shared link.

    ``url`` is the URL the user shared, not the URL that finally answered
    after redirects. The image fields are always set together.
    """

    model_config = ConfigDict(validate_assignment=True)

    url: str = Field(..., min_length=1)
    title: str | None = None
    description: str | None = None
    date: datetime | None = None
    image_data: bytes | None = None
    image_mime_type: str | None = None

    def attach_thumbnail(self, thumbnail: PreviewThumbnail | None) -> None:
        """Set both image fields from thumbnail, or clear both when it is None."""
        if thumbnail is None:
            self.image_data = None
            self.image_mime_type = None
            return
        self.image_data = thumbnail.image_data
        self.image_mime_type = thumbnail.mime_type

    @property
    def has_image(self) -> bool:
        return self.image_data is not None and self.image_mime_type is not None

    def is_valid(self) -> bool:
        """A draft is worth showing when it has a non-empty title or an image."""
        return bool(self.title) or self.has_image
