"""
This module defines the strategy for ordinary web pages: fetch the HTML,
read its metadata and, best effort, derive a thumbnail from its image.
"""

from __future__ import annotations

from link_preview.core.errors import LinkPreviewError
from link_preview.core.logging import get_logger
from link_preview.http_client.preview_http_client import PreviewHttpClient
from link_preview.metadata.html_metadata import parse_html_metadata
from link_preview.models.preview import LinkPreviewDraft, PreviewThumbnail
from link_preview.preview_strategies.base_strategy import LinkKind, PreviewStrategy
from link_preview.thumbnails.thumbnail_deriver import derive_thumbnail_async
from link_preview.utils.text import normalize_string
from link_preview.utils.url_utils import resolve_http_url

logger = get_logger(__name__)

TITLE_MAX_LINES = 2
DESCRIPTION_MAX_LINES = 3


class GenericPreviewStrategy(PreviewStrategy):
    """Fallback strategy; handles every URL the special kinds do not claim."""

    kind = LinkKind.GENERIC

    def __init__(self, http_client: PreviewHttpClient):
        self.http_client = http_client

    def can_handle_url(self, url: str) -> bool:
        return True

    async def build_draft(self, url: str) -> LinkPreviewDraft:
        # Page fetch failures are fatal; only the image step is best effort.
        responding_url, raw_html = await self.http_client.fetch_text(url)

        metadata = parse_html_metadata(raw_html)
        raw_title = metadata.preferred_title
        title = normalize_string(raw_title, max_lines=TITLE_MAX_LINES) if raw_title else None
        draft = LinkPreviewDraft(url=url, title=title or None)

        raw_description = metadata.preferred_description
        if raw_description is not None and raw_description != raw_title:
            description = normalize_string(raw_description, max_lines=DESCRIPTION_MAX_LINES)
            draft.description = description or None

        draft.date = metadata.date_for_link_preview

        # Relative image URLs resolve against the URL that actually answered.
        image_url = resolve_http_url(metadata.preferred_image_url, responding_url)
        if image_url:
            draft.attach_thumbnail(await self._fetch_preview_thumbnail(image_url))

        logger.debug(
            f"Built generic preview for {url}: title={bool(draft.title)} "
            f"description={bool(draft.description)} image={draft.has_image}"
        )
        return draft

    async def _fetch_preview_thumbnail(self, image_url: str) -> PreviewThumbnail | None:
        """Fetch and derive the page image; failures yield None instead of raising."""
        try:
            image_data = await self.http_client.fetch_bytes(image_url)
        except LinkPreviewError as e:
            logger.info(f"Skipping preview image {image_url}: {e}")
            return None
        # No mime hint: web images are sniffed from their content.
        return await derive_thumbnail_async(image_data, mime_type=None)
