"""Sticker pack share links: preview the pack's cover sticker."""

from __future__ import annotations

import asyncio

from link_preview.core.errors import InvalidPreviewError
from link_preview.core.logging import get_logger
from link_preview.models.preview import LinkPreviewDraft
from link_preview.preview_strategies.base_strategy import LinkKind, PreviewStrategy
from link_preview.services.stickers import (
    StickerService,
    is_sticker_pack_share,
    parse_sticker_pack_share,
)
from link_preview.thumbnails.thumbnail_deriver import derive_thumbnail_async
from link_preview.utils.error_logger import log_error
from link_preview.utils.text import filter_for_display

logger = get_logger(__name__)

STICKER_MIME_TYPE = "image/webp"


class StickerPackPreviewStrategy(PreviewStrategy):
    kind = LinkKind.STICKER_PACK

    def __init__(self, sticker_service: StickerService):
        self.sticker_service = sticker_service

    def can_handle_url(self, url: str) -> bool:
        return is_sticker_pack_share(url)

    async def build_draft(self, url: str) -> LinkPreviewDraft:
        pack_info = parse_sticker_pack_share(url)
        if pack_info is None:
            logger.error("Could not parse sticker pack share url.")
            raise InvalidPreviewError("Malformed sticker pack share link")

        try:
            # The sticker service reuses locally saved pack data when it can.
            pack = await self.sticker_service.download_sticker_pack(pack_info)
            cover_path = await self.sticker_service.download_sticker(pack, pack.cover)
            cover_data = await asyncio.to_thread(cover_path.read_bytes)
        except Exception as e:
            log_error(
                "sticker_preview",
                e,
                operation="download_sticker_pack",
                context={"pack_id": pack_info.pack_id.hex()},
            )
            raise InvalidPreviewError(f"Could not load sticker pack: {e}") from e

        thumbnail = await derive_thumbnail_async(cover_data, mime_type=STICKER_MIME_TYPE)
        draft = LinkPreviewDraft(url=url, title=filter_for_display(pack.title) or None)
        draft.attach_thumbnail(thumbnail)
        return draft
