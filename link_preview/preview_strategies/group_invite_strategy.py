"""Group invite links: preview the group's title and avatar."""

from __future__ import annotations

import logging

from link_preview.core.errors import InvalidPreviewError, is_network_failure
from link_preview.core.logging import get_logger
from link_preview.models.preview import LinkPreviewDraft, PreviewThumbnail
from link_preview.preview_strategies.base_strategy import LinkKind, PreviewStrategy
from link_preview.services.groups import (
    GroupsService,
    is_possible_group_invite_link,
)
from link_preview.thumbnails.thumbnail_deriver import derive_thumbnail_async
from link_preview.utils.error_logger import log_error

logger = get_logger(__name__)


class GroupInvitePreviewStrategy(PreviewStrategy):
    kind = LinkKind.GROUP_INVITE

    def __init__(self, groups_service: GroupsService):
        self.groups_service = groups_service

    def can_handle_url(self, url: str) -> bool:
        return is_possible_group_invite_link(url)

    async def build_draft(self, url: str) -> LinkPreviewDraft:
        invite_link_info = self.groups_service.parse_invite_link(url)
        if invite_link_info is None:
            logger.error("Could not parse group invite URL.")
            raise InvalidPreviewError("Malformed group invite link")

        try:
            context_info = self.groups_service.derive_context_info(invite_link_info.master_key)
        except Exception as e:
            log_error("group_invite_preview", e, operation="derive_context_info")
            raise InvalidPreviewError("Could not derive group context") from e

        invite_preview = await self.groups_service.fetch_group_invite_link_preview(
            invite_link_password=invite_link_info.invite_link_password,
            group_secret_params=context_info.group_secret_params,
            allow_cached=False,
        )

        thumbnail = None
        if invite_preview.avatar_url_path:
            thumbnail = await self._fetch_avatar_thumbnail(
                invite_preview.avatar_url_path, context_info.group_secret_params
            )

        draft = LinkPreviewDraft(url=url, title=invite_preview.title)
        draft.attach_thumbnail(thumbnail)
        return draft

    async def _fetch_avatar_thumbnail(
        self, avatar_url_path: str, group_secret_params: bytes
    ) -> PreviewThumbnail | None:
        """Best effort: every avatar failure yields None, only the log level differs."""
        try:
            avatar_data = await self.groups_service.fetch_group_invite_link_avatar(
                avatar_url_path=avatar_url_path,
                group_secret_params=group_secret_params,
            )
        except Exception as e:
            # Network failures are routine; anything else points at a bug in
            # the group service and is logged as an error.
            level = logging.WARNING if is_network_failure(e) else logging.ERROR
            log_error(
                "group_invite_preview",
                e,
                operation="fetch_group_invite_link_avatar",
                level=level,
            )
            return None
        return await derive_thumbnail_async(avatar_data, mime_type=None)
