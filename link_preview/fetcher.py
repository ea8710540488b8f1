"""Entry point: turn a shared URL into a validated link preview draft."""

from __future__ import annotations

from link_preview.core.errors import FeatureDisabledError, NoPreviewError
from link_preview.core.logging import get_logger
from link_preview.http_client.preview_http_client import PreviewHttpClient
from link_preview.models.preview import LinkPreviewDraft
from link_preview.preview_strategies.call_link_strategy import CallLinkPreviewStrategy
from link_preview.preview_strategies.generic_strategy import GenericPreviewStrategy
from link_preview.preview_strategies.group_invite_strategy import GroupInvitePreviewStrategy
from link_preview.preview_strategies.registry import StrategyRegistry
from link_preview.preview_strategies.sticker_strategy import StickerPackPreviewStrategy
from link_preview.services.call_links import (
    AccountManager,
    AuthCredentialManager,
    CallLinkService,
)
from link_preview.services.groups import GroupsService
from link_preview.services.localization import DefaultLocalizer, Localizer
from link_preview.services.settings_store import LinkPreviewSettingStore
from link_preview.services.stickers import StickerService

logger = get_logger(__name__)


class LinkPreviewFetcher:
    """
    Builds link preview drafts.

    Holds no per-request state: concurrent calls, even for the same URL,
    run independently and each opens its own HTTP session.
    """

    def __init__(
        self,
        *,
        settings_store: LinkPreviewSettingStore,
        sticker_service: StickerService,
        groups_service: GroupsService,
        call_link_service: CallLinkService,
        account_manager: AccountManager,
        auth_credential_manager: AuthCredentialManager,
        localizer: Localizer | None = None,
        http_client: PreviewHttpClient | None = None,
    ):
        self.settings_store = settings_store
        self.registry = StrategyRegistry(
            [
                StickerPackPreviewStrategy(sticker_service),
                GroupInvitePreviewStrategy(groups_service),
                CallLinkPreviewStrategy(
                    call_link_service,
                    account_manager,
                    auth_credential_manager,
                    localizer or DefaultLocalizer(),
                ),
                GenericPreviewStrategy(http_client or PreviewHttpClient()),
            ]
        )

    async def fetch_link_preview(self, url: str) -> LinkPreviewDraft:
        """
        Fetch a preview draft for url.

        Raises:
            FeatureDisabledError: Link previews are off; nothing was fetched.
            NoPreviewError: The draft has neither a title nor an image.
            LinkPreviewError: Other typed failures from the selected pipeline.
        """
        if not self.settings_store.are_link_previews_enabled():
            raise FeatureDisabledError("Link previews are disabled")

        strategy = self.registry.get_strategy(url)
        draft = await strategy.build_draft(url)
        if not draft.is_valid():
            logger.info(f"No usable preview for {url} ({strategy.kind.value})")
            raise NoPreviewError("Preview has neither a title nor an image")
        return draft
