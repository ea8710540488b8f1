"""Call links: title from the call link state, fixed localized description."""

from __future__ import annotations

from link_preview.core.errors import InvalidPreviewError
from link_preview.core.logging import get_logger
from link_preview.models.preview import LinkPreviewDraft
from link_preview.preview_strategies.base_strategy import LinkKind, PreviewStrategy
from link_preview.services.call_links import (
    AccountManager,
    AuthCredentialManager,
    CallLinkService,
    CallLinkState,
    is_possible_call_link,
)
from link_preview.services.localization import (
    CALL_LINK_LINK_PREVIEW_DESCRIPTION,
    SIGNAL_CALL,
    Localizer,
)

logger = get_logger(__name__)


class CallLinkPreviewStrategy(PreviewStrategy):
    kind = LinkKind.CALL_LINK

    def __init__(
        self,
        call_link_service: CallLinkService,
        account_manager: AccountManager,
        auth_credential_manager: AuthCredentialManager,
        localizer: Localizer,
    ):
        self.call_link_service = call_link_service
        self.account_manager = account_manager
        self.auth_credential_manager = auth_credential_manager
        self.localizer = localizer

    def can_handle_url(self, url: str) -> bool:
        return is_possible_call_link(url) and self.call_link_service.parse_call_link(url) is not None

    def _localized_name(self, state: CallLinkState) -> str:
        return state.name or self.localizer.localized(SIGNAL_CALL)

    async def build_draft(self, url: str) -> LinkPreviewDraft:
        call_link = self.call_link_service.parse_call_link(url)
        if call_link is None:
            raise InvalidPreviewError("Malformed call link")

        local_identifiers = self.account_manager.local_identifiers()
        if local_identifiers is None:
            logger.warning("Cannot preview call link before registration.")
            raise InvalidPreviewError("No local account identity")

        # Each step needs the previous step's result.
        auth_credential = await self.auth_credential_manager.fetch_call_link_auth_credential(
            local_identifiers
        )
        state = await self.call_link_service.read_call_link(call_link.root_key, auth_credential)

        return LinkPreviewDraft(
            url=url,
            title=self._localized_name(state),
            description=self.localizer.localized(CALL_LINK_LINK_PREVIEW_DESCRIPTION),
        )
