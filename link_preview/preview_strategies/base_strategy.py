"""
This module defines the link kinds and the abstract base class for link
preview strategies.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from link_preview.models.preview import LinkPreviewDraft


class LinkKind(str, Enum):
    """Closed set of link kinds, in classification priority order."""

    STICKER_PACK = "sticker_pack"
    GROUP_INVITE = "group_invite"
    CALL_LINK = "call_link"
    GENERIC = "generic"


class PreviewStrategy(ABC):
    """
    Builds a link preview draft for one kind of link.
    Exactly one strategy exists per LinkKind.
    """

    kind: ClassVar[LinkKind]

    @abstractmethod
    def can_handle_url(self, url: str) -> bool:
        """
        Determines if this strategy is responsible for the given URL.
        Must not touch the network.

        Args:
            url: The URL the user shared.

        Returns:
            True if the strategy can build a preview for this URL.
        """

    @abstractmethod
    async def build_draft(self, url: str) -> LinkPreviewDraft:
        """
        Runs the pipeline for this link kind.

        Args:
            url: The URL the user shared; becomes the draft's url.

        Returns:
            A draft, possibly invalid; validation is the caller's job.

        Raises:
            LinkPreviewError: Typed failures from the pipeline.
        """
