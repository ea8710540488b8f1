"""Group invite links and the group service contract.

Decoding invite payloads and deriving group secret parameters is the group
service's job; this module only recognises candidate links.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit

GROUP_INVITE_HOST = "signal.group"
GROUP_INVITE_SCHEMES = {"https", "sgnl"}


@dataclass(frozen=True)
class GroupInviteLinkInfo:
    master_key: bytes
    invite_link_password: bytes

    def __repr__(self) -> str:
        return "GroupInviteLinkInfo(<redacted>)"


@dataclass(frozen=True)
class GroupContextInfo:
    group_secret_params: bytes

    def __repr__(self) -> str:
        return "GroupContextInfo(<redacted>)"


@dataclass(frozen=True)
class GroupInviteLinkPreview:
    title: str | None
    avatar_url_path: str | None = None


class GroupsService(Protocol):
    def parse_invite_link(self, url: str) -> GroupInviteLinkInfo | None: ...

    def derive_context_info(self, master_key: bytes) -> GroupContextInfo:
        """Raises on malformed key material."""
        ...

    async def fetch_group_invite_link_preview(
        self,
        invite_link_password: bytes,
        group_secret_params: bytes,
        allow_cached: bool,
    ) -> GroupInviteLinkPreview: ...

    async def fetch_group_invite_link_avatar(
        self, avatar_url_path: str, group_secret_params: bytes
    ) -> bytes: ...


def is_possible_group_invite_link(url: str) -> bool:
    """True for https://signal.group/#... (or sgnl://signal.group/#...) links."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return (
        parts.scheme.lower() in GROUP_INVITE_SCHEMES
        and (parts.hostname or "") == GROUP_INVITE_HOST
        and bool(parts.fragment)
    )
