"""Call links, local account identity and the credential/state contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit

CALL_LINK_HOST = "signal.link"
CALL_LINK_PATH = "/call"


@dataclass(frozen=True)
class CallLink:
    root_key: bytes

    def __repr__(self) -> str:
        return "CallLink(<redacted>)"


@dataclass(frozen=True)
class LocalIdentifiers:
    aci: str
    pni: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class CallLinkAuthCredential:
    credential: bytes
    redemption_time: int

    def __repr__(self) -> str:
        return f"CallLinkAuthCredential(redemption_time={self.redemption_time})"


@dataclass(frozen=True)
class CallLinkState:
    name: str | None


class AccountManager(Protocol):
    def local_identifiers(self) -> LocalIdentifiers | None:
        """None until the account is registered."""
        ...


class AuthCredentialManager(Protocol):
    async def fetch_call_link_auth_credential(
        self, local_identifiers: LocalIdentifiers
    ) -> CallLinkAuthCredential: ...


class CallLinkService(Protocol):
    def parse_call_link(self, url: str) -> CallLink | None:
        """Decode the root key from a call link URL, None when it is not one."""
        ...

    async def read_call_link(
        self, root_key: bytes, auth_credential: CallLinkAuthCredential
    ) -> CallLinkState: ...


def is_possible_call_link(url: str) -> bool:
    """Cheap shape check for https://signal.link/call/#key=... before root key parsing."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return (
        parts.scheme.lower() == "https"
        and (parts.hostname or "") == CALL_LINK_HOST
        and parts.path.rstrip("/") == CALL_LINK_PATH
        and "key=" in parts.fragment
    )
