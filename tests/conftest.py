"""Shared fixtures: in-memory images, a stubbed HTTP transport and fake services."""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from PIL import Image

from link_preview.http_client.preview_http_client import FetchSessionConfig, PreviewHttpClient
from link_preview.services.call_links import (
    CallLink,
    CallLinkAuthCredential,
    CallLinkState,
    LocalIdentifiers,
)
from link_preview.services.groups import (
    GroupContextInfo,
    GroupInviteLinkInfo,
    GroupInviteLinkPreview,
)
from link_preview.services.stickers import StickerInfo, StickerPack, StickerPackInfo

PACK_ID_HEX = "00112233445566778899aabbccddeeff"
PACK_KEY_HEX = "ab" * 32
STICKER_SHARE_URL = f"https://signal.art/addstickers/#pack_id={PACK_ID_HEX}&pack_key={PACK_KEY_HEX}"
GROUP_INVITE_URL = "https://signal.group/#CjQKIPLm1sD8n6bL9ZoZ3WR2mPvNZNFh0ixmwx1Es0gIxc6pEhC0Wc"
CALL_LINK_URL = "https://signal.link/call/#key=bcdf-ghkm-npqr-stxz-bcdf-ghkm-npqr-stxz"


def make_image_bytes(
    image_format: str = "PNG",
    size: tuple[int, int] = (64, 48),
    mode: str = "RGB",
    **save_kwargs,
) -> bytes:
    color = {"RGB": (20, 120, 220), "RGBA": (200, 30, 30, 128), "LA": (120, 128)}.get(mode, 120)
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=image_format, **save_kwargs)
    return buffer.getvalue()


def make_animated_webp(size: tuple[int, int] = (80, 60)) -> bytes:
    frames = [Image.new("RGB", size, (255, 0, 0)), Image.new("RGB", size, (0, 0, 255))]
    buffer = io.BytesIO()
    frames[0].save(
        buffer,
        format="WEBP",
        save_all=True,
        append_images=frames[1:],
        duration=100,
        loop=0,
    )
    return buffer.getvalue()


def image_size(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as image:
        return image.size


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    return make_image_bytes


@pytest.fixture
def make_http_client() -> Callable[..., PreviewHttpClient]:
    """Build a PreviewHttpClient whose network is the given request handler."""

    def _build(handler: Callable[[httpx.Request], httpx.Response], **config) -> PreviewHttpClient:
        return PreviewHttpClient(
            config=FetchSessionConfig(**config),
            transport=httpx.MockTransport(handler),
        )

    return _build


class FakeSettingsStore:
    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def are_link_previews_enabled(self) -> bool:
        return self.enabled


class FakeStickerService:
    def __init__(self, tmp_path: Path, cover_data: bytes | None = None, title: str | None = "Pack"):
        self.tmp_path = tmp_path
        self.cover_data = cover_data
        self.title = title
        self.download_error: Exception | None = None
        self.requested: list[StickerPackInfo] = []

    async def download_sticker_pack(self, info: StickerPackInfo) -> StickerPack:
        self.requested.append(info)
        if self.download_error is not None:
            raise self.download_error
        cover = StickerInfo(pack_id=info.pack_id, pack_key=info.pack_key, sticker_id=0)
        return StickerPack(info=info, title=self.title, author=None, cover=cover)

    async def download_sticker(self, pack: StickerPack, sticker: StickerInfo) -> Path:
        path = self.tmp_path / f"{pack.info.pack_id.hex()}-{sticker.sticker_id}.webp"
        path.write_bytes(self.cover_data or b"")
        return path


class FakeGroupsService:
    def __init__(self, preview: GroupInviteLinkPreview | None = None, avatar: bytes | None = None):
        self.preview = preview or GroupInviteLinkPreview(title="Book Club")
        self.avatar = avatar
        self.parse_result: GroupInviteLinkInfo | None = GroupInviteLinkInfo(
            master_key=b"\x01" * 32, invite_link_password=b"\x02" * 16
        )
        self.derive_error: Exception | None = None
        self.avatar_error: Exception | None = None
        self.preview_calls: list[dict] = []

    def parse_invite_link(self, url: str) -> GroupInviteLinkInfo | None:
        return self.parse_result

    def derive_context_info(self, master_key: bytes) -> GroupContextInfo:
        if self.derive_error is not None:
            raise self.derive_error
        return GroupContextInfo(group_secret_params=b"secret:" + master_key)

    async def fetch_group_invite_link_preview(
        self, invite_link_password: bytes, group_secret_params: bytes, allow_cached: bool
    ) -> GroupInviteLinkPreview:
        self.preview_calls.append(
            {
                "invite_link_password": invite_link_password,
                "group_secret_params": group_secret_params,
                "allow_cached": allow_cached,
            }
        )
        return self.preview

    async def fetch_group_invite_link_avatar(
        self, avatar_url_path: str, group_secret_params: bytes
    ) -> bytes:
        if self.avatar_error is not None:
            raise self.avatar_error
        return self.avatar or b""


class FakeAccountManager:
    def __init__(self, identifiers: LocalIdentifiers | None = None):
        self.identifiers = identifiers

    def local_identifiers(self) -> LocalIdentifiers | None:
        return self.identifiers


class FakeAuthCredentialManager:
    def __init__(self):
        self.requested_for: list[LocalIdentifiers] = []

    async def fetch_call_link_auth_credential(
        self, local_identifiers: LocalIdentifiers
    ) -> CallLinkAuthCredential:
        self.requested_for.append(local_identifiers)
        return CallLinkAuthCredential(credential=b"cred", redemption_time=1_700_000_000)


class FakeCallLinkService:
    def __init__(self, state: CallLinkState | None = None):
        self.state = state or CallLinkState(name="Team Standup")
        self.reads: list[tuple[bytes, CallLinkAuthCredential]] = []

    def parse_call_link(self, url: str) -> CallLink | None:
        if url.startswith("https://signal.link/call/#key="):
            return CallLink(root_key=url.rsplit("=", 1)[1].encode())
        return None

    async def read_call_link(
        self, root_key: bytes, auth_credential: CallLinkAuthCredential
    ) -> CallLinkState:
        self.reads.append((root_key, auth_credential))
        return self.state


@pytest.fixture
def settings_store() -> FakeSettingsStore:
    return FakeSettingsStore()


@pytest.fixture
def sticker_service(tmp_path: Path) -> FakeStickerService:
    return FakeStickerService(tmp_path, cover_data=make_image_bytes("WEBP", (512, 512), "RGBA"))


@pytest.fixture
def groups_service() -> FakeGroupsService:
    return FakeGroupsService()


@pytest.fixture
def account_manager() -> FakeAccountManager:
    return FakeAccountManager(LocalIdentifiers(aci="aci-1234"))


@pytest.fixture
def auth_credential_manager() -> FakeAuthCredentialManager:
    return FakeAuthCredentialManager()


@pytest.fixture
def call_link_service() -> FakeCallLinkService:
    return FakeCallLinkService()
