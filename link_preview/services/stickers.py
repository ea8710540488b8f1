"""Sticker pack share links and the sticker service contract."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import parse_qs, urlsplit

STICKER_SHARE_HOST = "signal.art"
STICKER_SHARE_PATH = "/addstickers"
PACK_ID_LENGTH = 16
PACK_KEY_LENGTH = 32


@dataclass(frozen=True)
class StickerPackInfo:
    pack_id: bytes
    pack_key: bytes

    def __repr__(self) -> str:
        return f"StickerPackInfo(pack_id={self.pack_id.hex()})"


@dataclass(frozen=True)
class StickerInfo:
    pack_id: bytes
    pack_key: bytes
    sticker_id: int


@dataclass(frozen=True)
class StickerPack:
    info: StickerPackInfo
    title: str | None
    author: str | None
    cover: StickerInfo


class StickerService(Protocol):
    """Downloads sticker packs, reusing locally saved data when possible."""

    async def download_sticker_pack(self, info: StickerPackInfo) -> StickerPack: ...

    async def download_sticker(self, pack: StickerPack, sticker: StickerInfo) -> Path: ...


def is_sticker_pack_share(url: str) -> bool:
    """True for https://signal.art/addstickers/... links (fragment not inspected)."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return False
    return (
        parts.scheme.lower() == "https"
        and parts.username is None
        and parts.password is None
        and port is None
        and (parts.hostname or "") == STICKER_SHARE_HOST
        and parts.path.rstrip("/") == STICKER_SHARE_PATH
    )


def _parse_hex(value: str | None, length: int) -> bytes | None:
    if not value:
        return None
    try:
        decoded = bytes.fromhex(value)
    except ValueError:
        return None
    return decoded if len(decoded) == length else None


def parse_sticker_pack_share(url: str) -> StickerPackInfo | None:
    """Extract pack id and key from the fragment of a sticker share link.

    Example: https://signal.art/addstickers/#pack_id=<32 hex>&pack_key=<64 hex>
    """
    if not is_sticker_pack_share(url):
        return None
    params = parse_qs(urlsplit(url).fragment)
    pack_id = _parse_hex(next(iter(params.get("pack_id", [])), None), PACK_ID_LENGTH)
    pack_key = _parse_hex(next(iter(params.get("pack_key", [])), None), PACK_KEY_LENGTH)
    if pack_id is None or pack_key is None:
        return None
    return StickerPackInfo(pack_id=pack_id, pack_key=pack_key)
