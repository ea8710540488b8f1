"""Image format and size probing backed by Pillow."""

from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from link_preview.core.logging import get_logger

logger = get_logger(__name__)

# Pillow format names for the mime types callers may hint with.
MIME_TYPE_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
    "image/bmp": "BMP",
    "image/tiff": "TIFF",
    "image/x-icon": "ICO",
    "image/vnd.microsoft.icon": "ICO",
}

_ALPHA_MODES = {"RGBA", "RGBa", "LA", "La", "PA"}

PROBE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError)


@dataclass(frozen=True)
class ImageMetadata:
    """What a cheap header probe tells us about untrusted image bytes."""

    image_format: str
    width: int
    height: int
    has_alpha: bool

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def mime_type(self) -> str | None:
        return Image.MIME.get(self.image_format)


def pillow_format_for_mime_type(mime_type: str | None) -> str | None:
    if not mime_type:
        return None
    return MIME_TYPE_FORMATS.get(mime_type.split(";", 1)[0].strip().lower())


def image_has_alpha(image: Image.Image) -> bool:
    return image.mode in _ALPHA_MODES or "transparency" in image.info


def probe_image(data: bytes, mime_type: str | None = None) -> ImageMetadata | None:
    """Identify the container format, pixel size and alpha channel of data.

    Only the header is parsed; pixel data is not decoded. A mime type hint
    restricts the formats the data may be identified as.

    Returns:
        ImageMetadata, or None when the bytes are not a recognisable image.
    """
    hinted_format = pillow_format_for_mime_type(mime_type)
    formats = [hinted_format] if hinted_format else None
    try:
        with Image.open(io.BytesIO(data), formats=formats) as image:
            if not image.format:
                return None
            width, height = image.size
            return ImageMetadata(
                image_format=image.format,
                width=width,
                height=height,
                has_alpha=image_has_alpha(image),
            )
    except PROBE_ERRORS as e:
        logger.debug(f"Could not identify image ({len(data)} bytes): {e}")
        return None
