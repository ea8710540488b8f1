"""
Still-thumbnail derivation for link previews.

Takes image bytes of unknown origin and produces a size-bounded still image,
or None. Every failure degrades to None so that a title-only preview can
still be shown.
"""

from __future__ import annotations

import asyncio
import io

from PIL import Image, ImageOps

from link_preview.core.logging import get_logger
from link_preview.models.preview import PreviewThumbnail
from link_preview.thumbnails.image_metadata import (
    PROBE_ERRORS,
    ImageMetadata,
    probe_image,
)
from link_preview.utils.error_logger import log_error

logger = get_logger(__name__)

MAX_IMAGE_DIMENSION = 2400
JPEG_QUALITY = 80
# Largest bitmap decoded in full. JPEGs are measured after decoder downscaling.
MAX_DECODE_PIXELS = 24_000_000

PNG_MIME_TYPE = "image/png"
JPEG_MIME_TYPE = "image/jpeg"

# Formats returned untouched when they already fit.
PASSTHROUGH_FORMATS = {"JPEG", "PNG"}
# Containers that may be animated and need a dedicated still-frame decode.
STILL_FRAME_FORMATS = {"WEBP"}


def _should_resize(width: int, height: int) -> bool:
    return width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION


def _resized(image: Image.Image) -> Image.Image | None:
    """Scale image down to fit MAX_IMAGE_DIMENSION, preserving aspect ratio."""
    if not _should_resize(*image.size):
        return image
    try:
        resized = image.copy()
        resized.thumbnail((MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION), Image.Resampling.LANCZOS)
    except (OSError, ValueError, MemoryError) as e:
        logger.warning(f"Could not resize image from {image.size}: {e}")
        return None
    return resized


def _decode_still(data: bytes, image_format: str) -> Image.Image | None:
    """Decode the first frame of data into an in-memory bitmap within MAX_DECODE_PIXELS."""
    try:
        with Image.open(io.BytesIO(data), formats=[image_format]) as source:
            source.seek(0)
            if image_format == "JPEG":
                # Let libjpeg downscale by 1/2, 1/4 or 1/8 while decoding.
                source.draft(None, (MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION))
            width, height = source.size
            if width * height > MAX_DECODE_PIXELS:
                logger.warning(f"Refusing to decode {image_format} image of {width}x{height} pixels")
                return None
            still = source.copy()
    except PROBE_ERRORS as e:
        logger.warning(f"Could not decode {image_format} image: {e}")
        return None
    return still


def _verify(data: bytes, image_format: str) -> bool:
    """Structural check for bytes that are passed through without decoding."""
    try:
        with Image.open(io.BytesIO(data), formats=[image_format]) as image:
            image.verify()
    except PROBE_ERRORS as e:
        logger.warning(f"Rejecting corrupt {image_format} image: {e}")
        return False
    return True


def _encode_png(image: Image.Image) -> bytes | None:
    if image.mode not in {"1", "L", "LA", "RGB", "RGBA"}:
        image = image.convert("RGBA")
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="PNG", optimize=True)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not write image to PNG: {e}")
        return None
    return buffer.getvalue()


def _encode_jpeg(image: Image.Image) -> bytes | None:
    if image.mode not in {"L", "RGB"}:
        image = image.convert("RGB")
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not write image to JPEG: {e}")
        return None
    return buffer.getvalue()


def _thumbnail_from_still_frame(data: bytes, metadata: ImageMetadata) -> PreviewThumbnail | None:
    # Animated containers are never handed to the generic decoder.
    still = _decode_still(data, metadata.image_format)
    if still is None:
        logger.warning(f"Couldn't derive still image for {metadata.image_format}.")
        return None

    still = _resized(still)
    if still is None:
        return None

    png_data = _encode_png(still)
    if png_data is None:
        return None
    return PreviewThumbnail(image_data=png_data, mime_type=PNG_MIME_TYPE)


def _thumbnail_from_still_image(data: bytes, metadata: ImageMetadata) -> PreviewThumbnail | None:
    mime_type = metadata.mime_type
    if mime_type is None:
        logger.warning(f"Unknown mimetype for thumbnail format {metadata.image_format}.")
        return None

    if metadata.image_format in PASSTHROUGH_FORMATS and not _should_resize(
        metadata.width, metadata.height
    ):
        # Already acceptable: skip a lossy round trip.
        if not _verify(data, metadata.image_format):
            return None
        return PreviewThumbnail(image_data=data, mime_type=mime_type)

    image = _decode_still(data, metadata.image_format)
    if image is None:
        return None
    image = ImageOps.exif_transpose(image)

    image = _resized(image)
    if image is None:
        return None

    if metadata.has_alpha:
        png_data = _encode_png(image)
        return PreviewThumbnail(image_data=png_data, mime_type=PNG_MIME_TYPE) if png_data else None

    jpeg_data = _encode_jpeg(image)
    return PreviewThumbnail(image_data=jpeg_data, mime_type=JPEG_MIME_TYPE) if jpeg_data else None


def derive_thumbnail(image_data: bytes | None, mime_type: str | None = None) -> PreviewThumbnail | None:
    """Derive a preview thumbnail from untrusted image bytes.

    Args:
        image_data: Raw bytes as downloaded or read from disk.
        mime_type: Optional hint; when given the bytes must be of that format.
            Web images pass None and are sniffed from their content.

    Returns:
        A still thumbnail no larger than MAX_IMAGE_DIMENSION on either side,
        or None when the data cannot be turned into one.
    """
    if not image_data:
        return None

    try:
        metadata = probe_image(image_data, mime_type)
        if metadata is None or not metadata.is_valid:
            return None
        if metadata.image_format in STILL_FRAME_FORMATS:
            return _thumbnail_from_still_frame(image_data, metadata)
        return _thumbnail_from_still_image(image_data, metadata)
    except Exception as e:
        # Decoders run on attacker-controlled bytes; any failure means "no thumbnail".
        log_error(
            "thumbnail_deriver",
            e,
            operation="derive_thumbnail",
            context={"size": len(image_data), "mime_type": mime_type},
        )
        return None


async def derive_thumbnail_async(
    image_data: bytes | None, mime_type: str | None = None
) -> PreviewThumbnail | None:
    """Run derive_thumbnail off the event loop."""
    return await asyncio.to_thread(derive_thumbnail, image_data, mime_type)
