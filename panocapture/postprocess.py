"""
Client-side resize of captured images to the exact requested size.

The Static API can only deliver up to 640 logical pixels per side (1280
physical at scale 2), so a 1920x1080 request arrives as 1280x720 and is
upscaled here. Fit modes follow the usual raster-resize meanings:

    cover    crop to fill the target box exactly
    contain  letterbox inside the target box (black bars)
    fill     stretch to the target box, ignoring aspect ratio
    inside   largest aspect-preserving size that fits within the box
    outside  smallest aspect-preserving size that covers the box
"""

from __future__ import annotations

import io
import logging
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from config import FIT_MODES, JPEG_QUALITY
from panocapture.errors import CodecError
from panocapture.sizing import ImageSize

logger = logging.getLogger(__name__)

RESAMPLE = Image.Resampling.LANCZOS
LETTERBOX_COLOR = (0, 0, 0)


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into an image, raising CodecError if they are not an image."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise CodecError(f"Cannot decode image ({len(data)} bytes): {e}") from e
    return image


def encode_jpeg(image: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def _scaled(source: Tuple[int, int], ratio: float) -> Tuple[int, int]:
    return (max(1, round(source[0] * ratio)), max(1, round(source[1] * ratio)))


def resize_with_fit(image: Image.Image, target: ImageSize, fit: str) -> Image.Image:
    """
    Resize image toward target using the named fit mode.

    Raises:
        ValueError: For an unknown fit mode.
    """
    box = (target.width, target.height)
    if fit == "cover":
        return ImageOps.fit(image, box, method=RESAMPLE)
    if fit == "contain":
        return ImageOps.pad(image, box, method=RESAMPLE, color=LETTERBOX_COLOR)
    if fit == "fill":
        return image.resize(box, RESAMPLE)
    if fit == "inside":
        ratio = min(box[0] / image.width, box[1] / image.height)
        return image.resize(_scaled(image.size, ratio), RESAMPLE)
    if fit == "outside":
        ratio = max(box[0] / image.width, box[1] / image.height)
        return image.resize(_scaled(image.size, ratio), RESAMPLE)
    raise ValueError(f"Unknown fit mode: {fit!r} (expected one of {', '.join(FIT_MODES)})")


def fit_image(
    data: bytes,
    target: Optional[ImageSize],
    fit: str = "cover",
    quality: int = JPEG_QUALITY,
) -> bytes:
    """
    Resize captured bytes to target and re-encode as JPEG.

    Returns data untouched when no target is given, either side is
    non-positive, or data is already a JPEG of exactly the target size.

    Raises:
        CodecError: If data is not a decodable image.
    """
    if target is None or target.width <= 0 or target.height <= 0:
        return data

    image = decode_image(data)
    if image.format == "JPEG" and image.size == (target.width, target.height):
        return data
    if image.mode != "RGB":
        image = image.convert("RGB")

    resized = resize_with_fit(image, target, fit)
    logger.debug(f"Resized {image.width}x{image.height} -> {resized.width}x{resized.height} ({fit})")
    return encode_jpeg(resized, quality)
