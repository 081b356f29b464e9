"""
Request-size resolution for the Street View Static API.

The API caps each side of `size` at 640 logical pixels and offers
`scale=2` to double the physical resolution. Given the final pixel size
a caller wants, work out the scale and the logical size to request so
the download is as close to that resolution as the API allows. The
client-side resize in postprocess covers whatever gap remains.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from config import LOGICAL_SIZE_CAP


@dataclass(frozen=True)
class ImageSize:
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class ResolvedSize:
    """Scale factor plus the logical size to send as the API `size` parameter."""
    scale: int
    logical: ImageSize


def effective_scale(requested: ImageSize, scale_hint: Optional[float] = None) -> int:
    """
    Pick the API scale factor (1 or 2).

    A finite hint of exactly 1 gives 1; any other finite hint gives 2.
    Without a hint, 2 is used when either side exceeds LOGICAL_SIZE_CAP.
    """
    if scale_hint is not None and math.isfinite(scale_hint):
        candidate = scale_hint
    elif requested.width > LOGICAL_SIZE_CAP or requested.height > LOGICAL_SIZE_CAP:
        candidate = 2
    else:
        candidate = 1
    return 1 if candidate == 1 else 2


def logical_size(requested: ImageSize, scale: int, cap: int = LOGICAL_SIZE_CAP) -> ImageSize:
    """
    Divide the requested size by scale, then shrink to fit within cap.

    Shrinking keeps the aspect ratio. Each side is at least 1.
    """
    width = math.floor(requested.width / scale)
    height = math.floor(requested.height / scale)
    if width > cap or height > cap:
        # same as min(cap/width, cap/height), without dividing by a zero side
        ratio = min(cap / side for side in (width, height) if side > cap)
        width = math.floor(width * ratio)
        height = math.floor(height * ratio)
    return ImageSize(max(1, width), max(1, height))


def resolve_size(
    requested: ImageSize,
    scale_hint: Optional[float] = None,
    cap: int = LOGICAL_SIZE_CAP,
) -> ResolvedSize:
    """Compute scale and logical size for one Static API request."""
    scale = effective_scale(requested, scale_hint)
    return ResolvedSize(scale=scale, logical=logical_size(requested, scale, cap))
