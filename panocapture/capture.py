"""
Capture parameters and backend selection.

Two interchangeable backends produce raw JPEG bytes for a coordinate:
StaticApiCapture (Street View Static API) and BrowserCapture (headless
Chromium screenshot). Both satisfy the CaptureStrategy protocol; the run
picks one by mode name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from config import (
    DEFAULT_FIT,
    DEFAULT_FOV,
    DEFAULT_HEADING,
    DEFAULT_HEIGHT,
    DEFAULT_MODE,
    DEFAULT_PITCH,
    DEFAULT_RADIUS,
    DEFAULT_SCALE,
    DEFAULT_SIZE,
    DEFAULT_SOURCE,
    DEFAULT_WIDTH,
)
from panocapture.coordinates import Coordinate, parse_size
from panocapture.errors import ConfigurationError
from panocapture.postprocess import fit_image
from panocapture.sizing import ImageSize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureDefaults:
    """Run-wide defaults, overridable per coordinate (heading, pitch, fov, size)."""
    size: str = DEFAULT_SIZE
    scale: Optional[float] = DEFAULT_SCALE
    heading: float = DEFAULT_HEADING
    pitch: float = DEFAULT_PITCH
    fov: float = DEFAULT_FOV
    radius: int = DEFAULT_RADIUS
    source: str = DEFAULT_SOURCE
    fit: str = DEFAULT_FIT
    mode: str = DEFAULT_MODE


@dataclass(frozen=True)
class CaptureParameters:
    """Fully resolved settings for one acquisition attempt."""
    lat: float
    lng: float
    heading: float
    pitch: float
    fov: float
    requested_size: ImageSize
    scale_hint: Optional[float]
    radius: int
    source: str
    fit: str
    mode: str


def build_capture_params(coord: Coordinate, defaults: CaptureDefaults) -> CaptureParameters:
    """Merge run defaults with the coordinate's own overrides."""
    width, height = parse_size(coord.size or defaults.size, (DEFAULT_WIDTH, DEFAULT_HEIGHT))
    return CaptureParameters(
        lat=coord.lat,
        lng=coord.lng,
        heading=coord.heading if coord.heading is not None else defaults.heading,
        pitch=coord.pitch if coord.pitch is not None else defaults.pitch,
        fov=coord.fov if coord.fov is not None else defaults.fov,
        requested_size=ImageSize(width, height),
        scale_hint=defaults.scale,
        radius=defaults.radius,
        source=defaults.source,
        fit=defaults.fit,
        mode=defaults.mode,
    )


class CaptureStrategy(Protocol):
    """Anything that turns a coordinate into raw image bytes."""

    def capture(self, coord: Coordinate, params: CaptureParameters) -> bytes:
        ...


def make_strategy(mode: str, api_key: str, **options) -> CaptureStrategy:
    """
    Build the capture backend for a mode name ('api' or 'browser').

    Extra keyword options are passed to the backend constructor.

    Raises:
        ConfigurationError: For an unknown mode.
    """
    # Imported here so API-only runs never import Playwright
    if mode == "api":
        from panocapture.streetview_api import StaticApiCapture
        return StaticApiCapture(api_key, **options)
    if mode == "browser":
        from panocapture.browser_capture import BrowserCapture
        return BrowserCapture(api_key, **options)
    raise ConfigurationError(f"Unknown capture mode: {mode!r} (expected 'api' or 'browser')")


def make_attempt(
    strategy: CaptureStrategy,
    defaults: CaptureDefaults,
) -> Callable[[Coordinate], bytes]:
    """
    Bind a backend and run defaults into a per-candidate attempt function.

    The returned callable resolves parameters, captures, and resizes to the
    requested size. It raises CaptureError subclasses on failure.
    """
    def attempt(coord: Coordinate) -> bytes:
        params = build_capture_params(coord, defaults)
        raw = strategy.capture(coord, params)
        return fit_image(raw, params.requested_size, params.fit)

    return attempt
