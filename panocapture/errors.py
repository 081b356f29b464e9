"""Exceptions raised while acquiring Street View imagery."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional


class PanoCaptureError(Exception):
    """Base exception for the capture pipeline."""


class ConfigurationError(PanoCaptureError):
    """Raised before any attempt when credentials or the candidate source are unusable."""


class InvalidCoordinate(PanoCaptureError, ValueError):
    """Raised when a latitude/longitude pair is out of range or not numeric."""


class CaptureError(PanoCaptureError):
    """Failure of a single acquisition attempt. The sampler skips the candidate."""


class UnavailableImagery(CaptureError):
    """Raised when the metadata endpoint reports no panorama near the location."""

    def __init__(self, status: str, detail: str = ""):
        self.status = status
        self.detail = detail
        message = f"No Street View available: {status}"
        if detail:
            message += f" - {detail}"
        super().__init__(message)


class TransportError(CaptureError):
    """Raised on connection failures, HTTP status >= 400, or failed navigation."""


class RenderTimeout(CaptureError):
    """Raised when the browser page never became usable within its deadline."""


class CodecError(CaptureError):
    """Raised when post-processing is handed bytes that are not a decodable image."""


class ShortfallError(PanoCaptureError):
    """Raised once per run when fewer images than requested were produced."""

    def __init__(self, produced: int, requested: int, outputs: Optional[List[Path]] = None):
        self.produced = produced
        self.requested = requested
        self.outputs = list(outputs or [])
        super().__init__(
            f"Only generated {produced} of {requested} images "
            f"due to unavailable Street View or errors."
        )
