"""
Street View Static API capture backend.

Each attempt costs up to two requests: a free metadata lookup that
confirms a panorama exists within `radius` metres, then the billed image
download. A non-OK metadata status stops the attempt before the image
request is sent.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from config import (
    METADATA_CACHE_TTL_HOURS,
    STREETVIEW_IMAGE_URL,
    STREETVIEW_METADATA_URL,
    STREETVIEW_RATE_LIMIT,
    STREETVIEW_TIMEOUT,
)
from panocapture.capture import CaptureParameters
from panocapture.coordinates import Coordinate
from panocapture.errors import TransportError, UnavailableImagery
from panocapture.sizing import resolve_size
from panocapture.utils.cache import FileCache, make_location_key
from panocapture.utils.geo_utils import format_location
from panocapture.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Statuses that describe the location rather than the request, safe to reuse
CACHEABLE_STATUSES = {"OK", "ZERO_RESULTS"}


def build_metadata_params(coord: Coordinate, params: CaptureParameters, api_key: str) -> Dict[str, str]:
    return {
        "location": format_location(coord.lat, coord.lng),
        "key": api_key,
        "radius": str(params.radius),
        "source": params.source,
    }


def build_image_params(
    coord: Coordinate,
    params: CaptureParameters,
    api_key: str,
    size: str,
    scale: int,
) -> Dict[str, str]:
    return {
        "location": format_location(coord.lat, coord.lng),
        "key": api_key,
        "size": size,
        "scale": str(scale),
        "fov": f"{params.fov:g}",
        "pitch": f"{params.pitch:g}",
        "heading": f"{params.heading:g}",
        "radius": str(params.radius),
        "source": params.source,
    }


class StaticApiCapture:
    """Captures panoramas through the Street View Static API."""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        limiter: Optional[RateLimiter] = None,
        metadata_cache: Optional[FileCache] = None,
        timeout: float = STREETVIEW_TIMEOUT,
    ):
        """
        Args:
            api_key: Google Maps API key with Street View Static API enabled.
            session: HTTP session; a new one is created when omitted.
            limiter: Spaces out requests; defaults to STREETVIEW_RATE_LIMIT.
            metadata_cache: Optional cache for metadata lookups.
            timeout: Per-request timeout in seconds.
        """
        self.api_key = api_key
        self.session = session or requests.Session()
        self.limiter = limiter or RateLimiter(STREETVIEW_RATE_LIMIT, name="StreetView")
        self.metadata_cache = metadata_cache
        self.timeout = timeout

    def _get(self, url: str, params: Dict[str, str]) -> requests.Response:
        self.limiter.wait()
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e
        return response

    def fetch_metadata(self, coord: Coordinate, params: CaptureParameters) -> Dict[str, Any]:
        """
        Look up panorama metadata for a coordinate.

        Returns:
            Decoded metadata JSON (at least a 'status' key).

        Raises:
            TransportError: On network/HTTP failure or a body that is not a JSON object.
        """
        cache_key = {**make_location_key(coord.lat, coord.lng), "radius": params.radius, "source": params.source}
        if self.metadata_cache is not None:
            cached = self.metadata_cache.get(cache_key)
            if isinstance(cached, dict):
                logger.debug(f"Metadata cache hit for ({coord.lat:.5f}, {coord.lng:.5f})")
                return cached

        response = self._get(STREETVIEW_METADATA_URL, build_metadata_params(coord, params, self.api_key))
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Metadata response is not JSON: {e}") from e
        if not isinstance(data, dict):
            raise TransportError(f"Metadata response is not a JSON object: {type(data).__name__}")

        if self.metadata_cache is not None and data.get("status") in CACHEABLE_STATUSES:
            self.metadata_cache.set(cache_key, data)
        return data

    def ensure_available(self, coord: Coordinate, params: CaptureParameters) -> Dict[str, Any]:
        """
        Raise UnavailableImagery unless the metadata status is OK.
        """
        data = self.fetch_metadata(coord, params)
        status = data.get("status")
        if status != "OK":
            raise UnavailableImagery(status or "UNKNOWN", data.get("error_message", ""))
        return data

    def capture(self, coord: Coordinate, params: CaptureParameters) -> bytes:
        """
        Download a Street View image for coord.

        Returns:
            Raw image bytes as served by the API (no resizing).

        Raises:
            UnavailableImagery: If no panorama exists near coord.
            TransportError: On network/HTTP failure.
        """
        self.ensure_available(coord, params)

        resolved = resolve_size(params.requested_size, params.scale_hint)
        size = str(resolved.logical)
        logger.debug(
            f"coords={coord.lat},{coord.lng} size={size} "
            f"scale={resolved.scale} heading={params.heading:g}"
        )

        image_params = build_image_params(coord, params, self.api_key, size, resolved.scale)
        response = self._get(STREETVIEW_IMAGE_URL, image_params)
        return response.content


def default_metadata_cache() -> FileCache:
    return FileCache("metadata", ttl_hours=METADATA_CACHE_TTL_HOURS)
