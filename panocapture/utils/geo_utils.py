"""
Geographic utility functions.

Coordinate validation and formatting for API parameters.
"""

from __future__ import annotations

import math
from typing import Any, Tuple

from panocapture.errors import InvalidCoordinate

Coord = Tuple[float, float]  # (lat, lng)


def validate_lat_lng(lat: Any, lng: Any) -> Coord:
    """
    Coerce and range-check a latitude/longitude pair.

    Args:
        lat: Latitude, anything float() accepts.
        lng: Longitude, anything float() accepts.

    Returns:
        (lat, lng) as floats.

    Raises:
        InvalidCoordinate: If either value is not a finite number or is out of range.
    """
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        raise InvalidCoordinate(f"Invalid coordinates: lat={lat!r}, lng={lng!r}") from None

    lat_ok = math.isfinite(lat_f) and -90 <= lat_f <= 90
    lng_ok = math.isfinite(lng_f) and -180 <= lng_f <= 180
    if not (lat_ok and lng_ok):
        raise InvalidCoordinate(
            f"Invalid coordinates: lat={lat!r}, lng={lng!r} "
            "(lat must be within [-90, 90], lng within [-180, 180])"
        )
    return (lat_f, lng_f)


def format_location(lat: float, lng: float) -> str:
    """Format a coordinate the way Google Maps URLs expect it: 'lat,lng'."""
    return f"{format_number(lat)},{format_number(lng)}"


def format_number(value: float) -> str:
    """Render a float without a trailing .0 for whole numbers."""
    # 40.0 -> "40", 40.5 -> "40.5"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
