"""
Candidate coordinates for a capture run.

Reads a map file (JSON or CSV) into a list of Coordinate records. Each
record may override the global heading/pitch/fov/size defaults.

JSON map files are an array whose items are either [lat, lng] pairs or
objects:

    [
      [48.8584, 2.2945],
      {"lat": 40.6892, "lng": -74.0445, "heading": 210, "size": "1280x720"}
    ]
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple

import pandas as pd

from panocapture.errors import ConfigurationError
from panocapture.utils.geo_utils import validate_lat_lng

logger = logging.getLogger(__name__)

OVERRIDE_FIELDS = ("heading", "pitch", "fov")


@dataclass(frozen=True)
class Coordinate:
    """A candidate location with optional per-location capture overrides."""
    lat: float
    lng: float
    heading: Optional[float] = None
    pitch: Optional[float] = None
    fov: Optional[float] = None
    size: Optional[str] = None  # "WIDTHxHEIGHT"


def parse_size(value: Optional[str], fallback: Tuple[int, int]) -> Tuple[int, int]:
    """
    Parse a "WIDTHxHEIGHT" string.

    Returns fallback when value is empty or either side is not a finite number.
    """
    if not value:
        return fallback
    parts = str(value).split("x")[:2]
    if len(parts) < 2:
        return fallback
    width_str, height_str = parts
    try:
        width = float(width_str)
        height = float(height_str)
    except ValueError:
        return fallback
    if not (math.isfinite(width) and math.isfinite(height)):
        return fallback
    return (int(width), int(height))


def coordinate_from_item(item: Any) -> Optional[Coordinate]:
    """
    Build a Coordinate from one decoded map-file item.

    Returns None for items that are neither a [lat, lng] sequence nor an
    object with lat/lng keys.

    Raises:
        InvalidCoordinate: If lat/lng are present but invalid.
        ConfigurationError: If a heading/pitch/fov override is not a number.
    """
    if isinstance(item, (list, tuple)) and len(item) >= 2:
        lat, lng = validate_lat_lng(item[0], item[1])
        return Coordinate(lat=lat, lng=lng)

    if isinstance(item, dict) and "lat" in item and "lng" in item:
        lat, lng = validate_lat_lng(item["lat"], item["lng"])
        overrides = {}
        for name in OVERRIDE_FIELDS:
            if item.get(name) is None:
                continue
            try:
                overrides[name] = float(item[name])
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Invalid {name} {item[name]!r} for coordinate ({lat}, {lng})"
                ) from None
        size = item.get("size")
        return Coordinate(
            lat=lat,
            lng=lng,
            size=size if isinstance(size, str) else None,
            **overrides,
        )

    return None


def _read_json_items(path: Path) -> list:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        raise ConfigurationError(f"Cannot read map file at {path}") from None

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        raise ConfigurationError("Invalid JSON in map file") from None

    if not isinstance(data, list):
        raise ConfigurationError("Map file must be an array of coordinates")
    return data


def _read_csv_items(path: Path) -> list:
    try:
        df = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ConfigurationError(f"Cannot read map file at {path}: {e}") from None

    missing = {"lat", "lng"} - set(df.columns)
    if missing:
        raise ConfigurationError(f"CSV map file is missing column(s): {', '.join(sorted(missing))}")

    # NaN cells mean "no override"
    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


def load_coordinates(path: Path) -> List[Coordinate]:
    """
    Load candidate coordinates from a JSON or CSV map file.

    Args:
        path: Map file. Files ending in .csv are read with pandas, anything
            else is parsed as JSON.

    Returns:
        Coordinates in file order.

    Raises:
        ConfigurationError: If the file is unreadable, malformed, or has no
            usable coordinates.
        InvalidCoordinate: If any entry has out-of-range lat/lng.
    """
    path = Path(path)
    if path.suffix.lower() == ".csv":
        items = _read_csv_items(path)
    else:
        items = _read_json_items(path)

    coords = []
    skipped = 0
    for item in items:
        coord = coordinate_from_item(item)
        if coord is None:
            skipped += 1
            continue
        coords.append(coord)

    if skipped:
        logger.warning(f"Ignored {skipped} unrecognized entries in {path.name}")
    if not coords:
        raise ConfigurationError("Map file contains no valid coordinates")

    logger.info(f"Loaded {len(coords)} candidate coordinates from {path}")
    return coords
