"""
On-disk JSON cache for Street View metadata lookups.

Metadata answers ("is there a panorama near here?") rarely change, so
repeated runs over the same map file can skip the lookup entirely.
Entries live as one JSON file per key under .cache/<namespace>/.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config import CACHE_DIR

logger = logging.getLogger(__name__)


class FileCache:
    """Namespaced JSON file cache with optional expiry."""

    def __init__(self, namespace: str, cache_dir: Path = CACHE_DIR, ttl_hours: float = 0):
        """
        Args:
            namespace: Subdirectory under cache_dir (e.g. 'metadata').
            cache_dir: Root cache directory.
            ttl_hours: Entry lifetime in hours; 0 keeps entries forever.
        """
        self.directory = Path(cache_dir) / namespace
        self.ttl_seconds = ttl_hours * 3600 if ttl_hours > 0 else 0

    def _entry_path(self, key: Dict[str, Any]) -> Path:
        digest = hashlib.sha256(
            json.dumps(key, sort_keys=True, default=str).encode()
        ).hexdigest()[:16]
        return self.directory / f"{digest}.json"

    def get(self, key: Dict[str, Any]) -> Optional[Any]:
        """Return the cached value for key, or None when missing, stale, or unreadable."""
        path = self._entry_path(key)
        if not path.exists():
            return None

        try:
            entry = json.loads(path.read_text())
            stored_at = entry["stored_at"]
            value = entry["value"]
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Dropping unreadable cache entry {path.name}: {e}")
            path.unlink(missing_ok=True)
            return None

        if self.ttl_seconds and time.time() - stored_at > self.ttl_seconds:
            logger.debug(f"Cache entry {path.name} expired")
            path.unlink(missing_ok=True)
            return None

        return value

    def set(self, key: Dict[str, Any], value: Any) -> None:
        """Store value under key, creating the namespace directory on first write."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._entry_path(key)
        path.write_text(json.dumps({"stored_at": time.time(), "key": key, "value": value}))
        logger.debug(f"Cached {path.name}")

    def clear(self) -> int:
        """Delete every entry in this namespace. Returns the number removed."""
        if not self.directory.exists():
            return 0
        removed = 0
        for path in self.directory.glob("*.json"):
            path.unlink()
            removed += 1
        logger.info(f"Cleared {removed} entries from {self.directory}")
        return removed


def make_location_key(lat: float, lng: float, precision: int = 5) -> Dict[str, float]:
    """
    Cache key fragment for a coordinate, rounded to the given precision.

    Five decimal places is about 1 m, well inside any search radius.
    """
    return {"lat": round(lat, precision), "lng": round(lng, precision)}
