"""Tests for geo helpers, the rate limiter and the file cache."""

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from panocapture.errors import InvalidCoordinate
from panocapture.utils.cache import FileCache, make_location_key
from panocapture.utils.geo_utils import format_location, validate_lat_lng
from panocapture.utils.rate_limiter import RateLimiter


class TestGeoUtils:
    def test_validate_returns_floats(self):
        assert validate_lat_lng("12.5", 3) == (12.5, 3.0)

    def test_validate_rejects_latitude_91(self):
        with pytest.raises(InvalidCoordinate):
            validate_lat_lng(91, 0)

    def test_invalid_coordinate_is_value_error(self):
        with pytest.raises(ValueError):
            validate_lat_lng(None, 0)

    def test_format_location(self):
        assert format_location(40.0, -74.25) == "40,-74.25"
        assert format_location(48.8584, 2.2945) == "48.8584,2.2945"


class FakeClock:
    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class TestRateLimiter:
    def test_first_call_does_not_wait(self):
        clock = FakeClock()
        limiter = RateLimiter(2, clock=clock, sleep=clock.sleep)
        assert limiter.wait() == 0.0
        assert clock.sleeps == []

    def test_back_to_back_calls_are_spaced(self):
        clock = FakeClock()
        limiter = RateLimiter(2, clock=clock, sleep=clock.sleep)
        limiter.wait()
        clock.now += 0.2
        assert limiter.wait() == pytest.approx(0.3)

    def test_slow_callers_are_not_delayed(self):
        clock = FakeClock()
        limiter = RateLimiter(2, clock=clock, sleep=clock.sleep)
        limiter.wait()
        clock.now += 5
        assert limiter.wait() == 0.0

    def test_zero_rate_disables(self):
        clock = FakeClock()
        limiter = RateLimiter(0, clock=clock, sleep=clock.sleep)
        limiter.wait()
        assert limiter.wait() == 0.0


class TestFileCache:
    def test_round_trip_and_miss(self, tmp_path):
        cache = FileCache("metadata", cache_dir=tmp_path)
        assert cache.get({"lat": 1}) is None
        cache.set({"lat": 1}, {"status": "OK"})
        assert cache.get({"lat": 1}) == {"status": "OK"}
        assert cache.get({"lat": 2}) is None

    def test_no_directory_until_first_write(self, tmp_path):
        cache = FileCache("metadata", cache_dir=tmp_path)
        cache.get({"lat": 1})
        assert not (tmp_path / "metadata").exists()

    def test_expired_entries_are_dropped(self, tmp_path):
        cache = FileCache("metadata", cache_dir=tmp_path, ttl_hours=1)
        with patch("panocapture.utils.cache.time.time", return_value=1000.0):
            cache.set({"k": 1}, "v")
        with patch("panocapture.utils.cache.time.time", return_value=1000.0 + 3601):
            assert cache.get({"k": 1}) is None
        assert list((tmp_path / "metadata").glob("*.json")) == []

    def test_corrupt_entry_is_removed(self, tmp_path):
        cache = FileCache("metadata", cache_dir=tmp_path)
        cache.set({"k": 1}, "v")
        entry = next((tmp_path / "metadata").glob("*.json"))
        entry.write_text("{not json")
        assert cache.get({"k": 1}) is None
        assert not entry.exists()

    def test_clear(self, tmp_path):
        cache = FileCache("metadata", cache_dir=tmp_path)
        assert cache.clear() == 0
        cache.set({"k": 1}, "a")
        cache.set({"k": 2}, "b")
        assert cache.clear() == 2
        assert cache.get({"k": 1}) is None

    def test_entries_are_json(self, tmp_path):
        cache = FileCache("metadata", cache_dir=tmp_path)
        cache.set({"k": 1}, [1, 2])
        entry = json.loads(next((tmp_path / "metadata").glob("*.json")).read_text())
        assert entry["value"] == [1, 2]
        assert entry["key"] == {"k": 1}

    def test_location_key_rounds(self):
        assert make_location_key(48.858412, 2.294509) == make_location_key(48.858414, 2.294511)
