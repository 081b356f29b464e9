"""Tests for map file loading."""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from panocapture.coordinates import Coordinate, coordinate_from_item, load_coordinates, parse_size
from panocapture.errors import ConfigurationError, InvalidCoordinate


def write_json(tmp_path, data, name="map.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data))
    return path


class TestCoordinateFromItem:
    def test_pair(self):
        assert coordinate_from_item([48.8584, 2.2945]) == Coordinate(48.8584, 2.2945)

    def test_string_numbers_are_coerced(self):
        assert coordinate_from_item(["10.5", "-20"]) == Coordinate(10.5, -20.0)

    def test_object_with_overrides(self):
        coord = coordinate_from_item({"lat": 1, "lng": 2, "heading": "270", "fov": 60, "size": "800x600"})
        assert coord == Coordinate(lat=1.0, lng=2.0, heading=270.0, pitch=None, fov=60.0, size="800x600")

    def test_non_string_size_is_ignored(self):
        assert coordinate_from_item({"lat": 1, "lng": 2, "size": 640}).size is None

    @pytest.mark.parametrize("value", ["north", [90], {"deg": 90}])
    def test_non_numeric_override_is_configuration_error(self, value):
        with pytest.raises(ConfigurationError, match="heading"):
            coordinate_from_item({"lat": 1, "lng": 2, "heading": value})

    @pytest.mark.parametrize("item", [[1], {"lat": 1}, "1,2", 42, None])
    def test_unrecognized_items(self, item):
        assert coordinate_from_item(item) is None

    @pytest.mark.parametrize("item", [
        {"lat": 91, "lng": 0},
        {"lat": -90.5, "lng": 0},
        [0, 180.1],
        [0, -181],
        ["north", 0],
        [float("nan"), 0],
    ])
    def test_invalid_coordinates_rejected(self, item):
        with pytest.raises(InvalidCoordinate):
            coordinate_from_item(item)

    def test_boundaries_accepted(self):
        assert coordinate_from_item([90, 180]) == Coordinate(90.0, 180.0)
        assert coordinate_from_item([-90, -180]) == Coordinate(-90.0, -180.0)


class TestParseSize:
    def test_valid(self):
        assert parse_size("1280x720", (1, 1)) == (1280, 720)

    def test_extra_parts_are_ignored(self):
        assert parse_size("1920x1080x5", (1, 1)) == (1920, 1080)

    @pytest.mark.parametrize("value", [None, "", "big", "1280", "axb", "infx100"])
    def test_fallback(self, value):
        assert parse_size(value, (1920, 1080)) == (1920, 1080)


class TestLoadCoordinates:
    def test_json_mixed_items(self, tmp_path):
        path = write_json(tmp_path, [[1, 2], {"lat": 3, "lng": 4, "pitch": 5}, "junk"])
        coords = load_coordinates(path)
        assert coords == [Coordinate(1.0, 2.0), Coordinate(3.0, 4.0, pitch=5.0)]

    def test_non_numeric_override_fails_whole_file(self, tmp_path):
        path = write_json(tmp_path, [{"lat": 1, "lng": 2, "heading": "north"}, [3, 4]])
        with pytest.raises(ConfigurationError, match="Invalid heading 'north'"):
            load_coordinates(path)

    def test_out_of_range_entry_fails_whole_file(self, tmp_path):
        path = write_json(tmp_path, [[1, 2], {"lat": 91, "lng": 0}])
        with pytest.raises(InvalidCoordinate):
            load_coordinates(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read map file"):
            load_coordinates(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "map.json"
        path.write_text("[1, 2")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_coordinates(path)

    def test_not_an_array(self, tmp_path):
        with pytest.raises(ConfigurationError, match="array"):
            load_coordinates(write_json(tmp_path, {"lat": 1, "lng": 2}))

    def test_no_usable_entries(self, tmp_path):
        with pytest.raises(ConfigurationError, match="no valid coordinates"):
            load_coordinates(write_json(tmp_path, ["a", {"x": 1}]))

    def test_csv(self, tmp_path):
        path = tmp_path / "map.csv"
        path.write_text("lat,lng,heading,size\n40.7,-74.0,180,\n51.5,-0.12,,640x480\n")
        coords = load_coordinates(path)
        assert coords == [
            Coordinate(40.7, -74.0, heading=180.0),
            Coordinate(51.5, -0.12, size="640x480"),
        ]

    def test_csv_missing_columns(self, tmp_path):
        path = tmp_path / "map.csv"
        path.write_text("latitude,longitude\n1,2\n")
        with pytest.raises(ConfigurationError, match="lat, lng"):
            load_coordinates(path)
