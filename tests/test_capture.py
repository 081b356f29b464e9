"""Tests for capture parameter resolution and backend selection."""

import io
import sys
from pathlib import Path

import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).parent.parent))

from panocapture.browser_capture import BrowserCapture
from panocapture.capture import CaptureDefaults, build_capture_params, make_attempt, make_strategy
from panocapture.coordinates import Coordinate
from panocapture.errors import ConfigurationError, UnavailableImagery
from panocapture.sizing import ImageSize
from panocapture.streetview_api import StaticApiCapture


class TestBuildCaptureParams:
    def test_defaults_apply(self):
        params = build_capture_params(Coordinate(1, 2), CaptureDefaults())
        assert (params.heading, params.pitch, params.fov) == (0.0, 0.0, 90.0)
        assert params.requested_size == ImageSize(1920, 1080)
        assert params.scale_hint == 2
        assert params.radius == 100
        assert params.source == "outdoor"
        assert params.fit == "cover"
        assert params.mode == "api"

    def test_coordinate_overrides_win(self):
        coord = Coordinate(1, 2, heading=180, pitch=-5, fov=45, size="800x600")
        params = build_capture_params(coord, CaptureDefaults(heading=90, size="1280x720"))
        assert (params.heading, params.pitch, params.fov) == (180, -5, 45)
        assert params.requested_size == ImageSize(800, 600)

    def test_zero_override_is_not_treated_as_missing(self):
        params = build_capture_params(Coordinate(1, 2, heading=0), CaptureDefaults(heading=270))
        assert params.heading == 0

    def test_bad_size_falls_back(self):
        params = build_capture_params(Coordinate(1, 2, size="wide"), CaptureDefaults())
        assert params.requested_size == ImageSize(1920, 1080)


class TestMakeStrategy:
    def test_api(self):
        assert isinstance(make_strategy("api", "k"), StaticApiCapture)

    def test_browser(self):
        strategy = make_strategy("browser", "k")
        assert isinstance(strategy, BrowserCapture)
        assert strategy.embedded

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            make_strategy("satellite", "k")


class FakeStrategy:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def capture(self, coord, params):
        self.calls.append((coord, params))
        if self.error:
            raise self.error
        return self.result


def jpeg(width, height):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (10, 120, 10)).save(buffer, format="JPEG")
    return buffer.getvalue()


class TestMakeAttempt:
    def test_resizes_to_requested_size(self):
        strategy = FakeStrategy(result=jpeg(1280, 720))
        attempt = make_attempt(strategy, CaptureDefaults(size="1920x1080"))

        out = Image.open(io.BytesIO(attempt(Coordinate(1, 2))))
        assert out.size == (1920, 1080)
        coord, params = strategy.calls[0]
        assert params.requested_size == ImageSize(1920, 1080)

    def test_per_coordinate_size(self):
        attempt = make_attempt(FakeStrategy(result=jpeg(64, 64)), CaptureDefaults(size="100x100"))
        out = Image.open(io.BytesIO(attempt(Coordinate(1, 2, size="32x16"))))
        assert out.size == (32, 16)

    def test_capture_errors_propagate(self):
        attempt = make_attempt(FakeStrategy(error=UnavailableImagery("ZERO_RESULTS")), CaptureDefaults())
        with pytest.raises(UnavailableImagery):
            attempt(Coordinate(1, 2))
