"""
Street View panorama sampler configuration.

API endpoints, capture defaults, browser timings, and constants.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# --- Paths ---
PROJECT_ROOT = Path(__file__).parent
DEFAULT_MAP_FILE = Path.cwd() / "map.json"
DEFAULT_OUTPUT_DIR = Path.cwd() / "screenshots"
CACHE_DIR = PROJECT_ROOT / ".cache"

# --- API Keys ---
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")

# --- Street View Static API ---
STREETVIEW_IMAGE_URL = "https://maps.googleapis.com/maps/api/streetview"
STREETVIEW_METADATA_URL = "https://maps.googleapis.com/maps/api/streetview/metadata"
STREETVIEW_RATE_LIMIT = 5  # requests per second
STREETVIEW_TIMEOUT = 30  # seconds
METADATA_CACHE_TTL_HOURS = 24 * 7

# Largest width/height the Static API accepts, in logical pixels
LOGICAL_SIZE_CAP = 640

# --- Browser capture ---
MAPS_PANO_URL = "https://www.google.com/maps/@"
EMBED_STREETVIEW_URL = "https://www.google.com/maps/embed/v1/streetview"
BROWSER_LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
NAVIGATION_TIMEOUT_MS = 60_000
READY_TIMEOUT_MS = 15_000
SETTLE_DELAY_S = 1.5
CONSENT_CLICK_PAUSE_S = 0.5

# --- Capture defaults ---
DEFAULT_COUNT = 2
DEFAULT_SIZE = "1920x1080"
DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080
DEFAULT_SCALE = 2
DEFAULT_HEADING = 0.0
DEFAULT_PITCH = 0.0
DEFAULT_FOV = 90.0
DEFAULT_RADIUS = 100
DEFAULT_SOURCE = "outdoor"
DEFAULT_FIT = "cover"
DEFAULT_MODE = "api"

FIT_MODES = ("cover", "contain", "fill", "inside", "outside")
CAPTURE_MODES = ("api", "browser")

JPEG_QUALITY = 90

# --- Logging ---
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
