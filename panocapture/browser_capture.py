"""
Browser screenshot capture backend.

Renders Street View in headless Chromium (Playwright) and screenshots the
viewport. With an API key the Maps Embed viewer is used, which needs no
interaction. Without one, the public Google Maps pano URL is loaded,
which may put a cookie consent dialog in front of the panorama.

Neither page exposes a "panorama ready" signal, so a fixed settle delay
is what actually guarantees the image has painted. The canvas wait on
the interactive path is best-effort and never blocks the screenshot.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Callable, List, Optional
from urllib.parse import urlencode

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from config import (
    BROWSER_LAUNCH_ARGS,
    CONSENT_CLICK_PAUSE_S,
    EMBED_STREETVIEW_URL,
    JPEG_QUALITY,
    MAPS_PANO_URL,
    NAVIGATION_TIMEOUT_MS,
    READY_TIMEOUT_MS,
    SETTLE_DELAY_S,
)
from panocapture.capture import CaptureParameters
from panocapture.coordinates import Coordinate
from panocapture.errors import CaptureError, ConfigurationError, RenderTimeout, TransportError
from panocapture.utils.geo_utils import format_location

logger = logging.getLogger(__name__)

ConsentClicker = Callable[[Page], bool]

CONSENT_SELECTORS = [
    'button[aria-label="Accept all"]',
    'button[aria-label="Aceitar tudo"]',
    'button:has-text("Aceitar tudo")',
    'button:has-text("I agree")',
    'button:has-text("Agree")',
    'button:has-text("Aceitar")',
]
CONSENT_TEXT = re.compile(r"accept|aceitar|agree", re.IGNORECASE)


def _view_params(params: CaptureParameters) -> dict:
    return {
        "heading": f"{params.heading:g}",
        "pitch": f"{params.pitch:g}",
        "fov": f"{params.fov:g}",
    }


def build_maps_pano_url(coord: Coordinate, params: CaptureParameters) -> str:
    query = {
        "api": "1",
        "map_action": "pano",
        "viewpoint": format_location(coord.lat, coord.lng),
        **_view_params(params),
    }
    return f"{MAPS_PANO_URL}?{urlencode(query)}"


def build_embed_url(coord: Coordinate, params: CaptureParameters, api_key: str) -> str:
    query = {
        "key": api_key,
        "location": format_location(coord.lat, coord.lng),
        **_view_params(params),
    }
    return f"{EMBED_STREETVIEW_URL}?{urlencode(query)}"


def selector_clicker(selector: str) -> ConsentClicker:
    """Clicker that clicks the first element matching selector, if any."""
    def clicker(page: Page) -> bool:
        element = page.query_selector(selector)
        if element is None:
            return False
        element.click()
        return True

    clicker.__name__ = f"selector_clicker[{selector}]"
    return clicker


def button_text_clicker(page: Page) -> bool:
    """Fallback: click the first <button> whose text looks like 'accept'."""
    for button in page.query_selector_all("button"):
        text = (button.text_content() or "").strip()
        if CONSENT_TEXT.search(text):
            button.click()
            return True
    return False


# Checked in order; markup and language of the dialog vary by region
CONSENT_CLICKERS: List[ConsentClicker] = [selector_clicker(s) for s in CONSENT_SELECTORS] + [button_text_clicker]


def dismiss_consent(
    page: Page,
    clickers: Optional[List[ConsentClicker]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Try each consent clicker in order until one clicks something.

    A clicker that raises is logged and skipped.

    Returns:
        True if a dialog button was clicked.
    """
    for clicker in CONSENT_CLICKERS if clickers is None else clickers:
        try:
            clicked = clicker(page)
        except PlaywrightError as e:
            logger.debug(f"Consent clicker {getattr(clicker, '__name__', clicker)} failed: {e}")
            continue
        if clicked:
            logger.debug(f"Dismissed consent dialog via {getattr(clicker, '__name__', clicker)}")
            sleep(CONSENT_CLICK_PAUSE_S)
            return True
    return False


def wait_for_canvas(page: Page, timeout_ms: int = READY_TIMEOUT_MS) -> bool:
    """Wait for the panorama canvas. Returns False instead of raising on failure."""
    try:
        page.wait_for_selector("canvas", timeout=timeout_ms)
        return True
    except PlaywrightError as e:
        logger.debug(f"Canvas not detected, capturing anyway: {e}")
        return False


class BrowserCapture:
    """Captures panoramas by screenshotting Street View in headless Chromium."""

    def __init__(
        self,
        api_key: str = "",
        use_embed: bool = True,
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
        ready_timeout_ms: int = READY_TIMEOUT_MS,
        settle_delay_s: float = SETTLE_DELAY_S,
        playwright_factory=sync_playwright,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.use_embed = use_embed
        self.navigation_timeout_ms = navigation_timeout_ms
        self.ready_timeout_ms = ready_timeout_ms
        self.settle_delay_s = settle_delay_s
        self._playwright_factory = playwright_factory
        self._sleep = sleep

    @property
    def embedded(self) -> bool:
        return bool(self.use_embed and self.api_key)

    def target_url(self, coord: Coordinate, params: CaptureParameters) -> str:
        if self.embedded:
            return build_embed_url(coord, params, self.api_key)
        return build_maps_pano_url(coord, params)

    def _navigate(self, page: Page, url: str) -> None:
        try:
            page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise RenderTimeout(f"Page did not load within {self.navigation_timeout_ms}ms") from e
        except PlaywrightError as e:
            raise TransportError(f"Navigation to Street View failed: {e}") from e

    def _screenshot(self, page: Page) -> bytes:
        try:
            return page.screenshot(type="jpeg", quality=JPEG_QUALITY)
        except PlaywrightTimeoutError as e:
            raise RenderTimeout(f"Screenshot timed out: {e}") from e
        except PlaywrightError as e:
            raise CaptureError(f"Screenshot failed: {e}") from e

    def capture(self, coord: Coordinate, params: CaptureParameters) -> bytes:
        """
        Screenshot Street View at coord, sized to the requested dimensions.

        Raises:
            RenderTimeout: If the page did not load in time.
            TransportError: If navigation failed.
            ConfigurationError: If Chromium cannot be launched at all.
        """
        url = self.target_url(coord, params)
        viewport = {"width": params.requested_size.width, "height": params.requested_size.height}

        with self._playwright_factory() as pw:
            try:
                browser = pw.chromium.launch(headless=True, args=BROWSER_LAUNCH_ARGS)
            except PlaywrightError as e:
                raise ConfigurationError(
                    f"Could not launch Chromium ({e}). Run: playwright install chromium"
                ) from e

            try:
                try:
                    page = browser.new_page(viewport=viewport, device_scale_factor=1)
                except PlaywrightError as e:
                    raise CaptureError(f"Could not open browser page: {e}") from e
                logger.debug(f"Loading {'embed' if self.embedded else 'maps'} viewer for {coord.lat},{coord.lng}")
                self._navigate(page, url)

                if not self.embedded:
                    dismiss_consent(page, sleep=self._sleep)
                    self._sleep(self.settle_delay_s)
                    wait_for_canvas(page, self.ready_timeout_ms)
                else:
                    self._sleep(self.settle_delay_s)

                return self._screenshot(page)
            finally:
                browser.close()
