"""
Minimum-interval rate limiter for outbound Street View requests.

Attempts run one after another, so there is no locking; the limiter
only spaces consecutive calls apart.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Enforces a minimum interval between consecutive requests."""

    def __init__(
        self,
        requests_per_second: float,
        name: str = "",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            requests_per_second: Maximum sustained request rate. 0 disables limiting.
            name: Label used in log messages.
            clock: Monotonic time source.
            sleep: Blocking sleep function.
        """
        self.min_interval = 1.0 / requests_per_second if requests_per_second > 0 else 0.0
        self.name = name or f"limiter({requests_per_second}/s)"
        self._clock = clock
        self._sleep = sleep
        self._last_call = None

    def wait(self) -> float:
        """Sleep until the next request may be sent. Returns seconds slept."""
        delay = 0.0
        if self._last_call is not None:
            delay = max(0.0, self.min_interval - (self._clock() - self._last_call))
        if delay > 0:
            logger.debug(f"[{self.name}] throttling for {delay:.2f}s")
            self._sleep(delay)
        self._last_call = self._clock()
        return delay

