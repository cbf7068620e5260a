"""In-process admission control for generation requests."""

import logging
import math
import threading
import time
from typing import Callable, List, Optional

from .errors import RateLimitedError
from .models import UsageSnapshot

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window limiter owned by a single process.

    Admits at most ``max_requests`` within any trailing ``window_seconds``.
    The whole window is also cleared once ``reset_interval`` seconds have
    passed since the last reset.

    Parameters
    ----------
    max_requests : int, default=10
        Admissions allowed inside one window.
    window_seconds : float, default=60
        Length of the trailing window.
    reset_interval : float, default=3600
        Age after which the window is wiped regardless of its contents.
    clock : callable, optional
        Returns the current time in epoch seconds. Defaults to ``time.time``;
        tests inject a fake clock.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        reset_interval: float = 3600.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.reset_interval = reset_interval
        self._clock = clock or time.time
        self._lock = threading.Lock()
        self._requests: List[float] = []
        self._last_reset = self._clock()

    def admit(self) -> None:
        """Records one request or raises ``RateLimitedError``."""
        with self._lock:
            now = self._clock()
            self._purge(now)

            if len(self._requests) >= self.max_requests:
                oldest = min(self._requests)
                wait_seconds = math.ceil(oldest + self.window_seconds - now)
                logger.info("Rate limit reached; retry in %ss", wait_seconds)
                raise RateLimitedError(
                    f"Rate limit exceeded. Please wait {wait_seconds} seconds "
                    "before trying again.",
                    wait_seconds=wait_seconds,
                )

            self._requests.append(now)

    def snapshot(self) -> UsageSnapshot:
        """Reports the window without recording a request."""
        with self._lock:
            now = self._clock()
            cutoff = now - self.window_seconds
            return UsageSnapshot(
                requests_last_minute=sum(1 for t in self._requests if t > cutoff),
                total_requests=len(self._requests),
                last_reset=self._last_reset,
                next_reset=self._last_reset + self.reset_interval,
                max_requests=self.max_requests,
            )

    def _purge(self, now: float) -> None:
        if now - self._last_reset > self.reset_interval:
            self._requests = []
            self._last_reset = now

        cutoff = now - self.window_seconds
        self._requests = [t for t in self._requests if t > cutoff]
