"""
CPU Throttle — Voluntary pause before launching more external work.

Checks system CPU usage via psutil before a job spawns its tools and
sleeps briefly when the machine is already saturated.
"""

import time
import logging
import threading
from typing import Optional

import psutil

logger = logging.getLogger(__name__)


class CPUThrottle:
    """
    Samples CPU usage at most once per `check_interval` and introduces a
    delay when usage exceeds `max_percent`. Safe to call from job threads.
    """

    def __init__(self, max_percent: int = 85, check_interval: float = 2.0,
                 enabled: bool = True):
        """
        Args:
            max_percent: CPU usage percent above which launches are delayed.
            check_interval: Seconds between CPU usage checks.
            enabled: When False, throttle_if_needed() is a no-op.
        """
        self.max_percent = max_percent
        self.check_interval = check_interval
        self.enabled = enabled
        self._lock = threading.Lock()
        self._last_check = 0.0
        self._last_usage: Optional[float] = None
        self._throttle_count = 0

    def throttle_if_needed(self) -> float:
        """
        Sleep if the last CPU sample is over budget.

        Returns:
            Seconds slept (0.0 when within budget or disabled).
        """
        if not self.enabled:
            return 0.0

        with self._lock:
            now = time.monotonic()
            if self._last_usage is None or now - self._last_check >= self.check_interval:
                self._last_check = now
                self._last_usage = psutil.cpu_percent(interval=0.1)
            usage = self._last_usage

            if usage <= self.max_percent:
                return 0.0

            self._throttle_count += 1
            count = self._throttle_count

        sleep_time = min(2.0, (usage - self.max_percent) / 100.0 + 0.3)
        if count <= 3 or count % 10 == 0:
            logger.debug(
                f"CPU at {usage:.0f}% (limit: {self.max_percent}%), "
                f"delaying launch {sleep_time:.1f}s (throttle #{count})"
            )

        time.sleep(sleep_time)
        return sleep_time

    @property
    def total_throttles(self) -> int:
        """Number of times a launch was delayed."""
        return self._throttle_count
