"""
Progress Reporter — Batch timer and completion counter.

Keeps the start timestamp, the completed/total counts and derives
throughput. Rendering is left to an optional sink callback.
"""

import time
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

RATE_UNAVAILABLE = "N/A"

# Sink signature: (completed: int, total: int, rate: str) -> None
ProgressSink = Optional[Callable[[int, int, str], None]]


class ProgressReporter:
    """
    Tracks elapsed time and completed/total jobs.

    Usage:
        reporter = ProgressReporter(sink=print_progress)
        reporter.start(total=10)
        reporter.increment()       # once per finished job
        reporter.stop()
        reporter.rate()            # jobs per second
    """

    def __init__(self, sink: ProgressSink = None,
                 clock: Callable[[], float] = time.monotonic):
        self.sink = sink
        self._clock = clock
        self._lock = threading.Lock()
        self._total = 0
        self._completed = 0
        self._started_at: Optional[float] = None
        self._stopped_at: Optional[float] = None

    def start(self, total: int):
        with self._lock:
            self._total = total
            self._completed = 0
            self._started_at = self._clock()
            self._stopped_at = None
            self._emit()

    def increment(self):
        with self._lock:
            self._completed += 1
            self._emit()

    def stop(self):
        """Freeze the timer. Calling it again keeps the first stop time."""
        with self._lock:
            if self._started_at is not None and self._stopped_at is None:
                self._stopped_at = self._clock()

    def elapsed(self) -> float:
        """Seconds since start(), or up to stop() once stopped."""
        with self._lock:
            return self._elapsed()

    def rate(self) -> Optional[float]:
        """Completed jobs per second; None while no time has elapsed."""
        with self._lock:
            return self._rate()

    def rate_text(self) -> str:
        with self._lock:
            return self._rate_text()

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def total(self) -> int:
        return self._total

    @property
    def running(self) -> bool:
        return self._started_at is not None and self._stopped_at is None

    # ── Internals (lock held) ──

    def _elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._stopped_at if self._stopped_at is not None else self._clock()
        return end - self._started_at

    def _rate(self) -> Optional[float]:
        elapsed = self._elapsed()
        if elapsed <= 0:
            return None
        return self._completed / elapsed

    def _rate_text(self) -> str:
        rate = self._rate()
        return RATE_UNAVAILABLE if rate is None else f"{rate:.2f}/s"

    def _emit(self):
        logger.debug(f"Progress {self._completed}/{self._total} ({self._rate_text()})")
        if self.sink:
            self.sink(self._completed, self._total, self._rate_text())


def format_total_time(seconds: float) -> str:
    """
    Human-readable duration.

    Examples:
        4.26   -> "4.3s"
        65.3   -> "1m 05.3s"
        3725.0 -> "1h 02m 05.0s"
    """
    seconds = max(0.0, seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)

    if hours >= 1:
        return f"{int(hours)}h {int(minutes):02d}m {secs:04.1f}s"
    if minutes >= 1:
        return f"{int(minutes)}m {secs:04.1f}s"
    return f"{secs:.1f}s"
