"""
Slot Scheduler — Bounded-concurrency job admission.

Jobs are queued FIFO and admitted while fewer than `max_concurrent` hold a
slot. Each admitted job runs on its own thread; its slot is released exactly
once when the work returns or raises, and the next queued job is admitted
right away. The scheduler never looks at what the work returned.

Usage:
    scheduler = SlotScheduler(max_concurrent=3)
    for name in names:
        scheduler.submit(Job(name), lambda: do_work(name))
    jobs = scheduler.await_all()
"""

import enum
import time
import logging
import threading
from collections import deque
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Deque, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 8


class JobState(enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class Job:
    """One unit of batch work, identified by its source file name."""
    name: str
    state: JobState = JobState.PENDING
    result: Any = None
    error: Optional[BaseException] = None
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    @property
    def duration(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    @property
    def failed(self) -> bool:
        return self.error is not None


Work = Callable[[], Any]
ReleaseCallback = Optional[Callable[[Job], None]]


class SlotScheduler:
    """
    Admits queued jobs through a bounded semaphore of `max_concurrent` slots.

    Invariants:
      - at most `max_concurrent` jobs are RUNNING at any instant
      - admission order equals submission order
      - every admitted job releases its slot exactly once
    """

    def __init__(self, max_concurrent: int = DEFAULT_MAX_CONCURRENT,
                 on_release: ReleaseCallback = None):
        """
        Args:
            max_concurrent: Number of slots (positive).
            on_release: Called once per job, after its slot is released and
                before its future resolves.
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be positive, got {max_concurrent}")

        self.max_concurrent = max_concurrent
        self.on_release = on_release

        self._slots = threading.BoundedSemaphore(max_concurrent)
        self._cond = threading.Condition()
        self._queue: Deque[Tuple[Job, Work, Future]] = deque()
        self._jobs: List[Job] = []
        self._running = 0
        self._peak = 0
        self._unfinished = 0

    def submit(self, job: Job, work: Work) -> Future:
        """
        Queue `job` with its zero-argument `work` callable.

        Returns:
            A Future resolving to whatever `work` returns (or raising what it
            raised) once the job has completed.
        """
        future: Future = Future()

        with self._cond:
            job.state = JobState.PENDING
            self._jobs.append(job)
            self._queue.append((job, work, future))
            self._unfinished += 1
            self._admit()

        return future

    def await_all(self, timeout: Optional[float] = None) -> List[Job]:
        """
        Block until every submitted job has completed.

        Raises:
            TimeoutError: If `timeout` seconds pass first.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._unfinished == 0, timeout):
                raise TimeoutError(
                    f"{self._unfinished} job(s) still unfinished after {timeout}s"
                )
            return list(self._jobs)

    @property
    def running(self) -> int:
        with self._cond:
            return self._running

    @property
    def pending(self) -> int:
        with self._cond:
            return len(self._queue)

    @property
    def peak_running(self) -> int:
        """Highest number of jobs that ever held a slot at once."""
        with self._cond:
            return self._peak

    @property
    def jobs(self) -> List[Job]:
        with self._cond:
            return list(self._jobs)

    # ── Internals ──

    def _admit(self):
        """Start queued jobs while slots are free. Caller holds the lock."""
        while self._queue and self._slots.acquire(blocking=False):
            job, work, future = self._queue.popleft()

            self._running += 1
            self._peak = max(self._peak, self._running)
            job.state = JobState.RUNNING
            job.started_at = time.monotonic()
            future.set_running_or_notify_cancel()

            logger.debug(f"Admitted {job.name} ({self._running}/{self.max_concurrent} slots)")

            threading.Thread(
                target=self._run, args=(job, work, future),
                name=f"job-{job.name}", daemon=True
            ).start()

    def _run(self, job: Job, work: Work, future: Future):
        result, error = None, None
        try:
            result = work()
        except Exception as e:
            error = e
            logger.debug(f"Job {job.name} raised {type(e).__name__}: {e}")
        finally:
            self._release(job, result, error)
            self._settle(job, future, result, error)

    def _release(self, job: Job, result: Any, error: Optional[BaseException]):
        with self._cond:
            job.result = result
            job.error = error
            job.finished_at = time.monotonic()
            job.state = JobState.COMPLETED

            self._running -= 1
            self._slots.release()
            self._admit()

    def _settle(self, job: Job, future: Future, result: Any, error: Optional[BaseException]):
        try:
            if self.on_release:
                self.on_release(job)
        except Exception:
            logger.exception(f"Release callback failed for {job.name}")
        finally:
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

            with self._cond:
                self._unfinished -= 1
                self._cond.notify_all()
