"""
Batch Orchestrator — Runs one handler per matching file under a slot cap.

Flow:
  1. List the video directory (failure aborts the whole batch)
  2. Keep names matching ^<pattern>\\.<ext>$
  3. Submit one job per name to the SlotScheduler
  4. Count completions on the ProgressReporter
  5. Wait for every job, then summarise
"""

import os
import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .cpu_throttle import CPUThrottle
from .process import ProcessInvoker
from .progress import ProgressReporter, ProgressSink, format_total_time
from .scheduler import Job, SlotScheduler

logger = logging.getLogger(__name__)


class EnumerationError(RuntimeError):
    """The candidate directory could not be listed."""


@dataclass
class JobContext:
    """Everything a handler gets for one file."""
    file: str
    directory: Path
    config: Any
    invoker: ProcessInvoker
    reporter: ProgressReporter

    @property
    def path(self) -> Path:
        return self.directory / self.file

    @property
    def stem(self) -> str:
        return Path(self.file).stem


JobHandler = Callable[[JobContext], Any]
Lister = Callable[[Path], List[str]]


@dataclass
class BatchSummary:
    total: int
    completed: int
    elapsed: float
    rate: Optional[float]
    failed: List[str] = field(default_factory=list)
    results: Dict[str, Any] = field(default_factory=dict)

    @property
    def elapsed_text(self) -> str:
        return format_total_time(self.elapsed)


def list_candidates(directory: Path) -> List[str]:
    """
    File names in `directory`, sorted.

    Raises:
        EnumerationError: If the directory cannot be read.
    """
    try:
        with os.scandir(directory) as entries:
            return sorted(e.name for e in entries if e.is_file())
    except OSError as e:
        raise EnumerationError(f"Cannot list {directory}: {e}") from e


def compile_filter(pattern: str, ext: str) -> "re.Pattern":
    """
    Anchored, case-sensitive name filter: ^<pattern>\\.<ext>$.

    Raises:
        ValueError: If `pattern` is not a valid regular expression.
    """
    try:
        return re.compile(f"(?:{pattern})\\.{re.escape(ext)}")
    except re.error as e:
        raise ValueError(f"Invalid filter pattern {pattern!r}: {e}") from e


def filter_candidates(names: List[str], pattern: str = ".*", ext: str = "mp4") -> List[str]:
    regex = compile_filter(pattern, ext)
    return [name for name in names if regex.fullmatch(name)]


class BatchOrchestrator:
    """
    Wires listing, filtering, the SlotScheduler and the ProgressReporter.

    Usage:
        config = load_config()
        orchestrator = BatchOrchestrator(config, SubtitleJob(config))
        summary = orchestrator.run()
    """

    def __init__(
        self,
        config,
        handler: JobHandler,
        invoker: Optional[ProcessInvoker] = None,
        sink: ProgressSink = None,
        throttle: Optional[CPUThrottle] = None,
        lister: Lister = list_candidates,
        on_start: Optional[Callable[[], None]] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ):
        self.config = config
        self.handler = handler
        self.invoker = invoker or ProcessInvoker(
            debug=config.logging.debug,
            log_spawn=config.logging.log_spawn,
            launch_delay=config.batch.launch_delay,
        )
        self.reporter = ProgressReporter(sink=sink)
        self.throttle = throttle or CPUThrottle(
            max_percent=config.throttle.max_cpu_percent,
            check_interval=config.throttle.check_interval,
            enabled=config.throttle.enabled,
        )
        self.lister = lister
        self.on_start = on_start
        self.on_stop = on_stop

    def run(self, directory: Optional[Path] = None, pattern: Optional[str] = None) -> BatchSummary:
        """
        Process every matching file and wait for all of them.

        Raises:
            ValueError: If the filter pattern does not compile.
            EnumerationError: If the directory cannot be listed.
            Nothing is submitted and on_start is not called in either case.
        """
        directory = Path(directory or self.config.batch.video_dir)
        pattern = pattern or self.config.batch.pattern
        ext = self.config.batch.video_ext

        regex = compile_filter(pattern, ext)
        names = self.lister(directory)

        if self.on_start:
            self.on_start()

        files = [name for name in names if regex.fullmatch(name)]

        logger.debug(f"{directory} files: {names}")
        logger.debug(f"Filter: ^{pattern}\\.{ext}$ → {len(files)} match(es)")
        logger.info(
            f"Batch: {len(files)} job(s) from {directory}, "
            f"max {self.config.max_concurrent} concurrent"
        )

        scheduler = SlotScheduler(
            max_concurrent=self.config.max_concurrent,
            on_release=self._on_release,
        )

        self.reporter.start(len(files))
        for name in files:
            scheduler.submit(Job(name), self._make_work(name, directory))

        jobs = scheduler.await_all()
        self.reporter.stop()

        if self.on_stop:
            self.on_stop()

        summary = BatchSummary(
            total=len(files),
            completed=self.reporter.completed,
            elapsed=self.reporter.elapsed(),
            rate=self.reporter.rate(),
            failed=[job.name for job in jobs if job.failed],
            results={job.name: job.result for job in jobs},
        )

        logger.info(
            f"Batch complete: {summary.completed}/{summary.total} in {summary.elapsed_text}"
            + (f", {len(summary.failed)} failed" if summary.failed else "")
        )
        if self.throttle.total_throttles:
            logger.info(f"  CPU throttles: {self.throttle.total_throttles}")

        return summary

    def _make_work(self, name: str, directory: Path) -> Callable[[], Any]:
        def work():
            self.throttle.throttle_if_needed()
            context = JobContext(
                file=name,
                directory=directory,
                config=self.config,
                invoker=self.invoker,
                reporter=self.reporter,
            )
            return self.handler(context)
        return work

    def _on_release(self, job: Job):
        if job.failed:
            logger.error(f"Job {job.name} failed: {job.error}")
        else:
            logger.debug(f"Job {job.name} finished in {job.duration:.2f}s")
        self.reporter.increment()
