"""
Timeline Pipeline — Ordered timing correction for a cue sequence.

Stages (applied left to right):
  1. Resync: shift every cue by a signed offset
  2. ClampNegativeStart: pull negative starts up to zero
  3. GapFill: close short pauses between adjacent cues

Every stage yields exactly one cue per input cue, in input order, and
never mutates the cues it is given. Stages are plain iterables over cues,
so a pipeline can be run again on the same input with the same result.
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .cue import Cue

logger = logging.getLogger(__name__)

DEFAULT_OFFSET = -250
DEFAULT_THRESHOLD = 250

State = TypeVar("State")


def scan(
    cues: Iterable[Cue],
    step: Callable[[State, Cue], Tuple[State, Cue]],
    initial: State,
) -> Iterator[Cue]:
    """
    Left fold that emits one cue per step.

    `step(state, cue)` returns the next state and the cue to emit. The state
    lives only in this call, so each run starts from `initial` again.
    """
    state = initial
    for cue in cues:
        state, out = step(state, cue)
        yield out


class Resync:
    """Shift every cue's start and end by `offset` ms. No clamping."""

    def __init__(self, offset: int):
        self.offset = int(offset)

    def __call__(self, cues: Iterable[Cue]) -> Iterator[Cue]:
        for cue in cues:
            yield cue.shifted(self.offset)

    def __repr__(self):
        return f"Resync({self.offset})"


class ClampNegativeStart:
    """Set start to 0 when negative. End is left as it is."""

    def __call__(self, cues: Iterable[Cue]) -> Iterator[Cue]:
        for cue in cues:
            yield cue.with_start(0) if cue.start < 0 else cue

    def __repr__(self):
        return "ClampNegativeStart()"


class GapFill:
    """
    Close sub-threshold gaps between a cue and the one right before it.

    If `current.start - previous.end < threshold` the current cue starts at
    `previous.end`. Only the immediate predecessor is looked at; the first
    cue passes through unchanged.

    A non-negative start is never moved below zero. When the predecessor
    ends before zero (possible after a negative Resync), a closed cue starts
    at 0 rather than at `previous.end`, so `start == previous.end` does not
    hold for that pair.
    """

    def __init__(self, threshold: int):
        self.threshold = int(threshold)

    def step(self, previous: Optional[Cue], cue: Cue) -> Tuple[Cue, Cue]:
        if previous is not None and cue.start - previous.end < self.threshold:
            cue = cue.with_start(max(previous.end, 0) if cue.start >= 0 else previous.end)
        return cue, cue

    def __call__(self, cues: Iterable[Cue]) -> Iterator[Cue]:
        return scan(cues, self.step, None)

    def __repr__(self):
        return f"GapFill({self.threshold})"


Stage = Callable[[Iterable[Cue]], Iterable[Cue]]


class TimelinePipeline:
    """
    Composes stages into one transform.

    Usage:
        pipeline = TimelinePipeline([Resync(-250), ClampNegativeStart(), GapFill(250)])
        fixed = pipeline.run(cues)
    """

    def __init__(self, stages: Sequence[Stage]):
        self.stages = list(stages)

    def stream(self, cues: Iterable[Cue]) -> Iterator[Cue]:
        """Lazily chain the stages over `cues`."""
        stream: Iterable[Cue] = cues
        for stage in self.stages:
            stream = stage(stream)
        return iter(stream)

    def run(self, cues: Iterable[Cue]) -> List[Cue]:
        cues = list(cues)
        result = list(self.stream(cues))

        changed = sum(
            1 for before, after in zip(cues, result)
            if (before.start, before.end) != (after.start, after.end)
        )
        logger.debug(f"Pipeline {self!r}: {len(result)} cues, {changed} retimed")
        return result

    def __repr__(self):
        return " -> ".join(repr(s) for s in self.stages) or "identity"


def default_pipeline(
    offset: int = DEFAULT_OFFSET, threshold: int = DEFAULT_THRESHOLD
) -> TimelinePipeline:
    """Resync, clamp, then gap-fill: the standard correction chain."""
    return TimelinePipeline([Resync(offset), ClampNegativeStart(), GapFill(threshold)])
