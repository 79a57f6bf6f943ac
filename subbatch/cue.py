"""
Cue — A single timed text record.

Times are integer milliseconds. A Timeline is simply an ordered list of
Cues in document order; nothing here sorts or reorders them.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Cue:
    """One subtitle record with start/end in milliseconds and its payload."""
    start: int
    end: int
    text: str

    @property
    def duration(self) -> int:
        return self.end - self.start

    def shifted(self, offset: int) -> "Cue":
        return Cue(self.start + offset, self.end + offset, self.text)

    def with_start(self, start: int) -> "Cue":
        return Cue(start, self.end, self.text)

    def __repr__(self):
        return f"Cue({self.start}–{self.end}ms, '{self.text[:50]}')"


Timeline = List[Cue]


def format_timestamp(millis: int, separator: str = ",") -> str:
    """
    Convert milliseconds to HH:MM:SS<sep>mmm.

    Negative values are written as zero; the format has no sign.
    """
    if millis < 0:
        millis = 0

    hours, rest = divmod(millis, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, ms = divmod(rest, 1000)

    return f"{hours:02d}:{minutes:02d}:{secs:02d}{separator}{ms:03d}"


def parse_timestamp(value: str) -> int:
    """
    Convert HH:MM:SS,mmm, HH:MM:SS.mmm or MM:SS.mmm to milliseconds.

    Raises:
        ValueError: If the string is not a timestamp.
    """
    value = value.strip().replace(",", ".")
    parts = value.split(":")
    if len(parts) == 2:
        parts.insert(0, "0")
    if len(parts) != 3:
        raise ValueError(f"Not a timestamp: {value!r}")

    hours, minutes = int(parts[0]), int(parts[1])
    if "." in parts[2]:
        secs_str, frac = parts[2].split(".", 1)
    else:
        secs_str, frac = parts[2], "0"
    if not frac.isdigit() or not secs_str.isdigit():
        raise ValueError(f"Not a timestamp: {value!r}")
    if minutes >= 60 or int(secs_str) >= 60:
        raise ValueError(f"Timestamp field out of range: {value!r}")

    # Pad or cut the fraction to milliseconds
    millis = int((frac + "000")[:3])
    return ((hours * 60 + minutes) * 60 + int(secs_str)) * 1000 + millis
