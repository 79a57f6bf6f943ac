"""
SRT Writer — SubRip / WebVTT subtitle file generator.

Converts Cue objects into properly formatted .srt (or .vtt) files
with sequential indices, HH:MM:SS,mmm timestamps, and UTF-8 encoding.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from .cue import Cue, format_timestamp

logger = logging.getLogger(__name__)

FORMATS = ("srt", "vtt")


class SRTWriter:
    """
    Writes cues to a standard SRT (SubRip) or WebVTT file.

    SRT format:
        1
        00:00:01,200 --> 00:00:04,800
        Hello everyone, welcome to the show.

        2
        00:00:05,100 --> 00:00:06,300
        (Audience clapping)
    """

    def __init__(self, fmt: str = "srt"):
        if fmt not in FORMATS:
            raise ValueError(f"Unknown subtitle format: {fmt!r} (expected one of {FORMATS})")
        self.fmt = fmt

    def write(self, cues: List[Cue], output_path: Path):
        """
        Write cues to a subtitle file.

        Args:
            cues: Cues in document order.
            output_path: Path for the output file.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(self.dumps(cues))

        logger.info(
            f"{self.fmt.upper()} written: {len(cues)} cues → {output_path}"
        )

    def dumps(self, cues: Iterable[Cue]) -> str:
        separator = "," if self.fmt == "srt" else "."
        parts = ["WEBVTT\n\n"] if self.fmt == "vtt" else []

        for i, cue in enumerate(cues):
            # Re-index sequentially
            parts.append(f"{i + 1}\n")
            parts.append(
                f"{format_timestamp(cue.start, separator)} --> "
                f"{format_timestamp(cue.end, separator)}\n"
            )
            parts.append(f"{cue.text}\n")
            parts.append("\n")

        return "".join(parts)

    def write_preview(self, cues: List[Cue], max_entries: int = 10) -> str:
        """
        Generate a text preview of the cues.

        Args:
            cues: List of Cue objects.
            max_entries: Maximum entries to include in preview.

        Returns:
            Formatted string preview.
        """
        lines = []
        shown = min(len(cues), max_entries)

        for cue in cues[:shown]:
            ts_start = format_timestamp(cue.start)
            ts_end = format_timestamp(cue.end)
            text_preview = cue.text.replace("\n", " / ")[:80]
            if len(cue.text) > 80:
                text_preview += "..."
            lines.append(f"  [{ts_start} → {ts_end}] {text_preview}")

        if len(cues) > shown:
            lines.append(f"  ... and {len(cues) - shown} more entries")

        return "\n".join(lines)
