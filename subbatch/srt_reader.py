"""
SRT Reader — Parses SubRip (and WebVTT) text into Cues.

Blocks are separated by blank lines. Each block holds an optional index
line, a timing line and one or more payload lines. A block that cannot be
read raises MalformedCueError; nothing is skipped silently.
"""

import re
import logging
from pathlib import Path
from typing import List, Optional

from .cue import Cue, parse_timestamp

logger = logging.getLogger(__name__)

_TIMING_RE = re.compile(
    r"^\s*(?P<start>[\d:.,]+)\s*-->\s*(?P<end>[\d:.,]+)(?:\s+.*)?$"
)
_BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")


class MalformedCueError(ValueError):
    """A subtitle block could not be parsed."""

    def __init__(self, message: str, block: int, source: Optional[str] = None):
        self.block = block
        self.source = source
        where = f"{source}, " if source else ""
        super().__init__(f"{where}block {block}: {message}")


class SRTReader:
    """Reads cues from SRT or WebVTT text."""

    def read(self, path: Path) -> List[Cue]:
        """
        Parse a subtitle file.

        Args:
            path: Path to an .srt or .vtt file (UTF-8, BOM allowed).

        Returns:
            Cues in document order.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            MalformedCueError: If any block is unreadable.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Subtitle file not found: {path}")

        content = path.read_text(encoding="utf-8-sig")
        cues = self.parse(content, source=path.name)

        logger.debug(f"Read {len(cues)} cues from {path}")
        return cues

    def parse(self, content: str, source: Optional[str] = None) -> List[Cue]:
        content = content.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff")
        cues: List[Cue] = []

        blocks = _BLOCK_SPLIT_RE.split(content.strip())
        for number, block in enumerate(blocks, start=1):
            if not block.strip():
                continue

            lines = block.strip("\n").split("\n")
            head = lines[0].strip()

            # WebVTT header and comment/style blocks carry no cue
            if head.startswith(("WEBVTT", "NOTE", "STYLE", "REGION")):
                continue

            cues.append(self._parse_block(lines, number, source))

        return cues

    def _parse_block(self, lines: List[str], number: int, source: Optional[str]) -> Cue:
        # Index (SRT) or cue identifier (VTT) is optional
        timing_at = 0 if "-->" in lines[0] else 1
        if timing_at >= len(lines):
            raise MalformedCueError("missing timing line", number, source)

        match = _TIMING_RE.match(lines[timing_at])
        if not match:
            raise MalformedCueError(
                f"bad timing line {lines[timing_at].strip()!r}", number, source
            )

        try:
            start = parse_timestamp(match.group("start"))
            end = parse_timestamp(match.group("end"))
        except ValueError as e:
            raise MalformedCueError(str(e), number, source) from e

        text = "\n".join(lines[timing_at + 1:])
        return Cue(start, end, text)
