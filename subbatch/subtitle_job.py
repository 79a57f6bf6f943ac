"""
Subtitle Job — Per-video handler that retimes the matching ASS track.

Stages for video `name.mp4`:
  1. FFmpeg: <subs>/name.ass → <subs>/<base>_in.srt
  2. Read cues, run the timeline pipeline, write <base>_out.srt
  3. FFmpeg: <base>_out.srt → <base>_out.ass, moved over <subs>/name.ass
     only when the conversion succeeds
  4. Rewrite the ASS header to point at the video
  5. Optional encoder command

`base` is the video stem without the "-original" suffix.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .ass_metadata import update_ass_metadata
from .orchestrator import JobContext
from .process import InvocationResult
from .srt_reader import SRTReader
from .srt_writer import SRTWriter
from .timeline import TimelinePipeline, default_pipeline

logger = logging.getLogger(__name__)


@dataclass
class SubtitleJobResult:
    video: str
    cue_count: int = 0
    skipped: bool = False
    output: Optional[Path] = None
    invocations: List[InvocationResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every external command exited cleanly."""
        return all(r.ok for r in self.invocations)

    @property
    def failed_commands(self) -> List[InvocationResult]:
        return [r for r in self.invocations if not r.ok]


def strip_suffix(stem: str, suffix: str) -> str:
    if suffix and stem.endswith(suffix):
        return stem[: -len(suffix)]
    return stem


class SubtitleJob:
    """
    Callable job handler for BatchOrchestrator.

    Usage:
        handler = SubtitleJob(config)
        BatchOrchestrator(config, handler).run()
    """

    def __init__(self, config, pipeline: Optional[TimelinePipeline] = None,
                 reader: Optional[SRTReader] = None,
                 writer: Optional[SRTWriter] = None):
        self.config = config
        self.pipeline = pipeline or default_pipeline(
            offset=config.timeline.offset, threshold=config.timeline.threshold
        )
        self.reader = reader or SRTReader()
        self.writer = writer or SRTWriter(config.timeline.output_format)

    def __call__(self, ctx: JobContext) -> SubtitleJobResult:
        subs = self.config.subtitles
        sub_dir = Path(subs.directory)
        stem = ctx.stem
        base = strip_suffix(stem, subs.original_suffix)

        ass_path = sub_dir / f"{stem}.ass"
        srt_input = sub_dir / f"{base}_in.srt"
        srt_output = sub_dir / f"{base}_out.{self.writer.fmt}"
        ass_output = sub_dir / f"{base}_out.ass"

        result = SubtitleJobResult(video=ctx.file)

        if not ass_path.exists():
            logger.debug(f"No subtitle for {ctx.file} ({ass_path}), skipping")
            result.skipped = True
            return result

        self._remove(srt_input, srt_output, ass_output)
        converted = False
        try:
            # ── Stage 1: ASS → SRT ──
            result.invocations.append(ctx.invoker.run(
                ["ffmpeg", "-y", "-i", str(ass_path), "-c:s", "text", str(srt_input)]
            ))
            if not srt_input.exists():
                logger.warning(f"{ctx.file}: subtitle conversion produced no SRT, skipping")
                result.skipped = True
                return result

            # ── Stage 2: Retime ──
            cues = self.reader.read(srt_input)
            fixed = self.pipeline.run(cues)
            self.writer.write(fixed, srt_output)
            result.cue_count = len(fixed)

            preview = self.writer.write_preview(fixed, max_entries=5)
            if preview:
                logger.debug(f"{ctx.file} preview:\n{preview}")

            # ── Stage 3: SRT → ASS ──
            if subs.write_ass:
                conversion = ctx.invoker.run(
                    ["ffmpeg", "-y", "-i", str(srt_output), str(ass_output)]
                )
                result.invocations.append(conversion)
                if conversion.ok and ass_output.exists():
                    ass_output.replace(ass_path)
                    converted = True
        finally:
            self._remove(srt_input, ass_output)
            # Without the ASS step the retimed file is the output
            if subs.write_ass:
                self._remove(srt_output)

        if not subs.write_ass:
            result.output = srt_output
            if self.config.encoder.command:
                logger.warning(f"{ctx.file}: no ASS output to encode with, encoder skipped")
        elif not converted:
            logger.warning(f"{ctx.file}: SRT → ASS conversion failed, {ass_path.name} left unchanged")
        else:
            result.output = ass_path

            # ── Stage 4: Header ──
            if subs.update_metadata:
                video_ref = f"../{self.config.batch.video_dir}/{base}.{self.config.batch.video_ext}"
                update_ass_metadata(ass_path, video_ref)

            # ── Stage 5: Encode ──
            if self.config.encoder.command:
                result.invocations.append(self._encode(ctx, ass_path))

        logger.info(
            f"{ctx.file}: {result.cue_count} cues retimed"
            + ("" if result.ok else f", {len(result.failed_commands)} command(s) failed")
        )
        return result

    def _encode(self, ctx: JobContext, subtitle: Path) -> InvocationResult:
        output_dir = Path(self.config.encoder.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        values = {
            "video": str(ctx.path),
            "subtitle": str(subtitle),
            "output": str(output_dir / ctx.file),
        }
        command = [arg.format(**values) for arg in self.config.encoder.command]
        return ctx.invoker.run(command)

    @staticmethod
    def _remove(*paths: Path):
        for path in paths:
            Path(path).unlink(missing_ok=True)
