"""
Subtitle Batch Retimer — CLI Entry Point

Usage:
    python main.py                          # every dist/*.mp4
    python main.py "ep0[1-3]"               # only ep01..ep03
    python main.py -j 4 --offset -300 --threshold 200
    python main.py --retime in.srt out.srt  # one file, no FFmpeg
"""

import sys
import argparse
import logging
from pathlib import Path

from config import ConfigError, load_config, validate_config
from subbatch.orchestrator import BatchOrchestrator, EnumerationError
from subbatch.progress import format_total_time
from subbatch.srt_reader import MalformedCueError, SRTReader
from subbatch.srt_writer import SRTWriter
from subbatch.subtitle_job import SubtitleJob
from subbatch.timeline import default_pipeline


def setup_logging(level: str = "INFO", log_file: str = None):
    """Configure logging for the application."""
    log_format = (
        "%(asctime)s | %(levelname)-7s | %(name)-20s | %(message)s"
    )
    date_format = "%H:%M:%S"

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=log_format,
        datefmt=date_format,
        handlers=handlers
    )

    # Suppress noisy third-party loggers
    logging.getLogger("psutil").setLevel(logging.WARNING)


def print_banner():
    """Print the application banner."""
    banner = """
==========================================================
          Subtitle Batch Retimer

  Resync  +  Clamp  +  Gap-fill
  FFmpeg-driven, bounded concurrency
==========================================================
"""
    print(banner)


def print_progress(completed: int, total: int, rate: str):
    """Console progress callback with progress bar."""
    bar_width = 30
    percent = int(100 * completed / total) if total else 100
    filled = int(bar_width * percent / 100)
    bar = "#" * filled + "-" * (bar_width - filled)
    print(f"\r  [{bar}] {percent:3d}%  {completed}/{total}  speed: {rate:<10}", end="", flush=True)
    if completed >= total:
        print()  # Newline at completion


def retime_file(config, source: Path, target: Path) -> int:
    """Run the timeline pipeline over one subtitle file."""
    pipeline = default_pipeline(
        offset=config.timeline.offset, threshold=config.timeline.threshold
    )
    fmt = target.suffix.lstrip(".").lower()
    if fmt not in ("srt", "vtt"):
        fmt = config.timeline.output_format

    cues = SRTReader().read(source)
    fixed = pipeline.run(cues)
    SRTWriter(fmt).write(fixed, target)
    return len(fixed)


def main():
    parser = argparse.ArgumentParser(
        description="Subtitle Batch Retimer — Shift, clamp and gap-fill the "
                    "subtitle track of every video in a directory.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                               # All videos in dist/
  python main.py "S01E0[1-5]"                  # Filter by name (regex, no extension)
  python main.py -j 4                          # At most 4 jobs at once
  python main.py --offset -500 --threshold 300 # Custom timing
  python main.py --no-ass --format vtt         # Keep retimed WebVTT, skip ASS
  python main.py --retime in.srt out.srt       # Retime a single file
        """
    )

    parser.add_argument(
        "pattern",
        nargs="?",
        default=None,
        help="Regex matched against the video name without extension (default: .*)"
    )
    parser.add_argument(
        "--videos",
        type=Path,
        default=None,
        help="Directory listing the videos (default: dist)"
    )
    parser.add_argument(
        "--subtitles",
        type=Path,
        default=None,
        help="Directory holding the .ass tracks (default: dist-ass)"
    )
    parser.add_argument(
        "-j", "--max-concurrent",
        type=int,
        default=None,
        help="Maximum jobs running at once (default: 8)"
    )
    parser.add_argument(
        "--offset",
        type=int,
        default=None,
        help="Shift in milliseconds applied to every cue (default: -250)"
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Gaps shorter than this many milliseconds are closed (default: 250)"
    )
    parser.add_argument(
        "--format",
        choices=["srt", "vtt"],
        default=None,
        help="Intermediate/output text format (default: srt)"
    )
    parser.add_argument(
        "--no-ass",
        action="store_true",
        help="Keep the retimed text file instead of converting back to ASS"
    )
    parser.add_argument(
        "--no-throttle",
        action="store_true",
        help="Launch jobs without checking CPU usage"
    )
    parser.add_argument(
        "--retime",
        nargs=2,
        type=Path,
        metavar=("INPUT", "OUTPUT"),
        default=None,
        help="Retime a single .srt/.vtt file and exit"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to custom config.yaml file"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show external tools' error output (implies --verbose)"
    )
    parser.add_argument(
        "--log-spawn",
        action="store_true",
        help="Log every external command line"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output, including the progress bar"
    )

    args = parser.parse_args()

    # ── Load config ──
    config = load_config(args.config)
    config.update_from_args(args)

    try:
        validate_config(config)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(2)

    # ── Setup logging ──
    verbose = args.verbose or args.debug
    log_level = "DEBUG" if verbose else ("WARNING" if args.quiet else config.logging.level)
    setup_logging(level=log_level, log_file=config.logging.file)

    # ── Single-file mode ──
    if args.retime:
        source, target = args.retime
        try:
            count = retime_file(config, source, target)
        except (FileNotFoundError, MalformedCueError) as e:
            print(f"\n  [ERROR] {e}")
            sys.exit(1)
        if not args.quiet:
            print(f"  [OK] {count} cues retimed → {target}")
        return

    # ── Banner ──
    if not args.quiet:
        print_banner()
        print(f"  Videos:     {config.batch.video_dir}")
        print(f"  Subtitles:  {config.subtitles.directory}")
        print(f"  Filter:     ^{config.batch.pattern}\\.{config.batch.video_ext}$")
        print(f"  Concurrent: {config.max_concurrent}")
        print(f"  Timing:     offset {config.timeline.offset}ms, gap threshold {config.timeline.threshold}ms")
        print()

    # ── Run batch ──
    try:
        orchestrator = BatchOrchestrator(
            config,
            SubtitleJob(config),
            sink=print_progress if not args.quiet else None,
        )
        summary = orchestrator.run()

    except KeyboardInterrupt:
        print("\n\n  [WARN] Processing interrupted by user.")
        sys.exit(130)
    except EnumerationError as e:
        print(f"\n  [ERROR] {e}")
        sys.exit(1)
    except ValueError as e:
        # Bad filter pattern
        print(f"\n  [ERROR] {e}")
        sys.exit(2)
    except Exception as e:
        logging.exception("Unexpected error")
        print(f"\n  [ERROR] Unexpected error: {e}")
        sys.exit(1)

    if not args.quiet:
        print(f"\n  [OK] Successfully processed {summary.completed}/{summary.total} videos")
        if summary.failed:
            print(f"  [WARN] Failed: {', '.join(summary.failed)}")
        print(f"  [TIME] Total time: {format_total_time(summary.elapsed)}")


if __name__ == "__main__":
    main()
