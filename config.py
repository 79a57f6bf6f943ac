"""
Configuration loader for the Subtitle Batch Retimer.
Loads from config.yaml and allows CLI argument overrides.
"""

import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class ConfigError(ValueError):
    """Configuration values are out of range or inconsistent."""


@dataclass
class BatchConfig:
    max_concurrent: int = 8
    video_dir: str = "dist"
    video_ext: str = "mp4"
    pattern: str = ".*"
    launch_delay: float = 0.1  # seconds before each external spawn


@dataclass
class TimelineConfig:
    offset: int = -250  # ms, applied to every cue
    threshold: int = 250  # ms, gaps shorter than this are closed
    output_format: str = "srt"


@dataclass
class SubtitleConfig:
    directory: str = "dist-ass"
    original_suffix: str = "-original"
    write_ass: bool = True
    update_metadata: bool = True


@dataclass
class EncoderConfig:
    # Argument list with {video}, {subtitle} and {output} placeholders
    command: List[str] = field(default_factory=list)
    output_dir: str = "encoded"


@dataclass
class ThrottleConfig:
    enabled: bool = True
    max_cpu_percent: int = 85
    check_interval: float = 2.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None
    debug: bool = False  # show external tools' stderr
    log_spawn: bool = False  # log every external command line


@dataclass
class AppConfig:
    """Top-level application configuration."""
    batch: BatchConfig = field(default_factory=BatchConfig)
    timeline: TimelineConfig = field(default_factory=TimelineConfig)
    subtitles: SubtitleConfig = field(default_factory=SubtitleConfig)
    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def max_concurrent(self) -> int:
        return self.batch.max_concurrent

    def update_from_args(self, args):
        """Override config values from CLI arguments."""
        if getattr(args, "pattern", None):
            self.batch.pattern = args.pattern
        if getattr(args, "videos", None):
            self.batch.video_dir = str(args.videos)
        if getattr(args, "subtitles", None):
            self.subtitles.directory = str(args.subtitles)
        if getattr(args, "max_concurrent", None) is not None:
            self.batch.max_concurrent = args.max_concurrent
        if getattr(args, "offset", None) is not None:
            self.timeline.offset = args.offset
        if getattr(args, "threshold", None) is not None:
            self.timeline.threshold = args.threshold
        if getattr(args, "format", None):
            self.timeline.output_format = args.format
        if getattr(args, "no_ass", False):
            self.subtitles.write_ass = False
        if getattr(args, "no_throttle", False):
            self.throttle.enabled = False
        if getattr(args, "debug", False):
            self.logging.debug = True
        if getattr(args, "log_spawn", False):
            self.logging.log_spawn = True


def _dict_to_dataclass(cls, data: dict):
    """Convert a dict to a dataclass, ignoring unknown keys."""
    if data is None:
        return cls()
    field_names = {f.name for f in cls.__dataclass_fields__.values()}
    unknown = set(data) - field_names
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    filtered = {k: v for k, v in data.items() if k in field_names}
    return cls(**filtered)


def validate_config(config: AppConfig) -> AppConfig:
    """
    Check value ranges.

    Raises:
        ConfigError: On the first invalid value found.
    """
    if not isinstance(config.batch.max_concurrent, int) or config.batch.max_concurrent < 1:
        raise ConfigError(
            f"batch.max_concurrent must be a positive integer, got {config.batch.max_concurrent!r}"
        )
    if not isinstance(config.timeline.offset, int):
        raise ConfigError(f"timeline.offset must be an integer, got {config.timeline.offset!r}")
    if not isinstance(config.timeline.threshold, int) or config.timeline.threshold < 1:
        raise ConfigError(
            f"timeline.threshold must be a positive integer, got {config.timeline.threshold!r}"
        )
    if config.timeline.output_format not in ("srt", "vtt"):
        raise ConfigError(
            f"timeline.output_format must be 'srt' or 'vtt', got {config.timeline.output_format!r}"
        )
    if config.batch.launch_delay < 0:
        raise ConfigError(f"batch.launch_delay cannot be negative, got {config.batch.launch_delay!r}")
    return config


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from a YAML file.
    Falls back to defaults if file is missing.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.warning(f"Config file not found at {path}, using defaults.")
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = AppConfig(
        batch=_dict_to_dataclass(BatchConfig, raw.get("batch")),
        timeline=_dict_to_dataclass(TimelineConfig, raw.get("timeline")),
        subtitles=_dict_to_dataclass(SubtitleConfig, raw.get("subtitles")),
        encoder=_dict_to_dataclass(EncoderConfig, raw.get("encoder")),
        throttle=_dict_to_dataclass(ThrottleConfig, raw.get("throttle")),
        logging=_dict_to_dataclass(LoggingConfig, raw.get("logging")),
    )

    logger.info(f"Configuration loaded from {path}")
    return config
