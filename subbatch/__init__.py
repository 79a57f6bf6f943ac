"""
Subtitle Batch Retimer — Pipeline Package

Batch retiming of subtitle tracks for a directory of videos:
  - cue: Cue record and timestamp helpers
  - timeline: Resync / clamp / gap-fill stages and their pipeline
  - srt_reader, srt_writer: SubRip and WebVTT text
  - scheduler: Bounded-concurrency FIFO job admission
  - progress: Batch timer, counters and throughput
  - process: External tool invocation (FFmpeg, encoders)
  - cpu_throttle: CPU usage check before launching jobs
  - ass_metadata: ASS header rewrite
  - subtitle_job: Per-video retime handler
  - orchestrator: Listing, filtering and batch wiring
"""

__version__ = "1.0.0"
