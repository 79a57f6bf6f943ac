"""
Shared fixtures: a config pointing at tmp dirs and a fake FFmpeg invoker.
"""

from pathlib import Path

import pytest
from config import AppConfig
from subbatch.process import InvocationResult


class FakeFFmpeg:
    """
    Stands in for ProcessInvoker.

    `ffmpeg -i X.ass -c:s text Y.srt` writes `srt_content` to Y (or
    `srt_content[X stem]` when it is a dict).
    `ffmpeg -i Y.srt Z.ass` writes a minimal ASS file embedding Y's text.
    Any other command just succeeds.
    """

    def __init__(self, srt_content: str = "", fail_programs=()):
        self.srt_content = srt_content
        self.fail_programs = set(fail_programs)
        self.commands = []

    def run(self, command):
        command = [str(c) for c in command]
        self.commands.append(command)

        if command[0] in self.fail_programs:
            return InvocationResult(command, 1, "simulated failure")

        if command[0] == "ffmpeg":
            source = Path(command[command.index("-i") + 1])
            target = Path(command[-1])
            if "-c:s" in command:
                target.write_text(self.content_for(source), encoding="utf-8")
            else:
                body = source.read_text(encoding="utf-8")
                target.write_text(
                    "[Script Info]\nScriptType: v4.00+\n\n[Events]\n"
                    f"Format: Layer, Start, End, Text\n; {body.count('-->')} dialogues\n",
                    encoding="utf-8",
                )
        return InvocationResult(command, 0, "")

    def content_for(self, source: Path) -> str:
        if isinstance(self.srt_content, dict):
            return self.srt_content[source.stem]
        return self.srt_content


@pytest.fixture
def config(tmp_path):
    cfg = AppConfig()
    cfg.batch.video_dir = str(tmp_path / "dist")
    cfg.batch.launch_delay = 0
    cfg.subtitles.directory = str(tmp_path / "dist-ass")
    cfg.encoder.output_dir = str(tmp_path / "encoded")
    cfg.throttle.enabled = False
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist-ass").mkdir()
    return cfg
