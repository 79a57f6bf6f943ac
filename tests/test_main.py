"""
Tests for the CLI entry point.
"""

import sys

import pytest
import main as main_module
from subbatch.cue import Cue
from subbatch.srt_reader import SRTReader

SRT = """1
00:00:00,100 --> 00:00:01,000
First

2
00:00:01,100 --> 00:00:02,000
Second

3
00:00:05,000 --> 00:00:06,000
Third
"""


@pytest.fixture
def run_main(monkeypatch, tmp_path):
    """Run main() with the given arguments from inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(main_module, "setup_logging", lambda level="INFO", log_file=None: None)

    def run(*args):
        monkeypatch.setattr(sys, "argv", ["main.py", *[str(a) for a in args]])
        main_module.main()

    return run


class TestRetimeMode:
    """Test --retime on a single file."""

    def test_retime_srt(self, run_main, tmp_path, capsys):
        source = tmp_path / "in.srt"
        target = tmp_path / "out.srt"
        source.write_text(SRT, encoding="utf-8")

        run_main("--retime", source, target)

        assert SRTReader().read(target) == [
            Cue(0, 750, "First"),
            Cue(750, 1750, "Second"),
            Cue(4750, 5750, "Third"),
        ]
        assert "3 cues retimed" in capsys.readouterr().out

    def test_retime_flags_and_vtt(self, run_main, tmp_path):
        source = tmp_path / "in.srt"
        target = tmp_path / "out.vtt"
        source.write_text(SRT, encoding="utf-8")

        run_main("--retime", source, target, "--offset", "0", "--threshold", "50")

        content = target.read_text(encoding="utf-8")
        assert content.startswith("WEBVTT")
        assert "00:00:00.100 --> 00:00:01.000" in content

    def test_malformed_input_exits_1(self, run_main, tmp_path, capsys):
        source = tmp_path / "in.srt"
        source.write_text("1\nnot a timing line\ntext\n", encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            run_main("--retime", source, tmp_path / "out.srt")

        assert exc.value.code == 1
        assert "[ERROR]" in capsys.readouterr().out
        assert not (tmp_path / "out.srt").exists()

    def test_missing_input_exits_1(self, run_main, tmp_path):
        with pytest.raises(SystemExit) as exc:
            run_main("--retime", tmp_path / "none.srt", tmp_path / "out.srt")
        assert exc.value.code == 1


class TestBatchMode:
    """Test exit codes and output of a batch run."""

    def test_missing_video_dir_exits_1(self, run_main, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            run_main("--videos", tmp_path / "missing", "--no-throttle", "-q")
        assert exc.value.code == 1
        assert "Cannot list" in capsys.readouterr().out

    def test_zero_concurrency_is_usage_error(self, run_main):
        with pytest.raises(SystemExit) as exc:
            run_main("-j", "0")
        assert exc.value.code == 2

    def test_invalid_pattern_is_usage_error(self, run_main, tmp_path, capsys):
        (tmp_path / "dist").mkdir()
        with pytest.raises(SystemExit) as exc:
            run_main("(", "--no-throttle", "-q")
        assert exc.value.code == 2
        assert "Invalid filter pattern" in capsys.readouterr().out

    def test_empty_batch(self, run_main, tmp_path, capsys):
        (tmp_path / "dist").mkdir()
        run_main("--no-throttle")
        out = capsys.readouterr().out
        assert "Concurrent: 8" in out
        assert "Successfully processed 0/0 videos" in out

    def test_quiet_prints_nothing(self, run_main, tmp_path, capsys):
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "a.mp4").write_bytes(b"")
        run_main("--no-throttle", "-q")
        assert capsys.readouterr().out == ""


class TestPrintProgress:
    """Test the console progress bar."""

    def test_partial(self, capsys):
        main_module.print_progress(1, 4, "2.00/s")
        out = capsys.readouterr().out
        assert "[#######-----------------------]  25%  1/4" in out
        assert "speed: 2.00/s" in out
        assert not out.endswith("\n")

    def test_complete_ends_line(self, capsys):
        main_module.print_progress(4, 4, "N/A")
        assert capsys.readouterr().out.endswith("\n")

    def test_zero_total(self, capsys):
        main_module.print_progress(0, 0, "N/A")
        assert " 100%  0/0" in capsys.readouterr().out
