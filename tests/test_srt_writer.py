"""
Tests for the SRT Writer module.
"""

import pytest
from pathlib import Path
from subbatch.cue import Cue, format_timestamp
from subbatch.srt_writer import SRTWriter


@pytest.fixture
def writer():
    return SRTWriter()


@pytest.fixture
def sample_cues():
    return [
        Cue(1200, 4800, "Hello everyone, welcome to the show."),
        Cue(5100, 6300, "(Audience clapping)"),
        Cue(6500, 10200, "Today we're going to talk about something amazing."),
        Cue(10500, 11800, "(Door slams)"),
    ]


class TestTimestampFormat:
    """Test SRT timestamp formatting."""

    def test_zero(self):
        assert format_timestamp(0) == "00:00:00,000"

    def test_simple_seconds(self):
        assert format_timestamp(5000) == "00:00:05,000"

    def test_milliseconds(self):
        assert format_timestamp(1234) == "00:00:01,234"

    def test_minutes(self):
        assert format_timestamp(65500) == "00:01:05,500"

    def test_hours(self):
        assert format_timestamp(3661123) == "01:01:01,123"

    def test_large_value(self):
        assert format_timestamp(7200000) == "02:00:00,000"

    def test_negative_clamps_to_zero(self):
        assert format_timestamp(-1000) == "00:00:00,000"

    def test_vtt_separator(self):
        assert format_timestamp(1234, ".") == "00:00:01.234"


class TestSRTWrite:
    """Test SRT file writing."""

    def test_write_creates_file(self, writer, sample_cues, tmp_path):
        output = tmp_path / "test.srt"
        writer.write(sample_cues, output)
        assert output.exists()

    def test_write_utf8_encoding(self, writer, tmp_path):
        cues = [Cue(0, 1000, "Héllo wörld — ñ 你好")]
        output = tmp_path / "utf8.srt"
        writer.write(cues, output)
        content = output.read_text(encoding="utf-8")
        assert "Héllo wörld — ñ 你好" in content

    def test_write_sequential_indices(self, writer, sample_cues, tmp_path):
        output = tmp_path / "indexed.srt"
        writer.write(sample_cues, output)
        content = output.read_text(encoding="utf-8")
        lines = content.strip().split("\n")
        indices = [l for l in lines if l.strip().isdigit()]
        assert indices == ["1", "2", "3", "4"]

    def test_write_correct_format(self, writer, tmp_path):
        cues = [Cue(1200, 4800, "Hello world.")]
        output = tmp_path / "format.srt"
        writer.write(cues, output)
        content = output.read_text(encoding="utf-8")
        expected = "1\n00:00:01,200 --> 00:00:04,800\nHello world.\n\n"
        assert content == expected

    def test_write_multiline_payload(self, writer):
        content = writer.dumps([Cue(0, 1000, "line one\nline two")])
        assert content == "1\n00:00:00,000 --> 00:00:01,000\nline one\nline two\n\n"

    def test_write_empty_entries(self, writer, tmp_path):
        output = tmp_path / "empty.srt"
        writer.write([], output)
        assert output.exists()
        assert output.read_text() == ""

    def test_write_creates_parent_dirs(self, writer, sample_cues, tmp_path):
        output = tmp_path / "sub" / "dir" / "test.srt"
        writer.write(sample_cues, output)
        assert output.exists()


class TestVTTWrite:
    """Test WebVTT output."""

    def test_header_and_separator(self):
        content = SRTWriter("vtt").dumps([Cue(1200, 4800, "Hello")])
        assert content == "WEBVTT\n\n1\n00:00:01.200 --> 00:00:04.800\nHello\n\n"

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            SRTWriter("sub")


class TestPreview:
    """Test the preview formatter."""

    def test_preview_limits_entries(self, writer, sample_cues):
        preview = writer.write_preview(sample_cues, max_entries=2)
        lines = preview.strip().split("\n")
        assert len(lines) == 3  # 2 entries + "and X more"
        assert "2 more" in lines[-1]

    def test_preview_truncates_long_text(self, writer):
        cues = [Cue(0, 1000, "A" * 100)]
        preview = writer.write_preview(cues)
        assert "..." in preview

    def test_preview_empty(self, writer):
        assert writer.write_preview([]) == ""
