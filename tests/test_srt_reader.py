"""
Tests for the SRT Reader and reader/writer round trips.
"""

import pytest
from subbatch.cue import Cue, parse_timestamp
from subbatch.srt_reader import MalformedCueError, SRTReader
from subbatch.srt_writer import SRTWriter

SAMPLE_SRT = """1
00:00:01,200 --> 00:00:04,800
Hello everyone, welcome to the show.

2
00:00:05,100 --> 00:00:06,300
(Audience clapping)

3
00:00:06,500 --> 00:00:10,200
Two
lines
"""

SAMPLE_VTT = """WEBVTT

NOTE a comment block

intro
00:01.000 --> 00:02.500 align:start
First

00:00:03.000 --> 00:00:04.000
Second
"""


@pytest.fixture
def reader():
    return SRTReader()


class TestParseTimestamp:
    """Test timestamp parsing."""

    def test_srt(self):
        assert parse_timestamp("01:01:01,123") == 3661123

    def test_dot_separator(self):
        assert parse_timestamp("00:00:01.5") == 1500

    def test_short_form(self):
        assert parse_timestamp("01:02.003") == 62003

    def test_long_hours(self):
        assert parse_timestamp("100:00:00,000") == 360000000

    @pytest.mark.parametrize("value", ["", "abc", "00:61:00,000", "1:2:3:4", "00:00:aa,000"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)


class TestSRTParse:
    """Test SubRip parsing."""

    def test_basic(self, reader):
        cues = reader.parse(SAMPLE_SRT)
        assert len(cues) == 3
        assert cues[0] == Cue(1200, 4800, "Hello everyone, welcome to the show.")

    def test_multiline_payload(self, reader):
        cues = reader.parse(SAMPLE_SRT)
        assert cues[2].text == "Two\nlines"

    def test_crlf(self, reader):
        cues = reader.parse(SAMPLE_SRT.replace("\n", "\r\n"))
        assert [c.text for c in cues] == [c.text for c in reader.parse(SAMPLE_SRT)]

    def test_document_order_kept(self, reader):
        content = "1\n00:00:05,000 --> 00:00:06,000\nLate\n\n2\n00:00:01,000 --> 00:00:02,000\nEarly\n"
        cues = reader.parse(content)
        assert [c.text for c in cues] == ["Late", "Early"]

    def test_empty(self, reader):
        assert reader.parse("") == []

    def test_read_file_with_bom(self, reader, tmp_path):
        path = tmp_path / "bom.srt"
        path.write_text("\ufeff" + SAMPLE_SRT, encoding="utf-8")
        assert len(reader.read(path)) == 3

    def test_missing_file(self, reader, tmp_path):
        with pytest.raises(FileNotFoundError):
            reader.read(tmp_path / "missing.srt")


class TestVTTParse:
    """Test WebVTT parsing."""

    def test_header_and_notes_skipped(self, reader):
        cues = reader.parse(SAMPLE_VTT)
        assert [c.text for c in cues] == ["First", "Second"]

    def test_settings_ignored(self, reader):
        cues = reader.parse(SAMPLE_VTT)
        assert (cues[0].start, cues[0].end) == (1000, 2500)


class TestMalformed:
    """Test malformed input handling."""

    def test_bad_timing_line(self, reader):
        content = "1\n00:00:01,000 --> 00:00:02,000\nok\n\n2\nnot a timing line\ntext\n"
        with pytest.raises(MalformedCueError) as exc:
            reader.parse(content)
        assert exc.value.block == 2

    def test_index_without_timing(self, reader):
        with pytest.raises(MalformedCueError):
            reader.parse("1\n")

    def test_bad_timestamp(self, reader):
        with pytest.raises(MalformedCueError):
            reader.parse("1\n00:99:01,000 --> 00:00:02,000\ntext\n")

    def test_source_in_message(self, reader, tmp_path):
        path = tmp_path / "broken.srt"
        path.write_text("1\ngarbage\n", encoding="utf-8")
        with pytest.raises(MalformedCueError, match="broken.srt"):
            reader.read(path)


class TestRoundTrip:
    """Test reader → writer → reader preserves cues."""

    @pytest.mark.parametrize("fmt", ["srt", "vtt"])
    def test_round_trip(self, reader, tmp_path, fmt):
        cues = reader.parse(SAMPLE_SRT)
        path = tmp_path / f"out.{fmt}"
        SRTWriter(fmt).write(cues, path)
        again = reader.read(path)
        assert again == cues

    def test_unicode_payload(self, reader):
        cues = [Cue(0, 1000, "你好，世界"), Cue(1000, 2000, "¿Qué tal?")]
        assert reader.parse(SRTWriter().dumps(cues)) == cues
