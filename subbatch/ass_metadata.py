"""
ASS Metadata — Rewrites the header of an Advanced SubStation file.

FFmpeg writes a minimal [Script Info] block when converting SRT to ASS.
Everything before the [Events] section is replaced with a fixed header
that carries the project's style and points the editor at the video.
"""

import re
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

ASS_HEADER_TEMPLATE = """[Script Info]
; Script generated by Aegisub 3.2.2
; http://www.aegisub.org/
WrapStyle: 0
ScaledBorderAndShadow: yes
ScriptType: v4.00+
YCbCr Matrix: TV.601
PlayResX: 1920
PlayResY: 1080

[Aegisub Project Garbage]
Last Style Storage: Default
Audio File: {video_path}
Video File: {video_path}
Video AR Mode: 4
Video AR Value: 1.777778
Video Zoom Percent: 0.500000

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Noto Sans TC Bold,64,&H00FFFFFF,&H000000FF,&H00000000,&H00000000,0,0,0,0,100,100,1.2,0,1,1.1,1.2,2,10,10,64,1"""

# Everything up to the blank line in front of [Events]
_HEADER_RE = re.compile(r"^[\s\S]+?(?=\r?\n\r?\n\[Events\])")


def render_header(video_path: str, template: str = ASS_HEADER_TEMPLATE) -> str:
    return template.format(video_path=video_path)


def replace_header(content: str, header: str) -> str:
    """Return `content` with its pre-[Events] header swapped for `header`."""
    return _HEADER_RE.sub(lambda _: header, content, count=1)


def update_ass_metadata(ass_path: Path, video_path: str,
                        template: str = ASS_HEADER_TEMPLATE) -> bool:
    """
    Rewrite the header of `ass_path` in place.

    Returns:
        False when the file has no [Events] section (left untouched).
    """
    ass_path = Path(ass_path)
    content = ass_path.read_text(encoding="utf-8")

    if not _HEADER_RE.search(content):
        logger.warning(f"No [Events] section in {ass_path.name}, header not updated")
        return False

    updated = replace_header(content, render_header(video_path, template))
    ass_path.write_text(updated, encoding="utf-8")

    logger.debug(f"ASS header updated: {ass_path.name} → {video_path}")
    return True
