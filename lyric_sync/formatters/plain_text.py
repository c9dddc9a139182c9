"""Per-track plain text export, with or without timestamps.

WHY: Users copy lyrics into notes, share a translation on its own, or
feed one track to a tool that only reads one text per line. A merged
LRC interleaves tracks, so this formatter writes each track as a
separate file aligned line-for-line with the timeline.

HOW: For every track in the requested order that is present in the
timeline, emit one row per timeline line. With timestamps, rows look
like "[mm:ss.fff] text"; without, just the text. Missing secondary
content renders as an empty row so row N always matches timeline
line N across all exported tracks.

RULES:
- Original is always present; translation/romanization only when the
  timeline flags say so
- Rows are joined with "\\n" and the file ends with a newline
- Output suffix: "-{track}.txt"; media type "text/plain"
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from lyric_sync.core.ir import LyricLine, MergedTimeline
from lyric_sync.core.timecode import seconds_to_tag
from lyric_sync.formatters.base import BaseFormatter, FormatterOutput


def _track_text(line: LyricLine, track: str) -> str:
    if track == "translation":
        return line.translation or ""
    if track == "romanization":
        return line.romanization or ""
    return line.text


def _track_present(timeline: MergedTimeline, track: str) -> bool:
    if track == "translation":
        return timeline.has_translation
    if track == "romanization":
        return timeline.has_romanization
    return True


def export_track_text(
    timeline: MergedTimeline,
    track: str = "original",
    with_timestamps: bool = True,
) -> str:
    """Render one track of the timeline as text, one row per line."""
    rows: List[str] = []
    for line in timeline.lines:
        text = _track_text(line, track)
        if with_timestamps:
            rows.append("{} {}".format(seconds_to_tag(line.time_s), text).rstrip())
        else:
            rows.append(text)
    return "\n".join(rows)


class PlainTextFormatter(BaseFormatter):
    """Formatter that writes one text file per present track."""

    def __init__(
        self,
        order: Union[str, Iterable[str], None] = None,
        word_by_word: Optional[bool] = None,
        with_timestamps: bool = False,
    ) -> None:
        super().__init__(order=order, word_by_word=word_by_word)
        self.with_timestamps = with_timestamps

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, timeline: MergedTimeline) -> List[FormatterOutput]:
        outputs: List[FormatterOutput] = []
        for track in self.order:
            if not _track_present(timeline, track):
                continue
            content = export_track_text(timeline, track, self.with_timestamps)
            if content:
                content += "\n"
            outputs.append(FormatterOutput(
                suffix="-{}.txt".format(track),
                content=content,
                media_type="text/plain",
            ))
        return outputs
