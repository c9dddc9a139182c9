"""LRC serializer — standard multi-line and word-tagged output.

WHY: Users export merged lyrics to files that other players read. A
plain player only understands one "[mm:ss.fff]text" per line, so each
track present at an instant becomes its own physical line sharing the
same timestamp. Karaoke-capable players understand angle-bracket word
markers, so word-timed tracks can be written word by word.

HOW: serialize_timeline() writes the metadata header, a blank line,
then walks the timeline. For every line it emits one physical line per
track in the requested order. When word-by-word output is requested
and the track carries word spans, the line is rendered as
"[line]<w1>text<w2>text...<end>", where the end marker is
max(last word end, line start + declared duration).

RULES:
- Header tags: ti, ar, al, by, offset (offset written in ms), in that
  order, only when present and non-empty/non-zero
- Translation/romanization lines are skipped when the track is absent
  or the per-line content is None or blank
- A blank original still emits a bare "[mm:ss.fff]" so pauses survive
  a re-parse
- All timestamps use three-digit milliseconds
- convert_numeric_to_angle() rewrites numeric word-timed content into
  angle-bracket lines without going through a timeline
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Union

from lyric_sync.config import HEADER_TAGS, parse_track_order
from lyric_sync.core.classifier import LineGrammar, classify_line, is_comment_line
from lyric_sync.core.grammars import parse_numeric_line
from lyric_sync.core.ir import LyricLine, MergedTimeline, MetadataValue, WordSpan
from lyric_sync.core.timecode import ms_to_timestamp, seconds_to_tag
from lyric_sync.formatters.base import BaseFormatter, FormatterOutput

logger = logging.getLogger(__name__)


def _format_header_value(tag: str, value: MetadataValue) -> Optional[str]:
    if tag == "offset":
        ms = int(round(float(value) * 1000))
        return str(ms) if ms else None
    text = str(value).strip()
    return text or None


def format_header(metadata: dict) -> List[str]:
    """Render the known metadata tags as "[tag:value]" lines."""
    header: List[str] = []
    for tag in HEADER_TAGS:
        if tag not in metadata:
            continue
        value = _format_header_value(tag, metadata[tag])
        if value is not None:
            header.append("[{}:{}]".format(tag, value))
    return header


def format_word_line(
    time_s: float,
    words: Sequence[WordSpan],
    duration_ms: Optional[int] = None,
) -> str:
    """Render one word-timed line in angle-bracket notation.

    Example: [00:21.783]<00:21.783>凉<00:22.003>风<00:22.263>
    """
    line_start_ms = int(round(time_s * 1000))
    parts = [seconds_to_tag(time_s)]
    for word in words:
        parts.append("<{}>{}".format(ms_to_timestamp(word.start_ms), word.text))

    end_ms = words[-1].end_ms
    if duration_ms is not None:
        end_ms = max(end_ms, line_start_ms + duration_ms)
    parts.append("<{}>".format(ms_to_timestamp(end_ms)))
    return "".join(parts)


def _render_track(
    line: LyricLine,
    track: str,
    timeline: MergedTimeline,
    word_by_word: bool,
) -> Optional[str]:
    """Render one track of one line, or None when nothing is emitted."""
    words: Optional[Sequence[WordSpan]] = None
    duration_ms: Optional[int] = None

    if track == "original":
        content = line.text
        words, duration_ms = line.words, line.duration_ms
    elif track == "translation":
        if not timeline.has_translation or line.translation is None:
            return None
        content = line.translation
    else:
        if not timeline.has_romanization or line.romanization is None:
            return None
        content = line.romanization
        words, duration_ms = line.romanization_words, line.romanization_duration_ms

    if not content.strip():
        # Only the original keeps a bare pause marker.
        return seconds_to_tag(line.time_s) if track == "original" else None

    if word_by_word and words:
        return format_word_line(line.time_s, words, duration_ms)
    return "{}{}".format(seconds_to_tag(line.time_s), content)


def serialize_timeline(
    timeline: MergedTimeline,
    order: Union[str, Iterable[str], None] = None,
    word_by_word: bool = False,
) -> str:
    """Serialize a merged timeline back to LRC text.

    Args:
        timeline: The merged timeline to render.
        order: Track order; None uses config.DEFAULT_TRACK_ORDER.
        word_by_word: Use angle-bracket word markers where available.

    Returns:
        The LRC document without a trailing newline, or "" for an
        empty timeline.
    """
    tracks = parse_track_order(order)
    if not timeline.lines:
        logger.warning("Serializing an empty timeline")
        return ""

    out: List[str] = []
    header = format_header(timeline.metadata)
    if header:
        out.extend(header)
        out.append("")

    for line in timeline.lines:
        for track in tracks:
            rendered = _render_track(line, track, timeline, word_by_word)
            if rendered is not None:
                out.append(rendered)

    return "\n".join(out).strip()


def convert_numeric_to_angle(content: str) -> str:
    """Rewrite numeric word-timed lyrics as angle-bracket lyrics.

    WHY: Many players understand enhanced LRC but not the vendor's
    "[startMs,durMs]word(startMs,durMs)" grammar. Exporting the raw
    text in angle-bracket form keeps word timing portable.

    HOW: Each numeric line is parsed and re-rendered with
    format_word_line(). Comment lines are removed; metadata and lines in
    other grammars pass through unchanged.

    RULES:
    - Blank rows are dropped; rows are stripped
    - A numeric header with no words becomes a bare "[mm:ss.fff]" pause
    """
    out: List[str] = []
    for row in content.splitlines():
        line = row.strip()
        if not line or is_comment_line(line):
            continue
        if classify_line(line) != LineGrammar.WORD_TIMED_NUMERIC:
            out.append(line)
            continue
        for parsed in parse_numeric_line(line):
            if parsed.words:
                out.append(format_word_line(parsed.time_s, parsed.words, parsed.duration_ms))
            else:
                out.append(seconds_to_tag(parsed.time_s))
    return "\n".join(out)


class LrcFormatter(BaseFormatter):
    """Formatter that writes the merged timeline as one LRC document.

    RULES:
    - Output suffix: "-merged.lrc" ("-merged-words.lrc" when word-by-word)
    - Media type: "text/plain"
    """

    @property
    def name(self) -> str:
        return "LRC"

    def format(self, timeline: MergedTimeline) -> List[FormatterOutput]:
        content = serialize_timeline(timeline, self.order, self.word_by_word)
        if content:
            content += "\n"
        suffix = "-merged-words.lrc" if self.word_by_word else "-merged.lrc"
        return [FormatterOutput(suffix=suffix, content=content, media_type="text/plain")]
