"""Line parsers for the three supported lyric grammars.

WHY: Each grammar encodes timing differently — a millisecond header with
per-word groups, an LRC header with angle-bracket word markers, or one
or more LRC tags sharing a text payload. Downstream code only wants
LyricLine records with absolute timing, so each grammar gets exactly
one parser behind the same contract.

HOW: Every parser takes one stripped line and returns a list of
LyricLine objects (usually one; the plain grammar returns one per tag).
GRAMMAR_PARSERS maps each LineGrammar member to its parser so the
track parser can dispatch without conditionals.

RULES:
- Word times are absolute milliseconds; line times are seconds
- Every word duration is floored at MIN_WORD_DURATION_MS
- A word-timed header without words still yields a silent line
  (text "", words None) so instrumental gaps survive
- A malformed time value never raises out of a parser; the affected
  line (or tag) is skipped and an empty list is returned for it
- index is left at 0; the track parser re-indexes after sorting
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from lyric_sync.config import DEFAULT_LAST_WORD_DURATION_MS, MIN_WORD_DURATION_MS
from lyric_sync.core.classifier import LineGrammar
from lyric_sync.core.ir import LyricLine, WordSpan
from lyric_sync.core.timecode import parse_time_body

logger = logging.getLogger(__name__)

# [lineStartMs,lineDurationMs] followed by the word content
_NUMERIC_LINE_RE = re.compile(r"^\[(\d+),(\d+)\](.*)$")

# word(startMs,durMs) or word(startMs,durMs,flag). The text is everything
# up to the next timing group, so spaces and parentheses survive.
_NUMERIC_WORD_RE = re.compile(
    r"((?:(?!\(\d+,\d+(?:,\d+)?\)).)*)\((\d+),(\d+)(?:,\d+)?\)"
)

_ANGLE_HEADER_RE = re.compile(r"^\[([\d:.]+)\]")
_ANGLE_MARKER_RE = re.compile(r"<([\d:.]+)>")

_PLAIN_TAG_RE = re.compile(r"\[([\d:.]+)\]")


def _floor_duration(duration_ms: int) -> int:
    return max(duration_ms, MIN_WORD_DURATION_MS)


def _detect_trailing_spaces(raw_words: List[str], full_text: str) -> List[bool]:
    """Find each raw word inside the trimmed line text and check what follows.

    Words that cannot be located (e.g. a final word whose trailing space
    was trimmed away) report False.
    """
    flags: List[bool] = []
    cursor = 0
    for raw in raw_words:
        position = full_text.find(raw, cursor)
        if position == -1:
            flags.append(False)
            continue
        end = position + len(raw)
        flags.append(end < len(full_text) and full_text[end] == " ")
        cursor = end
    return flags


def parse_numeric_line(line: str) -> List[LyricLine]:
    """Parse a "[startMs,durMs]word(startMs,durMs)..." line.

    WHY: Vendor word-timed lyrics encode the line window in a numeric
    header and each word's start inside a trailing timing group. The
    per-word durations in the source are unreliable, so durations are
    recomputed from consecutive start times.

    HOW: Extract the header, collect every non-empty word group, then
    stable-sort the words by start and compute:
      duration[i]    = start[i+1] - start[i]
      duration[last] = (lineStart + lineDuration) - start[last]
    each floored at 50 ms. Display text is the concatenated raw word
    text in written order, trimmed; trailing-space flags are detected
    against it before sorting.

    RULES:
    - Raw word text is kept untrimmed on the WordSpan
    - Spans are ordered by non-decreasing start_ms even when the
      source timing is out of order
    - Zero word groups → one silent line with duration_ms set
    """
    match = _NUMERIC_LINE_RE.match(line)
    if not match:
        return []

    line_start_ms = int(match.group(1))
    line_duration_ms = int(match.group(2))
    content = match.group(3)

    raw_words: List[str] = []
    starts: List[int] = []
    for word_match in _NUMERIC_WORD_RE.finditer(content):
        text = word_match.group(1) or ""
        if not text:
            continue
        raw_words.append(text)
        starts.append(int(word_match.group(2)))

    time_s = line_start_ms / 1000.0
    if not raw_words:
        return [LyricLine(time_s=time_s, text="", duration_ms=line_duration_ms)]

    line_end_ms = line_start_ms + line_duration_ms
    full_text = "".join(raw_words).strip()
    spaces = _detect_trailing_spaces(raw_words, full_text)

    entries = sorted(zip(starts, raw_words, spaces), key=lambda entry: entry[0])

    words = []
    for i, (start_ms, text, space) in enumerate(entries):
        if i + 1 < len(entries):
            duration = entries[i + 1][0] - start_ms
        else:
            duration = line_end_ms - start_ms
        words.append(WordSpan(
            text=text,
            start_ms=start_ms,
            duration_ms=_floor_duration(duration),
            trailing_space=space,
        ))

    return [LyricLine(
        time_s=time_s,
        text=full_text,
        words=tuple(words),
        duration_ms=line_duration_ms,
    )]


def parse_angle_line(line: str) -> List[LyricLine]:
    """Parse a "[mm:ss.fff]<mm:ss.fff>word<mm:ss.fff>word...<end>" line.

    WHY: Enhanced LRC marks each word's start inside angle brackets. A
    trailing bare marker closes the line and only serves to time the
    last word.

    HOW: Locate all markers and pair each with the text up to the next
    marker (or end of line). Display text is built in written order.
    The pairs are then stable-sorted by marker time; a word's duration
    is the gap to the next marker, or 500 ms when it is the last one.

    RULES:
    - Empty segments produce no word but still time the word before them
    - Spans are ordered by non-decreasing start_ms even when the
      source timing is out of order
    - Markers present but every segment empty → silent line, so raw
      markers never leak into display text
    - duration_ms = end of last word - start of first word
    """
    header = _ANGLE_HEADER_RE.match(line)
    if not header:
        return []

    try:
        time_s = parse_time_body(header.group(1))
        content = line[header.end():]
        markers = [
            (m, int(round(parse_time_body(m.group(1)) * 1000)))
            for m in _ANGLE_MARKER_RE.finditer(content)
        ]
    except ValueError as exc:
        logger.debug("Skipping angle-bracket line with bad time: %s", exc)
        return []

    segments: List[Tuple[int, str]] = []
    for i, (marker, start_ms) in enumerate(markers):
        end = markers[i + 1][0].start() if i + 1 < len(markers) else len(content)
        segments.append((start_ms, content[marker.end():end]))

    full_text = "".join(text for _, text in segments).strip()
    segments.sort(key=lambda segment: segment[0])

    words: List[WordSpan] = []
    for i, (start_ms, text) in enumerate(segments):
        if not text:
            continue
        if i + 1 < len(segments):
            next_ms = segments[i + 1][0]
        else:
            next_ms = start_ms + DEFAULT_LAST_WORD_DURATION_MS
        words.append(WordSpan(
            text=text,
            start_ms=start_ms,
            duration_ms=_floor_duration(next_ms - start_ms),
            trailing_space=text.endswith(" "),
        ))

    if not words:
        return [LyricLine(time_s=time_s, text="")]

    return [LyricLine(
        time_s=time_s,
        text=full_text,
        words=tuple(words),
        duration_ms=words[-1].end_ms - words[0].start_ms,
    )]


def parse_plain_line(line: str) -> List[LyricLine]:
    """Parse "[mm:ss.ff][mm:ss.ff]text" into one line per tag.

    Multiple tags share one text payload (chorus shorthand). A tag whose
    time body is malformed is skipped on its own.
    """
    text = _PLAIN_TAG_RE.sub("", line).strip()
    lines: List[LyricLine] = []
    for body in _PLAIN_TAG_RE.findall(line):
        try:
            time_s = parse_time_body(body)
        except ValueError as exc:
            logger.debug("Skipping time tag in %r: %s", line, exc)
            continue
        lines.append(LyricLine(time_s=time_s, text=text))
    return lines


GRAMMAR_PARSERS: Dict[LineGrammar, Callable[[str], List[LyricLine]]] = {
    LineGrammar.WORD_TIMED_NUMERIC: parse_numeric_line,
    LineGrammar.WORD_TIMED_ANGLE: parse_angle_line,
    LineGrammar.PLAIN: parse_plain_line,
}


def parse_line(line: str, grammar: Optional[LineGrammar]) -> List[LyricLine]:
    """Dispatch one classified line to its grammar parser."""
    if grammar is None:
        return []
    return GRAMMAR_PARSERS[grammar](line)
