"""Tolerance-based alignment of translation and romanization tracks.

WHY: Translation and romanization tracks are authored separately from
the original and their timestamps rarely match exactly — a few
milliseconds of drift is normal. The player needs each original line
to carry the secondary text that belongs to "the same moment", while
secondary cues with no original counterpart (a translated spoken
intro, a note over an instrumental break) must not be lost.

HOW: A two-pointer walk over the primary and one secondary track:
  1. For each primary line, advance the secondary pointer past lines
     more than ``tolerance`` earlier (never past the last one).
  2. If the pointed-at secondary line is within ``tolerance``, attach
     its text (and, for romanization, its word spans) to a new copy of
     the primary line and mark it consumed; otherwise attach "".
  3. Append every unconsumed secondary line as a standalone line that
     carries only the secondary field.
  4. Sort once (stable) and re-index.
build_timeline() parses all raw inputs and runs the translation pass
before the romanization pass.

RULES:
- Input sequences are never mutated; new records are produced
- Unmatched primary lines get "" (track present), never None
- The romanization pass sees lines inserted by the translation pass
- Identical inputs always produce identical order and indices
- A supplied track that parses to zero lines leaves its flag False
- An empty original with a translation promotes the translation to
  the primary track
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from lyric_sync.config import DEFAULT_TOLERANCE_S
from lyric_sync.core.ir import LyricLine, MergedTimeline, TrackKind
from lyric_sync.core.parser import parse_track, reindex

logger = logging.getLogger(__name__)

# Absorbs float error so that e.g. 10.05 vs 10.00 counts as 50 ms.
_EPSILON = 1e-9


def _attach(line: LyricLine, kind: TrackKind, source: LyricLine) -> LyricLine:
    if kind == TrackKind.translation:
        return replace(line, translation=source.text)
    if source.words:
        return replace(
            line,
            romanization=source.text,
            romanization_words=source.words,
            romanization_duration_ms=source.duration_ms,
        )
    return replace(line, romanization=source.text)


def _attach_empty(line: LyricLine, kind: TrackKind) -> LyricLine:
    if kind == TrackKind.translation:
        return replace(line, translation="")
    return replace(line, romanization="")


def _standalone(source: LyricLine, kind: TrackKind) -> LyricLine:
    empty = LyricLine(time_s=source.time_s, text="")
    return _attach(empty, kind, source)


def merge_secondary(
    primary: Sequence[LyricLine],
    secondary: Sequence[LyricLine],
    kind: TrackKind,
    tolerance_s: float = DEFAULT_TOLERANCE_S,
) -> Tuple[LyricLine, ...]:
    """Align one secondary track onto the primary lines.

    Args:
        primary: Primary lines sorted by time_s.
        secondary: Secondary lines sorted by time_s.
        kind: TrackKind.translation or TrackKind.romanization.
        tolerance_s: Max |delta| in seconds for two lines to match.

    Returns:
        A new tuple of lines, sorted and re-indexed.

    Raises:
        ValueError: If kind is TrackKind.original or tolerance is negative.
    """
    kind = TrackKind(kind)
    if kind == TrackKind.original:
        raise ValueError("The original track cannot be merged as a secondary track")
    if tolerance_s < 0:
        raise ValueError("Tolerance must be non-negative, got {}".format(tolerance_s))
    if not secondary:
        return reindex(primary)

    merged: List[LyricLine] = []
    consumed = [False] * len(secondary)
    last = len(secondary) - 1
    p2 = 0

    for line in primary:
        while p2 < last and secondary[p2].time_s < line.time_s - tolerance_s - _EPSILON:
            p2 += 1
        candidate = secondary[p2]
        if abs(candidate.time_s - line.time_s) <= tolerance_s + _EPSILON:
            merged.append(_attach(line, kind, candidate))
            consumed[p2] = True
        else:
            merged.append(_attach_empty(line, kind))

    inserted = 0
    for i, source in enumerate(secondary):
        if not consumed[i]:
            merged.append(_standalone(source, kind))
            inserted += 1

    logger.debug(
        "%s pass: %d primary lines, %d matched, %d inserted",
        kind.value, len(primary), len(secondary) - inserted, inserted,
    )
    return reindex(merged)


def build_timeline(
    original: Optional[str],
    translation: Optional[str] = None,
    romanization: Optional[str] = None,
    tolerance_s: Optional[float] = None,
    offset_s: float = 0.0,
) -> MergedTimeline:
    """Parse up to three raw tracks and merge them into one timeline.

    WHY: This is the single construction path for MergedTimeline. The
    result is complete before it is returned, so callers can publish it
    with one assignment.

    HOW: Parse the primary track, fold the user offset into its
    metadata, then run the translation pass and the romanization pass
    when those tracks are supplied and non-empty.

    RULES:
    - tolerance_s None → config.DEFAULT_TOLERANCE_S
    - offset_s (seconds, may be negative) is added to the "offset" tag
    - Flags are True only when the track parsed to at least one line

    Args:
        original: Raw original lyrics (required, may be empty).
        translation: Raw translation lyrics, or None.
        romanization: Raw romanization lyrics, or None.
        tolerance_s: Alignment window in seconds.
        offset_s: Extra time offset in seconds from user settings.

    Returns:
        The merged timeline.
    """
    tolerance = DEFAULT_TOLERANCE_S if tolerance_s is None else tolerance_s
    if tolerance < 0:
        raise ValueError("Tolerance must be non-negative, got {}".format(tolerance))

    if (not original or not original.strip()) and translation and translation.strip():
        original, translation = translation, None

    primary = parse_track(original)
    metadata = dict(primary.metadata)
    if offset_s:
        metadata["offset"] = primary.offset_s + offset_s

    lines: Tuple[LyricLine, ...] = primary.lines
    has_translation = False
    has_romanization = False

    if translation:
        track = parse_track(translation)
        if track.lines:
            lines = merge_secondary(lines, track.lines, TrackKind.translation, tolerance)
            has_translation = True

    if romanization:
        track = parse_track(romanization)
        if track.lines:
            lines = merge_secondary(lines, track.lines, TrackKind.romanization, tolerance)
            has_romanization = True

    return MergedTimeline(
        lines=lines,
        metadata=metadata,
        has_translation=has_translation,
        has_romanization=has_romanization,
    )
