"""Whole-input lyric parsing into a LyricTrack.

WHY: A raw lyric blob mixes header tags, comments, and timed lines that
may use different grammars. The merger and cursor need one sorted,
indexed sequence per track, and a player must always have something to
show — even when the text is not time-coded at all.

HOW: Walk the input row by row. Blank rows and comment rows are
skipped. While no timed line has been produced yet, leading
[key:value] tags are captured as metadata. Each remaining row is
classified and handed to its grammar parser. The collected lines are
stable-sorted by time and re-indexed. If nothing parsed, every input
row becomes an untimed line at time 0.

RULES:
- Rows are stripped before classification
- Metadata is only captured in the header region (before the first
  timed line); later [key:value] rows are dropped like any other
  unrecognized row
- A row that matches no grammar is dropped, never raises
- Stable sort: equal times keep their input order
- Fallback keeps the original row order and row count
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from lyric_sync.core.classifier import classify_line, extract_metadata, is_comment_line
from lyric_sync.core.grammars import parse_line
from lyric_sync.core.ir import LyricLine, LyricTrack, MetadataValue

logger = logging.getLogger(__name__)


def reindex(lines: Iterable[LyricLine]) -> Tuple[LyricLine, ...]:
    """Stable-sort lines by time and assign index == position."""
    ordered = sorted(lines, key=lambda line: line.time_s)
    return tuple(
        line if line.index == i else replace(line, index=i)
        for i, line in enumerate(ordered)
    )


def _untimed_fallback(raw: str) -> Tuple[LyricLine, ...]:
    return tuple(
        LyricLine(time_s=0.0, text=row.strip(), index=i)
        for i, row in enumerate(raw.splitlines())
    )


def parse_track(raw: Optional[str]) -> LyricTrack:
    """Parse one raw lyric text into a sorted, indexed LyricTrack.

    Args:
        raw: Plaintext lyrics in any of the supported grammars, or None.

    Returns:
        A LyricTrack. Empty or whitespace-only input gives an empty
        track; any other input gives at least one line.
    """
    if not raw or not raw.strip():
        return LyricTrack(lines=(), metadata={})

    raw = raw.strip()
    metadata: Dict[str, MetadataValue] = {}
    collected: List[LyricLine] = []
    dropped = 0

    for row in raw.splitlines():
        line = row.strip()
        if not line:
            continue
        if is_comment_line(line):
            continue

        if not collected:
            tags, line = extract_metadata(line)
            for key, value in tags.items():
                metadata.setdefault(key, value)
            if not line:
                continue

        grammar = classify_line(line)
        if grammar is None:
            dropped += 1
            logger.debug("Dropping unrecognized lyric row: %r", line)
            continue
        collected.extend(parse_line(line, grammar))

    if not collected:
        logger.info("No timed lines found; using %d untimed rows", len(raw.splitlines()))
        return LyricTrack(lines=_untimed_fallback(raw), metadata=metadata)

    if dropped:
        logger.debug("Dropped %d unrecognized rows", dropped)

    return LyricTrack(lines=reindex(collected), metadata=metadata)
