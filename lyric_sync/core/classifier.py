"""Per-line grammar detection, comment filtering, and metadata capture.

WHY: One lyric file can mix grammars line by line (a numeric word-timed
body under a plain LRC header, for instance). Deciding the grammar per
line in one pure function keeps the parsers free of dispatch logic and
makes the priority order explicit and testable.

HOW: classify_line() tries each grammar's signature regex in a fixed
priority order and returns a LineGrammar member, or None when the line
matches nothing. Comment detection and metadata extraction are separate
pure helpers that the track parser calls before classification.

RULES:
- Priority: numeric word-timed → angle-bracket word-timed → plain
- Angle-bracket requires an outer [mm:ss.fff] AND an inner <mm:ss.fff>
  right after it, so plain text containing "<" is not misclassified
- Comment lines look like "[00:00.75]//..." or "[750,1000]//..."
- Metadata tag keys start with a letter, so time tags never match
- "offset" metadata is converted from milliseconds to float seconds
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Dict, Optional, Tuple

from lyric_sync.core.ir import MetadataValue

logger = logging.getLogger(__name__)


class LineGrammar(str, Enum):
    """The closed set of line grammars the parsers understand."""

    WORD_TIMED_NUMERIC = "word_timed_numeric"
    WORD_TIMED_ANGLE = "word_timed_angle"
    PLAIN = "plain"


_COMMENT_RE = re.compile(r"^\[(?:[\d:.]+|\d+,\d+)\]//")

# [key:value] where key starts with a letter, e.g. [ti:Song] [offset:-250]
_META_TAG_RE = re.compile(r"^\s*\[([A-Za-z][\w-]*):([^\]]*)\]")

_NUMERIC_HEADER_RE = re.compile(r"^\[\d+,\d+\]")
_ANGLE_SIGNATURE_RE = re.compile(r"^\[[\d:.]+\]\s*<[\d:.]+>")
_PLAIN_TAG_RE = re.compile(r"\[[\d:.]+\]")


def is_comment_line(line: str) -> bool:
    """Return True for "[time]//..." comment lines in either time notation."""
    return bool(_COMMENT_RE.match(line))


def extract_metadata(line: str) -> Tuple[Dict[str, MetadataValue], str]:
    """Capture leading [key:value] tags from a line.

    WHY: LRC headers carry title, artist, album, and a global time
    offset. They precede the first timestamp and must not leak into
    lyric text.

    HOW: Repeatedly matches a metadata tag at the start of the line and
    consumes it. Returns the captured tags and whatever text remains.

    RULES:
    - Keys are lowercased; values are stripped
    - "offset" is parsed as integer-ish milliseconds and stored in
      seconds; an unparseable offset is dropped
    - The remainder is stripped; it may be empty
    """
    tags: Dict[str, MetadataValue] = {}
    remainder = line
    while True:
        match = _META_TAG_RE.match(remainder)
        if not match:
            break
        key = match.group(1).lower()
        value = match.group(2).strip()
        remainder = remainder[match.end():]

        if key == "offset":
            try:
                tags[key] = float(value) / 1000.0
            except ValueError:
                logger.debug("Ignoring malformed offset tag: %r", value)
            continue
        tags[key] = value

    return tags, remainder.strip()


def classify_line(line: str) -> Optional[LineGrammar]:
    """Decide which grammar parses a (stripped, non-comment) line.

    Returns:
        The matching LineGrammar, or None when the line carries no
        recognizable time tag and should be dropped.
    """
    if _NUMERIC_HEADER_RE.match(line):
        return LineGrammar.WORD_TIMED_NUMERIC
    if _ANGLE_SIGNATURE_RE.match(line):
        return LineGrammar.WORD_TIMED_ANGLE
    if _PLAIN_TAG_RE.search(line):
        return LineGrammar.PLAIN
    return None
