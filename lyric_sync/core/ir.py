"""Intermediate representation dataclasses for parsed and merged lyrics.

WHY: Raw lyric text comes in three grammars and up to three tracks
(original, translation, romanization). The playback cursor, the
serializer, and every output formatter need one well-typed form that
hides which grammar a line came from, decoupling parsing from merging
and merging from output.

HOW: Four dataclasses form a hierarchy:
  WordSpan       — one word with absolute start and duration in ms
  LyricLine      — one timed line plus optional secondary-track text
  LyricTrack     — one parsed raw input (lines + metadata)
  MergedTimeline — the primary track after merging, ready for playback

RULES:
- Records are frozen; derived records are built with dataclasses.replace
- Line times are float seconds; word times are integer milliseconds
- translation/romanization None means the track was never supplied;
  "" means the track was supplied but has no content at this instant
- MergedTimeline.lines is sorted by time_s and index == position
- Every WordSpan.duration_ms is >= 50
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple, Union

MetadataValue = Union[str, float]


class TrackKind(str, Enum):
    """The three independently time-coded lyric streams.

    RULES:
    - Values match the names accepted by config.parse_track_order()
    """

    original = "original"
    translation = "translation"
    romanization = "romanization"


@dataclass(frozen=True)
class WordSpan:
    """A single word (or syllable) with its own timing.

    WHY: Word-timed grammars drive karaoke-style highlighting. The
    renderer needs each word's absolute start and duration, and whether
    a space follows it so it can rebuild the line visually.

    RULES:
    - start_ms: absolute, track-relative milliseconds (not line-relative)
    - duration_ms: floored at 50 ms by the parsers
    - text: raw word text, may include surrounding spaces
    - trailing_space: True when a space follows this word in the line
    """

    text: str
    start_ms: int
    duration_ms: int
    trailing_space: bool = False

    @property
    def end_ms(self) -> int:
        return self.start_ms + self.duration_ms


@dataclass(frozen=True)
class LyricLine:
    """One timed lyric line, possibly carrying secondary-track text.

    WHY: A player shows the original line together with its translation
    and romanization. Keeping all three on one record lets the cursor
    return a single object per playback instant.

    HOW: Parsers create lines with only the primary fields set. The
    merger attaches translation/romanization text (and romanization
    word spans) by building new records with dataclasses.replace.

    RULES:
    - time_s: line start in seconds
    - text: display text; "" marks an instrumental break
    - index: position in the containing sequence, reassigned after sorts
    - words / romanization_words: None when the line has no word timing
    - duration_ms / romanization_duration_ms: declared or computed line
      length in milliseconds, None when unknown
    """

    time_s: float
    text: str
    index: int = 0
    translation: Optional[str] = None
    romanization: Optional[str] = None
    words: Optional[Tuple[WordSpan, ...]] = None
    romanization_words: Optional[Tuple[WordSpan, ...]] = None
    duration_ms: Optional[int] = None
    romanization_duration_ms: Optional[int] = None

    @property
    def has_word_timing(self) -> bool:
        return bool(self.words)

    @property
    def has_romanization_word_timing(self) -> bool:
        return bool(self.romanization_words)


@dataclass(frozen=True)
class LyricTrack:
    """The result of parsing one raw lyric text.

    RULES:
    - lines: sorted ascending by time_s, index == position
    - metadata: header tags such as ti/ar/al/by; "offset" is float seconds
    """

    lines: Tuple[LyricLine, ...]
    metadata: Dict[str, MetadataValue] = field(default_factory=dict)

    @property
    def offset_s(self) -> float:
        return float(self.metadata.get("offset", 0.0))

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class MergedTimeline:
    """The canonical timeline the player queries and the serializer renders.

    WHY: This is the top-level container that the cursor, the engine,
    and all formatters receive. It is built completely before being
    published, so readers never see a half-sorted sequence.

    RULES:
    - lines: time_s non-decreasing, index == position
    - has_translation / has_romanization: True only when the track was
      supplied AND parsed to at least one line
    - metadata: primary-track metadata; "offset" already includes any
      user offset passed at build time
    """

    lines: Tuple[LyricLine, ...]
    metadata: Dict[str, MetadataValue] = field(default_factory=dict)
    has_translation: bool = False
    has_romanization: bool = False

    @classmethod
    def empty(cls) -> MergedTimeline:
        return cls(lines=())

    @property
    def offset_s(self) -> float:
        return float(self.metadata.get("offset", 0.0))

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[LyricLine]:
        return iter(self.lines)

    def __getitem__(self, index: int) -> LyricLine:
        return self.lines[index]
