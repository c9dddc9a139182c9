"""LyricEngine — one timeline, one cursor, one facade.

WHY: A player needs three things from lyrics: load them, ask which line
is active during playback, and write them back out. Keeping the timeline
and the cursor together in one object means a rebuild can never leave
the cursor pointing into a stale timeline.

HOW: load() builds a complete MergedTimeline with build_timeline(),
publishes it with a single attribute assignment, then rebinds the
cursor (which resets it). locate() and serialize() delegate to the
cursor and the LRC serializer.

RULES:
- The published timeline is immutable; a reload replaces it wholesale
- The cursor is reset on every load
- display_lines() returns only non-empty texts, in track order
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from lyric_sync.config import DEFAULT_TOLERANCE_S, parse_track_order
from lyric_sync.core.cursor import PositionCursor
from lyric_sync.core.ir import LyricLine, MergedTimeline
from lyric_sync.core.merger import build_timeline
from lyric_sync.formatters.lrc import serialize_timeline

logger = logging.getLogger(__name__)


class LyricEngine:
    """Facade over parsing, merging, playback lookup and serialization.

    Args:
        tolerance_s: Alignment window in seconds; None uses
                     config.DEFAULT_TOLERANCE_S.
    """

    def __init__(self, tolerance_s: Optional[float] = None) -> None:
        tolerance = DEFAULT_TOLERANCE_S if tolerance_s is None else tolerance_s
        if tolerance < 0:
            raise ValueError("Tolerance must be non-negative, got {}".format(tolerance))
        self._tolerance_s = tolerance
        self._timeline = MergedTimeline.empty()
        self._cursor = PositionCursor(self._timeline)

    @property
    def timeline(self) -> MergedTimeline:
        return self._timeline

    @property
    def tolerance_s(self) -> float:
        return self._tolerance_s

    @property
    def cursor(self) -> PositionCursor:
        return self._cursor

    def load(
        self,
        original: Optional[str],
        translation: Optional[str] = None,
        romanization: Optional[str] = None,
        offset_s: float = 0.0,
    ) -> MergedTimeline:
        """Parse and merge new lyrics, then publish them.

        Returns:
            The newly published timeline.
        """
        timeline = build_timeline(
            original,
            translation=translation,
            romanization=romanization,
            tolerance_s=self._tolerance_s,
            offset_s=offset_s,
        )
        self._timeline = timeline
        self._cursor.bind(timeline)
        logger.info(
            "Loaded timeline: %d lines (translation=%s, romanization=%s)",
            len(timeline), timeline.has_translation, timeline.has_romanization,
        )
        return timeline

    def locate(self, time_s: float) -> Optional[LyricLine]:
        return self._cursor.locate(time_s)

    def serialize(
        self,
        order: Union[str, Iterable[str], None] = None,
        word_by_word: bool = False,
    ) -> str:
        return serialize_timeline(self._timeline, order=order, word_by_word=word_by_word)

    def display_lines(
        self,
        line: Optional[LyricLine],
        order: Union[str, Iterable[str], None] = None,
        show_translation: bool = True,
        show_romanization: bool = True,
    ) -> List[str]:
        """Texts to show for one line, e.g. in a status bar or mini lyric view.

        Tracks follow ``order``; hidden or empty tracks are left out.
        """
        if line is None:
            return []
        texts: List[str] = []
        for track in parse_track_order(order):
            if track == "original":
                text: Optional[str] = line.text
            elif track == "translation":
                text = line.translation if show_translation else None
            else:
                text = line.romanization if show_romanization else None
            if text and text.strip():
                texts.append(text)
        return texts
