"""Cached lookup of the active lyric line for a playback position.

WHY: The player asks "which line is active now?" on every progress
tick. Playback moves forward almost always, so remembering the last
hit turns the common case into a constant-time check, while a seek in
either direction still resolves correctly.

HOW: PositionCursor keeps one integer, ``last_index``. locate()
subtracts the timeline offset, handles the before-start and past-end
cases directly, then scans forward from ``last_index``. If the forward
scan cannot match (a backward seek), it wraps and scans from 0 up to
``last_index``.

RULES:
- last_index starts at -1 ("not yet positioned") and returns there on
  reset() and whenever the position precedes the first line
- Line i is active for positions in [lines[i].time_s, lines[i+1].time_s)
- Before the first line → None; at or after the last line → last line
- locate() allocates nothing; it returns a record from the timeline
- reset() must follow every timeline rebuild; bind() does both
"""

from __future__ import annotations

from typing import Optional

from lyric_sync.core.ir import LyricLine, MergedTimeline


class PositionCursor:
    """Stateful active-line finder over one MergedTimeline."""

    def __init__(self, timeline: Optional[MergedTimeline] = None) -> None:
        self._timeline = timeline if timeline is not None else MergedTimeline.empty()
        self.last_index = -1

    @property
    def timeline(self) -> MergedTimeline:
        return self._timeline

    def bind(self, timeline: MergedTimeline) -> None:
        """Point the cursor at a newly published timeline and reset it."""
        self._timeline = timeline
        self.reset()

    def reset(self) -> None:
        self.last_index = -1

    def locate(self, time_s: float) -> Optional[LyricLine]:
        """Return the line active at ``time_s`` (playback seconds).

        The timeline's metadata offset is subtracted from ``time_s``
        before matching.
        """
        lines = self._timeline.lines
        if not lines:
            return None

        position = time_s - self._timeline.offset_s
        if position < lines[0].time_s:
            self.last_index = -1
            return None

        last = len(lines) - 1
        if position >= lines[last].time_s:
            self.last_index = last
            return lines[last]

        start = max(self.last_index, 0)

        # Forward scan; stops as soon as a line starts after the position.
        for index in range(start, last):
            if lines[index].time_s > position:
                break
            if position < lines[index + 1].time_s:
                self.last_index = index
                return lines[index]

        # Backward seek: wrap around.
        for index in range(0, start):
            if lines[index].time_s <= position < lines[index + 1].time_s:
                self.last_index = index
                return lines[index]

        self.last_index = last
        return lines[last]
