"""Lyric Sync — time-coded lyric parsing, track merging, and playback lookup.

WHY: Music players receive lyrics as loosely standardized text in several
time-coded grammars, often with a separate translation and romanization
track whose timestamps drift by a few milliseconds from the original.
The player needs one canonical timeline it can query many times per
second and serialize back to text for export.

HOW: Four-stage pipeline — classify and parse raw text into per-track
line records (core.parser), align secondary tracks onto the primary
timeline (core.merger), answer "active line" queries with a cached
cursor (core.cursor), and render the timeline through pluggable
formatters (formatters). core.engine wires the stages together.

RULES:
- All formatters consume the same MergedTimeline IR
- Raw input is never rejected; unparseable text degrades to untimed rows
- The engine performs no I/O — callers hand it plaintext
"""

__version__ = "0.1.0"
