"""Core parsing, merging and playback modules.

WHY: The core package is the stable heart of the engine — the IR
dataclasses and the logic that turns raw lyric text into a merged,
seekable timeline. It is consumed by every formatter, the CLI and the
HTTP API.

HOW: ir.py defines the data structures, classifier.py and grammars.py
recognise and parse the three line grammars, parser.py turns a whole
document into a track, merger.py aligns secondary tracks onto the
original, cursor.py answers "which line is active now", and engine.py
ties them together behind one facade.

RULES:
- IR dataclasses are the contract — change with care
- Parsing never raises on malformed lyric text; bad rows are dropped
- No formatter-specific logic here
"""
