"""Timeline JSON formatter, validated against a bundled JSON Schema.

WHY: Rendering collaborators (a web player, a lyric video tool, the
HTTP API's clients) want the merged timeline with word timing as data,
not as LRC text they would have to re-parse. A schema keeps the shape
stable and lets consumers validate what they receive.

HOW: timeline_to_dict() flattens the IR into plain dicts and lists.
The formatter validates the dict with jsonschema against
timeline_schema.json (loaded once, cached at module level) and dumps
it with ensure_ascii=False so CJK text stays readable.

RULES:
- None is preserved as JSON null: it means "track absent", distinct
  from "" (track present, silent at this instant)
- Word times are integer milliseconds; line times are float seconds
- Schema validation is mandatory — raises on invalid output
- Output suffix: "-timeline.json"; media type "application/json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import jsonschema

from lyric_sync.core.ir import LyricLine, MergedTimeline, WordSpan
from lyric_sync.formatters.base import BaseFormatter, FormatterOutput

_SCHEMA_PATH = Path(__file__).resolve().parent / "timeline_schema.json"


def _load_schema() -> Dict[str, Any]:
    """Load the timeline JSON schema from disk."""
    with open(_SCHEMA_PATH, encoding="utf-8") as f:
        return json.load(f)


_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def get_schema() -> Dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        _CACHED_SCHEMA = _load_schema()
    return _CACHED_SCHEMA


def _words_to_list(words: Optional[Sequence[WordSpan]]) -> Optional[List[Dict[str, Any]]]:
    if words is None:
        return None
    return [
        {
            "text": w.text,
            "start_ms": w.start_ms,
            "duration_ms": w.duration_ms,
            "trailing_space": w.trailing_space,
        }
        for w in words
    ]


def line_to_dict(line: LyricLine) -> Dict[str, Any]:
    return {
        "index": line.index,
        "time_s": line.time_s,
        "text": line.text,
        "translation": line.translation,
        "romanization": line.romanization,
        "duration_ms": line.duration_ms,
        "romanization_duration_ms": line.romanization_duration_ms,
        "words": _words_to_list(line.words),
        "romanization_words": _words_to_list(line.romanization_words),
    }


def timeline_to_dict(timeline: MergedTimeline) -> Dict[str, Any]:
    """Convert the timeline IR into JSON-ready data."""
    return {
        "metadata": dict(timeline.metadata),
        "offset_s": timeline.offset_s,
        "has_translation": timeline.has_translation,
        "has_romanization": timeline.has_romanization,
        "lines": [line_to_dict(line) for line in timeline.lines],
    }


class TimelineJsonFormatter(BaseFormatter):
    """Formatter that writes the merged timeline as schema-checked JSON."""

    @property
    def name(self) -> str:
        return "Timeline JSON"

    def format(self, timeline: MergedTimeline) -> List[FormatterOutput]:
        """Serialize and validate the timeline.

        Raises:
            jsonschema.ValidationError: If the generated JSON does not
                conform to timeline_schema.json.
        """
        output = timeline_to_dict(timeline)
        jsonschema.validate(instance=output, schema=get_schema())

        return [
            FormatterOutput(
                suffix="-timeline.json",
                content=json.dumps(output, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
