"""Output formatter registry — pluggable format hub.

WHY: The CLI and the HTTP API need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate with render options as needed:
``formatter = FORMATTERS["lrc"](order="original,translation")``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API requests)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from lyric_sync.formatters.lrc import LrcFormatter
from lyric_sync.formatters.plain_text import PlainTextFormatter
from lyric_sync.formatters.timeline_json import TimelineJsonFormatter

if TYPE_CHECKING:
    from lyric_sync.formatters.base import BaseFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "lrc": LrcFormatter,
    "plain_text": PlainTextFormatter,
    "timeline_json": TimelineJsonFormatter,
}
