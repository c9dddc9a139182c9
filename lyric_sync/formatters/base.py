"""Abstract base formatter and output container.

WHY: Every output format consumes the same MergedTimeline IR but
produces different file content. This base class enforces a consistent
interface so the CLI and the HTTP API can work with any formatter
generically.

HOW: BaseFormatter is an ABC with two requirements — a ``name``
property and a ``format()`` method. Render options shared by all
formatters (track order, word-by-word) are taken by the constructor.
FormatterOutput is a plain dataclass that bundles a file suffix with
its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list — most formatters return one item, but
  multi-file formatters (e.g. per-track plain text) return several
- ``suffix`` starts with a hyphen, e.g. ``"-merged.lrc"``
- The caller is responsible for prepending the source filename stem
- Formatters never mutate the timeline
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from lyric_sync.config import DEFAULT_WORD_BY_WORD, parse_track_order
from lyric_sync.core.ir import MergedTimeline


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-merged.lrc"`` → ``"song-merged.lrc"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"text/plain"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py

    Args:
        order: Track order (names or comma-separated string); None uses
               config.DEFAULT_TRACK_ORDER. Validated eagerly.
        word_by_word: Emit word-level timing where the format supports it.
    """

    def __init__(
        self,
        order: Union[str, Iterable[str], None] = None,
        word_by_word: Optional[bool] = None,
    ) -> None:
        self.order: List[str] = parse_track_order(order)
        self.word_by_word = DEFAULT_WORD_BY_WORD if word_by_word is None else word_by_word

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'LRC'."""

    @abstractmethod
    def format(self, timeline: MergedTimeline) -> List[FormatterOutput]:
        """Convert the timeline into one or more output files."""
