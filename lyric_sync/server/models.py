"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: The three POST endpoints share one request base (the raw lyric
tracks plus alignment options) and extend it with their own fields.
Response models mirror the IR field for field, so a timeline returned
by POST /timeline has the same shape as the Timeline JSON export.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- None means "track absent"; "" means "track present but silent"
- Format keys and track names are validated by the endpoints (400),
  not by the models, so the error message can list the valid values
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LyricsRequest(BaseModel):
    """Raw lyric tracks and alignment options.

    RULES:
    - original is required but may be empty (a translation is then
      promoted to the primary track)
    - tolerance_ms None means the server default (LYRIC_SYNC_TOLERANCE_MS)
    """

    original: str = Field(description="Raw original lyrics in any supported grammar.")
    translation: Optional[str] = Field(
        default=None,
        description="Raw translation lyrics, time-coded independently.",
    )
    romanization: Optional[str] = Field(
        default=None,
        description="Raw romanization lyrics, plain or word-timed.",
    )
    offset_s: float = Field(
        default=0.0,
        description="Extra offset in seconds, added to the lyric [offset:] tag.",
    )
    tolerance_ms: Optional[int] = Field(
        default=None,
        ge=0,
        description="Alignment window in milliseconds for merging tracks.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "original": "[00:10.00]Hello\n[00:12.00]World",
                "translation": "[00:10.04]你好\n[00:12.00]世界",
                "romanization": None,
                "offset_s": 0.0,
                "tolerance_ms": 50,
            }
        ]
    }}


class LocateRequest(LyricsRequest):
    """Lyrics plus a playback position to look up."""

    time_s: float = Field(description="Playback position in seconds.")


class ExportRequest(LyricsRequest):
    """Lyrics plus render options for one output format."""

    format: str = Field(
        default="lrc",
        description="Output format key, see GET /formats.",
    )
    order: Optional[List[str]] = Field(
        default=None,
        description="Track order, e.g. ['original', 'romanization', 'translation'].",
    )
    word_by_word: bool = Field(
        default=False,
        description="Write word-level timing where the format supports it.",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class WordModel(BaseModel):
    """One timed word."""

    text: str = Field(description="Word text as written.")
    start_ms: int = Field(description="Absolute start in milliseconds.")
    duration_ms: int = Field(description="Duration in milliseconds (at least 50).")
    trailing_space: bool = Field(description="Whether a space follows the word.")


class LineModel(BaseModel):
    """One line of the merged timeline."""

    index: int = Field(description="Position in the timeline.")
    time_s: float = Field(description="Line start in seconds.")
    text: str = Field(description="Original text; empty for an instrumental break.")
    translation: Optional[str] = Field(default=None, description="Translation text, if any.")
    romanization: Optional[str] = Field(default=None, description="Romanization text, if any.")
    duration_ms: Optional[int] = Field(default=None, description="Declared line duration.")
    romanization_duration_ms: Optional[int] = Field(
        default=None,
        description="Declared duration of the romanization line.",
    )
    words: Optional[List[WordModel]] = Field(default=None, description="Word timing of the original.")
    romanization_words: Optional[List[WordModel]] = Field(
        default=None,
        description="Word timing of the romanization.",
    )


class TimelineResponse(BaseModel):
    """The merged timeline."""

    metadata: Dict[str, Union[str, float]] = Field(description="Header tags (offset in seconds).")
    offset_s: float = Field(description="Effective lyric offset in seconds.")
    has_translation: bool = Field(description="Whether a translation track was merged.")
    has_romanization: bool = Field(description="Whether a romanization track was merged.")
    lines: List[LineModel] = Field(description="Lines sorted by time.")


class LocateResponse(BaseModel):
    """Active line lookup result.

    RULES:
    - line is null before the first line or for an empty timeline
    - display lists the non-empty texts of the line in track order
    """

    line: Optional[LineModel] = Field(default=None, description="The active line, or null.")
    display: List[str] = Field(default_factory=list, description="Texts to show, in track order.")


class ExportFile(BaseModel):
    """One file produced by a formatter."""

    suffix: str = Field(description="File suffix, e.g. '-merged.lrc'.")
    media_type: str = Field(description="MIME type of the content.")
    content: str = Field(description="File content.")


class ExportResponse(BaseModel):
    """All files produced by one formatter run."""

    format: str = Field(description="The format key that produced these files.")
    files: List[ExportFile] = Field(description="Produced files, in formatter order.")


class FormatInfo(BaseModel):
    """Description of an available output format.

    WHY: Clients can query the /formats endpoint to discover which
    output formats are supported and what they produce.
    """

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-merged.lrc').")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
