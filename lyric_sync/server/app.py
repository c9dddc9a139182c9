"""FastAPI application exposing the lyric engine over HTTP.

WHY: Web players, lyric editors and automation tools need to merge and
export lyrics without embedding a Python runtime. FastAPI provides
automatic OpenAPI documentation and request validation.

HOW: A stateless app: every request carries the raw lyric tracks, the
endpoint builds a fresh LyricEngine, loads the tracks, and answers from
that engine. Nothing is stored between requests, so there is no shared
mutable state to guard.

RULES:
- All endpoints have OpenAPI descriptions and documented error responses
- Error responses use a consistent ErrorResponse schema
- ValueError from the engine (unknown track name, negative tolerance)
  becomes HTTP 400; an unknown format key is also 400
- Unexpected failures are logged with logger.exception and become 500
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import FastAPI, HTTPException

from lyric_sync import __version__
from lyric_sync.core.engine import LyricEngine
from lyric_sync.core.ir import MergedTimeline
from lyric_sync.formatters import FORMATTERS
from lyric_sync.formatters.timeline_json import line_to_dict, timeline_to_dict
from lyric_sync.server.models import (
    ErrorResponse,
    ExportFile,
    ExportRequest,
    ExportResponse,
    FormatInfo,
    HealthResponse,
    LineModel,
    LocateRequest,
    LocateResponse,
    LyricsRequest,
    TimelineResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lyric Sync API",
    description=(
        "Stateless REST API for merging time-coded lyrics with their "
        "translation and romanization, looking up the active line for a "
        "playback position, and exporting the merged result (LRC, plain "
        "text, timeline JSON)."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Invalid track order, tolerance or format"}}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_engine(request: LyricsRequest) -> LyricEngine:
    """Build an engine and load the request's tracks into it.

    Raises:
        HTTPException: 400 if the engine rejects the options.
    """
    tolerance_s = None if request.tolerance_ms is None else request.tolerance_ms / 1000.0
    try:
        engine = LyricEngine(tolerance_s=tolerance_s)
        engine.load(
            request.original,
            translation=request.translation,
            romanization=request.romanization,
            offset_s=request.offset_s,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return engine


def _validate_format(key: str) -> None:
    if key not in FORMATTERS:
        available = ", ".join(sorted(FORMATTERS.keys()))
        raise HTTPException(
            status_code=400,
            detail="Unknown output format '{}'. Available: {}".format(key, available),
        )


# ---------------------------------------------------------------------------
# Endpoints: Lyrics
# ---------------------------------------------------------------------------


@app.post(
    "/timeline",
    response_model=TimelineResponse,
    tags=["lyrics"],
    summary="Merge lyric tracks into one timeline",
    description=(
        "Parse the original lyrics and optional translation/romanization, "
        "align them by timestamp, and return the merged timeline."
    ),
    responses=_BAD_REQUEST,
)
async def create_timeline(request: LyricsRequest) -> TimelineResponse:
    engine = _load_engine(request)
    return TimelineResponse.model_validate(timeline_to_dict(engine.timeline))


@app.post(
    "/locate",
    response_model=LocateResponse,
    tags=["lyrics"],
    summary="Find the active line at a playback position",
    description=(
        "Merge the supplied tracks, then return the line active at time_s "
        "(after applying the lyric offset) and the texts to display for it."
    ),
    responses=_BAD_REQUEST,
)
async def locate_line(request: LocateRequest) -> LocateResponse:
    engine = _load_engine(request)
    line = engine.locate(request.time_s)
    if line is None:
        return LocateResponse(line=None, display=[])
    return LocateResponse(
        line=LineModel.model_validate(line_to_dict(line)),
        display=engine.display_lines(line),
    )


@app.post(
    "/export",
    response_model=ExportResponse,
    tags=["lyrics"],
    summary="Export merged lyrics in one output format",
    description=(
        "Merge the supplied tracks and render them with the requested "
        "formatter. Multi-file formats (plain_text) return one entry per file."
    ),
    responses=_BAD_REQUEST,
)
async def export_lyrics(request: ExportRequest) -> ExportResponse:
    _validate_format(request.format)
    engine = _load_engine(request)
    try:
        formatter = FORMATTERS[request.format](
            order=request.order,
            word_by_word=request.word_by_word,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        outputs = formatter.format(engine.timeline)
    except Exception:
        logger.exception("Formatter %s failed", request.format)
        raise HTTPException(status_code=500, detail="Export failed")

    return ExportResponse(
        format=request.format,
        files=[
            ExportFile(suffix=o.suffix, media_type=o.media_type, content=o.content)
            for o in outputs
        ],
    )


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available output formats",
    description=(
        "Returns all supported output formats with their identifiers, "
        "human-readable names, and file suffixes."
    ),
)
async def list_formats() -> List[FormatInfo]:
    result = []
    empty = MergedTimeline.empty()
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        # The first output's suffix is representative
        outputs = formatter.format(empty)
        suffix = outputs[0].suffix if outputs else ""
        result.append(FormatInfo(key=key, name=formatter.name, suffix=suffix))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the lyric-sync-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
