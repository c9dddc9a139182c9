"""Configuration constants, track ordering, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Alignment tolerance, word-duration floors, and the
default track order are plain data — not buried in parser or merger
logic — so both humans and coding agents can modify them confidently.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values with environment-variable overrides. The
parse_track_order() function validates user-supplied order lists.

RULES:
- DEFAULT_TOLERANCE_S is in seconds; the env override is in milliseconds
- MIN_WORD_DURATION_MS is the floor applied to every word span
- Track names are exactly "original", "translation", "romanization"
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from typing import Iterable, List, Union

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------

DEFAULT_TOLERANCE_S = int(os.getenv("LYRIC_SYNC_TOLERANCE_MS", "50")) / 1000.0
"""Max time delta (seconds) under which lines from two tracks are merged."""

# ---------------------------------------------------------------------------
# Word timing
# ---------------------------------------------------------------------------

MIN_WORD_DURATION_MS = 50
"""Floor for every computed word duration, guards against corrupt timing."""

DEFAULT_LAST_WORD_DURATION_MS = 500
"""Duration given to a final angle-bracket word with no closing marker."""

# ---------------------------------------------------------------------------
# Track ordering and serialization
# ---------------------------------------------------------------------------

TRACK_NAMES = ("original", "translation", "romanization")

HEADER_TAGS = ("ti", "ar", "al", "by", "offset")
"""Metadata tags written to the export header, in this order."""

DEFAULT_TRACK_ORDER: List[str] = [
    name.strip()
    for name in os.getenv(
        "LYRIC_SYNC_TRACK_ORDER", "original,translation,romanization"
    ).split(",")
    if name.strip()
]

DEFAULT_WORD_BY_WORD = os.getenv("LYRIC_SYNC_WORD_BY_WORD", "false").lower() == "true"


def parse_track_order(value: Union[str, Iterable[str], None]) -> List[str]:
    """Validate and normalize a track-ordering list.

    WHY: Serialization and display both take an order list from user
    settings, CLI flags, or HTTP requests. A typo must fail loudly rather
    than silently hiding a track.

    HOW: Accepts a comma-separated string or any iterable of names.
    Strips whitespace, lowercases, and drops repeats.

    RULES:
    - None → a copy of DEFAULT_TRACK_ORDER
    - Unknown names raise ValueError
    - Duplicates keep their first position
    - An empty result is allowed (serializes nothing per line)
    """
    if value is None:
        return list(DEFAULT_TRACK_ORDER)
    if isinstance(value, str):
        value = value.split(",")

    order: List[str] = []
    for raw in value:
        name = str(raw).strip().lower()
        if not name:
            continue
        if name not in TRACK_NAMES:
            raise ValueError(
                "Unknown track '{}'. Expected one of: {}".format(
                    raw, ", ".join(TRACK_NAMES)
                )
            )
        if name not in order:
            order.append(name)
    return order
