"""Time tag parsing and formatting shared by parsers and serializers.

RULES:
- Tag bodies look like "mm:ss", "mm:ss.f", "mm:ss.ff", "mm:ss.fff" or
  "h:mm:ss.fff"; each colon-separated part is base-60
- Formatting always writes two-digit minutes and three-digit millis
"""

from __future__ import annotations

import re

_TIME_BODY_RE = re.compile(r"^\d+(?::\d+(?:\.\d+)?)+$|^\d+(?:\.\d+)?$")


def parse_time_body(body: str) -> float:
    """Convert a time tag body such as "01:02.500" to seconds.

    Raises:
        ValueError: If the body is not a valid colon-separated time.
    """
    body = body.strip()
    if not _TIME_BODY_RE.match(body):
        raise ValueError("Malformed time tag: {!r}".format(body))

    result = 0.0
    for part in body.split(":"):
        result = result * 60 + float(part)
    return result


def ms_to_timestamp(ms: float) -> str:
    """Format milliseconds as "MM:SS.mmm" (no brackets)."""
    total_ms = int(round(ms))
    if total_ms < 0:
        total_ms = 0
    minutes, rem = divmod(total_ms, 60_000)
    seconds, millis = divmod(rem, 1000)
    return "{:02d}:{:02d}.{:03d}".format(minutes, seconds, millis)


def seconds_to_tag(seconds: float) -> str:
    """Format seconds as an LRC line tag "[MM:SS.mmm]"."""
    return "[{}]".format(ms_to_timestamp(seconds * 1000.0))
