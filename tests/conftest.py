"""Shared test fixtures for the lyric_sync test suite.

WHY: Parser, merger, cursor, formatter, CLI and API tests all need the
same small set of lyric documents, one per grammar plus a translation
and a romanization track. Centralizing them keeps the expected values
in the tests consistent with one another.

HOW: Module-level constants hold the raw lyric text; fixtures hand out
the text or a ready-built engine.

RULES:
- PLAIN_ORIGINAL parses to lines at 10, 12, 14 (silent), 16 and 20 s
- TRANSLATION has 10.04 and 12.00 (within tolerance) and 18.00
  (no original counterpart)
- NUMERIC_LINE and ANGLE_LINE carry hand-computed word timing
"""

import pytest

from lyric_sync.core.engine import LyricEngine


# ---------------------------------------------------------------------------
# Sample lyric documents
# ---------------------------------------------------------------------------

PLAIN_ORIGINAL = (
    "[ti:Sample Song]\n"
    "[ar:Sample Artist]\n"
    "[00:00.75]//lyrics by somebody\n"
    "[00:10.00]Hello\n"
    "[00:12.00]World\n"
    "[00:14.00]\n"
    "[00:16.00][00:20.00]Chorus\n"
)

TRANSLATION = (
    "[00:10.04]你好\n"
    "[00:12.00]世界\n"
    "[00:18.00]间奏\n"
)

ROMANIZATION = (
    "[00:10.00]ni hao\n"
    "[00:12.02]shi jie\n"
)

# Hel 1000-1300, "lo " 1300-1500, world 1500-3000
NUMERIC_LINE = "[1000,2000]Hel(1000,300)lo (1300,200)world(1500,500)"

NUMERIC_DOCUMENT = (
    "[ti:Numeric]\n"
    "[0,500]//\n"
    + NUMERIC_LINE + "\n"
    "[4000,1000]\n"
    "[5000,1500]A(5000,100)B(5500,100,0)\n"
)

# 凉 21783-22003, 风 22003-22263
ANGLE_LINE = "[00:21.783]<00:21.783>凉<00:22.003>风<00:22.263>"

ANGLE_DOCUMENT = (
    "[ar:Angle Artist]\n"
    + ANGLE_LINE + "\n"
    "[00:25.000]<00:25.000>open <00:25.400>end\n"
)


@pytest.fixture
def plain_original():
    return PLAIN_ORIGINAL


@pytest.fixture
def translation():
    return TRANSLATION


@pytest.fixture
def romanization():
    return ROMANIZATION


@pytest.fixture
def numeric_document():
    return NUMERIC_DOCUMENT


@pytest.fixture
def angle_document():
    return ANGLE_DOCUMENT


@pytest.fixture
def engine():
    """An engine with the default 50 ms tolerance and nothing loaded."""
    return LyricEngine(tolerance_s=0.05)


@pytest.fixture
def loaded_engine(engine):
    """An engine with original, translation and romanization loaded."""
    engine.load(PLAIN_ORIGINAL, translation=TRANSLATION, romanization=ROMANIZATION)
    return engine
