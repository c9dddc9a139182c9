"""Command-line interface for the lyric synchronization engine.

WHY: Users need a simple way to merge an original lyric file with its
translation and romanization, check which line plays at a given moment,
and write the result in the formats other tools read. The CLI wires
the full pipeline — file reading, parsing, merging, pluggable formatter
output, and file saving — behind a single command.

HOW: Uses argparse to accept the original lyric file, optional
translation/romanization files, render options (track order,
word-by-word), alignment options (offset, tolerance), output format
selection and output directory. Status messages go to stderr; output
files are saved next to the original (or to --output-dir). With --at,
the active line is printed to stdout instead of writing files.

RULES:
- Positional argument: original lyric file path
- Lyric files are read as UTF-8; a leading BOM is ignored
- --formats: comma-separated formatter keys (default: lrc)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-merged-2.lrc)
- Status output goes to stderr (not stdout)
- ValueError/OSError become "Error: ..." on stderr and exit code 1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from lyric_sync.config import DEFAULT_WORD_BY_WORD, parse_track_order
from lyric_sync.core.engine import LyricEngine
from lyric_sync.formatters import FORMATTERS
from lyric_sync.formatters.base import FormatterOutput

DEFAULT_FORMATS = "lrc"


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _read_lyrics(path_arg: Optional[str]) -> Optional[str]:
    """Read a lyric file, or return None when no path was given.

    Raises:
        OSError: If the file cannot be read.
    """
    if not path_arg:
        return None
    return Path(path_arg).read_text(encoding="utf-8-sig")


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: Users may run the tool multiple times on the same song.
    Overwriting previous output would lose hand edits. Numeric suffixes
    (-merged-2.lrc) prevent data loss.

    HOW: Check if {stem}{suffix} exists. If so, increment a counter
    and insert it before the file extension until a free name is found.

    RULES:
    - First attempt: {stem}{suffix} (e.g. song-merged.lrc)
    - Conflict: split suffix at last dot, insert counter before extension
      (e.g. song-merged-2.lrc)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Save a single formatter output to disk as UTF-8 text.

    Returns:
        The Path where the file was saved.
    """
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _parse_format_keys(value: Optional[str]) -> List[str]:
    keys = [k.strip() for k in (value or DEFAULT_FORMATS).split(",") if k.strip()]
    for key in keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            raise ValueError("Unknown format '{}'. Available formats: {}".format(key, available))
    return keys


def _print_active(engine: LyricEngine, at_s: float, order: List[str]) -> None:
    line = engine.locate(at_s)
    if line is None:
        _status("No line is active at {:.3f}s".format(at_s))
        return
    for text in engine.display_lines(line, order=order):
        print(text)


def _run(args: argparse.Namespace) -> None:
    """Execute the read → merge → format → save pipeline."""
    original_path = Path(args.original).resolve()
    if not original_path.is_file():
        _fail("File not found: {}".format(original_path))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else original_path.parent
    if args.at is None and not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    try:
        order = parse_track_order(args.order)
        format_keys = _parse_format_keys(args.formats)
        tolerance_s = None if args.tolerance_ms is None else args.tolerance_ms / 1000.0
        engine = LyricEngine(tolerance_s=tolerance_s)

        _status("Reading lyrics...")
        original = _read_lyrics(str(original_path))
        translation = _read_lyrics(args.translation)
        romanization = _read_lyrics(args.romanization)

        timeline = engine.load(
            original,
            translation=translation,
            romanization=romanization,
            offset_s=args.offset,
        )
        _status("  {} lines (translation: {}, romanization: {})".format(
            len(timeline),
            "yes" if timeline.has_translation else "no",
            "yes" if timeline.has_romanization else "no",
        ))

        if args.at is not None:
            _print_active(engine, args.at, order)
            return

        _status("Formatting output...")
        saved_files: List[Path] = []
        for key in format_keys:
            formatter = FORMATTERS[key](order=order, word_by_word=args.word_by_word)
            _status("  Running {} formatter...".format(formatter.name))
            for output in formatter.format(timeline):
                saved_path = _save_output(output, original_path.stem, output_dir)
                saved_files.append(saved_path)
                _status("  Saved: {}".format(saved_path.name))
    except (ValueError, OSError) as e:
        _fail(str(e))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="lyric_sync",
        description="Merge time-coded lyrics with their translation and romanization "
                    "and export them (LRC, plain text, timeline JSON).",
    )

    parser.add_argument(
        "original",
        help="Path to the original lyric file (LRC or word-timed).",
    )

    parser.add_argument(
        "--translation",
        default=None,
        help="Path to a translation lyric file.",
    )

    parser.add_argument(
        "--romanization",
        default=None,
        help="Path to a romanization lyric file.",
    )

    parser.add_argument(
        "--order",
        default=None,
        help="Comma-separated track order, e.g. original,romanization,translation.",
    )

    parser.add_argument(
        "--word-by-word",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_WORD_BY_WORD,
        help="Write word-level timing where available (default: %(default)s).",
    )

    parser.add_argument(
        "--offset",
        type=float,
        default=0.0,
        help="Extra offset in seconds added to the lyric offset tag (default: %(default)s).",
    )

    parser.add_argument(
        "--tolerance-ms",
        type=int,
        default=None,
        help="Alignment window in milliseconds for merging tracks.",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: {}.".format(", ".join(sorted(FORMATTERS.keys())), DEFAULT_FORMATS),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as the original file).",
    )

    parser.add_argument(
        "--at",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Print the line active at this playback position instead of writing files.",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    _run(args)


if __name__ == "__main__":
    main()
