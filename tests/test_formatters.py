"""Tests for the LRC, plain text and timeline JSON formatters.

WHY: Exported lyrics must re-parse to the same timeline, keep pauses,
and follow the user's track order. The JSON export must always match
its bundled schema.

HOW: Timelines are built from the conftest fixtures with
build_timeline(); serialized text is checked line by line or parsed
again with parse_track().
"""

import json

import jsonschema
import pytest

from lyric_sync.core.ir import MergedTimeline, WordSpan
from lyric_sync.core.merger import build_timeline
from lyric_sync.core.parser import parse_track
from lyric_sync.formatters import FORMATTERS
from lyric_sync.formatters.base import BaseFormatter
from lyric_sync.formatters.lrc import (
    LrcFormatter,
    convert_numeric_to_angle,
    format_header,
    format_word_line,
    serialize_timeline,
)
from lyric_sync.formatters.plain_text import PlainTextFormatter, export_track_text
from lyric_sync.formatters.timeline_json import (
    TimelineJsonFormatter,
    get_schema,
    timeline_to_dict,
)


def _timing(line):
    return [(w.text, w.start_ms, w.duration_ms) for w in line.words]


@pytest.fixture
def merged(plain_original, translation, romanization):
    return build_timeline(plain_original, translation, romanization, tolerance_s=0.05)


def _times_and_texts(track):
    return [l.time_s for l in track.lines], [l.text for l in track.lines]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:

    def test_keys(self):
        assert set(FORMATTERS) == {"lrc", "plain_text", "timeline_json"}

    def test_all_subclass_base(self):
        for cls in FORMATTERS.values():
            assert issubclass(cls, BaseFormatter)

    def test_unknown_order_rejected_eagerly(self):
        with pytest.raises(ValueError):
            LrcFormatter(order="original,lyrics")


# ---------------------------------------------------------------------------
# LRC serializer
# ---------------------------------------------------------------------------


class TestHeader:

    def test_fixed_tag_order(self):
        header = format_header({"by": "me", "ar": "Artist", "ti": "Title", "xx": "ignored"})
        assert header == ["[ti:Title]", "[ar:Artist]", "[by:me]"]

    def test_offset_written_in_ms(self):
        assert format_header({"offset": 0.5}) == ["[offset:500]"]
        assert format_header({"offset": -0.25}) == ["[offset:-250]"]

    def test_zero_offset_and_blank_values_skipped(self):
        assert format_header({"offset": 0.0, "ti": "  "}) == []


class TestSerializeTimeline:

    def test_merged_output(self, merged):
        assert serialize_timeline(merged).splitlines() == [
            "[ti:Sample Song]",
            "[ar:Sample Artist]",
            "",
            "[00:10.000]Hello",
            "[00:10.000]你好",
            "[00:10.000]ni hao",
            "[00:12.000]World",
            "[00:12.000]世界",
            "[00:12.000]shi jie",
            "[00:14.000]",
            "[00:16.000]Chorus",
            "[00:18.000]",
            "[00:18.000]间奏",
            "[00:20.000]Chorus",
        ]

    def test_track_order(self, merged):
        lines = serialize_timeline(merged, order="translation,original").splitlines()
        assert lines[3:5] == ["[00:10.000]你好", "[00:10.000]Hello"]
        assert "ni hao" not in "\n".join(lines)

    def test_absent_tracks_skipped(self, plain_original):
        timeline = build_timeline(plain_original)
        text = serialize_timeline(timeline, order="original,translation,romanization")
        assert text.count("[00:10.000]") == 1

    def test_empty_timeline(self):
        assert serialize_timeline(MergedTimeline.empty()) == ""

    def test_no_header_when_no_metadata(self):
        timeline = build_timeline("[00:01.00]x")
        assert serialize_timeline(timeline) == "[00:01.000]x"

    def test_user_offset_written_back(self):
        timeline = build_timeline("[offset:100]\n[00:01.00]x", offset_s=0.4)
        assert serialize_timeline(timeline).splitlines()[0] == "[offset:500]"

    def test_word_by_word_romanization(self):
        timeline = build_timeline(
            "[00:01.00]你好",
            romanization="[00:01.000]<00:01.000>ni <00:01.300>hao<00:01.600>",
        )
        assert serialize_timeline(timeline, word_by_word=True).splitlines() == [
            "[00:01.000]你好",
            "[00:01.000]<00:01.000>ni <00:01.300>hao<00:01.600>",
        ]

    def test_word_by_word_off_writes_plain_text(self, numeric_document):
        timeline = build_timeline(numeric_document)
        assert "[00:01.000]Hello world" in serialize_timeline(timeline).splitlines()


class TestWordLine:

    def test_end_marker_from_last_word(self):
        words = (WordSpan("a", 1000, 200), WordSpan("b", 1200, 300))
        assert format_word_line(1.0, words) == "[00:01.000]<00:01.000>a<00:01.200>b<00:01.500>"

    def test_end_marker_from_declared_duration(self):
        words = (WordSpan("a", 1000, 200),)
        assert format_word_line(1.0, words, duration_ms=1000) == "[00:01.000]<00:01.000>a<00:02.000>"

    def test_end_marker_never_before_last_word_end(self):
        words = (WordSpan("a", 1000, 800),)
        assert format_word_line(1.0, words, duration_ms=100) == "[00:01.000]<00:01.000>a<00:01.800>"


class TestRoundTrip:
    """serialize(parse(X)) re-parses to the same times and texts."""

    def test_plain(self, plain_original):
        before = parse_track(plain_original)
        after = parse_track(serialize_timeline(build_timeline(plain_original)))
        times_before, texts_before = _times_and_texts(before)
        times_after, texts_after = _times_and_texts(after)
        assert times_after == pytest.approx(times_before, abs=0.001)
        assert texts_after == texts_before
        assert after.metadata == before.metadata

    @pytest.mark.parametrize("word_by_word", [False, True])
    def test_numeric(self, numeric_document, word_by_word):
        before = parse_track(numeric_document)
        text = serialize_timeline(build_timeline(numeric_document), word_by_word=word_by_word)
        after = parse_track(text)
        assert [l.time_s for l in after.lines] == pytest.approx(
            [l.time_s for l in before.lines], abs=0.001
        )
        assert [l.text for l in after.lines] == [l.text for l in before.lines]

    def test_numeric_word_timing_survives(self, numeric_document):
        before = parse_track(numeric_document)
        after = parse_track(serialize_timeline(build_timeline(numeric_document), word_by_word=True))
        for index in (0, 2):
            assert _timing(after.lines[index]) == _timing(before.lines[index])

    def test_angle(self, angle_document):
        before = parse_track(angle_document)
        after = parse_track(serialize_timeline(build_timeline(angle_document), word_by_word=True))
        assert [l.time_s for l in after.lines] == pytest.approx(
            [l.time_s for l in before.lines], abs=0.001
        )
        assert [l.text for l in after.lines] == [l.text for l in before.lines]
        assert [l.words for l in after.lines] == [l.words for l in before.lines]


class TestConvertNumericToAngle:

    def test_document(self, numeric_document):
        assert convert_numeric_to_angle(numeric_document).splitlines() == [
            "[ti:Numeric]",
            "[00:01.000]<00:01.000>Hel<00:01.300>lo <00:01.500>world<00:03.000>",
            "[00:04.000]",
            "[00:05.000]<00:05.000>A<00:05.500>B<00:06.500>",
        ]

    def test_other_grammars_pass_through(self):
        assert convert_numeric_to_angle("\n[00:01.00]plain\n\n") == "[00:01.00]plain"


class TestLrcFormatter:

    def test_output(self, merged):
        (output,) = LrcFormatter().format(merged)
        assert output.suffix == "-merged.lrc"
        assert output.media_type == "text/plain"
        assert output.content.endswith("[00:20.000]Chorus\n")

    def test_word_by_word_suffix(self, merged):
        (output,) = LrcFormatter(word_by_word=True).format(merged)
        assert output.suffix == "-merged-words.lrc"

    def test_name(self):
        assert LrcFormatter().name == "LRC"


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------


class TestPlainText:

    def test_one_file_per_present_track(self, merged):
        outputs = PlainTextFormatter().format(merged)
        assert [o.suffix for o in outputs] == [
            "-original.txt", "-translation.txt", "-romanization.txt",
        ]

    def test_rows_align_with_timeline(self, merged):
        outputs = PlainTextFormatter().format(merged)
        original, translation = outputs[0].content, outputs[1].content
        assert original == "Hello\nWorld\n\nChorus\n\nChorus\n"
        assert translation == "你好\n世界\n\n\n间奏\n\n"

    def test_absent_track_not_exported(self, plain_original):
        outputs = PlainTextFormatter().format(build_timeline(plain_original))
        assert [o.suffix for o in outputs] == ["-original.txt"]

    def test_with_timestamps(self, merged):
        text = export_track_text(merged, "original", with_timestamps=True)
        assert text.splitlines()[:3] == ["[00:10.000] Hello", "[00:12.000] World", "[00:14.000]"]

    def test_order_respected(self, merged):
        outputs = PlainTextFormatter(order="romanization,original").format(merged)
        assert [o.suffix for o in outputs] == ["-romanization.txt", "-original.txt"]


# ---------------------------------------------------------------------------
# Timeline JSON
# ---------------------------------------------------------------------------


class TestTimelineJson:

    def test_output_validates_against_schema(self, merged):
        (output,) = TimelineJsonFormatter().format(merged)
        assert output.suffix == "-timeline.json"
        assert output.media_type == "application/json"
        data = json.loads(output.content)
        jsonschema.validate(instance=data, schema=get_schema())
        assert len(data["lines"]) == 6
        assert data["has_translation"] is True

    def test_cjk_not_escaped(self, merged):
        (output,) = TimelineJsonFormatter().format(merged)
        assert "你好" in output.content

    def test_absent_track_is_null(self, plain_original):
        data = timeline_to_dict(build_timeline(plain_original))
        assert data["lines"][0]["translation"] is None
        assert data["lines"][0]["words"] is None

    def test_word_timing(self, numeric_document):
        data = timeline_to_dict(build_timeline(numeric_document))
        first = data["lines"][0]
        assert first["words"][1] == {
            "text": "lo ", "start_ms": 1300, "duration_ms": 200, "trailing_space": False,
        }
        assert first["duration_ms"] == 2000
        jsonschema.validate(instance=data, schema=get_schema())

    def test_empty_timeline_is_valid(self):
        (output,) = TimelineJsonFormatter().format(MergedTimeline.empty())
        assert json.loads(output.content)["lines"] == []

    def test_invalid_data_rejected_by_schema(self, merged):
        data = timeline_to_dict(merged)
        data["lines"][0]["time_s"] = "ten"
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate(instance=data, schema=get_schema())
