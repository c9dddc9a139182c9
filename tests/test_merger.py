"""Tests for tolerance-based track alignment.

WHY: Alignment is the heart of the engine. These tests pin the 50 ms
window, the explicit-empty vs absent distinction, standalone insertion
of unmatched secondary lines, and the translation-before-romanization
pass order.
"""

import pytest

from lyric_sync.core.ir import LyricLine, TrackKind, WordSpan
from lyric_sync.core.merger import build_timeline, merge_secondary


def _line(time_s, text, **kwargs):
    return LyricLine(time_s=time_s, text=text, **kwargs)


class TestMergeSecondary:

    def test_within_tolerance_merges(self):
        merged = merge_secondary(
            [_line(10.0, "Hello")], [_line(10.04, "你好")], TrackKind.translation, 0.05,
        )
        assert len(merged) == 1
        assert merged[0].text == "Hello"
        assert merged[0].translation == "你好"
        assert merged[0].time_s == pytest.approx(10.0)

    def test_exactly_at_tolerance_merges(self):
        merged = merge_secondary(
            [_line(10.0, "Hello")], [_line(10.05, "你好")], TrackKind.translation, 0.05,
        )
        assert len(merged) == 1
        assert merged[0].translation == "你好"

    def test_beyond_tolerance_becomes_standalone(self):
        merged = merge_secondary(
            [_line(10.0, "Hello")], [_line(10.10, "你好")], TrackKind.translation, 0.05,
        )
        assert len(merged) == 2
        assert merged[0].text == "Hello"
        assert merged[0].translation == ""
        assert merged[1].time_s == pytest.approx(10.10)
        assert merged[1].text == ""
        assert merged[1].translation == "你好"
        assert [l.index for l in merged] == [0, 1]

    def test_secondary_before_first_primary(self):
        merged = merge_secondary(
            [_line(5.0, "a")], [_line(1.0, "intro"), _line(5.0, "A")], TrackKind.translation,
        )
        assert [(l.text, l.translation) for l in merged] == [("", "intro"), ("a", "A")]

    def test_empty_secondary_returns_primary(self):
        primary = [_line(1.0, "a"), _line(2.0, "b")]
        merged = merge_secondary(primary, [], TrackKind.translation)
        assert [l.text for l in merged] == ["a", "b"]
        assert all(l.translation is None for l in merged)

    def test_inputs_not_mutated(self):
        primary = [_line(1.0, "a")]
        secondary = [_line(1.0, "A")]
        merge_secondary(primary, secondary, TrackKind.translation)
        assert primary[0].translation is None
        assert secondary[0].translation is None

    def test_romanization_carries_word_spans(self):
        words = (WordSpan("ni", 1000, 300, True), WordSpan("hao", 1300, 400))
        secondary = [_line(1.0, "ni hao", words=words, duration_ms=700)]
        merged = merge_secondary([_line(1.0, "你好")], secondary, TrackKind.romanization)
        assert merged[0].romanization == "ni hao"
        assert merged[0].romanization_words == words
        assert merged[0].romanization_duration_ms == 700
        assert merged[0].words is None

    def test_original_kind_rejected(self):
        with pytest.raises(ValueError):
            merge_secondary([_line(1.0, "a")], [_line(1.0, "b")], TrackKind.original)

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError):
            merge_secondary([_line(1.0, "a")], [_line(1.0, "b")], TrackKind.translation, -0.01)

    def test_deterministic(self):
        primary = [_line(t, str(t)) for t in (1.0, 2.0, 3.0)]
        secondary = [_line(t, "s{}".format(t)) for t in (1.01, 2.5, 3.0)]
        first = merge_secondary(primary, secondary, TrackKind.translation)
        second = merge_secondary(primary, secondary, TrackKind.translation)
        assert first == second


class TestBuildTimeline:

    def test_end_to_end_hello_world(self):
        timeline = build_timeline(
            "[00:10.00]Hello\n[00:20.00]World",
            translation="[00:10.03]你好\n[00:20.00]世界",
            tolerance_s=0.05,
        )
        assert [(l.time_s, l.text, l.translation) for l in timeline] == [
            (10.0, "Hello", "你好"),
            (20.0, "World", "世界"),
        ]
        assert timeline.has_translation is True
        assert timeline.has_romanization is False

    def test_full_merge(self, plain_original, translation, romanization):
        timeline = build_timeline(plain_original, translation, romanization, tolerance_s=0.05)
        rows = [(l.time_s, l.text, l.translation, l.romanization) for l in timeline]
        assert rows == [
            (10.0, "Hello", "你好", "ni hao"),
            (12.0, "World", "世界", "shi jie"),
            (14.0, "", "", ""),
            (16.0, "Chorus", "", ""),
            (18.0, "", "间奏", ""),
            (20.0, "Chorus", "", ""),
        ]
        assert [l.index for l in timeline] == list(range(6))

    def test_romanization_pass_sees_translation_insertions(self):
        timeline = build_timeline(
            "[00:01.00]a",
            translation="[00:05.00]only translation",
            romanization="[00:05.01]only romanization",
        )
        assert len(timeline) == 2
        inserted = timeline[1]
        assert inserted.text == ""
        assert inserted.translation == "only translation"
        assert inserted.romanization == "only romanization"

    def test_absent_tracks_are_none(self, plain_original):
        timeline = build_timeline(plain_original)
        assert all(l.translation is None and l.romanization is None for l in timeline)
        assert not timeline.has_translation
        assert not timeline.has_romanization

    def test_blank_secondary_leaves_flag_false(self, plain_original):
        timeline = build_timeline(plain_original, translation="  \n ")
        assert timeline.has_translation is False
        assert all(l.translation is None for l in timeline)

    def test_translation_promoted_when_original_empty(self):
        timeline = build_timeline("", translation="[00:01.00]Only")
        assert [l.text for l in timeline] == ["Only"]
        assert timeline.has_translation is False

    def test_metadata_and_user_offset(self):
        timeline = build_timeline("[ti:T]\n[offset:200]\n[00:01.00]x", offset_s=0.3)
        assert timeline.metadata["ti"] == "T"
        assert timeline.offset_s == pytest.approx(0.5)

    def test_user_offset_without_tag(self):
        timeline = build_timeline("[00:01.00]x", offset_s=-0.25)
        assert timeline.offset_s == pytest.approx(-0.25)

    def test_tolerance_is_configurable(self):
        original = "[00:10.00]Hello"
        secondary = "[00:10.20]你好"
        assert len(build_timeline(original, secondary, tolerance_s=0.05)) == 2
        assert len(build_timeline(original, secondary, tolerance_s=0.25)) == 1

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError):
            build_timeline("[00:01.00]x", tolerance_s=-1)

    def test_garbage_original_never_raises(self):
        timeline = build_timeline("garbage\nmore garbage", translation="[00:01.00]x")
        assert [l.time_s for l in timeline][:2] == [0.0, 0.0]
        assert timeline[0].text == "garbage"
