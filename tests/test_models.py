"""Tests for models.py -- media info, conversion state and result."""

from pathlib import Path

from audiobook_converter.models import (
    ChapterMarker,
    ConversionResult,
    ConversionState,
    MediaInfo,
)


class TestMediaInfo:
    def test_durations(self):
        info = MediaInfo(duration=125.75)
        assert info.duration_seconds == 125
        assert info.duration_ms == 125750

    def test_whole_file_chapter(self):
        info = MediaInfo(duration=61.5, chapters=[ChapterMarker(0, 1000)])
        assert info.whole_file_chapter() == ChapterMarker(0, 61500)


class TestConversionState:
    def test_fraction(self):
        state = ConversionState(total_duration=100, completed_duration=40)
        assert state.fraction(10) == 0.5

    def test_clamped_to_one(self):
        state = ConversionState(total_duration=100, completed_duration=90)
        assert state.fraction(15) == 1.0

    def test_never_decreases(self):
        state = ConversionState(total_duration=100)
        assert state.fraction(30) == 0.3
        assert state.fraction(20) == 0.3

    def test_negative_tick_ignored(self):
        state = ConversionState(total_duration=100)
        assert state.fraction(-5) == 0.0

    def test_zero_total(self):
        state = ConversionState(total_duration=0)
        assert state.fraction(3) == 0.0


class TestConversionResult:
    def test_sequence_behaviour(self):
        result = ConversionResult(files=[Path("a.mp3"), Path("b.mp3")])
        assert len(result) == 2
        assert list(result) == [Path("a.mp3"), Path("b.mp3")]
        assert result

    def test_empty_is_falsy(self):
        assert not ConversionResult()
