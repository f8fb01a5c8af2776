"""Core data types for the audiobook converter.

Types:
    ChapterMarker    -- Start/end offsets (ms) of one chapter in the source.
    MediaInfo        -- Duration and chapter list read from a media file.
    CutOptions       -- Sub-range (whole seconds) the transcoder should extract.
    ConversionState  -- Transient progress aggregation for one conversion.
    ConversionResult -- Files produced by one conversion.
    ProgressSink     -- Anything with a ``report(fraction)`` method.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


class ProgressSink(Protocol):
    def report(self, fraction: float) -> None: ...


@dataclass(frozen=True)
class ChapterMarker:
    start_ms: int
    end_ms: int
    title: str = ""


@dataclass
class MediaInfo:
    """Duration and chapter markers of a media file."""

    duration: float
    chapters: list[ChapterMarker] = field(default_factory=list)

    @property
    def duration_ms(self) -> int:
        return int(round(self.duration * 1000))

    @property
    def duration_seconds(self) -> int:
        """Total duration truncated to whole seconds."""
        return int(self.duration)

    def whole_file_chapter(self) -> ChapterMarker:
        """A single marker spanning the complete file."""
        return ChapterMarker(start_ms=0, end_ms=self.duration_ms)


@dataclass(frozen=True)
class CutOptions:
    start: int
    duration: int


@dataclass
class ConversionState:
    """Progress bookkeeping for one in-flight conversion.

    total_duration is fixed once read. completed_duration only grows, one
    chapter at a time. last_fraction is the last value sent to the sink.
    """

    total_duration: int
    completed_duration: int = 0
    chapter_duration: int = 0
    last_fraction: float = 0.0

    def fraction(self, processed: float) -> float:
        """Overall fraction for `processed` seconds into the current chapter.

        Clamped to [last_fraction, 1.0] so the reported value never moves
        backwards or overshoots when ffmpeg reports slightly past the cut.
        """
        if self.total_duration <= 0:
            return self.last_fraction
        raw = (self.completed_duration + max(processed, 0.0)) / self.total_duration
        self.last_fraction = min(max(raw, self.last_fraction), 1.0)
        return self.last_fraction


@dataclass
class ConversionResult:
    """Produced files, in chapter order."""

    files: list[Path] = field(default_factory=list)
    tag_failures: list[Path] = field(default_factory=list)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)
