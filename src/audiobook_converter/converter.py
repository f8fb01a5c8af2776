"""Audiobook conversion -- one ffmpeg run per chapter, then a track number tag.

The chapter loop is strictly sequential: progress is aggregated as
completed chapter seconds plus the seconds ffmpeg reports for the chapter
in flight, divided by the total duration.
"""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

from .config import ConverterConfig
from .errors import OutputDirectoryError, TagWriteError
from .ffmpeg import Transcoder
from .ffprobe import duration_to_timestamp
from .metadata import MediaMetadata
from .models import (
    ChapterMarker,
    ConversionResult,
    ConversionState,
    CutOptions,
    MediaInfo,
    ProgressSink,
)

log = logger.bind(stage="converter")

_SEPARATORS = os.sep + (os.altsep or "")


def resolve_output(
    source: Path, output: str | Path | None, extension: str
) -> tuple[Path, str]:
    """Split the output argument into (output directory, base file name).

    - no output: the source's directory, named after the source
    - an existing directory, a path with a trailing separator, or a last
      segment without extension: that directory, named after the source
    - anything else is a file path: its parent directory and its name
    """
    defaulted = not output
    raw = str(source.parent) if defaulted else str(output)
    trimmed = raw.rstrip(_SEPARATORS) or raw[:1]
    candidate = Path(trimmed)

    is_file = (
        not defaulted
        and not raw.endswith(tuple(_SEPARATORS))
        and bool(candidate.suffix)
        and not candidate.is_dir()
    )
    if is_file:
        return candidate.parent, candidate.name
    return candidate, f"{source.stem}{extension}"


def chapter_spans(chapters: list[ChapterMarker], total_seconds: int) -> list[CutOptions]:
    """Whole-second (start, duration) of each chapter.

    A chapter ends where the next one starts; the last one ends at the
    total duration.
    """
    spans = []
    for i, chapter in enumerate(chapters):
        start = chapter.start_ms // 1000
        if i + 1 < len(chapters):
            end = chapters[i + 1].start_ms // 1000
        else:
            end = total_seconds
        spans.append(CutOptions(start=start, duration=end - start))
    return spans


def padding_width(chapter_count: int) -> int:
    """Digits needed for the highest chapter number (9 -> 1, 10 -> 2)."""
    return len(str(chapter_count))


def chapter_file_name(base_name: str, number: int, width: int) -> str:
    """`book.mp3`, 3, 2 -> `book - 03.mp3`."""
    base = Path(base_name)
    return f"{base.stem} - {number:0{width}d}{base.suffix}"


class AudiobookConverter:
    """Convert an audiobook into one file per chapter, or a single file.

    An instance holds the progress state of the conversion in flight and
    must not run two conversions at the same time.

    Attributes:
        transcoder: ffmpeg wrapper producing each output file
        metadata: Reads chapter markers and writes track numbers
        config: Converter configuration (target extension, timeouts)
    """

    def __init__(
        self,
        transcoder: Transcoder,
        metadata: MediaMetadata | None = None,
        config: ConverterConfig | None = None,
    ) -> None:
        self.config = config or ConverterConfig()
        self.transcoder = transcoder
        self.metadata = metadata or MediaMetadata(
            ffmpeg_path=transcoder.ffmpeg_path,
            ffprobe_path=self.config.ffprobe_path,
            timeout=self.config.tag_timeout,
        )
        self._progress: ProgressSink | None = None
        self._state: ConversionState | None = None

    def convert(
        self,
        source: str | Path,
        output: str | Path | None = None,
        split_chapters: bool = True,
        progress: ProgressSink | None = None,
    ) -> ConversionResult:
        """Convert `source` and return the produced files in chapter order.

        Returns an empty result if the source or ffmpeg is missing. Raises
        OutputDirectoryError if the output directory cannot be created;
        ffmpeg and ffprobe failures propagate, leaving finished chapters on
        disk. A failed track number write is logged and recorded in
        ``tag_failures`` without stopping the loop.
        """
        result = ConversionResult()
        source = Path(source)

        if not self.transcoder.available:
            log.error(f"Can't find ffmpeg at {self.transcoder.ffmpeg_path}")
            return result
        if not source.is_file():
            log.error(f"Can't find source at {source}")
            return result

        output_dir, base_name = resolve_output(source, output, self.config.extension)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputDirectoryError(output_dir, str(exc)) from exc

        info = self.metadata.read(source)
        chapters = self._resolve_chapters(info, split_chapters)
        spans = chapter_spans(chapters, info.duration_seconds)
        width = padding_width(len(chapters))
        log.info(
            f"Converting {source.name}: {len(chapters)} chapter(s), "
            f"{duration_to_timestamp(info.duration)} -> {output_dir / base_name}"
        )

        self._progress = progress
        self._state = ConversionState(total_duration=info.duration_seconds)
        try:
            for index, span in enumerate(spans):
                if len(spans) > 1:
                    cut = span
                    dest = output_dir / chapter_file_name(base_name, index + 1, width)
                else:
                    cut = None
                    dest = output_dir / base_name

                log.info(
                    f"Chapter {index + 1}/{len(spans)}: "
                    f"{duration_to_timestamp(span.start)} +{span.duration}s -> {dest.name}"
                )
                self._state.chapter_duration = span.duration
                self.transcoder.convert(source, dest, cut, self._on_progress)

                try:
                    self.metadata.set_track_number(dest, index + 1)
                except TagWriteError as exc:
                    log.warning(f"Track number not written to {dest.name}: {exc}")
                    result.tag_failures.append(dest)

                result.files.append(dest)
                self._state.completed_duration += span.duration

            self._report(1.0)
        finally:
            self._progress = None
            self._state = None

        log.info(f"Finished {source.name}: {len(result.files)} file(s)")
        return result

    def _resolve_chapters(
        self, info: MediaInfo, split_chapters: bool
    ) -> list[ChapterMarker]:
        if not split_chapters:
            return [info.whole_file_chapter()]
        if not info.chapters:
            log.debug("Source has no chapters, converting as a single file")
            return [info.whole_file_chapter()]
        return list(info.chapters)

    def _on_progress(self, processed: float) -> None:
        """Progress tick from ffmpeg: seconds processed in the current chapter."""
        if self._state is None:
            return
        self._report(self._state.fraction(processed))

    def _report(self, fraction: float) -> None:
        if self._progress is not None:
            self._progress.report(fraction)
