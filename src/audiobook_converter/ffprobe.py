"""FFprobe subprocess wrappers for audiobook inspection."""

import json
import subprocess
from pathlib import Path

from loguru import logger

from .errors import ExternalToolError
from .models import ChapterMarker, MediaInfo

log = logger.bind(stage="ffprobe")


def _run_ffprobe(
    args: list[str], binary: str | Path = "ffprobe"
) -> subprocess.CompletedProcess:
    """Run ffprobe with common flags."""
    return subprocess.run(
        [str(binary), "-v", "error"] + args,
        capture_output=True,
        text=True,
    )


def _seconds_to_ms(value) -> int:
    return int(round(float(value) * 1000))


def _parse_chapter(raw: dict) -> ChapterMarker | None:
    """Build a marker from one ffprobe chapter entry, or None if unusable."""
    try:
        start_ms = _seconds_to_ms(raw["start_time"])
        end_ms = _seconds_to_ms(raw["end_time"])
    except (KeyError, TypeError, ValueError):
        return None
    title = raw.get("tags", {}).get("title", "")
    return ChapterMarker(start_ms=start_ms, end_ms=end_ms, title=title)


def read_media_info(file: Path, binary: str | Path = "ffprobe") -> MediaInfo:
    """Read total duration and ordered chapter markers from a media file.

    Raises ExternalToolError if ffprobe fails and ValueError if the file
    reports no usable duration.
    """
    result = _run_ffprobe([
        "-show_format", "-show_chapters",
        "-of", "json",
        str(file),
    ], binary)
    if result.returncode != 0:
        raise ExternalToolError("ffprobe", result.returncode, result.stderr.strip())

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise ValueError(f"ffprobe returned invalid JSON for {file}") from exc

    raw_duration = data.get("format", {}).get("duration")
    if raw_duration in (None, "", "N/A"):
        raise ValueError(f"ffprobe returned empty duration for {file}")
    duration = float(raw_duration)

    chapters = []
    for raw in data.get("chapters", []):
        marker = _parse_chapter(raw)
        if marker is None:
            log.warning(f"Skipping malformed chapter entry in {file.name}: {raw}")
            continue
        chapters.append(marker)

    log.debug(f"{file.name}: duration={duration:.3f}s chapters={len(chapters)}")
    return MediaInfo(duration=duration, chapters=chapters)


def duration_to_timestamp(seconds: float) -> str:
    """Convert seconds to HH:MM:SS."""
    total = int(seconds)
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60
    return f"{h:02d}:{m:02d}:{s:02d}"

