"""Read chapter metadata and write track numbers.

Reading goes through ffprobe. Writing uses ffmpeg -c copy (no re-encode)
into a temp file in the same directory, which then atomically replaces
the original.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from .errors import TagWriteError
from .ffprobe import read_media_info
from .models import MediaInfo

if TYPE_CHECKING:
    from .config import ConverterConfig

log = logger.bind(stage="metadata")


def _sibling_binary(ffmpeg_path: Path, name: str) -> str:
    """Locate a tool installed next to ffmpeg, else fall back to PATH lookup."""
    suffix = ffmpeg_path.suffix  # ".exe" on Windows builds
    candidate = ffmpeg_path.with_name(f"{name}{suffix}")
    if ffmpeg_path.parent != Path(".") and candidate.is_file():
        return str(candidate)
    return name


class MediaMetadata:
    """Metadata reader/writer backed by ffprobe and ffmpeg."""

    def __init__(
        self,
        ffmpeg_path: str | Path = "ffmpeg",
        ffprobe_path: str | Path | None = None,
        timeout: int = 120,
    ) -> None:
        self.ffmpeg_path = Path(ffmpeg_path)
        self.ffprobe_path = (
            str(ffprobe_path)
            if ffprobe_path
            else _sibling_binary(self.ffmpeg_path, "ffprobe")
        )
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: ConverterConfig) -> MediaMetadata:
        return cls(
            ffmpeg_path=config.ffmpeg_path or "ffmpeg",
            ffprobe_path=config.ffprobe_path,
            timeout=config.tag_timeout,
        )

    def read(self, path: Path) -> MediaInfo:
        """Total duration and chapter markers of `path`."""
        return read_media_info(path, binary=self.ffprobe_path)

    def set_track_number(self, path: Path, track: int) -> None:
        """Write the track-number tag into `path` and persist it.

        Raises TagWriteError on failure. The original file is left untouched
        in that case and the temp file is removed.
        """
        temp_file = path.with_name(f"{path.stem}.tagging{path.suffix}")

        cmd = [
            str(self.ffmpeg_path),
            "-y",
            "-hide_banner",
            "-nostdin",
            "-loglevel",
            "error",
            "-i",
            str(path),
            "-map",
            "0",
            "-c",
            "copy",
            "-map_metadata",
            "0",
            "-metadata",
            f"track={track}",
        ]
        if path.suffix.lower() == ".mp3":
            cmd.extend(["-id3v2_version", "3"])
        cmd.append(str(temp_file))

        log.debug(f"ffmpeg command: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            temp_file.unlink(missing_ok=True)
            raise TagWriteError(
                "ffmpeg", -1, f"timed out after {self.timeout}s tagging {path.name}"
            ) from exc
        except OSError as exc:
            temp_file.unlink(missing_ok=True)
            raise TagWriteError("ffmpeg", -1, f"cannot run {self.ffmpeg_path}: {exc}") from exc

        if result.returncode != 0:
            temp_file.unlink(missing_ok=True)
            raise TagWriteError("ffmpeg", result.returncode, result.stderr[-500:])

        # Atomic replace
        try:
            temp_file.replace(path)
        except OSError as exc:
            temp_file.unlink(missing_ok=True)
            raise TagWriteError("ffmpeg", 0, f"failed to replace {path.name}: {exc}") from exc

        log.debug(f"Tagged {path.name}: track={track}")
