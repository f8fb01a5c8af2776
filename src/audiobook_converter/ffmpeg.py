"""FFmpeg transcoder -- runs one conversion and streams progress ticks.

ffmpeg is started with ``-progress pipe:1`` so that stdout carries
key=value blocks such as::

    out_time_us=12345678
    out_time=00:00:12.345678
    progress=continue

Each parsed ``out_time*`` value is forwarded to the caller as seconds
processed within the current operation.
"""

from __future__ import annotations

import functools
import shutil
import subprocess
from collections import deque
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from .errors import NotFoundError, TranscodeError
from .models import CutOptions

if TYPE_CHECKING:
    from .config import ConverterConfig

log = logger.bind(stage="ffmpeg")

ProgressCallback = Callable[[float], None]

# Keys ffmpeg emits for output position; out_time_ms is microseconds too.
_MICROSECOND_KEYS = ("out_time_us", "out_time_ms")


def _hms_to_seconds(value: str) -> float:
    """Parse HH:MM:SS(.ffffff) into seconds."""
    parts = value.strip().split(":")
    if len(parts) != 3:
        return float(value)
    hours, minutes, seconds = parts
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def parse_progress_line(line: str) -> float | None:
    """Return processed seconds from one ``-progress`` line, or None.

    Lines that are not positional (bitrate=, speed=, progress=...) and
    ``N/A`` values yield None.
    """
    key, sep, value = line.strip().partition("=")
    if not sep:
        return None
    value = value.strip()
    if not value or value == "N/A":
        return None
    try:
        if key in _MICROSECOND_KEYS:
            return int(value) / 1_000_000
        if key == "out_time":
            return _hms_to_seconds(value)
    except ValueError:
        return None
    return None


def _is_progress_line(line: str) -> bool:
    key, sep, _ = line.partition("=")
    return bool(sep) and " " not in key


def resolve_binary(binary: str | Path) -> Path | None:
    """Return the binary as an existing file, looking it up on PATH if needed."""
    candidate = Path(binary)
    if candidate.is_file():
        return candidate
    found = shutil.which(str(binary))
    return Path(found) if found else None


@functools.cache
def _detect_encoder(ffmpeg: str) -> str | None:
    """Return libmp3lame if this ffmpeg build has it, else None (ffmpeg default)."""
    result = subprocess.run(
        [ffmpeg, "-hide_banner", "-encoders"],
        capture_output=True,
        text=True,
    )
    if "libmp3lame" in result.stdout:
        log.info("Using libmp3lame encoder")
        return "libmp3lame"
    log.info("libmp3lame not available, using ffmpeg default encoder")
    return None


class Transcoder:
    """Thin wrapper around one ffmpeg binary.

    Attributes:
        ffmpeg_path: Path or command name of the ffmpeg binary
        codec: Audio encoder name, or "auto" (libmp3lame for .mp3 if present,
            else ffmpeg's default for the destination extension)
        bitrate: Target audio bitrate in kbps (0 leaves it to ffmpeg)
    """

    def __init__(
        self,
        ffmpeg_path: str | Path = "ffmpeg",
        codec: str = "auto",
        bitrate: int = 128,
    ) -> None:
        self.ffmpeg_path = Path(ffmpeg_path)
        self.codec = codec
        self.bitrate = bitrate

    @classmethod
    def from_config(cls, config: ConverterConfig) -> Transcoder:
        return cls(
            ffmpeg_path=config.ffmpeg_path or "ffmpeg",
            codec=config.codec,
            bitrate=config.bitrate,
        )

    @property
    def available(self) -> bool:
        """True if the ffmpeg binary can be found."""
        return resolve_binary(self.ffmpeg_path) is not None

    def _encoder(self, dest: Path) -> str | None:
        if self.codec != "auto":
            return self.codec
        # Other containers get ffmpeg's default encoder for their extension
        if dest.suffix.lower() != ".mp3":
            return None
        return _detect_encoder(str(self.ffmpeg_path))

    def build_command(
        self, source: Path, dest: Path, cut: CutOptions | None = None
    ) -> list[str]:
        """Build the ffmpeg argv for one conversion."""
        cmd = [
            str(self.ffmpeg_path),
            "-y",
            "-hide_banner",
            "-nostdin",
            "-loglevel",
            "error",
            "-nostats",
            "-progress",
            "pipe:1",
        ]
        if cut is not None:
            cmd.extend(["-ss", str(cut.start)])
        cmd.extend(["-i", str(source)])
        if cut is not None:
            cmd.extend(["-t", str(cut.duration)])
            # A single chapter must not carry the whole book's chapter table
            cmd.extend(["-map_chapters", "-1"])

        encoder = self._encoder(dest)
        if encoder:
            cmd.extend(["-c:a", encoder])
        if self.bitrate > 0:
            cmd.extend(["-b:a", f"{self.bitrate}k"])
        cmd.append(str(dest))
        return cmd

    def convert(
        self,
        source: Path,
        dest: Path,
        cut: CutOptions | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Convert source into dest, optionally cutting a sub-range.

        Calls on_progress(seconds) for every position update ffmpeg reports.
        Raises NotFoundError if ffmpeg cannot be started and TranscodeError
        if it exits non-zero.
        """
        cmd = self.build_command(source, dest, cut)
        log.debug(f"ffmpeg command: {' '.join(cmd)}")

        # stderr is merged into stdout; with -loglevel error every
        # non key=value line is an error message.
        errors: deque[str] = deque(maxlen=20)
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise NotFoundError(f"Can't find ffmpeg at {self.ffmpeg_path}") from exc

        with proc:
            for line in proc.stdout:
                line = line.strip()
                if not line:
                    continue
                if not _is_progress_line(line):
                    errors.append(line)
                    continue
                seconds = parse_progress_line(line)
                if seconds is not None and on_progress is not None:
                    on_progress(seconds)
            returncode = proc.wait()

        if returncode != 0:
            stderr = "\n".join(errors)
            log.error(f"ffmpeg failed on {dest.name}: {stderr[-500:]}")
            raise TranscodeError("ffmpeg", returncode, stderr)
