"""Converter configuration via pydantic-settings (.env + env vars)."""

import sys
from pathlib import Path

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConverterConfig(BaseSettings):
    """All converter configuration with layered resolution:
    .env file < environment variables < constructor kwargs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # -- External tools --
    ffmpeg_path: Path | None = None
    ffprobe_path: Path | None = None

    # -- Encoding --
    target_extension: str = ".mp3"
    codec: str = "auto"  # "auto" = libmp3lame if present, else ffmpeg default
    bitrate: int = 128
    tag_timeout: int = 120

    # -- Logging --
    log_level: str = "INFO"
    log_dir: Path | None = None
    verbose: bool = False

    @property
    def extension(self) -> str:
        """Target extension with a leading dot."""
        ext = self.target_extension.strip()
        return ext if ext.startswith(".") else f".{ext}"

    def setup_logging(self) -> None:
        """Configure loguru for the converter."""
        logger.remove()  # Remove default stderr handler

        log_format = (
            "{time:YYYY-MM-DDTHH:mm:ssZ} | {level:<8} | "
            "{extra[stage]:<10} | {message}"
        )

        def _default_extra(record):
            record["extra"].setdefault("stage", "")
            return True

        level = "DEBUG" if self.verbose else self.log_level.upper()
        logger.add(
            sys.stderr,
            format=log_format,
            level=level,
            filter=_default_extra,
        )

        if self.log_dir is None:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self.log_dir / "converter.log"),
            format=log_format,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            filter=_default_extra,
        )
