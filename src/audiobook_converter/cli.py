"""CLI entry point for the audiobook converter."""

import sys
from pathlib import Path

import click
from loguru import logger

from . import __version__
from .config import ConverterConfig
from .converter import AudiobookConverter
from .ffmpeg import Transcoder, resolve_binary
from .progress import ProgressBar

log = logger.bind(stage="cli")

EPILOG = """\b
Example:
  audiobook-convert -s /path/to/audiobook.m4b -o /put/converted/files/here/ -c
"""


def _default_ffmpeg_path() -> Path:
    """ffmpeg beside the running executable, else whatever PATH provides."""
    name = "ffmpeg.exe" if sys.platform == "win32" else "ffmpeg"
    running = sys.executable if getattr(sys, "frozen", False) else sys.argv[0]
    beside = Path(running).resolve().parent / name
    if beside.is_file():
        return beside
    found = resolve_binary(name)
    return found or beside


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="ConvertAudiobook",
    message="%(prog)s v %(version)s",
)
@click.option("-s", "--source", required=True, help="Path to the audiobook file.")
@click.option("-o", "--output", default=None, help="Path for the file output.")
@click.option(
    "-c", "--chapters", is_flag=True, help="Split audiobook into chapters."
)
@click.option(
    "-f",
    "--ffmpeg",
    default=None,
    help="Path to ffmpeg. Default is the application directory, then PATH.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to .env file.",
)
def main(
    source: str,
    output: str | None,
    chapters: bool,
    ffmpeg: str | None,
    verbose: bool,
    config_file: str | None,
) -> None:
    """Convert an audiobook (.m4b) into .mp3 files, optionally one per chapter."""
    config_kwargs: dict[str, bool | Path] = {}
    if verbose:
        config_kwargs["verbose"] = True
    if ffmpeg:
        config_kwargs["ffmpeg_path"] = Path(ffmpeg)

    config = ConverterConfig(
        _env_file=config_file or ".env", **config_kwargs  # type: ignore[arg-type]
    )
    config.setup_logging()

    ffmpeg_path = config.ffmpeg_path or _default_ffmpeg_path()
    if resolve_binary(ffmpeg_path) is None:
        click.echo(f"Can't find ffmpeg at {ffmpeg_path}.")
        return
    if not Path(source).is_file():
        click.echo(f"Can't find source at {source}.")
        return

    transcoder = Transcoder(
        ffmpeg_path=ffmpeg_path, codec=config.codec, bitrate=config.bitrate
    )
    converter = AudiobookConverter(transcoder, config=config)
    bar = ProgressBar()

    log.debug(f"source={source} output={output} chapters={chapters} ffmpeg={ffmpeg_path}")
    click.echo(f"Converting audiobook {source}.")
    try:
        result = converter.convert(
            source, output, split_chapters=chapters, progress=bar
        )
    except Exception as e:
        bar.finish()
        click.echo(f"Error during conversion: {e}.")
        return

    bar.finish()
    if result.tag_failures:
        click.echo(
            f"  WARNING: track number missing on {len(result.tag_failures)} file(s)"
        )
    click.echo("Finished conversion.")
