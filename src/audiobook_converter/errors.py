"""Exception hierarchy for the audiobook converter."""


class ConverterError(Exception):
    """Base exception for all converter errors."""


class NotFoundError(ConverterError):
    """Source file or ffmpeg binary does not exist."""


class OutputDirectoryError(ConverterError):
    """The output directory could not be created."""

    def __init__(self, path, reason: str) -> None:
        super().__init__(f"Cannot create output directory {path}: {reason}")
        self.path = path
        self.reason = reason


class ExternalToolError(ConverterError):
    """An external subprocess (ffmpeg, ffprobe) failed."""

    def __init__(self, tool: str, exit_code: int, stderr: str) -> None:
        super().__init__(f"{tool} exited with code {exit_code}: {stderr}")
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr


class TranscodeError(ExternalToolError):
    """ffmpeg failed while producing an output file."""


class TagWriteError(ExternalToolError):
    """Writing the track number into a produced file failed."""
