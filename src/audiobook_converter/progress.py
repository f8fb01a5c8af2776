"""Single-line textual progress bar for the CLI."""

import click


class ProgressBar:
    """Progress sink that redraws one terminal line per report.

    Only redraws when the rendered percentage changes, since ffmpeg reports
    several ticks per second.
    """

    def __init__(self, width: int = 40) -> None:
        self.width = width
        self._last_line = ""

    def render(self, fraction: float) -> str:
        fraction = min(max(fraction, 0.0), 1.0)
        filled = int(self.width * fraction)
        bar = "#" * filled + "-" * (self.width - filled)
        return f"  [{bar}] {fraction * 100:5.1f}%"

    def report(self, fraction: float) -> None:
        line = self.render(fraction)
        if line == self._last_line:
            return
        self._last_line = line
        click.echo(f"\r{line}", nl=False)

    def finish(self) -> None:
        """Move past the bar line, if one was drawn."""
        if self._last_line:
            click.echo("")
            self._last_line = ""
