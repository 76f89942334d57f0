"""Progress display for export jobs."""

import sys
from typing import Optional

import click

from models.export import ProgressEvent


class ProgressContext:
    """Context manager that renders ProgressEvents on stderr.

    Interactive terminals get a progress bar; otherwise each event's
    message is printed once.

    Usage:
        with ProgressContext("Exporting") as progress:
            run_export(..., progress_callback=progress.on_event)
    """

    def __init__(self, label: str, show_status: bool = True):
        self.label = label
        self.show_status = show_status
        self._bar: Optional[click.progressbar] = None
        self._last_pos = 0
        self._interactive = sys.stderr.isatty()

    def __enter__(self) -> "ProgressContext":
        if self._interactive:
            self._bar = click.progressbar(
                length=100,
                label=self.label,
                file=sys.stderr,
                show_percent=True,
            )
            self._bar.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._bar is not None:
            if exc_type is None and self._last_pos < 100:
                self._bar.update(100 - self._last_pos)
            self._bar.__exit__(exc_type, exc_val, exc_tb)

    def on_event(self, event: ProgressEvent) -> None:
        """Progress sink for core.export_job.run_export."""
        if self._bar is not None:
            new_pos = int(event.fraction * 100)
            if new_pos > self._last_pos:
                self._bar.update(new_pos - self._last_pos)
                self._last_pos = new_pos
        elif self.show_status:
            click.echo(
                f"{self.label}: [{event.current}/{event.total}] {event.message}",
                err=True,
            )
