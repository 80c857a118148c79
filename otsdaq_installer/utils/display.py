"""Console progress lines printed while the installer runs.

Only progress goes to stdout; diagnostics go through logging.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import click

__all__ = ["echo_step", "echo_item", "echo_timestamps", "echo_done"]


def echo_step(number: int, total: int, title: str) -> None:
    """Print the ``[n/total] title`` header of an installation step."""
    click.secho(f"\n[{number}/{total}] {title}", fg="cyan", bold=True)


def echo_item(text: str) -> None:
    click.echo(f"    - {text}")


def echo_timestamps(started: datetime, finished: Optional[datetime] = None) -> None:
    """Print the start time and, once known, the end time of the run."""
    echo_item(f"Start time: {started:%c}")
    if finished is not None:
        echo_item(f"End time:   {finished:%c}")


def echo_done(setup_script: str) -> None:
    click.secho(f"\notsdaq installed. In new shells run:  source {setup_script}", fg="green")
