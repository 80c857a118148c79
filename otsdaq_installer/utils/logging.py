"""
Logging for one installer run.

* Rich console output for warnings and errors (INFO with ``--verbose``).
* A single append-only plain-text install log in the base directory.
  Structured events are rendered as *labelled* lines (timestamp, level,
  event); output of external commands is written *unlabelled* through the
  :data:`OUTPUT_LOGGER` logger.

:func:`setup_logging` is called once by the CLI before options are
validated, so invalid values are already recorded in the install log.
"""

from __future__ import annotations

import atexit
import logging
from pathlib import Path

import structlog
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer as StructlogConsoleRenderer
from structlog.stdlib import LoggerFactory

__all__ = [
    "LOG_FILENAME",
    "OUTPUT_LOGGER",
    "remove_previous_log",
    "setup_logging",
]

LOG_FILENAME = "otsdaq_install.log"
OUTPUT_LOGGER = "otsdaq_installer.output"


# --------------------------------------------------------------------------- #
# Internal helpers – handlers                                                 #
# --------------------------------------------------------------------------- #
def _install_log_handler(path: Path) -> logging.Handler:
    """Return an append-mode handler writing bare messages to *path*.

    Args:
        path: Destination file; parent directories are created.

    Returns:
        Configured :class:`logging.FileHandler`.
    """
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8", mode="a")
    handler.setLevel(logging.DEBUG)
    # structlog already renders timestamp and level for labelled lines.
    handler.setFormatter(logging.Formatter("%(message)s"))
    atexit.register(handler.close)
    return handler


def _console_handler(verbose: bool) -> logging.Handler:
    return RichHandler(
        level=logging.INFO if verbose else logging.WARNING,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        show_path=False,
        markup=False,
    )


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def remove_previous_log(path: Path) -> None:
    """Delete the install log left behind by an earlier run, if any."""
    path.unlink(missing_ok=True)


def setup_logging(log_file: Path, *, verbose: bool = False) -> None:
    """Configure console logging and the append-only install log.

    Args:
        log_file: Install log path (normally ``<base>/otsdaq_install.log``).
        verbose: Emit INFO-level events on the console as well.
    """
    file_handler = _install_log_handler(log_file)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG)
    root.addHandler(_console_handler(verbose))
    root.addHandler(file_handler)

    # External command output goes to the log file only.
    output = logging.getLogger(OUTPUT_LOGGER)
    for handler in list(output.handlers):
        output.removeHandler(handler)
    output.setLevel(logging.DEBUG)
    output.propagate = False
    output.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            StructlogConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=False,
    )
