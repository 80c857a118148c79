"""Exceptions raised by the installer.

Errors that end the process carry the exit code the CLI reports; everything
else derives from :class:`InstallerError` and is turned into
:class:`InstallFailed` by the CLI once option validation has succeeded.
"""

from __future__ import annotations

from pathlib import Path

import click

# Exit codes reported by ``otsdaq-install``.
EXIT_USAGE = 1
EXIT_INVALID_VALUE = 2
EXIT_INSTALL_FAILED = 9


class InstallerError(RuntimeError):
    """Base class for failures detected by the installer itself."""


class ConfigError(InstallerError):
    """Raised when the site settings file cannot be read or validated."""


class VersionResolutionError(InstallerError):
    """Raised when ``product_deps`` lacks a required field."""


class QualifierError(VersionResolutionError):
    """Raised when the default qualifier is not of the form ``e:s``."""


class PlatformDetectionError(InstallerError):
    """Raised when the OS identifier cannot be determined."""


class InvalidOptionValue(click.ClickException):
    """A recognised option carries a value outside its accepted set."""

    exit_code = EXIT_INVALID_VALUE


class InstallFailed(click.ClickException):
    """Any failure after option validation (fail-fast)."""

    exit_code = EXIT_INSTALL_FAILED

    def __init__(self, log_file: Path) -> None:
        self.log_file = log_file
        super().__init__(failure_message(log_file))


def failure_message(log_file: Path) -> str:
    """Return the fixed apology block pointing at *log_file*."""
    return (
        "\n"
        "*************************************************\n"
        "The otsdaq installation did not complete, sorry.\n"
        f"Please look at {log_file} for details.\n"
        "*************************************************"
    )
