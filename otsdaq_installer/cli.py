"""\b
Command-line interface entry point for *otsdaq-install*.

The command parses the flags, validates them into an immutable
:class:`~otsdaq_installer.models.InstallConfig` and hands over to
:func:`~otsdaq_installer.pipeline.run_install`.

Exit codes
----------
* ``0`` – success, or ``-h``.
* ``1`` – unknown option or malformed argument list.
* ``2`` – build type or package outside the accepted set.
* ``9`` – any failure once the options were validated.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import click
import requests
import structlog
from pydantic import ValidationError

from otsdaq_installer import __version__
from otsdaq_installer.config import load_settings
from otsdaq_installer.engines import LocalEngine
from otsdaq_installer.errors import (
    EXIT_USAGE,
    InstallerError,
    InstallFailed,
    InvalidOptionValue,
    failure_message,
)
from otsdaq_installer.models import (
    BUILD_TYPES,
    DEFAULT_BUILD_TYPE,
    DEFAULT_PACKAGES,
    DEFAULT_TAG,
    KNOWN_PACKAGES,
    InstallConfig,
)
from otsdaq_installer.pipeline import run_install
from otsdaq_installer.utils.http import HttpFetcher
from otsdaq_installer.utils.logging import (
    LOG_FILENAME,
    OUTPUT_LOGGER,
    remove_previous_log,
    setup_logging,
)

log = structlog.get_logger()

# Errors that end the run with the fail-fast exit once options are valid.
FAIL_FAST_ERRORS = (
    InstallerError,
    subprocess.CalledProcessError,
    requests.RequestException,
    OSError,
)

_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=100,
)


class InstallCommand(click.Command):
    """Click command reporting usage errors with exit code 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = EXIT_USAGE
            raise


def _validation_messages(exc: ValidationError) -> list[str]:
    return [err["msg"].removeprefix("Value error, ") for err in exc.errors()]


@click.command(
    name="otsdaq-install",
    cls=InstallCommand,
    context_settings=_CTX,
    help="""\b
Install otsdaq: pull the binary products, check out the sources, build,
and write setup_ots.sh into the current directory.
""",
    epilog=f"Packages: {', '.join(KNOWN_PACKAGES)}.  Build types: {', '.join(BUILD_TYPES)}.",
)
@click.version_option(__version__)
@click.option("-b", "--build-type", default=DEFAULT_BUILD_TYPE, metavar="TYPE",
              help="Build type (prof | debug).")
@click.option(
    "-d",
    "--products-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    show_default="./products",
    help="UPS products directory; also appended to $PRODUCTS.",
)
@click.option("-p", "--packages", default=DEFAULT_PACKAGES, metavar="LIST",
              help="Comma-separated packages to check out.")
@click.option("-s", "--srcs", "download_srcs", is_flag=True,
              help="Also check out the core otsdaq repositories.")
@click.option("-t", "--tag", default=DEFAULT_TAG, help="otsdaq-demo revision to resolve versions from.")
@click.option("-w", "--write", "write_mode", is_flag=True,
              help="Use authenticated (push-capable) repository remotes.")
@click.option("--verbose", is_flag=True, help="INFO-level console output.")
@click.pass_context
def install(  # noqa: D401 – Click callback
    ctx: click.Context,
    build_type: str,
    products_dir: Optional[Path],
    packages: str,
    download_srcs: bool,
    tag: str,
    write_mode: bool,
    verbose: bool,
) -> None:
    """Validate the options and run the installation.

    ``ctx.obj`` may carry ``engine``, ``fetcher`` and ``base_dir`` overrides;
    the defaults run real commands in the current directory.

    Raises:
        InvalidOptionValue: Unknown build type or package (exit 2).
        InstallFailed: Anything failed after validation (exit 9).
    """
    obj = ctx.obj or {}
    base = Path(obj.get("base_dir") or Path.cwd())
    log_file = base / LOG_FILENAME
    setup_logging(log_file, verbose=verbose)

    # ── 1. Validate options; nothing has been touched yet ─────────────────
    try:
        cfg = InstallConfig.from_options(
            base_dir=base,
            build_type=build_type,
            products_dir=products_dir,
            packages=packages,
            download_srcs=download_srcs,
            tag=tag,
            write_mode=write_mode,
            verbose=verbose,
        )
    except ValidationError as exc:
        messages = _validation_messages(exc)
        for message in messages:
            log.error("options.invalid", reason=message)
        raise InvalidOptionValue("; ".join(messages)) from exc

    log.info(
        "options",
        build_type=cfg.build_type,
        products_dir=str(cfg.products_dir),
        packages=cfg.sorted_packages,
        srcs=cfg.download_srcs,
        tag=cfg.tag,
        write=cfg.write_mode,
    )

    # ── 2. Fail fast from here on ─────────────────────────────────────────
    try:
        settings = load_settings(base)
        run_install(
            cfg,
            settings,
            engine=obj.get("engine") or LocalEngine(),
            fetcher=obj.get("fetcher") or HttpFetcher(),
        )
    except FAIL_FAST_ERRORS as exc:
        log.error("install.failed", error=str(exc), log_file=str(log_file))
        logging.getLogger(OUTPUT_LOGGER).error(failure_message(log_file))
        raise InstallFailed(log_file) from exc


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Console-script entry point: clear the previous log, then parse and run."""
    remove_previous_log(Path.cwd() / LOG_FILENAME)
    install.main(args=list(argv) if argv is not None else None, prog_name="otsdaq-install")


__all__: list[str] = ["install", "main"]
