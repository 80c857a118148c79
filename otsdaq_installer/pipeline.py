"""
Run the installation steps in order.

Every step receives the immutable :class:`InstallConfig` explicitly; the
only state carried from step to step is the :class:`ShellEnvironment` and
the values each step returns. A failing step raises and nothing after it
runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import structlog

from otsdaq_installer.build import build_jobs, build_workspace, seed_user_data
from otsdaq_installer.checkout import CheckoutReport, checkout_sources
from otsdaq_installer.config import Settings
from otsdaq_installer.engines import ExecutionEngine
from otsdaq_installer.environment import activate_environment, inherit_products_path
from otsdaq_installer.host import detect_os, write_legacy_override
from otsdaq_installer.models import InstallConfig, ResolvedVersions
from otsdaq_installer.products import fetch_products
from otsdaq_installer.setup_script import SetupScriptModel, write_setup_script
from otsdaq_installer.utils.display import echo_done, echo_item, echo_step, echo_timestamps
from otsdaq_installer.utils.http import Fetcher
from otsdaq_installer.utils.shellenv import ShellEnvironment
from otsdaq_installer.versions import resolve_versions

log = structlog.get_logger()

TOTAL_STEPS = 7


@dataclass
class InstallReport:
    """Summary of a completed installation."""

    started: datetime
    finished: Optional[datetime] = None
    versions: Optional[ResolvedVersions] = None
    os_id: str = ""
    override_file: Optional[Path] = None
    checkout: Optional[CheckoutReport] = None
    setup_script: Optional[Path] = None
    user_data: List[Path] = field(default_factory=list)
    jobs: int = 0


def report_start(started: datetime) -> None:
    log.info("install.start", at=started.isoformat(timespec="seconds"))
    echo_timestamps(started)


def report_end(started: datetime, finished: datetime) -> None:
    log.info(
        "install.end",
        started=started.isoformat(timespec="seconds"),
        finished=finished.isoformat(timespec="seconds"),
    )
    echo_timestamps(started, finished)


def run_install(
    cfg: InstallConfig,
    settings: Settings,
    *,
    engine: ExecutionEngine,
    fetcher: Fetcher,
    shell: Optional[ShellEnvironment] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> InstallReport:
    """Provision otsdaq into ``cfg.base_dir``.

    Args:
        cfg: Validated run configuration.
        settings: Site settings.
        engine: Runs every external command.
        fetcher: Downloads ``product_deps`` and ``pullProducts``.
        shell: Environment shared by the commands; a fresh one inheriting
            the process environment when omitted.
        clock: Source of the start/end timestamps.

    Returns:
        The :class:`InstallReport` of the run.

    Raises:
        subprocess.CalledProcessError: A fatal external command failed.
        requests.RequestException: A download failed.
        otsdaq_installer.errors.InstallerError: Metadata could not be resolved.
    """
    report = InstallReport(started=clock())
    report_start(report.started)

    shell = shell or ShellEnvironment(engine, cwd=cfg.base_dir)
    inherit_products_path(shell, cfg)
    download_dir = cfg.base_dir / settings.files.download_dir

    echo_step(1, TOTAL_STEPS, f"Resolving versions ({cfg.tag})")
    versions = resolve_versions(
        cfg.tag, fetcher, settings, save_to=download_dir / "product_deps"
    )
    report.versions = versions
    echo_item(f"otsdaq_demo {versions.demo_version}, otsdaq {versions.otsdaq_version}, "
              f"qualifiers {versions.default_qualifier}")

    echo_step(2, TOTAL_STEPS, "Detecting platform")
    support_url = settings.remotes.url(settings.platform.support_repo, write_mode=False)
    report.os_id = detect_os(engine, download_dir, support_url, shell.env)
    report.override_file = write_legacy_override(report.os_id, cfg.products_dir, settings)
    echo_item(f"OS identifier: {report.os_id}")

    echo_step(3, TOTAL_STEPS, "Pulling products")
    fetch_products(
        cfg,
        versions,
        report.os_id,
        engine=engine,
        fetcher=fetcher,
        settings=settings,
        download_dir=download_dir,
        env=shell.env,
    )

    echo_step(4, TOTAL_STEPS, "Activating environment")
    activate_environment(shell, cfg, settings)

    echo_step(5, TOTAL_STEPS, "Checking out sources")
    report.checkout = checkout_sources(shell, cfg, versions, settings)

    echo_step(6, TOTAL_STEPS, "Writing setup script")
    report.jobs = build_jobs()
    model = SetupScriptModel.from_install(
        cfg, versions, settings, srcs_dir=report.checkout.srcs_dir, jobs=report.jobs
    )
    report.setup_script = write_setup_script(model)

    echo_step(7, TOTAL_STEPS, "Building")
    demo_dir = report.checkout.srcs_dir / settings.packages["demo"].name
    report.user_data = seed_user_data(demo_dir)
    build_workspace(shell, cfg.base_dir, jobs=report.jobs)

    report.finished = clock()
    report_end(report.started, report.finished)
    echo_done(str(report.setup_script))
    return report
