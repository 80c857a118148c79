"""Create the ``mrb`` development area and check out the source repositories."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import structlog

from otsdaq_installer.config import Settings
from otsdaq_installer.engines import Policy
from otsdaq_installer.hooks import HookContext, run_hooks
from otsdaq_installer.models import InstallConfig, PackageDescriptor, ResolvedVersions
from otsdaq_installer.tools import MrbGitCheckout, MrbNewDev
from otsdaq_installer.utils.display import echo_item
from otsdaq_installer.utils.shellenv import ShellEnvironment

log = structlog.get_logger()


@dataclass
class CheckoutReport:
    """What the checkout step did."""

    srcs_dir: Path
    repositories: List[str] = field(default_factory=list)
    hooks: List[str] = field(default_factory=list)


def remote_url(repo: str, write_mode: bool, settings: Settings) -> str:
    """Return the authenticated remote in write mode, the anonymous one otherwise."""
    return settings.remotes.url(repo, write_mode)


def describe_package(package: str, cfg: InstallConfig, settings: Settings) -> PackageDescriptor:
    """Map a package id onto its branch, canonical name and remote."""
    entry = settings.packages[package]
    return PackageDescriptor(
        package=package,
        branch=entry.branch,
        name=entry.name,
        remote=remote_url(entry.repo, cfg.write_mode, settings),
    )


def prepare_workspace(
    shell: ShellEnvironment,
    cfg: InstallConfig,
    versions: ResolvedVersions,
    settings: Settings,
) -> Path:
    """Run ``mrb newDev`` and source the resulting ``localProducts`` setup.

    Returns:
        The ``srcs`` directory (``$MRB_SOURCE`` when the setup defines it).
    """
    shell.set("MRB_PROJECT", settings.mrb_project)
    MrbNewDev(
        version=versions.demo_version,
        qualifiers=versions.mrb_qualifiers(cfg.build_type),
        workdir=cfg.base_dir,
    ).execute(shell.engine, shell.env)

    local = cfg.base_dir / versions.local_products_name(settings.mrb_project, cfg.build_type)
    shell.source(local / "setup", policy=Policy.BEST_EFFORT)
    srcs = Path(shell.env.get("MRB_SOURCE") or cfg.base_dir / "srcs")
    log.info("workspace.ready", local_products=str(local), srcs=str(srcs))
    return srcs


def checkout_core(shell: ShellEnvironment, cfg: InstallConfig, settings: Settings, srcs: Path) -> List[str]:
    """Check out the core otsdaq repositories on the core branch."""
    names: List[str] = []
    for repo in settings.core_repositories:
        url = remote_url(repo.repo, cfg.write_mode, settings)
        echo_item(f"{repo.name} <- {url}")
        MrbGitCheckout(
            name=repo.name,
            url=url,
            workdir=srcs,
            branch=settings.core_branch,
        ).execute(shell.engine, shell.env)
        names.append(repo.name)
    return names


def checkout_package(shell: ShellEnvironment, desc: PackageDescriptor, srcs: Path) -> None:
    """Check out one package, then try to track its branch.

    ``mrb gitCheckout -b`` fails on a working copy that already exists, so
    the second call is tolerated.
    """
    echo_item(f"{desc.name} ({desc.branch}) <- {desc.remote}")
    MrbGitCheckout(name=desc.name, url=desc.remote, workdir=srcs).execute(shell.engine, shell.env)
    MrbGitCheckout(
        name=desc.name,
        url=desc.remote,
        workdir=srcs,
        branch=desc.branch,
        policy=Policy.BEST_EFFORT,
    ).execute(shell.engine, shell.env)


def checkout_sources(
    shell: ShellEnvironment,
    cfg: InstallConfig,
    versions: ResolvedVersions,
    settings: Settings,
) -> CheckoutReport:
    """Prepare the workspace, check out every repository, then run the hooks."""
    srcs = prepare_workspace(shell, cfg, versions, settings)
    report = CheckoutReport(srcs_dir=srcs)

    if cfg.download_srcs:
        report.repositories += checkout_core(shell, cfg, settings, srcs)

    for package in cfg.sorted_packages:
        desc = describe_package(package, cfg, settings)
        checkout_package(shell, desc, srcs)
        report.repositories.append(desc.name)

    ctx = HookContext(engine=shell.engine, env=dict(shell.env), srcs_dir=srcs, settings=settings)
    report.hooks = run_hooks(cfg.packages, ctx)
    return report
