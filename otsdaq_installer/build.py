"""Seed the user-data area and build the checked-out workspace."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import List, Optional

import structlog

from otsdaq_installer.engines import Policy
from otsdaq_installer.tools import MrbBuild
from otsdaq_installer.utils.shellenv import ShellEnvironment

log = structlog.get_logger()

# (source inside the demo checkout, untracked copy next to it)
USER_DATA_SEEDS = (("Data", "NoGitData"), ("databases", "NoGitDatabases"))


def seed_user_data(demo_dir: Path) -> List[Path]:
    """Copy the demo's tracked data into untracked working copies.

    Existing copies are left untouched so user edits survive a re-install.

    Returns:
        The directories that were created.
    """
    created: List[Path] = []
    for src_name, dest_name in USER_DATA_SEEDS:
        src, dest = demo_dir / src_name, demo_dir / dest_name
        if not src.is_dir() or dest.exists():
            continue
        shutil.copytree(src, dest)
        log.info("userdata.seeded", src=str(src), dest=str(dest))
        created.append(dest)
    return created


def build_jobs(cpu_count: Optional[int] = None) -> int:
    """Parallelism hint for ``mrb build``: one job per processor."""
    return max(1, cpu_count if cpu_count is not None else (os.cpu_count() or 1))


def build_workspace(shell: ShellEnvironment, workdir: Path, *, jobs: Optional[int] = None) -> int:
    """Re-source ``mrbSetEnv`` and run ``mrb build``.

    Returns:
        The job count passed to ``mrb``.

    Raises:
        subprocess.CalledProcessError: The build failed.
    """
    shell.source("mrbSetEnv", policy=Policy.BEST_EFFORT)
    jobs = build_jobs(jobs)
    log.info("build.start", jobs=jobs, workdir=str(workdir))
    MrbBuild(jobs=jobs, workdir=workdir).execute(shell.engine, shell.env)
    return jobs
