"""Package-specific fix-ups run once after every checkout has finished.

Hooks are looked up in the explicit :data:`HOOKS` registry by package id.
A hook is built from a :class:`HookContext` and exposes a single
parameterless :meth:`PostCheckoutHook.run`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Protocol

import structlog

from otsdaq_installer.config import Settings
from otsdaq_installer.engines import ExecutionEngine
from otsdaq_installer.tools import GitCommand

log = structlog.get_logger()


@dataclass
class HookContext:
    """Everything a hook may need; built after the checkouts."""

    engine: ExecutionEngine
    env: Mapping[str, str]
    srcs_dir: Path
    settings: Settings


class PostCheckoutHook(Protocol):
    def run(self) -> None: ...


class CmsOuterTrackerHook:
    """Initialise the nested Ph2_ACF module of otsdaq_cmsoutertracker."""

    package = "cmsoutertracker"

    def __init__(self, ctx: HookContext) -> None:
        self.ctx = ctx
        self.entry = ctx.settings.packages[self.package]

    def _git(self, workdir: Path, *args: str) -> None:
        GitCommand(workdir, list(args)).execute(self.ctx.engine, self.ctx.env)

    def run(self) -> None:
        workdir = self.ctx.srcs_dir / self.entry.name
        self._git(workdir, "submodule", "init")
        self._git(workdir, "submodule", "update")
        if self.entry.submodule:
            self._git(workdir / self.entry.submodule, "fetch")


HOOKS: Dict[str, Callable[[HookContext], PostCheckoutHook]] = {
    CmsOuterTrackerHook.package: CmsOuterTrackerHook,
}


def hooks_for(packages: Iterable[str]) -> List[str]:
    """Return the requested package ids that have a hook, in sorted order."""
    return sorted(p for p in set(packages) if p in HOOKS)


def run_hooks(packages: Iterable[str], ctx: HookContext) -> List[str]:
    """Run the hook of every requested package that has one.

    Returns:
        Package ids whose hook ran.

    Raises:
        subprocess.CalledProcessError: A hook command failed.
    """
    ran: List[str] = []
    for package in hooks_for(packages):
        log.info("hook.run", package=package)
        HOOKS[package](ctx).run()
        ran.append(package)
    return ran
