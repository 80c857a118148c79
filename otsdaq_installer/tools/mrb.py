"""Tool wrappers for the ``mrb`` multi-repository build tool."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from otsdaq_installer.engines import Policy

from .base import Tool, ToolSpec


@dataclass
class MrbNewDev(Tool):
    """``mrb newDev``: create a development area in *workdir*."""

    version: str
    qualifiers: str
    workdir: Path

    def build_spec(self) -> ToolSpec:  # type: ignore[override]
        args = ["mrb", "newDev", "-f", "-v", self.version, "-q", self.qualifiers]
        return ToolSpec(args, cwd=self.workdir)


@dataclass
class MrbGitCheckout(Tool):
    """``mrb gitCheckout``: clone *url* into ``srcs/<name>``.

    When *branch* is given the checkout also tracks that branch.
    """

    name: str
    url: str
    workdir: Path
    branch: str | None = None
    policy: Policy = Policy.FATAL

    def build_spec(self) -> ToolSpec:  # type: ignore[override]
        args = ["mrb", "gitCheckout"]
        if self.branch:
            args += ["-b", self.branch]
        args += ["-d", self.name, self.url]
        return ToolSpec(args, cwd=self.workdir, policy=self.policy)


@dataclass
class MrbBuild(Tool):
    """``mrb build -j<jobs>`` across the whole development area."""

    jobs: int
    workdir: Path

    def build_spec(self) -> ToolSpec:  # type: ignore[override]
        if self.jobs < 1:
            raise ValueError("jobs must be a positive integer")
        return ToolSpec(["mrb", "build", f"-j{self.jobs}"], cwd=self.workdir)
