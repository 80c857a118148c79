"""Tool wrappers for plain ``git`` invocations."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .base import Tool, ToolSpec


@dataclass
class GitClone(Tool):
    """Clone *url* into *dest* (run from ``dest.parent``)."""

    url: str
    dest: Path

    def build_spec(self) -> ToolSpec:  # type: ignore[override]
        return ToolSpec(["git", "clone", self.url, self.dest.name], cwd=self.dest.parent)


@dataclass
class GitCommand(Tool):
    """Any other ``git <subcommand> ...`` run inside a working copy."""

    workdir: Path
    args: Sequence[str] = field(default_factory=list)

    def build_spec(self) -> ToolSpec:  # type: ignore[override]
        if not self.args:
            raise ValueError("git subcommand must be specified")
        return ToolSpec(["git", *self.args], cwd=self.workdir)
