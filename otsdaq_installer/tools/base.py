"""Base classes for external tool wrappers.

A wrapper turns its fields into a :class:`ToolSpec` (argv, working
directory, failure policy). :meth:`Tool.execute` hands that to an engine
together with the shell environment of the current installation.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from otsdaq_installer.engines import ExecutionEngine, Policy


@dataclass
class ToolSpec:
    """One command line and how to run it.

    Attributes:
        args: Full argv, program first.
        cwd: Working directory; the engine's default when ``None``.
        policy: Whether a non-zero exit aborts the installation.
        capture: Return stdout to the caller instead of logging it.
    """

    args: Sequence[str]
    cwd: Path | None = None
    policy: Policy = Policy.FATAL
    capture: bool = False


class Tool:
    """Wrapper around one invocation of an external program."""

    def execute(
        self,
        engine: ExecutionEngine,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess:
        spec = self.build_spec()
        return engine.run(
            spec.args,
            cwd=spec.cwd,
            env=env,
            policy=spec.policy,
            capture=spec.capture,
        )

    def build_spec(self) -> ToolSpec:
        """Describe the command; subclasses must override."""
        raise NotImplementedError
