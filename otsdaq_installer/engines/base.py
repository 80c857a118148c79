"""Execution back-ends for running external commands."""

from __future__ import annotations

import enum
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Sequence


class Policy(enum.Enum):
    """How a failing external command affects the installation.

    ``FATAL`` failures abort the run; ``BEST_EFFORT`` failures are logged
    and the run continues.
    """

    FATAL = "fatal"
    BEST_EFFORT = "best-effort"


class ExecutionEngine(ABC):
    """Abstract execution engine.

    Every external program the installer touches (``git``, ``mrb``,
    ``pullProducts``, ``bash``) is launched through an engine so that tests
    can record the calls instead of running them.
    """

    @abstractmethod
    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        policy: Policy = Policy.FATAL,
        capture: bool = False,
    ) -> subprocess.CompletedProcess:
        """Run *args* and wait for it to finish.

        Args:
            args: Command vector.
            cwd: Working directory; defaults to the current directory.
            env: Complete environment for the child process.
            policy: Whether a non-zero exit aborts the installation.
            capture: Return stdout in the result instead of logging it.

        Returns:
            Completed process with ``stdout`` populated when *capture* is set.

        Raises:
            subprocess.CalledProcessError: If the command fails and *policy*
                is :attr:`Policy.FATAL`.
        """
        raise NotImplementedError
