"""Run external commands on the local host."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Mapping, Sequence

import structlog

from ..utils.logging import OUTPUT_LOGGER
from .base import ExecutionEngine, Policy

log = structlog.get_logger()
_output = logging.getLogger(OUTPUT_LOGGER)

# Shell conventions: "command not found" and "cannot execute".
_NOT_FOUND = 127
_CANNOT_EXECUTE = 126


class LocalEngine(ExecutionEngine):
    """Launch commands with :mod:`subprocess` and mirror output into the log."""

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        policy: Policy = Policy.FATAL,
        capture: bool = False,
    ) -> subprocess.CompletedProcess:
        """Execute *args*, streaming stdout/stderr into the install log.

        With *capture* only stderr is streamed; stdout is returned to the
        caller. A missing executable is reported as exit status 127; any other
        failure to start it (permissions, missing *cwd*) as 126.
        """
        cmd = [str(a) for a in args]
        log.info("command.run", args=cmd, cwd=str(cwd) if cwd else None, policy=policy.value)

        stdout: str | None = None
        try:
            with subprocess.Popen(
                cmd,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE if capture else subprocess.STDOUT,
                text=True,
                errors="replace",
            ) as proc:
                if capture:
                    stdout, stderr = proc.communicate()
                    for line in stderr.splitlines():
                        _output.info(line)
                else:
                    assert proc.stdout is not None
                    for line in proc.stdout:
                        _output.info(line.rstrip("\n"))
                rc = proc.wait()
        except OSError as exc:
            _output.info(f"{cmd[0]}: {exc.strerror or exc}")
            missing = isinstance(exc, FileNotFoundError) and exc.filename == cmd[0]
            rc = _NOT_FOUND if missing else _CANNOT_EXECUTE

        result = subprocess.CompletedProcess(cmd, rc, stdout=stdout)
        if rc == 0:
            return result
        if policy is Policy.BEST_EFFORT:
            log.warning("command.ignored", args=cmd, returncode=rc)
            return result
        log.error("command.failed", args=cmd, returncode=rc)
        raise subprocess.CalledProcessError(rc, cmd, output=stdout)
