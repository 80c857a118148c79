"""
Capture environment changes made by sourced shell scripts.

UPS and ``mrb`` configure a session by *sourcing* bash scripts and calling
the ``setup`` shell function. A Python process cannot source anything, so
each activation runs in a throw-away ``bash`` whose final environment is
dumped with ``env -0`` and becomes the environment of every later command.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Dict, Mapping, Optional

import structlog

from otsdaq_installer.engines import ExecutionEngine, Policy

log = structlog.get_logger()

# Variables bash sets for itself; carrying them over would be misleading.
_SHELL_PRIVATE = {"_", "SHLVL", "PWD", "OLDPWD"}


def parse_env_dump(dump: str) -> Dict[str, str]:
    """Parse NUL-separated ``env -0`` output into a mapping."""
    env: Dict[str, str] = {}
    for entry in dump.split("\0"):
        if not entry or "=" not in entry:
            continue
        key, value = entry.split("=", 1)
        if key in _SHELL_PRIVATE:
            continue
        env[key] = value
    return env


def append_path(current: Optional[str], extra: str) -> str:
    """Append *extra* to a colon-separated path, skipping empty segments."""
    return ":".join(p for p in (current or "").split(":") + [extra] if p)


class ShellEnvironment:
    """Environment shared by the external commands of one installation.

    Attributes:
        env: Current environment mapping passed to every child process.
        ups_setup: Script defining the UPS ``setup`` function, once sourced.
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        env: Optional[Mapping[str, str]] = None,
        *,
        cwd: Optional[Path] = None,
    ) -> None:
        self.engine = engine
        self.env: Dict[str, str] = dict(os.environ if env is None else env)
        self.cwd = cwd
        self.ups_setup: Optional[Path] = None

    # ------------------------------------------------------------------ #
    def set(self, key: str, value: str) -> None:
        self.env[key] = value

    def _capture(self, body: str, policy: Policy) -> bool:
        """Run *body* in bash and adopt the resulting environment.

        Output of *body* is redirected to stderr so stdout carries only the
        ``env -0`` dump. The environment is adopted even when *body* fails
        under :attr:`Policy.BEST_EFFORT`.

        Returns:
            ``True`` when *body* exited with status 0.
        """
        script = f"{{\n{body}\n}} 1>&2\nstatus=$?\nenv -0\nexit $status\n"
        result = self.engine.run(
            ["bash", "-c", script],
            cwd=self.cwd,
            env=self.env,
            policy=policy,
            capture=True,
        )
        if result.stdout:
            self.env = parse_env_dump(result.stdout)
        return result.returncode == 0

    def _ups_preamble(self) -> str:
        if self.ups_setup is None:
            return ""
        return f"source {shlex.quote(str(self.ups_setup))}\n"

    # ------------------------------------------------------------------ #
    def source(self, script: str | Path, *, policy: Policy = Policy.BEST_EFFORT) -> bool:
        """Source *script* (a path or a name looked up on ``PATH``)."""
        log.info("shell.source", script=str(script), policy=policy.value)
        body = self._ups_preamble() + f"source {shlex.quote(str(script))}"
        return self._capture(body, policy)

    def source_ups(self, script: Path, *, policy: Policy = Policy.BEST_EFFORT) -> bool:
        """Source the UPS products setup and remember it for :meth:`setup`."""
        log.info("shell.source_ups", script=str(script), policy=policy.value)
        ok = self._capture(f"source {shlex.quote(str(script))}", policy)
        self.ups_setup = script
        return ok

    def setup(
        self,
        product: str,
        version: Optional[str] = None,
        *,
        policy: Policy = Policy.BEST_EFFORT,
    ) -> bool:
        """Run ``setup <product> [version]`` with the UPS function defined."""
        words = ["setup", product] + ([version] if version else [])
        log.info("shell.setup", product=product, version=version, policy=policy.value)
        body = self._ups_preamble() + " ".join(shlex.quote(w) for w in words)
        return self._capture(body, policy)
