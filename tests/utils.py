"""Test helpers: a recording engine and an in-memory fetcher."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

import requests

from otsdaq_installer.engines import ExecutionEngine, Policy

PRODUCT_DEPS = """\
# The parent line must be the first non-comment line in the file.
parent          otsdaq_demo       v2_02_00
defaultqual     e15:s64

fcldir -

product          version
otsdaq           v2_02_01
otsdaq_utilities v2_02_02
cetbuildtools    v5_14_03   -   only_for_build
end_product_list
"""

MASTER_DEPS = """\
parent          otsdaq_demo       v2_02_00
defaultqual     e14:s50
otsdaq           develop
otsdaq_utilities develop
"""


@dataclass
class Call:
    args: List[str]
    cwd: Optional[Path]
    env: Dict[str, str]
    policy: Policy
    capture: bool

    @property
    def line(self) -> str:
        return " ".join(self.args)


class RecordingEngine(ExecutionEngine):
    """Record every command instead of running it.

    Args:
        os_id: What ``get-directory-name os`` prints.
        fail: Substrings; a command whose joined argv contains one exits 1.
        extra_env: Variables every ``bash`` activation adds to the environment.
    """

    def __init__(
        self,
        *,
        os_id: str = "slf7",
        fail: Sequence[str] = (),
        extra_env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.calls: List[Call] = []
        self.os_id = os_id
        self.fail = list(fail)
        self.extra_env = dict(extra_env or {})

    def run(self, args, *, cwd=None, env=None, policy=Policy.FATAL, capture=False):
        cmd = [str(a) for a in args]
        call = Call(cmd, cwd, dict(env or {}), policy, capture)
        self.calls.append(call)
        rc = 1 if any(f in call.line for f in self.fail) else 0

        stdout = None
        if capture:
            if cmd[0] == "bash":
                merged = {**call.env, **self.extra_env}
                stdout = "".join(f"{k}={v}\0" for k, v in merged.items())
            elif cmd[0].endswith("get-directory-name"):
                stdout = f"{self.os_id}\n"
            else:
                stdout = ""

        if rc and policy is Policy.FATAL:
            raise subprocess.CalledProcessError(rc, cmd, output=stdout)
        return subprocess.CompletedProcess(cmd, rc, stdout=stdout)

    # ------------------------------------------------------------------ #
    def lines(self, prefix: str = "") -> List[str]:
        return [c.line for c in self.calls if c.line.startswith(prefix)]

    def find(self, needle: str) -> List[Call]:
        return [c for c in self.calls if needle in c.line]

    def bash_bodies(self) -> List[str]:
        """Return the activation bodies of the recorded ``bash -c`` calls."""
        return [
            c.args[2].split("\n} 1>&2")[0].removeprefix("{\n")
            for c in self.calls
            if c.args[0] == "bash"
        ]


@dataclass
class FakeFetcher:
    """Serve ``product_deps`` from memory and fake the pullProducts download."""

    documents: Dict[str, str] = field(default_factory=dict)
    fetched: List[str] = field(default_factory=list)
    downloaded: List[str] = field(default_factory=list)

    def fetch_text(self, url: str) -> str:
        self.fetched.append(url)
        if url not in self.documents:
            raise requests.HTTPError(f"404 Client Error: Not Found for url: {url}")
        return self.documents[url]

    def download(self, url: str, dest: Path) -> Path:
        self.downloaded.append(url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text("#!/bin/sh\nexit 0\n")
        dest.chmod(0o644)
        return dest


def deps_fetcher(settings, *, tag: str = "develop") -> FakeFetcher:
    """Fetcher serving ``PRODUCT_DEPS`` at *tag* and at the pinned demo version."""
    return FakeFetcher(
        documents={
            settings.product_deps_url(tag): PRODUCT_DEPS,
            settings.product_deps_url("master"): MASTER_DEPS,
            settings.product_deps_url("v2_02_00"): PRODUCT_DEPS,
        }
    )
