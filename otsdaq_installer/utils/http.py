"""
Light-weight HTTP helpers used to retrieve ``product_deps`` and
``pullProducts``.

Only the mechanics of *sending* a request belong here. Both helpers raise
:class:`requests.HTTPError` for non-2xx answers and let network errors
surface unchanged; the CLI turns either into the fail-fast exit.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Protocol

import requests
import structlog

log = structlog.get_logger()

DEFAULT_TIMEOUT = 60.0


def _default_timeout() -> Optional[float]:
    """Return the timeout configured via ``OTSDAQ_HTTP_TIMEOUT`` or ``DEFAULT_TIMEOUT``."""
    env = os.getenv("OTSDAQ_HTTP_TIMEOUT")
    if not env:
        return DEFAULT_TIMEOUT
    try:
        return float(env)
    except ValueError:
        return DEFAULT_TIMEOUT


class Fetcher(Protocol):
    """Anything able to retrieve remote documents."""

    def fetch_text(self, url: str) -> str: ...

    def download(self, url: str, dest: Path) -> Path: ...


class HttpFetcher:
    """Fetch documents over HTTP(S) with :mod:`requests`."""

    def __init__(self, *, timeout: Optional[float] = None) -> None:
        self.timeout = _default_timeout() if timeout is None else timeout

    def fetch_text(self, url: str) -> str:
        """GET *url* and return the decoded body.

        Raises:
            requests.HTTPError: If the HTTP status is not 2xx.
        """
        log.info("http.get", url=url)
        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.text

    def download(self, url: str, dest: Path) -> Path:
        """Stream *url* into *dest*, replacing any previous copy.

        Returns:
            The destination path.
        """
        log.info("http.download", url=url, dest=str(dest))
        dest.parent.mkdir(parents=True, exist_ok=True)
        with requests.get(url, stream=True, timeout=self.timeout) as resp:
            resp.raise_for_status()
            with dest.open("wb") as fh:
                for chunk in resp.iter_content(chunk_size=65536):
                    fh.write(chunk)
        return dest
