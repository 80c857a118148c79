"""Determine the host OS identifier used to pick UPS binary flavours."""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Mapping, Optional

import structlog

from otsdaq_installer.config import Settings
from otsdaq_installer.engines import ExecutionEngine
from otsdaq_installer.errors import PlatformDetectionError
from otsdaq_installer.tools import GetDirectoryName, GitClone

log = structlog.get_logger()


def override_path(products_dir: Path, hostname: Optional[str] = None) -> Path:
    """Return ``<products>/ups_OVERRIDE.<hostname>``."""
    return products_dir / f"ups_OVERRIDE.{hostname or socket.gethostname()}"


def write_legacy_override(
    os_id: str,
    products_dir: Path,
    settings: Settings,
    *,
    hostname: Optional[str] = None,
) -> Optional[Path]:
    """Write the UPS flavour override when *os_id* is the legacy platform.

    Returns:
        Path of the override file, or ``None`` when no override is needed.
    """
    if os_id != settings.platform.legacy_os:
        return None
    path = override_path(products_dir, hostname)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.platform.legacy_override + "\n")
    log.info("platform.override", os=os_id, path=str(path))
    return path


def detect_os(
    engine: ExecutionEngine,
    download_dir: Path,
    remote_url: str,
    env: Optional[Mapping[str, str]] = None,
) -> str:
    """Clone the support utilities and ask them for the OS identifier.

    Args:
        engine: Engine running ``git`` and ``get-directory-name``.
        download_dir: Directory receiving the ``cetpkgsupport`` clone.
        remote_url: URL of the support repository.
        env: Environment for the child processes.

    Raises:
        PlatformDetectionError: When the helper prints nothing.
    """
    support_dir = download_dir / Path(remote_url.rstrip("/")).name
    download_dir.mkdir(parents=True, exist_ok=True)
    if not support_dir.exists():
        GitClone(remote_url, support_dir).execute(engine, env)

    result = GetDirectoryName(support_dir).execute(engine, env)
    os_id = (result.stdout or "").strip()
    if not os_id:
        raise PlatformDetectionError("get-directory-name did not report an OS identifier")
    log.info("platform.detected", os=os_id)
    return os_id
