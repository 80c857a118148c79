"""Materialise the binary otsdaq product bundle with ``pullProducts``."""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Mapping, Optional

import structlog

from otsdaq_installer.config import Settings
from otsdaq_installer.engines import ExecutionEngine
from otsdaq_installer.models import InstallConfig, ResolvedVersions
from otsdaq_installer.tools import PullProducts
from otsdaq_installer.utils.http import Fetcher

log = structlog.get_logger()

PULL_PRODUCTS = "pullProducts"


def make_executable(path: Path) -> None:
    """Add execute permission wherever read permission is granted."""
    mode = path.stat().st_mode
    path.chmod(mode | ((mode & 0o444) >> 2) | stat.S_IXUSR)


def fetch_products(
    cfg: InstallConfig,
    versions: ResolvedVersions,
    os_id: str,
    *,
    engine: ExecutionEngine,
    fetcher: Fetcher,
    settings: Settings,
    download_dir: Path,
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    """Download ``pullProducts`` and run it against the products directory.

    Returns:
        The products directory.
    """
    cfg.products_dir.mkdir(parents=True, exist_ok=True)
    script = fetcher.download(settings.urls.pull_products, download_dir / PULL_PRODUCTS)
    make_executable(script)

    tool = PullProducts(
        script=script,
        products_dir=cfg.products_dir,
        os_id=os_id,
        bundle=versions.bundle,
        qualifier_pair=versions.qualifier_pair,
        build_type=cfg.build_type,
    )
    log.info(
        "products.pull",
        bundle=versions.bundle,
        os=os_id,
        qualifiers=versions.qualifier_pair,
        build=cfg.build_type,
    )
    tool.execute(engine, env)
    return cfg.products_dir
