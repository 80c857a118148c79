"""Activate the UPS products area and the tools the build needs.

Every activation here is best-effort: UPS prints warnings and returns
non-zero for conditions that do not matter to this workflow, so failures
are logged and the installation carries on.
"""

from __future__ import annotations

import structlog

from otsdaq_installer.config import Settings
from otsdaq_installer.engines import Policy
from otsdaq_installer.models import InstallConfig
from otsdaq_installer.utils.shellenv import ShellEnvironment, append_path

log = structlog.get_logger()

PRODUCTS_VAR = "PRODUCTS"


def inherit_products_path(shell: ShellEnvironment, cfg: InstallConfig) -> None:
    """Append an explicit ``-d`` products directory to ``$PRODUCTS``."""
    if cfg.products_dir_given:
        shell.set(PRODUCTS_VAR, append_path(shell.env.get(PRODUCTS_VAR), str(cfg.products_dir)))


def activate_environment(shell: ShellEnvironment, cfg: InstallConfig, settings: Settings) -> list[str]:
    """Source ``<products>/setup`` and ``setup`` each configured product.

    Returns:
        Names of the activations that failed (and were ignored).
    """
    failed: list[str] = []
    if not shell.source_ups(cfg.products_dir / "setup", policy=Policy.BEST_EFFORT):
        failed.append("products")
    for product in settings.environment.products:
        if not shell.setup(product.name, product.version, policy=Policy.BEST_EFFORT):
            failed.append(product.name)
    if failed:
        log.warning("environment.partial", failed=failed)
    else:
        log.info("environment.ready")
    return failed
