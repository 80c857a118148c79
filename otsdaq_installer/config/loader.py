"""
YAML settings loader.

Search precedence (first match wins)
1. ``$OTSDAQ_INSTALL_CONFIG``.
2. ``<base_dir>/otsdaq-install.yaml`` – site-local override.
3. The packaged default shipped inside the wheel.

All resolution logic is concentrated here so the rest of *otsdaq_installer*
treats settings as an already-validated object.
"""

from __future__ import annotations

import os
from importlib.resources import as_file, files
from pathlib import Path
from typing import Optional

import structlog
import yaml
from pydantic import ValidationError

from otsdaq_installer.errors import ConfigError

from .schema import Settings

log = structlog.get_logger()

LOCAL_NAME = "otsdaq-install.yaml"
ENV_VAR = "OTSDAQ_INSTALL_CONFIG"

try:
    _DEFAULTS = files("otsdaq_installer.resources") / "defaults.yaml"
except ModuleNotFoundError:
    _DEFAULTS = Path(__file__).resolve().parent.parent / "resources" / "defaults.yaml"


def _first_existing(*candidates: Optional[Path]) -> Optional[Path]:
    """Return the first path in *candidates* that exists on disk."""
    for p in candidates:
        if p is not None and p.exists():
            return p
    return None


def _load_yaml(path: Path) -> dict:
    """Read a YAML mapping; an empty file yields an empty dict."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read settings {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"settings {path} must contain a mapping")
    return data


def resolve_settings_path(base_dir: Optional[Path] = None) -> Path:
    """Return the settings file that :func:`load_settings` would read."""
    env = os.environ.get(ENV_VAR)
    explicit = Path(env).expanduser() if env else None
    if explicit is not None and not explicit.exists():
        raise ConfigError(f"{ENV_VAR} points at a missing file: {explicit}")
    local = Path(base_dir) / LOCAL_NAME if base_dir is not None else None
    resolved = _first_existing(explicit, local)
    if resolved is None:
        with as_file(_DEFAULTS) as p:
            resolved = p
    return resolved


def load_settings(base_dir: Optional[Path] = None) -> Settings:
    """Load and validate the site settings.

    Args:
        base_dir: Directory searched for ``otsdaq-install.yaml``.

    Returns:
        Validated :class:`Settings`.

    Raises:
        ConfigError: If the file is unreadable or fails validation.
    """
    path = resolve_settings_path(base_dir)
    log.debug("settings.load", path=str(path))
    try:
        return Settings.model_validate(_load_yaml(path))
    except ValidationError as exc:
        raise ConfigError(f"invalid settings in {path}:\n{exc}") from exc
