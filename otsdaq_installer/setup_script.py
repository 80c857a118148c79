"""
Generate ``setup_ots.sh``, the script users source in later sessions.

The script is described by :class:`SetupScriptModel`, a plain record of
named fields, and rendered from the ``setup_ots.sh.j2`` template. Rendering
is a pure function of the model so the output can be checked without
executing it.

Public API
----------
SetupScriptModel.from_install()
    Derive every field from the run configuration and resolved versions.
render_setup_script()
    Return the script text.
write_setup_script()
    Write the script and mark it executable.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Tuple

import jinja2
import structlog

from otsdaq_installer import __version__
from otsdaq_installer.config import Settings
from otsdaq_installer.config.schema import Product
from otsdaq_installer.models import InstallConfig, ResolvedVersions
from otsdaq_installer.products import make_executable

log = structlog.get_logger()

TEMPLATE_NAME = "setup_ots.sh.j2"

# --------------------------------------------------------------------------- #
# Template loading
# --------------------------------------------------------------------------- #
try:
    from importlib.resources import files

    _TEMPLATE_SRC: str = (files("otsdaq_installer.templates") / TEMPLATE_NAME).read_text()
except (ModuleNotFoundError, FileNotFoundError):
    _TEMPLATE_SRC = (Path(__file__).with_name("templates") / TEMPLATE_NAME).read_text()


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["sh"] = lambda value: shlex.quote(str(value))
    return env


# --------------------------------------------------------------------------- #
# Model
# --------------------------------------------------------------------------- #
@dataclass
class SetupScriptModel:
    """Every value interpolated into ``setup_ots.sh``.

    Attributes:
        script_path: Where the script is written.
        products_dir: UPS products directory sourced first.
        local_products_dir: ``localProducts_*`` area created by ``mrb newDev``.
        products: UPS products to ``setup`` (name, optional version).
        demo_version: Resolved ``otsdaq_demo`` version.
        e_qualifier: Compiler qualifier.
        s_qualifier: Art-suite qualifier.
        build_type: ``prof`` or ``debug``.
        jobs: Parallel build jobs (``CETPKG_J``).
        library_dirs: ``(variable, path)`` pairs for the package libraries.
        user_data_dir: Value of ``USER_DATA``.
        database_uri: Value of ``ARTDAQ_DATABASE_URI``.
        output_data_dir: Value of ``OTSDAQ_DATA``.
        aliases: ``(name, command)`` pairs defined as shell aliases.
    """

    script_path: Path
    products_dir: Path
    local_products_dir: Path
    products: List[Product]
    demo_version: str
    e_qualifier: str
    s_qualifier: str
    build_type: str
    jobs: int
    library_dirs: List[Tuple[str, str]]
    user_data_dir: Path
    database_uri: str
    output_data_dir: Path
    aliases: List[Tuple[str, str]] = field(default_factory=list)
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))
    installer_version: str = __version__

    @property
    def script_name(self) -> str:
        return self.script_path.name

    @classmethod
    def from_install(
        cls,
        cfg: InstallConfig,
        versions: ResolvedVersions,
        settings: Settings,
        *,
        srcs_dir: Path,
        jobs: int,
    ) -> "SetupScriptModel":
        """Derive the model from the values captured during installation."""
        demo = srcs_dir / settings.packages["demo"].name
        return cls(
            script_path=cfg.base_dir / settings.files.setup_script,
            products_dir=cfg.products_dir,
            local_products_dir=cfg.base_dir
            / versions.local_products_name(settings.mrb_project, cfg.build_type),
            products=settings.environment.products,
            demo_version=versions.demo_version,
            e_qualifier=versions.e_qualifier,
            s_qualifier=versions.s_qualifier,
            build_type=cfg.build_type,
            jobs=jobs,
            library_dirs=[
                ("OTSDAQ_DEMO_LIB", "${MRB_BUILDDIR}/otsdaq_demo/lib"),
                ("OTSDAQ_LIB", "${MRB_BUILDDIR}/otsdaq/lib"),
                ("OTSDAQ_UTILITIES_LIB", "${MRB_BUILDDIR}/otsdaq_utilities/lib"),
            ],
            user_data_dir=demo / "NoGitData",
            database_uri=f"filesystemdb://{demo / 'NoGitDatabases' / 'filesystemdb' / 'test_db'}",
            output_data_dir=cfg.base_dir / "OutputData",
            aliases=[
                (
                    "rawEventDump",
                    "art -c ${MRB_SOURCE}/otsdaq/artdaq-ots/ArtModules/fcl/rawEventDump.fcl",
                ),
                ("kx", "ots -k"),
            ],
        )


# --------------------------------------------------------------------------- #
# Rendering
# --------------------------------------------------------------------------- #
def render_setup_script(model: SetupScriptModel) -> str:
    """Return the text of ``setup_ots.sh`` for *model*."""
    tpl = _environment().from_string(_TEMPLATE_SRC)
    return tpl.render(
        script_name=model.script_name,
        script_path=model.script_path,
        installer_version=model.installer_version,
        generated_at=model.generated_at,
        products_dir=model.products_dir,
        local_products_dir=model.local_products_dir,
        products=model.products,
        demo_version=model.demo_version,
        e_qualifier=model.e_qualifier,
        s_qualifier=model.s_qualifier,
        build_type=model.build_type,
        jobs=model.jobs,
        library_dirs=model.library_dirs,
        user_data_dir=model.user_data_dir,
        database_uri=model.database_uri,
        output_data_dir=model.output_data_dir,
        aliases=model.aliases,
    )


def write_setup_script(model: SetupScriptModel) -> Path:
    """Write the rendered script to ``model.script_path`` and make it executable."""
    path = model.script_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_setup_script(model))
    make_executable(path)
    log.info("setup_script.written", path=str(path))
    return path
