"""
Core data-model declarations for *otsdaq_installer*.

The module provides:

* **`InstallConfig`** – the immutable run configuration built once from the
  command line and passed explicitly to every installation step.
* **`ResolvedVersions`** – versions and qualifiers extracted from
  ``product_deps``.
* **`PackageDescriptor`** – branch, canonical name and remote of one
  optional package, created on demand by the checkout step.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, FrozenSet, Iterable

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# --------------------------------------------------------------------------- #
# Accepted values
# --------------------------------------------------------------------------- #
BUILD_TYPES: tuple[str, ...] = ("prof", "debug")
KNOWN_PACKAGES: tuple[str, ...] = ("demo", "cmsoutertracker")
PACKAGE_PREFIX = "otsdaq_"

DEFAULT_BUILD_TYPE = "prof"
DEFAULT_PACKAGES = "demo"
DEFAULT_TAG = "master"
PRODUCTS_DIRNAME = "products"


def normalise_packages(value: str | Iterable[str]) -> FrozenSet[str]:
    """Turn ``"demo,otsdaq_cmsoutertracker"`` into ``{"demo", "cmsoutertracker"}``.

    Items are stripped of whitespace and of the ``otsdaq_`` prefix; empty
    items are skipped.

    Raises:
        ValueError: If an item is not one of :data:`KNOWN_PACKAGES`.
    """
    items = value.split(",") if isinstance(value, str) else list(value)
    names: set[str] = set()
    for raw in items:
        name = str(raw).strip()
        if name.startswith(PACKAGE_PREFIX):
            name = name[len(PACKAGE_PREFIX):]
        if not name:
            continue
        if name not in KNOWN_PACKAGES:
            raise ValueError(
                f"invalid package {str(raw).strip()!r}; accepted: {', '.join(KNOWN_PACKAGES)}"
            )
        names.add(name)
    return frozenset(names)


# --------------------------------------------------------------------------- #
# Run configuration
# --------------------------------------------------------------------------- #
class InstallConfig(BaseModel):
    """Validated, immutable view of the command-line options.

    Attributes:
        base_dir: Directory the installer runs in; everything is created
            below it unless ``products_dir`` points elsewhere.
        build_type: ``prof`` or ``debug``.
        products_dir: Absolute UPS products directory.
        products_dir_given: ``True`` when ``-d`` was supplied; the directory
            is then appended to the inherited ``PRODUCTS`` path.
        packages: Requested optional packages.
        download_srcs: Also check out the core otsdaq repositories.
        tag: Revision of ``product_deps`` to resolve.
        write_mode: Use the authenticated (push-capable) remotes.
        verbose: INFO-level console output.
    """

    model_config = ConfigDict(frozen=True)

    base_dir: Path
    build_type: str = DEFAULT_BUILD_TYPE
    products_dir: Path
    products_dir_given: bool = False
    packages: FrozenSet[str] = frozenset({DEFAULT_PACKAGES})
    download_srcs: bool = False
    tag: str = DEFAULT_TAG
    write_mode: bool = False
    verbose: bool = False

    @model_validator(mode="before")
    @classmethod
    def _default_products_dir(cls, values: Any):
        """Fill in ``<base>/products`` and anchor relative paths at *base_dir*."""
        if not isinstance(values, dict):
            return values
        base = Path(values.get("base_dir") or Path.cwd()).expanduser().resolve()
        values["base_dir"] = base
        products = values.get("products_dir")
        if products is None:
            values["products_dir"] = base / PRODUCTS_DIRNAME
        else:
            products = Path(products).expanduser()
            values["products_dir"] = products if products.is_absolute() else base / products
        return values

    @field_validator("build_type", mode="before")
    @classmethod
    def _known_build_type(cls, v: Any) -> str:
        if v not in BUILD_TYPES:
            raise ValueError(f"invalid build type {v!r}; accepted: {', '.join(BUILD_TYPES)}")
        return v

    @field_validator("packages", mode="before")
    @classmethod
    def _known_packages(cls, v: Any) -> FrozenSet[str]:
        return normalise_packages(v)

    @classmethod
    def from_options(
        cls,
        *,
        base_dir: Path,
        build_type: str = DEFAULT_BUILD_TYPE,
        products_dir: Path | None = None,
        packages: str = DEFAULT_PACKAGES,
        download_srcs: bool = False,
        tag: str = DEFAULT_TAG,
        write_mode: bool = False,
        verbose: bool = False,
    ) -> "InstallConfig":
        """Build the configuration from raw CLI values.

        Raises:
            pydantic.ValidationError: On an unknown build type or package.
        """
        return cls(
            base_dir=base_dir,
            build_type=build_type,
            products_dir=products_dir,
            products_dir_given=products_dir is not None,
            packages=packages,
            download_srcs=download_srcs,
            tag=tag,
            write_mode=write_mode,
            verbose=verbose,
        )

    @property
    def sorted_packages(self) -> list[str]:
        """Requested packages in a stable order for the checkout loop."""
        return sorted(self.packages)


# --------------------------------------------------------------------------- #
# Version metadata
# --------------------------------------------------------------------------- #
@dataclass(frozen=True, slots=True)
class ResolvedVersions:
    """Versions and qualifiers extracted from ``product_deps``.

    Attributes:
        tag: Revision of ``product_deps`` the fields were read from (the
            pinned demo version when the requested tag was ``master``).
        demo_version: ``otsdaq_demo`` version, e.g. ``v2_02_00``.
        otsdaq_version: ``otsdaq`` version used to name the product bundle.
        utilities_version: ``otsdaq_utilities`` version.
        default_qualifier: Combined qualifier such as ``e15:s64``.
        e_qualifier: Compiler qualifier (``e15``).
        s_qualifier: Art-suite qualifier (``s64``).
    """

    tag: str
    demo_version: str
    otsdaq_version: str
    utilities_version: str
    default_qualifier: str
    e_qualifier: str
    s_qualifier: str

    @property
    def qualifier_pair(self) -> str:
        """Qualifier argument expected by ``pullProducts`` (``s64-e15``)."""
        return f"{self.s_qualifier}-{self.e_qualifier}"

    @property
    def bundle(self) -> str:
        """Bundle name passed to ``pullProducts`` (``otsdaq-v2_02_00``)."""
        return f"otsdaq-{self.otsdaq_version}"

    def mrb_qualifiers(self, build_type: str) -> str:
        """Qualifier list for ``mrb newDev -q`` (``e15:s64:prof``)."""
        return f"{self.e_qualifier}:{self.s_qualifier}:{build_type}"

    def local_products_name(self, project: str, build_type: str) -> str:
        """Directory created by ``mrb newDev`` for *project*."""
        return (
            f"localProducts_{project}_{self.demo_version}_"
            f"{self.e_qualifier}_{self.s_qualifier}_{build_type}"
        )


@dataclass(frozen=True, slots=True)
class PackageDescriptor:
    """Checkout coordinates of one requested package."""

    package: str
    branch: str
    name: str
    remote: str
