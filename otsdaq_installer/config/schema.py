"""
Pydantic models that mirror the YAML site settings consumed by
*otsdaq_installer*.

The settings hold everything that depends on where otsdaq is hosted rather
than on the command line: download locations, remote URL templates, the
repositories to check out and the tools to activate.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from otsdaq_installer.models import KNOWN_PACKAGES

# --------------------------------------------------------------------------- #
# 1.  Leaf models                                                             #
# --------------------------------------------------------------------------- #


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Urls(_Frozen):
    """Remote documents fetched over HTTP."""

    product_deps: str = Field(..., description="product_deps URL; must contain {tag}")
    pull_products: str

    @field_validator("product_deps")
    @classmethod
    def _has_tag(cls, v: str) -> str:
        if "{tag}" not in v:
            raise ValueError("product_deps URL must contain the {tag} placeholder")
        return v


class Remotes(_Frozen):
    """Repository URL templates; ``{repo}`` is replaced by the repository name."""

    anonymous: str
    authenticated: str

    @field_validator("anonymous", "authenticated")
    @classmethod
    def _has_repo(cls, v: str) -> str:
        if "{repo}" not in v:
            raise ValueError("remote template must contain the {repo} placeholder")
        return v

    def url(self, repo: str, write_mode: bool) -> str:
        """Return the authenticated URL in write mode, the anonymous one otherwise."""
        template = self.authenticated if write_mode else self.anonymous
        return template.format(repo=repo)


class PlatformSettings(_Frozen):
    support_repo: str = "cetpkgsupport"
    legacy_os: str = "u14"
    legacy_override: str = "-H Linux64bit+3.19-2.19"


class Product(_Frozen):
    name: str
    version: Optional[str] = None


class EnvironmentSettings(_Frozen):
    """UPS products activated after the products area is sourced."""

    tools: List[str] = Field(default_factory=lambda: ["mrb", "git", "gitflow"])
    runtime: Product = Product(name="nodejs", version="v4_5_0")

    @property
    def products(self) -> List[Product]:
        """Every product to ``setup``, in activation order."""
        return [Product(name=t) for t in self.tools] + [self.runtime]


class Repository(_Frozen):
    """A repository checked out below ``srcs/<name>``."""

    name: str
    repo: str


class PackageEntry(Repository):
    """Registry entry of an optional package."""

    branch: str = "develop"
    submodule: Optional[str] = None


class Files(_Frozen):
    download_dir: str = "download"
    setup_script: str = "setup_ots.sh"


# --------------------------------------------------------------------------- #
# 2.  Root model                                                              #
# --------------------------------------------------------------------------- #
class Settings(_Frozen):
    """Fully validated site settings."""

    urls: Urls
    remotes: Remotes
    platform: PlatformSettings = PlatformSettings()
    environment: EnvironmentSettings = EnvironmentSettings()
    mrb_project: str = "otsdaq_demo"
    core_branch: str = "develop"
    core_repositories: List[Repository]
    packages: Dict[str, PackageEntry]
    files: Files = Files()

    @model_validator(mode="after")
    def _every_package_registered(self):
        """Each accepted package id needs a registry entry."""
        missing = sorted(set(KNOWN_PACKAGES) - set(self.packages))
        if missing:
            raise ValueError("packages missing from settings: " + ", ".join(missing))
        return self

    def product_deps_url(self, tag: str) -> str:
        return self.urls.product_deps.format(tag=tag)
