"""Tool wrappers for the UPS helpers: ``pullProducts`` and ``get-directory-name``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .base import Tool, ToolSpec


@dataclass
class PullProducts(Tool):
    """Run ``pullProducts`` with its fixed positional-argument contract:

    ``pullProducts <products dir> <os> <bundle> <qualifier pair> <build type>``
    """

    script: Path
    products_dir: Path
    os_id: str
    bundle: str
    qualifier_pair: str
    build_type: str

    def build_spec(self) -> ToolSpec:  # type: ignore[override]
        args = [
            f"./{self.script.name}",
            str(self.products_dir),
            self.os_id,
            self.bundle,
            self.qualifier_pair,
            self.build_type,
        ]
        return ToolSpec(args, cwd=self.script.parent)


@dataclass
class GetDirectoryName(Tool):
    """``cetpkgsupport/bin/get-directory-name os``; stdout is the OS id."""

    support_dir: Path

    def build_spec(self) -> ToolSpec:  # type: ignore[override]
        exe = self.support_dir / "bin" / "get-directory-name"
        return ToolSpec([str(exe), "os"], capture=True)
