"""Wrappers for the external tools driven by the installer."""

from .base import Tool, ToolSpec
from .git import GitClone, GitCommand
from .mrb import MrbBuild, MrbGitCheckout, MrbNewDev
from .products import GetDirectoryName, PullProducts

__all__ = [
    "Tool",
    "ToolSpec",
    "GitClone",
    "GitCommand",
    "MrbBuild",
    "MrbGitCheckout",
    "MrbNewDev",
    "GetDirectoryName",
    "PullProducts",
]
