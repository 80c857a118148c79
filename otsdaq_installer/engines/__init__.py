"""Execution engines."""

from .base import ExecutionEngine, Policy
from .local import LocalEngine

__all__ = ["ExecutionEngine", "Policy", "LocalEngine"]
