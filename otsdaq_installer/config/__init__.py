"""
Configuration package façade.

* :func:`load_settings` – locate, parse and validate the YAML site settings.
* :class:`Settings` – Pydantic model representing the validated settings.
"""

from .loader import load_settings  # noqa: F401
from .schema import Settings  # noqa: F401

__all__: list[str] = ["load_settings", "Settings"]
