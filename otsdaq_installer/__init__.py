"""
otsdaq_installer package initialisation.

The module exposes the version string resolved at import-time from the
installed distribution metadata, so the CLI banner, the log file and the
generated setup script all report the same value.

Module attributes
-----------------
__version__ : str
    Semantic version derived from the installed wheel.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("otsdaq-installer")
except PackageNotFoundError:
    # Source tree without an installed wheel.
    __version__ = "0.0.0"

__all__: list[str] = ["__version__"]
