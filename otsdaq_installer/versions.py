"""
Resolve otsdaq versions and qualifiers from the otsdaq-demo ``product_deps``.

``product_deps`` is a whitespace-delimited text file. The lines of interest
look like::

    parent          otsdaq_demo       v2_02_00
    defaultqual     e15:s64
    otsdaq          v2_02_00          -
    otsdaq_utilities v2_02_00         -

``master`` is a moving reference: when it is requested, the first document
only supplies the demo version, and the file is fetched again at that
pinned revision so every reported value is reproducible.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import structlog

from otsdaq_installer.config import Settings
from otsdaq_installer.errors import QualifierError, VersionResolutionError
from otsdaq_installer.models import ResolvedVersions
from otsdaq_installer.utils.http import Fetcher

log = structlog.get_logger()

MOVING_TAG = "master"
QUALIFIER_SEPARATOR = ":"

# field name -> (leading tokens, index of the value token)
_FIELDS: Dict[str, tuple[tuple[str, ...], int]] = {
    "demo_version": (("parent", "otsdaq_demo"), 2),
    "otsdaq_version": (("otsdaq",), 1),
    "utilities_version": (("otsdaq_utilities",), 1),
    "default_qualifier": (("defaultqual",), 1),
}


def parse_product_deps(text: str) -> Dict[str, Optional[str]]:
    """Extract the known fields from a ``product_deps`` document.

    The first matching line wins; comment lines are ignored. Fields without
    a matching line map to ``None``.
    """
    found: Dict[str, Optional[str]] = {name: None for name in _FIELDS}
    for line in text.splitlines():
        tokens = line.split()
        if not tokens or tokens[0].startswith("#"):
            continue
        for name, (lead, index) in _FIELDS.items():
            if found[name] is not None:
                continue
            if tuple(tokens[: len(lead)]) == lead and len(tokens) > index:
                found[name] = tokens[index]
    return found


def split_qualifier(qualifier: str) -> tuple[str, str]:
    """Split ``e15:s64`` into ``("e15", "s64")``.

    Raises:
        QualifierError: Unless *qualifier* has exactly one separator with a
            non-empty segment on each side.
    """
    parts = qualifier.split(QUALIFIER_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise QualifierError(
            f"default qualifier {qualifier!r} is not of the form <e>{QUALIFIER_SEPARATOR}<s>"
        )
    return parts[0], parts[1]


def _require(fields: Dict[str, Optional[str]], name: str, url: str) -> str:
    value = fields.get(name)
    if not value:
        raise VersionResolutionError(f"{name} not found in {url}")
    return value


def _fetch(tag: str, fetcher: Fetcher, settings: Settings, save_to: Optional[Path]) -> tuple[str, str]:
    url = settings.product_deps_url(tag)
    text = fetcher.fetch_text(url)
    if save_to is not None:
        save_to.parent.mkdir(parents=True, exist_ok=True)
        save_to.write_text(text)
    return url, text


def resolve_versions(
    tag: str,
    fetcher: Fetcher,
    settings: Settings,
    *,
    save_to: Optional[Path] = None,
) -> ResolvedVersions:
    """Download ``product_deps`` at *tag* and extract versions and qualifiers.

    Args:
        tag: Branch or release of otsdaq-demo to read.
        fetcher: Object used to download the document.
        settings: Site settings providing the URL template.
        save_to: Optional path receiving a copy of the final document.

    Returns:
        The resolved versions. When *tag* is ``master`` the document is
        fetched twice and ``tag`` holds the pinned demo version.

    Raises:
        VersionResolutionError: The demo version, otsdaq version or default
            qualifier is missing. A missing ``otsdaq_utilities`` line leaves
            ``utilities_version`` empty since no later step consumes it.
        QualifierError: The default qualifier is malformed.
    """
    url, text = _fetch(tag, fetcher, settings, save_to)
    fields = parse_product_deps(text)

    if tag == MOVING_TAG:
        pinned = _require(fields, "demo_version", url)
        log.info("versions.pinned", requested=tag, pinned=pinned)
        tag = pinned
        url, text = _fetch(tag, fetcher, settings, save_to)
        fields = parse_product_deps(text)

    qualifier = _require(fields, "default_qualifier", url)
    e_qual, s_qual = split_qualifier(qualifier)
    versions = ResolvedVersions(
        tag=tag,
        demo_version=_require(fields, "demo_version", url),
        otsdaq_version=_require(fields, "otsdaq_version", url),
        utilities_version=fields.get("utilities_version") or "",
        default_qualifier=qualifier,
        e_qualifier=e_qual,
        s_qualifier=s_qual,
    )
    log.info(
        "versions.resolved",
        tag=versions.tag,
        demo=versions.demo_version,
        otsdaq=versions.otsdaq_version,
        utilities=versions.utilities_version,
        qualifier=versions.default_qualifier,
    )
    return versions
