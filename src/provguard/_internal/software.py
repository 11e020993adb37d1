"""Software version discovery for provenance records."""

import platform
from importlib.metadata import PackageNotFoundError, version
from typing import Dict, Iterable, Mapping, Optional, Union

from provguard._internal.logging_config import get_logger


logger = get_logger(__name__)

UNKNOWN_VERSION = "unknown"

SoftwareSpec = Union[Iterable[str], Mapping[str, str]]


def distribution_version(name: str) -> str:
    """Installed version of a distribution, or ``"unknown"``."""
    try:
        return version(name)
    except PackageNotFoundError:
        logger.debug(f"Distribution {name!r} is not installed; recording version as unknown")
        return UNKNOWN_VERSION


def collect_versions(declared: Optional[SoftwareSpec] = None) -> Dict[str, str]:
    """
    Versions of the interpreter, provguard and every declared dependency.

    Args:
        declared: Distribution names to look up, or an explicit
            ``name -> version`` mapping taken verbatim

    Returns:
        Mapping of name to version string
    """
    versions = {
        "python": platform.python_version(),
        "provguard": distribution_version("provguard"),
    }
    if declared is None:
        return versions
    if isinstance(declared, Mapping):
        versions.update({str(name): str(ver) for name, ver in declared.items()})
    else:
        for name in declared:
            versions[name] = distribution_version(name)
    return versions
