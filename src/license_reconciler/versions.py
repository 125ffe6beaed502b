"""Tool version selection helpers."""

import logging
from typing import Optional, Union

from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)


def _parse_version(version: str) -> Optional[Version]:
    try:
        return Version(version)
    except (InvalidVersion, TypeError):
        return None


def latest_version(versions: Union[list[str], str, None]) -> Optional[str]:
    """Pick the latest release from a list of version strings.

    Invalid and pre-release versions are ignored. If none of the versions is
    a valid release, the first entry is returned.

    Args:
        versions: Version strings, e.g. ``["1.0.1", "1.1.0", "2.0.0-rc.1"]``.
            A single string is returned unchanged.

    Returns:
        The latest version string as given, or None for an empty list.
    """
    if not isinstance(versions, (list, tuple)):
        return versions
    if not versions:
        return None

    latest: Optional[str] = None
    latest_parsed: Optional[Version] = None
    for version in versions:
        parsed = _parse_version(version)
        if parsed is None or parsed.is_prerelease:
            continue
        if latest_parsed is None or parsed > latest_parsed:
            latest, latest_parsed = version, parsed

    if latest is None:
        logger.debug("No valid release among %s, using %s", versions, versions[0])
        return versions[0]
    return latest
