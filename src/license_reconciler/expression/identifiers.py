"""Canonical SPDX identifier lookup.

The identifier tables are derived once from the SPDX symbols shipped with
the license-expression library and shared read-only by every parse.
"""

import logging
from functools import lru_cache
from typing import Callable, Optional

from license_expression import get_spdx_licensing

from license_reconciler.models import NOASSERTION

logger = logging.getLogger(__name__)

LicenseVisitor = Callable[[str], Optional[str]]

# Only resolvable through an explicit license_ref_lookup
REF_PREFIXES = ("licenseref-", "documentref-")


@lru_cache(maxsize=1)
def _identifier_tables() -> tuple[dict[str, str], dict[str, str]]:
    """Build the lowercase -> canonical maps for licenses and exceptions.

    Both the current SPDX key and the other (deprecated) SPDX keys of each
    symbol are kept in their own casing, so ``gpl-3.0`` stays ``GPL-3.0``.

    Returns:
        Tuple of (license map, exception map).
    """
    licenses: dict[str, str] = {}
    exceptions: dict[str, str] = {}

    for symbol in get_spdx_licensing().known_symbols.values():
        target = exceptions if getattr(symbol, "is_exception", False) else licenses
        for key in (symbol.key, *getattr(symbol, "aliases", ())):
            if not key or key.lower().startswith(REF_PREFIXES) or key.upper() == NOASSERTION:
                continue
            target.setdefault(key.lower(), key)

    logger.debug(
        "Loaded %d SPDX license ids and %d exception ids",
        len(licenses),
        len(exceptions),
    )
    return licenses, exceptions


def normalize_single(license_id: Optional[str]) -> Optional[str]:
    """Return the canonical casing of a single SPDX license identifier.

    Example: ``mit`` -> ``MIT``.

    Args:
        license_id: Identifier in any casing.

    Returns:
        The canonical identifier, or None if it is not recognized.
    """
    if not license_id or not license_id.strip():
        return None
    licenses, _ = _identifier_tables()
    return licenses.get(license_id.strip().lower())


def normalize_exception(exception_id: Optional[str]) -> Optional[str]:
    """Return the canonical casing of an SPDX exception identifier.

    Args:
        exception_id: Exception id from a ``WITH`` clause.

    Returns:
        The canonical exception id, or None if it is not recognized.
    """
    if not exception_id or not exception_id.strip():
        return None
    _, exceptions = _identifier_tables()
    return exceptions.get(exception_id.strip().lower())


def is_license_ref(token: str) -> bool:
    """Check whether a token is a ``LicenseRef-``/``DocumentRef-`` reference."""
    return token.lower().startswith(REF_PREFIXES)
