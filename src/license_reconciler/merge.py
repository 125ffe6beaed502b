"""Structural merge of partial definition records.

Combines a proposed partial definition into a base one, field by field:

- scalar leaves keep the base value unless ``override`` is set,
- ``hashes`` and ``described.facets`` maps take the proposed value per key,
- lists (attributions, facets, natures, ...) are unioned in order,
- ``licensed.declared`` and per-file ``license`` are reconciled with
  :func:`~license_reconciler.expression.merge_expressions`,
- ``files`` are matched by ``path`` and merged recursively.

The base record is mutated in place. Values taken from the proposed record
are deep copies, so the proposed record is never aliased into the base.
"""

import copy
import logging
from typing import Any, Optional

from license_reconciler.expression import merge_expressions

logger = logging.getLogger(__name__)

KEYED_OVERWRITE_FIELDS = frozenset({"hashes"})
DESCRIBED_KEYED_OVERWRITE_FIELDS = KEYED_OVERWRITE_FIELDS | {"facets"}


def merge_definitions(
    base: Optional[dict[str, Any]],
    proposed: Optional[dict[str, Any]],
    override: bool = False,
) -> Optional[dict[str, Any]]:
    """Merge a proposed partial definition into a base one.

    Args:
        base: Record to merge into (mutated in place), or None for a first write.
        proposed: Record carrying the new statements.
        override: If True, scalar values from proposed replace those in base.

    Returns:
        The proposed record itself when base is None, otherwise the merged base.

    Raises:
        TypeError: If base or proposed is neither None nor a mapping.
    """
    if proposed is not None and not isinstance(proposed, dict):
        raise TypeError(f"proposed must be a mapping, not {type(proposed).__name__}")
    if base is None:
        return proposed
    if not isinstance(base, dict):
        raise TypeError(f"base must be a mapping, not {type(base).__name__}")
    if not proposed:
        return base

    for key, value in proposed.items():
        if key == "coordinates":
            if base.get(key) is None and value is not None:
                base[key] = copy.deepcopy(value)
        elif key == "described":
            _set_if_value(base, key, _merge_section(base.get(key), value, override, _merge_described))
        elif key == "licensed":
            _set_if_value(base, key, _merge_section(base.get(key), value, override, _merge_licensed))
        elif key == "files":
            _set_if_value(base, key, _merge_files(base.get(key), value, override))
        else:
            _set_if_value(base, key, _merge_value(base.get(key), value, override))
    return base


def _set_if_value(target: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        target[key] = value


def _merge_section(base: Any, proposed: Any, override: bool, merger) -> Any:
    if not isinstance(proposed, dict):
        return base
    if not isinstance(base, dict):
        return copy.deepcopy(proposed)
    merger(base, proposed, override)
    return base


def _merge_described(base: dict, proposed: dict, override: bool) -> None:
    for key, value in proposed.items():
        prefer_proposed = key in DESCRIBED_KEYED_OVERWRITE_FIELDS
        _set_if_value(base, key, _merge_value(base.get(key), value, override, prefer_proposed))


def _merge_licensed(base: dict, proposed: dict, override: bool) -> None:
    for key, value in proposed.items():
        if key == "declared":
            _set_if_value(base, key, merge_expressions(base.get(key), value))
        else:
            _set_if_value(base, key, _merge_value(base.get(key), value, override))


def _merge_file(base: dict, proposed: dict, override: bool) -> None:
    for key, value in proposed.items():
        if key == "path":
            continue
        if key == "license":
            _set_if_value(base, key, merge_expressions(base.get(key), value))
        else:
            prefer_proposed = key in KEYED_OVERWRITE_FIELDS
            _set_if_value(base, key, _merge_value(base.get(key), value, override, prefer_proposed))


def _file_path(entry: Any) -> Optional[str]:
    if isinstance(entry, dict) and isinstance(entry.get("path"), str):
        return entry["path"]
    return None


def _merge_files(base: Any, proposed: Any, override: bool) -> Any:
    """Union two files lists by path, merging entries present on both sides."""
    if not isinstance(proposed, list):
        return base
    files = base if isinstance(base, list) else []

    merged: list[Any] = []
    by_path: dict[str, dict] = {}
    for entry in files:
        path = _file_path(entry)
        if path is None:
            merged.append(entry)
        elif path in by_path:
            logger.debug("Collapsing duplicate file entry %s", path)
            _merge_file(by_path[path], entry, override)
        else:
            by_path[path] = entry
            merged.append(entry)

    for entry in proposed:
        path = _file_path(entry)
        if path is None:
            logger.debug("Skipping file entry without a path: %r", entry)
            continue
        existing = by_path.get(path)
        if existing is None:
            existing = by_path[path] = copy.deepcopy(entry)
            merged.append(existing)
        else:
            _merge_file(existing, entry, override)

    files[:] = merged
    return files


def _merge_value(
    base: Any, proposed: Any, override: bool, prefer_proposed: bool = False
) -> Any:
    """Merge two arbitrary JSON values.

    Maps merge key by key, lists are unioned and scalars follow the scalar
    rule (proposed wins only with override or prefer_proposed).
    """
    if proposed is None:
        return base
    if base is None:
        return copy.deepcopy(proposed)

    if isinstance(base, dict) and isinstance(proposed, dict):
        for key, value in proposed.items():
            _set_if_value(base, key, _merge_value(base.get(key), value, override, prefer_proposed))
        return base

    if isinstance(base, list) and isinstance(proposed, list):
        union: list[Any] = []
        for item in base + copy.deepcopy(proposed):
            if item not in union:
                union.append(item)
        base[:] = union
        return base

    if override or prefer_proposed:
        return copy.deepcopy(proposed)
    return base
