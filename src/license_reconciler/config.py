"""Loading of aggregation policy configuration files.

Policies are stored as TOML or JSON::

    record_tools = true
    precedence = [["clearlydefined"], ["licensee", "scancode"], ["reuse"]]
"""

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

from license_reconciler.models import AggregationPolicy, AggregationPolicyError

logger = logging.getLogger(__name__)

POLICY_ENVVAR = "LICENSE_RECONCILER_POLICY"


def _read_config(path: Path) -> Any:
    if path.suffix.lower() == ".json":
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


def load_policy(path: Path) -> AggregationPolicy:
    """Load an aggregation policy from a TOML or JSON file.

    Files ending in ``.json`` are read as JSON, anything else as TOML.

    Args:
        path: Path to the policy file.

    Returns:
        The validated AggregationPolicy.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be decoded or the policy is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Policy file not found: {path}")

    data = _read_config(path)
    try:
        policy = AggregationPolicy.from_dict(data)
    except AggregationPolicyError as e:
        raise ValueError(f"Invalid aggregation policy in {path}: {e}") from e

    logger.debug("Loaded policy with %d precedence groups from %s", len(policy.groups), path)
    return policy
