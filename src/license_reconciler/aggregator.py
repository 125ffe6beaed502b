"""Aggregation of per-tool summaries into one definition per component.

The tools to consider and their precedence are described by an
:class:`~license_reconciler.models.AggregationPolicy`::

    precedence = [
        ["toolC--2.0"],
        ["toolB--3.0", "toolB--2.1", "toolB--2.0"],
        ["toolA"],
    ]

Groups are ordered highest precedence first. Entries within a group are
mutually exclusive alternates: only the first one with data contributes.
Summaries are folded lowest precedence first, so a higher-precedence tool
replaces the scalar fields it actually sets, while license statements of
peer groups are AND-combined and lists are unioned.
"""

import copy
import logging
from typing import Any, Optional, Union

from license_reconciler.merge import merge_definitions
from license_reconciler.models import AggregationPolicy, ToolSelector
from license_reconciler.versions import latest_version

logger = logging.getLogger(__name__)

Summaries = dict[str, dict[str, dict[str, Any]]]


class Aggregator:
    """Folds tool summaries for one component according to a policy.

    Attributes:
        policy: The validated aggregation policy.
    """

    def __init__(self, policy: Union[AggregationPolicy, dict[str, Any]]) -> None:
        """Initialize the aggregator.

        Args:
            policy: An AggregationPolicy or its configuration mapping.

        Raises:
            AggregationPolicyError: If the policy configuration is invalid.
        """
        if not isinstance(policy, AggregationPolicy):
            policy = AggregationPolicy.from_dict(policy)
        self.policy = policy
        if not any(policy.groups):
            logger.warning("Aggregation policy has an empty precedence list")

    def find_data(
        self, selector: ToolSelector, summaries: Summaries
    ) -> Optional[tuple[str, dict[str, Any]]]:
        """Find the summary that best matches a tool selector.

        A bare tool name resolves to the latest version present; a pinned
        selector resolves to that exact version only.

        Args:
            selector: Tool selector from the policy.
            summaries: Summaries keyed by tool name then tool version.

        Returns:
            Tuple of ("tool/version", summary), or None if nothing matches.
        """
        versions = summaries.get(selector.tool)
        if not isinstance(versions, dict) or not versions:
            return None

        version = selector.version or latest_version(list(versions))
        summary = versions.get(version)
        if not isinstance(summary, dict):
            return None
        return f"{selector.tool}/{version}", summary

    def resolve(self, summaries: Optional[Summaries]) -> list[tuple[str, dict[str, Any]]]:
        """Resolve the policy against the available summaries.

        Only the first alternate of each group that has data contributes.

        Args:
            summaries: Summaries keyed by tool name then tool version.

        Returns:
            (tool spec, summary) pairs in fold order, lowest precedence first.
        """
        if not summaries:
            return []
        resolved = []
        for group in reversed(self.policy.groups):
            for selector in group:
                found = self.find_data(selector, summaries)
                if found is not None:
                    resolved.append(found)
                    break
                logger.debug("No data for %s", selector)
        return resolved

    def process(self, summaries: Optional[Summaries]) -> Optional[dict[str, Any]]:
        """Aggregate the summaries of one component.

        Args:
            summaries: Summaries keyed by tool name then tool version.

        Returns:
            The aggregated partial definition, or None if no selector matched
            any data.
        """
        resolved = self.resolve(summaries)
        if not resolved:
            logger.info("No summaries matched the aggregation policy")
            return None

        result: Optional[dict[str, Any]] = None
        for tool_spec, summary in resolved:
            logger.debug("Folding summary from %s", tool_spec)
            result = merge_definitions(result, copy.deepcopy(summary), override=True)

        if self.policy.record_tools:
            described = result.setdefault("described", {})
            if not isinstance(described, dict):
                described = result["described"] = {}
            described["tools"] = [tool_spec for tool_spec, _ in reversed(resolved)]

        logger.info("Aggregated %d summaries", len(resolved))
        return result


def aggregate(
    policy: Union[AggregationPolicy, dict[str, Any]], summaries: Optional[Summaries]
) -> Optional[dict[str, Any]]:
    """Aggregate per-tool summaries of one component under a policy.

    Args:
        policy: An AggregationPolicy or its configuration mapping.
        summaries: Summaries keyed by tool name then tool version.

    Returns:
        The aggregated partial definition, or None if no data was available.
    """
    return Aggregator(policy).process(summaries)
