"""Core data models for license_reconciler.

This module defines the license expression tree, the aggregation policy and
the JSON-shaped partial definition records exchanged with per-tool
summarizers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, TypedDict, Union

NOASSERTION = "NOASSERTION"


class Conjunction(str, Enum):
    """Operator joining the two operands of a binary expression."""

    AND = "AND"
    OR = "OR"


class ExceptionPolicy(str, Enum):
    """What to do with a ``WITH`` clause whose exception id is rejected.

    Attributes:
        DROP: Keep the license leaf and drop the exception clause.
        UNKNOWN: Degrade the whole leaf to ``Unknown``.
    """

    DROP = "drop"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Leaf:
    """A single license identifier.

    Attributes:
        id: Canonically cased SPDX identifier or resolved LicenseRef token.
        plus: True for the "or-later" form (``GPL-2.0+``).
        exception: Optional exception id from a ``WITH`` clause.
    """

    id: str
    plus: bool = False
    exception: Optional[str] = None


@dataclass(frozen=True)
class Binary:
    """Two expressions joined by AND or OR."""

    left: "LicenseExpression"
    right: "LicenseExpression"
    conjunction: Conjunction


@dataclass(frozen=True)
class Unknown:
    """Sentinel for "no valid assertion could be parsed".

    Renders as ``NOASSERTION``. All instances compare equal.
    """


UNKNOWN = Unknown()

LicenseExpression = Union[Leaf, Binary, Unknown]


class AggregationPolicyError(ValueError):
    """Raised when an aggregation policy is malformed."""


@dataclass(frozen=True)
class ToolSelector:
    """One entry of a precedence group.

    Attributes:
        tool: Tool name (e.g., "scancode").
        version: Pinned tool version, or None to use the latest present.
    """

    tool: str
    version: Optional[str] = None

    SEPARATOR = "--"

    @classmethod
    def parse(cls, text: str) -> "ToolSelector":
        """Build a selector from ``tool`` or ``tool--version`` text.

        Args:
            text: Selector text from the policy configuration.

        Returns:
            The parsed ToolSelector.

        Raises:
            AggregationPolicyError: If the text or its tool name is empty.
        """
        if not isinstance(text, str) or not text.strip():
            raise AggregationPolicyError(f"Invalid tool selector: {text!r}")

        tool, sep, version = text.strip().partition(cls.SEPARATOR)
        if not tool:
            raise AggregationPolicyError(f"Tool selector has no tool name: {text!r}")
        return cls(tool=tool, version=version if sep and version else None)

    def __str__(self) -> str:
        if self.version:
            return f"{self.tool}{self.SEPARATOR}{self.version}"
        return self.tool


@dataclass
class AggregationPolicy:
    """Ordered precedence groups used to fold per-tool summaries.

    Groups are ordered highest precedence first. Entries inside a group are
    mutually exclusive alternates ordered by preference.

    Attributes:
        precedence: Groups of tool selectors, e.g.
            ``[["toolC--2.0"], ["toolB--3.0", "toolB--2.0"], ["toolA"]]``.
        record_tools: If True, the aggregate lists the contributing tools
            under ``described.tools``.
    """

    precedence: list[list[str]]
    record_tools: bool = False
    groups: list[list[ToolSelector]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.precedence, (list, tuple)):
            raise AggregationPolicyError("precedence must be a list of groups")

        groups: list[list[ToolSelector]] = []
        owners: dict[str, int] = {}
        for index, group in enumerate(self.precedence):
            if isinstance(group, str) or not isinstance(group, (list, tuple)):
                raise AggregationPolicyError(
                    f"precedence group {index} must be a list of tool selectors"
                )
            selectors = [ToolSelector.parse(entry) for entry in group]
            for selector in selectors:
                owner = owners.setdefault(selector.tool, index)
                if owner != index:
                    raise AggregationPolicyError(
                        f"Tool '{selector.tool}' appears in precedence groups "
                        f"{owner} and {index}"
                    )
            groups.append(selectors)

        self.precedence = [list(group) for group in self.precedence]
        self.groups = groups

    @classmethod
    def from_dict(cls, data: Any) -> "AggregationPolicy":
        """Build a policy from configuration data.

        Unknown keys are ignored.

        Args:
            data: Mapping with a ``precedence`` list and optional ``record_tools``.

        Returns:
            The validated AggregationPolicy.

        Raises:
            AggregationPolicyError: If the mapping has no valid precedence.
        """
        if not isinstance(data, dict) or "precedence" not in data:
            raise AggregationPolicyError("policy must define 'precedence'")
        return cls(
            precedence=data["precedence"],
            record_tools=bool(data.get("record_tools", False)),
        )


class FileEntry(TypedDict, total=False):
    """One file of a component; ``path`` is unique within a files list."""

    path: str
    license: str
    attributions: list[str]
    facets: list[str]
    natures: list[str]
    hashes: dict[str, str]
    token: str


class Described(TypedDict, total=False):
    releaseDate: str
    projectWebsite: str
    issueTracker: str
    sourceLocation: dict[str, Any]
    hashes: dict[str, str]
    facets: dict[str, list[str]]
    files: int
    tools: list[str]


class Licensed(TypedDict, total=False):
    declared: str
    facets: dict[str, Any]


class PartialDefinition(TypedDict, total=False):
    """Sparse metadata record produced by one tool (any field may be absent)."""

    coordinates: Any
    described: Described
    licensed: Licensed
    files: list[FileEntry]
