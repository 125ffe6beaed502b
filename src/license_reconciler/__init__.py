"""License Reconciler - reconciles component license metadata from many tools.

This package provides an SPDX license expression algebra, a structural merge
of partial component definitions and a precedence-ordered aggregation of
per-tool summaries into one definition per component.
"""

__version__ = "0.1.0"

from license_reconciler.aggregator import Aggregator, aggregate
from license_reconciler.expression import join_expressions, merge_expressions
from license_reconciler.expression import normalize as normalize_expression
from license_reconciler.expression import parse as parse_expression
from license_reconciler.expression import satisfies
from license_reconciler.expression import stringify as stringify_expression
from license_reconciler.merge import merge_definitions
from license_reconciler.models import (
    NOASSERTION,
    UNKNOWN,
    AggregationPolicy,
    AggregationPolicyError,
    Binary,
    Conjunction,
    ExceptionPolicy,
    Leaf,
    Unknown,
)

__all__ = [
    "__version__",
    "NOASSERTION",
    "UNKNOWN",
    "AggregationPolicy",
    "AggregationPolicyError",
    "Aggregator",
    "Binary",
    "Conjunction",
    "ExceptionPolicy",
    "Leaf",
    "Unknown",
    "aggregate",
    "join_expressions",
    "merge_definitions",
    "merge_expressions",
    "normalize_expression",
    "parse_expression",
    "satisfies",
    "stringify_expression",
]
