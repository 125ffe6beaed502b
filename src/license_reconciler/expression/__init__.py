"""License expression engine.

Parses SPDX license expressions into trees, renders them back to canonical
text and combines or compares them.
"""

from license_reconciler.expression.algebra import (
    expand,
    is_noassertion,
    join_expressions,
    merge_expressions,
    normalize,
    satisfies,
    stringify,
)
from license_reconciler.expression.identifiers import (
    normalize_exception,
    normalize_single,
)
from license_reconciler.expression.parser import parse, tokenize

__all__ = [
    "expand",
    "is_noassertion",
    "join_expressions",
    "merge_expressions",
    "normalize",
    "normalize_exception",
    "normalize_single",
    "parse",
    "satisfies",
    "stringify",
    "tokenize",
]
