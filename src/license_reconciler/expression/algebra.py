"""Operations over parsed license expressions.

Serialization, normalization, disjunctive-normal-form expansion,
satisfaction checks and the conjunctive combination used when two
independent license statements about the same scope are reconciled.
"""

import logging
from collections.abc import Iterable
from typing import Optional

from license_reconciler.expression.parser import parse
from license_reconciler.models import (
    NOASSERTION,
    Binary,
    Conjunction,
    Leaf,
    LicenseExpression,
    Unknown,
)

logger = logging.getLogger(__name__)

Clause = frozenset[str]


def stringify(expression: LicenseExpression) -> str:
    """Render a license expression tree as canonical SPDX text.

    OR operands of a binary node are parenthesized; AND operands are not,
    since AND binds tighter. The tree is walked with an explicit stack, so
    arbitrarily long chains render without recursion.

    Args:
        expression: Parsed expression tree.

    Returns:
        The SPDX expression text (``NOASSERTION`` for unknown).
    """
    rendered: list[str] = []
    stack: list[tuple[LicenseExpression, bool]] = [(expression, False)]
    while stack:
        node, children_done = stack.pop()
        if not isinstance(node, Binary):
            rendered.append(_atom_text(node))
        elif children_done:
            right = rendered.pop()
            left = rendered.pop()
            rendered.append(
                f"{_operand(node.left, left)} {node.conjunction.value} "
                f"{_operand(node.right, right)}"
            )
        else:
            stack.append((node, True))
            stack.append((node.right, False))
            stack.append((node.left, False))
    return rendered[0]


def _atom_text(expression: LicenseExpression) -> str:
    if isinstance(expression, Leaf):
        text = expression.id
        if expression.plus:
            text += "+"
        if expression.exception:
            text += f" WITH {expression.exception}"
        return text
    return NOASSERTION


def _operand(expression: LicenseExpression, text: str) -> str:
    if isinstance(expression, Binary) and expression.conjunction is Conjunction.OR:
        return f"({text})"
    return text


def normalize(expression: Optional[str], **parse_options) -> Optional[str]:
    """Normalize an SPDX expression, e.g. ``mit OR apache-2.0`` -> ``MIT OR Apache-2.0``.

    Args:
        expression: Expression text.
        **parse_options: Visitor and policy options forwarded to parse().

    Returns:
        The normalized text, None for empty input, ``NOASSERTION`` for input
        that cannot be parsed or recognized.
    """
    if isinstance(expression, str):
        if not expression.strip():
            return None
    elif not expression:
        return None
    return stringify(parse(expression, **parse_options))


def is_noassertion(expression: object) -> bool:
    """Check whether an expression (text or tree) carries no assertion."""
    return isinstance(parse(expression), Unknown)


def expand(expression: object) -> list[Clause]:
    """Expand an expression into disjunctive normal form.

    Each clause is the set of leaf terms that must all hold; the clauses are
    alternatives. ``MIT AND (ISC OR BSD-2-Clause)`` expands to
    ``[{MIT, ISC}, {MIT, BSD-2-Clause}]``.

    Args:
        expression: Expression text or tree.

    Returns:
        De-duplicated list of clauses.
    """
    return _unique(_expand(parse(expression)))


def _unique(clauses: Iterable[Clause]) -> list[Clause]:
    seen: set[Clause] = set()
    unique: list[Clause] = []
    for clause in clauses:
        if clause not in seen:
            seen.add(clause)
            unique.append(clause)
    return unique


def _expand(expression: LicenseExpression) -> list[Clause]:
    expanded: list[list[Clause]] = []
    stack: list[tuple[LicenseExpression, bool]] = [(expression, False)]
    while stack:
        node, children_done = stack.pop()
        if not isinstance(node, Binary):
            expanded.append([frozenset({_atom_text(node)})])
        elif children_done:
            right = expanded.pop()
            left = expanded.pop()
            if node.conjunction is Conjunction.OR:
                expanded.append(_unique(left + right))
            else:
                expanded.append(_unique(l | r for l in left for r in right))
        else:
            stack.append((node, True))
            stack.append((node.right, False))
            stack.append((node.left, False))
    return expanded[0]


def satisfies(candidate: object, requirement: object) -> bool:
    """Check whether the candidate expression satisfies the requirement.

    Every AND-clause of the requirement (in DNF) must be contained in some
    AND-clause of the candidate. ``NOASSERTION`` satisfies only itself.

    Args:
        candidate: Expression text or tree being checked.
        requirement: Expression text or tree that must be met.

    Returns:
        True if the candidate satisfies the requirement.
    """
    candidate_tree = parse(candidate)
    requirement_tree = parse(requirement)
    if isinstance(candidate_tree, Unknown) or isinstance(requirement_tree, Unknown):
        return isinstance(candidate_tree, Unknown) and isinstance(
            requirement_tree, Unknown
        )

    offered = expand(candidate_tree)
    return all(
        any(required <= clause for clause in offered)
        for required in expand(requirement_tree)
    )


def join_expressions(expressions: Optional[Iterable[object]]) -> Optional[str]:
    """AND-join independent license statements about the same scope.

    Duplicates and empty values are dropped, as are statements carrying no
    assertion when at least one real statement remains.

    Args:
        expressions: Expression texts or trees.

    Returns:
        The normalized conjunction, or None if nothing was given.
    """
    if not expressions:
        return None

    texts = {
        expression if isinstance(expression, str) else stringify(expression)
        for expression in expressions
        if expression
    }
    texts.discard("")
    if not texts:
        return None

    asserted = {text for text in texts if not is_noassertion(text)}
    if not asserted:
        return NOASSERTION

    return normalize(" AND ".join(f"({text})" for text in sorted(asserted)))


def merge_expressions(base: object, proposed: object) -> Optional[str]:
    """Reconcile two independent license statements about the same scope.

    An absent side yields the other side and a side without an assertion
    always loses to a real one; two sides without an assertion give
    ``NOASSERTION``. Otherwise both statements hold, so the result
    is their conjunction computed in DNF, which collapses repeated terms:
    ``MIT AND GPL-3.0`` + ``MIT`` -> ``GPL-3.0 AND MIT``.

    Args:
        base: Existing expression text or tree.
        proposed: Incoming expression text or tree.

    Returns:
        The combined expression text, or None if both sides are absent.
    """
    base = _as_text(base)
    proposed = _as_text(proposed)
    if not base:
        return proposed
    if not proposed:
        return base

    base_unknown = is_noassertion(base)
    proposed_unknown = is_noassertion(proposed)
    if base_unknown and proposed_unknown:
        return NOASSERTION
    if base_unknown:
        return proposed
    if proposed_unknown:
        return base

    right_clauses = expand(proposed)
    combined = _unique(left | right for left in expand(base) for right in right_clauses)
    return _stringify_clauses(combined)


def _as_text(expression: object) -> Optional[str]:
    if isinstance(expression, str):
        return expression if expression.strip() else None
    if isinstance(expression, (Leaf, Binary, Unknown)):
        return stringify(expression)
    return None


def _stringify_clauses(clauses: list[Clause]) -> str:
    rendered = sorted(
        ((len(clause), " AND ".join(sorted(clause))) for clause in clauses)
    )
    if len(rendered) == 1:
        return rendered[0][1]
    return " OR ".join(f"({text})" if size > 1 else text for size, text in rendered)
