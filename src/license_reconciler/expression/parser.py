"""Operator-precedence parser for SPDX license expressions.

Grammar (keywords are case-insensitive, AND binds tighter than OR)::

    expr        := and_expr ( "OR" and_expr )*
    and_expr    := term ( "AND" term )*
    term        := "(" expr ")" | license_atom
    license_atom:= IDENTIFIER ["+"] ["WITH" EXCEPTION_ID]

Parsing never raises: any syntax error yields ``UNKNOWN``. Each identifier is
passed through a license visitor; a rejected identifier becomes an ``Unknown``
leaf without aborting the rest of the parse.
"""

import logging
import re
from typing import Callable, Optional

from license_reconciler.expression.identifiers import (
    LicenseVisitor,
    is_license_ref,
    normalize_exception,
    normalize_single,
)
from license_reconciler.models import (
    UNKNOWN,
    Binary,
    Conjunction,
    ExceptionPolicy,
    Leaf,
    LicenseExpression,
    Unknown,
)

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"[()+]|[A-Za-z0-9.:\-]+|\S")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9.:\-]+$")
KEYWORDS = frozenset({"AND", "OR", "WITH"})

LicenseRefLookup = Callable[[str], Optional[str]]


class ExpressionSyntaxError(ValueError):
    """Raised internally when expression text does not match the grammar."""


def tokenize(text: str) -> list[str]:
    """Split expression text into parenthesis, plus and word tokens."""
    return TOKEN_PATTERN.findall(text)


def _is_identifier(token: Optional[str]) -> bool:
    return (
        token is not None
        and token.upper() not in KEYWORDS
        and IDENTIFIER_PATTERN.match(token) is not None
    )


def _combine(
    left: LicenseExpression, right: LicenseExpression, conjunction: Conjunction
) -> LicenseExpression:
    if isinstance(left, Unknown) and isinstance(right, Unknown):
        return UNKNOWN
    return Binary(left=left, right=right, conjunction=conjunction)


class _Group:
    """Operands collected inside one pair of parentheses (or at top level)."""

    def __init__(self) -> None:
        self.or_expression: Optional[LicenseExpression] = None
        self.and_expression: Optional[LicenseExpression] = None

    def attach(self, term: LicenseExpression) -> None:
        if self.and_expression is None:
            self.and_expression = term
        else:
            self.and_expression = _combine(self.and_expression, term, Conjunction.AND)

    def fold_or(self) -> None:
        if self.or_expression is None:
            self.or_expression = self.and_expression
        else:
            self.or_expression = _combine(
                self.or_expression, self.and_expression, Conjunction.OR
            )
        self.and_expression = None

    def finish(self) -> LicenseExpression:
        self.fold_or()
        return self.or_expression


class _Parser:
    """Single-use parser over a token list.

    Parentheses are tracked on an explicit stack of groups, so nesting depth
    is not bounded by the interpreter's recursion limit.
    """

    def __init__(
        self,
        tokens: list[str],
        license_visitor: LicenseVisitor,
        exception_visitor: LicenseVisitor,
        exception_policy: ExceptionPolicy,
        license_ref_lookup: Optional[LicenseRefLookup],
    ) -> None:
        self.tokens = tokens
        self.pos = 0
        self.license_visitor = license_visitor
        self.exception_visitor = exception_visitor
        self.exception_policy = exception_policy
        self.license_ref_lookup = license_ref_lookup

    def parse(self) -> LicenseExpression:
        groups = [_Group()]
        expect_term = True

        while True:
            if expect_term:
                if self._accept("("):
                    groups.append(_Group())
                    continue
                groups[-1].attach(self._atom())
                expect_term = False
                continue

            token = self._peek()
            if token is None:
                break
            if self._accept("OR"):
                groups[-1].fold_or()
                expect_term = True
            elif self._accept("AND"):
                expect_term = True
            elif token == ")" and len(groups) > 1:
                self.pos += 1
                closed = groups.pop().finish()
                groups[-1].attach(closed)
            else:
                raise ExpressionSyntaxError(f"Unexpected token {token!r}")

        if len(groups) != 1:
            raise ExpressionSyntaxError("Unbalanced parenthesis")
        return groups[0].finish()

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ExpressionSyntaxError("Unexpected end of expression")
        self.pos += 1
        return token

    def _accept(self, expected: str) -> bool:
        token = self._peek()
        if token is not None and token.upper() == expected:
            self.pos += 1
            return True
        return False

    def _atom(self) -> LicenseExpression:
        token = self._next()
        if not _is_identifier(token):
            raise ExpressionSyntaxError(f"Expected a license identifier, got {token!r}")

        plus = self._accept("+")
        exception = None
        if self._accept("WITH"):
            exception = self._next()
            if not _is_identifier(exception):
                raise ExpressionSyntaxError(
                    f"Expected an exception identifier, got {exception!r}"
                )
        return self._visit(token, plus, exception)

    def _visit(
        self, token: str, plus: bool, exception: Optional[str]
    ) -> LicenseExpression:
        if self.license_ref_lookup is not None and is_license_ref(token):
            license_id = self.license_ref_lookup(token)
        else:
            license_id = self.license_visitor(token)

        if not license_id:
            logger.debug("Unrecognized license identifier: %s", token)
            return UNKNOWN

        if exception is not None:
            canonical = self.exception_visitor(exception)
            if not canonical:
                if self.exception_policy is ExceptionPolicy.UNKNOWN:
                    logger.debug(
                        "Rejected exception %s on %s, leaf is unknown",
                        exception,
                        license_id,
                    )
                    return UNKNOWN
                logger.debug("Dropping rejected exception %s on %s", exception, license_id)
            exception = canonical or None

        return Leaf(id=license_id, plus=plus, exception=exception)


def parse(
    expression: object,
    license_visitor: Optional[LicenseVisitor] = None,
    exception_visitor: Optional[LicenseVisitor] = None,
    exception_policy: ExceptionPolicy = ExceptionPolicy.DROP,
    license_ref_lookup: Optional[LicenseRefLookup] = None,
) -> LicenseExpression:
    """Parse an SPDX expression into a license expression tree.

    Args:
        expression: Expression text. An already parsed tree is returned as is.
        license_visitor: Maps a raw identifier to its canonical form or None.
            Defaults to a case-insensitive lookup in the SPDX identifier table.
        exception_visitor: Same as license_visitor, for ``WITH`` exception ids.
        exception_policy: Handling of exception ids rejected by exception_visitor.
        license_ref_lookup: Optional resolver for ``LicenseRef-`` tokens. Its
            return value becomes the leaf id; None marks the leaf unknown.

    Returns:
        The parsed tree, or ``UNKNOWN`` if the text cannot be parsed.
    """
    if isinstance(expression, (Leaf, Binary, Unknown)):
        return expression
    if not isinstance(expression, str) or not expression.strip():
        return UNKNOWN

    parser = _Parser(
        tokenize(expression),
        license_visitor or normalize_single,
        exception_visitor or normalize_exception,
        ExceptionPolicy(exception_policy),
        license_ref_lookup,
    )
    try:
        return parser.parse()
    except ExpressionSyntaxError as e:
        logger.debug("Could not parse license expression %r: %s", expression, e)
        return UNKNOWN
