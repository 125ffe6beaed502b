"""Tests for stringify, normalize, satisfies and the combination helpers."""

import pytest

from license_reconciler.expression import (
    expand,
    is_noassertion,
    join_expressions,
    merge_expressions,
    normalize,
    parse,
    satisfies,
    stringify,
)
from license_reconciler.models import (
    NOASSERTION,
    UNKNOWN,
    Binary,
    Conjunction,
    ExceptionPolicy,
    Leaf,
)


class TestStringify:
    """Test suite for stringify()."""

    def test_leaf_with_plus_and_exception(self) -> None:
        """Test rendering of the or-later suffix and WITH clause."""
        leaf = Leaf("GPL-2.0", plus=True, exception="Classpath-exception-2.0")
        assert stringify(leaf) == "GPL-2.0+ WITH Classpath-exception-2.0"

    def test_unknown(self) -> None:
        """Test that UNKNOWN renders as NOASSERTION."""
        assert stringify(UNKNOWN) == NOASSERTION

    def test_or_operands_are_parenthesized(self) -> None:
        """Test that OR operands are wrapped in parentheses."""
        tree = Binary(
            Binary(Leaf("MIT"), Leaf("ISC"), Conjunction.OR),
            Leaf("Apache-2.0"),
            Conjunction.AND,
        )
        assert stringify(tree) == "(MIT OR ISC) AND Apache-2.0"

    def test_nested_or_is_parenthesized_under_or(self) -> None:
        """Test that an OR operand of an OR node is also parenthesized."""
        tree = Binary(
            Binary(Leaf("MIT"), Leaf("ISC"), Conjunction.OR),
            Leaf("Apache-2.0"),
            Conjunction.OR,
        )
        assert stringify(tree) == "(MIT OR ISC) OR Apache-2.0"

    def test_and_operands_are_bare(self) -> None:
        """Test that AND operands are not parenthesized."""
        tree = Binary(
            Leaf("MIT"),
            Binary(Leaf("ISC"), Leaf("Apache-2.0"), Conjunction.AND),
            Conjunction.OR,
        )
        assert stringify(tree) == "MIT OR ISC AND Apache-2.0"

    def test_unknown_operand(self) -> None:
        """Test that an unknown operand renders inline as NOASSERTION."""
        tree = Binary(Leaf("MIT"), UNKNOWN, Conjunction.AND)
        assert stringify(tree) == "MIT AND NOASSERTION"

    @pytest.mark.parametrize(
        "text",
        [
            "MIT",
            "GPL-2.0+",
            "MIT OR Apache-2.0",
            "(MIT OR ISC) AND Apache-2.0",
            "MIT AND (ISC OR (BSD-2-Clause AND Apache-2.0))",
            "GPL-2.0 WITH Classpath-exception-2.0 OR MIT",
        ],
    )
    def test_reparse_gives_same_tree(self, text: str) -> None:
        """Test that the rendered text parses back to the same tree."""
        tree = parse(text)
        assert parse(stringify(tree)) == tree


class TestNormalize:
    """Test suite for normalize()."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("mit", "MIT"),
            ("mit OR apache-2.0", "MIT OR Apache-2.0"),
            ("(mit)", "MIT"),
            ("  MIT   and   ISC ", "MIT AND ISC"),
            ("gpl-3.0", "GPL-3.0"),
            ("MIT OR (ISC AND Apache-2.0)", "MIT OR ISC AND Apache-2.0"),
            ("junk", NOASSERTION),
            ("MIT AND", NOASSERTION),
            ("NOASSERTION", NOASSERTION),
        ],
    )
    def test_normalize(self, text: str, expected: str) -> None:
        """Test canonical casing, spacing and parenthesization."""
        assert normalize(text) == expected

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_input_is_none(self, value: object) -> None:
        """Test that absent input stays absent rather than NOASSERTION."""
        assert normalize(value) is None

    @pytest.mark.parametrize(
        "text",
        ["mit OR apache-2.0", "(MIT OR ISC) AND gpl-2.0+", "junk", "MIT AND junk"],
    )
    def test_idempotent(self, text: str) -> None:
        """Test that normalizing twice changes nothing."""
        once = normalize(text)
        assert normalize(once) == once

    def test_parse_options_are_forwarded(self) -> None:
        """Test that the exception policy reaches the parser."""
        text = "Apache-2.0 WITH JunkException"
        assert normalize(text) == "Apache-2.0"
        assert normalize(text, exception_policy=ExceptionPolicy.UNKNOWN) == NOASSERTION


class TestIsNoassertion:
    """Test suite for is_noassertion()."""

    @pytest.mark.parametrize("value", [NOASSERTION, "junk", "(MIT", None, UNKNOWN])
    def test_true(self, value: object) -> None:
        """Test values that carry no assertion."""
        assert is_noassertion(value)

    @pytest.mark.parametrize("value", ["MIT", "MIT AND junk", Leaf("MIT")])
    def test_false(self, value: object) -> None:
        """Test values that carry an assertion."""
        assert not is_noassertion(value)


class TestExpand:
    """Test suite for expand()."""

    def test_distributes_and_over_or(self) -> None:
        """Test expansion into disjunctive normal form."""
        assert expand("MIT AND (ISC OR BSD-2-Clause)") == [
            frozenset({"MIT", "ISC"}),
            frozenset({"MIT", "BSD-2-Clause"}),
        ]

    def test_removes_duplicate_clauses(self) -> None:
        """Test that equal clauses appear once."""
        assert expand("MIT OR mit") == [frozenset({"MIT"})]

    def test_leaf_keeps_suffix_and_exception(self) -> None:
        """Test that terms are rendered leaves."""
        assert expand("GPL-2.0+ WITH Classpath-exception-2.0") == [
            frozenset({"GPL-2.0+ WITH Classpath-exception-2.0"})
        ]


class TestSatisfies:
    """Test suite for satisfies()."""

    @pytest.mark.parametrize(
        "candidate,requirement,expected",
        [
            ("MIT", "MIT", True),
            ("mit", "MIT", True),
            ("MIT", "Apache-2.0", False),
            ("MIT OR Apache-2.0", "MIT", True),
            ("MIT", "MIT OR Apache-2.0", False),
            ("MIT AND ISC", "MIT", True),
            ("MIT", "MIT AND ISC", False),
            ("(MIT AND ISC) OR Apache-2.0", "MIT AND ISC", True),
            ("MIT OR Apache-2.0", "Apache-2.0 OR MIT", True),
            ("GPL-2.0+", "GPL-2.0", False),
            (NOASSERTION, NOASSERTION, True),
            ("junk", NOASSERTION, True),
            ("MIT", NOASSERTION, False),
            (NOASSERTION, "MIT", False),
        ],
    )
    def test_satisfies(self, candidate: str, requirement: str, expected: bool) -> None:
        """Test clause containment between candidate and requirement."""
        assert satisfies(candidate, requirement) is expected

    def test_accepts_trees(self) -> None:
        """Test that parsed trees are accepted on either side."""
        assert satisfies(parse("MIT OR ISC"), Leaf("ISC"))


class TestMergeExpressions:
    """Test suite for merge_expressions()."""

    @pytest.mark.parametrize(
        "base,proposed,expected",
        [
            ("MIT", None, "MIT"),
            (None, "MIT", "MIT"),
            (None, None, None),
            ("", "MIT", "MIT"),
            ("MIT AND GPL-3.0", "GPL-3.0", "GPL-3.0 AND MIT"),
            ("MIT AND GPL-3.0", "MIT", "GPL-3.0 AND MIT"),
            ("MIT AND GPL-3.0", "MIT AND BSD-3-Clause", "BSD-3-Clause AND GPL-3.0 AND MIT"),
            ("MIT OR GPL-3.0", "GPL-3.0", "GPL-3.0 OR (GPL-3.0 AND MIT)"),
            ("MIT OR GPL-3.0", "MIT", "MIT OR (GPL-3.0 AND MIT)"),
            ("MIT OR Apache-2.0", "MIT AND Apache-2.0", "Apache-2.0 AND MIT"),
            ("MIT AND Apache-2.0", "MIT OR Apache-2.0", "Apache-2.0 AND MIT"),
            ("MIT", "GPL-3.0", "GPL-3.0 AND MIT"),
            ("GPL-3.0", "MIT", "GPL-3.0 AND MIT"),
            ("mit", "MIT", "MIT"),
        ],
    )
    def test_merge(self, base: str, proposed: str, expected: str) -> None:
        """Test conjunction of two independent statements."""
        assert merge_expressions(base, proposed) == expected

    @pytest.mark.parametrize(
        "base,proposed",
        [(NOASSERTION, "MIT"), ("MIT", NOASSERTION), ("junk", "MIT"), ("MIT", "junk")],
    )
    def test_real_value_beats_noassertion(self, base: str, proposed: str) -> None:
        """Test that a statement without assertion never survives next to a real one."""
        assert merge_expressions(base, proposed) == "MIT"

    @pytest.mark.parametrize(
        "base,proposed",
        [
            (NOASSERTION, NOASSERTION),
            (NOASSERTION, "junk text"),
            ("junk text", NOASSERTION),
            ("junk", "MIT AND"),
        ],
    )
    def test_both_noassertion(self, base: str, proposed: str) -> None:
        """Test that two unknown sides give NOASSERTION in either order."""
        assert merge_expressions(base, proposed) == NOASSERTION
        assert merge_expressions(proposed, base) == NOASSERTION

    def test_accepts_trees(self) -> None:
        """Test that parsed trees are rendered before combining."""
        assert merge_expressions(Leaf("MIT"), parse("ISC")) == "ISC AND MIT"


class TestJoinExpressions:
    """Test suite for join_expressions()."""

    @pytest.mark.parametrize(
        "expressions,expected",
        [
            (["MIT", "Apache-2.0"], "Apache-2.0 AND MIT"),
            (["MIT", "MIT"], "MIT"),
            (["MIT OR ISC", "Apache-2.0"], "Apache-2.0 AND (MIT OR ISC)"),
            ([NOASSERTION, "MIT"], "MIT"),
            (["junk", "MIT"], "MIT"),
            ([NOASSERTION], NOASSERTION),
            (["MIT", None, ""], "MIT"),
        ],
    )
    def test_join(self, expressions: list, expected: str) -> None:
        """Test AND-joining of independent statements."""
        assert join_expressions(expressions) == expected

    @pytest.mark.parametrize("expressions", [None, [], [None, ""]])
    def test_nothing_to_join(self, expressions: object) -> None:
        """Test that empty input yields None."""
        assert join_expressions(expressions) is None

    def test_order_does_not_matter(self) -> None:
        """Test that the result is independent of input order."""
        assert join_expressions(["ISC", "MIT", "Apache-2.0"]) == join_expressions(
            ["Apache-2.0", "ISC", "MIT"]
        )


class TestLargeExpressions:
    """Test suite for expressions with thousands of terms."""

    def test_normalize_long_and_chain(self) -> None:
        """Test rendering of a flat chain longer than the recursion limit."""
        assert normalize(" and ".join(["mit"] * 3000)) == " AND ".join(["MIT"] * 3000)

    def test_normalize_long_or_chain_is_idempotent(self) -> None:
        """Test that the parenthesized rendering of a long OR chain re-parses."""
        once = normalize(" OR ".join(["MIT", "ISC"] * 1500))
        assert once != NOASSERTION
        assert normalize(once) == once

    def test_normalize_deep_nesting(self) -> None:
        """Test that deeply nested input normalizes to its single term."""
        assert normalize("(" * 1200 + "mit" + ")" * 1200) == "MIT"

    def test_expand_long_or_chain(self) -> None:
        """Test that repeated alternatives collapse during expansion."""
        assert expand(" OR ".join(["MIT", "ISC"] * 1500)) == [
            frozenset({"MIT"}),
            frozenset({"ISC"}),
        ]

    def test_merge_long_or_chain(self) -> None:
        """Test combining a very long statement with a short one."""
        result = merge_expressions(" OR ".join(["MIT", "ISC"] * 1500), "Apache-2.0")
        assert result == "(Apache-2.0 AND ISC) OR (Apache-2.0 AND MIT)"

    def test_satisfies_long_chain(self) -> None:
        """Test satisfaction checks on a very long candidate."""
        assert satisfies(" AND ".join(["MIT", "ISC"] * 1500), "ISC AND MIT")
