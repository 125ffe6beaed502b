"""Pytest configuration and fixtures."""

from typing import Any

import pytest

from license_reconciler.models import AggregationPolicy


@pytest.fixture
def example_policy() -> AggregationPolicy:
    """Return the three-group policy used throughout the documentation."""
    return AggregationPolicy(
        precedence=[
            ["toolC--2.0"],
            ["toolB--3.0", "toolB--2.1", "toolB--2.0"],
            ["toolA"],
        ]
    )


@pytest.fixture
def peer_summaries() -> dict[str, Any]:
    """Return two tools reporting different licenses for the same component."""
    return {
        "toolA": {"1.0": {"licensed": {"declared": "MIT"}}},
        "toolB": {"1.0": {"licensed": {"declared": "GPL-3.0"}}},
    }
