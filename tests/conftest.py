"""Shared fixtures for the optimizer tests."""

from decimal import Decimal

import pytest

from markowitz_engine.config import WEIGHT_SUM_TOLERANCE
from markowitz_engine.core.models import Asset

TOLERANCE = WEIGHT_SUM_TOLERANCE


def close(a, b, tol=TOLERANCE) -> bool:
    return abs(Decimal(a) - Decimal(b)) <= tol


# Two-asset universe: equity vs. bonds, slightly negative correlation
@pytest.fixture
def aapl() -> Asset:
    return Asset("AAPL", "0.12", "0.25")


@pytest.fixture
def bnd() -> Asset:
    return Asset("BND", "0.03", "0.05")


@pytest.fixture
def pair_matrix():
    return [[Decimal("1"), Decimal("-0.1")], [Decimal("-0.1"), Decimal("1")]]


# Three-asset universe
@pytest.fixture
def three_assets():
    return [
        Asset("SPY", "0.10", "0.18"),
        Asset("TLT", "0.04", "0.12"),
        Asset("GLD", "0.06", "0.15"),
    ]


@pytest.fixture
def three_matrix():
    return [
        ["1", "-0.3", "0.1"],
        ["-0.3", "1", "0.2"],
        ["0.1", "0.2", "1"],
    ]


# Five-asset universe
@pytest.fixture
def five_assets():
    return [
        Asset("US_EQ", "0.09", "0.16"),
        Asset("INTL_EQ", "0.08", "0.18"),
        Asset("EM_EQ", "0.11", "0.24"),
        Asset("BONDS", "0.035", "0.06"),
        Asset("REIT", "0.07", "0.20"),
    ]


@pytest.fixture
def five_matrix():
    return [
        ["1", "0.8", "0.7", "-0.1", "0.6"],
        ["0.8", "1", "0.75", "-0.05", "0.55"],
        ["0.7", "0.75", "1", "0.0", "0.5"],
        ["-0.1", "-0.05", "0.0", "1", "0.1"],
        ["0.6", "0.55", "0.5", "0.1", "1"],
    ]
