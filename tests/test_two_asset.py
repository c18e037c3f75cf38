"""
Tests for the two-asset analytical solver.

Closed forms checked here:
  MVP:       wA = (sB^2 - sA sB rho) / (sA^2 + sB^2 - 2 sA sB rho)
  Tangency:  wA = (eA sB^2 - eB sA sB rho) / (eA sB^2 + eB sA^2 - (eA + eB) sA sB rho)
  Target:    wA = (R - rB) / (rA - rB)

The scipy SLSQP cross-checks solve the same problems numerically in floats.
"""

from decimal import Decimal

import numpy as np
import pytest

from markowitz_engine.core.errors import (
    DegenerateCaseError,
    InvalidCorrelationError,
    UnattainableReturnError,
)
from markowitz_engine.core.metrics import sharpe_ratio
from markowitz_engine.core.models import Asset
from markowitz_engine.core.two_asset import (
    TwoAssetOptimizer,
    minimum_variance_portfolio,
    tangency_portfolio,
    target_return_portfolio,
)
from tests.conftest import close

RHO = Decimal("-0.1")
RF = Decimal("0.03")


# ═══════════════════════════════════════════════════════════════════════════ #
# Minimum variance                                                             #
# ═══════════════════════════════════════════════════════════════════════════ #


class TestMinimumVariance:
    def test_closed_form(self, aapl, bnd):
        result = TwoAssetOptimizer.minimum_variance(aapl, bnd, RHO)
        sa, sb = aapl.volatility, bnd.volatility
        expected = (sb * sb - sa * sb * RHO) / (sa * sa + sb * sb - 2 * sa * sb * RHO)
        assert close(result.weight_a, expected)
        assert close(result.weight_a + result.weight_b, 1)

    def test_uncorrelated_equal_vol_is_fifty_fifty(self):
        a = Asset("A", "0.10", "0.2")
        b = Asset("B", "0.05", "0.2")
        result = TwoAssetOptimizer.minimum_variance(a, b, Decimal("0"))
        assert result.weight_a == Decimal("0.5")
        assert result.weight_b == Decimal("0.5")

    def test_perfect_correlation_picks_lower_volatility(self, aapl, bnd):
        result = TwoAssetOptimizer.minimum_variance(aapl, bnd, Decimal("1"))
        assert (result.weight_a, result.weight_b) == (Decimal("0"), Decimal("1"))
        assert result.portfolio_volatility == bnd.volatility

    def test_zero_volatility_asset_takes_everything(self, aapl):
        cash = Asset("CASH", "0.02", "0")
        result = TwoAssetOptimizer.minimum_variance(cash, aapl, Decimal("0"))
        assert result.weight_a == Decimal("1")
        assert result.portfolio_volatility == Decimal("0")

    def test_both_zero_volatility_is_degenerate(self):
        a = Asset("A", "0.02", "0")
        b = Asset("B", "0.03", "0")
        with pytest.raises(DegenerateCaseError):
            TwoAssetOptimizer.minimum_variance(a, b, Decimal("0"))

    def test_correlation_out_of_range(self, aapl, bnd):
        with pytest.raises(InvalidCorrelationError):
            TwoAssetOptimizer.minimum_variance(aapl, bnd, Decimal("1.01"))

    def test_portfolio_has_no_sharpe(self, aapl, bnd):
        result = minimum_variance_portfolio(aapl, bnd, RHO)
        assert result.sharpe_ratio is None
        assert set(result.weights) == {"aapl", "bnd"}

    def test_matches_slsqp(self, aapl, bnd):
        minimize = pytest.importorskip("scipy.optimize").minimize
        sa, sb, rho = 0.25, 0.05, -0.1
        cov = np.array([[sa * sa, sa * sb * rho], [sa * sb * rho, sb * sb]])
        res = minimize(
            lambda w: w @ cov @ w,
            np.array([0.5, 0.5]),
            method='SLSQP',
            constraints=[{'type': 'eq', 'fun': lambda w: np.sum(w) - 1}],
            options={'ftol': 1e-14},
        )
        result = TwoAssetOptimizer.minimum_variance(aapl, bnd, RHO)
        assert float(result.weight_a) == pytest.approx(res.x[0], abs=1e-4)


# ═══════════════════════════════════════════════════════════════════════════ #
# Tangency                                                                     #
# ═══════════════════════════════════════════════════════════════════════════ #


class TestTangency:
    def test_weights_sum_to_one(self, aapl, bnd):
        result = tangency_portfolio(aapl, bnd, RHO, RF)
        assert close(result.weight_sum, 1)

    def test_sharpe_beats_both_corners(self):
        a = Asset("A", "0.10", "0.20")
        b = Asset("B", "0.06", "0.10")
        rho, rf = Decimal("0.3"), Decimal("0.02")
        result = tangency_portfolio(a, b, rho, rf)
        assert result.sharpe_ratio >= sharpe_ratio(a.expected_return, a.volatility, rf)
        assert result.sharpe_ratio >= sharpe_ratio(b.expected_return, b.volatility, rf)

    def test_zero_denominator_falls_back_to_minimum_variance(self):
        # Both excess returns zero -> denominator zero
        a = Asset("A", "0.03", "0.20")
        b = Asset("B", "0.03", "0.10")
        result = tangency_portfolio(a, b, Decimal("0.2"), Decimal("0.03"))
        mvp = minimum_variance_portfolio(a, b, Decimal("0.2"))
        assert dict(result.weights) == dict(mvp.weights)

    def test_matches_slsqp(self, aapl, bnd):
        minimize = pytest.importorskip("scipy.optimize").minimize
        mu = np.array([0.12, 0.03])
        sa, sb, rho = 0.25, 0.05, -0.1
        cov = np.array([[sa * sa, sa * sb * rho], [sa * sb * rho, sb * sb]])

        def neg_sharpe(w):
            return -(w @ mu - 0.03) / np.sqrt(w @ cov @ w)

        res = minimize(
            neg_sharpe,
            np.array([0.5, 0.5]),
            method='SLSQP',
            constraints=[{'type': 'eq', 'fun': lambda w: np.sum(w) - 1}],
            options={'ftol': 1e-14},
        )
        result = tangency_portfolio(aapl, bnd, RHO, RF)
        assert float(result.weights["aapl"]) == pytest.approx(res.x[0], abs=1e-3)


# ═══════════════════════════════════════════════════════════════════════════ #
# Target return                                                                #
# ═══════════════════════════════════════════════════════════════════════════ #


class TestTargetReturn:
    def test_target_equal_to_first_asset_return(self, aapl, bnd):
        result = target_return_portfolio(aapl, bnd, RHO, aapl.expected_return)
        assert close(result.weights["aapl"], 1)
        assert close(result.weights["bnd"], 0)

    def test_interpolates_linearly(self, aapl, bnd):
        result = target_return_portfolio(aapl, bnd, RHO, Decimal("0.075"))
        assert result.weights["aapl"] == Decimal("0.5")
        assert result.expected_return == Decimal("0.075")
        assert result.sharpe_ratio is None

    def test_out_of_range_target(self, aapl, bnd):
        with pytest.raises(UnattainableReturnError):
            target_return_portfolio(aapl, bnd, RHO, Decimal("0.15"))
        with pytest.raises(UnattainableReturnError):
            target_return_portfolio(aapl, bnd, RHO, Decimal("0.01"))

    def test_equal_returns_use_minimum_variance(self):
        a = Asset("A", "0.05", "0.2")
        b = Asset("B", "0.05", "0.1")
        result = target_return_portfolio(a, b, Decimal("0"), Decimal("0.05"))
        mvp = minimum_variance_portfolio(a, b, Decimal("0"))
        assert dict(result.weights) == dict(mvp.weights)
