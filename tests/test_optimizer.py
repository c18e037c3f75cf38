"""Tests for the optimizer entry points."""

import dataclasses
from decimal import Decimal

import numpy as np
import pytest

from markowitz_engine import (
    Asset,
    PortfolioOptimizer,
    find_minimum_variance,
    maximize_sharpe,
    optimize_target_return,
    optimize_two_asset,
)
from markowitz_engine.core.errors import (
    InsufficientAssetsError,
    InvalidCorrelationMatrixError,
    InvalidVolatilityError,
    MismatchedMatrixSizeError,
    NoAssetsError,
    NotImplementedForNAssetsError,
    TooManyAssetsError,
    UnattainableReturnError,
)
from tests.conftest import close


def tangency_weight_a(a, b, rho, rf):
    ea, eb = a.expected_return - rf, b.expected_return - rf
    sa, sb = a.volatility, b.volatility
    return (ea * sb * sb - eb * sa * sb * rho) / (ea * sb * sb + eb * sa * sa - (ea + eb) * sa * sb * rho)


# ═══════════════════════════════════════════════════════════════════════════ #
# optimize_two_asset / maximize_sharpe (two assets)                            #
# ═══════════════════════════════════════════════════════════════════════════ #


class TestTwoAsset:
    def test_aapl_bnd_matches_closed_form(self, aapl, bnd, pair_matrix):
        result = maximize_sharpe([aapl, bnd], pair_matrix, Decimal("0.03"))
        expected = tangency_weight_a(aapl, bnd, Decimal("-0.1"), Decimal("0.03"))
        assert close(result.weights["aapl"], expected)
        assert close(result.weights["aapl"] + result.weights["bnd"], 1)
        assert result.sharpe_ratio is not None

    def test_default_risk_free_rate(self, aapl, bnd, pair_matrix):
        assert optimize_two_asset([aapl, bnd], pair_matrix) == \
            maximize_sharpe([aapl, bnd], pair_matrix, Decimal("0.03"))

    def test_weights_keyed_by_lower_case_identifier(self, aapl, bnd, pair_matrix):
        result = optimize_two_asset([aapl, bnd], pair_matrix)
        assert set(result.weights) == {"aapl", "bnd"}

    def test_accepts_mappings(self, pair_matrix):
        assets = [
            {"symbol": "AAPL", "expected_return": "0.12", "volatility": "0.25"},
            {"identifier": "BND", "expected_return": 0.03, "volatility": 0.05},
        ]
        result = optimize_two_asset(assets, pair_matrix)
        assert close(result.weight_sum, 1)

    def test_too_many_assets(self, three_assets, three_matrix):
        with pytest.raises(TooManyAssetsError):
            optimize_two_asset(three_assets, three_matrix)

    def test_insufficient_assets(self, aapl):
        with pytest.raises(InsufficientAssetsError):
            optimize_two_asset([aapl], [[1]])

    def test_matrix_size_mismatch(self, aapl, bnd, three_matrix):
        with pytest.raises(MismatchedMatrixSizeError):
            optimize_two_asset([aapl, bnd], three_matrix)

    def test_invalid_diagonal(self, aapl, bnd):
        with pytest.raises(InvalidCorrelationMatrixError):
            optimize_two_asset([aapl, bnd], [["0.9", "0.1"], ["0.1", 1]])

    def test_zero_volatility_rejected(self, aapl, pair_matrix):
        with pytest.raises(InvalidVolatilityError):
            optimize_two_asset([aapl, Asset("CASH", "0.02", "0")], pair_matrix)

    def test_result_is_immutable(self, aapl, bnd, pair_matrix):
        result = optimize_two_asset([aapl, bnd], pair_matrix)
        with pytest.raises(TypeError):
            result.weights["aapl"] = Decimal("1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.volatility = Decimal("0")

    def test_numpy_correlation_matrices(self, aapl, bnd):
        uncorrelated = optimize_two_asset([aapl, bnd], np.eye(2, dtype=int))
        assert uncorrelated == optimize_two_asset([aapl, bnd], [[1, 0], [0, 1]])
        single = optimize_two_asset([aapl, bnd], np.array([[1, -0.5], [-0.5, 1]], dtype=np.float32))
        assert close(single.weight_sum, 1)

    def test_identical_inputs_give_identical_results(self, aapl, bnd, pair_matrix):
        assert optimize_two_asset([aapl, bnd], pair_matrix) == optimize_two_asset([aapl, bnd], pair_matrix)


# ═══════════════════════════════════════════════════════════════════════════ #
# find_minimum_variance                                                        #
# ═══════════════════════════════════════════════════════════════════════════ #


class TestMinimumVariance:
    def test_no_assets(self):
        with pytest.raises(NoAssetsError):
            find_minimum_variance([], [])

    def test_single_asset(self, aapl):
        with pytest.raises(InsufficientAssetsError):
            find_minimum_variance([aapl], [[1]])

    def test_two_assets(self, aapl, bnd, pair_matrix):
        result = find_minimum_variance([aapl, bnd], pair_matrix)
        assert close(result.weight_sum, 1)
        assert result.sharpe_ratio is None
        assert result.volatility < bnd.volatility

    def test_three_assets_use_equal_weights(self, three_assets, three_matrix):
        result = find_minimum_variance(three_assets, three_matrix)
        assert result.weight_sum == Decimal("1")
        assert close(result.weights["spy"], Decimal(1) / Decimal(3))
        assert close(result.expected_return, Decimal("0.2") / Decimal(3))

    def test_four_assets_not_implemented(self, five_assets, five_matrix):
        with pytest.raises(NotImplementedForNAssetsError):
            find_minimum_variance(five_assets[:4], [row[:4] for row in five_matrix[:4]])


# ═══════════════════════════════════════════════════════════════════════════ #
# maximize_sharpe (N assets)                                                   #
# ═══════════════════════════════════════════════════════════════════════════ #


class TestMaximizeSharpe:
    def test_needs_two_assets(self, aapl):
        with pytest.raises(InsufficientAssetsError):
            maximize_sharpe([aapl], [[1]], Decimal("0.03"))
        with pytest.raises(InsufficientAssetsError):
            maximize_sharpe([], [], Decimal("0.03"))

    def test_five_assets_sum_to_one(self, five_assets, five_matrix):
        result = maximize_sharpe(five_assets, five_matrix, Decimal("0.02"))
        assert close(result.weight_sum, 1)
        assert result.is_fully_invested()
        assert result.volatility >= 0
        assert result.sharpe_ratio is not None

    @pytest.mark.parametrize("n", [3, 4, 5, 6, 7])
    @pytest.mark.parametrize("ret, vol", [("0.08", "0.2"), ("0.1", "0.3"), ("0.12", "0.25"), ("0.05", "0.07")])
    def test_identical_assets_get_equal_weights(self, n, ret, vol):
        assets = [Asset(f"A{i}", ret, vol) for i in range(n)]
        matrix = [[1] * n for _ in range(n)]
        result = maximize_sharpe(assets, matrix, Decimal("0.03"))
        for weight in result.weights.values():
            assert close(weight, Decimal(1) / Decimal(n))

    def test_invalid_matrix_rejected(self, three_assets):
        with pytest.raises(InvalidCorrelationMatrixError):
            maximize_sharpe(three_assets, [[1, 0, 0], [0, 1, 0], [0, 0, 2]], Decimal("0.03"))


# ═══════════════════════════════════════════════════════════════════════════ #
# optimize_target_return                                                       #
# ═══════════════════════════════════════════════════════════════════════════ #


class TestTargetReturn:
    def test_target_at_first_asset(self, aapl, bnd, pair_matrix):
        result = optimize_target_return([aapl, bnd], pair_matrix, Decimal("0.12"))
        assert close(result.weights["aapl"], 1)
        assert close(result.weights["bnd"], 0)

    def test_unattainable(self, aapl, bnd, pair_matrix):
        with pytest.raises(UnattainableReturnError):
            optimize_target_return([aapl, bnd], pair_matrix, Decimal("0.2"))

    def test_more_than_two_assets(self, three_assets, three_matrix):
        with pytest.raises(NotImplementedForNAssetsError):
            optimize_target_return(three_assets, three_matrix, Decimal("0.05"))

    def test_single_asset(self, aapl):
        with pytest.raises(InsufficientAssetsError):
            optimize_target_return([aapl], [[1]], Decimal("0.05"))


# ═══════════════════════════════════════════════════════════════════════════ #
# PortfolioOptimizer                                                           #
# ═══════════════════════════════════════════════════════════════════════════ #


class TestPortfolioOptimizer:
    def test_wraps_functions(self, aapl, bnd, pair_matrix):
        optimizer = PortfolioOptimizer([aapl, bnd], pair_matrix)
        assert optimizer.n_assets == 2
        assert optimizer.asset_names == ["AAPL", "BND"]
        assert optimizer.tangent_portfolio() == optimize_two_asset([aapl, bnd], pair_matrix)
        assert optimizer.minimum_variance_portfolio() == find_minimum_variance([aapl, bnd], pair_matrix)

    def test_summary_report(self, aapl, bnd, pair_matrix):
        report = PortfolioOptimizer([aapl, bnd], pair_matrix).summary_report(target_return="0.08")
        assert "Minimum Variance Portfolio" in report
        assert "Sharpe Ratio" in report
        assert "Target Return Portfolio (0.08)" in report

    def test_summary_report_marks_unavailable_sections(self, five_assets, five_matrix):
        report = PortfolioOptimizer(five_assets, five_matrix).summary_report()
        assert "Not available" in report
        assert "not_implemented_for_n_assets" in report
