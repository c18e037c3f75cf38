"""
Efficient Frontier
==================

Samples the efficient frontier: the set of portfolios offering the highest
expected return for each level of risk.

Two assets:
    Target returns are spaced evenly from the minimum variance portfolio's
    return up to the highest single-asset return, and each target is solved
    exactly with optimize_target_return(). Targets that cannot be reached
    without shorting are dropped.

Three or more assets:
    Without an exact N-asset solver, the frontier is approximated by the
    equal-weighted portfolio plus one corner portfolio per asset. The
    equal-weighted portfolio also stands in for the minimum variance point.
"""

import logging
from decimal import Decimal, localcontext
from typing import Any, List, Optional, Sequence

from markowitz_engine.config import DECIMAL_PRECISION, DEFAULT_FRONTIER_POINTS, DEFAULT_RISK_FREE_RATE
from markowitz_engine.core.candidates import build_portfolio, corner_weights, equal_weights
from markowitz_engine.core.errors import (
    InsufficientAssetsError,
    InsufficientFrontierPointsError,
    InsufficientPointsError,
    MismatchedMatrixSizeError,
    OptimizationError,
    UnattainableReturnError,
)
from markowitz_engine.core.models import (
    Asset,
    CorrelationMatrix,
    EfficientFrontier,
    OptimizationResult,
    to_decimal,
)
from markowitz_engine.core.optimizer import (
    as_assets,
    find_minimum_variance,
    maximize_sharpe,
    optimize_target_return,
)
from markowitz_engine.core.validation import matrix_rows, validate_assets, validate_correlation_matrix

logger = logging.getLogger(__name__)


def generate_efficient_frontier(
    assets: Sequence[Any],
    correlation_matrix: CorrelationMatrix,
    points: int = DEFAULT_FRONTIER_POINTS,
    risk_free_rate=DEFAULT_RISK_FREE_RATE
) -> EfficientFrontier:
    """
    Generate the efficient frontier and its key portfolios.

    Args:
        assets: Two or more assets
        correlation_matrix: NxN correlation matrix
        points: Number of target returns to sample (two-asset case)
        risk_free_rate: Risk-free rate for the tangency portfolio

    Returns:
        EfficientFrontier with the sampled portfolios, minimum variance,
        maximum return and tangency portfolios

    Raises:
        InsufficientAssetsError: Fewer than two assets
        MismatchedMatrixSizeError: Matrix rows differ from the asset count
        InsufficientPointsError: ``points`` below two
        InsufficientFrontierPointsError: Fewer than two frontier points survive
    """
    assets = as_assets(assets)

    if len(assets) < 2:
        raise InsufficientAssetsError("Efficient frontier needs at least two assets")
    rows = matrix_rows(correlation_matrix)
    if len(assets) != rows:
        raise MismatchedMatrixSizeError(
            f"Correlation matrix has {rows} rows but there are {len(assets)} assets"
        )
    if points < 2:
        raise InsufficientPointsError(f"Need at least 2 frontier points, got {points}")

    if len(assets) == 2:
        return _two_asset_frontier(assets, correlation_matrix, points, risk_free_rate)
    return _multi_asset_frontier(assets, correlation_matrix, risk_free_rate)


def _two_asset_frontier(assets: List[Asset], correlation_matrix: CorrelationMatrix,
                        points: int, risk_free_rate) -> EfficientFrontier:
    min_var = find_minimum_variance(assets, correlation_matrix)
    max_ret = maximum_return_portfolio(assets)

    portfolios = []
    for target in target_returns(min_var.expected_return, max_ret.expected_return, points):
        try:
            portfolios.append(optimize_target_return(assets, correlation_matrix, target))
        except UnattainableReturnError:
            logger.debug("Frontier target %s unattainable; skipped", target)

    if len(portfolios) < 2:
        raise InsufficientFrontierPointsError(
            f"Only {len(portfolios)} attainable frontier point(s)"
        )

    tangency = maximize_sharpe(assets, correlation_matrix, risk_free_rate)

    return EfficientFrontier(
        portfolios=tuple(portfolios),
        min_variance_portfolio=min_var,
        max_return_portfolio=max_ret,
        tangency_portfolio=tangency,
    )


def _multi_asset_frontier(assets: List[Asset], correlation_matrix: CorrelationMatrix,
                          risk_free_rate) -> EfficientFrontier:
    validate_correlation_matrix(correlation_matrix, len(assets))
    validate_assets(assets)

    equal_weighted = build_portfolio(assets, equal_weights(assets), correlation_matrix)
    corners = [
        build_portfolio(assets, corner_weights(assets, focus), correlation_matrix)
        for focus in assets
    ]

    tangency: Optional[OptimizationResult]
    try:
        tangency = maximize_sharpe(assets, correlation_matrix, risk_free_rate)
    except OptimizationError as e:
        logger.debug("No tangency portfolio for frontier: %s", e)
        tangency = None

    return EfficientFrontier(
        portfolios=tuple([equal_weighted] + corners),
        min_variance_portfolio=equal_weighted,
        max_return_portfolio=maximum_return_portfolio(assets),
        tangency_portfolio=tangency,
    )


def maximum_return_portfolio(assets: Sequence[Asset]) -> OptimizationResult:
    """100% in the highest expected return asset (first one on ties)."""
    best = max(assets, key=lambda asset: asset.expected_return)
    return OptimizationResult(
        weights={asset.key: (Decimal("1.0") if asset is best else Decimal("0.0")) for asset in assets},
        expected_return=best.expected_return,
        volatility=best.volatility,
        sharpe_ratio=None,
    )


def target_returns(min_return, max_return, points: int) -> List[Decimal]:
    """
    Evenly spaced Decimal targets from ``min_return`` to ``max_return``.

    The last target is exactly ``max_return``. Equal endpoints give a single target.
    """
    low = to_decimal(min_return)
    high = to_decimal(max_return)
    if low == high:
        return [low]

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        step = (high - low) / Decimal(points - 1)
        targets = [low + step * i for i in range(points - 1)]
    targets.append(high)
    return targets
