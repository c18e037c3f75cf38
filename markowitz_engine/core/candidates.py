"""
N-Asset Candidate Search
========================

Approximate tangency portfolio for three or more assets.

There is no exact N-asset solver here. Instead a fixed, diverse set of
candidate weight vectors is evaluated and the one with the highest Sharpe
ratio wins:

    1. Equal weight             w_i = 1/N
    2. Return-proportional      w_i = r_i / sum(r)
    3. Inverse volatility       w_i = (1/s_i) / sum(1/s_j)
    4. Corner portfolios        100% in each asset (N candidates)
    5. Blend                    0.7 * equal + 0.3 * return-proportional

Every candidate sums to one by construction. The work is bounded (5 + N
candidates, each O(N^2) to price), so latency is deterministic.
"""

import logging
from decimal import Decimal, localcontext
from typing import Dict, List, Optional, Sequence

from markowitz_engine.config import BLEND_EQUAL_SHARE, BLEND_RETURN_SHARE, DECIMAL_PRECISION
from markowitz_engine.core.errors import NoValidPortfoliosError
from markowitz_engine.core.metrics import expected_return, sharpe_ratio, volatility
from markowitz_engine.core.models import ONE, ZERO, Asset, CorrelationMatrix, OptimizationResult

logger = logging.getLogger(__name__)

WeightMap = Dict[str, Decimal]


def equal_weights(assets: Sequence[Asset]) -> WeightMap:
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        weight = ONE / Decimal(len(assets))
    return {asset.key: weight for asset in assets}


def return_weights(assets: Sequence[Asset]) -> Optional[WeightMap]:
    """Weights proportional to expected return, or None when returns sum to zero."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        total_return = sum((asset.expected_return for asset in assets), ZERO)
        if total_return == ZERO:
            return None
        return {asset.key: asset.expected_return / total_return for asset in assets}


def inverse_volatility_weights(assets: Sequence[Asset]) -> WeightMap:
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        inverse_vols = [ONE / asset.volatility for asset in assets]
        total_inverse_vol = sum(inverse_vols, ZERO)
        return {
            asset.key: inv_vol / total_inverse_vol
            for asset, inv_vol in zip(assets, inverse_vols)
        }


def corner_weights(assets: Sequence[Asset], focus: Asset) -> WeightMap:
    return {asset.key: (ONE if asset.key == focus.key else ZERO) for asset in assets}


def blend_weights(first: WeightMap, second: WeightMap,
                  first_share: Decimal = BLEND_EQUAL_SHARE,
                  second_share: Decimal = BLEND_RETURN_SHARE) -> WeightMap:
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return {key: first[key] * first_share + second[key] * second_share for key in first}


def candidate_weights(assets: Sequence[Asset]) -> List[WeightMap]:
    """
    Generate the candidate weight vectors in evaluation order.

    The return-proportional and blend candidates are omitted when expected
    returns sum to zero, since their weights would be undefined.
    """
    equal = equal_weights(assets)
    candidates = [equal]

    by_return = return_weights(assets)
    if by_return is None:
        logger.debug("Expected returns sum to zero; skipping return-weighted candidates")
    else:
        candidates.append(by_return)

    candidates.append(inverse_volatility_weights(assets))
    candidates.extend(corner_weights(assets, focus) for focus in assets)

    if by_return is not None:
        candidates.append(blend_weights(equal, by_return))

    return candidates


def build_portfolio(assets: Sequence[Asset], weights: WeightMap,
                    correlation_matrix: CorrelationMatrix) -> OptimizationResult:
    """Price one candidate. The Sharpe ratio is left unset."""
    return OptimizationResult(
        weights=weights,
        expected_return=expected_return(assets, weights),
        volatility=volatility(assets, weights, correlation_matrix),
        sharpe_ratio=None,
    )


def generate_candidate_portfolios(assets: Sequence[Asset],
                                  correlation_matrix: CorrelationMatrix) -> List[OptimizationResult]:
    """
    Price all candidates and keep those with positive volatility and return.
    """
    portfolios = [
        build_portfolio(assets, weights, correlation_matrix)
        for weights in candidate_weights(assets)
    ]
    valid = [p for p in portfolios if p.volatility > ZERO and p.expected_return > ZERO]
    logger.debug("Candidate search: %d of %d candidates valid", len(valid), len(portfolios))
    return valid


def find_max_sharpe_portfolio(portfolios: Sequence[OptimizationResult],
                              risk_free_rate) -> OptimizationResult:
    """
    Attach Sharpe ratios and return the best portfolio.

    Sharpe ratios are compared as floats, so candidates that differ only in
    the last Decimal digits tie. Ties go to the earliest candidate.

    Raises:
        NoValidPortfoliosError: If ``portfolios`` is empty
    """
    if not portfolios:
        raise NoValidPortfoliosError("No candidate portfolio has positive return and volatility")

    scored = [
        p.with_sharpe(sharpe_ratio(p.expected_return, p.volatility, risk_free_rate))
        for p in portfolios
    ]
    return max(scored, key=lambda p: float(p.sharpe_ratio))


def find_tangency_via_candidates(assets: Sequence[Asset], correlation_matrix: CorrelationMatrix,
                                 risk_free_rate) -> OptimizationResult:
    """Approximate the N-asset tangency portfolio by candidate search."""
    candidates = generate_candidate_portfolios(assets, correlation_matrix)
    return find_max_sharpe_portfolio(candidates, risk_free_rate)
