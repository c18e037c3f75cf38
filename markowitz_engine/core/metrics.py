"""
Portfolio Metrics
=================

Pure functions computing portfolio statistics from weights and asset data.

Formulas:
    Portfolio return:    mu_p = sum(w_i * mu_i)
    Covariance:          cov_ij = sigma_i * sigma_j * rho_ij
    Portfolio variance:  sigma_p^2 = sum_i sum_j w_i * w_j * cov_ij
    Sharpe ratio:        (mu_p - rf) / sigma_p

Weights may be given either as a sequence aligned with ``assets`` or as a
mapping keyed by lower-cased identifier (missing keys count as zero).
"""

from decimal import Decimal, localcontext
from typing import List, Mapping, Sequence, Union

from markowitz_engine.config import DECIMAL_PRECISION
from markowitz_engine.core.decimal_math import TWO, sqrt_decimal
from markowitz_engine.core.models import ZERO, Asset, CorrelationMatrix, to_decimal
from markowitz_engine.core.validation import as_decimal_matrix

Weights = Union[Sequence[Decimal], Mapping[str, Decimal]]


def weight_vector(assets: Sequence[Asset], weights: Weights) -> List[Decimal]:
    """Return weights as a list aligned with ``assets``."""
    if isinstance(weights, Mapping):
        return [to_decimal(weights.get(asset.key, ZERO)) for asset in assets]
    if len(weights) != len(assets):
        raise ValueError(f"Got {len(weights)} weights for {len(assets)} assets")
    return [to_decimal(w) for w in weights]


def expected_return(assets: Sequence[Asset], weights: Weights) -> Decimal:
    """
    Expected portfolio return.

    Formula: mu_p = w^T * mu = sum(w_i * mu_i)
    """
    w = weight_vector(assets, weights)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return sum((wi * asset.expected_return for wi, asset in zip(w, assets)), ZERO)


def covariance(asset_i: Asset, asset_j: Asset, correlation) -> Decimal:
    """Covariance of two assets' returns: sigma_i * sigma_j * rho_ij."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return asset_i.volatility * asset_j.volatility * to_decimal(correlation)


def variance(assets: Sequence[Asset], weights: Weights, correlation_matrix: CorrelationMatrix) -> Decimal:
    """
    Portfolio variance using the full covariance double sum.

    Formula: sigma_p^2 = sum_i sum_j w_i * w_j * sigma_i * sigma_j * rho_ij
    """
    w = weight_vector(assets, weights)
    m = as_decimal_matrix(correlation_matrix)
    n = len(assets)

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        total = ZERO
        for i in range(n):
            for j in range(n):
                total += w[i] * w[j] * covariance(assets[i], assets[j], m[i][j])
        return total


def volatility_from_variance(var: Decimal) -> Decimal:
    """
    Standard deviation from variance via the Newton square root.

    A variance that came out negative only through decimal rounding (e.g. a
    perfectly hedged two-asset mix) is clamped to zero.
    """
    if var <= ZERO:
        return ZERO
    return sqrt_decimal(var)


def volatility(assets: Sequence[Asset], weights: Weights, correlation_matrix: CorrelationMatrix) -> Decimal:
    """Portfolio standard deviation: sqrt(w^T * Sigma * w)."""
    return volatility_from_variance(variance(assets, weights, correlation_matrix))


def sharpe_ratio(portfolio_return: Decimal, portfolio_volatility: Decimal, risk_free_rate) -> Decimal:
    """
    Sharpe ratio: (mu_p - rf) / sigma_p

    Returns 0 when the volatility is not positive instead of dividing by zero.
    """
    if portfolio_volatility <= ZERO:
        return ZERO
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return (portfolio_return - to_decimal(risk_free_rate)) / portfolio_volatility


def two_asset_variance(weight_a, weight_b, sigma_a, sigma_b, correlation) -> Decimal:
    """sigma_p^2 = wA^2 sA^2 + wB^2 sB^2 + 2 wA wB sA sB rho"""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        term1 = weight_a * weight_a * (sigma_a * sigma_a)
        term2 = weight_b * weight_b * (sigma_b * sigma_b)
        term3 = TWO * weight_a * weight_b * (sigma_a * sigma_b * correlation)
        return term1 + term2 + term3


def two_asset_volatility(weight_a, weight_b, sigma_a, sigma_b, correlation) -> Decimal:
    return volatility_from_variance(
        two_asset_variance(weight_a, weight_b, sigma_a, sigma_b, correlation)
    )
