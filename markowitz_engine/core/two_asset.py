"""
Two-Asset Analytical Solver
===========================

Closed-form Markowitz solutions for portfolios of exactly two assets.

Theory Background:
------------------
For assets A and B with volatilities sA, sB and correlation rho, a portfolio
with weights (wA, wB = 1 - wA) has

    sigma_p^2 = wA^2 sA^2 + wB^2 sB^2 + 2 wA wB sA sB rho

Minimum Variance Portfolio (set d(sigma_p^2)/d(wA) = 0):

    wA = (sB^2 - sA sB rho) / (sA^2 + sB^2 - 2 sA sB rho)

Tangency Portfolio (maximum Sharpe ratio), with excess returns
eA = rA - rf and eB = rB - rf:

    wA = (eA sB^2 - eB sA sB rho) / (eA sB^2 + eB sA^2 - (eA + eB) sA sB rho)

Target Return: with only two assets the budget and return constraints pin
the weights down completely, so the frontier portfolio for return R is

    wA = (R - rB) / (rA - rB)

References:
    - Markowitz, H. (1952). "Portfolio Selection"
    - Bodie, Kane, Marcus (2021). "Investments", Chapter 7
"""

import logging
from decimal import Decimal, localcontext

from markowitz_engine.config import DECIMAL_PRECISION
from markowitz_engine.core.errors import (
    DegenerateCaseError,
    InvalidCorrelationError,
    InvalidVolatilityError,
    UnattainableReturnError,
)
from markowitz_engine.core.metrics import sharpe_ratio, two_asset_volatility
from markowitz_engine.core.models import (
    ONE,
    ZERO,
    Asset,
    OptimizationResult,
    TwoAssetResult,
    to_decimal,
)
from markowitz_engine.core.validation import MINUS_ONE

logger = logging.getLogger(__name__)


class TwoAssetOptimizer:
    """
    Analytical minimum variance solver for two assets.

    Only volatilities and the correlation matter here; expected returns are
    ignored. Stateless: all methods are static.

    Example:
        >>> a = Asset("STOCK", "0.12", "0.20")
        >>> b = Asset("BOND", "0.04", "0.05")
        >>> result = TwoAssetOptimizer.minimum_variance(a, b, Decimal("0.2"))
        >>> result.weight_a + result.weight_b == 1
        True
    """

    @staticmethod
    def minimum_variance(asset_a: Asset, asset_b: Asset, correlation) -> TwoAssetResult:
        """
        Find the minimum variance mix of two assets.

        Special cases:
            - One asset has zero volatility: hold 100% of it
            - rho == 1: hold 100% of the lower-volatility asset

        Args:
            asset_a: First asset
            asset_b: Second asset
            correlation: Correlation coefficient between the two

        Returns:
            TwoAssetResult with weight_a, weight_b and portfolio_volatility

        Raises:
            InvalidCorrelationError: If correlation is outside [-1, 1]
            InvalidVolatilityError: If either volatility is negative
            DegenerateCaseError: If both volatilities are zero
        """
        rho = to_decimal(correlation)
        TwoAssetOptimizer._validate_inputs(asset_a, asset_b, rho)

        sigma_a = asset_a.volatility
        sigma_b = asset_b.volatility

        if sigma_a == ZERO:
            return TwoAssetResult(Decimal("1.0"), Decimal("0.0"), ZERO)
        if sigma_b == ZERO:
            return TwoAssetResult(Decimal("0.0"), Decimal("1.0"), ZERO)

        if rho == ONE:
            # No diversification benefit: the whole frontier is a line
            if sigma_a < sigma_b:
                return TwoAssetResult(Decimal("1.0"), Decimal("0.0"), sigma_a)
            return TwoAssetResult(Decimal("0.0"), Decimal("1.0"), sigma_b)

        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            sigma_a_sq = sigma_a * sigma_a
            sigma_b_sq = sigma_b * sigma_b
            sigma_ab = sigma_a * sigma_b * rho

            numerator = sigma_b_sq - sigma_ab
            denominator = sigma_a_sq + sigma_b_sq - Decimal("2") * sigma_ab

            weight_a = numerator / denominator
            weight_b = Decimal("1.0") - weight_a

        portfolio_volatility = two_asset_volatility(weight_a, weight_b, sigma_a, sigma_b, rho)
        return TwoAssetResult(weight_a, weight_b, portfolio_volatility)

    @staticmethod
    def _validate_inputs(asset_a: Asset, asset_b: Asset, rho: Decimal) -> None:
        if rho > ONE or rho < MINUS_ONE:
            raise InvalidCorrelationError(f"Correlation {rho} is outside [-1, 1]")
        if asset_a.volatility < ZERO or asset_b.volatility < ZERO:
            raise InvalidVolatilityError("Volatility cannot be negative")
        if asset_a.volatility == ZERO and asset_b.volatility == ZERO:
            raise DegenerateCaseError("Both assets have zero volatility")


def _two_asset_weights(asset_a: Asset, asset_b: Asset, weight_a: Decimal, weight_b: Decimal):
    return {asset_a.key: weight_a, asset_b.key: weight_b}


def minimum_variance_portfolio(asset_a: Asset, asset_b: Asset, correlation) -> OptimizationResult:
    """
    Minimum variance portfolio of two assets as an OptimizationResult.

    No risk-free rate is involved, so ``sharpe_ratio`` is None.
    """
    result = TwoAssetOptimizer.minimum_variance(asset_a, asset_b, correlation)

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        portfolio_return = (
            asset_a.expected_return * result.weight_a
            + asset_b.expected_return * result.weight_b
        )

    return OptimizationResult(
        weights=_two_asset_weights(asset_a, asset_b, result.weight_a, result.weight_b),
        expected_return=portfolio_return,
        volatility=result.portfolio_volatility,
        sharpe_ratio=None,
    )


def tangency_portfolio(asset_a: Asset, asset_b: Asset, correlation, risk_free_rate) -> OptimizationResult:
    """
    Tangency (maximum Sharpe ratio) portfolio of two assets.

    Weights may be negative (short positions) when one asset dominates.
    If the closed-form denominator is exactly zero the problem has no unique
    tangency point and the minimum variance portfolio is returned instead.

    Args:
        asset_a: First asset
        asset_b: Second asset
        correlation: Correlation between A and B
        risk_free_rate: Risk-free rate for excess returns and the Sharpe ratio

    Returns:
        OptimizationResult with the Sharpe ratio filled in
    """
    rho = to_decimal(correlation)
    rf = to_decimal(risk_free_rate)
    sigma_a = asset_a.volatility
    sigma_b = asset_b.volatility

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        excess_a = asset_a.expected_return - rf
        excess_b = asset_b.expected_return - rf

        sigma_a_sq = sigma_a * sigma_a
        sigma_b_sq = sigma_b * sigma_b
        cov_ab = sigma_a * sigma_b * rho

        numerator = excess_a * sigma_b_sq - excess_b * cov_ab
        denominator = (
            excess_a * sigma_b_sq
            + excess_b * sigma_a_sq
            - (excess_a + excess_b) * cov_ab
        )

    if denominator == ZERO:
        logger.debug("Tangency denominator is zero; falling back to minimum variance")
        return minimum_variance_portfolio(asset_a, asset_b, rho)

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        weight_a = numerator / denominator
        weight_b = ONE - weight_a
        portfolio_return = asset_a.expected_return * weight_a + asset_b.expected_return * weight_b

    portfolio_vol = two_asset_volatility(weight_a, weight_b, sigma_a, sigma_b, rho)

    return OptimizationResult(
        weights=_two_asset_weights(asset_a, asset_b, weight_a, weight_b),
        expected_return=portfolio_return,
        volatility=portfolio_vol,
        sharpe_ratio=sharpe_ratio(portfolio_return, portfolio_vol, rf),
    )


def validate_target_return(asset_a: Asset, asset_b: Asset, target_return: Decimal) -> None:
    """
    Raises:
        UnattainableReturnError: If target lies outside [min(rA, rB), max(rA, rB)]
    """
    low = min(asset_a.expected_return, asset_b.expected_return)
    high = max(asset_a.expected_return, asset_b.expected_return)
    if target_return < low or target_return > high:
        raise UnattainableReturnError(
            f"Target return {target_return} is outside the attainable range [{low}, {high}]"
        )


def target_return_portfolio(asset_a: Asset, asset_b: Asset, correlation, target_return) -> OptimizationResult:
    """
    Two-asset portfolio earning exactly ``target_return``.

    When both assets have the same expected return every mix hits the target,
    so the minimum variance mix is returned.

    Raises:
        UnattainableReturnError: If the target cannot be reached without shorting
    """
    rho = to_decimal(correlation)
    target = to_decimal(target_return)
    validate_target_return(asset_a, asset_b, target)

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return_diff = asset_a.expected_return - asset_b.expected_return

    if return_diff == ZERO:
        logger.debug("Assets have equal expected returns; using minimum variance mix")
        return minimum_variance_portfolio(asset_a, asset_b, rho)

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        weight_a = (target - asset_b.expected_return) / return_diff
        weight_b = ONE - weight_a

    portfolio_vol = two_asset_volatility(
        weight_a, weight_b, asset_a.volatility, asset_b.volatility, rho
    )

    return OptimizationResult(
        weights=_two_asset_weights(asset_a, asset_b, weight_a, weight_b),
        expected_return=target,
        volatility=portfolio_vol,
        sharpe_ratio=None,
    )
