"""
Portfolio Optimizer - Markowitz Mean-Variance Engine
=====================================================

Entry points that validate inputs, dispatch to the two-asset analytical
solver or the N-asset candidate search, and assemble an OptimizationResult.

Functions:
    optimize_two_asset      - tangency portfolio of exactly two assets
    find_minimum_variance   - lowest-volatility portfolio
    maximize_sharpe         - highest Sharpe ratio portfolio
    optimize_target_return  - two-asset portfolio for a target return

Theory Background:
------------------
Portfolio Return:    E[Rp] = sum(w_i * E[R_i])
Portfolio Variance:  sigma_p^2 = w' Sigma w, Sigma_ij = sigma_i sigma_j rho_ij
Sharpe Ratio:        S = (E[Rp] - Rf) / sigma_p

Every call validates its inputs from scratch and holds no state, so calls are
independent and may run concurrently.

References:
    - Markowitz, H. (1952). "Portfolio Selection"
    - Merton, R.C. (1972). "An Analytic Derivation of the Efficient Portfolio Frontier"
"""

import logging
from decimal import Decimal, localcontext
from typing import Any, List, Mapping, Optional, Sequence

from markowitz_engine.config import DECIMAL_PRECISION, DEFAULT_RISK_FREE_RATE
from markowitz_engine.core.candidates import find_tangency_via_candidates
from markowitz_engine.core.errors import (
    InsufficientAssetsError,
    NoAssetsError,
    NotImplementedForNAssetsError,
    OptimizationError,
    TooManyAssetsError,
)
from markowitz_engine.core.metrics import expected_return, volatility
from markowitz_engine.core.models import (
    ONE,
    Asset,
    CorrelationMatrix,
    OptimizationResult,
    to_decimal,
)
from markowitz_engine.core.two_asset import (
    minimum_variance_portfolio,
    tangency_portfolio,
    target_return_portfolio,
)
from markowitz_engine.core.validation import (
    as_decimal_matrix,
    validate_assets,
    validate_correlation_matrix,
)

logger = logging.getLogger(__name__)


def as_asset(value: Any) -> Asset:
    """
    Accept an Asset or a mapping with ``identifier`` (or ``symbol``),
    ``expected_return`` and ``volatility`` keys.
    """
    if isinstance(value, Asset):
        return value
    if isinstance(value, Mapping):
        identifier = value.get("identifier", value.get("symbol"))
        if identifier is None:
            raise TypeError("Asset mapping needs an 'identifier' or 'symbol' key")
        return Asset(str(identifier), value["expected_return"], value["volatility"])
    raise TypeError(f"Cannot interpret {type(value).__name__} as an Asset")


def as_assets(assets: Sequence[Any]) -> List[Asset]:
    return [as_asset(a) for a in assets]


def _validate_two_asset_inputs(assets: Sequence[Asset], correlation_matrix: CorrelationMatrix) -> None:
    if len(assets) < 2:
        raise InsufficientAssetsError(f"Two assets required, got {len(assets)}")
    if len(assets) > 2:
        raise TooManyAssetsError(
            f"Two-asset optimization needs exactly 2 assets, got {len(assets)}"
        )
    validate_correlation_matrix(correlation_matrix, 2)
    validate_assets(assets)


def _validate_n_asset_inputs(assets: Sequence[Asset], correlation_matrix: CorrelationMatrix) -> None:
    validate_correlation_matrix(correlation_matrix, len(assets))
    validate_assets(assets)


def _pair_correlation(correlation_matrix: CorrelationMatrix) -> Decimal:
    return to_decimal(correlation_matrix[0][1])


def optimize_two_asset(
    assets: Sequence[Any],
    correlation_matrix: CorrelationMatrix,
    risk_free_rate=DEFAULT_RISK_FREE_RATE
) -> OptimizationResult:
    """
    Optimize a two-asset portfolio using the analytical tangency solution.

    The "optimal" two-asset portfolio is the one with the highest Sharpe
    ratio, measured against ``risk_free_rate`` (default 3%).

    Args:
        assets: Exactly two assets
        correlation_matrix: 2x2 correlation matrix
        risk_free_rate: Risk-free rate for the tangency portfolio

    Returns:
        OptimizationResult with weights, return, volatility and Sharpe ratio

    Raises:
        InsufficientAssetsError, TooManyAssetsError, MismatchedMatrixSizeError,
        InvalidCorrelationMatrixError, InvalidVolatilityError
    """
    assets = as_assets(assets)
    _validate_two_asset_inputs(assets, correlation_matrix)
    asset_a, asset_b = assets
    return tangency_portfolio(asset_a, asset_b, _pair_correlation(correlation_matrix), risk_free_rate)


def find_minimum_variance(assets: Sequence[Any], correlation_matrix: CorrelationMatrix) -> OptimizationResult:
    """
    Find the minimum variance portfolio.

    Dispatch by number of assets:
        0   -> NoAssetsError
        1   -> InsufficientAssetsError
        2   -> exact analytical solution
        3   -> equal weights (placeholder, see below)
        4+  -> NotImplementedForNAssetsError

    The three-asset branch is a placeholder kept for behavioural parity with
    earlier releases: it does not solve the Lagrangian, it returns the
    equal-weighted portfolio. Its weights are 1/3, 1/3 and 1 - 2/3 so that
    they sum to exactly one.

    Returns:
        OptimizationResult with ``sharpe_ratio`` None
    """
    assets = as_assets(assets)
    n = len(assets)

    if n == 0:
        raise NoAssetsError("No assets supplied")
    if n == 1:
        raise InsufficientAssetsError("Minimum variance needs at least two assets")

    if n == 2:
        _validate_two_asset_inputs(assets, correlation_matrix)
        asset_a, asset_b = assets
        return minimum_variance_portfolio(asset_a, asset_b, _pair_correlation(correlation_matrix))

    if n == 3:
        _validate_n_asset_inputs(assets, correlation_matrix)
        logger.debug("Three-asset minimum variance: using equal-weight placeholder")

        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            third = ONE / Decimal(3)
            weights_list = [third, third, ONE - third - third]

        weights = {asset.key: w for asset, w in zip(assets, weights_list)}
        return OptimizationResult(
            weights=weights,
            expected_return=expected_return(assets, weights_list),
            volatility=volatility(assets, weights_list, correlation_matrix),
            sharpe_ratio=None,
        )

    raise NotImplementedForNAssetsError(
        f"Minimum variance is not implemented for {n} assets"
    )


def maximize_sharpe(
    assets: Sequence[Any],
    correlation_matrix: CorrelationMatrix,
    risk_free_rate
) -> OptimizationResult:
    """
    Find the portfolio with the maximum Sharpe ratio.

    Two assets use the exact tangency formula. Three or more use the
    bounded candidate search (equal, return-weighted, inverse-volatility,
    corner and blended portfolios), which approximates the tangency point.

    Args:
        assets: Two or more assets
        correlation_matrix: NxN correlation matrix
        risk_free_rate: Risk-free rate for the Sharpe calculation

    Raises:
        InsufficientAssetsError: Fewer than two assets
        NoValidPortfoliosError: No candidate has positive return and volatility
    """
    assets = as_assets(assets)

    if len(assets) < 2:
        raise InsufficientAssetsError("Sharpe maximization needs at least two assets")

    if len(assets) == 2:
        _validate_two_asset_inputs(assets, correlation_matrix)
        asset_a, asset_b = assets
        return tangency_portfolio(
            asset_a, asset_b, _pair_correlation(correlation_matrix), risk_free_rate
        )

    _validate_n_asset_inputs(assets, correlation_matrix)
    logger.debug("Maximizing Sharpe over %d assets via candidate search", len(assets))
    return find_tangency_via_candidates(
        assets, as_decimal_matrix(correlation_matrix), to_decimal(risk_free_rate)
    )


def optimize_target_return(
    assets: Sequence[Any],
    correlation_matrix: CorrelationMatrix,
    target_return
) -> OptimizationResult:
    """
    Find the two-asset portfolio that earns ``target_return``.

    The target must lie between the two assets' expected returns.

    Raises:
        InsufficientAssetsError: Fewer than two assets
        NotImplementedForNAssetsError: More than two assets
        UnattainableReturnError: Target outside the attainable range
    """
    assets = as_assets(assets)

    if len(assets) < 2:
        raise InsufficientAssetsError("Target return optimization needs two assets")
    if len(assets) > 2:
        raise NotImplementedForNAssetsError(
            f"Target return optimization is not implemented for {len(assets)} assets"
        )

    _validate_two_asset_inputs(assets, correlation_matrix)
    asset_a, asset_b = assets
    return target_return_portfolio(
        asset_a, asset_b, _pair_correlation(correlation_matrix), target_return
    )


class PortfolioOptimizer:
    """
    Convenience wrapper binding a fixed universe of assets.

    Holds the assets, correlation matrix and risk-free rate so that the
    different optimizations can be run side by side. Inputs are validated
    again on every call by the underlying functions.

    Attributes:
        assets (List[Asset]): Assets in the universe
        correlation_matrix (List[List[Decimal]]): NxN correlation matrix
        rf_rate (Decimal): Risk-free rate (default: 3%)

    Example:
        >>> assets = [Asset("AAPL", "0.12", "0.25"), Asset("BND", "0.03", "0.05")]
        >>> optimizer = PortfolioOptimizer(assets, [[1, "-0.1"], ["-0.1", 1]])
        >>> result = optimizer.tangent_portfolio()
    """

    def __init__(
        self,
        assets: Sequence[Any],
        correlation_matrix: CorrelationMatrix,
        rf_rate=DEFAULT_RISK_FREE_RATE
    ):
        self.assets = as_assets(assets)
        self.correlation_matrix = as_decimal_matrix(correlation_matrix)
        self.rf_rate = to_decimal(rf_rate)

    @property
    def n_assets(self) -> int:
        return len(self.assets)

    @property
    def asset_names(self) -> List[str]:
        return [asset.identifier for asset in self.assets]

    def minimum_variance_portfolio(self) -> OptimizationResult:
        return find_minimum_variance(self.assets, self.correlation_matrix)

    def tangent_portfolio(self) -> OptimizationResult:
        return maximize_sharpe(self.assets, self.correlation_matrix, self.rf_rate)

    def optimize_for_target_return(self, target_return) -> OptimizationResult:
        return optimize_target_return(self.assets, self.correlation_matrix, target_return)

    def summary_report(self, target_return: Optional[Any] = None) -> str:
        """
        Generate a plain-text summary of the asset universe and its key portfolios.

        Portfolios that cannot be computed for this universe (e.g. minimum
        variance for more than three assets) are reported with the reason.
        """
        lines = []
        lines.append("=" * 70)
        lines.append("PORTFOLIO OPTIMIZATION SUMMARY REPORT")
        lines.append("=" * 70)

        lines.append("\n--- Individual Asset Statistics ---")
        lines.append(f"{'Asset':<12} {'Return':>12} {'Volatility':>12}")
        lines.append("-" * 38)
        for asset in self.assets:
            lines.append(
                f"{asset.identifier:<12} {float(asset.expected_return):>12.6f} "
                f"{float(asset.volatility):>12.6f}"
            )

        lines.append(f"\nRisk-free rate: {float(self.rf_rate):.4f} ({float(self.rf_rate) * 100:.2f}%)")

        sections = [
            ("Minimum Variance Portfolio (MVP)", self.minimum_variance_portfolio),
            ("Tangent Portfolio (Maximum Sharpe Ratio)", self.tangent_portfolio),
        ]
        if target_return is not None:
            sections.append(
                (f"Target Return Portfolio ({target_return})",
                 lambda: self.optimize_for_target_return(target_return))
            )

        for title, compute in sections:
            lines.append(f"\n--- {title} ---")
            try:
                result = compute()
            except OptimizationError as e:
                lines.append(f"Not available: {e} [{e.code}]")
                continue
            lines.extend(format_result(result))

        lines.append("\n" + "=" * 70)
        return "\n".join(lines)


def format_result(result: OptimizationResult) -> List[str]:
    """Render an OptimizationResult as report lines."""
    lines = ["Weights:"]
    for key, weight in result.weights.items():
        lines.append(f"  {key}: {float(weight):.6f} ({float(weight) * 100:.2f}%)")
    lines.append(
        f"Expected Return: {float(result.expected_return):.6f} "
        f"({float(result.expected_return) * 100:.2f}%)"
    )
    lines.append(
        f"Volatility: {float(result.volatility):.6f} ({float(result.volatility) * 100:.2f}%)"
    )
    if result.sharpe_ratio is not None:
        lines.append(f"Sharpe Ratio: {float(result.sharpe_ratio):.6f}")
    return lines
