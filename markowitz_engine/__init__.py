"""
Markowitz Engine - Mean-Variance Portfolio Optimization
=======================================================

Decimal-precision Markowitz optimizer for small asset universes.

Usage:
    from markowitz_engine import Asset, maximize_sharpe, find_minimum_variance
    from markowitz_engine.core.loader import AssumptionLoader

Functions:
    optimize_two_asset - Tangency portfolio of exactly two assets
    find_minimum_variance - Lowest-volatility portfolio
    maximize_sharpe - Highest Sharpe ratio portfolio
    optimize_target_return - Two-asset portfolio for a target return
    generate_efficient_frontier - Sampled frontier with its key portfolios

Classes:
    Asset - Return assumptions for one instrument
    OptimizationResult - Weights plus portfolio statistics
    PortfolioOptimizer - Convenience wrapper over a fixed universe
    AssumptionLoader - Assumptions from CSV/Excel or historical returns
"""

from markowitz_engine.core.errors import OptimizationError
from markowitz_engine.core.frontier import generate_efficient_frontier
from markowitz_engine.core.loader import AssumptionLoader
from markowitz_engine.core.models import Asset, EfficientFrontier, OptimizationResult
from markowitz_engine.core.optimizer import (
    PortfolioOptimizer,
    find_minimum_variance,
    maximize_sharpe,
    optimize_target_return,
    optimize_two_asset,
)

__version__ = "1.0.0"

__all__ = [
    "Asset",
    "AssumptionLoader",
    "EfficientFrontier",
    "OptimizationError",
    "OptimizationResult",
    "PortfolioOptimizer",
    "find_minimum_variance",
    "generate_efficient_frontier",
    "maximize_sharpe",
    "optimize_target_return",
    "optimize_two_asset",
]
