"""Core computational modules for mean-variance optimization."""

from markowitz_engine.core.models import Asset, EfficientFrontier, OptimizationResult, TwoAssetResult
from markowitz_engine.core.optimizer import (
    PortfolioOptimizer,
    find_minimum_variance,
    maximize_sharpe,
    optimize_target_return,
    optimize_two_asset,
)
from markowitz_engine.core.two_asset import TwoAssetOptimizer

__all__ = [
    "Asset",
    "EfficientFrontier",
    "OptimizationResult",
    "PortfolioOptimizer",
    "TwoAssetOptimizer",
    "TwoAssetResult",
    "find_minimum_variance",
    "maximize_sharpe",
    "optimize_target_return",
    "optimize_two_asset",
]
