"""
Optimization error kinds.

Every failure the engine can report is a subclass of ``OptimizationError``
carrying a stable ``code`` string, so callers can either catch a specific
class or branch on ``err.code``.
"""


class OptimizationError(ValueError):
    """Base class for all optimizer failures."""

    code = "optimization_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)


class NoAssetsError(OptimizationError):
    code = "no_assets"


class InsufficientAssetsError(OptimizationError):
    code = "insufficient_assets"


class TooManyAssetsError(OptimizationError):
    code = "too_many_assets"


class MismatchedMatrixSizeError(OptimizationError):
    code = "mismatched_matrix_size"


class InvalidCorrelationMatrixError(OptimizationError):
    code = "invalid_correlation_matrix"


class InvalidCorrelationError(OptimizationError):
    """A single correlation coefficient lies outside [-1, 1]."""

    code = "invalid_correlation"


class InvalidVolatilityError(OptimizationError):
    code = "invalid_volatility"


class DegenerateCaseError(OptimizationError):
    """Both assets have zero volatility; no unique minimum exists."""

    code = "degenerate_case"


class DuplicateAssetError(OptimizationError):
    code = "duplicate_asset"


class UnattainableReturnError(OptimizationError):
    code = "unattainable_return"


class NoValidPortfoliosError(OptimizationError):
    code = "no_valid_portfolios"


class NotImplementedForNAssetsError(OptimizationError):
    code = "not_implemented_for_n_assets"


class InsufficientPointsError(OptimizationError):
    code = "insufficient_points"


class InsufficientFrontierPointsError(OptimizationError):
    code = "insufficient_frontier_points"


class InsufficientDataError(OptimizationError):
    code = "insufficient_data"
