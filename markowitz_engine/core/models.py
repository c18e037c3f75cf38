"""
Value types shared by the optimizer modules.

All numeric fields are ``decimal.Decimal``. Inputs may be given as strings,
ints, floats or Decimals; floats are routed through ``str()`` so that ``0.1``
becomes ``Decimal("0.1")`` rather than its binary expansion.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from markowitz_engine.config import WEIGHT_SUM_TOLERANCE

Number = Union[Decimal, int, float, str]
CorrelationMatrix = Sequence[Sequence[Number]]

ZERO = Decimal("0")
ONE = Decimal("1")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a number-like value to a finite Decimal.

    Numpy scalars (e.g. entries of an ``np.ndarray``) are unwrapped first.

    Raises:
        TypeError: If the value is not a number or numeric string
        ValueError: If the value is not finite or cannot be parsed
    """
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got bool {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Cannot parse {value!r} as a decimal number") from None
    else:
        raise TypeError(f"Expected a number, got {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Expected a finite number, got {value!r}")
    return result


def weight_key(identifier: str) -> str:
    """Key under which an asset's weight is stored (lower-cased identifier)."""
    return identifier.lower()


@dataclass(frozen=True)
class Asset:
    """
    A single instrument's return assumptions.

    Attributes:
        identifier: Ticker or other name (weights are keyed by its lower-case form)
        expected_return: Annualized fractional return, e.g. 0.08 for 8%
        volatility: Annualized standard deviation of returns
    """

    identifier: str
    expected_return: Decimal
    volatility: Decimal

    def __post_init__(self):
        if not isinstance(self.identifier, str):
            raise TypeError(f"Asset identifier must be a string, got {type(self.identifier).__name__}")
        object.__setattr__(self, "expected_return", to_decimal(self.expected_return))
        object.__setattr__(self, "volatility", to_decimal(self.volatility))

    @property
    def key(self) -> str:
        return weight_key(self.identifier)


@dataclass(frozen=True)
class OptimizationResult:
    """
    An optimized portfolio.

    ``weights`` maps lower-cased asset identifiers to their allocation and is
    exposed as a read-only mapping. ``sharpe_ratio`` is None for portfolios
    chosen without reference to a risk-free rate (minimum variance, target
    return).
    """

    weights: Mapping[str, Decimal]
    expected_return: Decimal
    volatility: Decimal
    sharpe_ratio: Optional[Decimal] = None

    def __post_init__(self):
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    @property
    def weight_sum(self) -> Decimal:
        return sum(self.weights.values(), ZERO)

    def is_fully_invested(self, tolerance: Decimal = WEIGHT_SUM_TOLERANCE) -> bool:
        return abs(self.weight_sum - ONE) <= tolerance

    def with_sharpe(self, sharpe_ratio: Decimal) -> "OptimizationResult":
        return OptimizationResult(
            weights=self.weights,
            expected_return=self.expected_return,
            volatility=self.volatility,
            sharpe_ratio=sharpe_ratio,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "weights": dict(self.weights),
            "expected_return": self.expected_return,
            "volatility": self.volatility,
            "sharpe_ratio": self.sharpe_ratio,
        }


@dataclass(frozen=True)
class TwoAssetResult:
    """Output of the analytical two-asset minimum variance solver."""

    weight_a: Decimal
    weight_b: Decimal
    portfolio_volatility: Decimal


@dataclass(frozen=True)
class EfficientFrontier:
    """A sampled efficient frontier plus its key portfolios."""

    portfolios: Tuple[OptimizationResult, ...]
    min_variance_portfolio: OptimizationResult
    max_return_portfolio: OptimizationResult
    tangency_portfolio: Optional[OptimizationResult] = None
