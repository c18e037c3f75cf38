"""
markowitz_engine/config.py
--------------------------
Shared numeric configuration for the optimizer.

Every value here can be overridden per call through the keyword arguments of
the public functions; these are only the defaults.
"""

from decimal import Decimal

# ---------------------------------------------------------------------------
# Risk-free rate
# ---------------------------------------------------------------------------
# Annual risk-free rate used by optimize_two_asset() when the caller does not
# supply one, and by the frontier builder for its tangency portfolio.

DEFAULT_RISK_FREE_RATE: Decimal = Decimal("0.03")   # 3% p.a.

# ---------------------------------------------------------------------------
# Decimal square root (Newton-Raphson)
# ---------------------------------------------------------------------------
# Both bounds are part of the numeric contract: changing them changes the
# digits of every volatility the engine reports.

SQRT_MAX_ITERATIONS: int = 20
SQRT_TOLERANCE: Decimal = Decimal("0.00000000001")

# Significant digits for all engine arithmetic.
DECIMAL_PRECISION: int = 28

# Tolerance used when checking that weights sum to one.
WEIGHT_SUM_TOLERANCE: Decimal = Decimal("1e-9")

# ---------------------------------------------------------------------------
# N-asset candidate search
# ---------------------------------------------------------------------------
# Blend candidate = BLEND_EQUAL_SHARE * equal + BLEND_RETURN_SHARE * return-weighted

BLEND_EQUAL_SHARE: Decimal = Decimal("0.7")
BLEND_RETURN_SHARE: Decimal = Decimal("0.3")

# ---------------------------------------------------------------------------
# Efficient frontier / estimation
# ---------------------------------------------------------------------------

DEFAULT_FRONTIER_POINTS: int = 50
DEFAULT_PERIODS_PER_YEAR: int = 12   # monthly return data
