"""
Decimal math helpers.

Square roots are taken with Newton's method on ``decimal.Decimal`` values
instead of ``math.sqrt`` so that volatilities carry no binary floating-point
rounding.
"""

from decimal import Decimal, localcontext
from typing import Optional

from markowitz_engine.config import DECIMAL_PRECISION, SQRT_MAX_ITERATIONS, SQRT_TOLERANCE
from markowitz_engine.core.models import ONE, ZERO, to_decimal

TWO = Decimal("2")


def sqrt_decimal(
    value,
    max_iterations: int = SQRT_MAX_ITERATIONS,
    tolerance: Decimal = SQRT_TOLERANCE,
    precision: Optional[int] = None
) -> Decimal:
    """
    Square root by Newton-Raphson iteration.

    Formula: x_{n+1} = (x_n + target / x_n) / 2

    The seed is ``target / 2``, or ``target`` itself when ``target < 1``.
    Iteration stops as soon as two successive estimates differ by less than
    ``tolerance``, or after ``max_iterations`` steps, whichever comes first.

    Args:
        value: Non-negative number (anything accepted by to_decimal)
        max_iterations: Upper bound on Newton steps (default: 20)
        tolerance: Convergence threshold (default: 1e-11)
        precision: Decimal significant digits (default: DECIMAL_PRECISION)

    Returns:
        Square root as a Decimal

    Raises:
        ValueError: If value is negative

    Example:
        >>> sqrt_decimal(Decimal("4"))
        Decimal('2')
    """
    target = to_decimal(value)
    if target == ZERO:
        return ZERO
    if target < ZERO:
        raise ValueError(f"math domain error: sqrt of negative value {target}")

    with localcontext() as ctx:
        ctx.prec = precision or DECIMAL_PRECISION

        current = target if target < ONE else target / TWO

        for _ in range(max_iterations):
            nxt = (current + target / current) / TWO
            if abs(nxt - current) < tolerance:
                return +nxt
            current = nxt

        return +current
