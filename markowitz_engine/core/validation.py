"""
Input validation for the optimizer entry points.

The correlation matrix checks run in a fixed order and stop at the first
failure. Only a row-count mismatch against the number of assets is reported as
MismatchedMatrixSizeError; every other structural problem is reported as
InvalidCorrelationMatrixError, with the message naming the failed check.
"""

from decimal import Decimal
from typing import List, Sequence

from markowitz_engine.core.errors import (
    DuplicateAssetError,
    InvalidCorrelationMatrixError,
    InvalidVolatilityError,
    MismatchedMatrixSizeError,
)
from markowitz_engine.core.models import ONE, ZERO, Asset, CorrelationMatrix, to_decimal

MINUS_ONE = Decimal("-1")


def as_decimal_matrix(matrix: CorrelationMatrix) -> List[List[Decimal]]:
    """
    Copy a correlation matrix into a list of lists of Decimals.

    Raises:
        InvalidCorrelationMatrixError: If an entry is not a finite number
    """
    try:
        return [[to_decimal(value) for value in row] for row in matrix]
    except (TypeError, ValueError) as e:
        raise InvalidCorrelationMatrixError(f"Non-numeric correlation entry: {e}") from e


def matrix_rows(matrix: CorrelationMatrix) -> int:
    """
    Number of rows in a correlation matrix.

    Raises:
        InvalidCorrelationMatrixError: If the matrix or any row is not a sized sequence
    """
    try:
        return len(matrix)
    except TypeError:
        raise InvalidCorrelationMatrixError(
            f"Correlation matrix must be a sequence of sequences, got {type(matrix).__name__}"
        ) from None


def validate_correlation_matrix(matrix: CorrelationMatrix, size: int) -> None:
    """
    Validate an NxN correlation matrix against the expected dimension.

    Checks (in order):
        1. Row count equals ``size``
        2. Every row has ``size`` entries
        3. Symmetry: m[i][j] == m[j][i]
        4. Diagonal entries are exactly 1
        5. Every entry lies in [-1, 1]

    Args:
        matrix: Correlation matrix (sequence of rows)
        size: Number of assets the matrix must describe

    Raises:
        MismatchedMatrixSizeError: If the row count differs from ``size``
        InvalidCorrelationMatrixError: For any other structural failure
    """
    rows = matrix_rows(matrix)
    if rows != size:
        raise MismatchedMatrixSizeError(
            f"Correlation matrix has {rows} rows but there are {size} assets"
        )

    if not all(matrix_rows(row) == size for row in matrix):
        raise InvalidCorrelationMatrixError(f"Correlation matrix is not {size}x{size}")

    m = as_decimal_matrix(matrix)

    for i in range(size):
        for j in range(i + 1, size):
            if m[i][j] != m[j][i]:
                raise InvalidCorrelationMatrixError(
                    f"Correlation matrix is not symmetric at ({i}, {j})"
                )

    for i in range(size):
        if m[i][i] != ONE:
            raise InvalidCorrelationMatrixError(
                f"Diagonal entry ({i}, {i}) is {m[i][i]}, expected 1"
            )

    for i, row in enumerate(m):
        for j, value in enumerate(row):
            if value < MINUS_ONE or value > ONE:
                raise InvalidCorrelationMatrixError(
                    f"Correlation ({i}, {j}) = {value} is outside [-1, 1]"
                )


def validate_assets(assets: Sequence[Asset]) -> None:
    """
    Check per-asset invariants: positive volatility and unique weight keys.

    Raises:
        InvalidVolatilityError: If any asset has zero or negative volatility
        DuplicateAssetError: If two identifiers collide after lower-casing
    """
    seen = set()
    for asset in assets:
        if asset.volatility <= ZERO:
            raise InvalidVolatilityError(
                f"Asset '{asset.identifier}' has non-positive volatility {asset.volatility}"
            )
        if asset.key in seen:
            raise DuplicateAssetError(f"Duplicate asset identifier '{asset.identifier}'")
        seen.add(asset.key)
