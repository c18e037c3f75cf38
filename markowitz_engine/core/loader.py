"""
Asset Assumption Loader
=======================

Brings asset assumptions into the engine from tabular sources:
- CSV or Excel files with pre-computed assumptions
- In-memory pandas DataFrames
- Historical return series, from which assumptions are estimated

Assumptions table layout (one row per asset):

    symbol, expected_return, volatility, <SYM_1>, <SYM_2>, ..., <SYM_N>

where the trailing columns hold that asset's correlation row, in the same
order as the rows. CSV files are read as text so decimals keep every digit
as written; Excel values arrive as floats and go through ``str()``.
"""

from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from markowitz_engine.config import DEFAULT_PERIODS_PER_YEAR
from markowitz_engine.core.errors import InsufficientDataError, InvalidVolatilityError
from markowitz_engine.core.models import Asset, to_decimal

REQUIRED_COLUMNS = ("symbol", "expected_return", "volatility")

Assumptions = Tuple[List[Asset], List[List[Decimal]]]


class AssumptionLoader:
    """
    Load asset assumptions and correlation matrices for the optimizer.

    Example:
        >>> loader = AssumptionLoader()
        >>> assets, correlation = loader.load_assumptions("assumptions.csv")
    """

    def __init__(self, periods_per_year: int = DEFAULT_PERIODS_PER_YEAR, places: int = 10):
        """
        Args:
            periods_per_year: Observations per year in return data (12 = monthly)
            places: Decimal places kept for estimated statistics
        """
        self.periods_per_year = periods_per_year
        self.places = places

    def load_assumptions(self, file_path: Union[str, Path], sheet: Optional[str] = None) -> Assumptions:
        """
        Load assets and their correlation matrix from CSV or Excel.

        Args:
            file_path: Path to a .csv, .xlsx or .xls file
            sheet: Excel sheet name (default: first sheet)

        Returns:
            Tuple of (assets, correlation_matrix)
        """
        path = Path(file_path)
        if path.suffix.lower() in (".xlsx", ".xls"):
            df = pd.read_excel(path, sheet_name=sheet if sheet is not None else 0, engine="openpyxl")
        else:
            df = pd.read_csv(path, dtype=str, skipinitialspace=True)
        return self.from_frame(df)

    def from_frame(self, df: pd.DataFrame) -> Assumptions:
        """
        Parse an assumptions table already in memory.

        Raises:
            ValueError: If required columns or correlation columns are missing
        """
        df = df.rename(columns=lambda c: str(c).strip())
        lower = {c.lower(): c for c in df.columns}

        missing = [c for c in REQUIRED_COLUMNS if c not in lower]
        if missing:
            raise ValueError(f"Assumptions table is missing columns: {', '.join(missing)}")

        df = df.dropna(subset=[lower["symbol"]])
        symbols = [str(s).strip() for s in df[lower["symbol"]]]

        corr_columns = [c for c in df.columns if c.lower() not in REQUIRED_COLUMNS]
        if len(corr_columns) != len(symbols):
            raise ValueError(
                f"Expected {len(symbols)} correlation columns, found {len(corr_columns)}"
            )

        assets = [
            Asset(symbol, to_decimal(row[lower["expected_return"]]), to_decimal(row[lower["volatility"]]))
            for symbol, (_, row) in zip(symbols, df.iterrows())
        ]
        correlation = [
            [to_decimal(row[c]) for c in corr_columns]
            for _, row in df.iterrows()
        ]
        return assets, correlation

    def estimate_from_returns(self, returns: pd.DataFrame) -> Assumptions:
        """
        Estimate annualized assumptions from periodic historical returns.

        Rows with missing values are dropped. Means and standard deviations
        use population statistics (ddof=0):

            expected_return = mean * periods_per_year
            volatility      = std * sqrt(periods_per_year)

        The Pearson correlation matrix is symmetrized, clipped to [-1, 1] and
        given an exact unit diagonal so it passes validation.

        Args:
            returns: DataFrame with one column per asset (column name = identifier)

        Returns:
            Tuple of (assets, correlation_matrix)

        Raises:
            InsufficientDataError: Fewer than two complete observations
            InvalidVolatilityError: An asset's returns never vary
        """
        data = returns.dropna()
        if len(data) < 2:
            raise InsufficientDataError(
                f"Need at least 2 complete observations, got {len(data)}"
            )

        values = data.to_numpy(dtype=float)
        means = values.mean(axis=0) * self.periods_per_year
        stds = values.std(axis=0, ddof=0) * np.sqrt(self.periods_per_year)

        assets = [
            Asset(str(name), self._quantize(mean), self._quantize(std))
            for name, mean, std in zip(data.columns, means, stds)
        ]
        for asset in assets:
            if asset.volatility <= 0:
                raise InvalidVolatilityError(f"Returns for '{asset.identifier}' have zero variance")

        corr = np.corrcoef(values, rowvar=False)
        corr = np.clip((corr + corr.T) / 2, -1.0, 1.0)

        n = len(data.columns)
        matrix = [
            [Decimal("1") if i == j else self._quantize(corr[i, j]) for j in range(n)]
            for i in range(n)
        ]
        return assets, matrix

    def load_returns_csv(self, file_path: Union[str, Path], has_date_column: bool = True) -> Assumptions:
        """
        Load a CSV of periodic returns (first column optionally a date) and
        estimate assumptions from it.
        """
        df = pd.read_csv(file_path)
        if has_date_column:
            df = df.iloc[:, 1:]
        return self.estimate_from_returns(df.apply(pd.to_numeric, errors="coerce"))

    def _quantize(self, value: float) -> Decimal:
        return to_decimal(float(value)).quantize(Decimal(1).scaleb(-self.places))
