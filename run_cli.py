"""
CLI entry point for the optimizer.

Usage:
    python run_cli.py --file assumptions.csv                      # Max Sharpe portfolio
    python run_cli.py --file assumptions.csv --mode min-variance  # Minimum variance
    python run_cli.py --file book.xlsx --sheet Inputs             # Specify sheet name
    python run_cli.py --file returns.csv --from-returns           # Estimate from returns

For installed package, use: mk-optimize
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from markowitz_engine.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
