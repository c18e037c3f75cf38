"""
Command-line Runner for the Markowitz Engine
=============================================

Loads asset assumptions from a CSV or Excel file, runs one optimization and
logs the result.

Usage:
    mk-optimize --file assumptions.csv                        # max Sharpe (default)
    mk-optimize --file assumptions.csv --mode min-variance
    mk-optimize --file assumptions.csv --mode target-return --target 0.08
    mk-optimize --file assumptions.xlsx --sheet Inputs --mode frontier --points 20
    mk-optimize --file returns.csv --from-returns              # estimate from history

Exit codes:
    0 - success
    1 - invalid input or the optimization could not be performed
"""

import argparse
import logging
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from markowitz_engine.config import (
    DEFAULT_FRONTIER_POINTS,
    DEFAULT_PERIODS_PER_YEAR,
    DEFAULT_RISK_FREE_RATE,
)
from markowitz_engine.core.errors import OptimizationError
from markowitz_engine.core.frontier import generate_efficient_frontier
from markowitz_engine.core.loader import AssumptionLoader
from markowitz_engine.core.models import to_decimal
from markowitz_engine.core.optimizer import (
    find_minimum_variance,
    format_result,
    maximize_sharpe,
    optimize_target_return,
    optimize_two_asset,
)

MODES = ("two-asset", "min-variance", "max-sharpe", "target-return", "frontier")


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logger(script_name: str = "markowitz_engine", log_dir: Optional[str] = "logs") -> logging.Logger:
    """
    Sets up a logger that writes to console and, unless ``log_dir`` is None,
    to a timestamped file.

    Args:
        script_name: Name of the script (used in log filename)
        log_dir: Directory for log files (created if missing)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(script_name)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    # Clear existing handlers (prevent duplicates)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y_%m_%d_%H%M")
        file_handler = logging.FileHandler(log_path / f"log_{script_name}_{timestamp}.txt", encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


# =============================================================================
# RUNNER
# =============================================================================

def run_optimization(
    assets,
    correlation_matrix,
    mode: str = "max-sharpe",
    rf_rate: Decimal = DEFAULT_RISK_FREE_RATE,
    target: Optional[Decimal] = None,
    points: int = DEFAULT_FRONTIER_POINTS,
    logger: Optional[logging.Logger] = None
):
    """
    Run one optimization mode and log the outcome.

    Returns:
        OptimizationResult, or EfficientFrontier for ``mode="frontier"``
    """
    if logger is None:
        logger = logging.getLogger("markowitz_engine")

    logger.info("=" * 70)
    logger.info("  MEAN-VARIANCE OPTIMIZATION")
    logger.info("=" * 70)
    logger.info(f"  Assets: {', '.join(a.identifier for a in assets)}")
    logger.info(f"  Mode: {mode}")
    logger.info(f"  Risk-free rate: {rf_rate}")
    logger.info("=" * 70)

    if mode == "two-asset":
        result = optimize_two_asset(assets, correlation_matrix, rf_rate)
    elif mode == "min-variance":
        result = find_minimum_variance(assets, correlation_matrix)
    elif mode == "max-sharpe":
        result = maximize_sharpe(assets, correlation_matrix, rf_rate)
    elif mode == "target-return":
        if target is None:
            raise ValueError("--target is required for target-return mode")
        result = optimize_target_return(assets, correlation_matrix, target)
    elif mode == "frontier":
        frontier = generate_efficient_frontier(assets, correlation_matrix, points, rf_rate)
        _log_frontier(frontier, logger)
        return frontier
    else:
        raise ValueError(f"Unknown mode: {mode}. Use one of {', '.join(MODES)}")

    for line in format_result(result):
        logger.info(line)
    return result


def _log_frontier(frontier, logger: logging.Logger) -> None:
    logger.info(f"Efficient frontier: {len(frontier.portfolios)} portfolios")
    logger.info(f"{'Return':>12} {'Volatility':>12}")
    for p in frontier.portfolios:
        logger.info(f"{float(p.expected_return):>12.6f} {float(p.volatility):>12.6f}")

    logger.info("\n--- Minimum Variance Portfolio ---")
    for line in format_result(frontier.min_variance_portfolio):
        logger.info(line)

    logger.info("\n--- Tangency Portfolio ---")
    if frontier.tangency_portfolio is None:
        logger.info("Not available")
    else:
        for line in format_result(frontier.tangency_portfolio):
            logger.info(line)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Markowitz mean-variance optimizer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mk-optimize --file assumptions.csv
  mk-optimize --file assumptions.csv --mode target-return --target 0.08
  mk-optimize --file returns.csv --from-returns --mode max-sharpe
        """
    )
    parser.add_argument('--file', '-f', type=str, required=True,
                        help='CSV or Excel file with asset assumptions (or returns)')
    parser.add_argument('--sheet', '-s', type=str, default=None,
                        help='Excel sheet name (default: first sheet)')
    parser.add_argument('--mode', '-m', choices=MODES, default='max-sharpe',
                        help='Optimization to run (default: max-sharpe)')
    parser.add_argument('--rf-rate', '-r', type=str, default=str(DEFAULT_RISK_FREE_RATE),
                        help=f'Risk-free rate (default: {DEFAULT_RISK_FREE_RATE})')
    parser.add_argument('--target', '-t', type=str, default=None,
                        help='Target return for target-return mode')
    parser.add_argument('--points', type=int, default=DEFAULT_FRONTIER_POINTS,
                        help=f'Frontier points (default: {DEFAULT_FRONTIER_POINTS})')
    parser.add_argument('--from-returns', action='store_true',
                        help='Treat --file as a CSV of periodic returns and estimate assumptions')
    parser.add_argument('--periods-per-year', type=int, default=DEFAULT_PERIODS_PER_YEAR,
                        help=f"Return observations per year for --from-returns (default: {DEFAULT_PERIODS_PER_YEAR})")
    parser.add_argument('--log-dir', type=str, default='logs',
                        help='Directory for log files (default: logs)')
    parser.add_argument('--no-log-file', action='store_true',
                        help='Log to console only')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the optimizer CLI."""
    args = build_parser().parse_args(argv)

    logger = setup_logger("markowitz_engine", None if args.no_log_file else args.log_dir)

    try:
        loader = AssumptionLoader(periods_per_year=args.periods_per_year)
        if args.from_returns:
            logger.info(f"Estimating assumptions from returns in: {args.file}")
            assets, correlation = loader.load_returns_csv(args.file)
        else:
            logger.info(f"Loading assumptions from: {args.file}")
            assets, correlation = loader.load_assumptions(args.file, args.sheet)

        run_optimization(
            assets,
            correlation,
            mode=args.mode,
            rf_rate=to_decimal(args.rf_rate),
            target=to_decimal(args.target) if args.target is not None else None,
            points=args.points,
            logger=logger,
        )
    except OptimizationError as e:
        logger.error(f"Optimization failed [{e.code}]: {e}")
        return 1
    except (ValueError, TypeError, OSError) as e:
        logger.error(f"Invalid input: {e}")
        return 1

    logger.info("Optimization completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
