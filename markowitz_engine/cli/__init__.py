"""Command-line interface for the optimizer."""
