"""Equivalence report generation."""

from validation_parity.comparison.diff_reporter import DEFAULT_RESULTS_DIR, DiffReporter

__all__ = ["DEFAULT_RESULTS_DIR", "DiffReporter"]
