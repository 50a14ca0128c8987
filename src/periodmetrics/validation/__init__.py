"""
Validation utilities for periodmetrics.

This subpackage contains integrity checks intended to fail fast when a
table was loaded or configured incorrectly.

Public entry point:
- check_metrics_table
"""

from .checks import check_metrics_table

__all__ = ["check_metrics_table"]
