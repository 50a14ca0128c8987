"""
Global configuration for periodmetrics.

This module defines *policy-level* constants used across the period algebra,
the metrics table and its adapters.

These values are intentionally centralized to:
- make calendar and encoding conventions explicit
- avoid hard-coded magic numbers
- allow future user overrides if needed

This module MUST NOT contain any computation logic.
"""

from __future__ import annotations


# =============================================================================
# Calendar
# =============================================================================

MONTHS_PER_QUARTER = 3

QUARTERS_PER_YEAR = 4

MONTHS_PER_YEAR = MONTHS_PER_QUARTER * QUARTERS_PER_YEAR


# =============================================================================
# Period keys
# =============================================================================

# Quarters are keyed as "YYYY-33".."YYYY-36", outside the 01..12 month range
QUARTER_KEY_OFFSET = 32

# Length of a year-only key ("2023")
YEAR_KEY_LENGTH = 4


# =============================================================================
# Aggregation
# =============================================================================

BUILTIN_AGGREGATES = ("first", "last", "average", "sum")


# =============================================================================
# Notifications
# =============================================================================

# Maximum nesting of update() calls issued from subscription callbacks
MAX_UPDATE_DEPTH = 8


# =============================================================================
# Frames
# =============================================================================

LONG_FRAME_COLUMNS = ["metric", "period", "value", "is_aggregate"]
