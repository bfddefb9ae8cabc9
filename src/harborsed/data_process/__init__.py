"""
Data processing utilities for harbor sediment measurements.

This subpackage prepares long-format measurement tables for censored estimation
(cleaning, qualifier policy, schema validation) and reshapes the estimates.
"""

from .cleaning import normalize_columns, cast_types, harmonize_ids, drop_missing_values, ensure_positive, parse_bool_flags
from .qualifiers import flag_censored, parse_reported_values, NOT_DETECTED_CODES, ESTIMATED_CODES
from .validators import MEASUREMENT_SCHEMA, ESTIMATE_SCHEMA, validate_measurements, validate_estimates
from .dataframe_ops import (
    iter_analyte_groups, average_replicates, wrap_columns, get_block,
    is_three_level, estimates_to_wide, assert_same_index,
)

__all__ = [
    # Cleaning
    "normalize_columns", "cast_types", "harmonize_ids", "drop_missing_values", "ensure_positive", "parse_bool_flags",

    # Qualifiers
    "flag_censored", "parse_reported_values", "NOT_DETECTED_CODES", "ESTIMATED_CODES",

    # Validation
    "MEASUREMENT_SCHEMA", "ESTIMATE_SCHEMA", "validate_measurements", "validate_estimates",

    # DataFrame operations
    "iter_analyte_groups", "average_replicates", "wrap_columns", "get_block",
    "is_three_level", "estimates_to_wide", "assert_same_index",
]
