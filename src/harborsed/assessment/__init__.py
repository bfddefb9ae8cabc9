"""
Assessment tools for estimated sediment concentrations.

This subpackage classifies analytes into contaminant categories, sums category
totals per sample and compares concentrations with ERL/ERM screening values.
"""

from .analyte_classes import (
    PCB, PAH, METAL, PESTICIDE, OTHER,
    ANALYTE_CATEGORY_BY_NAME,
    category_map,
    get_category,
    analytes_in_category,
)
from .screening import (
    ScreeningValues,
    SCREENING_VALUES,
    BELOW_ERL, ERL_TO_ERM, ABOVE_ERM, UNAVAILABLE,
    classify_against_screening,
    classify_series,
    screening_summary,
)
from .aggregation import TOTAL_LABELS, category_totals

__all__ = [
    # Analyte classes
    "PCB", "PAH", "METAL", "PESTICIDE", "OTHER",
    "ANALYTE_CATEGORY_BY_NAME", "category_map", "get_category", "analytes_in_category",

    # Screening
    "ScreeningValues", "SCREENING_VALUES",
    "BELOW_ERL", "ERL_TO_ERM", "ABOVE_ERM", "UNAVAILABLE",
    "classify_against_screening", "classify_series", "screening_summary",

    # Aggregation
    "TOTAL_LABELS", "category_totals",
]
