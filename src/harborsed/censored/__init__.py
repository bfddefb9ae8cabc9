"""
Censored (non-detect) estimation core.

A lognormal is fitted per analyte by maximum likelihood over exact values and
detection limits; each non-detect is then replaced by the conditional mean of the
fitted distribution below its own limit.
"""

from .models import (
    Observation,
    AnalyteGroup,
    FittedDistribution,
    EstimateResult,
    OBSERVED,
    CONDITIONAL_MEAN,
)
from .fitter import CensoredLognormalFitter, fit_censored_lognormal
from .conditional_mean import (
    ConditionalMeanEstimator,
    conditional_mean_below,
    expected_value_below,
    sample_below,
)
from .estimation import estimate_censored_means, estimate_censored_values, group_seed

__all__ = [
    # Data model
    "Observation", "AnalyteGroup", "FittedDistribution", "EstimateResult",
    "OBSERVED", "CONDITIONAL_MEAN",

    # Fitting
    "CensoredLognormalFitter", "fit_censored_lognormal",

    # Conditional mean
    "ConditionalMeanEstimator", "conditional_mean_below", "expected_value_below", "sample_below",

    # Orchestration
    "estimate_censored_means", "estimate_censored_values", "group_seed",
]
