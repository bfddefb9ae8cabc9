"""
harborsed - censored-data estimation for harbor sediment contaminant surveys

Non-detects (results reported only as "below the detection limit") are replaced
by the conditional mean of a lognormal fitted per analyte by maximum likelihood,
instead of zero, the limit or half the limit.

Subpackages:
- censored: lognormal MLE fitter, conditional-mean sampler, per-group orchestration
- data_process: cleaning, qualifier policy, schema validation, reshaping
- assessment: analyte categories, per-sample totals, ERL/ERM screening
"""
import logging

from .config import EstimationConfig, DEFAULT_CONFIG
from .exceptions import (
    CensoredEstimationError,
    InsufficientDataError,
    FitDivergedError,
    InvalidLimitError,
    InvalidObservationError,
)
from .censored import (
    Observation, AnalyteGroup, FittedDistribution, EstimateResult,
    CensoredLognormalFitter, fit_censored_lognormal,
    ConditionalMeanEstimator, conditional_mean_below, expected_value_below,
    estimate_censored_means, estimate_censored_values, group_seed,
)
from .pipeline import (
    FrameEstimates, CensoredAnalysisResult, FALLBACK_POLICIES,
    prepare_measurements, estimate_frame, run_censored_analysis,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Configuration and errors
    "EstimationConfig", "DEFAULT_CONFIG",
    "CensoredEstimationError", "InsufficientDataError", "FitDivergedError",
    "InvalidLimitError", "InvalidObservationError",

    # Estimation core
    "Observation", "AnalyteGroup", "FittedDistribution", "EstimateResult",
    "CensoredLognormalFitter", "fit_censored_lognormal",
    "ConditionalMeanEstimator", "conditional_mean_below", "expected_value_below",
    "estimate_censored_means", "estimate_censored_values", "group_seed",

    # Frame-level pipeline
    "FrameEstimates", "CensoredAnalysisResult", "FALLBACK_POLICIES",
    "prepare_measurements", "estimate_frame", "run_censored_analysis",
]

# Package metadata
__version__ = "0.1.0"
__description__ = "Censored (non-detect) estimation for harbor sediment contaminant data"
