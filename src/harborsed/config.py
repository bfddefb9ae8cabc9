from __future__ import annotations
from dataclasses import dataclass

# long-format measurement table columns
SAMPLE_COL = "sample_id"
ANALYTE_COL = "analyte"
VALUE_COL = "value"
CENSORED_COL = "is_censored"
QUALIFIER_COL = "qualifier"

# columns added by estimation
ESTIMATE_COL = "estimated_value"
METHOD_COL = "estimate_method"

KEYS = [SAMPLE_COL, ANALYTE_COL]  # one measurement per key after replicate averaging

# estimation defaults (empirical working values, tune per dataset)
DEFAULT_SAMPLE_COUNT = 1000
DEFAULT_MAX_ITERATIONS = 500
DEFAULT_GRADIENT_TOLERANCE = 1e-8
DEFAULT_SEED_SIGMA = 0.5  # log scale


@dataclass(frozen=True)
class EstimationConfig:
    """
    Tunable knobs for the censored lognormal fit and conditional-mean sampling.

    Attributes:
        sample_count: Monte Carlo draws per conditional mean
        max_iterations: iteration cap for the likelihood optimizer
        gradient_tolerance: projected-gradient tolerance for L-BFGS-B
        seed_sigma: log-scale sigma used when the data give no variance basis
    """
    sample_count: int = DEFAULT_SAMPLE_COUNT
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    gradient_tolerance: float = DEFAULT_GRADIENT_TOLERANCE
    seed_sigma: float = DEFAULT_SEED_SIGMA

    def __post_init__(self):
        if self.sample_count < 1:
            raise ValueError(f"sample_count must be >= 1, got {self.sample_count}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if not self.gradient_tolerance > 0:
            raise ValueError(f"gradient_tolerance must be > 0, got {self.gradient_tolerance}")
        if not self.seed_sigma > 0:
            raise ValueError(f"seed_sigma must be > 0, got {self.seed_sigma}")


DEFAULT_CONFIG = EstimationConfig()
