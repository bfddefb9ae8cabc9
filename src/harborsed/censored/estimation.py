"""
Per-analyte orchestration: fit once, then replace each non-detect with the
conditional mean below its own detection limit.
"""
from __future__ import annotations

import logging
import zlib
from typing import Iterable, List, Optional, Union

import numpy as np

from ..config import EstimationConfig, DEFAULT_CONFIG
from ..exceptions import InsufficientDataError
from .conditional_mean import ConditionalMeanEstimator, RandomState
from .fitter import CensoredLognormalFitter
from .models import (
    AnalyteGroup, EstimateResult, PairLike,
    OBSERVED, CONDITIONAL_MEAN,
)

logger = logging.getLogger(__name__)

__all__ = ["estimate_censored_means", "estimate_censored_values", "group_seed"]


def group_seed(seed: Optional[int], analyte: str) -> Optional[np.random.SeedSequence]:
    """
    Child seed for one analyte, derived from a run-level seed and the analyte name.

    The child depends only on (seed, analyte), never on the order in which groups
    are processed. Returns None when seed is None (fresh OS entropy per group).
    """
    if seed is None:
        return None
    return np.random.SeedSequence(entropy=int(seed), spawn_key=(zlib.crc32(str(analyte).encode("utf-8")),))


def estimate_censored_means(
    group: Union[AnalyteGroup, Iterable[PairLike]],
    *,
    random_state: RandomState = None,
    config: Optional[EstimationConfig] = None,
) -> List[EstimateResult]:
    """
    Replace each censored observation by E[X | X < its limit] under a lognormal
    fitted to the whole group; exact observations pass through unchanged.

    Args:
        group: AnalyteGroup, or an iterable of Observation / (value, is_censored) pairs
        random_state: int seed, SeedSequence or numpy Generator for the Monte Carlo draws
        config: EstimationConfig (sample count, optimizer caps, seed sigma)

    Returns:
        One EstimateResult per observation, in input order.

    Raises:
        InsufficientDataError: the group is empty
        FitDivergedError: the likelihood optimizer failed; no fallback is applied
    """
    if not isinstance(group, AnalyteGroup):
        group = AnalyteGroup.from_pairs(group)
    if len(group) == 0:
        raise InsufficientDataError(f"empty group (analyte={group.analyte!r})")

    if not group.has_censored:
        return [EstimateResult(o.value, False, o.value, OBSERVED) for o in group]

    cfg = config or DEFAULT_CONFIG
    distribution = CensoredLognormalFitter(cfg).fit(group)

    # one estimate per distinct limit, drawn in ascending-limit order so that
    # identical limits share a value and input order does not matter
    rng = np.random.default_rng(random_state)
    estimator = ConditionalMeanEstimator(cfg.sample_count)
    limits = sorted({o.value for o in group if o.is_censored})
    by_limit = {lim: estimator.estimate(distribution, lim, rng) for lim in limits}

    logger.debug("analyte %s: imputed %d non-detects over %d distinct limits",
                 group.analyte, group.n_censored, len(limits))

    return [
        EstimateResult(o.value, True, by_limit[o.value], CONDITIONAL_MEAN)
        if o.is_censored else EstimateResult(o.value, False, o.value, OBSERVED)
        for o in group
    ]


def estimate_censored_values(values, censored_flags, *, random_state: RandomState = None,
                             config: Optional[EstimationConfig] = None) -> List[float]:
    """Array form: returns only the estimated values, aligned with `values`."""
    group = AnalyteGroup.from_arrays(values, censored_flags)
    return [r.estimated_value for r in estimate_censored_means(group, random_state=random_state, config=config)]
