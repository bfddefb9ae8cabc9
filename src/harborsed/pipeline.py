"""
Frame-level censored estimation for long-format sediment measurement tables.

Each analyte is estimated independently. A failed analyte is logged and
recorded, never allowed to stop the others, and never silently filled: its
non-detects are NaN ("unavailable") unless the caller asks for an explicit,
labelled fallback policy.
"""
from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import (
    EstimationConfig, VALUE_COL, CENSORED_COL, QUALIFIER_COL, ESTIMATE_COL, METHOD_COL,
)
from .exceptions import CensoredEstimationError
from .censored.models import AnalyteGroup, EstimateResult, OBSERVED
from .censored.estimation import estimate_censored_means, group_seed
from .data_process.cleaning import normalize_columns, cast_types, harmonize_ids, drop_missing_values, ensure_positive
from .data_process.qualifiers import QualifierPolicy, flag_censored, parse_reported_values
from .data_process.validators import validate_measurements, validate_estimates
from .data_process.dataframe_ops import iter_analyte_groups, average_replicates, assert_same_index
from .assessment.aggregation import category_totals
from .assessment.analyte_classes import PCB, PAH
from .assessment.screening import screening_summary

logger = logging.getLogger(__name__)

UNAVAILABLE = "unavailable"

# fallback policy name -> multiple of the detection limit
FALLBACK_POLICIES = {
    "half_detection_limit": 0.5,
    "detection_limit": 1.0,
}


@dataclass
class FrameEstimates:
    frame: pd.DataFrame  # input rows + estimated_value, estimate_method
    failures: Dict[str, CensoredEstimationError] = field(default_factory=dict)
    fallback: Optional[str] = None

    @property
    def failed_analytes(self) -> List[str]:
        return list(self.failures)


@dataclass
class CensoredAnalysisResult:
    estimates: pd.DataFrame
    failures: Dict[str, CensoredEstimationError]
    summary: pd.DataFrame
    totals: Dict[str, pd.DataFrame]
    fallback: Optional[str] = None


# --------------------------- Preparation ---------------------------

def prepare_measurements(raw: pd.DataFrame, *, qualifier_policy: QualifierPolicy = "U") -> pd.DataFrame:
    """
    Tidy a raw long-format table into the measurement schema.

    - column names normalized ("Sample ID" -> "sample_id")
    - reported strings like "<0.5" split into value / is_censored
    - when no is_censored column exists but a qualifier column does, the
      censored flag comes from `qualifier_policy` ("U" or "UJ")
    """
    df = normalize_columns(raw)
    df = harmonize_ids(df)

    if CENSORED_COL not in df.columns:
        if not pd.api.types.is_numeric_dtype(df[VALUE_COL]):
            parsed = parse_reported_values(df[VALUE_COL])
            df[VALUE_COL] = parsed[VALUE_COL]
            df[CENSORED_COL] = parsed[CENSORED_COL]
        else:
            df[CENSORED_COL] = False
        if QUALIFIER_COL in df.columns:
            df[CENSORED_COL] = df[CENSORED_COL] | flag_censored(df[QUALIFIER_COL], policy=qualifier_policy)

    df = cast_types(df, {VALUE_COL: "float", CENSORED_COL: "bool"})
    n_before = len(df)
    df = drop_missing_values(df)
    if len(df) < n_before:
        logger.warning("Dropped %d rows with unreadable values", n_before - len(df))
    df = ensure_positive(df)
    return validate_measurements(df)


# --------------------------- Estimation ---------------------------

def _estimate_group(
    analyte: str, group: AnalyteGroup, seed: Optional[int], config: Optional[EstimationConfig],
) -> Tuple[str, Optional[List[EstimateResult]], Optional[CensoredEstimationError]]:
    try:
        return analyte, estimate_censored_means(group, random_state=group_seed(seed, analyte), config=config), None
    except CensoredEstimationError as e:
        return analyte, None, e


def _fallback_values(group: AnalyteGroup, fallback: Optional[str]) -> Tuple[np.ndarray, np.ndarray]:
    values, cens = group.values, group.censored
    if fallback is None:
        est = np.where(cens, np.nan, values)
        meth = np.where(cens, UNAVAILABLE, OBSERVED)
    else:
        est = np.where(cens, values * FALLBACK_POLICIES[fallback], values)
        meth = np.where(cens, fallback, OBSERVED)
    return est, meth


def estimate_frame(
    measurements: pd.DataFrame,
    *,
    seed: Optional[int] = None,
    config: Optional[EstimationConfig] = None,
    fallback: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> FrameEstimates:
    """
    Estimate non-detects analyte by analyte.

    Args:
        measurements: long-format table (sample_id, analyte, value, is_censored)
        seed: run-level seed; each analyte gets its own child seed, so results do
              not depend on analyte order or on max_workers
        config: EstimationConfig
        fallback: None, "half_detection_limit" or "detection_limit"; applied only to
                  non-detects of analytes whose fit failed, and labelled as such
        max_workers: > 1 runs analytes in a process pool

    Returns:
        FrameEstimates with the input rows (same index, same order) plus
        estimated_value and estimate_method, and per-analyte failures.
    """
    if fallback is not None and fallback not in FALLBACK_POLICIES:
        raise ValueError(f"Unknown fallback policy: {fallback!r} (expected one of {list(FALLBACK_POLICIES)})")
    if not measurements.index.is_unique:
        raise ValueError("measurements index must be unique to re-attach estimates")

    frame = validate_measurements(measurements.copy())
    groups = {analyte: (group, idx) for analyte, group, idx in iter_analyte_groups(frame)}

    if max_workers is not None and max_workers > 1 and len(groups) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(_estimate_group, a, g, seed, config) for a, (g, _) in groups.items()]
            outcomes = {}
            for fut in as_completed(futures):
                analyte, results, error = fut.result()
                outcomes[analyte] = (results, error)
    else:
        outcomes = {}
        for a, (g, _) in groups.items():
            _, results, error = _estimate_group(a, g, seed, config)
            outcomes[a] = (results, error)

    estimated = pd.Series(np.nan, index=frame.index, dtype=float)
    method = pd.Series(UNAVAILABLE, index=frame.index, dtype=object)
    failures: Dict[str, CensoredEstimationError] = {}

    for analyte, (group, idx) in groups.items():
        results, error = outcomes[analyte]
        if error is not None:
            failures[analyte] = error
            est, meth = _fallback_values(group, fallback)
            if fallback is None:
                logger.warning("Analyte %s: estimation failed (%s: %s); %d non-detects left unavailable",
                               analyte, type(error).__name__, error, group.n_censored)
            else:
                logger.warning("Analyte %s: estimation failed (%s: %s); %d non-detects set by %s",
                               analyte, type(error).__name__, error, group.n_censored, fallback)
        else:
            est = np.array([r.estimated_value for r in results], dtype=float)
            meth = np.array([r.method for r in results], dtype=object)
        estimated.loc[idx] = est
        method.loc[idx] = meth

    out = frame.copy()
    out[ESTIMATE_COL] = estimated
    out[METHOD_COL] = method
    out = validate_estimates(out)
    assert_same_index(out, measurements)

    logger.info("Estimated %d analytes (%d rows, %d non-detects); %d failed",
                len(groups), len(out), int(out[CENSORED_COL].sum()), len(failures))
    return FrameEstimates(frame=out, failures=failures, fallback=fallback)


def run_censored_analysis(
    measurements: pd.DataFrame,
    *,
    seed: Optional[int] = None,
    config: Optional[EstimationConfig] = None,
    fallback: Optional[str] = None,
    categories: Sequence[str] = (PCB, PAH),
    average: bool = True,
    max_workers: Optional[int] = None,
) -> CensoredAnalysisResult:
    """
    Estimate, average replicates (estimate-then-average), summarise against
    ERL/ERM and total each category per sample.
    """
    fe = estimate_frame(measurements, seed=seed, config=config, fallback=fallback, max_workers=max_workers)
    estimates = average_replicates(fe.frame) if average else fe.frame
    summary = screening_summary(estimates)
    totals = {cat: category_totals(estimates, cat) for cat in categories}
    for cat, t in totals.items():
        n_na = int(t["total"].isna().sum())
        if n_na:
            logger.warning("%s totals unavailable for %d of %d samples", cat, n_na, len(t))
    return CensoredAnalysisResult(estimates=estimates, failures=fe.failures, summary=summary,
                                  totals=totals, fallback=fallback)
