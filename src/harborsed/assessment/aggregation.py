"""
Per-sample totals over an analyte category (e.g. total PCBs per sample).

The totals are plain sums of per-observation estimates, so each contributing
non-detect enters with its conditional-mean estimate. A sample with any
unavailable contributing estimate gets a NaN total, not a partial sum.
"""
from __future__ import annotations

from typing import Mapping, Optional

import pandas as pd

from ..config import SAMPLE_COL, ANALYTE_COL, CENSORED_COL, ESTIMATE_COL, METHOD_COL
from .analyte_classes import PCB, PAH, get_category
from .screening import SCREENING_VALUES, ScreeningValues, classify_series

TOTAL_LABELS = {
    PCB: "Total PCBs",
    PAH: "Total PAHs",
}


def category_totals(
    estimates: pd.DataFrame,
    category: str,
    *,
    category_by_name: Optional[Mapping[str, str]] = None,
    screening_values: Optional[Mapping[str, ScreeningValues]] = None,
) -> pd.DataFrame:
    """
    Sum estimated concentrations of all analytes in `category`, per sample.

    Args:
        estimates: long-format estimates (one row per sample x analyte, replicates averaged)
        category: category name, e.g. "PCB"
        category_by_name: analyte -> category mapping (default ANALYTE_CATEGORY_BY_NAME)
        screening_values: mapping used to classify the total, looked up by TOTAL_LABELS

    Returns:
        DataFrame indexed by sample_id with total, n_analytes, n_censored, methods
        and, when screening values exist for the total, screening_class.
    """
    in_cat = estimates[ANALYTE_COL].map(lambda a: get_category(a, category_by_name=category_by_name) == category)
    sub = estimates.loc[in_cat.astype(bool)]

    out = sub.groupby(SAMPLE_COL, sort=True).agg(
        total=(ESTIMATE_COL, lambda s: s.sum(skipna=False)),
        n_analytes=(ANALYTE_COL, "nunique"),
        n_censored=(CENSORED_COL, "sum"),
        methods=(METHOD_COL, lambda s: "+".join(sorted(set(s.astype(str))))),
    )
    out["n_censored"] = out["n_censored"].astype(int)
    out.attrs["category"] = category

    sv_map = SCREENING_VALUES if screening_values is None else screening_values
    label = TOTAL_LABELS.get(category)
    if label is not None and label in sv_map:
        out["screening_class"] = classify_series(out["total"], sv_map[label])
    return out
