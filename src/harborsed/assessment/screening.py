"""
Comparison of estimated sediment concentrations with ecological screening values.

ERL (Effects Range Low) and ERM (Effects Range Median) are the sediment quality
guidelines of Long et al. (1995). Metals are in mg/kg dry weight, organics in
ug/kg dry weight; values handed to this module are assumed to be in the same units.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

import numpy as np
import pandas as pd

from ..config import ANALYTE_COL, CENSORED_COL, ESTIMATE_COL, METHOD_COL

__all__ = [
    "ScreeningValues",
    "SCREENING_VALUES",
    "BELOW_ERL",
    "ERL_TO_ERM",
    "ABOVE_ERM",
    "UNAVAILABLE",
    "classify_against_screening",
    "classify_series",
    "screening_summary",
]

BELOW_ERL = "below_ERL"
ERL_TO_ERM = "ERL_to_ERM"
ABOVE_ERM = "above_ERM"
UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ScreeningValues:
    erl: float
    erm: float
    unit: str

    def __post_init__(self):
        if not 0 < self.erl <= self.erm:
            raise ValueError(f"expected 0 < ERL <= ERM, got ERL={self.erl}, ERM={self.erm}")


_MG = "mg/kg"
_UG = "ug/kg"

SCREENING_VALUES: Mapping[str, ScreeningValues] = MappingProxyType({
    # Metals
    "Ag": ScreeningValues(1.0, 3.7, _MG),
    "As": ScreeningValues(8.2, 70.0, _MG),
    "Cd": ScreeningValues(1.2, 9.6, _MG),
    "Cr": ScreeningValues(81.0, 370.0, _MG),
    "Cu": ScreeningValues(34.0, 270.0, _MG),
    "Hg": ScreeningValues(0.15, 0.71, _MG),
    "Ni": ScreeningValues(20.9, 51.6, _MG),
    "Pb": ScreeningValues(46.7, 218.0, _MG),
    "Zn": ScreeningValues(150.0, 410.0, _MG),

    # PAHs
    "Acenaphthene": ScreeningValues(16.0, 500.0, _UG),
    "Acenaphthylene": ScreeningValues(44.0, 640.0, _UG),
    "Anthracene": ScreeningValues(85.3, 1100.0, _UG),
    "Fluorene": ScreeningValues(19.0, 540.0, _UG),
    "2-Methylnaphthalene": ScreeningValues(70.0, 670.0, _UG),
    "Naphthalene": ScreeningValues(160.0, 2100.0, _UG),
    "Phenanthrene": ScreeningValues(240.0, 1500.0, _UG),
    "Benz(a)anthracene": ScreeningValues(261.0, 1600.0, _UG),
    "Benzo(a)pyrene": ScreeningValues(430.0, 1600.0, _UG),
    "Chrysene": ScreeningValues(384.0, 2800.0, _UG),
    "Dibenz(a,h)anthracene": ScreeningValues(63.4, 260.0, _UG),
    "Fluoranthene": ScreeningValues(600.0, 5100.0, _UG),
    "Pyrene": ScreeningValues(665.0, 2600.0, _UG),
    "Low MW PAHs": ScreeningValues(552.0, 3160.0, _UG),
    "High MW PAHs": ScreeningValues(1700.0, 9600.0, _UG),
    "Total PAHs": ScreeningValues(4022.0, 44792.0, _UG),

    # Pesticides and PCBs
    "p,p'-DDE": ScreeningValues(2.2, 27.0, _UG),
    "Total DDTs": ScreeningValues(1.58, 46.1, _UG),
    "Total PCBs": ScreeningValues(22.7, 180.0, _UG),
})


def classify_against_screening(value: float, screening: ScreeningValues) -> str:
    """Screening class for a single concentration; NaN is "unavailable", never "below"."""
    if value is None or math.isnan(value):
        return UNAVAILABLE
    if value < screening.erl:
        return BELOW_ERL
    if value < screening.erm:
        return ERL_TO_ERM
    return ABOVE_ERM


def classify_series(values: pd.Series, screening: ScreeningValues) -> pd.Series:
    v = values.to_numpy(dtype=float)
    out = np.select(
        [np.isnan(v), v < screening.erl, v < screening.erm],
        [UNAVAILABLE, BELOW_ERL, ERL_TO_ERM],
        default=ABOVE_ERM,
    )
    return pd.Series(out, index=values.index, name="screening_class")


def _methods(s: pd.Series) -> str:
    return "+".join(sorted(set(s.astype(str))))


def screening_summary(
    estimates: pd.DataFrame,
    *,
    screening_values: Optional[Mapping[str, ScreeningValues]] = None,
    value_col: str = ESTIMATE_COL,
) -> pd.DataFrame:
    """
    Per-analyte summary statistics of estimated concentrations against ERL/ERM.

    Statistics are NaN when any estimate of the analyte is unavailable, so a
    failed fit is never reported as a low concentration. Exceedance counts use
    the available estimates and `n_unavailable` states how many were missing.

    Returns:
        DataFrame indexed by analyte with n, n_censored, pct_censored, n_unavailable,
        mean, median, min, max, erl, erm, unit, n_above_erl, n_above_erm, methods.
    """
    sv_map = SCREENING_VALUES if screening_values is None else screening_values
    rows = {}
    for analyte, g in estimates.groupby(ANALYTE_COL, sort=False):
        v = g[value_col].astype(float)
        n = int(len(g))
        n_cens = int(g[CENSORED_COL].sum())
        sv = sv_map.get(analyte)
        erl = sv.erl if sv else np.nan
        erm = sv.erm if sv else np.nan
        avail = v.dropna()
        rows[analyte] = {
            "n": n,
            "n_censored": n_cens,
            "pct_censored": 100.0 * n_cens / n if n else np.nan,
            "n_unavailable": int(v.isna().sum()),
            "mean": v.mean(skipna=False),
            "median": v.median(skipna=False),
            "min": v.min(skipna=False),
            "max": v.max(skipna=False),
            "erl": erl,
            "erm": erm,
            "unit": sv.unit if sv else None,
            "n_above_erl": int((avail >= erl).sum()) if sv else np.nan,
            "n_above_erm": int((avail >= erm).sum()) if sv else np.nan,
            "methods": _methods(g[METHOD_COL]) if METHOD_COL in g.columns else None,
        }
    out = pd.DataFrame.from_dict(rows, orient="index")
    out.index.name = ANALYTE_COL
    return out
