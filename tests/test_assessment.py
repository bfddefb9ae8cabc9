import numpy as np
import pandas as pd
import pytest

from harborsed.assessment.analyte_classes import (
    ANALYTE_CATEGORY_BY_NAME, category_map, get_category, analytes_in_category, PCB, PAH, METAL,
)
from harborsed.assessment.screening import (
    SCREENING_VALUES, ScreeningValues, classify_against_screening, classify_series, screening_summary,
    BELOW_ERL, ERL_TO_ERM, ABOVE_ERM, UNAVAILABLE,
)
from harborsed.assessment.aggregation import category_totals


def _estimates():
    return pd.DataFrame({
        "sample_id": ["S1", "S1", "S1", "S2", "S2", "S2"],
        "analyte": ["PCB 52", "PCB 101", "As", "PCB 52", "PCB 101", "As"],
        "value": [5.0, 20.0, 12.0, 1.0, 30.0, 4.0],
        "is_censored": [False, False, False, True, False, True],
        "estimated_value": [5.0, 20.0, 12.0, 0.6, 30.0, np.nan],
        "estimate_method": ["observed", "observed", "observed", "conditional_mean", "observed", "unavailable"],
    })


def test_category_lookup_and_overrides():
    assert get_category("PCB 153") == PCB
    assert get_category("Benzo(a)pyrene") == PAH
    assert get_category("Unobtainium") == "Other"
    custom = category_map({"Sn": METAL})
    assert get_category("Sn", category_by_name=custom) == METAL
    assert "Sn" not in ANALYTE_CATEGORY_BY_NAME
    with pytest.raises(TypeError):
        custom["Cu"] = PAH  # read-only


def test_analytes_in_category_keeps_order():
    names = ["As", "PCB 52", "PCB 101", "PCB 52"]
    assert analytes_in_category(PCB, names) == ["PCB 52", "PCB 101"]


def test_classify_against_screening():
    sv = SCREENING_VALUES["As"]
    assert classify_against_screening(5.0, sv) == BELOW_ERL
    assert classify_against_screening(8.2, sv) == ERL_TO_ERM
    assert classify_against_screening(70.0, sv) == ABOVE_ERM
    assert classify_against_screening(float("nan"), sv) == UNAVAILABLE
    s = classify_series(pd.Series([5.0, 10.0, np.nan, 100.0]), sv)
    assert s.tolist() == [BELOW_ERL, ERL_TO_ERM, UNAVAILABLE, ABOVE_ERM]


def test_screening_values_order_enforced():
    with pytest.raises(ValueError):
        ScreeningValues(erl=10.0, erm=1.0, unit="mg/kg")


def test_screening_summary_marks_unavailable():
    out = screening_summary(_estimates())
    assert out.loc["PCB 52", "n"] == 2
    assert out.loc["PCB 52", "n_censored"] == 1
    assert out.loc["PCB 52", "pct_censored"] == pytest.approx(50.0)
    assert out.loc["PCB 52", "mean"] == pytest.approx(2.8)
    assert np.isnan(out.loc["PCB 52", "erl"])
    # one unavailable estimate: statistics unavailable, not low
    assert np.isnan(out.loc["As", "mean"])
    assert out.loc["As", "n_unavailable"] == 1
    assert out.loc["As", "erl"] == 8.2
    assert out.loc["As", "n_above_erl"] == 1
    assert out.loc["As", "methods"] == "observed+unavailable"


def test_category_totals_sum_per_sample():
    out = category_totals(_estimates(), PCB)
    assert out.loc["S1", "total"] == pytest.approx(25.0)
    assert out.loc["S2", "total"] == pytest.approx(30.6)
    assert out.loc["S2", "n_censored"] == 1
    assert out.loc["S1", "n_analytes"] == 2
    assert out.loc["S1", "screening_class"] == ERL_TO_ERM
    assert out.loc["S2", "methods"] == "conditional_mean+observed"


def test_category_totals_unavailable_is_nan_not_zero():
    out = category_totals(_estimates(), METAL)
    assert out.loc["S1", "total"] == 12.0
    assert np.isnan(out.loc["S2", "total"])
    assert "screening_class" not in out.columns
