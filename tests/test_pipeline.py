import numpy as np
import pandas as pd
import pytest

import harborsed.pipeline as pipeline
from harborsed.censored.estimation import estimate_censored_means
from harborsed.exceptions import FitDivergedError
from harborsed.pipeline import estimate_frame, prepare_measurements, run_censored_analysis
from harborsed.data_process.validators import validate_estimates


def _measurements(seed=0, n_samples=12):
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n_samples):
        sid = f"S{i:02d}"
        for analyte, mu, lod in [("PCB 52", 1.0, 2.0), ("PCB 101", 2.0, 0.5), ("Cu", 3.0, 15.0), ("Zn", 4.5, 40.0)]:
            x = float(rng.lognormal(mean=mu, sigma=0.7))
            cens = bool(x < lod) or i == 0
            rows.append({"sample_id": sid, "analyte": analyte, "value": lod if cens else x, "is_censored": cens})
    return pd.DataFrame(rows)


def _fail_for(analyte_to_fail):
    def wrapped(group, **kwargs):
        if group.analyte == analyte_to_fail:
            raise FitDivergedError("forced failure")
        return estimate_censored_means(group, **kwargs)
    return wrapped


def test_estimate_frame_preserves_rows_and_bounds():
    df = _measurements()
    assert df["is_censored"].any()
    fe = estimate_frame(df, seed=3)
    out = fe.frame
    assert fe.failures == {}
    assert out.index.equals(df.index)
    assert (out["analyte"] == df["analyte"]).all()
    exact = ~out["is_censored"]
    assert np.array_equal(out.loc[exact, "estimated_value"], out.loc[exact, "value"])
    cens = out["is_censored"]
    assert (out.loc[cens, "estimated_value"] < out.loc[cens, "value"]).all()
    assert (out.loc[cens, "estimated_value"] > 0).all()
    assert set(out.loc[cens, "estimate_method"]) == {"conditional_mean"}
    assert set(out.loc[exact, "estimate_method"]) == {"observed"}


def test_estimate_frame_seed_reproducible_and_order_free():
    df = _measurements()
    a = estimate_frame(df, seed=11).frame
    b = estimate_frame(df, seed=11).frame
    assert a["estimated_value"].equals(b["estimated_value"])

    # reversing the rows changes analyte and observation order, not the estimates
    rev = estimate_frame(df.iloc[::-1], seed=11).frame.loc[df.index]
    assert np.allclose(rev["estimated_value"], a["estimated_value"], rtol=1e-4)


def test_failure_isolated_and_left_unavailable(monkeypatch):
    monkeypatch.setattr(pipeline, "estimate_censored_means", _fail_for("Cu"))
    df = _measurements()
    fe = estimate_frame(df, seed=1)
    assert fe.failed_analytes == ["Cu"]
    assert isinstance(fe.failures["Cu"], FitDivergedError)

    out = fe.frame
    cu = out["analyte"] == "Cu"
    assert out.loc[cu & out["is_censored"], "estimated_value"].isna().all()
    assert set(out.loc[cu & out["is_censored"], "estimate_method"]) == {"unavailable"}
    assert (out.loc[cu & ~out["is_censored"], "estimate_method"] == "observed").all()
    # other analytes unaffected
    assert out.loc[~cu, "estimated_value"].notna().all()


def test_failure_with_labelled_fallback(monkeypatch):
    monkeypatch.setattr(pipeline, "estimate_censored_means", _fail_for("Cu"))
    df = _measurements()
    out = estimate_frame(df, seed=1, fallback="half_detection_limit").frame
    sel = (out["analyte"] == "Cu") & out["is_censored"]
    assert np.allclose(out.loc[sel, "estimated_value"], out.loc[sel, "value"] / 2)
    assert set(out.loc[sel, "estimate_method"]) == {"half_detection_limit"}
    other = (out["analyte"] != "Cu") & out["is_censored"]
    assert set(out.loc[other, "estimate_method"]) == {"conditional_mean"}


def test_unknown_fallback_rejected():
    with pytest.raises(ValueError):
        estimate_frame(_measurements(), fallback="zero")


def test_duplicate_index_rejected():
    df = _measurements()
    df.index = [0] * len(df)
    with pytest.raises(ValueError):
        estimate_frame(df)


def test_process_pool_matches_sequential():
    df = _measurements()
    seq = estimate_frame(df, seed=5).frame
    par = estimate_frame(df, seed=5, max_workers=2).frame
    assert np.allclose(seq["estimated_value"], par["estimated_value"])


def test_prepare_measurements_from_raw_table():
    raw = pd.DataFrame({
        "Sample ID": [" s1", "s1", "s2", "s2"],
        "Analyte": ["Cu", "Pb", "Cu", "Pb"],
        "Value": ["<0.5", "12", "3.1", "0.8"],
        "Qualifier": [None, "J", None, "U"],
    })
    out = prepare_measurements(raw)
    assert out["sample_id"].tolist() == ["S1", "S1", "S2", "S2"]
    assert out["value"].tolist() == [0.5, 12.0, 3.1, 0.8]
    assert out["is_censored"].tolist() == [True, False, False, True]

    out_uj = prepare_measurements(raw, qualifier_policy="UJ")
    assert out_uj["is_censored"].tolist() == [True, True, False, True]


def test_run_censored_analysis_totals_and_summary(monkeypatch):
    df = _measurements()
    # one replicate row for a sample to exercise averaging
    extra = df.iloc[[0]].copy()
    extra.index = [len(df)]
    df = pd.concat([df, extra])

    res = run_censored_analysis(df, seed=2)
    assert res.failures == {}
    assert not res.estimates.duplicated(["sample_id", "analyte"]).any()
    pcb = res.totals["PCB"]
    assert len(pcb) == 12
    assert pcb["total"].notna().all()
    assert (pcb["n_analytes"] == 2).all()
    assert "screening_class" in pcb.columns
    assert set(res.summary.index) == {"PCB 52", "PCB 101", "Cu", "Zn"}
    assert res.summary.loc["Cu", "erl"] == 34.0

    monkeypatch.setattr(pipeline, "estimate_censored_means", _fail_for("PCB 52"))
    failed = run_censored_analysis(df, seed=2)
    cens_samples = set(df.loc[(df["analyte"] == "PCB 52") & df["is_censored"], "sample_id"])
    pcb = failed.totals["PCB"]
    assert pcb.loc[sorted(cens_samples), "total"].isna().all()
    assert "PCB 52" in failed.failures


def test_prepare_measurements_text_censor_flags():
    raw = pd.DataFrame({"sample_id": ["a", "b", "c"], "analyte": ["Cu"] * 3,
                        "value": [1.0, 2.0, 3.0], "is_censored": ["False", "True", "False"]})
    out = prepare_measurements(raw)
    assert out["is_censored"].tolist() == [False, True, False]

    raw.loc[0, "is_censored"] = "maybe"
    with pytest.raises(ValueError):
        prepare_measurements(raw)


def test_estimate_frame_text_flags_keep_detects_observed():
    df = _measurements()
    text = df.assign(is_censored=df["is_censored"].map({True: "True", False: "False"}))
    out = estimate_frame(text, seed=4).frame
    assert out["is_censored"].tolist() == df["is_censored"].tolist()
    exact = ~df["is_censored"]
    assert np.array_equal(out.loc[exact, "estimated_value"], df.loc[exact, "value"])


def test_estimate_frame_output_passes_estimate_schema(monkeypatch):
    monkeypatch.setattr(pipeline, "estimate_censored_means", _fail_for("Zn"))
    out = estimate_frame(_measurements(), seed=8).frame
    assert validate_estimates(out) is not None
    assert out["estimated_value"].isna().any()
