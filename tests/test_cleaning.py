# tests/test_cleaning.py
import pandas as pd
import pytest
from harborsed.data_process.cleaning import normalize_columns, harmonize_ids, ensure_positive, cast_types, drop_missing_values, parse_bool_flags

def test_normalize_columns_spreadsheet_headers():
    df = pd.DataFrame(columns=[" Sample ID", "Analyte", "Value (mg/kg)"])
    out = normalize_columns(df)
    assert list(out.columns) == ["sample_id", "analyte", "value_mgkg"]

def test_harmonize_ids_upper_trim_samples_only():
    df = pd.DataFrame({"sample_id":[" abc ","X-1"], "analyte":[" Cu", "PCB 52 "]})
    out = harmonize_ids(df)
    assert list(out["sample_id"]) == ["ABC","X-1"]
    assert list(out["analyte"]) == ["Cu","PCB 52"]

def test_cast_types_float_coerces_unreadable():
    df = pd.DataFrame({"value":["1.5", "n/a"]})
    out = cast_types(df, {"value": "float", "missing_col": "float"})
    assert out.loc[0, "value"] == 1.5
    assert pd.isna(out.loc[1, "value"])
    assert len(drop_missing_values(out)) == 1

def test_ensure_positive_rejects_zero():
    df = pd.DataFrame({"value":[1.0, 0.0]})
    with pytest.raises(ValueError):
        ensure_positive(df)
    assert ensure_positive(pd.DataFrame({"value":[0.1]})) is not None

def test_cast_types_bool_reads_text_flags():
    df = pd.DataFrame({"is_censored": ["False", "TRUE", " y ", "0", "no", 1]})
    out = cast_types(df, {"is_censored": "bool"})
    assert out["is_censored"].tolist() == [False, True, True, False, False, True]
    assert out["is_censored"].dtype == bool

def test_parse_bool_flags_rejects_unknown_and_missing():
    with pytest.raises(ValueError):
        parse_bool_flags(pd.Series(["True", "maybe"], name="is_censored"))
    with pytest.raises(ValueError):
        parse_bool_flags(pd.Series([True, None], name="is_censored"))
    with pytest.raises(ValueError):
        parse_bool_flags(pd.Series([0, 2], name="is_censored"))
