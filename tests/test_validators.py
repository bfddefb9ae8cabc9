import pandas as pd
import pytest
from pandera.errors import SchemaErrors

from harborsed.data_process.validators import validate_estimates, validate_measurements


def test_valid_measurements_pass_and_coerce():
    df = pd.DataFrame({"sample_id": [1, 2], "analyte": ["Cu", "Cu"], "value": [1, 2], "is_censored": [False, True]})
    out = validate_measurements(df)
    assert out["value"].dtype == float
    assert out["sample_id"].tolist() == ["1", "2"]


def test_nonpositive_and_missing_values_fail():
    df = pd.DataFrame({
        "sample_id": ["A", "B", "C"],
        "analyte": ["Cu", "Cu", "Cu"],
        "value": [1.0, -1.0, None],
        "is_censored": [False, False, True],
    })
    with pytest.raises(SchemaErrors):
        validate_measurements(df)


def test_missing_column_fails():
    df = pd.DataFrame({"sample_id": ["A"], "analyte": ["Cu"], "value": [1.0]})
    with pytest.raises(SchemaErrors):
        validate_measurements(df)


def test_text_censor_flags_parsed_not_truthy():
    df = pd.DataFrame({"sample_id": ["A", "B"], "analyte": ["Cu", "Cu"], "value": [1.0, 2.0],
                       "is_censored": ["False", "True"]})
    out = validate_measurements(df)
    assert out["is_censored"].tolist() == [False, True]


def test_estimates_schema_allows_unavailable_but_not_nonpositive():
    df = pd.DataFrame({
        "sample_id": ["A", "B"], "analyte": ["Cu", "Cu"], "value": [1.0, 2.0],
        "is_censored": [False, True], "estimated_value": [1.0, float("nan")],
        "estimate_method": ["observed", "unavailable"],
    })
    assert validate_estimates(df)["estimated_value"].isna().sum() == 1

    bad = df.assign(estimated_value=[1.0, 0.0])
    with pytest.raises(SchemaErrors):
        validate_estimates(bad)
    with pytest.raises(SchemaErrors):
        validate_estimates(df.drop(columns="estimate_method"))
