from __future__ import annotations
import pandas as pd
from pandera.pandas import Column, DataFrameSchema, Check

from ..config import SAMPLE_COL, ANALYTE_COL, VALUE_COL, CENSORED_COL, ESTIMATE_COL, METHOD_COL
from .cleaning import parse_bool_flags

# Long-format measurements: one row per (sample, analyte) result.
# value is the concentration, or the detection limit when is_censored is True.
MEASUREMENT_SCHEMA = DataFrameSchema(
    {
        SAMPLE_COL: Column(str, nullable=False, coerce=True),
        ANALYTE_COL: Column(str, Check.str_length(min_value=1), nullable=False, coerce=True),
        VALUE_COL: Column(float, Check.in_range(0.0, float("inf"), include_min=False, include_max=False),
                          nullable=False, coerce=True),
        CENSORED_COL: Column(bool, nullable=False, coerce=True),
    },
    strict=False,
)

# estimated_value is NaN only where an analyte's estimation failed
ESTIMATE_SCHEMA = MEASUREMENT_SCHEMA.add_columns(
    {
        ESTIMATE_COL: Column(float, Check.gt(0), nullable=True, coerce=True),
        METHOD_COL: Column(str, nullable=False, coerce=True),
    }
)

def _parse_flags(df: pd.DataFrame) -> pd.DataFrame:
    # pandera's bool coercion is astype(bool), which reads "False" as True
    if CENSORED_COL in df.columns and not pd.api.types.is_bool_dtype(df[CENSORED_COL]):
        df = df.assign(**{CENSORED_COL: parse_bool_flags(df[CENSORED_COL])})
    return df

def validate_measurements(df: pd.DataFrame) -> pd.DataFrame:
    """Validate (and coerce) a long-format measurement table; all errors reported at once."""
    return MEASUREMENT_SCHEMA.validate(_parse_flags(df), lazy=True)

def validate_estimates(df: pd.DataFrame) -> pd.DataFrame:
    return ESTIMATE_SCHEMA.validate(_parse_flags(df), lazy=True)
