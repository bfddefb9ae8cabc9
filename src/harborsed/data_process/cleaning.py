from __future__ import annotations
import pandas as pd
import numpy as np

from ..config import SAMPLE_COL, ANALYTE_COL, VALUE_COL

_BOOL_STRINGS = {
    "true": True, "t": True, "yes": True, "y": True, "1": True,
    "false": False, "f": False, "no": False, "n": False, "0": False,
}

def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize column names: strip whitespace, spaces to underscores, drop special
    characters and lower-case, so spreadsheet headers like "Sample ID" become
    "sample_id".

    Args:
        df: Input DataFrame

    Returns:
        DataFrame with normalized column names
    """
    df = df.copy()
    df.columns = (
        df.columns
        .astype(str)
        .str.strip()
        .str.replace(r"\s+", "_", regex=True)
        .str.replace(r"[^0-9A-Za-z_]", "", regex=True)
        .str.lower()
    )
    return df

def cast_types(df: pd.DataFrame, spec: dict[str, str]) -> pd.DataFrame:
    """
    Cast columns to specified data types based on a specification dictionary.
    Columns absent from df are skipped.

    Args:
        df: Input DataFrame
        spec: Dictionary mapping column names to target data types

    Returns:
        DataFrame with columns cast to specified types
    """
    df = df.copy()
    for col, t in spec.items():
        if col not in df.columns:
            continue
        if t.startswith("datetime"):
            df[col] = pd.to_datetime(df[col], errors="coerce")
        elif t == "float":
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
        elif t == "bool":
            df[col] = parse_bool_flags(df[col])
        else:
            df[col] = df[col].astype(t)
    return df

def harmonize_ids(df: pd.DataFrame, id_cols=(SAMPLE_COL, ANALYTE_COL), upper: tuple[str, ...] = (SAMPLE_COL,)) -> pd.DataFrame:
    """
    Standardize identifier columns: string type with surrounding whitespace removed.
    Columns listed in `upper` are also upper-cased (sample codes); analyte names
    keep their case since "PCB" and "pcb" style labels are matched exactly.

    Args:
        df: Input DataFrame
        id_cols: Identifier columns to strip
        upper: Subset of id_cols to upper-case

    Returns:
        DataFrame with standardized identifier columns
    """
    df = df.copy()
    for col in id_cols:
        if col not in df.columns:
            continue
        s = df[col].astype(str).str.strip()
        if col in upper:
            s = s.str.upper()
        df[col] = s
    return df

def drop_missing_values(df: pd.DataFrame, value_col: str = VALUE_COL) -> pd.DataFrame:
    """Drop rows whose value could not be read (NaN after casting)."""
    return df.dropna(subset=[value_col])

def ensure_positive(df: pd.DataFrame, value_col: str = VALUE_COL) -> pd.DataFrame:
    """
    Validate that concentrations and detection limits are strictly positive,
    as required by the lognormal model.

    Raises:
        ValueError: If zero or negative values are found
    """
    vals = df[value_col].to_numpy(dtype=float)
    bad = ~(vals > 0)
    if np.any(bad):
        rows = df.index[bad][:10].tolist()
        raise ValueError(f"Non-positive values found in '{value_col}' (first rows: {rows}).")
    return df

def _to_bool(v):
    if isinstance(v, (bool, np.bool_)):
        return bool(v)
    if isinstance(v, (int, float, np.integer, np.floating)) and v in (0, 1):
        return bool(v)
    if isinstance(v, str):
        return _BOOL_STRINGS.get(v.strip().lower())
    return None

def parse_bool_flags(s: pd.Series) -> pd.Series:
    """
    Read a censor-flag column as bool. Accepts bools, 0/1 and the strings
    true/false, t/f, yes/no, y/n, 1/0 (any case). `astype(bool)` would turn
    "False" into True, so text is mapped explicitly.

    Raises:
        ValueError: If any entry (including a missing one) is not recognised
    """
    if pd.api.types.is_bool_dtype(s) and not s.isna().any():
        return s.astype(bool)
    mapped = s.map(_to_bool)
    bad = mapped.isna()
    if bad.any():
        examples = s[bad].unique()[:5].tolist()
        raise ValueError(f"Unrecognised boolean flags in '{s.name}': {examples}")
    return mapped.astype(bool)
