from __future__ import annotations
from typing import Iterable, Iterator, Optional, Tuple
import pandas as pd

from ..config import SAMPLE_COL, ANALYTE_COL, VALUE_COL, CENSORED_COL, ESTIMATE_COL, METHOD_COL, KEYS
from ..censored.models import AnalyteGroup

# -------------------------------
# Long format -> analyte groups
# -------------------------------

def iter_analyte_groups(
    measurements: pd.DataFrame,
    *,
    analyte_col: str = ANALYTE_COL,
    value_col: str = VALUE_COL,
    censored_col: str = CENSORED_COL,
) -> Iterator[Tuple[str, AnalyteGroup, pd.Index]]:
    """
    Yield (analyte, AnalyteGroup, row index) for each analyte in first-seen order.

    The row index lets callers re-attach per-observation results positionally.
    """
    for analyte, rows in measurements.groupby(analyte_col, sort=False):
        group = AnalyteGroup.from_arrays(
            rows[value_col].to_numpy(dtype=float),
            rows[censored_col].to_numpy(dtype=bool),
            analyte=str(analyte),
        )
        yield str(analyte), group, rows.index

# -------------------------------
# Replicates (estimate-then-average)
# -------------------------------

def _join_methods(methods: pd.Series) -> str:
    return "+".join(sorted(set(methods.astype(str))))

def average_replicates(estimates: pd.DataFrame, keys: Iterable[str] = KEYS) -> pd.DataFrame:
    """
    Average replicate rows after estimation.

    Each replicate is estimated on its own first, then `estimated_value` is averaged
    per key. A missing (unavailable) replicate estimate makes the average NaN.
    `is_censored` is True only if every replicate was censored.

    Args:
        estimates: Output of pipeline.estimate_frame
        keys: Columns identifying one measurement (default sample_id, analyte)

    Returns:
        One row per key with value, is_censored, estimated_value, estimate_method,
        n_replicates.
    """
    keys = list(keys)
    grouped = estimates.groupby(keys, sort=False)
    out = grouped.agg(
        **{
            VALUE_COL: (VALUE_COL, "mean"),
            CENSORED_COL: (CENSORED_COL, "all"),
            ESTIMATE_COL: (ESTIMATE_COL, lambda s: s.mean(skipna=False)),
            METHOD_COL: (METHOD_COL, _join_methods),
            "n_replicates": (VALUE_COL, "size"),
        }
    )
    return out.reset_index()

# -------------------------------
# Column MultiIndex helpers
# -------------------------------

_BLOCK_NAMES_2 = ("block", "var")
_BLOCK_NAMES_3 = ("block", "subblock", "var")

def wrap_columns(df: pd.DataFrame, block: str, subblock: Optional[str] = None) -> pd.DataFrame:
    """
    Wrap columns of df into a MultiIndex:
      - with subblock: (block, subblock, var)
      - without subblock: (block, var)
    """
    out = df.copy()
    b = str(block)
    if subblock is None:
        out.columns = pd.MultiIndex.from_product([[b], out.columns], names=_BLOCK_NAMES_2)
    else:
        out.columns = pd.MultiIndex.from_product([[b], [str(subblock)], out.columns], names=_BLOCK_NAMES_3)
    return out

def is_three_level(df: pd.DataFrame) -> bool:
    return isinstance(df.columns, pd.MultiIndex) and df.columns.nlevels == 3

def get_block(master: pd.DataFrame, block: str, subblock: Optional[str] = None) -> pd.DataFrame:
    """Return a single block (optionally subblock) as a plain DataFrame (drop column MI)."""
    if is_three_level(master):
        sb = slice(None) if subblock is None else subblock
        df = master.loc[:, (block, sb, slice(None))].copy() # type: ignore
    else:
        df = master.loc[:, (block, slice(None))].copy() # type: ignore
    df.columns = df.columns.get_level_values("var")
    return df

def estimates_to_wide(
    estimates: pd.DataFrame,
    *,
    column: str = ESTIMATE_COL,
    block: str = "chemical",
    subblock: Optional[str] = "estimated",
) -> pd.DataFrame:
    """
    Pivot long estimates to a sample x analyte matrix wrapped as a column block.

    Replicates must already be averaged; duplicate (sample, analyte) keys raise.
    """
    dup = estimates.duplicated(subset=KEYS)
    if dup.any():
        first = estimates.loc[dup, KEYS].head(10).to_records(index=False).tolist()
        raise ValueError(f"Duplicate {KEYS} keys; average replicates first. Examples: {first}")
    wide = estimates.pivot(index=SAMPLE_COL, columns=ANALYTE_COL, values=column)
    wide.columns.name = None
    return wrap_columns(wide, block=block, subblock=subblock)

# -------------------------------
# Validation / Safety
# -------------------------------

def assert_same_index(a: pd.DataFrame, b: pd.DataFrame) -> None:
    if not a.index.equals(b.index):
        raise ValueError(
            "Index mismatch between frames. "
            "Check that both are indexed by the same key(s) (e.g., 'sample_id'), "
            "sorted, and have identical dtype/normalization."
        )

