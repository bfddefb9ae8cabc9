"""
Lab qualifier handling: which reported results count as censored.

Qualifier conventions differ between data deliveries. "U" (not detected at the
reporting limit) is always censored. "J" (detected, but below the reporting
limit so the value is an estimate) is censored only under the "UJ" policy; the
choice is the caller's and should be stated alongside any result.
"""
from __future__ import annotations
import re
from typing import Literal

import numpy as np
import pandas as pd

from ..config import VALUE_COL, CENSORED_COL

QualifierPolicy = Literal["U", "UJ"]

NOT_DETECTED_CODES = frozenset({"U", "UJ", "ND", "<"})
ESTIMATED_CODES = frozenset({"J"})

_CENSORED_CODES = {
    "U": NOT_DETECTED_CODES,
    "UJ": NOT_DETECTED_CODES | ESTIMATED_CODES,
}

# "<0.5", "< 0.5", "ND<0.5", "0.5 U"
_NUMBER = r"(\d+(?:\.\d*)?(?:[eE][-+]?\d+)?|\.\d+(?:[eE][-+]?\d+)?)"
_LESS_THAN = re.compile(r"^\s*(?:ND\s*)?<\s*" + _NUMBER + r"\s*$", re.IGNORECASE)
_TRAILING_U = re.compile(r"^\s*" + _NUMBER + r"\s*U\s*$", re.IGNORECASE)


def _split_codes(q) -> set[str]:
    if q is None or (isinstance(q, float) and np.isnan(q)):
        return set()
    return {c for c in re.split(r"[\s,;/]+", str(q).strip().upper()) if c}


def flag_censored(qualifiers: pd.Series, policy: QualifierPolicy = "U") -> pd.Series:
    """
    Map lab qualifier strings to a boolean censored flag.

    Multiple codes per cell are allowed ("J, B"). Missing qualifiers mean detected.

    Args:
        qualifiers: Series of qualifier strings
        policy: "U" (only not-detected codes) or "UJ" (also J-estimated results)

    Returns:
        Boolean Series aligned with `qualifiers`
    """
    if policy not in _CENSORED_CODES:
        raise ValueError(f"Unknown qualifier policy: {policy!r} (expected one of {list(_CENSORED_CODES)})")
    codes = _CENSORED_CODES[policy]
    return qualifiers.map(lambda q: bool(_split_codes(q) & codes)).astype(bool)


def parse_reported_values(reported: pd.Series) -> pd.DataFrame:
    """
    Split reported results like "<0.5" or "0.5 U" into (value, is_censored).

    Plain numbers are detected values. Anything unparseable becomes NaN (and is
    left to the caller to drop).
    """
    values, flags = [], []
    for raw in reported:
        if isinstance(raw, (int, float, np.integer, np.floating)):
            values.append(float(raw))
            flags.append(False)
            continue
        text = "" if raw is None else str(raw)
        m = _LESS_THAN.match(text) or _TRAILING_U.match(text)
        if m:
            values.append(float(m.group(1)))
            flags.append(True)
            continue
        values.append(pd.to_numeric(text.strip(), errors="coerce"))
        flags.append(False)
    return pd.DataFrame({VALUE_COL: np.asarray(values, dtype=float), CENSORED_COL: flags},
                        index=reported.index)
