import numpy as np
import pandas as pd
import pytest

from harborsed.data_process.qualifiers import flag_censored, parse_reported_values


def test_flag_censored_u_policy_ignores_j():
    q = pd.Series(["U", "J", None, "ND", "UJ", "J, B", ""])
    assert flag_censored(q, policy="U").tolist() == [True, False, False, True, True, False, False]


def test_flag_censored_uj_policy_includes_j():
    q = pd.Series(["U", "J", None, "J, B"])
    assert flag_censored(q, policy="UJ").tolist() == [True, True, False, True]


def test_flag_censored_unknown_policy():
    with pytest.raises(ValueError):
        flag_censored(pd.Series(["U"]), policy="J")


def test_parse_reported_values():
    s = pd.Series(["<0.5", "1.25", " ND<2 ", "0.3 U", 4.0, "n/a"], index=list("abcdef"))
    out = parse_reported_values(s)
    assert list(out.index) == list("abcdef")
    assert out["value"].tolist()[:5] == [0.5, 1.25, 2.0, 0.3, 4.0]
    assert np.isnan(out.loc["f", "value"])
    assert out["is_censored"].tolist() == [True, False, True, True, False, False]
