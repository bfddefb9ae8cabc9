"""
Simple usage example for the censored (non-detect) estimation pipeline.

This script builds a small synthetic long-format sediment table, replaces the
non-detects with lognormal conditional means and prints the per-analyte
screening summary and the total PCBs per sample.
"""

import numpy as np
import pandas as pd

from harborsed import run_censored_analysis, estimate_censored_means


def create_mock_measurements(n_samples: int = 20, seed: int = 0) -> pd.DataFrame:
    """Synthetic harbor sediment results; values below the limit are reported as the limit."""
    rng = np.random.default_rng(seed)
    analytes = [
        # analyte, log-mean, log-sd, detection limit
        ("PCB 52", 1.0, 0.8, 2.0),
        ("PCB 153", 1.8, 0.8, 2.0),
        ("Pyrene", 5.5, 1.0, 100.0),
        ("Benzo(a)pyrene", 5.0, 1.0, 100.0),
        ("Cu", 3.5, 0.6, 10.0),
    ]
    rows = []
    for i in range(n_samples):
        for name, mu, sd, lod in analytes:
            x = float(rng.lognormal(mu, sd))
            rows.append({"sample_id": f"H{i:03d}", "analyte": name,
                         "value": max(x, lod), "is_censored": x < lod})
    return pd.DataFrame(rows)


def simple_usage_example():
    print("=== Censored estimation - Usage Example ===\n")

    print("1. Single analyte group")
    out = estimate_censored_means([(10.0, False), (12.0, False), (5.0, True)], random_state=42)
    for r in out:
        print(f"   value={r.value:<6} censored={r.is_censored!s:<5} -> {r.estimated_value:.3f} ({r.method})")

    print("\n2. Whole table")
    df = create_mock_measurements()
    print(f"   {len(df)} results, {int(df['is_censored'].sum())} non-detects")
    result = run_censored_analysis(df, seed=42)

    if result.failures:
        print(f"   Failed analytes (reported as unavailable): {sorted(result.failures)}")

    print("\n3. Screening summary")
    cols = ["n", "pct_censored", "mean", "erl", "erm", "n_above_erl", "n_above_erm"]
    print(result.summary[cols].round(2).to_string())

    print("\n4. Total PCBs per sample (first 5)")
    print(result.totals["PCB"].head().round(2).to_string())


if __name__ == "__main__":
    simple_usage_example()
