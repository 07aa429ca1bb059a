"""Trial-loop benchmark for permutation_mediation().

Measures wall time of a full run across observation counts, serial
path counts, regression strategies and thread counts.

Key questions this benchmark answers
-------------------------------------
1. How does runtime scale with n and with the number of serial paths?
2. Is ``qr_regress`` measurably slower than ``ols_regress``?
3. At what n does the joblib thread pool start to pay for itself?

Usage::

    python benchmarks/profile_trials.py          # full suite
    python benchmarks/profile_trials.py --quick  # reduced

Outputs:
    benchmarks/results/trials_profile.csv
"""

from __future__ import annotations

import argparse
import itertools
import platform
import sys
import time
from pathlib import Path

import numpy as np
import pandas as pd

# Ensure the package is importable when running from the repo root.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from permutation_mediation import permutation_mediation  # noqa: E402

RESULTS_DIR = Path(__file__).resolve().parent / "results"

FULL = {
    "n": [100, 1_000, 10_000],
    "paths": [1, 2, 3],
    "reg_type": ["ols_regress", "qr_regress"],
    "n_jobs": [1, 4],
    "niter": 500,
}
QUICK = {
    "n": [100, 1_000],
    "paths": [1, 2],
    "reg_type": ["ols_regress", "qr_regress"],
    "n_jobs": [1, 2],
    "niter": 100,
}


def _make_data(n: int, paths: int, seed: int = 0):
    rng = np.random.default_rng(seed)
    x = rng.standard_normal(n)
    c = rng.standard_normal((n, 2))
    m = []
    prev = x
    for _ in range(paths):
        mp = 0.5 * prev + rng.standard_normal(n)
        m.append(mp[:, np.newaxis])
        prev = mp
    w = [rng.standard_normal((n, 1))] + [None] * (paths - 1)
    y = 0.4 * prev + 0.2 * x + rng.standard_normal(n)
    return x, y, m, w, c


def run(grid: dict) -> pd.DataFrame:
    rows = []
    for n, paths, reg_type, n_jobs in itertools.product(
        grid["n"], grid["paths"], grid["reg_type"], grid["n_jobs"]
    ):
        x, y, m, w, c = _make_data(n, paths)
        t0 = time.perf_counter()
        permutation_mediation(
            x,
            y,
            m,
            w,
            c,
            niter=grid["niter"],
            reg_type=reg_type,
            n_jobs=n_jobs,
            random_state=0,
        )
        elapsed = time.perf_counter() - t0
        print(
            f"n={n:>6} paths={paths} {reg_type:<11} n_jobs={n_jobs}  "
            f"{elapsed:7.2f}s"
        )
        rows.append(
            {
                "n": n,
                "paths": paths,
                "reg_type": reg_type,
                "n_jobs": n_jobs,
                "niter": grid["niter"],
                "seconds": elapsed,
                "per_trial_ms": 1000 * elapsed / grid["niter"],
            }
        )
    return pd.DataFrame(rows)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--quick", action="store_true", help="reduced grid")
    args = parser.parse_args()

    print(f"Python {platform.python_version()} on {platform.platform()}")
    df = run(QUICK if args.quick else FULL)

    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    out = RESULTS_DIR / "trials_profile.csv"
    df.to_csv(out, index=False)
    print(f"\nWrote {out}")


if __name__ == "__main__":
    main()
