"""Ordinary least squares via the normal equations.

    β̂ = (X'X)⁻¹ X'Y

The Gram matrix X'X is only k × k, so a direct solve is cheap even
when the same design is reused across many permutation trials.  A
multi-column Y is solved in one call, giving one coefficient column
per response.
"""

from __future__ import annotations

import numpy as np

from .._exceptions import EstimationFailure
from . import check_identifiable


class OLSRegression:
    """Normal-equations least squares (``"ols_regress"``)."""

    name: str = "ols_regress"

    def fit(self, design: np.ndarray, response: np.ndarray) -> np.ndarray:
        check_identifiable(design)
        gram = design.T @ design
        try:
            return np.linalg.solve(gram, design.T @ response)
        except np.linalg.LinAlgError as exc:
            raise EstimationFailure(f"Normal equations are singular: {exc}") from exc
