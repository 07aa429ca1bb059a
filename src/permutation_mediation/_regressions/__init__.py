"""Regression strategy registry and protocol.

Each strategy encapsulates one least-squares solver and exposes a
uniform ``fit()`` interface that the pathway estimator calls for every
mediator, outcome and total-effect model.

Two strategies are registered:

* ``"ols_regress"`` — ordinary least squares via the normal equations.
* ``"qr_regress"`` — least squares via a reduced QR decomposition,
  numerically steadier when regressors are strongly collinear.

Both reject rank-deficient designs with
:class:`~permutation_mediation.EstimationFailure` instead of returning
an arbitrary minimum-norm solution: a permutation trial built on an
unidentified model would silently corrupt the null distribution.

Adding a new strategy
~~~~~~~~~~~~~~~~~~~~~
1. Create a module under ``_regressions/`` with a class that satisfies
   the :class:`RegressionStrategy` protocol.
2. Register it in :data:`_REGRESSION_REGISTRY` below.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from .._exceptions import EstimationFailure, InvalidConfiguration

VALID_REG_TYPES: tuple[str, ...] = ("ols_regress", "qr_regress")

# ------------------------------------------------------------------ #
# Strategy protocol
# ------------------------------------------------------------------ #


@runtime_checkable
class RegressionStrategy(Protocol):
    """Interface that every regression strategy must satisfy."""

    name: str
    """Registry key (e.g. ``"ols_regress"``)."""

    def fit(self, design: np.ndarray, response: np.ndarray) -> np.ndarray:
        """Solve ``design @ beta ≈ response`` in the least-squares sense.

        Args:
            design: Design matrix ``(n, k)``, intercept column included.
            response: Response vector ``(n,)`` or matrix ``(n, q)``;
                each column is an independent regression sharing the
                same design.

        Returns:
            Coefficients ``(k,)`` or ``(k, q)`` matching *response*.

        Raises:
            EstimationFailure: If the design is rank deficient.
        """
        ...


def check_identifiable(design: np.ndarray, label: str = "design") -> None:
    """Raise if *design* cannot identify one coefficient per column."""
    n, k = design.shape
    if n < k:
        raise EstimationFailure(
            f"{label} has {k} columns but only {n} observations."
        )
    rank = np.linalg.matrix_rank(design)
    if rank < k:
        raise EstimationFailure(
            f"{label} is rank deficient (rank {rank} < {k} columns)."
        )


# ------------------------------------------------------------------ #
# Registry
# ------------------------------------------------------------------ #

_REGRESSION_REGISTRY: dict[str, type[RegressionStrategy]] = {}


def _ensure_registry() -> None:
    """Populate the registry on first access."""
    if _REGRESSION_REGISTRY:
        return

    from .ols import OLSRegression
    from .qr import QRRegression

    _REGRESSION_REGISTRY.update(
        {
            "ols_regress": OLSRegression,
            "qr_regress": QRRegression,
        }
    )


def resolve_regression(reg_type: str) -> RegressionStrategy:
    """Return a strategy instance for the given regression type.

    Args:
        reg_type: ``"ols_regress"`` or ``"qr_regress"``.

    Raises:
        InvalidConfiguration: If *reg_type* is not recognised.
    """
    _ensure_registry()
    cls = _REGRESSION_REGISTRY.get(reg_type)
    if cls is None:
        raise InvalidConfiguration(
            f"Unknown regression type '{reg_type}'. "
            f"Options are {' and '.join(VALID_REG_TYPES)}."
        )
    return cls()


__all__ = [
    "VALID_REG_TYPES",
    "RegressionStrategy",
    "check_identifiable",
    "resolve_regression",
]
