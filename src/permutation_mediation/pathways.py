"""Default pathway estimator.

Given one realization of (Y, X, M, W, C), estimate the path
coefficients of every serial path with a chosen least-squares
strategy.  The permutation engine calls this once on the observed data
and once per trial; any callable with the same signature can be
injected in its place.

Model
-----
Paths are serial: mediators of later paths are allowed to depend on
the mediators of earlier ones (X → M[1] → M[2] → … → Y).  Moderation
is first stage, i.e. W[p] moderates the X → M[p] link.  For path p
with mediators M[p] and moderators W[p]:

1. **Mediator model** (one regression per mediator column)::

       M[p] = i₁ + a·X + Σ_{q<p} g_q·M[q] + e·W[p] + d·(X × W[p]) + h·C

   ``a`` is the X → M effect, ``e`` the moderator main effect and
   ``d`` the X × W interaction.

2. **Outcome model** (shared by every path)::

       Y = i₂ + c′·X + Σ_q b_q·M[q] + Σ_q f_q·W[q] + k·C

   ``c′`` is the direct effect; ``b`` and ``f`` are the rows that
   belong to path p.  A moderator column given for several paths
   enters this model once, and those paths share its ``f``.

3. **Total-effect model** (shared)::

       Y = i₃ + c·X + k·C

The indirect effect is ``ab = a · b`` per mediator and the index of
moderated mediation is ``adb = d · b`` per (moderator, mediator) pair.
Covariates enter every model and are never reordered.

Reference:
    Preacher, K. J. & Hayes, A. F. (2008). Asymptotic and resampling
    strategies for assessing and comparing indirect effects in
    multiple mediator models. *Behavior Research Methods*, 40(3),
    879–891.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ._exceptions import EstimationFailure, ShapeMismatch
from ._regressions import RegressionStrategy, resolve_regression
from ._results import CoefficientRecord
from .descriptor import ModelDescriptor


def _check_rows(n: int, arr: np.ndarray, name: str) -> None:
    if arr.size and arr.shape[0] != n:
        raise ShapeMismatch(
            f"{name} has {arr.shape[0]} observations but Y has {n}."
        )


def _check_finite(arr: np.ndarray, name: str) -> None:
    if arr.size and not np.all(np.isfinite(arr)):
        raise EstimationFailure(f"{name} contains NaN or infinite values.")


def _design(n: int, blocks: Sequence[np.ndarray]) -> np.ndarray:
    """Intercept column followed by every non-empty block."""
    cols = [np.ones((n, 1))]
    cols.extend(
        block.reshape(n, -1) for block in blocks if block.size
    )
    return np.hstack(cols)


def _shared_moderators(
    W: Sequence[np.ndarray], n: int
) -> tuple[np.ndarray, list[np.ndarray]]:
    """Moderator block for the outcome model and each path's columns in it.

    A column that repeats a column of an earlier path's moderators enters
    the block once and is shared by both paths.
    """
    columns: list[np.ndarray] = []
    positions: list[np.ndarray] = []
    for wp in W:
        n_prior = len(columns)
        pos: list[int] = []
        for j in range(wp.shape[1] if wp.size else 0):
            col = wp[:, j]
            match = next(
                (k for k in range(n_prior) if np.array_equal(columns[k], col)),
                None,
            )
            if match is None:
                match = len(columns)
                columns.append(col)
            pos.append(match)
        positions.append(np.asarray(pos, dtype=np.intp))
    block = np.column_stack(columns) if columns else np.empty((n, 0))
    return block, positions


def _fit(
    strategy: RegressionStrategy,
    design: np.ndarray,
    response: np.ndarray,
    label: str,
) -> np.ndarray:
    try:
        return strategy.fit(design, response)
    except EstimationFailure as exc:
        raise EstimationFailure(f"{label}: {exc}") from exc


def estimate_pathways(
    Y: np.ndarray,
    X: np.ndarray,
    M: Sequence[np.ndarray],
    W: Sequence[np.ndarray],
    C: np.ndarray,
    descriptor: ModelDescriptor,
) -> tuple[CoefficientRecord, ...]:
    """Estimate the coefficient record of every path.

    Args:
        Y: Outcome ``(N,)``.
        X: Predictor ``(N,)``.
        M: Mediator matrices ``(N, I_p)``, one per path.
        W: Moderator matrices ``(N, J_p)`` or empty, one per path.
        C: Covariates ``(N, L)`` or empty.
        descriptor: Model shape; supplies the regression strategy.

    Returns:
        One :class:`CoefficientRecord` per path.

    Raises:
        ShapeMismatch: If the path count differs from *descriptor* or
            any input's row count differs from ``len(Y)``.
        EstimationFailure: If an input is non-finite or a design
            matrix is rank deficient.
    """
    if len(M) != descriptor.n_paths or len(W) != descriptor.n_paths:
        raise ShapeMismatch(
            f"Expected {descriptor.n_paths} path(s), got {len(M)} mediator "
            f"and {len(W)} moderator matrices."
        )

    y = np.asarray(Y, dtype=float).ravel()
    x = np.asarray(X, dtype=float).ravel()
    n = y.shape[0]

    _check_rows(n, x, "X")
    _check_rows(n, C, "C")
    for p in range(descriptor.n_paths):
        _check_rows(n, M[p], f"M[{p + 1}]")
        _check_rows(n, W[p], f"W[{p + 1}]")

    for arr, name in [(y, "Y"), (x, "X"), (C, "C")]:
        _check_finite(arr, name)
    for p in range(descriptor.n_paths):
        _check_finite(M[p], f"M[{p + 1}]")
        _check_finite(W[p], f"W[{p + 1}]")

    strategy = resolve_regression(descriptor.reg_type)
    x_col = x[:, np.newaxis]

    # ---- Shared models ---------------------------------------------
    total = _fit(strategy, _design(n, [x_col, C]), y, "total-effect model")
    c_total = np.asarray(total[1])

    w_block, w_positions = _shared_moderators(W, n)
    outcome_design = _design(n, [x_col, *M, w_block, C])
    outcome = _fit(strategy, outcome_design, y, "outcome model")
    c_prime = np.asarray(outcome[1])

    # Outcome-model column offsets: [1, X, M[1..S], unique W columns, C].
    m_offsets = np.cumsum([2, *(mp.shape[1] for mp in M)])
    w_widths = [wp.shape[1] if wp.size else 0 for wp in W]

    records: list[CoefficientRecord] = []
    for p in range(descriptor.n_paths):
        m_p = M[p]
        n_med = m_p.shape[1]
        n_mod = w_widths[p]
        w_p = W[p] if n_mod else np.empty((n, 0))
        prior = [M[q] for q in range(p)]

        # ---- Mediator model: [1, X, M[<p], W, X·W, C] ---------------
        mediator_design = _design(n, [x_col, *prior, w_p, x_col * w_p, C])
        med = _fit(strategy, mediator_design, m_p, f"mediator model for path {p + 1}")
        med = med.reshape(mediator_design.shape[1], n_med)

        a = med[1]
        w_start = 2 + sum(mq.shape[1] for mq in prior)
        e = med[w_start : w_start + n_mod].ravel()
        d = med[w_start + n_mod : w_start + 2 * n_mod].ravel()

        b = outcome[m_offsets[p] : m_offsets[p + 1]]
        f = outcome[m_offsets[-1] + w_positions[p]]

        ab = a * b
        adb = (d.reshape(n_mod, n_med) * b[np.newaxis, :]).ravel()

        records.append(
            CoefficientRecord(
                a=a,
                b=b,
                c_prime=c_prime,
                c=c_total,
                ab=ab,
                d=d,
                adb=adb,
                e=e,
                f=f,
            )
        )

    return tuple(records)


__all__ = ["estimate_pathways"]
