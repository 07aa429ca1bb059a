"""Orientation normalizer.

Coerces every numeric input to a canonical column orientation (one row
per observation) and wraps single-path mediator and moderator inputs
into per-path containers.

Orientation rule
----------------
The observation axis is the longer one: any array whose width exceeds
its height is transposed.  A 1-D vector of length N becomes ``(N, 1)``
for matrices and stays ``(N,)`` for X and Y.  The rule is a no-op on
input that is already column oriented, so normalizing twice returns
the same arrays.

Container detection
-------------------
M and W may each be given as one matrix (one path) or as a list/tuple
of matrices (one per serial path).  A list is treated as a container
only when its elements are themselves array-like matrices; a flat list
of numbers is a single vector.  An empty moderator for a path is an
explicit ``(0, 0)`` array, never a missing entry.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from ._compat import _as_float_array, _ensure_pandas
from ._exceptions import ShapeMismatch
from ._typing import ArrayLike, PathInput


@dataclass(frozen=True)
class NormalizedInputs:
    """Column-oriented copies of one run's data.

    Attributes:
        x: Independent variable ``(N,)``.
        y: Dependent variable ``(N,)``.
        m: One mediator matrix ``(N, I_p)`` per path.
        w: One moderator matrix ``(N, J_p)`` per path, or an empty
            ``(0, 0)`` array for an unmoderated path.
        c: Covariate matrix ``(N, L)``, or ``(0, 0)`` without covariates.
    """

    x: np.ndarray
    y: np.ndarray
    m: tuple[np.ndarray, ...]
    w: tuple[np.ndarray, ...]
    c: np.ndarray


def _is_empty(arr: np.ndarray) -> bool:
    return arr.size == 0


def orient_vector(values: Any, *, name: str) -> np.ndarray:
    """Return *values* as a flat ``(N,)`` float vector.

    Accepts ``(N,)``, ``(N, 1)`` and ``(1, N)`` shapes.
    """
    arr = _as_float_array(values, name=name)
    if arr.ndim == 2 and arr.shape[1] > arr.shape[0]:
        arr = arr.T
    if arr.ndim == 2 and arr.shape[1] == 1:
        arr = arr[:, 0]
    if arr.ndim != 1:
        raise ShapeMismatch(
            f"'{name}' must be a single vector, got shape {arr.shape}.",
            stage="configuration",
        )
    return arr


def orient_matrix(values: Any, *, name: str) -> np.ndarray:
    """Return *values* as a 2-D ``(N, k)`` float matrix.

    Empty input (``None``, ``[]``) yields a ``(0, 0)`` array.
    """
    arr = _as_float_array(values, name=name)
    if _is_empty(arr):
        return np.empty((0, 0), dtype=float)
    if arr.ndim == 1:
        arr = arr[:, np.newaxis]
    if arr.ndim != 2:
        raise ShapeMismatch(
            f"'{name}' must be at most 2-D, got shape {arr.shape}.",
            stage="configuration",
        )
    if arr.shape[1] > arr.shape[0]:
        arr = arr.T
    return arr


def _is_path_container(obj: Any) -> bool:
    """``True`` when *obj* is a list/tuple of per-path matrices."""
    if not isinstance(obj, (list, tuple)):
        return False
    if len(obj) == 0:
        return False
    return all(
        item is None
        or isinstance(item, (np.ndarray, pd.DataFrame, pd.Series))
        or isinstance(_ensure_pandas(item), (pd.DataFrame, pd.Series))
        or (isinstance(item, Sequence) and not isinstance(item, str)
            and (len(item) == 0 or isinstance(item[0], Sequence)))
        for item in obj
    )


def as_path_container(values: PathInput) -> list[Any]:
    """Wrap a single-path input into a length-1 container."""
    if _is_path_container(values):
        return list(values)  # type: ignore[arg-type]
    return [values]


def normalize_inputs(
    X: ArrayLike,
    Y: ArrayLike,
    M: PathInput,
    W: PathInput = None,
    C: ArrayLike | None = None,
) -> NormalizedInputs:
    """Normalize raw caller data into :class:`NormalizedInputs`.

    Caller-owned inputs are never mutated; every output is a copy.

    Args:
        X: Independent variable, row or column oriented.
        Y: Dependent variable, row or column oriented.
        M: Mediator matrix, or a list with one matrix per path.
        W: Moderator matrix, a list with one matrix (or empty entry)
            per path, or ``None`` for no moderation anywhere.
        C: Covariate matrix, or ``None`` for no covariates.

    Returns:
        Column-oriented copies with per-path M and W containers.
    """
    x = orient_vector(X, name="X")
    y = orient_vector(Y, name="Y")

    m_raw = as_path_container(M)
    m = tuple(
        orient_matrix(mp, name=f"M[{p + 1}]") for p, mp in enumerate(m_raw)
    )

    # A bare empty W means "no moderation on any path".
    if W is None or (
        not _is_path_container(W) and _is_empty(_as_float_array(W, name="W"))
    ):
        w_raw: list[Any] = [None] * len(m)
    else:
        w_raw = as_path_container(W)
    w = tuple(
        orient_matrix(wp, name=f"W[{p + 1}]") for p, wp in enumerate(w_raw)
    )

    c = orient_matrix(C, name="C")

    return NormalizedInputs(x=x, y=y, m=m, w=w, c=c)


__all__ = [
    "NormalizedInputs",
    "as_path_container",
    "normalize_inputs",
    "orient_matrix",
    "orient_vector",
]
