"""Input compatibility layer for optional Polars support.

The public API accepts NumPy arrays, nested sequences, and pandas
objects.  This module adds transparent support for Polars: when a
user passes a ``polars.DataFrame``, ``polars.LazyFrame`` or
``polars.Series`` it is converted through pandas at the boundary so
that internal code, which operates on NumPy arrays, remains unchanged.

Polars is **not** a required dependency.  If it is not installed, the
converter simply handles pandas and NumPy inputs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeAlias

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = pd.DataFrame | pl.DataFrame | pl.LazyFrame
else:
    DataFrameLike: TypeAlias = pd.DataFrame

# Polars is optional.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _ensure_pandas(obj: Any) -> Any:
    """Convert Polars frames and series to their pandas counterparts.

    Anything that is not a Polars object is returned untouched.
    """
    if _HAS_POLARS:
        if isinstance(obj, pl.LazyFrame):
            return obj.collect().to_pandas()
        if isinstance(obj, (pl.DataFrame, pl.Series)):
            return obj.to_pandas()
    return obj


def _as_float_array(obj: Any, *, name: str = "input") -> np.ndarray:
    """Convert *obj* to a float64 NumPy array.

    Accepted types:
        * ``numpy.ndarray`` and nested Python sequences.
        * ``pandas.DataFrame`` / ``pandas.Series`` — values extracted.
        * ``polars.DataFrame`` / ``LazyFrame`` / ``Series`` — converted
          via pandas when Polars is installed.
        * ``None`` — treated as an empty array.

    Args:
        obj: The array-like to convert.
        name: Label used in error messages (e.g. ``"X"`` or ``"M[1]"``).

    Returns:
        A float64 array.  The result never shares memory with *obj*.

    Raises:
        TypeError: If *obj* cannot be interpreted as numeric data.
    """
    if obj is None:
        return np.empty((0, 0), dtype=float)

    obj = _ensure_pandas(obj)
    if isinstance(obj, (pd.DataFrame, pd.Series)):
        obj = obj.to_numpy()

    try:
        return np.array(obj, dtype=float, copy=True)
    except (TypeError, ValueError) as exc:
        raise TypeError(
            f"'{name}' must be numeric array-like data"
            + (" (NumPy, pandas or Polars)" if _HAS_POLARS else " (NumPy or pandas)")
            + f", got {type(obj).__name__}."
        ) from exc
