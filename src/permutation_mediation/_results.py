"""Typed result objects and trial aggregation.

Frozen dataclasses that provide:

* **Attribute access** — ``record.ab``, ``result.coeffs``, etc.
* **Dict-like access** — ``record["ab"]``, ``record.get("key")``,
  ``"key" in record`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types converted to native Python.

Three record types:

* :class:`CoefficientRecord` — the nine path coefficients of one path
  for one realization of the data (baseline or a single trial).
* :class:`PermutationDistribution` — the same nine names, each holding
  the ``niter`` trial values of that coefficient in trial order.
* :class:`MediationResult` — baseline records, distributions, and the
  run metadata needed to replay the run.

:class:`ResultAggregator` owns the pre-allocated trial buffers.  Every
trial writes only its own row, so trials can be filled in any order
(or concurrently) without locking.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, fields
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from ._exceptions import EstimationFailure, ShapeMismatch

if TYPE_CHECKING:
    from .descriptor import ModelDescriptor

COEFFICIENT_NAMES: tuple[str, ...] = (
    "a",
    "b",
    "c_prime",
    "c",
    "ab",
    "d",
    "adb",
    "e",
    "f",
)
"""Field names shared by every coefficient record, in storage order."""

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy scalars/arrays to Python-native types."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.bool_)):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Subclasses may override ``_SERIALIZERS`` to register conversion
    functions for non-primitive fields.  Serialized values still pass
    through :func:`_numpy_to_python`.
    """

    _SERIALIZERS: ClassVar[dict[str, Any]] = {}

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in record``."""
        if not isinstance(key, str):
            return False
        return key in {f.name for f in fields(self)}  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain, JSON-serialisable dictionary."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            val = getattr(self, f.name)
            if f.name in self._SERIALIZERS:
                val = self._SERIALIZERS[f.name](val)
            result[f.name] = _numpy_to_python(val)
        return result


# ------------------------------------------------------------------ #
# CoefficientRecord
# ------------------------------------------------------------------ #


@dataclass(frozen=True, eq=False)
class CoefficientRecord(_DictAccessMixin):
    """Path coefficients for one path and one realization of the data.

    Shapes for a path with I mediators and J moderators:

    ========  =========  ==============================================
    field     shape      meaning
    ========  =========  ==============================================
    a         (I,)       X → M_i
    b         (I,)       M_i → Y, controlling for X
    c_prime   ()         X → Y, controlling for the mediators (direct)
    c         ()         X → Y, covariates only (total)
    ab        (I,)       a · b (indirect)
    d         (J·I,)     X×W_j on M_i (first-stage moderation)
    adb       (J·I,)     d · b (index of moderated mediation)
    e         (J·I,)     W_j → M_i
    f         (J,)       W_j → Y
    ========  =========  ==============================================

    Moderator-indexed fields are flattened moderator-major
    (``j * I + i``) and have length 0 on an unmoderated path.
    """

    a: np.ndarray
    b: np.ndarray
    c_prime: np.ndarray
    c: np.ndarray
    ab: np.ndarray
    d: np.ndarray
    adb: np.ndarray
    e: np.ndarray
    f: np.ndarray

    @classmethod
    def coerce(cls, obj: CoefficientRecord | Mapping[str, Any]) -> CoefficientRecord:
        """Accept a record or a mapping with the nine coefficient names.

        Lets injected estimators return plain dicts.

        Raises:
            EstimationFailure: If a coefficient name is missing.
        """
        if isinstance(obj, CoefficientRecord):
            return obj
        try:
            values = {name: obj[name] for name in COEFFICIENT_NAMES}
        except (KeyError, TypeError) as exc:
            raise EstimationFailure(
                f"Estimator returned {type(obj).__name__} without coefficient "
                f"{exc}; expected fields {', '.join(COEFFICIENT_NAMES)}."
            ) from exc
        return cls(**{k: np.asarray(v, dtype=float) for k, v in values.items()})

    def shapes(self) -> dict[str, tuple[int, ...]]:
        """Per-field array shapes."""
        return {name: np.shape(getattr(self, name)) for name in COEFFICIENT_NAMES}


# ------------------------------------------------------------------ #
# PermutationDistribution
# ------------------------------------------------------------------ #


@dataclass(frozen=True, eq=False)
class PermutationDistribution(_DictAccessMixin):
    """Null distribution of every coefficient for one path.

    Each field has shape ``(niter, *baseline_shape)``: row *t* holds
    the value from trial *t*.  Field meanings match
    :class:`CoefficientRecord`.
    """

    a: np.ndarray
    b: np.ndarray
    c_prime: np.ndarray
    c: np.ndarray
    ab: np.ndarray
    d: np.ndarray
    adb: np.ndarray
    e: np.ndarray
    f: np.ndarray

    @property
    def niter(self) -> int:
        """Number of trials stored."""
        return int(self.a.shape[0])


# ------------------------------------------------------------------ #
# MediationResult
# ------------------------------------------------------------------ #


@dataclass(frozen=True, eq=False)
class MediationResult(_DictAccessMixin):
    """Outcome of a permutation mediation run.

    ``coeffs`` and ``perms`` are indexed by path (0-based).  Replaying a
    run with ``random_state=result.seed`` and the same data and options
    reproduces ``perms`` exactly.
    """

    _SERIALIZERS: ClassVar[dict[str, Any]] = {
        "coeffs": lambda recs: [r.to_dict() for r in recs],
        "perms": lambda recs: [r.to_dict() for r in recs],
        "descriptor": asdict,
    }

    coeffs: tuple[CoefficientRecord, ...]
    """Baseline coefficients from the unpermuted data, one per path."""

    perms: tuple[PermutationDistribution, ...]
    """Permutation distributions, one per path."""

    descriptor: ModelDescriptor
    """Model shape the run was estimated with."""

    niter: int
    """Number of permutation trials."""

    seed: int
    """Entropy that seeded the permutation generator."""

    @property
    def n_paths(self) -> int:
        return len(self.coeffs)


# ------------------------------------------------------------------ #
# ResultAggregator
# ------------------------------------------------------------------ #


class ResultAggregator:
    """Collects trial records into pre-allocated per-path buffers.

    The buffer for path *p* and coefficient *k* has shape
    ``(niter, *baseline[p].k.shape)``.  :meth:`record` validates each
    incoming trial against the baseline shapes before writing.
    """

    def __init__(self, baseline: Sequence[CoefficientRecord], niter: int) -> None:
        self.baseline = tuple(baseline)
        self.niter = niter
        self._shapes = [rec.shapes() for rec in self.baseline]
        self._buffers: list[dict[str, np.ndarray]] = [
            {name: np.empty((niter, *shape)) for name, shape in shapes.items()}
            for shapes in self._shapes
        ]

    def record(self, trial: int, records: Sequence[CoefficientRecord]) -> None:
        """Store the records of trial *trial* (0-based).

        Raises:
            ShapeMismatch: If the path count or any coefficient shape
                differs from the baseline.
        """
        if len(records) != len(self.baseline):
            raise ShapeMismatch(
                f"Estimator returned {len(records)} path record(s), "
                f"expected {len(self.baseline)}."
            )
        for p, rec in enumerate(records):
            buffers = self._buffers[p]
            for name in COEFFICIENT_NAMES:
                value = np.asarray(getattr(rec, name), dtype=float)
                expected = self._shapes[p][name]
                if value.shape != expected:
                    raise ShapeMismatch(
                        f"Path {p + 1} coefficient '{name}' has shape "
                        f"{value.shape}, baseline has {expected}."
                    )
                buffers[name][trial] = value

    def distributions(self) -> tuple[PermutationDistribution, ...]:
        """Freeze the buffers into :class:`PermutationDistribution` records."""
        return tuple(
            PermutationDistribution(**buffers) for buffers in self._buffers
        )


__all__ = [
    "COEFFICIENT_NAMES",
    "CoefficientRecord",
    "MediationResult",
    "PermutationDistribution",
    "ResultAggregator",
]
