"""Exception hierarchy for permutation mediation runs.

Every failure is fatal to the call: there is no partial result and no
retry.  Errors raised by the engine carry a ``stage`` attribute that
identifies where the run stopped:

* ``"configuration"`` — options rejected before any estimation.
* ``"baseline"`` — the fit on the unpermuted data failed.
* ``"trial <t>"`` — permutation trial *t* (1-based) failed.
"""

from __future__ import annotations


class PermutationMediationError(Exception):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        self.stage = stage
        if stage is not None:
            message = f"[{stage}] {message}"
        super().__init__(message)

    def at_stage(self, stage: str) -> PermutationMediationError:
        """Return a copy of this error tagged with *stage*."""
        detail = str(self)
        if self.stage is not None:
            detail = detail.split("] ", 1)[-1]
        return type(self)(detail, stage=stage)


class InvalidConfiguration(PermutationMediationError, ValueError):
    """An option (``reg_type``, ``niter``, ``n_jobs``) is not valid."""


class ShapeMismatch(PermutationMediationError, ValueError):
    """Inputs disagree on observation count or path count."""


class EstimationFailure(PermutationMediationError, RuntimeError):
    """The pathway estimator could not produce coefficients."""


class MediationCancelled(PermutationMediationError, RuntimeError):
    """The caller requested a stop between permutation trials."""


__all__ = [
    "EstimationFailure",
    "InvalidConfiguration",
    "MediationCancelled",
    "PermutationMediationError",
    "ShapeMismatch",
]
