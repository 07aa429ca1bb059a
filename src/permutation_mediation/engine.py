"""Permutation engine — baseline fit, trial draws, and the trial loop.

The :class:`PermutationEngine` centralises everything that happens
between input normalization and result packaging:

1. **Baseline fit** — call the pathway estimator once on the observed,
   unpermuted data to get the baseline coefficient records.
2. **Seeding** — create the run's single random source from
   ``random_state`` (or fresh OS entropy) and remember the entropy so
   the run can be replayed.
3. **Permutation index generation** — one call to
   :func:`~permutation_mediation.permutations.generate_trial_permutations`
   draws every trial's indices up front.
4. **Trial loop** — for each trial, reorder X, Y, every M[p] and every
   moderated W[p] by that trial's indices, pass C through untouched,
   re-estimate, and write the records into the trial's slot of the
   :class:`~permutation_mediation._results.ResultAggregator`.

Because indices are pre-drawn and each trial writes only its own
slot, trials can run on a joblib thread pool (``n_jobs != 1``) and
still produce output bit-identical to the sequential loop.  NumPy's
LAPACK calls release the GIL, so threads overlap the solves without
the pickling cost of process-based workers.

Any estimator failure aborts the run.  A permutation distribution
with a missing trial has no valid interpretation, so there is no
retry and no partial result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import numpy as np
from joblib import Parallel, delayed

from ._config import MediationConfig
from ._exceptions import (
    EstimationFailure,
    MediationCancelled,
    PermutationMediationError,
    ShapeMismatch,
)
from ._results import CoefficientRecord, MediationResult, ResultAggregator
from .descriptor import ModelDescriptor
from .normalize import NormalizedInputs
from .pathways import estimate_pathways
from .permutations import generate_trial_permutations, make_seed_sequence

logger = logging.getLogger(__name__)

PathwayEstimator = Callable[
    [
        np.ndarray,
        np.ndarray,
        Sequence[np.ndarray],
        Sequence[np.ndarray],
        np.ndarray,
        ModelDescriptor,
    ],
    Sequence[Any],
]
"""``estimate(Y, X, M, W, C, descriptor) -> records``, one per path."""

_EMPTY = np.empty((0, 0), dtype=float)
_EMPTY.flags.writeable = False


class PermutationEngine:
    """Runs the baseline fit and the permutation trials.

    Construct an engine, then call :meth:`run`.  The baseline fit and
    all permutation draws happen at construction, so a configuration
    or baseline failure surfaces before any trial is attempted.

    Attributes:
        inputs: Normalized data.
        descriptor: Model shape.
        config: Validated run options.
        coeffs: Baseline coefficient records, one per path.
        seed: Entropy that seeded the permutation generator.
        perm_indices: Pre-drawn trial indices.
    """

    def __init__(
        self,
        inputs: NormalizedInputs,
        descriptor: ModelDescriptor,
        config: MediationConfig,
        *,
        estimator: PathwayEstimator | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> None:
        self.inputs = inputs
        self.descriptor = descriptor
        self.config = config
        self.estimator: PathwayEstimator = (
            estimator if estimator is not None else estimate_pathways
        )
        self._should_stop = should_stop

        # ---- Baseline fit -----------------------------------------
        self.coeffs: tuple[CoefficientRecord, ...] = self._estimate(
            "baseline",
            inputs.y,
            inputs.x,
            inputs.m,
            tuple(wp if wp.size else _EMPTY for wp in inputs.w),
        )
        self._check_observation_counts()

        # ---- Seeding & permutation indices ------------------------
        seed_sequence = make_seed_sequence(config.random_state)
        self.seed: int = int(seed_sequence.entropy)  # type: ignore[arg-type]
        rng = np.random.default_rng(seed_sequence)

        self.perm_indices = generate_trial_permutations(
            descriptor,
            n_samples=len(inputs.y),
            niter=config.niter,
            rng=rng,
        )
        logger.debug(
            "Engine ready: %d path(s), niter=%d, reg_type=%s, seed=%d",
            descriptor.n_paths,
            config.niter,
            descriptor.reg_type,
            self.seed,
        )

    # ---- Estimator call -------------------------------------------

    def _estimate(
        self,
        stage: str,
        y: np.ndarray,
        x: np.ndarray,
        m: Sequence[np.ndarray],
        w: Sequence[np.ndarray],
    ) -> tuple[CoefficientRecord, ...]:
        """Call the estimator and tag any failure with *stage*."""
        try:
            raw = self.estimator(y, x, m, w, self.inputs.c, self.descriptor)
            return tuple(CoefficientRecord.coerce(rec) for rec in raw)
        except PermutationMediationError as exc:
            raise exc.at_stage(stage) from exc
        except Exception as exc:
            raise EstimationFailure(
                f"{type(exc).__name__}: {exc}", stage=stage
            ) from exc

    def _check_observation_counts(self) -> None:
        """Reject inputs whose row counts differ from Y's.

        The default estimator already enforces this on the baseline;
        the check guards trial indexing when an injected estimator
        does not.
        """
        n = len(self.inputs.y)
        named = [("X", self.inputs.x), ("C", self.inputs.c)]
        named += [(f"M[{p + 1}]", mp) for p, mp in enumerate(self.inputs.m)]
        named += [(f"W[{p + 1}]", wp) for p, wp in enumerate(self.inputs.w)]
        for name, arr in named:
            if arr.size and arr.shape[0] != n:
                raise ShapeMismatch(
                    f"{name} has {arr.shape[0]} observations but Y has {n}.",
                    stage="baseline",
                )

    # ---- Single trial ---------------------------------------------

    def trial_data(
        self, trial: int
    ) -> tuple[np.ndarray, np.ndarray, tuple[np.ndarray, ...], tuple[np.ndarray, ...]]:
        """Permuted ``(y, x, m, w)`` for trial *trial* (0-based).

        C is not part of the return value: it is passed to the
        estimator unpermuted in every trial.
        """
        idx = self.perm_indices
        x = self.inputs.x[idx.x[trial]]
        y = self.inputs.y[idx.y[trial]]
        m = tuple(
            mp[idx.m[p][trial]] for p, mp in enumerate(self.inputs.m)
        )
        w = tuple(
            _EMPTY if idx.w[p] is None else wp[idx.w[p][trial]]
            for p, wp in enumerate(self.inputs.w)
        )
        return y, x, m, w

    def _run_trial(self, trial: int, aggregator: ResultAggregator) -> None:
        stage = f"trial {trial + 1}"
        if self._should_stop is not None and self._should_stop():
            raise MediationCancelled(
                f"Run cancelled before trial {trial + 1} of {self.config.niter}.",
                stage=stage,
            )
        y, x, m, w = self.trial_data(trial)
        records = self._estimate(stage, y, x, m, w)
        try:
            aggregator.record(trial, records)
        except ShapeMismatch as exc:
            raise exc.at_stage(stage) from exc

    # ---- Trial loop -----------------------------------------------

    def run(self) -> MediationResult:
        """Execute every trial and package the result.

        Returns:
            A :class:`MediationResult` with baseline records and one
            permutation distribution per path.

        Raises:
            EstimationFailure: If any trial cannot be estimated.
            ShapeMismatch: If a trial's records disagree with the
                baseline in path count or coefficient shape.
            MediationCancelled: If *should_stop* returned ``True``.
        """
        niter = self.config.niter
        n_jobs = self.config.n_jobs
        aggregator = ResultAggregator(self.coeffs, niter)

        if n_jobs == 1:
            logger.debug("Running %d trial(s) sequentially", niter)
            for trial in range(niter):
                self._run_trial(trial, aggregator)
        else:
            logger.debug("Running %d trial(s) on %d thread(s)", niter, n_jobs)
            Parallel(n_jobs=n_jobs, prefer="threads")(
                delayed(self._run_trial)(trial, aggregator)
                for trial in range(niter)
            )

        logger.debug("Completed %d trial(s)", niter)
        return MediationResult(
            coeffs=self.coeffs,
            perms=aggregator.distributions(),
            descriptor=self.descriptor,
            niter=niter,
            seed=self.seed,
        )


__all__ = ["PathwayEstimator", "PermutationEngine"]
