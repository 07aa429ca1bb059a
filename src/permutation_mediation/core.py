"""Permutation test for mediated and moderated pathways.

The Sobel test judges an indirect effect ``a·b`` against a normal
approximation that is known to be poor: the product of two normal
coefficients is skewed, so asymptotic p-values are miscalibrated in
the small samples typical of behavioural and imaging studies.  A
permutation test sidesteps the distributional question entirely:

    Under the null hypothesis the observed pairing of X, Y and the
    mediators is just one of many equally likely arrangements.
    Re-estimating the path model on shuffled data therefore samples
    each coefficient's null distribution directly.

Each trial shuffles X and Y with two independent permutations and
shuffles every path's mediator rows (and moderator rows, if the path
is moderated) with further independent permutations.  Covariates keep
their original row order: they describe nuisance variance to control
for, not part of the hypothesis under test.  After ``niter`` trials,
every coefficient of every path has an empirical null distribution in
``result.perms`` to compare with its baseline value in
``result.coeffs``, e.g. the two-sided proportion of trials with
``|ab*| >= |ab|``.

References:
    Cerin, E., Taylor, L. M., Leslie, E. & Owen, N. (2006). Small-scale
    randomized controlled trials need more powerful methods of
    mediational analysis than the Baron–Kenny method. *Journal of
    Clinical Epidemiology*, 59(5), 457–464.

    Preacher, K. J. & Hayes, A. F. (2008). Asymptotic and resampling
    strategies for assessing and comparing indirect effects in
    multiple mediator models. *Behavior Research Methods*, 40(3),
    879–891.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ._config import DEFAULT_NITER, resolve_config
from ._results import MediationResult
from ._typing import ArrayLike, PathInput
from .descriptor import build_descriptor
from .engine import PathwayEstimator, PermutationEngine
from .normalize import normalize_inputs

logger = logging.getLogger(__name__)


def permutation_mediation(
    X: ArrayLike,
    Y: ArrayLike,
    M: PathInput,
    W: PathInput = None,
    C: ArrayLike | None = None,
    *,
    niter: int = DEFAULT_NITER,
    reg_type: str | None = None,
    random_state: int | None = None,
    n_jobs: int = 1,
    estimator: PathwayEstimator | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> MediationResult:
    """Permutation test of every path coefficient in a mediation model.

    Args:
        X: Independent variable, length N (row or column oriented).
        Y: Dependent variable, length N.
        M: Mediator matrix ``(N, I)`` for a single path, or a list with
            one ``(N, I_p)`` matrix per serial path.
        W: Moderator matrix for a single path, a list with one matrix
            (or ``None`` / ``[]``) per path, or ``None`` for no
            moderation.  An unmoderated path must still have an entry
            when a list is given.
        C: Covariate matrix ``(N, L)``, or ``None``.  Never permuted.
        niter: Number of permutation trials.
        reg_type: ``"ols_regress"`` (default) or ``"qr_regress"``.
            ``None`` reads ``PERMUTATION_MEDIATION_REG_TYPE`` before
            falling back to ``"ols_regress"``.
        random_state: Seed for the permutation generator.  ``None``
            draws fresh entropy; ``result.seed`` replays the run.
        n_jobs: Worker threads for the trial loop (``-1`` for all
            cores).  Output is identical for any value.
        estimator: Replacement pathway estimator with the signature
            ``estimate(Y, X, M, W, C, descriptor)``.  Defaults to
            :func:`~permutation_mediation.pathways.estimate_pathways`.
        should_stop: Optional callable checked before each trial; the
            run is cancelled when it returns ``True``.

    Returns:
        A :class:`~permutation_mediation.MediationResult` with
        ``coeffs`` (baseline records) and ``perms`` (null
        distributions), one entry per path.

    Raises:
        InvalidConfiguration: Unknown *reg_type*, or invalid *niter* /
            *n_jobs*; raised before any estimation.
        ShapeMismatch: Inputs disagree on observation or path count.
        EstimationFailure: The baseline or a trial could not be
            estimated.  The error's ``stage`` names which.
        MediationCancelled: *should_stop* returned ``True``.

    Example:
        >>> import numpy as np
        >>> rng = np.random.default_rng(0)
        >>> x = rng.standard_normal(100)
        >>> m = 0.5 * x + rng.standard_normal(100)
        >>> y = 0.4 * m + rng.standard_normal(100)
        >>> result = permutation_mediation(x, y, m, niter=200, random_state=0)
        >>> result.perms[0].ab.shape
        (200, 1)
    """
    config = resolve_config(
        niter=niter,
        reg_type=reg_type,
        n_jobs=n_jobs,
        random_state=random_state,
    )

    inputs = normalize_inputs(X, Y, M, W, C)
    descriptor = build_descriptor(inputs, reg_type=config.reg_type)
    logger.debug(
        "permutation_mediation: n=%d, paths=%d, niter=%d, n_jobs=%d, "
        "custom estimator=%s",
        len(inputs.y),
        descriptor.n_paths,
        config.niter,
        config.n_jobs,
        estimator is not None,
    )

    engine = PermutationEngine(
        inputs,
        descriptor,
        config,
        estimator=estimator,
        should_stop=should_stop,
    )
    return engine.run()


__all__ = ["permutation_mediation"]
