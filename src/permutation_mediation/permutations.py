"""Pre-generation of per-trial permutation index arrays.

Every trial of a mediation permutation test reorders several inputs
*independently*:

* X and Y each get their own uniform permutation of the N observation
  indices, so the X–Y pairing is broken as well as the link from each
  of them to the mediators.
* For every path p, the mediator matrix M[p] gets its own row
  permutation, and the moderator matrix W[p] (when present) gets
  another one, independent of M[p].
* The covariate matrix C is never permuted.

All index arrays for all trials are drawn up front from a **single**
generator, seeded once per run, in a fixed order (X, Y, then M[p] and
W[p] for each path).  Trials then only read their own row, which makes
the trial loop embarrassingly parallel while keeping the draws
identical to a sequential run with the same seed.

Unlike an exact test over the n! reference set, the null here is
built from several jointly permuted inputs, so duplicate rows within
one role are harmless and no deduplication pass is applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .descriptor import ModelDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrialPermutations:
    """Index arrays for every trial, one ``(niter, N)`` block per role.

    Attributes:
        x: Row order applied to X in each trial.
        y: Row order applied to Y in each trial.
        m: One block per path for the mediator rows.
        w: One block per path for the moderator rows, or ``None`` for
            an unmoderated path.
    """

    x: np.ndarray
    y: np.ndarray
    m: tuple[np.ndarray, ...]
    w: tuple[np.ndarray | None, ...]

    @property
    def niter(self) -> int:
        return int(self.x.shape[0])


def make_seed_sequence(random_state: int | None = None) -> np.random.SeedSequence:
    """Return the seed sequence for one run.

    ``None`` pulls fresh entropy from the operating system; the
    resulting ``.entropy`` can be passed back as *random_state* to
    replay the run.
    """
    return np.random.SeedSequence(random_state)


def generate_permutations(
    rng: np.random.Generator,
    n_samples: int,
    n_permutations: int,
) -> np.ndarray:
    """Draw *n_permutations* uniform permutations of ``range(n_samples)``.

    All rows are produced in a single ``Generator.permuted`` call, an
    independent shuffle of each row of a tiled ``arange``.

    Returns:
        Integer array of shape ``(n_permutations, n_samples)``.
    """
    base = np.tile(np.arange(n_samples, dtype=np.intp), (n_permutations, 1))
    return rng.permuted(base, axis=1)


def generate_trial_permutations(
    descriptor: ModelDescriptor,
    n_samples: int,
    niter: int,
    rng: np.random.Generator,
) -> TrialPermutations:
    """Draw every trial's permutation indices from *rng*.

    Args:
        descriptor: Model shape; decides which paths get a moderator
            permutation.
        n_samples: Number of observations N.
        niter: Number of trials.
        rng: The run's single random source.

    Returns:
        A :class:`TrialPermutations` with one row per trial.
    """
    x_idx = generate_permutations(rng, n_samples, niter)
    y_idx = generate_permutations(rng, n_samples, niter)

    m_idx: list[np.ndarray] = []
    w_idx: list[np.ndarray | None] = []
    for p in range(descriptor.n_paths):
        m_idx.append(generate_permutations(rng, n_samples, niter))
        if descriptor.is_moderated(p):
            w_idx.append(generate_permutations(rng, n_samples, niter))
        else:
            w_idx.append(None)

    logger.debug(
        "Drew permutation indices for %d trial(s), %d path(s), n=%d",
        niter,
        descriptor.n_paths,
        n_samples,
    )
    return TrialPermutations(x=x_idx, y=y_idx, m=tuple(m_idx), w=tuple(w_idx))


__all__ = [
    "TrialPermutations",
    "generate_permutations",
    "generate_trial_permutations",
    "make_seed_sequence",
]
