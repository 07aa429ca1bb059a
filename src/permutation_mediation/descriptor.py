"""Model descriptor — the fixed shape of one mediation model.

A :class:`ModelDescriptor` records how many serial paths are modelled,
how wide each path's mediator and moderator sets are, how many
covariates are controlled for, and which regression strategy to use.
It is built once from the normalized inputs and passed explicitly to
every step that needs it (engine, estimator, aggregator), so nothing
about the model shape lives in shared state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ._exceptions import InvalidConfiguration, ShapeMismatch
from ._regressions import VALID_REG_TYPES
from .normalize import NormalizedInputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelDescriptor:
    """Immutable description of the model shape.

    Attributes:
        n_paths: Number of serial indirect paths, S.
        n_mediators: Mediator count I_p for each path.
        n_moderators: Moderator count J_p for each path (0 when the
            path is unmoderated).
        n_covariates: Covariate count L.
        reg_type: Regression strategy name.
    """

    n_paths: int
    n_mediators: tuple[int, ...]
    n_moderators: tuple[int, ...]
    n_covariates: int
    reg_type: str = "ols_regress"

    def is_moderated(self, path: int) -> bool:
        """Whether path *path* (0-based) carries a moderator matrix."""
        return self.n_moderators[path] > 0


def build_descriptor(
    inputs: NormalizedInputs,
    reg_type: str = "ols_regress",
) -> ModelDescriptor:
    """Derive the :class:`ModelDescriptor` for *inputs*.

    Row counts are not compared here; an inconsistent observation count
    surfaces from the estimator.

    Args:
        inputs: Output of :func:`~permutation_mediation.normalize.normalize_inputs`.
        reg_type: Regression strategy name.

    Raises:
        InvalidConfiguration: If *reg_type* is not ``"ols_regress"`` or
            ``"qr_regress"``.
        ShapeMismatch: If the M and W containers hold a different
            number of paths, or a path has no mediator columns.
    """
    if reg_type not in VALID_REG_TYPES:
        raise InvalidConfiguration(
            f"Unknown regression type '{reg_type}'. "
            f"Options are {' and '.join(VALID_REG_TYPES)}.",
            stage="configuration",
        )

    n_paths = len(inputs.m)
    if len(inputs.w) != n_paths:
        raise ShapeMismatch(
            f"M declares {n_paths} path(s) but W declares {len(inputs.w)}; "
            "give an empty moderator for each unmoderated path.",
            stage="configuration",
        )

    n_mediators = tuple(mp.shape[1] if mp.size else 0 for mp in inputs.m)
    for p, width in enumerate(n_mediators):
        if width < 1:
            raise ShapeMismatch(
                f"M[{p + 1}] has no mediator columns.", stage="configuration"
            )

    n_moderators = tuple(wp.shape[1] if wp.size else 0 for wp in inputs.w)
    n_covariates = inputs.c.shape[1] if inputs.c.size else 0

    descriptor = ModelDescriptor(
        n_paths=n_paths,
        n_mediators=n_mediators,
        n_moderators=n_moderators,
        n_covariates=n_covariates,
        reg_type=reg_type,
    )
    logger.debug("Model descriptor: %s", descriptor)
    return descriptor


__all__ = ["ModelDescriptor", "build_descriptor"]
