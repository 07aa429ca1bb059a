"""Run configuration for permutation mediation.

Options are collected into a frozen :class:`MediationConfig` that is
validated once at the boundary and then threaded explicitly through
the engine.  There is no module-level mutable state.

Resolution order for the default regression type (first match wins):
    1. The ``reg_type`` argument passed by the caller.
    2. The ``PERMUTATION_MEDIATION_REG_TYPE`` environment variable.
    3. The built-in default, ``"ols_regress"``.

Valid regression types are ``"ols_regress"`` and ``"qr_regress"``
(case-insensitive).

Examples:
    Switch the default solver from the shell::

        export PERMUTATION_MEDIATION_REG_TYPE=qr_regress

    Or per call::

        permutation_mediation(X, Y, M, reg_type="qr_regress")
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from numbers import Integral

from ._exceptions import InvalidConfiguration
from ._regressions import VALID_REG_TYPES

logger = logging.getLogger(__name__)

DEFAULT_NITER = 1000
DEFAULT_REG_TYPE = "ols_regress"
REG_TYPE_ENV_VAR = "PERMUTATION_MEDIATION_REG_TYPE"


def default_reg_type() -> str:
    """Return the regression type used when the caller passes none.

    Resolution order:
        1. ``PERMUTATION_MEDIATION_REG_TYPE`` environment variable.
        2. ``"ols_regress"``.

    An unrecognised environment value is returned as-is so that
    validation reports it alongside the valid options.
    """
    env = os.environ.get(REG_TYPE_ENV_VAR, "").strip().lower()
    if env:
        return env
    return DEFAULT_REG_TYPE


@dataclass(frozen=True)
class MediationConfig:
    """Validated options for one permutation mediation run.

    Attributes:
        niter: Number of permutation trials (positive integer).
        reg_type: Regression strategy name, ``"ols_regress"`` or
            ``"qr_regress"``.
        n_jobs: Worker threads for the trial loop.  ``1`` runs
            sequentially; ``-1`` uses every core (joblib convention).
        random_state: Seed for the permutation generator.  ``None``
            draws fresh OS entropy once per run.
    """

    niter: int = DEFAULT_NITER
    reg_type: str = DEFAULT_REG_TYPE
    n_jobs: int = 1
    random_state: int | None = None

    def validate(self) -> MediationConfig:
        """Check every option and return ``self``.

        Raises:
            InvalidConfiguration: On the first invalid option.
        """
        if self.reg_type not in VALID_REG_TYPES:
            raise InvalidConfiguration(
                f"Unknown regression type '{self.reg_type}'. "
                f"Options are {' and '.join(VALID_REG_TYPES)}.",
                stage="configuration",
            )
        if (
            isinstance(self.niter, bool)
            or not isinstance(self.niter, Integral)
            or self.niter < 1
        ):
            raise InvalidConfiguration(
                f"niter must be a positive integer, got {self.niter!r}.",
                stage="configuration",
            )
        if (
            isinstance(self.n_jobs, bool)
            or not isinstance(self.n_jobs, Integral)
            or self.n_jobs == 0
        ):
            raise InvalidConfiguration(
                f"n_jobs must be a non-zero integer, got {self.n_jobs!r}.",
                stage="configuration",
            )
        if self.random_state is not None and (
            isinstance(self.random_state, bool)
            or not isinstance(self.random_state, Integral)
            or self.random_state < 0
        ):
            raise InvalidConfiguration(
                "random_state must be None or a non-negative integer, "
                f"got {self.random_state!r}.",
                stage="configuration",
            )
        return self


def resolve_config(
    *,
    niter: int = DEFAULT_NITER,
    reg_type: str | None = None,
    n_jobs: int = 1,
    random_state: int | None = None,
) -> MediationConfig:
    """Build and validate a :class:`MediationConfig` from call options.

    Args:
        niter: Number of permutation trials.
        reg_type: Regression strategy name.  ``None`` falls back to
            :func:`default_reg_type`.
        n_jobs: Worker threads for the trial loop.
        random_state: Seed for the permutation generator.

    Returns:
        A validated configuration.

    Raises:
        InvalidConfiguration: If any option is invalid.
    """
    if reg_type is None:
        reg_type = default_reg_type()
    elif isinstance(reg_type, str):
        reg_type = reg_type.strip().lower()

    config = MediationConfig(
        niter=niter,
        reg_type=reg_type,
        n_jobs=n_jobs,
        random_state=random_state,
    ).validate()
    logger.debug("Resolved configuration: %s", config)
    return config
