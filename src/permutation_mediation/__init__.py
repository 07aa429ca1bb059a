"""permutation_mediation — Permutation tests for mediation pathways.

Estimates the significance of mediated and moderated pathways between
an independent variable X and a dependent variable Y, through one or
more serial sets of mediators, by building an empirical null
distribution for every path coefficient (Cerin et al., 2006; Preacher
& Hayes, 2008).  Supports multiple serial paths, per-path moderators,
fixed covariates, OLS or QR least squares, and thread-parallel trials
with seed-exact replay.

Public API:
    .. autosummary::
        permutation_mediation
        estimate_pathways
        normalize_inputs
        build_descriptor
        resolve_config
        resolve_regression
        PermutationEngine
        MediationConfig
        ModelDescriptor
        NormalizedInputs
        CoefficientRecord
        PermutationDistribution
        MediationResult
        COEFFICIENT_NAMES
        InvalidConfiguration
        ShapeMismatch
        EstimationFailure
        MediationCancelled
"""

from ._config import MediationConfig, resolve_config
from ._exceptions import (
    EstimationFailure,
    InvalidConfiguration,
    MediationCancelled,
    PermutationMediationError,
    ShapeMismatch,
)
from ._regressions import resolve_regression
from ._results import (
    COEFFICIENT_NAMES,
    CoefficientRecord,
    MediationResult,
    PermutationDistribution,
)
from .core import permutation_mediation
from .descriptor import ModelDescriptor, build_descriptor
from .engine import PermutationEngine
from .normalize import NormalizedInputs, normalize_inputs
from .pathways import estimate_pathways

__all__ = [
    "COEFFICIENT_NAMES",
    "CoefficientRecord",
    "EstimationFailure",
    "InvalidConfiguration",
    "MediationCancelled",
    "MediationConfig",
    "MediationResult",
    "ModelDescriptor",
    "NormalizedInputs",
    "PermutationDistribution",
    "PermutationEngine",
    "PermutationMediationError",
    "ShapeMismatch",
    "build_descriptor",
    "estimate_pathways",
    "normalize_inputs",
    "permutation_mediation",
    "resolve_config",
    "resolve_regression",
]

__version__ = "0.1.0"
