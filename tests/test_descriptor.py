"""Tests for the model descriptor builder."""

import numpy as np
import pytest

from permutation_mediation import InvalidConfiguration, ShapeMismatch
from permutation_mediation.descriptor import ModelDescriptor, build_descriptor
from permutation_mediation.normalize import NormalizedInputs, normalize_inputs

_N = 40


@pytest.fixture()
def rng():
    return np.random.default_rng(11)


class TestBuildDescriptor:
    def test_single_unmoderated_path(self, rng):
        inputs = normalize_inputs(
            rng.standard_normal(_N),
            rng.standard_normal(_N),
            rng.standard_normal((_N, 1)),
            None,
            rng.standard_normal((_N, 1)),
        )
        desc = build_descriptor(inputs)
        assert desc == ModelDescriptor(
            n_paths=1,
            n_mediators=(1,),
            n_moderators=(0,),
            n_covariates=1,
            reg_type="ols_regress",
        )
        assert not desc.is_moderated(0)

    def test_two_paths_second_moderated(self, rng):
        inputs = normalize_inputs(
            rng.standard_normal(_N),
            rng.standard_normal(_N),
            [rng.standard_normal((_N, 3)), rng.standard_normal((_N, 1))],
            [None, rng.standard_normal((_N, 2))],
        )
        desc = build_descriptor(inputs, reg_type="qr_regress")
        assert desc.n_paths == 2
        assert desc.n_mediators == (3, 1)
        assert desc.n_moderators == (0, 2)
        assert desc.n_covariates == 0
        assert desc.reg_type == "qr_regress"
        assert desc.is_moderated(1)

    def test_more_than_two_paths_supported(self, rng):
        paths = [rng.standard_normal((_N, 1)) for _ in range(4)]
        inputs = normalize_inputs(
            rng.standard_normal(_N), rng.standard_normal(_N), paths
        )
        assert build_descriptor(inputs).n_paths == 4

    def test_unknown_reg_type(self, rng):
        inputs = normalize_inputs(
            rng.standard_normal(_N), rng.standard_normal(_N), rng.standard_normal(_N)
        )
        with pytest.raises(InvalidConfiguration) as excinfo:
            build_descriptor(inputs, reg_type="lasso_regress")
        message = str(excinfo.value)
        assert "ols_regress" in message
        assert "qr_regress" in message

    def test_path_count_mismatch(self, rng):
        inputs = NormalizedInputs(
            x=rng.standard_normal(_N),
            y=rng.standard_normal(_N),
            m=(rng.standard_normal((_N, 1)), rng.standard_normal((_N, 1))),
            w=(np.empty((0, 0)),),
            c=np.empty((0, 0)),
        )
        with pytest.raises(ShapeMismatch, match="M declares 2 path"):
            build_descriptor(inputs)

    def test_path_without_mediators(self, rng):
        inputs = normalize_inputs(rng.standard_normal(_N), rng.standard_normal(_N), [])
        with pytest.raises(ShapeMismatch, match=r"M\[1\] has no mediator columns"):
            build_descriptor(inputs)

    def test_row_counts_not_checked(self, rng):
        inputs = normalize_inputs(
            rng.standard_normal(_N),
            rng.standard_normal(_N + 5),
            rng.standard_normal((_N - 3, 1)),
        )
        assert build_descriptor(inputs).n_mediators == (1,)

    def test_descriptor_is_frozen(self, rng):
        inputs = normalize_inputs(
            rng.standard_normal(_N), rng.standard_normal(_N), rng.standard_normal(_N)
        )
        desc = build_descriptor(inputs)
        with pytest.raises(AttributeError):
            desc.n_paths = 3  # type: ignore[misc]
