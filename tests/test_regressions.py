"""Tests for the OLS and QR regression strategies."""

import numpy as np
import pytest

from permutation_mediation import EstimationFailure, InvalidConfiguration
from permutation_mediation._regressions import (
    VALID_REG_TYPES,
    RegressionStrategy,
    check_identifiable,
    resolve_regression,
)
from permutation_mediation._regressions.ols import OLSRegression
from permutation_mediation._regressions.qr import QRRegression


@pytest.fixture()
def design():
    rng = np.random.default_rng(3)
    n = 60
    return np.column_stack([np.ones(n), rng.standard_normal((n, 3))])


class TestResolveRegression:
    @pytest.mark.parametrize(
        ("name", "cls"), [("ols_regress", OLSRegression), ("qr_regress", QRRegression)]
    )
    def test_known_names(self, name, cls):
        strategy = resolve_regression(name)
        assert isinstance(strategy, cls)
        assert isinstance(strategy, RegressionStrategy)
        assert strategy.name == name

    def test_unknown_name(self):
        with pytest.raises(InvalidConfiguration, match="ols_regress and qr_regress"):
            resolve_regression("lasso_regress")

    def test_valid_names(self):
        assert VALID_REG_TYPES == ("ols_regress", "qr_regress")


@pytest.mark.parametrize("reg_type", VALID_REG_TYPES)
class TestFit:
    def test_recovers_exact_coefficients(self, reg_type, design):
        beta = np.array([0.5, 2.0, -1.0, 0.25])
        coefs = resolve_regression(reg_type).fit(design, design @ beta)
        np.testing.assert_allclose(coefs, beta, atol=1e-10)

    def test_multi_column_response(self, reg_type, design):
        betas = np.array([[1.0, -1.0], [2.0, 0.0], [0.0, 3.0], [0.5, 0.5]])
        coefs = resolve_regression(reg_type).fit(design, design @ betas)
        assert coefs.shape == (4, 2)
        np.testing.assert_allclose(coefs, betas, atol=1e-10)

    def test_rank_deficient_rejected(self, reg_type, design):
        collinear = np.column_stack([design, 2.0 * design[:, 1]])
        with pytest.raises(EstimationFailure, match="rank deficient"):
            resolve_regression(reg_type).fit(collinear, design[:, 2])

    def test_too_few_observations(self, reg_type, design):
        with pytest.raises(EstimationFailure, match="only 3 observations"):
            resolve_regression(reg_type).fit(design[:3], design[:3, 1])


class TestStrategiesAgree:
    def test_ols_matches_qr_with_noise(self, design):
        rng = np.random.default_rng(8)
        y = design @ np.array([1.0, 0.3, -0.7, 1.1]) + rng.standard_normal(len(design))
        ols = resolve_regression("ols_regress").fit(design, y)
        qr = resolve_regression("qr_regress").fit(design, y)
        np.testing.assert_allclose(ols, qr, rtol=1e-8, atol=1e-10)

    def test_matches_numpy_lstsq(self, design):
        rng = np.random.default_rng(9)
        y = rng.standard_normal(len(design))
        expected, *_ = np.linalg.lstsq(design, y, rcond=None)
        np.testing.assert_allclose(
            resolve_regression("qr_regress").fit(design, y), expected, atol=1e-10
        )


class TestCheckIdentifiable:
    def test_label_in_message(self):
        with pytest.raises(EstimationFailure, match="mediator design"):
            check_identifiable(np.ones((5, 2)), label="mediator design")

    def test_full_rank_passes(self, design):
        check_identifiable(design)
