"""Tests for run configuration resolution and validation."""

import numpy as np
import pytest

from permutation_mediation import InvalidConfiguration, permutation_mediation
from permutation_mediation._config import (
    DEFAULT_NITER,
    REG_TYPE_ENV_VAR,
    MediationConfig,
    default_reg_type,
    resolve_config,
)


class TestDefaultRegType:
    """Tests for default_reg_type() resolution order."""

    def test_builtin_default(self, monkeypatch):
        monkeypatch.delenv(REG_TYPE_ENV_VAR, raising=False)
        assert default_reg_type() == "ols_regress"

    def test_env_var_overrides_builtin(self, monkeypatch):
        monkeypatch.setenv(REG_TYPE_ENV_VAR, "qr_regress")
        assert default_reg_type() == "qr_regress"

    def test_env_var_case_insensitive(self, monkeypatch):
        monkeypatch.setenv(REG_TYPE_ENV_VAR, "  QR_Regress ")
        assert default_reg_type() == "qr_regress"

    def test_blank_env_var_ignored(self, monkeypatch):
        monkeypatch.setenv(REG_TYPE_ENV_VAR, "   ")
        assert default_reg_type() == "ols_regress"


class TestResolveConfig:
    """Tests for resolve_config() defaults and validation."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv(REG_TYPE_ENV_VAR, raising=False)
        config = resolve_config()
        assert config == MediationConfig(
            niter=DEFAULT_NITER, reg_type="ols_regress", n_jobs=1, random_state=None
        )
        assert config.niter == 1000

    def test_explicit_wins_over_env(self, monkeypatch):
        monkeypatch.setenv(REG_TYPE_ENV_VAR, "qr_regress")
        assert resolve_config(reg_type="ols_regress").reg_type == "ols_regress"

    def test_explicit_normalised(self):
        assert resolve_config(reg_type="QR_REGRESS").reg_type == "qr_regress"

    def test_unknown_reg_type_names_valid_options(self):
        with pytest.raises(InvalidConfiguration, match="ols_regress and qr_regress"):
            resolve_config(reg_type="lasso_regress")

    def test_unknown_env_reg_type_rejected(self, monkeypatch):
        monkeypatch.setenv(REG_TYPE_ENV_VAR, "ridge")
        with pytest.raises(InvalidConfiguration, match="'ridge'"):
            resolve_config()

    def test_error_stage_is_configuration(self):
        with pytest.raises(InvalidConfiguration) as excinfo:
            resolve_config(reg_type="lasso_regress")
        assert excinfo.value.stage == "configuration"

    @pytest.mark.parametrize("niter", [0, -5, 2.5, True, "100"])
    def test_invalid_niter(self, niter):
        with pytest.raises(InvalidConfiguration, match="niter"):
            resolve_config(niter=niter)

    @pytest.mark.parametrize("n_jobs", [0, 1.5])
    def test_invalid_n_jobs(self, n_jobs):
        with pytest.raises(InvalidConfiguration, match="n_jobs"):
            resolve_config(n_jobs=n_jobs)

    def test_negative_n_jobs_allowed(self):
        assert resolve_config(n_jobs=-1).n_jobs == -1

    def test_invalid_configuration_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_config(niter=0)

    def test_config_is_frozen(self):
        config = resolve_config()
        with pytest.raises(AttributeError):
            config.niter = 5  # type: ignore[misc]


class TestRandomState:
    """random_state is checked with the other options, before any fit."""

    @pytest.mark.parametrize("random_state", [0, 7, np.int64(7), 2**40])
    def test_valid_seeds(self, random_state):
        assert resolve_config(random_state=random_state).random_state == random_state

    @pytest.mark.parametrize("random_state", [-1, 1.5, "abc", True, [1, 2]])
    def test_invalid_seeds(self, random_state):
        with pytest.raises(InvalidConfiguration, match="random_state") as excinfo:
            resolve_config(random_state=random_state)
        assert excinfo.value.stage == "configuration"

    @pytest.mark.parametrize("random_state", [-1, 1.5, "abc"])
    def test_rejected_before_estimation(self, random_state):
        rng = np.random.default_rng(0)
        x = rng.standard_normal(40)
        m = 0.5 * x + rng.standard_normal(40)
        y = 0.5 * m + rng.standard_normal(40)
        calls = []

        def estimator(*args):
            calls.append(args)
            raise AssertionError("estimator must not be called")

        with pytest.raises(InvalidConfiguration, match="random_state"):
            permutation_mediation(
                x, y, m, niter=3, random_state=random_state, estimator=estimator
            )
        assert calls == []
