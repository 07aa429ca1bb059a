"""Tests for the orientation normalizer."""

import numpy as np
import pandas as pd
import pytest

from permutation_mediation import ShapeMismatch
from permutation_mediation.normalize import (
    as_path_container,
    normalize_inputs,
    orient_matrix,
    orient_vector,
)

_SEED = 7
_N = 30


@pytest.fixture()
def data():
    rng = np.random.default_rng(_SEED)
    return {
        "X": rng.standard_normal(_N),
        "Y": rng.standard_normal(_N),
        "M": rng.standard_normal((_N, 2)),
        "W": rng.standard_normal((_N, 3)),
        "C": rng.standard_normal((_N, 1)),
    }


class TestOrientVector:
    def test_flat_vector_unchanged(self):
        v = np.arange(5.0)
        np.testing.assert_array_equal(orient_vector(v, name="X"), v)

    def test_row_vector_flattened(self):
        out = orient_vector([[1.0, 2.0, 3.0]], name="X")
        assert out.shape == (3,)
        np.testing.assert_array_equal(out, [1.0, 2.0, 3.0])

    def test_column_vector_flattened(self):
        out = orient_vector(np.arange(4.0).reshape(4, 1), name="X")
        assert out.shape == (4,)

    def test_pandas_series(self):
        out = orient_vector(pd.Series([1, 2, 3]), name="Y")
        assert out.dtype == float
        assert out.shape == (3,)

    def test_matrix_rejected(self):
        with pytest.raises(ShapeMismatch, match="'X' must be a single") as excinfo:
            orient_vector(np.ones((10, 2)), name="X")
        assert excinfo.value.stage == "configuration"


class TestOrientMatrix:
    def test_wide_matrix_transposed(self):
        wide = np.arange(12.0).reshape(2, 6)
        out = orient_matrix(wide, name="M")
        assert out.shape == (6, 2)
        np.testing.assert_array_equal(out, wide.T)

    def test_vector_becomes_column(self):
        assert orient_matrix(np.arange(5.0), name="M").shape == (5, 1)

    @pytest.mark.parametrize("empty", [None, [], np.empty((0, 0)), np.empty(0)])
    def test_empty_inputs(self, empty):
        assert orient_matrix(empty, name="W").shape == (0, 0)

    def test_three_dimensional_rejected(self):
        with pytest.raises(ShapeMismatch, match="at most 2-D") as excinfo:
            orient_matrix(np.ones((2, 3, 4)), name="M")
        assert excinfo.value.stage == "configuration"

    def test_non_numeric_rejected(self):
        with pytest.raises(TypeError, match="'M' must be numeric"):
            orient_matrix([["a", "b"], ["c", "d"]], name="M")


class TestPathContainer:
    def test_single_matrix_wrapped(self, data):
        wrapped = as_path_container(data["M"])
        assert len(wrapped) == 1
        assert wrapped[0] is data["M"]

    def test_list_of_matrices_kept(self, data):
        assert len(as_path_container([data["M"], data["W"]])) == 2

    def test_flat_number_list_is_single_path(self):
        assert len(as_path_container([1.0, 2.0, 3.0])) == 1

    def test_nested_rows_are_single_path(self):
        assert len(as_path_container([[1.0, 2.0], [3.0, 4.0]])) == 1

    def test_nested_matrices_are_paths(self):
        paths = [[[1.0], [2.0]], [[3.0], [4.0]]]
        assert len(as_path_container(paths)) == 2


class TestNormalizeInputs:
    def test_single_path_wrapped(self, data):
        out = normalize_inputs(data["X"], data["Y"], data["M"], data["W"], data["C"])
        assert len(out.m) == 1
        assert len(out.w) == 1
        assert out.m[0].shape == (_N, 2)
        assert out.w[0].shape == (_N, 3)
        assert out.c.shape == (_N, 1)

    def test_row_oriented_inputs(self, data):
        out = normalize_inputs(
            data["X"][np.newaxis, :],
            data["Y"][np.newaxis, :],
            data["M"].T,
            data["W"].T,
            data["C"].T,
        )
        np.testing.assert_array_equal(out.x, data["X"])
        np.testing.assert_array_equal(out.m[0], data["M"])
        np.testing.assert_array_equal(out.w[0], data["W"])
        np.testing.assert_array_equal(out.c, data["C"])

    def test_missing_moderator_expands_per_path(self, data):
        out = normalize_inputs(data["X"], data["Y"], [data["M"], data["M"]])
        assert len(out.w) == 2
        assert all(wp.shape == (0, 0) for wp in out.w)

    def test_empty_moderator_list_expands_per_path(self, data):
        out = normalize_inputs(data["X"], data["Y"], [data["M"], data["M"]], [])
        assert [wp.size for wp in out.w] == [0, 0]

    def test_explicit_empty_entry_per_path(self, data):
        out = normalize_inputs(
            data["X"], data["Y"], [data["M"], data["M"]], [None, data["W"]]
        )
        assert out.w[0].shape == (0, 0)
        assert out.w[1].shape == (_N, 3)

    def test_no_covariates(self, data):
        out = normalize_inputs(data["X"], data["Y"], data["M"])
        assert out.c.shape == (0, 0)

    def test_dataframe_inputs(self, data):
        M_df = pd.DataFrame(data["M"], columns=["m1", "m2"])
        out = normalize_inputs(pd.Series(data["X"]), data["Y"], M_df)
        np.testing.assert_array_equal(out.m[0], data["M"])

    def test_idempotent(self, data):
        first = normalize_inputs(
            data["X"], data["Y"], [data["M"], data["M"]], [None, data["W"]], data["C"]
        )
        second = normalize_inputs(
            first.x, first.y, list(first.m), list(first.w), first.c
        )
        np.testing.assert_array_equal(second.x, first.x)
        np.testing.assert_array_equal(second.y, first.y)
        np.testing.assert_array_equal(second.c, first.c)
        for a, b in zip(first.m, second.m, strict=True):
            np.testing.assert_array_equal(a, b)
        for a, b in zip(first.w, second.w, strict=True):
            assert a.shape == b.shape
            np.testing.assert_array_equal(a, b)

    def test_caller_inputs_not_mutated(self, data):
        M_before = data["M"].copy()
        out = normalize_inputs(data["X"], data["Y"], data["M"])
        out.m[0][:] = 0.0
        out.x[:] = 0.0
        np.testing.assert_array_equal(data["M"], M_before)
        assert np.any(data["X"] != 0.0)
