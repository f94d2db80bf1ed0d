"""
Unit tests for dynamic Bayesian network layering.

Tests cover:
- Stationary networks with and without static variables
- Stacking of later slice pairs
- Missing-data handling (dropped in dynamic mode)
- First-slice edge penalization
- Non-stationary networks
- Index maps attached to the result
"""

import logging

import pytest
import numpy as np
from numpy.testing import assert_array_equal, assert_allclose

from bnscore import (
    BDeCatPrior,
    BDePrior,
    BGePrior,
    DBNSpec,
    InvalidArgumentError,
    ScoreFamily,
    UserScoreSpec,
    build_score_parameters,
)
from bnscore.dynamic.index_maps import compute_index_maps
from bnscore.dynamic.layering import _first_slice_params, _params_for_columns, stack_slice_pairs


def binary_matrix(rows: int, cols: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 2, size=(rows, cols)).astype(float)


class TestStationaryWithoutStatic:
    """Stationary DBNs with b = 0."""

    def test_two_slices(self) -> None:
        """50 x 6 binary data, two slices."""
        data = binary_matrix(50, 6)
        params = build_score_parameters("bde", data, dynamic=DBNSpec(slices=2, b=0))

        assert params.is_dynamic
        assert params.n == 3
        assert params.nsmall == 3
        assert params.bgn == 0
        assert params.statistics is None

        other = params.other_slices
        assert other.data.shape == (50, 6)
        assert_array_equal(other.data, data[:, [3, 4, 5, 0, 1, 2]])
        assert other.background_nodes == (3, 4, 5)
        assert other.main_nodes == (0, 1, 2)
        assert other.statistics.pf == 2.0

        first = params.first_slice
        assert_array_equal(first.data, data[:, :3])
        assert first.background_nodes == ()
        assert first.statistics.pf == 1.0
        assert params.dynamic.rows_removed == 0

    def test_labels(self) -> None:
        """Test default labels carry the slice number."""
        params = build_score_parameters("bde", binary_matrix(10, 6), dynamic=DBNSpec(slices=3))
        assert params.labels == ("v1", "v2", "v1.2", "v2.2", "v1.3", "v2.3")
        assert params.labels_short == ("v1", "v2", "v1.2", "v2.2")
        assert params.other_slices.labels == ("v1.2", "v2.2", "v1", "v2")
        assert params.first_slice.labels == ("v1", "v2")

    def test_three_slices_stack_rows(self) -> None:
        """slices = 3, nsmall = 2: transitions see twice the rows."""
        data = binary_matrix(20, 6)
        params = build_score_parameters("bde", data, dynamic=DBNSpec(slices=3))

        other = params.other_slices
        assert other.data.shape == (40, 4)
        assert_array_equal(other.data[:20], data[:, [2, 3, 0, 1]])
        assert_array_equal(other.data[20:], data[:, [4, 5, 2, 3]])
        assert params.first_slice.data.shape == (20, 2)
        assert params.dynamic.slices == 3

    def test_weights_tiled(self) -> None:
        """Test that weights repeat once per slice pair."""
        data = binary_matrix(10, 6)
        weights = np.linspace(1.0, 2.0, 10)
        params = build_score_parameters(
            "bde", data, dynamic=DBNSpec(slices=3), weights=weights
        )
        assert_array_equal(params.other_slices.weights, np.tile(weights, 2))
        assert_array_equal(params.first_slice.weights, weights)
        assert_array_equal(params.weights, weights)


class TestStationaryWithStatic:
    """Stationary DBNs with b > 0."""

    def test_layout(self) -> None:
        """b = 1, nsmall = 2, three slices."""
        data = binary_matrix(15, 7)
        params = build_score_parameters("bde", data, dynamic=DBNSpec(slices=3, b=1))

        assert params.n == 3
        assert params.nsmall == 2
        assert params.bgn == 1
        assert params.labels == ("s1", "v1", "v2", "v1.2", "v2.2", "v1.3", "v2.3")
        assert params.main_nodes == (0, 1)
        assert params.background_nodes == (2, 3, 4)
        assert params.static_nodes == (2,)

        other = params.other_slices
        assert other.labels == ("v1.2", "v2.2", "s1", "v1", "v2")
        assert other.background_nodes == (2, 3, 4)
        assert_array_equal(other.data[:15], data[:, [3, 4, 0, 1, 2]])
        assert_array_equal(other.data[15:], data[:, [5, 6, 0, 3, 4]])

        first = params.first_slice
        assert first.labels == ("v1", "v2", "s1")
        assert first.background_nodes == (2,)
        assert first.main_nodes == (0, 1)
        assert_array_equal(first.data, data[:, [1, 2, 0]])

    def test_edge_penalty_split(self) -> None:
        """Test that the first slice gets the leading n x n block."""
        data = binary_matrix(15, 5)
        pmat = np.arange(1.0, 26.0).reshape(5, 5)
        params = build_score_parameters(
            "bde", data, dynamic=DBNSpec(slices=2, b=1), edge_penalty=pmat
        )
        assert_allclose(params.log_edge_penalty, np.log(pmat))
        assert_allclose(params.other_slices.log_edge_penalty, np.log(pmat))
        assert_allclose(params.first_slice.log_edge_penalty, np.log(pmat[:3, :3]))

    def test_column_count_mismatch(self) -> None:
        """Test that columns must equal nsmall * slices + bgn."""
        with pytest.raises(InvalidArgumentError, match="do not match"):
            build_score_parameters("bde", binary_matrix(10, 7), dynamic=DBNSpec(slices=2))


class TestMissingData:
    """Missing rows are dropped in dynamic mode only."""

    def test_missing_row_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        """A missing value in slice 2 removes one transition row."""
        data = binary_matrix(50, 6)
        data[7, 4] = np.nan

        with caplog.at_level(logging.INFO, logger="bnscore"):
            params = build_score_parameters("bde", data, dynamic=DBNSpec(slices=2))

        assert params.dynamic.rows_removed == 1
        assert params.other_slices.data.shape == (49, 6)
        expected = np.delete(data, 7, axis=0)[:, [3, 4, 5, 0, 1, 2]]
        assert_array_equal(params.other_slices.data, expected)
        assert params.first_slice.data.shape == (50, 3)
        assert "1 rows were removed due to missing data" in caplog.text

    def test_same_data_static_rejected(self) -> None:
        """The same missing value fails a static build."""
        data = binary_matrix(50, 6)
        data[7, 4] = np.nan
        with pytest.raises(InvalidArgumentError, match="missing data"):
            build_score_parameters("bde", data)

    def test_missing_value_in_shared_slice(self) -> None:
        """slices = 3: a middle-slice gap hits both slice pairs."""
        data = binary_matrix(20, 6)
        data[0, 2] = np.nan
        weights = np.arange(1.0, 21.0)
        params = build_score_parameters(
            "bde", data, dynamic=DBNSpec(slices=3), weights=weights
        )

        assert params.dynamic.rows_removed == 2
        assert params.other_slices.data.shape[0] == 2 * 20 - 2
        assert_array_equal(
            params.other_slices.weights,
            np.concatenate([weights[1:], weights[1:]]),
        )

    def test_missing_in_first_slice(self) -> None:
        """Gaps in slice 1 remove rows from both sub-problems."""
        data = binary_matrix(10, 4)
        data[3, 0] = np.nan
        weights = np.arange(1.0, 11.0)
        params = build_score_parameters(
            "bde", data, dynamic=DBNSpec(slices=2), weights=weights
        )
        assert params.dynamic.rows_removed == 2
        assert params.first_slice.data.shape == (9, 2)
        assert_array_equal(params.first_slice.weights, np.delete(weights, 3))


class TestFamilies:
    """Family specific behaviour of the sub-problems."""

    def test_bge(self) -> None:
        """Test that BGe defaults are resolved per sub-problem."""
        rng = np.random.default_rng(3)
        data = rng.normal(size=(40, 5))
        params = build_score_parameters("bge", data, dynamic=DBNSpec(slices=2, b=1))
        assert params.other_slices.statistics.aw == 5 + 1 + 1
        assert params.first_slice.statistics.aw == 3 + 1 + 1
        assert params.other_slices.statistics.score_constants.shape == (5,)

    def test_bdecat_first_slice_unpenalized(self) -> None:
        """Test level counts follow the column permutation."""
        rng = np.random.default_rng(5)
        data = np.column_stack([rng.integers(0, c, size=30) for c in (2, 3, 4, 5)]).astype(float)
        prior = BDeCatPrior(edgepf=3.0, cvec=[2, 3, 4, 5])
        params = build_score_parameters("bdecat", data, prior, dynamic=DBNSpec(slices=2))

        assert_array_equal(params.other_slices.statistics.cvec, [4, 5, 2, 3])
        assert params.other_slices.statistics.pf == 3.0
        assert_array_equal(params.first_slice.statistics.cvec, [2, 3])
        assert params.first_slice.statistics.pf == 1.0
        assert_allclose(params.first_slice.statistics.score_constants, [0.0, 0.0])

    def test_bde_custom_prior(self) -> None:
        """Test that chi is kept and only the penalty is reset."""
        params = build_score_parameters(
            "bde", binary_matrix(10, 4), BDePrior(chi=2.0, edgepf=5.0), dynamic=DBNSpec()
        )
        assert params.first_slice.statistics.chi == 2.0
        assert params.first_slice.statistics.pf == 1.0
        assert params.other_slices.statistics.pf == 5.0

    def test_user_defined_maps(self) -> None:
        """Test that a user score can read the user-facing maps."""
        params = build_score_parameters(
            "usr", binary_matrix(10, 5), UserScoreSpec(), dynamic=DBNSpec(b=1)
        )
        assert params.dynamic.user_transition.rows == ((1, 3),)
        assert params.other_slices.statistics.pctesttype == "bge"


class TestNonStationary:
    """Non-stationary DBNs: one sub-problem per transition."""

    def test_blocks_with_static(self) -> None:
        """Two transition blocks with one static variable."""
        blocks = [binary_matrix(12, 5, seed=1), binary_matrix(8, 5, seed=2)]
        params = build_score_parameters(
            "bde", blocks, dynamic=DBNSpec(b=1, stationary=False)
        )

        assert params.n == 3
        assert params.nsmall == 2
        assert len(params.per_slice) == 2
        assert params.first_slice is None
        assert params.other_slices is None
        assert not params.dynamic.stationary
        assert params.dynamic.slices == 3
        assert_array_equal(params.per_slice[0].data, blocks[0][:, [3, 4, 0, 1, 2]])
        assert_array_equal(params.per_slice[1].data, blocks[1][:, [3, 4, 0, 1, 2]])
        assert params.per_slice[0].background_nodes == (2, 3, 4)
        assert params.per_slice[0].labels == ("v1.2", "v2.2", "s1", "v1", "v2")

    def test_blocks_filtered_independently(self) -> None:
        """A gap in one block leaves the others intact."""
        blocks = [binary_matrix(12, 4, seed=1), binary_matrix(8, 4, seed=2)]
        blocks[1][0, 0] = np.nan
        params = build_score_parameters("bde", blocks, dynamic=DBNSpec(stationary=False))

        assert params.dynamic.rows_removed == 1
        assert params.per_slice[0].data.shape == (12, 4)
        assert params.per_slice[1].data.shape == (7, 4)

    def test_block_weights(self) -> None:
        """Test one weight vector per block."""
        blocks = [binary_matrix(4, 4, seed=1), binary_matrix(3, 4, seed=2)]
        weights = [np.ones(4), None]
        params = build_score_parameters(
            "bde", blocks, dynamic=DBNSpec(stationary=False), weights=weights
        )
        assert_array_equal(params.per_slice[0].weights, np.ones(4))
        assert params.per_slice[1].weights is None

        with pytest.raises(InvalidArgumentError, match="one weight vector per block"):
            build_score_parameters(
                "bde", blocks, dynamic=DBNSpec(stationary=False), weights=[np.ones(4)]
            )

    def test_block_width_mismatch(self) -> None:
        """Test that all blocks must share the column layout."""
        blocks = [binary_matrix(4, 4), binary_matrix(4, 6)]
        with pytest.raises(InvalidArgumentError, match="same number of columns"):
            build_score_parameters("bde", blocks, dynamic=DBNSpec(stationary=False))


class TestIndexMapsAttached:
    """Index maps for {bgn = 0, bgn > 0} x {stationary, non-stationary}."""

    @pytest.mark.parametrize("b", [0, 2])
    @pytest.mark.parametrize("stationary", [True, False])
    def test_maps_match_calculator(self, b: int, stationary: bool) -> None:
        """Test that the layout carries the calculator's maps."""
        nsmall = 2
        if stationary:
            data = binary_matrix(10, b + 3 * nsmall)
            spec = DBNSpec(slices=3, b=b)
        else:
            data = [binary_matrix(10, b + 2 * nsmall)]
            spec = DBNSpec(b=b, stationary=False)

        params = build_score_parameters("bde", data, dynamic=spec)
        expected = compute_index_maps(nsmall, b)

        assert params.dynamic.within_slice == expected.within_slice
        assert params.dynamic.transition == expected.transition
        assert params.dynamic.user_initial == expected.user_initial
        assert params.dynamic.user_within_slice == expected.user_within_slice
        assert params.dynamic.user_transition == expected.user_transition


def test_stack_slice_pairs_shape() -> None:
    """Test the stacked matrix shape."""
    data = np.arange(4 * 9, dtype=float).reshape(4, 9)
    stacked = stack_slice_pairs(data, nsmall=2, bgn=1, slices=4)
    assert stacked.shape == (12, 5)
    assert_array_equal(stacked[8:], data[:, [0, 5, 6, 7, 8]])


class TestSubProblemPriors:
    """Prior records handed to the sub-problem builds."""

    def test_gaussian_and_user_params_unchanged(self) -> None:
        """Test that priors without per-column entries pass through."""
        columns = np.array([2, 0, 1])
        bge = BGePrior(am=2.0)
        usr = UserScoreSpec(pctesttype="bde")
        assert _params_for_columns(bge, columns) is bge
        assert _params_for_columns(usr, columns) is usr
        assert _params_for_columns(None, columns) is None
        assert _first_slice_params(ScoreFamily.GAUSSIAN, bge, columns) is bge
        assert _first_slice_params(ScoreFamily.GAUSSIAN, None, columns) is None

    def test_categorical_levels_permuted(self) -> None:
        """Test that cvec follows the sub-problem column order."""
        prior = BDeCatPrior(chi=1.0, edgepf=3.0, cvec=[2, 3, 4])
        columns = np.array([2, 0, 1])

        transition = _params_for_columns(prior, columns)
        first = _first_slice_params(ScoreFamily.CATEGORICAL, prior, columns)

        assert_array_equal(transition.cvec, [4, 2, 3])
        assert transition.edgepf == 3.0
        assert_array_equal(first.cvec, [4, 2, 3])
        assert first.edgepf == 1.0
        assert first.chi == 1.0

    @pytest.mark.parametrize(
        "family, expected_type",
        [(ScoreFamily.BINARY, BDePrior), (ScoreFamily.CATEGORICAL, BDeCatPrior)],
    )
    def test_first_slice_defaults_unpenalized(self, family, expected_type) -> None:
        """Test that missing discrete priors default to edgepf = 1."""
        params = _first_slice_params(family, None, np.array([0, 1]))
        assert type(params) is expected_type
        assert params.edgepf == 1.0
        assert params.chi == 0.5
