"""
Score-parameter builder.

Assembles a ScoreParameters object from data, a score family and its
prior:

1. Validate the score type, data dimensions, weights and family-specific
   data values
2. Resolve node labels and background nodes
3. Log-transform the edge penalty matrix
4. Static networks: compute the family statistics
   Dynamic networks: unroll the slices into static sub-problems, which are
   built by recursive calls in static mode

**Usage:**
```python
from bnscore import build_score_parameters, BGePrior, DBNSpec

params = build_score_parameters("bge", data, BGePrior(am=1.0))
params.statistics.TN

dbn = build_score_parameters("bde", wide_data, dynamic=DBNSpec(slices=3, b=1))
dbn.other_slices.statistics.score_constants
```
"""

import logging
from typing import Optional, Sequence, Tuple, Union
import numpy as np
from numpy.typing import NDArray

from bnscore.data.validation import (
    DataLike,
    as_design_matrix,
    check_background_nodes,
    check_binary,
    check_edge_penalty,
    check_labels,
    check_levels,
    check_weights,
    dynamic_labels,
    static_labels,
)
from bnscore.dynamic.layering import (
    build_nonstationary_layout,
    build_stationary_layout,
    dynamic_node_sets,
)
from bnscore.errors import InvalidArgumentError
from bnscore.families.discrete import compute_binary_statistics, compute_categorical_statistics
from bnscore.families.gaussian import compute_gaussian_statistics
from bnscore.families.types import FamilyStatistics, ScoreFamily, readonly
from bnscore.families.user import compute_user_statistics
from bnscore.priors import BDeCatPrior, BDePrior, BGePrior, DBNSpec, FamilyParams, UserScoreSpec
from bnscore.params.score_parameters import ScoreParameters

logger = logging.getLogger(__name__)

_PARAM_TYPES = {
    ScoreFamily.GAUSSIAN: BGePrior,
    ScoreFamily.BINARY: BDePrior,
    ScoreFamily.CATEGORICAL: BDeCatPrior,
    ScoreFamily.USER: UserScoreSpec,
}


def _check_family_params(family: ScoreFamily, family_params: Optional[FamilyParams]) -> None:
    expected = _PARAM_TYPES[family]
    if family_params is not None and not isinstance(family_params, expected):
        raise InvalidArgumentError(
            f"Score type {family.value!r} expects {expected.__name__} parameters. "
            f"Got {type(family_params).__name__}"
        )


def _check_family_data(
    family: ScoreFamily,
    data: NDArray[np.float64],
    family_params: Optional[FamilyParams],
) -> None:
    if family is ScoreFamily.BINARY:
        check_binary(data)
    elif family is ScoreFamily.CATEGORICAL:
        explicit_levels = family_params is not None and family_params.cvec is not None
        check_levels(data, require_all_levels=not explicit_levels)


def _check_level_counts(family_params: Optional[FamilyParams], n_cols: int) -> None:
    if isinstance(family_params, BDeCatPrior) and family_params.cvec is not None:
        if len(family_params.cvec) != n_cols:
            raise InvalidArgumentError(
                f"cvec must have one entry per data column ({n_cols}). "
                f"Got {len(family_params.cvec)}"
            )


def _resolve_labels(
    node_labels: Optional[Sequence[str]],
    column_names: Optional[Sequence[str]],
    default: Tuple[str, ...],
) -> Tuple[str, ...]:
    if node_labels is not None:
        return check_labels(node_labels, len(default))
    if column_names is not None and len(column_names) == len(default):
        return tuple(column_names)
    return default


def compute_statistics(
    family: ScoreFamily,
    data: NDArray[np.float64],
    weights: Optional[NDArray[np.float64]],
    family_params: Optional[FamilyParams],
) -> FamilyStatistics:
    """Dispatch to the sufficient-statistics computer of ``family``."""
    if family is ScoreFamily.GAUSSIAN:
        return compute_gaussian_statistics(data, weights, family_params)
    if family is ScoreFamily.BINARY:
        return compute_binary_statistics(data, weights, family_params)
    if family is ScoreFamily.CATEGORICAL:
        return compute_categorical_statistics(data, weights, family_params)
    return compute_user_statistics(family_params, data.shape[1])


def build_static_parameters(
    family: ScoreFamily,
    data: DataLike,
    family_params: Optional[FamilyParams] = None,
    weights: Optional[Sequence[float]] = None,
    background_nodes: Optional[Sequence[int]] = None,
    edge_penalty: Optional[NDArray] = None,
    node_labels: Optional[Sequence[str]] = None,
) -> ScoreParameters:
    """
    Build score parameters for a static network.

    Parameters
    ----------
    family : ScoreFamily
        Resolved score family.
    data : NDArray or pd.DataFrame
        Complete data, shape (rows, n).
    family_params : prior record, optional
        Hyperparameters matching ``family``.
    weights : sequence of float, optional
        Positive observation weights, one per row.
    background_nodes : sequence of int, optional
        0-based indices of nodes that never receive parents.
    edge_penalty : NDArray, optional
        Positive per-edge penalty factors, shape (n, n).
    node_labels : sequence of str, optional
        One label per column.

    Returns
    -------
    ScoreParameters

    Raises
    ------
    InvalidArgumentError
        If the data has missing values or any input is malformed.
    """
    matrix, column_names = as_design_matrix(data)
    n_rows, n = matrix.shape

    if np.isnan(matrix).any():
        raise InvalidArgumentError("Dataset contains missing data")
    if n_rows == 0:
        raise InvalidArgumentError("Dataset contains no observations")

    w = check_weights(weights, n_rows)
    _check_family_data(family, matrix, family_params)
    bg = check_background_nodes(background_nodes, n)
    labels = _resolve_labels(node_labels, column_names, static_labels(n))
    pmat = check_edge_penalty(edge_penalty, n)

    logger.debug("Computing %s statistics for %d rows x %d nodes", family.value, n_rows, n)
    statistics = compute_statistics(family, matrix, w, family_params)

    return ScoreParameters(
        family=family,
        n=n,
        bgn=len(bg),
        labels=labels,
        labels_short=labels,
        background_nodes=bg,
        main_nodes=tuple(i for i in range(n) if i not in bg),
        static_nodes=bg,
        data=readonly(matrix),
        weights=None if w is None else readonly(w),
        log_edge_penalty=None if pmat is None else readonly(np.log(pmat)),
        statistics=statistics,
    )


def _dynamic_size(n_cols: int, bgn: int, slices: int) -> Tuple[int, int]:
    """(n, nsmall) of a wide dataset with ``slices`` slices."""
    nsmall, remainder = divmod(n_cols - bgn, slices)
    if n_cols <= bgn or remainder != 0:
        raise InvalidArgumentError(
            f"n, bgn and the number of columns in the data do not match: "
            f"{n_cols} columns, bgn={bgn}, slices={slices}"
        )
    return nsmall + bgn, nsmall


def _build_stationary(
    family: ScoreFamily,
    data: DataLike,
    family_params: Optional[FamilyParams],
    spec: DBNSpec,
    weights: Optional[Sequence[float]],
    edge_penalty: Optional[NDArray],
    node_labels: Optional[Sequence[str]],
) -> ScoreParameters:
    matrix, column_names = as_design_matrix(data)
    n_rows, n_cols = matrix.shape
    bgn = spec.b
    n, nsmall = _dynamic_size(n_cols, bgn, spec.slices)

    w = check_weights(weights, n_rows)
    _check_family_data(family, matrix, family_params)
    _check_level_counts(family_params, n_cols)
    labels = _resolve_labels(node_labels, column_names, dynamic_labels(nsmall, bgn, spec.slices))
    pmat = check_edge_penalty(edge_penalty, n + nsmall)

    logger.debug(
        "Layering %d slices of %d dynamic and %d static variables", spec.slices, nsmall, bgn
    )
    layout = build_stationary_layout(
        family, matrix, w, family_params, spec, nsmall, labels, pmat, build_static_parameters
    )
    main, background, static = dynamic_node_sets(nsmall, bgn)

    return ScoreParameters(
        family=family,
        n=n,
        bgn=bgn,
        labels=labels,
        labels_short=labels[: n + nsmall],
        background_nodes=background,
        main_nodes=main,
        static_nodes=static,
        data=readonly(matrix),
        weights=None if w is None else readonly(w),
        log_edge_penalty=None if pmat is None else readonly(np.log(pmat)),
        dynamic=layout,
    )


def _build_nonstationary(
    family: ScoreFamily,
    data,
    family_params: Optional[FamilyParams],
    spec: DBNSpec,
    weights,
    edge_penalty: Optional[NDArray],
    node_labels: Optional[Sequence[str]],
) -> ScoreParameters:
    if isinstance(data, (list, tuple)):
        converted = [as_design_matrix(block) for block in data]
    else:
        converted = [as_design_matrix(data)]
    if not converted:
        raise InvalidArgumentError("Non-stationary data must contain at least one block")

    blocks = [matrix for matrix, _ in converted]
    column_names = converted[0][1]
    n_cols = blocks[0].shape[1]
    if any(block.shape[1] != n_cols for block in blocks):
        raise InvalidArgumentError(
            f"All transition blocks must have the same number of columns. "
            f"Got {[block.shape[1] for block in blocks]}"
        )
    bgn = spec.b
    n, nsmall = _dynamic_size(n_cols, bgn, 2)

    if weights is None:
        block_weights = [None] * len(blocks)
    else:
        if len(weights) != len(blocks):
            raise InvalidArgumentError(
                f"Expected one weight vector per block ({len(blocks)}). Got {len(weights)}"
            )
        block_weights = [check_weights(bw, block.shape[0]) for bw, block in zip(weights, blocks)]

    for block in blocks:
        _check_family_data(family, block, family_params)
    _check_level_counts(family_params, n_cols)
    labels = _resolve_labels(node_labels, column_names, dynamic_labels(nsmall, bgn, 2))
    pmat = check_edge_penalty(edge_penalty, n + nsmall)

    layout = build_nonstationary_layout(
        family, blocks, block_weights, family_params, spec, nsmall, labels, pmat,
        build_static_parameters,
    )
    main, background, static = dynamic_node_sets(nsmall, bgn)

    return ScoreParameters(
        family=family,
        n=n,
        bgn=bgn,
        labels=labels,
        labels_short=labels,
        background_nodes=background,
        main_nodes=main,
        static_nodes=static,
        data=tuple(readonly(block) for block in blocks),
        weights=tuple(None if bw is None else readonly(bw) for bw in block_weights),
        log_edge_penalty=None if pmat is None else readonly(np.log(pmat)),
        dynamic=layout,
    )


def build_score_parameters(
    score_type: Union[ScoreFamily, str],
    data,
    family_params: Optional[FamilyParams] = None,
    dynamic: Optional[DBNSpec] = None,
    weights=None,
    background_nodes: Optional[Sequence[int]] = None,
    edge_penalty: Optional[NDArray] = None,
    node_labels: Optional[Sequence[str]] = None,
) -> ScoreParameters:
    """
    Build the score parameters for a static or dynamic Bayesian network.

    Parameters
    ----------
    score_type : ScoreFamily or str
        "bge" (continuous), "bde" (binary), "bdecat" (categorical) or
        "usr" (user defined).
    data : NDArray, pd.DataFrame, or sequence of these
        Observations in rows. Static networks take an (rows, n) matrix
        without missing values. Stationary DBNs take the wide matrix
        [static | slice 1 | ... | slice s]; rows with missing values are
        dropped per sub-problem. Non-stationary DBNs take one
        [static | past | future] matrix per transition.
    family_params : BGePrior, BDePrior, BDeCatPrior or UserScoreSpec, optional
        Hyperparameters matching score_type. Defaults if None.
    dynamic : DBNSpec, optional
        Layout of a dynamic network. None for a static network.
    weights : sequence of float, optional
        Positive observation weights, one per row. For non-stationary
        DBNs, a sequence with one weight vector (or None) per block.
    background_nodes : sequence of int, optional
        0-based indices of nodes without parents. Ignored for DBNs, where
        the first ``dynamic.b`` columns are static.
    edge_penalty : NDArray, optional
        Positive per-edge penalty factors; stored as their logarithm.
        Shape (n, n) for static networks and (n + nsmall, n + nsmall), in
        the compact ordering, for DBNs.
    node_labels : sequence of str, optional
        One label per data column. Defaults to the DataFrame column names
        or to v1, v2, ... (s1, ... for static DBN variables).

    Returns
    -------
    ScoreParameters
        Fully computed, read-only parameters.

    Raises
    ------
    InvalidArgumentError
        If any input is malformed. No partial object is returned.
    """
    family = ScoreFamily.parse(score_type)
    _check_family_params(family, family_params)

    if dynamic is None:
        return build_static_parameters(
            family,
            data,
            family_params=family_params,
            weights=weights,
            background_nodes=background_nodes,
            edge_penalty=edge_penalty,
            node_labels=node_labels,
        )
    if not isinstance(dynamic, DBNSpec):
        raise InvalidArgumentError(
            f"dynamic must be a DBNSpec. Got {type(dynamic).__name__}"
        )
    if dynamic.stationary:
        return _build_stationary(
            family, data, family_params, dynamic, weights, edge_penalty, node_labels
        )
    return _build_nonstationary(
        family, data, family_params, dynamic, weights, edge_penalty, node_labels
    )
