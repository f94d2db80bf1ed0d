"""
Decomposition of dynamic Bayesian network data into static sub-problems.

A DBN with s slices is recorded as one wide matrix

    [ static (bgn) | slice 1 (nsmall) | slice 2 (nsmall) | ... | slice s ]

Stationary transitions are scored on a single stacked matrix: every pair of
consecutive slices (t, t+1) becomes a block of rows with columns
[static | slice t | slice t+1], and the blocks are stacked vertically. The
columns are then reordered to [future | static | past], so that within the
sub-problem the static and past variables are background nodes and only
the future slice receives parents. The first slice is scored separately,
without edge penalization, with the static variables moved to the tail.

Non-stationary transitions are supplied one block per transition and each
block becomes its own sub-problem.

Rows with missing values are dropped from each sub-problem independently.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from bnscore.data.missing import drop_missing_rows
from bnscore.dynamic.index_maps import (
    compute_index_maps,
    first_slice_column_order,
    stacked_slice_columns,
    transition_column_order,
)
from bnscore.families.types import ScoreFamily
from bnscore.priors import BDeCatPrior, BDePrior, DBNSpec, FamilyParams
from bnscore.params.score_parameters import DynamicLayout, ScoreParameters

logger = logging.getLogger(__name__)

StaticBuilder = Callable[..., ScoreParameters]


def stack_slice_pairs(
    data: NDArray[np.float64],
    nsmall: int,
    bgn: int,
    slices: int,
) -> NDArray[np.float64]:
    """
    Stack all consecutive slice pairs of a wide dataset.

    Parameters
    ----------
    data : NDArray[np.float64]
        Wide data, shape (rows, bgn + nsmall * slices).
    nsmall, bgn, slices : int
        Layout of the wide data.

    Returns
    -------
    NDArray[np.float64]
        Shape (rows * (slices - 1), bgn + 2 * nsmall). Rows of pair
        (1, 2) come first, then (2, 3), and so on.
    """
    blocks = [data[:, stacked_slice_columns(nsmall, bgn, jj)] for jj in range(slices - 1)]
    return np.vstack(blocks)


def _params_for_columns(
    family_params: Optional[FamilyParams],
    columns: NDArray[np.int64],
) -> Optional[FamilyParams]:
    """Prior record for a sub-problem built from ``columns`` of the input."""
    if isinstance(family_params, BDeCatPrior):
        return family_params.with_columns(columns)
    return family_params


def _first_slice_params(
    family: ScoreFamily,
    family_params: Optional[FamilyParams],
    columns: NDArray[np.int64],
) -> Optional[FamilyParams]:
    # the first slice is never edge penalized
    params = _params_for_columns(family_params, columns)
    if params is None and family is ScoreFamily.BINARY:
        params = BDePrior()
    elif params is None and family is ScoreFamily.CATEGORICAL:
        params = BDeCatPrior()
    if isinstance(params, BDePrior):
        params = params.without_edge_penalty()
    return params


def build_stationary_layout(
    family: ScoreFamily,
    data: NDArray[np.float64],
    weights: Optional[NDArray[np.float64]],
    family_params: Optional[FamilyParams],
    spec: DBNSpec,
    nsmall: int,
    labels: Sequence[str],
    edge_penalty: Optional[NDArray[np.float64]],
    build_static: StaticBuilder,
) -> DynamicLayout:
    """
    Build the first-slice and transition sub-problems of a stationary DBN.

    Parameters
    ----------
    family : ScoreFamily
        Score family shared by all sub-problems.
    data : NDArray[np.float64]
        Wide data, shape (rows, bgn + nsmall * slices). May contain NaN.
    weights : NDArray[np.float64], optional
        Observation weights, shape (rows,).
    family_params : FamilyParams, optional
        Prior record of the family (or None for defaults).
    spec : DBNSpec
        Number of slices and static variables.
    nsmall : int
        Number of dynamic variables per slice.
    labels : sequence of str
        Labels of the wide data columns.
    edge_penalty : NDArray[np.float64], optional
        Raw penalty matrix over the compact (n + nsmall) space.
    build_static : callable
        Builder used for the static sub-problems.

    Returns
    -------
    DynamicLayout
    """
    bgn = spec.b
    n = nsmall + bgn

    pairs = stack_slice_pairs(data, nsmall, bgn, spec.slices)
    pair_weights = None if weights is None else np.tile(weights, spec.slices - 1)

    order = transition_column_order(nsmall, bgn)
    transition = drop_missing_rows(pairs[:, order], pair_weights)
    other_slices = build_static(
        family,
        transition.data,
        family_params=_params_for_columns(family_params, order),
        weights=transition.weights,
        background_nodes=range(nsmall, n + nsmall),
        edge_penalty=edge_penalty,
        node_labels=[labels[i] for i in order],
    )

    first_order = first_slice_column_order(nsmall, bgn)
    first = drop_missing_rows(data[:, first_order], weights)
    first_slice = build_static(
        family,
        first.data,
        family_params=_first_slice_params(family, family_params, first_order),
        weights=first.weights,
        background_nodes=range(nsmall, n),
        edge_penalty=None if edge_penalty is None else edge_penalty[:n, :n],
        node_labels=[labels[i] for i in first_order],
    )

    removed = transition.removed + first.removed
    if removed > 0:
        logger.info("%d rows were removed due to missing data", removed)

    maps = compute_index_maps(nsmall, bgn)
    return DynamicLayout(
        stationary=True,
        slices=spec.slices,
        split=not spec.samestruct,
        first_slice=first_slice,
        other_slices=other_slices,
        rows_removed=removed,
        **maps._asdict(),
    )


def build_nonstationary_layout(
    family: ScoreFamily,
    blocks: Sequence[NDArray[np.float64]],
    weights: Sequence[Optional[NDArray[np.float64]]],
    family_params: Optional[FamilyParams],
    spec: DBNSpec,
    nsmall: int,
    labels: Sequence[str],
    edge_penalty: Optional[NDArray[np.float64]],
    build_static: StaticBuilder,
) -> DynamicLayout:
    """
    Build one transition sub-problem per supplied block.

    Each block has the layout [static | past | future] and is reordered to
    [future | static | past]. Missing rows are dropped per block; no row
    selection is shared between blocks.
    """
    bgn = spec.b
    n = nsmall + bgn
    order = transition_column_order(nsmall, bgn)
    block_labels = [labels[i] for i in order]
    block_params = _params_for_columns(family_params, order)

    per_slice: List[ScoreParameters] = []
    removed = 0
    for block, block_weights in zip(blocks, weights):
        filtered = drop_missing_rows(block[:, order], block_weights)
        removed += filtered.removed
        per_slice.append(
            build_static(
                family,
                filtered.data,
                family_params=block_params,
                weights=filtered.weights,
                background_nodes=range(nsmall, n + nsmall),
                edge_penalty=edge_penalty,
                node_labels=block_labels,
            )
        )

    if removed > 0:
        logger.info("%d rows were removed due to missing data", removed)

    maps = compute_index_maps(nsmall, bgn)
    return DynamicLayout(
        stationary=False,
        slices=len(per_slice) + 1,
        split=False,
        per_slice=tuple(per_slice),
        rows_removed=removed,
        **maps._asdict(),
    )


def dynamic_node_sets(nsmall: int, bgn: int) -> Tuple[Tuple[int, ...], Tuple[int, ...], Tuple[int, ...]]:
    """
    Main, background and static nodes in the compact (n + nsmall) space.
    """
    n = nsmall + bgn
    main = tuple(range(nsmall))
    background = tuple(range(nsmall, n + nsmall))
    static = tuple(range(nsmall, n))
    return main, background, static
