"""
Index arithmetic for dynamic Bayesian networks.

A stationary DBN is scored on a compact two-slice adjacency matrix of size
(n + nsmall) x (n + nsmall), n = nsmall + bgn. Internally its columns are
ordered

    [ future slice (nsmall) | static (bgn) | past slice (nsmall) ]

while users supply data in the order

    [ static (bgn) | slice 1 (nsmall) | slice 2 (nsmall) | ... ]

All ranges below are 0-based and half-open. A block of a map is a tuple of
(start, stop) ranges that are concatenated in order.
"""

from dataclasses import dataclass
from typing import NamedTuple, Tuple
import numpy as np
from numpy.typing import NDArray

Ranges = Tuple[Tuple[int, int], ...]


def _expand(ranges: Ranges) -> NDArray[np.int64]:
    if not ranges:
        return np.zeros(0, dtype=np.int64)
    return np.concatenate([np.arange(start, stop, dtype=np.int64) for start, stop in ranges])


@dataclass(frozen=True)
class IndexMap:
    """Rows (parents) and columns (children) of an adjacency sub-block."""

    rows: Ranges
    cols: Ranges

    @property
    def row_indices(self) -> NDArray[np.int64]:
        return _expand(self.rows)

    @property
    def col_indices(self) -> NDArray[np.int64]:
        return _expand(self.cols)


class IndexMaps(NamedTuple):
    """Partition of the compact adjacency matrix of a DBN."""

    within_slice: IndexMap
    transition: IndexMap
    user_initial: IndexMap
    user_within_slice: IndexMap
    user_transition: IndexMap


def compute_index_maps(nsmall: int, bgn: int) -> IndexMaps:
    """
    Row and column ranges delimiting edge types in the compact matrix.

    Parameters
    ----------
    nsmall : int
        Number of dynamic variables per slice.
    bgn : int
        Number of static variables.

    Returns
    -------
    IndexMaps
        within_slice
            Edges into the future slice from the future slice or from static
            variables. Static variables never receive edges.
        transition
            Edges from the past slice into the future slice.
        user_initial, user_within_slice, user_transition
            The same partition (plus the first slice) in the user-facing
            column order, for scores unaware of the internal reordering.
    """
    n = nsmall + bgn

    if bgn > 0:
        within_rows: Ranges = ((nsmall, n), (0, nsmall))
        user_within_rows: Ranges = ((0, bgn), (n, n + nsmall))
    else:
        within_rows = ((0, nsmall),)
        user_within_rows = ((n, n + nsmall),)

    return IndexMaps(
        within_slice=IndexMap(rows=within_rows, cols=((0, nsmall),)),
        transition=IndexMap(rows=((n, n + nsmall),), cols=((0, nsmall),)),
        user_initial=IndexMap(rows=((0, n),), cols=((bgn, n),)),
        user_within_slice=IndexMap(rows=user_within_rows, cols=((n, n + nsmall),)),
        user_transition=IndexMap(rows=((bgn, n),), cols=((n, n + nsmall),)),
    )


def transition_column_order(nsmall: int, bgn: int) -> NDArray[np.int64]:
    """
    Permutation taking [static | past | future] to [future | static | past].
    """
    return _expand(((bgn + nsmall, bgn + 2 * nsmall), (0, bgn), (bgn, bgn + nsmall)))


def first_slice_column_order(nsmall: int, bgn: int) -> NDArray[np.int64]:
    """Permutation taking [static | slice 1] to [slice 1 | static]."""
    return _expand(((bgn, bgn + nsmall), (0, bgn)))


def stacked_slice_columns(nsmall: int, bgn: int, jj: int) -> NDArray[np.int64]:
    """
    Columns of the jj-th slice pair (0-based) in a wide dataset.

    The result is laid out [static | slice jj+1 | slice jj+2], matching the
    layout of the first slice pair.
    """
    start = bgn + nsmall * jj
    return _expand(((0, bgn), (start, start + 2 * nsmall)))
