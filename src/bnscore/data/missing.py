"""
Removal of incomplete observations.

Dynamic networks are usually recorded with gaps: a variable missing at one
time point invalidates every slice pair that includes it. Such rows are
dropped (rather than rejected) before the sufficient statistics are built.
"""

from typing import NamedTuple, Optional
import numpy as np
from numpy.typing import NDArray


class MissingDataResult(NamedTuple):
    """Complete rows of a design matrix and their weights."""

    data: NDArray[np.float64]
    weights: Optional[NDArray[np.float64]]
    removed: int


def missing_rows(data: NDArray[np.float64]) -> NDArray[np.bool_]:
    """Boolean mask of rows containing at least one NaN."""
    return np.isnan(data).any(axis=1)


def drop_missing_rows(
    data: NDArray[np.float64],
    weights: Optional[NDArray[np.float64]] = None,
) -> MissingDataResult:
    """
    Drop every row with a missing value.

    Parameters
    ----------
    data : NDArray[np.float64]
        Design matrix, shape (rows, columns). Missing values are NaN.
    weights : NDArray[np.float64], optional
        Per-row weights, shape (rows,). Entries at the positions of the
        dropped rows are removed as well.

    Returns
    -------
    MissingDataResult
        Filtered matrix, filtered weights (None if none were given) and the
        number of rows removed.
    """
    incomplete = missing_rows(data)
    removed = int(incomplete.sum())
    if removed == 0:
        return MissingDataResult(data, weights, 0)

    keep = ~incomplete
    kept_weights = None if weights is None else weights[keep]
    return MissingDataResult(data[keep], kept_weights, removed)
