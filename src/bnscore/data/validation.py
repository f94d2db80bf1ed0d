"""
Input coercion and validation for the score-parameter builder.

Data may arrive as a numpy array or a pandas DataFrame. Everything is
converted to a float64 matrix with NaN marking missing values; pandas
categorical columns are replaced by their 0-based codes.
"""

from typing import List, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd
from numpy.typing import NDArray

from bnscore.errors import InvalidArgumentError

DataLike = Union[NDArray, pd.DataFrame]


def as_design_matrix(data: DataLike) -> Tuple[NDArray[np.float64], Optional[List[str]]]:
    """
    Convert input data to a float matrix.

    Parameters
    ----------
    data : NDArray or pd.DataFrame
        Observations in rows, variables in columns.

    Returns
    -------
    matrix : NDArray[np.float64]
        Copy of the data, shape (rows, columns).
    column_names : list of str or None
        DataFrame column names when they are all distinct strings.
    """
    column_names = None
    if isinstance(data, pd.DataFrame):
        frame = data.copy()
        for col in frame.columns:
            if isinstance(frame[col].dtype, pd.CategoricalDtype):
                codes = frame[col].cat.codes.astype(np.float64)
                frame[col] = codes.where(codes >= 0, np.nan)
        names = list(frame.columns)
        if all(isinstance(c, str) for c in names) and len(set(names)) == len(names):
            column_names = names
        matrix = frame.to_numpy(dtype=np.float64, na_value=np.nan)
    else:
        try:
            matrix = np.array(data, dtype=np.float64)
        except (TypeError, ValueError) as err:
            raise InvalidArgumentError(f"Data must be numeric. Got {err}") from err

    if matrix.ndim == 1:
        matrix = matrix.reshape(-1, 1)
    if matrix.ndim != 2:
        raise InvalidArgumentError(
            f"Data must be a two-dimensional matrix. Got shape {matrix.shape}"
        )
    return matrix, column_names


def check_weights(
    weights: Optional[Sequence[float]],
    n_rows: int,
) -> Optional[NDArray[np.float64]]:
    """
    Validate a per-observation weight vector.

    Raises
    ------
    InvalidArgumentError
        If its length differs from the number of rows, or any weight is
        not a finite positive number.
    """
    if weights is None:
        return None
    w = np.asarray(weights, dtype=np.float64).ravel()
    if len(w) != n_rows:
        raise InvalidArgumentError(
            f"Length of the weight vector ({len(w)}) does not match "
            f"the number of rows (observations) in data ({n_rows})"
        )
    if not np.all(np.isfinite(w) & (w > 0)):
        raise InvalidArgumentError("All weights must be finite and positive")
    return w


def check_binary(data: NDArray[np.float64]) -> None:
    """Ensure every observed value is 0 or 1."""
    observed = data[~np.isnan(data)]
    if not np.all((observed == 0) | (observed == 1)):
        raise InvalidArgumentError("Dataset contains non-binary values")


def check_levels(data: NDArray[np.float64], require_all_levels: bool = True) -> None:
    """
    Ensure categorical columns hold 0-based integer levels.

    Parameters
    ----------
    data : NDArray[np.float64]
        Categorical design matrix. NaN entries are ignored.
    require_all_levels : bool
        If True, every level between 0 and the column maximum must be
        observed. Disabled when level counts are given explicitly.
    """
    for k in range(data.shape[1]):
        column = data[:, k]
        observed = column[~np.isnan(column)]
        if observed.size == 0:
            continue
        if np.any(observed < 0) or np.any(observed != np.round(observed)):
            raise InvalidArgumentError(
                f"Categorical levels must be non-negative integers (column {k})"
            )
        if require_all_levels:
            levels = np.unique(observed)
            if len(levels) != int(levels[-1]) + 1:
                raise InvalidArgumentError("Some variable levels are not present in the data")


def check_edge_penalty(
    edge_penalty: Optional[NDArray],
    size: int,
) -> Optional[NDArray[np.float64]]:
    """
    Validate a per-edge penalty matrix and return it as floats.

    Raises
    ------
    InvalidArgumentError
        If the matrix is not (size, size) or has an entry <= 0.
    """
    if edge_penalty is None:
        return None
    pmat = np.asarray(edge_penalty, dtype=np.float64)
    if pmat.shape != (size, size):
        raise InvalidArgumentError(
            f"edge_penalty must have shape ({size}, {size}). Got {pmat.shape}"
        )
    if not np.all(pmat > 0):
        raise InvalidArgumentError(
            "All entries of the edge penalty matrix must be bigger than 0; "
            "1 corresponds to no penalization"
        )
    return pmat


def check_background_nodes(
    background_nodes: Optional[Sequence[int]],
    n: int,
) -> Tuple[int, ...]:
    """Validate 0-based background node indices."""
    if background_nodes is None:
        return ()
    nodes = tuple(int(i) for i in background_nodes)
    if len(set(nodes)) != len(nodes):
        raise InvalidArgumentError(f"Background nodes must be unique. Got {nodes}")
    if any(i < 0 or i >= n for i in nodes):
        raise InvalidArgumentError(
            f"Background nodes must lie in [0, {n}). Got {nodes}"
        )
    return tuple(sorted(nodes))


def check_labels(labels: Sequence[str], expected: int) -> Tuple[str, ...]:
    """Validate user supplied node labels."""
    out = tuple(str(label) for label in labels)
    if len(out) != expected:
        raise InvalidArgumentError(
            f"Expected {expected} node labels. Got {len(out)}"
        )
    if len(set(out)) != len(out):
        raise InvalidArgumentError("Node labels must be unique")
    return out


def static_labels(n: int) -> Tuple[str, ...]:
    """Default labels v1..vn."""
    return tuple(f"v{i}" for i in range(1, n + 1))


def dynamic_labels(nsmall: int, bgn: int, slices: int) -> Tuple[str, ...]:
    """
    Default labels for a wide dynamic dataset.

    Static variables are named s1..sb; dynamic variables are v1..vk in the
    first slice and carry the slice number from the second slice on
    (v1.2, v2.2, ...).
    """
    labels = [f"s{i}" for i in range(1, bgn + 1)]
    for t in range(1, slices + 1):
        suffix = "" if t == 1 else f".{t}"
        labels.extend(f"v{i}{suffix}" for i in range(1, nsmall + 1))
    return tuple(labels)
