"""
The score-parameter object consumed by local scorers.

A ScoreParameters instance holds everything needed to evaluate the local
score of any node given any parent set without another pass over the data.
It is built once by ``build_score_parameters`` and is read-only afterwards:
the dataclasses are frozen and every array has its write flag cleared.

Dynamic networks form a small tree. The top-level object keeps the raw
wide data and the index maps in ``dynamic``; the statistics live in static
child objects (``first_slice``/``other_slices``, or ``per_slice`` when
transitions are not stationary).
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union
import numpy as np
from numpy.typing import NDArray

from bnscore.dynamic.index_maps import IndexMap
from bnscore.families.types import FamilyStatistics, ScoreFamily


@dataclass(frozen=True, eq=False)
class DynamicLayout:
    """
    Sub-problems and index maps of a dynamic Bayesian network.

    Attributes
    ----------
    stationary : bool
        Whether all transitions share one structure.
    slices : int
        Number of time slices represented by the data.
    split : bool
        True when the first slice may differ in structure from the
        internal structure of later slices.
    first_slice, other_slices : ScoreParameters or None
        Static sub-problems of the stationary case.
    per_slice : tuple of ScoreParameters
        One static sub-problem per transition (non-stationary case).
    within_slice, transition : IndexMap
        Edge blocks in the internal compact ordering.
    user_initial, user_within_slice, user_transition : IndexMap
        Edge blocks in the user-facing ordering.
    rows_removed : int
        Observations dropped because of missing values.
    """

    stationary: bool
    slices: int
    split: bool
    within_slice: IndexMap
    transition: IndexMap
    user_initial: IndexMap
    user_within_slice: IndexMap
    user_transition: IndexMap
    first_slice: Optional["ScoreParameters"] = None
    other_slices: Optional["ScoreParameters"] = None
    per_slice: Tuple["ScoreParameters", ...] = ()
    rows_removed: int = 0


@dataclass(frozen=True, eq=False)
class ScoreParameters:
    """Data, hyperparameters and precomputed statistics for scoring."""

    family: ScoreFamily
    n: int                                          # nodes incl. background
    bgn: int                                        # background nodes
    labels: Tuple[str, ...]                         # one per data column
    labels_short: Tuple[str, ...]
    background_nodes: Tuple[int, ...]
    main_nodes: Tuple[int, ...]
    static_nodes: Tuple[int, ...]
    data: Union[NDArray[np.float64], Tuple[NDArray[np.float64], ...]]
    weights: Optional[Union[NDArray[np.float64], Tuple[Optional[NDArray[np.float64]], ...]]] = None
    log_edge_penalty: Optional[NDArray[np.float64]] = None
    statistics: Optional[FamilyStatistics] = None
    dynamic: Optional[DynamicLayout] = None

    @property
    def nsmall(self) -> int:
        """Number of nodes that may receive parents."""
        return self.n - self.bgn

    @property
    def is_dynamic(self) -> bool:
        return self.dynamic is not None

    @property
    def first_slice(self) -> Optional["ScoreParameters"]:
        return None if self.dynamic is None else self.dynamic.first_slice

    @property
    def other_slices(self) -> Optional["ScoreParameters"]:
        return None if self.dynamic is None else self.dynamic.other_slices

    @property
    def per_slice(self) -> Tuple["ScoreParameters", ...]:
        return () if self.dynamic is None else self.dynamic.per_slice

    def __repr__(self) -> str:
        """String representation."""
        kind = "dynamic" if self.is_dynamic else "static"
        return (
            f"ScoreParameters(family={self.family.value!r}, {kind}, "
            f"n={self.n}, bgn={self.bgn})"
        )
