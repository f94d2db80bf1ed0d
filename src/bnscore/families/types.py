"""
Score families and their precomputed statistics.

A score family is resolved once when the parameters are built. Each family
has one statistics record; downstream scorers dispatch on ``family`` and
read the matching record:

    GAUSSIAN    -> GaussianStatistics     (BGe, Normal-Wishart prior)
    BINARY      -> BinaryStatistics       (BDe, Dirichlet prior)
    CATEGORICAL -> CategoricalStatistics  (BDeCat, Dirichlet prior)
    USER        -> UserStatistics         (user supplied local score)

Score-constant tables are indexed by parent-set size, so a local score for
any parent set only needs the table entry plus family-specific counts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union
import numpy as np
from numpy.typing import NDArray

from bnscore.errors import InvalidArgumentError


class ScoreFamily(str, Enum):
    """Parametric family of the local score."""

    GAUSSIAN = "bge"
    BINARY = "bde"
    CATEGORICAL = "bdecat"
    USER = "usr"

    @classmethod
    def parse(cls, value: Union["ScoreFamily", str]) -> "ScoreFamily":
        """
        Resolve a family from its enum member or string tag.

        Raises
        ------
        InvalidArgumentError
            If value is not a known score type.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                "Scoretype should be bge (for continuous data), bde (for binary data), "
                f"bdecat (for categorical data) or usr (for user defined). Got {value!r}"
            ) from None


@dataclass(frozen=True, eq=False)
class GaussianStatistics:
    """Posterior Normal-Wishart quantities for the BGe score."""

    am: float
    aw: float
    N: float                               # effective sample size
    means: NDArray[np.float64]             # (weighted) column means
    t0_scale: float                        # prior scatter is t0_scale * I
    TN: NDArray[np.float64]                # posterior scatter matrix
    awpN: float                            # posterior degrees of freedom
    muN: NDArray[np.float64]               # posterior mean
    SigmaN: NDArray[np.float64]            # posterior mode covariance
    score_constants: NDArray[np.float64]   # entry j: constant for j parents


@dataclass(frozen=True, eq=False)
class BinaryStatistics:
    """Weighted counts and constants for the BDe score."""

    chi: float
    pf: float
    N: float
    d1: NDArray[np.float64]                # weighted indicator of value 1
    d0: NDArray[np.float64]                # weighted indicator of value 0
    score_constants: NDArray[np.float64]


@dataclass(frozen=True, eq=False)
class CategoricalStatistics:
    """
    Level counts and edge penalties for the BDeCat score.

    The level-dependent log-gamma terms depend on the parents of each node
    and are left to the local scorer, which reads ``cvec`` and ``pf``.
    """

    chi: float
    pf: float
    N: float
    cvec: NDArray[np.int64]
    score_constants: NDArray[np.float64]


@dataclass(frozen=True, eq=False)
class UserStatistics:
    """Opaque payload for a user defined score."""

    pctesttype: str
    local_score: Optional[Callable[..., float]] = None
    extra: Dict[str, Any] = field(default_factory=dict)


FamilyStatistics = Union[
    GaussianStatistics,
    BinaryStatistics,
    CategoricalStatistics,
    UserStatistics,
]


def readonly(array: NDArray) -> NDArray:
    """Copy of ``array`` that cannot be written to."""
    out = np.array(array, copy=True)
    out.setflags(write=False)
    return out
