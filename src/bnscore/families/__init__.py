"""
Score families and their sufficient statistics.

**Gaussian (gaussian.py):**
- BGe score: posterior Normal-Wishart parameters and score constants

**Discrete (discrete.py):**
- BDe score: weighted indicator counts for binary data
- BDeCat score: level counts for categorical data

**User defined (user.py):**
- Opaque payload for a user supplied local score
"""

from bnscore.families.types import (
    ScoreFamily,
    GaussianStatistics,
    BinaryStatistics,
    CategoricalStatistics,
    UserStatistics,
    FamilyStatistics,
)
from bnscore.families.gaussian import compute_gaussian_statistics
from bnscore.families.discrete import compute_binary_statistics, compute_categorical_statistics
from bnscore.families.user import LocalScoreFn, compute_user_statistics

__all__ = [
    "ScoreFamily",
    "GaussianStatistics",
    "BinaryStatistics",
    "CategoricalStatistics",
    "UserStatistics",
    "FamilyStatistics",
    "LocalScoreFn",
    "compute_gaussian_statistics",
    "compute_binary_statistics",
    "compute_categorical_statistics",
    "compute_user_statistics",
]
