"""
bnscore: score parameters for Bayesian network structure learning.

Precomputes the sufficient statistics and hyperparameters needed to score
candidate parent sets under the BGe (Gaussian), BDe (binary) and BDeCat
(categorical) scores, or a user defined score, for static networks and
dynamic (time-sliced) networks.

**Usage:**
```python
import numpy as np
from bnscore import build_score_parameters, DBNSpec

data = np.random.normal(size=(100, 4))
params = build_score_parameters("bge", data)
params.statistics.score_constants    # one entry per parent-set size

wide = np.random.binomial(1, 0.5, size=(50, 6)).astype(float)
dbn = build_score_parameters("bde", wide, dynamic=DBNSpec(slices=2))
dbn.first_slice, dbn.other_slices, dbn.dynamic.transition
```
"""

import logging

from bnscore.errors import InvalidArgumentError
from bnscore.families import (
    BinaryStatistics,
    CategoricalStatistics,
    GaussianStatistics,
    LocalScoreFn,
    ScoreFamily,
    UserStatistics,
)
from bnscore.params import (
    BDeCatPrior,
    BDePrior,
    BGePrior,
    DBNSpec,
    DynamicLayout,
    ScoreParameters,
    UserScoreSpec,
    build_score_parameters,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "build_score_parameters",
    "ScoreParameters",
    "DynamicLayout",
    "ScoreFamily",
    "GaussianStatistics",
    "BinaryStatistics",
    "CategoricalStatistics",
    "UserStatistics",
    "LocalScoreFn",
    "BGePrior",
    "BDePrior",
    "BDeCatPrior",
    "UserScoreSpec",
    "DBNSpec",
    "InvalidArgumentError",
]
