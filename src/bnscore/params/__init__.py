"""
Score-parameter construction.

- Prior records (BGePrior, BDePrior, BDeCatPrior, UserScoreSpec, DBNSpec)
- ScoreParameters: immutable result object
- build_score_parameters: validating builder for static and dynamic networks
"""

from bnscore.priors import BGePrior, BDePrior, BDeCatPrior, UserScoreSpec, DBNSpec
from bnscore.params.score_parameters import ScoreParameters, DynamicLayout
from bnscore.params.builder import build_score_parameters

__all__ = [
    "BGePrior",
    "BDePrior",
    "BDeCatPrior",
    "UserScoreSpec",
    "DBNSpec",
    "ScoreParameters",
    "DynamicLayout",
    "build_score_parameters",
]
