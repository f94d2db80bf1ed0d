"""
User defined score family.

A user supplied local score has the signature

    local_score(node, parents, params) -> float

returning the log score of ``node`` given the indices in ``parents``.
``params`` is the full ScoreParameters object. For dynamic networks it must
read the index maps (``params.dynamic.user_within_slice`` etc.), which are
expressed in the user-facing column order.
"""

from typing import Callable, Optional, Sequence, TYPE_CHECKING

from bnscore.families.types import UserStatistics
from bnscore.priors import UserScoreSpec

if TYPE_CHECKING:
    from bnscore.params.score_parameters import ScoreParameters

LocalScoreFn = Callable[[int, Sequence[int], "ScoreParameters"], float]


def compute_user_statistics(spec: Optional[UserScoreSpec], n: int) -> UserStatistics:
    spec = (spec or UserScoreSpec()).resolved(n)
    return UserStatistics(
        pctesttype=spec.pctesttype,
        local_score=spec.local_score,
        extra=dict(spec.extra),
    )
