"""
Sufficient statistics for the BDe and BDeCat scores.

Both scores integrate a multinomial likelihood against a symmetric
Dirichlet prior with chi pseudo counts in total, spread evenly over the
parent configurations of each node.

For binary data and a node with i parents there are q = 2^i parent
configurations, so the constant part of the local score is

    q lgamma(chi / q) - 2 q lgamma(chi / (2 q)) - i log(pf)

where pf is the edge penalization factor. For categorical data the number
of configurations depends on the level counts of the parents, so only the
edge penalty -i log(pf) is tabulated; the level counts (cvec) are exposed
for the local scorer.
"""

from typing import Optional
import numpy as np
from numpy.typing import NDArray
from scipy.special import gammaln

from bnscore.data.validation import check_binary, check_levels
from bnscore.errors import InvalidArgumentError
from bnscore.families.types import BinaryStatistics, CategoricalStatistics, readonly
from bnscore.priors import BDeCatPrior, BDePrior


def _effective_size(
    data: NDArray[np.float64],
    weights: Optional[NDArray[np.float64]],
) -> float:
    return float(data.shape[0]) if weights is None else float(weights.sum())


def bde_score_constants(n: int, chi: float, pf: float) -> NDArray[np.float64]:
    """
    Constants of the BDe local score indexed by number of parents 0..n-1.
    """
    i = np.arange(n, dtype=np.float64)
    noparams = 2.0 ** i
    return (
        noparams * gammaln(chi / noparams)
        - 2.0 * noparams * gammaln(chi / (2.0 * noparams))
        - i * np.log(pf)
    )


def compute_binary_statistics(
    data: NDArray[np.float64],
    weights: Optional[NDArray[np.float64]] = None,
    prior: Optional[BDePrior] = None,
) -> BinaryStatistics:
    """
    Compute weighted indicator matrices and BDe constants.

    Parameters
    ----------
    data : NDArray[np.float64]
        Complete binary design matrix, shape (rows, n).
    weights : NDArray[np.float64], optional
        Observation weights, shape (rows,). Unit weights if None.
    prior : BDePrior, optional
        Pseudo counts and edge penalty. Defaults chi = 0.5, edgepf = 2.

    Returns
    -------
    BinaryStatistics
        d1[r, k] = w_r if data[r, k] == 1 else 0, d0 the complement, and
        the score-constant table.

    Raises
    ------
    InvalidArgumentError
        If data contains values other than 0 and 1.
    """
    n = data.shape[1]
    prior = (prior or BDePrior()).resolved(n)
    check_binary(data)

    if weights is None:
        d1 = data.copy()
        d0 = 1.0 - data
    else:
        d1 = data * weights[:, np.newaxis]
        d0 = (1.0 - data) * weights[:, np.newaxis]

    return BinaryStatistics(
        chi=prior.chi,
        pf=prior.edgepf,
        N=_effective_size(data, weights),
        d1=readonly(d1),
        d0=readonly(d0),
        score_constants=readonly(bde_score_constants(n, prior.chi, prior.edgepf)),
    )


def compute_categorical_statistics(
    data: NDArray[np.float64],
    weights: Optional[NDArray[np.float64]] = None,
    prior: Optional[BDeCatPrior] = None,
) -> CategoricalStatistics:
    """
    Compute level counts and edge penalties for the BDeCat score.

    Parameters
    ----------
    data : NDArray[np.float64]
        Complete categorical design matrix with levels coded 0, 1, ...
    weights : NDArray[np.float64], optional
        Observation weights, shape (rows,).
    prior : BDeCatPrior, optional
        Pseudo counts, edge penalty and optional explicit level counts.

    Returns
    -------
    CategoricalStatistics

    Raises
    ------
    InvalidArgumentError
        If levels are missing from a column (without explicit cvec), or an
        explicit cvec does not cover the observed levels.
    """
    n = data.shape[1]
    prior = (prior or BDeCatPrior()).resolved(n)
    check_levels(data, require_all_levels=prior.cvec is None)

    observed = data.max(axis=0).astype(np.int64) + 1 if data.shape[0] else np.ones(n, np.int64)
    if prior.cvec is None:
        cvec = observed
    else:
        cvec = prior.cvec
        if np.any(cvec < observed):
            raise InvalidArgumentError(
                f"cvec must cover the observed levels {observed.tolist()}. Got {cvec.tolist()}"
            )

    return CategoricalStatistics(
        chi=prior.chi,
        pf=prior.edgepf,
        N=_effective_size(data, weights),
        cvec=readonly(cvec),
        score_constants=readonly(-np.arange(n, dtype=np.float64) * np.log(prior.edgepf)),
    )
