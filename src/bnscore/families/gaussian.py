"""
Sufficient statistics for the BGe score.

The BGe score is the marginal likelihood of Gaussian data under a
Normal-Wishart prior (Geiger & Heckerman, 2002).

Mathematical background:
    Prior:
        μ | W ~ N(μ0, (am W)^{-1}),   W ~ Wishart(aw, T0^{-1})
        μ0 = 0,  T0 = t0 I,  t0 = am (aw - n - 1) / (am + 1)

    Posterior after N (possibly weighted) observations with mean x̄ and
    scatter matrix S:
        TN   = T0 + S + (am N / (am + N)) (μ0 - x̄)(μ0 - x̄)^T
        awpN = aw + N
        muN  = (N x̄ + am μ0) / (N + am)
        SigmaN = TN / (awpN - n - 1)        # posterior mode covariance

    For a node with j - 1 parents the local score only needs TN restricted
    to the family and the constant

        c_j = -(N/2) log π + ½ log(am / (am + N))
              - lgamma(awp / 2) + lgamma((awp + N) / 2)
              + ((awp + j - 1) / 2) log t0,          awp = aw - n + j

    which is tabulated here for j = 1..n.
"""

from typing import Optional, Tuple
import numpy as np
from numpy.typing import NDArray
from scipy.special import gammaln

from bnscore.families.types import GaussianStatistics, readonly
from bnscore.priors import BGePrior


def scatter_matrix(
    data: NDArray[np.float64],
    weights: Optional[NDArray[np.float64]] = None,
) -> Tuple[float, NDArray[np.float64], NDArray[np.float64]]:
    """
    Effective sample size, mean vector and scatter matrix.

    Unweighted data uses the unbiased sample covariance times (N - 1);
    weighted data uses the maximum-likelihood weighted covariance times
    N = sum(weights). Both equal Σ_i w_i (x_i - x̄)(x_i - x̄)^T.

    Parameters
    ----------
    data : NDArray[np.float64]
        Complete design matrix, shape (rows, n).
    weights : NDArray[np.float64], optional
        Positive observation weights, shape (rows,).

    Returns
    -------
    N : float
        Row count, or sum of weights.
    means : NDArray[np.float64]
        Column means, shape (n,).
    scatter : NDArray[np.float64]
        Scatter matrix, shape (n, n).
    """
    n = data.shape[1]
    if weights is None:
        N = float(data.shape[0])
        means = data.mean(axis=0)
        cov = np.cov(data, rowvar=False, ddof=1).reshape(n, n)
        scatter = cov * (N - 1)
    else:
        N = float(weights.sum())
        means = np.average(data, axis=0, weights=weights)
        cov = np.cov(data, rowvar=False, aweights=weights, ddof=0).reshape(n, n)
        scatter = cov * N
    return N, means, scatter


def bge_score_constants(
    n: int,
    N: float,
    am: float,
    aw: float,
    t0_scale: float,
) -> NDArray[np.float64]:
    """
    Parent-count dependent constants of the BGe local score.

    Entry j - 1 holds the constant for a node with j - 1 parents,
    j = 1..n.
    """
    const = -(N / 2.0) * np.log(np.pi) + 0.5 * np.log(am / (am + N))
    j = np.arange(1, n + 1, dtype=np.float64)
    awp = aw - n + j
    return (
        const
        - gammaln(awp / 2.0)
        + gammaln((awp + N) / 2.0)
        + ((awp + j - 1.0) / 2.0) * np.log(t0_scale)
    )


def compute_gaussian_statistics(
    data: NDArray[np.float64],
    weights: Optional[NDArray[np.float64]] = None,
    prior: Optional[BGePrior] = None,
) -> GaussianStatistics:
    """
    Compute the posterior Normal-Wishart statistics for the BGe score.

    Parameters
    ----------
    data : NDArray[np.float64]
        Complete continuous design matrix, shape (rows, n).
    weights : NDArray[np.float64], optional
        Observation weights, shape (rows,).
    prior : BGePrior, optional
        Hyperparameters am and aw. Defaults to am = 1, aw = n + am + 1.

    Returns
    -------
    GaussianStatistics
        Read-only statistics record.

    Raises
    ------
    InvalidArgumentError
        If a supplied aw does not exceed n + 1.
    """
    n = data.shape[1]
    prior = (prior or BGePrior()).resolved(n)
    am, aw = prior.am, prior.aw

    N, means, scatter = scatter_matrix(data, weights)

    mu0 = np.zeros(n)
    t0_scale = am * (aw - n - 1) / (am + 1)
    T0 = t0_scale * np.eye(n)

    diff = mu0 - means
    TN = T0 + scatter + ((am * N) / (am + N)) * np.outer(diff, diff)
    awpN = aw + N

    muN = (N * means + am * mu0) / (N + am)
    SigmaN = TN / (awpN - n - 1)

    return GaussianStatistics(
        am=am,
        aw=aw,
        N=N,
        means=readonly(means),
        t0_scale=t0_scale,
        TN=readonly(TN),
        awpN=awpN,
        muN=readonly(muN),
        SigmaN=readonly(SigmaN),
        score_constants=readonly(bge_score_constants(n, N, am, aw, t0_scale)),
    )
