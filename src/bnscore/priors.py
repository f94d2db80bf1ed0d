"""
Hyperparameter and layout specifications for score parameters.

Each score family carries its own prior record:
- BGePrior: Normal-Wishart prior for Gaussian data (am, aw)
- BDePrior: Dirichlet prior for binary data (chi, edgepf)
- BDeCatPrior: Dirichlet prior for categorical data (chi, edgepf, cvec)
- UserScoreSpec: parameters for a user supplied local score

DBNSpec describes how a wide, time-sliced dataset is laid out.

Records are never mutated after construction. Defaults that depend on the
problem size (such as aw = n + am + 1) are filled in by ``resolved``, which
returns a new record.
"""

from typing import Any, Callable, Dict, Optional, Sequence, Union
import numpy as np
from numpy.typing import NDArray

from bnscore.errors import InvalidArgumentError


class BGePrior:
    """Normal-Wishart prior for the BGe score."""

    def __init__(
        self,
        am: float = 1.0,
        aw: Optional[float] = None,
    ) -> None:
        """
        Initialize BGe prior.

        Parameters
        ----------
        am : float
            Prior precision scale of the mean. Must be positive. Default 1.0.
        aw : float, optional
            Prior Wishart degrees of freedom. Must exceed n + 1 once the
            number of nodes is known. Default n + am + 1.

        Raises
        ------
        InvalidArgumentError
            If am is not positive.
        """
        if not am > 0:
            raise InvalidArgumentError(f"am must be positive. Got {am}")
        self.am = float(am)
        self.aw = None if aw is None else float(aw)

    def resolved(self, n: int) -> "BGePrior":
        """
        Return a fully populated copy for a network with n nodes.

        Raises
        ------
        InvalidArgumentError
            If a supplied aw does not exceed n + 1.
        """
        if self.aw is None:
            return BGePrior(am=self.am, aw=n + self.am + 1)
        if not self.aw > n + 1:
            raise InvalidArgumentError(
                f"aw must be larger than n + 1 = {n + 1}. Got {self.aw}"
            )
        return BGePrior(am=self.am, aw=self.aw)

    def __repr__(self) -> str:
        """String representation."""
        return f"BGePrior(am={self.am}, aw={self.aw})"


class BDePrior:
    """Symmetric Dirichlet prior for the BDe score on binary data."""

    def __init__(
        self,
        chi: float = 0.5,
        edgepf: float = 2.0,
    ) -> None:
        """
        Initialize BDe prior.

        Parameters
        ----------
        chi : float
            Total prior pseudo counts. Must be positive. Default 0.5.
        edgepf : float
            Edge penalization factor; each parent costs log(edgepf).
            Must be positive. Default 2.0.

        Raises
        ------
        InvalidArgumentError
            If chi or edgepf is not positive.
        """
        if not chi > 0:
            raise InvalidArgumentError(f"chi must be positive. Got {chi}")
        if not edgepf > 0:
            raise InvalidArgumentError(f"edgepf must be positive. Got {edgepf}")
        self.chi = float(chi)
        self.edgepf = float(edgepf)

    def without_edge_penalty(self) -> "BDePrior":
        """Copy of this prior with edgepf set to 1 (no penalization)."""
        return BDePrior(chi=self.chi, edgepf=1.0)

    def resolved(self, n: int) -> "BDePrior":
        return BDePrior(chi=self.chi, edgepf=self.edgepf)

    def __repr__(self) -> str:
        """String representation."""
        return f"BDePrior(chi={self.chi}, edgepf={self.edgepf})"


class BDeCatPrior(BDePrior):
    """Dirichlet prior for the categorical BDe score."""

    def __init__(
        self,
        chi: float = 0.5,
        edgepf: float = 2.0,
        cvec: Optional[Sequence[int]] = None,
    ) -> None:
        """
        Initialize BDeCat prior.

        Parameters
        ----------
        chi : float
            Total prior pseudo counts. Default 0.5.
        edgepf : float
            Edge penalization factor. Default 2.0.
        cvec : sequence of int, optional
            Number of levels of each data column. If None, it is derived
            from the data as max + 1 and every level in between must be
            observed.
        """
        super().__init__(chi=chi, edgepf=edgepf)
        if cvec is None:
            self.cvec: Optional[NDArray[np.int64]] = None
        else:
            cvec_arr = np.asarray(cvec)
            if cvec_arr.ndim != 1:
                raise InvalidArgumentError(
                    f"cvec must be one-dimensional. Got shape {cvec_arr.shape}"
                )
            if np.any(cvec_arr != np.round(cvec_arr)) or np.any(cvec_arr < 1):
                raise InvalidArgumentError(
                    f"cvec entries must be positive integers. Got {cvec_arr}"
                )
            self.cvec = cvec_arr.astype(np.int64)

    def without_edge_penalty(self) -> "BDeCatPrior":
        return BDeCatPrior(chi=self.chi, edgepf=1.0, cvec=self.cvec)

    def with_columns(self, columns: NDArray[np.int64]) -> "BDeCatPrior":
        """Copy of this prior with cvec restricted/permuted to ``columns``."""
        cvec = None if self.cvec is None else self.cvec[columns]
        return BDeCatPrior(chi=self.chi, edgepf=self.edgepf, cvec=cvec)

    def resolved(self, n: int) -> "BDeCatPrior":
        if self.cvec is not None and len(self.cvec) != n:
            raise InvalidArgumentError(
                f"cvec must have one entry per node (n={n}). Got {len(self.cvec)}"
            )
        return BDeCatPrior(chi=self.chi, edgepf=self.edgepf, cvec=self.cvec)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"BDeCatPrior(chi={self.chi}, edgepf={self.edgepf}, "
            f"cvec={None if self.cvec is None else self.cvec.tolist()})"
        )


class UserScoreSpec:
    """Parameters for a user defined score."""

    PC_TEST_TYPES = ("bge", "bde", "bdecat")

    def __init__(
        self,
        local_score: Optional[Callable[..., float]] = None,
        pctesttype: str = "bge",
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize user score specification.

        Parameters
        ----------
        local_score : callable, optional
            Function ``local_score(node, parents, params) -> float``
            evaluating the log score of a node given its parents.
        pctesttype : str
            Conditional independence test used to seed searches.
            One of "bge", "bde", "bdecat". Default "bge".
        extra : dict, optional
            Additional user parameters, passed through untouched.
        """
        if pctesttype not in self.PC_TEST_TYPES:
            raise InvalidArgumentError(
                f"pctesttype must be one of {self.PC_TEST_TYPES}. Got {pctesttype!r}"
            )
        if local_score is not None and not callable(local_score):
            raise InvalidArgumentError("local_score must be callable")
        self.local_score = local_score
        self.pctesttype = pctesttype
        self.extra = dict(extra or {})

    def resolved(self, n: int) -> "UserScoreSpec":
        return UserScoreSpec(
            local_score=self.local_score,
            pctesttype=self.pctesttype,
            extra=self.extra,
        )

    def __repr__(self) -> str:
        """String representation."""
        return f"UserScoreSpec(pctesttype={self.pctesttype!r}, extra={sorted(self.extra)})"


FamilyParams = Union[BGePrior, BDePrior, BDeCatPrior, UserScoreSpec]


class DBNSpec:
    """Layout of a dynamic Bayesian network dataset."""

    def __init__(
        self,
        slices: int = 2,
        b: int = 0,
        samestruct: bool = True,
        stationary: bool = True,
    ) -> None:
        """
        Initialize DBN specification.

        Parameters
        ----------
        slices : int
            Number of time slices in the wide dataset. Must be >= 2.
            Ignored for non-stationary data, which is supplied one
            transition block at a time.
        b : int
            Number of static variables; they occupy the first b columns.
        samestruct : bool
            If True the first slice shares the internal structure of the
            later slices. Default True.
        stationary : bool
            If True all transitions share one structure. Default True.

        Raises
        ------
        InvalidArgumentError
            If slices < 2 or b < 0.
        """
        if int(slices) != slices or slices < 2:
            raise InvalidArgumentError(f"slices must be an integer >= 2. Got {slices}")
        if int(b) != b or b < 0:
            raise InvalidArgumentError(f"b must be a non-negative integer. Got {b}")
        self.slices = int(slices)
        self.b = int(b)
        self.samestruct = bool(samestruct)
        self.stationary = bool(stationary)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"DBNSpec(slices={self.slices}, b={self.b}, "
            f"samestruct={self.samestruct}, stationary={self.stationary})"
        )
