"""
Structural interfaces consumed by LinearModel.

Protocols (structural typing) rather than base classes: any response or
predictor type that exposes these members can be composed into a model.
"""

from typing import Protocol, Optional, runtime_checkable

import numpy as np


@runtime_checkable
class ModResp(Protocol):
    """Response container: observed data plus the current fitted values."""

    y: np.ndarray
    mu: np.ndarray
    wts: np.ndarray
    offset: np.ndarray

    def update_mu(self, linpr: np.ndarray) -> float:
        """Install new fitted values; returns the resulting deviance."""
        ...

    def deviance(self) -> float:
        ...

    def nulldeviance(self) -> float:
        ...

    def loglikelihood(self) -> float:
        ...

    def nullloglikelihood(self) -> float:
        ...

    def nobs(self) -> float:
        ...


@runtime_checkable
class LinPred(Protocol):
    """
    Linear predictor: design matrix, coefficients and a factorization
    of the (weighted) cross-product matrix.

    ``supports_rank_reporting`` is True when ``rank`` reflects a pivoted
    factorization and may be smaller than the number of columns.
    """

    X: np.ndarray
    beta0: np.ndarray
    supports_rank_reporting: bool

    @property
    def rank(self) -> int:
        ...

    def delbeta(self, r: np.ndarray, wts: Optional[np.ndarray] = None) -> np.ndarray:
        ...

    def installbeta(self, f: float = 1.0) -> np.ndarray:
        ...

    def linpred(self, f: float = 1.0, offset: Optional[np.ndarray] = None) -> np.ndarray:
        ...

    def invchol(self) -> np.ndarray:
        ...
