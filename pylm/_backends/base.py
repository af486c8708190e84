"""
Abstract base classes for backends.

Defines the interface all backends must implement.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Optional
from dataclasses import dataclass

# Relative rank tolerance on the column scale of X (as in R's lm)
RANK_TOL = 1e-7


@dataclass
class CholeskyFactor:
    """
    Cholesky factor of a symmetric positive semi-definite matrix A.

    U is upper triangular and satisfies U'U = A[piv][:, piv]. Only the
    leading rank x rank block is meaningful when rank < p.
    """
    U: np.ndarray            # Upper triangular factor, shape (p, p)
    piv: np.ndarray          # Column permutation (0-indexed)
    rank: int                # Numerical rank
    pivoted: bool            # Produced by a pivoted factorization?
    tol: float               # Tolerance used for rank determination

    @property
    def active(self) -> np.ndarray:
        """Original column indices of the non-aliased columns."""
        return self.piv[:self.rank]


class BackendBase(ABC):
    """Abstract base class for all backends."""

    @abstractmethod
    def gram(
        self,
        X: np.ndarray,
        weights: Optional[np.ndarray] = None
    ) -> np.ndarray:
        """
        Cross-product matrix X'WX.

        Parameters
        ----------
        X : ndarray, shape (n, p)
            Design matrix
        weights : ndarray, shape (n,), optional
            Case weights (W = diag(weights))

        Returns
        -------
        ndarray, shape (p, p)
        """
        pass

    @abstractmethod
    def cholesky(
        self,
        A: np.ndarray,
        pivoted: bool = False,
        tol: Optional[float] = None
    ) -> CholeskyFactor:
        """
        Cholesky factorization A = U'U, optionally with diagonal pivoting.

        Backends implement ALL computation internally using their
        native types, only converting at entry/exit.

        Parameters
        ----------
        A : ndarray, shape (p, p)
            Symmetric positive semi-definite matrix
        pivoted : bool
            Use diagonal pivoting and report the numerical rank.
            If False, a rank-deficient A raises RankDeficiencyError.
        tol : float, optional
            Rank tolerance on the pivots (default 1e-14 * max(diag(A)))

        Returns
        -------
        CholeskyFactor
        """
        pass

    @abstractmethod
    def cho_solve(self, factor: CholeskyFactor, b: np.ndarray) -> np.ndarray:
        """
        Solve A x = b using a CholeskyFactor of A.

        Aliased columns (beyond the rank) receive zero in x.
        """
        pass

    @abstractmethod
    def get_device_info(self) -> dict:
        """Get backend information."""
        pass

    def default_tol(self, A: np.ndarray) -> float:
        """
        Default pivot tolerance: (1e-7)**2 * max(diag(A)).

        Pivots are compared on the scale of A = X'WX, so this is R's lm()
        tolerance of 1e-7 relative to the largest column norm of X.
        """
        p = A.shape[0]
        if p == 0:
            return 0.0
        return RANK_TOL ** 2 * float(np.max(np.diag(A)))


class CPUBackend(BackendBase):
    """CPU backend base class (always FP64)."""
    pass


class GPUBackendFP64(BackendBase):
    """GPU backend base class for FP64."""
    pass
