"""
CPU backend using NumPy + SciPy.

This is the reference implementation; factorizations go straight to LAPACK.
"""

import logging

import numpy as np
from scipy.linalg import cholesky, solve_triangular, LinAlgError
from scipy.linalg.lapack import dpstrf
from typing import Optional

from .base import CPUBackend, CholeskyFactor
from ..exceptions import RankDeficiencyError, NumericalError

logger = logging.getLogger(__name__)


class CPUBackendFP64(CPUBackend):
    """
    CPU backend using NumPy + SciPy.

    Reference implementation. Always uses FP64 precision.
    """

    def __init__(self):
        self.name = "cpu_fp64"
        self.precision = "fp64"

    def gram(self, X: np.ndarray, weights: Optional[np.ndarray] = None) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        if weights is None or len(weights) == 0:
            return X.T @ X
        return X.T @ (X * np.asarray(weights, dtype=np.float64)[:, np.newaxis])

    def cholesky(
        self,
        A: np.ndarray,
        pivoted: bool = False,
        tol: Optional[float] = None
    ) -> CholeskyFactor:
        """
        Cholesky factorization via LAPACK.

        The rank is always determined with the pivoted routine (dpstrf) so
        that both policies agree on what counts as rank-deficient.
        """
        A = np.asarray(A, dtype=np.float64)
        p = A.shape[0]
        if tol is None:
            tol = self.default_tol(A)

        c, piv, rank, info = dpstrf(A, tol=tol, lower=0)
        if info < 0:
            raise NumericalError(f"dpstrf: illegal value in argument {-info}")
        rank = int(rank)
        logger.debug("pivoted Cholesky of %dx%d matrix: rank %d (tol=%.3g)", p, p, rank, tol)

        if not pivoted:
            if rank < p:
                raise RankDeficiencyError(
                    f"Design matrix is rank deficient: rank {rank} < {p} columns. "
                    f"Use allow_rank_deficient=True for a pivoted fit.",
                    rank=rank, expected_rank=p
                )
            try:
                U = cholesky(A, lower=False)
            except LinAlgError as e:
                raise RankDeficiencyError(
                    f"Cross-product matrix is not positive definite: {e}",
                    rank=rank, expected_rank=p
                ) from e
            return CholeskyFactor(
                U=U, piv=np.arange(p, dtype=np.int64), rank=p, pivoted=False, tol=tol
            )

        U = np.triu(c)
        U[rank:, rank:] = 0.0
        return CholeskyFactor(
            U=U,
            piv=piv.astype(np.int64) - 1,  # LAPACK pivots are 1-indexed
            rank=rank,
            pivoted=True,
            tol=tol
        )

    def cho_solve(self, factor: CholeskyFactor, b: np.ndarray) -> np.ndarray:
        b = np.asarray(b, dtype=np.float64)
        r = factor.rank
        x = np.zeros_like(b)
        if r == 0:
            return x
        U11 = factor.U[:r, :r]
        active = factor.active
        # U'U x = b  ->  U' z = b, then U x = z
        z = solve_triangular(U11, b[active], trans='T', lower=False)
        x[active] = solve_triangular(U11, z, lower=False)
        return x

    def get_device_info(self) -> dict:
        """Get backend information."""
        import scipy
        return {
            'backend': 'cpu',
            'precision': 'fp64',
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
