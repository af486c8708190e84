"""
Dense linear predictor with a Cholesky factorization of X'WX.

Algorithm:
---------
1. Factor X'WX = U'U (optionally with diagonal pivoting)
2. For a working response r, solve U'U δ = X'W (r - Xβ) for the delta δ
3. Install β ← β + fδ

Solving for a delta against the current coefficients makes a repeated
fit at the optimum a fixed point (δ = 0).
"""

import logging

import numpy as np
from typing import Optional

from .._backends import get_backend, BackendBase, CholeskyFactor
from .._utils import check_array
from ..exceptions import LengthMismatchError, ValidationError

logger = logging.getLogger(__name__)


class DensePredChol:
    """
    Linear predictor for dense designs using a Cholesky factor.

    Parameters
    ----------
    X : array, shape (n, p)
        Design matrix (include an intercept column explicitly)
    pivoted : bool, default=False
        Use a pivoted factorization that tolerates rank deficiency.
        If False, a rank-deficient X raises RankDeficiencyError.
    backend : str or BackendBase, optional
        Computational backend (see pylm._backends.get_backend)
    tol : float, optional
        Pivot tolerance for rank determination

    Attributes
    ----------
    X : ndarray, shape (n, p)
    beta0 : ndarray, shape (p,)
        Installed coefficients. Aliased coefficients stay at zero.
    delta : ndarray, shape (p,)
        Pending coefficient increment
    chol : CholeskyFactor
        Factor of X'X, or of X'WX after a weighted ``delbeta``
    """

    def __init__(
        self,
        X,
        pivoted: bool = False,
        backend=None,
        tol: Optional[float] = None,
    ):
        self.X = check_array(X, 'X')
        n, p = self.X.shape
        if p == 0:
            raise ValidationError("X must have at least one column")
        self.X.flags.writeable = False

        self.pivoted = bool(pivoted)
        self.tol = tol
        self.backend = backend if isinstance(backend, BackendBase) else get_backend(backend)

        self.beta0 = np.zeros(p)
        self.delta = np.zeros(p)
        self.chol = self._factorize(None)

    @property
    def supports_rank_reporting(self) -> bool:
        return self.pivoted

    @property
    def rank(self) -> int:
        """Effective column rank (p unless pivoted)."""
        return self.chol.rank if self.pivoted else self.X.shape[1]

    def _factorize(self, wts: Optional[np.ndarray]) -> CholeskyFactor:
        XtWX = self.backend.gram(self.X, wts)
        chol = self.backend.cholesky(XtWX, pivoted=self.pivoted, tol=self.tol)
        if chol.rank < self.X.shape[1]:
            logger.debug(
                "rank-deficient design: rank %d < %d; aliased columns %s",
                chol.rank, self.X.shape[1], chol.piv[chol.rank:].tolist()
            )
        return chol

    def delbeta(self, r, wts: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Solve the (weighted) normal equations for a coefficient increment.

        Parameters
        ----------
        r : array, shape (n,)
            Working response
        wts : array, shape (n,), optional
            Case weights; the factor is recomputed for X'WX

        Returns
        -------
        ndarray, shape (p,)
            The increment, also stored in ``self.delta``
        """
        r = np.asarray(r, dtype=np.float64).ravel()
        n = self.X.shape[0]
        if len(r) != n:
            raise LengthMismatchError(
                f"length of r is {len(r)}, should be {n}",
                name='r', actual=len(r), expected=(n,)
            )

        resid = r - self.X @ self.beta0
        if wts is not None and len(wts) > 0:
            wts = np.asarray(wts, dtype=np.float64)
            if len(wts) != n:
                raise LengthMismatchError(
                    f"length of wts is {len(wts)}, should be {n}",
                    name='wts', actual=len(wts), expected=(n,)
                )
            self.chol = self._factorize(wts)
            rhs = self.X.T @ (wts * resid)
        else:
            rhs = self.X.T @ resid

        self.delta = self.backend.cho_solve(self.chol, rhs)
        return self.delta

    def installbeta(self, f: float = 1.0) -> np.ndarray:
        """Add ``f * delta`` to ``beta0`` and reset ``delta``."""
        self.beta0 += f * self.delta
        self.delta = np.zeros_like(self.beta0)
        return self.beta0

    def linpred(self, f: float = 1.0, offset: Optional[np.ndarray] = None) -> np.ndarray:
        """Linear predictor X(β + fδ), shifted by ``offset`` if given."""
        eta = self.X @ (self.beta0 + f * self.delta)
        if offset is not None and len(offset) > 0:
            eta = eta + offset
        return eta

    def cholesky(self) -> CholeskyFactor:
        """The current factor; ``U'U`` equals X'WX with columns in ``piv`` order."""
        return self.chol

    def invchol(self) -> np.ndarray:
        """
        (X'WX)⁻¹ in the original column order.

        Rows and columns of aliased coefficients are NaN.
        """
        p = self.X.shape[1]
        r = self.chol.rank
        out = np.full((p, p), np.nan)
        if r == 0:
            return out
        U11 = self.chol.U[:r, :r]
        XtWX_inv = self.backend.cho_solve(
            CholeskyFactor(U=U11, piv=np.arange(r), rank=r, pivoted=False, tol=self.chol.tol),
            np.eye(r)
        )
        active = self.chol.active
        out[np.ix_(active, active)] = XtWX_inv
        return out
