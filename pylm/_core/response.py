"""
Response of a linear model.

Holds the observed response, the current fitted values and the optional
offset and case weights, and computes deviance and Gaussian likelihood.
"""

import numpy as np
from typing import Optional

from .._utils import check_vector, check_optional_length
from ..exceptions import LengthMismatchError, ValidationError


class LmResp:
    """
    Response in a linear model.

    Attributes
    ----------
    mu : ndarray, shape (n,)
        Current fitted values. Overwritten in place by ``update_mu``; the
        buffer is owned by this object and never shared with callers.
    offset : ndarray, shape (0,) or (n,)
        Offset added to the linear predictor to form ``mu``.
    wts : ndarray, shape (0,) or (n,)
        Prior frequency (case) weights. A weight of k is equivalent to
        repeating the observation k times.
    y : ndarray, shape (n,)
        Observed response.

    Either or both of ``offset`` and ``wts`` may have length 0.
    """

    def __init__(
        self,
        y,
        wts: Optional[np.ndarray] = None,
        offset: Optional[np.ndarray] = None,
        mu: Optional[np.ndarray] = None,
    ):
        self.y = check_vector(y, 'y')
        n = len(self.y)

        self.mu = np.zeros(n) if mu is None else check_vector(mu, 'mu')
        if len(self.mu) != n:
            raise LengthMismatchError(
                f"mismatched lengths of mu ({len(self.mu)}) and y ({n})",
                name='mu', actual=len(self.mu), expected=(n,)
            )

        self.offset = np.empty(0) if offset is None else check_vector(offset, 'offset')
        check_optional_length(self.offset, n, 'offset')

        self.wts = np.empty(0) if wts is None else check_vector(wts, 'wts')
        check_optional_length(self.wts, n, 'wts')
        if np.any(self.wts < 0):
            raise ValidationError("wts must be non-negative")

        for arr in (self.y, self.offset, self.wts):
            arr.flags.writeable = False

    @property
    def weighted(self) -> bool:
        return len(self.wts) > 0

    def update_mu(self, linpr) -> float:
        """
        Set ``mu`` from a linear predictor and return the new deviance.

        ``mu = linpr`` when there is no offset, ``linpr + offset`` otherwise.
        Values are copied into the existing ``mu`` buffer.
        """
        linpr = np.asarray(linpr, dtype=np.float64).ravel()
        n = len(self.y)
        if len(linpr) != n:
            raise LengthMismatchError(
                f"length(linpr) is {len(linpr)}, should be {n}",
                name='linpr', actual=len(linpr), expected=(n,)
            )
        if len(self.offset) == 0:
            np.copyto(self.mu, linpr)
        else:
            np.add(linpr, self.offset, out=self.mu)
        return self.deviance()

    def deviance(self) -> float:
        """Residual sum of squares, weighted by ``wts`` when present."""
        r2 = (self.y - self.mu) ** 2
        if self.weighted:
            r2 *= self.wts
        return np.float64(np.sum(r2))

    def nulldeviance(self) -> float:
        """Deviance of the intercept-only model (total sum of squares)."""
        if self.weighted:
            # NaN when the weights sum to zero
            with np.errstate(divide='ignore', invalid='ignore'):
                m = np.sum(self.wts * self.y) / np.sum(self.wts)
            return np.float64(np.sum(self.wts * (self.y - m) ** 2))
        m = np.mean(self.y)
        return np.float64(np.sum((self.y - m) ** 2))

    def nobs(self) -> float:
        """Number of observations: ``len(y)``, or the sum of case weights."""
        return np.float64(np.sum(self.wts)) if self.weighted else np.float64(len(self.y))

    def _gaussian_loglik(self, dev: float) -> float:
        n = self.nobs()
        # +Inf for a perfect fit
        with np.errstate(divide='ignore', invalid='ignore'):
            return -n / 2 * (np.log(2 * np.pi * dev / n) + 1)

    def loglikelihood(self) -> float:
        """Gaussian log-likelihood at the MLE of the variance, deviance/n."""
        return self._gaussian_loglik(self.deviance())

    def nullloglikelihood(self) -> float:
        return self._gaussian_loglik(self.nulldeviance())

    def residuals(self) -> np.ndarray:
        return self.y - self.mu

    def __len__(self):
        return len(self.y)
