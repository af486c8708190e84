"""
Linear regression with R-style interface and output.

This is the user-facing API: ``fit``/``lm`` build a LinearModel from a
design matrix and a response, and the model exposes the usual inference
(standard errors, coefficient table, intervals, likelihood, R²).
"""

import logging
import warnings
from typing import Optional, List

import numpy as np
import pandas as pd
from scipy import stats
from scipy.linalg import solve_triangular

from ._core.predictor import DensePredChol
from ._core.protocols import ModResp, LinPred
from ._core.response import LmResp
from ._utils import check_array, check_level, format_level
from .exceptions import (
    LengthMismatchError,
    InvalidArgumentError,
    UnsupportedOperationError,
)

logger = logging.getLogger(__name__)

INTERVAL_TYPES = ('confidence', 'prediction')


class LinearModel:
    """
    A linear model: a response (``rr``) combined with a linear predictor (``pp``).

    The model owns both components exclusively. ``fit()`` is the only
    mutating operation; every statistic is recomputed from the current
    state on each call.

    Examples
    --------
    >>> import numpy as np
    >>> from pylm import lm
    >>>
    >>> X = np.column_stack([np.ones(4), [1, 2, 3, 4]])
    >>> model = lm(X, [2, 4, 5, 4])
    >>> model.coef                       # intercept 2.0, slope 0.7
    >>> model.coeftable()                # estimates, SE, t, p, CI
    >>> model.predict(X, interval='prediction')
    >>> model.summary()                  # Prints table like R
    """

    def __init__(self, rr: ModResp, pp: LinPred, coefnames: Optional[List[str]] = None):
        if len(rr.y) != pp.X.shape[0]:
            raise LengthMismatchError(
                f"X has {pp.X.shape[0]} rows but y has length {len(rr.y)}",
                name='X', actual=pp.X.shape[0], expected=(len(rr.y),)
            )
        p = pp.X.shape[1]
        if coefnames is None:
            coefnames = [f'x{i}' for i in range(1, p + 1)]
        elif len(coefnames) != p:
            raise LengthMismatchError(
                f"got {len(coefnames)} coefficient names for {p} columns",
                name='coefnames', actual=len(coefnames), expected=(p,)
            )
        self.rr = rr
        self.pp = pp
        self.coefnames = list(coefnames)

    def fit(self) -> 'LinearModel':
        """
        Solve the normal equations and update the fitted values in place.

        Returns the same model instance.
        """
        r = self.rr.y
        if len(self.rr.offset) > 0:
            r = r - self.rr.offset

        if len(self.rr.wts) == 0:
            self.pp.delbeta(r)
        else:
            self.pp.delbeta(r, self.rr.wts)
        self.pp.installbeta()
        dev = self.rr.update_mu(self.pp.linpred(0.0))

        logger.debug(
            "fitted linear model: n=%d, p=%d, rank=%d, deviance=%.6g",
            len(self.rr.y), self.pp.X.shape[1], self.pp.rank, dev
        )
        return self

    # === Basic accessors ===

    @property
    def coef(self) -> np.ndarray:
        """Coefficient estimates (aliased coefficients are 0)."""
        return self.pp.beta0.copy()

    @property
    def fitted(self) -> np.ndarray:
        return self.rr.mu.copy()

    @property
    def residuals(self) -> np.ndarray:
        return self.rr.y - self.rr.mu

    def nobs(self) -> float:
        """Number of observations (sum of case weights for weighted fits)."""
        return self.rr.nobs()

    def cholesky(self):
        """Cholesky factor of X'WX from the linear predictor."""
        return self.pp.cholesky()

    # === Degrees of freedom ===

    def dof(self) -> int:
        """Number of estimated parameters: coefficients plus the dispersion."""
        if self.pp.supports_rank_reporting:
            return self.pp.rank + 1
        return len(self.pp.beta0) + 1

    def dof_residual(self) -> float:
        return self.nobs() - (self.dof() - 1)

    # === Deviance and likelihood ===

    def deviance(self) -> float:
        """For linear models the deviance is the residual sum of squares (RSS)."""
        return self.rr.deviance()

    def nulldeviance(self) -> float:
        """Total sum of squares: deviance of the intercept-only model."""
        return self.rr.nulldeviance()

    def loglikelihood(self) -> float:
        return self.rr.loglikelihood()

    def nullloglikelihood(self) -> float:
        return self.rr.nullloglikelihood()

    def aic(self) -> float:
        return -2 * self.loglikelihood() + 2 * self.dof()

    def aicc(self) -> float:
        k = self.dof()
        n = self.nobs()
        with np.errstate(divide='ignore', invalid='ignore'):
            return self.aic() + 2 * k * (k + 1) / np.float64(n - k - 1)

    def bic(self) -> float:
        return -2 * self.loglikelihood() + self.dof() * np.log(self.nobs())

    # === Goodness of fit ===

    def r2(self) -> float:
        """NaN when the response is constant (zero null deviance)."""
        with np.errstate(divide='ignore', invalid='ignore'):
            return 1 - np.float64(self.deviance()) / self.nulldeviance()

    def adjr2(self) -> float:
        n = self.nobs()
        # dof() includes the dispersion parameter
        p = self.dof() - 1
        with np.errstate(divide='ignore', invalid='ignore'):
            return 1 - (1 - self.r2()) * np.float64(n - 1) / (n - p)

    def dispersion(self, sqr: bool = False) -> float:
        """
        Residual variance estimate deviance/dof_residual.

        Returns the residual standard error (its square root) unless
        ``sqr`` is True.
        """
        # NaN for a saturated fit (no residual degrees of freedom)
        with np.errstate(divide='ignore', invalid='ignore'):
            ssqr = np.float64(self.deviance()) / self.dof_residual()
        return ssqr if sqr else float(np.sqrt(ssqr))

    # === Coefficient inference ===

    def vcov(self) -> np.ndarray:
        """Variance-covariance matrix of the coefficients, σ̂² (X'WX)⁻¹."""
        return self.dispersion(sqr=True) * self.pp.invchol()

    def stderror(self) -> np.ndarray:
        """Standard errors; NaN for aliased coefficients."""
        return np.sqrt(np.diag(self.vcov()))

    def _tquantile(self, level: float) -> float:
        """Positive Student-t critical value for a two-sided interval."""
        return abs(stats.t.ppf((1 - level) / 2, self.dof_residual()))

    def coeftable(self, level: float = 0.95) -> pd.DataFrame:
        """
        Coefficient table.

        Columns: estimate, standard error, t statistic, two-sided p-value
        (F(1, dof_residual) tail of t²) and the confidence bounds at ``level``.
        """
        level = check_level(level)
        cc = self.coef
        se = self.stderror()
        with np.errstate(divide='ignore', invalid='ignore'):
            tt = cc / se
        p = stats.f.sf(tt ** 2, 1, self.dof_residual())
        ci = se * self._tquantile(level)
        levstr = format_level(level)
        return pd.DataFrame({
            'Coef.': cc,
            'Std. Error': se,
            't': tt,
            'Pr(>|t|)': p,
            f'Lower {levstr}%': cc - ci,
            f'Upper {levstr}%': cc + ci,
        }, index=self.coefnames)

    def confint(self, level: float = 0.95) -> pd.DataFrame:
        """
        Confidence intervals for coefficients.

        Parameters
        ----------
        level : float
            Coverage probability (default: 0.95)

        Returns
        -------
        DataFrame
            Confidence intervals with columns 'lower' and 'upper'
        """
        level = check_level(level)
        half = self.stderror() * self._tquantile(level)
        cc = self.coef
        return pd.DataFrame({
            'lower': cc - half,
            'upper': cc + half,
        }, index=self.coefnames)

    # === Prediction ===

    def predict(self, newx, interval: Optional[str] = None, level: float = 0.95):
        """
        Predict the response for new design rows.

        Parameters
        ----------
        newx : array, shape (m, p) or (p,)
            New design matrix with the same columns as the fit; a 1-D
            array is a single row
        interval : {None, 'confidence', 'prediction'}
            None returns only the point predictions. 'confidence' bounds
            the mean response; 'prediction' bounds a new observation.
        level : float
            Coverage probability for the interval

        Returns
        -------
        ndarray or DataFrame
            Point predictions, or a DataFrame with columns 'prediction',
            'lower' and 'upper'
        """
        # a 1-D newx is a single row
        newx = check_array(np.atleast_2d(newx), 'newx')
        p = self.pp.X.shape[1]
        if newx.shape[1] != p:
            raise LengthMismatchError(
                f"newx has {newx.shape[1]} columns, model has {p}",
                name='newx', actual=newx.shape[1], expected=(p,)
            )
        retmean = newx @ self.pp.beta0

        if interval == 'confint':
            warnings.warn(
                "interval='confint' is deprecated in favor of interval='confidence'",
                DeprecationWarning,
                stacklevel=2
            )
            interval = 'confidence'
        if interval is None:
            return retmean
        if interval not in INTERVAL_TYPES:
            raise InvalidArgumentError(
                f"only 'confidence' and 'prediction' intervals are defined, got {interval!r}"
            )
        if len(self.rr.wts) > 0:
            raise UnsupportedOperationError(
                "prediction with confidence intervals not yet implemented for weighted regression"
            )
        level = check_level(level)

        chol = self.pp.cholesky()
        R = chol.U[:chol.rank, :chol.rank]
        # rows of newx * R⁻¹, over the non-aliased columns
        Z = solve_triangular(R, newx[:, chol.active].T, trans='T', lower=False)
        residvar = self.dispersion(sqr=True)
        retvariance = np.sum(Z ** 2, axis=0) * residvar
        if interval == 'prediction':
            retvariance = retvariance + residvar

        retinterval = self._tquantile(level) * np.sqrt(retvariance)
        return pd.DataFrame({
            'prediction': retmean,
            'lower': retmean - retinterval,
            'upper': retmean + retinterval,
        })

    # === Reporting ===

    def _has_intercept(self) -> bool:
        X = self.pp.X
        return bool(np.any(np.all(X == X[0], axis=0) & (X[0] != 0)))

    def summary(self):
        """
        Print summary of regression results (like R's summary.lm).
        """
        table = self.coeftable()
        df_resid = self.dof_residual()

        print()
        print("="*80)
        print("LINEAR REGRESSION RESULTS")
        print("="*80)
        print()
        print(f"Number of observations: {self.nobs():g}")
        print(f"Degrees of freedom: {df_resid:g} (residual), {self.dof() - 1} (model)")
        if len(self.rr.wts) > 0:
            print("Case weights: yes")
        print()

        print("Residuals:")
        q = np.quantile(self.residuals, [0, 0.25, 0.5, 0.75, 1])
        for label, value in zip(("Min", "1Q", "Median", "3Q", "Max"), q):
            print(f"  {label + ':':<8}{value:>10.4f}")
        print()

        print("Coefficients:")
        print("-"*80)
        print(f"{'Variable':<20} {'Estimate':>12} {'Std. Error':>12} {'t value':>10} {'Pr(>|t|)':>12}")
        print("-"*80)
        chol = self.pp.cholesky()
        aliased = set(chol.piv[chol.rank:].tolist())
        for i, (name, row) in enumerate(table.iterrows()):
            p = row['Pr(>|t|)']
            if i in aliased:
                print(f"{name:<20} {'(aliased)':>12}")
                continue
            if np.isnan(p):
                sig = ''
            elif p < 0.001:
                sig = ' ***'
            elif p < 0.01:
                sig = ' **'
            elif p < 0.05:
                sig = ' *'
            elif p < 0.1:
                sig = ' .'
            else:
                sig = ''
            p_str = f"{p:.4f}" if np.isnan(p) or p >= 0.0001 else "<.0001"
            print(f"{name:<20} {row['Coef.']:>12.4f} {row['Std. Error']:>12.4f} "
                  f"{row['t']:>10.3f} {p_str:>12}{sig}")
        print("-"*80)
        print("Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
        print()

        print(f"Residual standard error: {self.dispersion():.4f} on {df_resid:g} degrees of freedom")
        print(f"Multiple R-squared:      {self.r2():.4f}")
        print(f"Adjusted R-squared:      {self.adjr2():.4f}")
        print(f"Log-likelihood:          {self.loglikelihood():.4f}")

        k = self.dof() - 2
        if self._has_intercept() and k > 0 and df_resid > 0:
            with np.errstate(divide='ignore', invalid='ignore'):
                f_stat = ((self.nulldeviance() - self.deviance()) / k) / self.dispersion(sqr=True)
            f_pvalue = stats.f.sf(f_stat, k, df_resid)
            if np.isnan(f_pvalue) or f_pvalue >= 2.2e-16:
                f_pval_str = f"{f_pvalue:.4e}"
            else:
                f_pval_str = "< 2.2e-16"
            print(f"F-statistic:             {f_stat:.2f} on {k} and {df_resid:g} DF, p-value: {f_pval_str}")

        print()
        print(f"Backend: {self.pp.backend.name}")
        print("="*80)
        print()

    def __repr__(self):
        return (
            f"LinearModel(n={self.nobs():g}, p={self.pp.X.shape[1]}, "
            f"rank={self.pp.rank}, R²={self.r2():.3f})"
        )


def fit(
    X,
    y,
    allow_rank_deficient: bool = False,
    weights=None,
    *,
    offset=None,
    backend=None,
    coefnames: Optional[List[str]] = None,
    tol: Optional[float] = None,
) -> LinearModel:
    """
    Fit a linear regression model by least squares.

    Parameters
    ----------
    X : array, shape (n, p)
        Design matrix. No intercept is added; include a column of ones.
    y : array, shape (n,)
        Response vector
    allow_rank_deficient : bool, default=False
        If True, use a pivoted Cholesky factor and drop aliased columns
        (their coefficients are 0 and their standard errors NaN).
        If False, a rank-deficient X raises RankDeficiencyError.
    weights : array, shape (n,), optional
        Frequency (case) weights. A weight of k is equivalent to repeating
        the observation k times: point estimates match analytic weights but
        standard errors use sum(weights) as the number of observations.
    offset : array, shape (n,), optional
        Known term added to the linear predictor
    backend : str, optional
        Computational backend: 'auto', 'cpu', 'gpu' (default from config)
    coefnames : list of str, optional
        Names for the coefficients (default x1, x2, ...)
    tol : float, optional
        Pivot tolerance for rank determination

    Returns
    -------
    LinearModel
        Fitted model

    Examples
    --------
    >>> model = fit(X, y)
    >>> model.coeftable()
    >>> model.confint(level=0.9)
    """
    rr = LmResp(y, wts=weights, offset=offset)
    pp = DensePredChol(X, pivoted=allow_rank_deficient, backend=backend, tol=tol)
    return LinearModel(rr, pp, coefnames=coefnames).fit()


def lm(X, y, allow_rank_deficient: bool = False, **kwargs) -> LinearModel:
    """
    Fit linear regression model (alias for ``fit``).

    Examples
    --------
    >>> model = lm(X, y)
    >>> model.summary()
    >>> model.predict(X_new, interval='confidence')
    """
    return fit(X, y, allow_rank_deficient, **kwargs)
