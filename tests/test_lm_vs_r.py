"""
Test the linear model against reference output from R's lm().

Reference values were produced with

    m <- lm(dist ~ speed, data = cars)
    summary(m); confint(m); logLik(m); AIC(m); BIC(m); deviance(m)

using R's built-in ``cars`` data set.
"""

import pytest
import numpy as np

from pylm import lm


# Tolerance levels (reference values are printed to 7 significant digits)
STAT_TOL = 1e-5
PVAL_TOL = 1e-3

SPEED = np.array([
    4, 4, 7, 7, 8, 9, 10, 10, 10, 11, 11, 12, 12, 12, 12, 13, 13, 13, 13, 14,
    14, 14, 14, 15, 15, 15, 16, 16, 17, 17, 17, 18, 18, 18, 18, 19, 19, 19, 20, 20,
    20, 20, 20, 22, 23, 24, 24, 24, 24, 25,
], dtype=float)

DIST = np.array([
    2, 10, 4, 22, 16, 10, 18, 26, 34, 17, 28, 14, 20, 24, 28, 26, 34, 34, 46, 26,
    36, 60, 80, 20, 26, 54, 32, 40, 32, 40, 50, 42, 56, 76, 84, 36, 46, 68, 32, 48,
    52, 56, 64, 66, 54, 70, 92, 93, 120, 85,
], dtype=float)

R_CARS = {
    'coefficients': [-17.579095, 3.932409],
    'std_errors': [6.758440, 0.415513],
    't_values': [-2.601058, 9.463990],
    'p_values': [0.01231882, 1.489836e-12],
    'sigma': 15.37959,
    'df_residual': 48,
    'r_squared': 0.6510794,
    'adj_r_squared': 0.6438102,
    'confint_lower': [-31.167850, 3.096964],
    'confint_upper': [-3.990340, 4.767853],
    'loglik': -206.5784,
    'aic': 419.1569,
    'bic': 424.8929,
    'deviance': 11353.52,
    'null_deviance': 32538.98,
}


@pytest.fixture(scope='module', params=[False, True], ids=['cholesky', 'pivoted'])
def cars_model(request):
    X = np.column_stack([np.ones(len(SPEED)), SPEED])
    return lm(X, DIST, allow_rank_deficient=request.param,
              coefnames=['(Intercept)', 'speed'], backend='cpu')


def test_coefficients(cars_model):
    np.testing.assert_allclose(
        cars_model.coef, R_CARS['coefficients'], rtol=STAT_TOL,
        err_msg="Coefficients don't match R"
    )


def test_coeftable(cars_model):
    table = cars_model.coeftable()
    np.testing.assert_allclose(
        table['Std. Error'], R_CARS['std_errors'], rtol=STAT_TOL,
        err_msg="Standard errors don't match R"
    )
    np.testing.assert_allclose(
        table['t'], R_CARS['t_values'], rtol=STAT_TOL,
        err_msg="t statistics don't match R"
    )
    np.testing.assert_allclose(
        table['Pr(>|t|)'], R_CARS['p_values'], rtol=PVAL_TOL,
        err_msg="p-values don't match R"
    )


def test_confint(cars_model):
    ci = cars_model.confint()
    np.testing.assert_allclose(ci['lower'], R_CARS['confint_lower'], rtol=STAT_TOL)
    np.testing.assert_allclose(ci['upper'], R_CARS['confint_upper'], rtol=STAT_TOL)
    assert list(ci.index) == ['(Intercept)', 'speed']


def test_fit_statistics(cars_model):
    assert cars_model.dof_residual() == R_CARS['df_residual']
    assert cars_model.dispersion() == pytest.approx(R_CARS['sigma'], rel=STAT_TOL)
    assert cars_model.r2() == pytest.approx(R_CARS['r_squared'], rel=STAT_TOL)
    assert cars_model.adjr2() == pytest.approx(R_CARS['adj_r_squared'], rel=STAT_TOL)
    assert cars_model.deviance() == pytest.approx(R_CARS['deviance'], rel=STAT_TOL)
    assert cars_model.nulldeviance() == pytest.approx(R_CARS['null_deviance'], rel=STAT_TOL)


def test_likelihood(cars_model):
    assert cars_model.loglikelihood() == pytest.approx(R_CARS['loglik'], rel=STAT_TOL)
    assert cars_model.aic() == pytest.approx(R_CARS['aic'], rel=STAT_TOL)
    assert cars_model.bic() == pytest.approx(R_CARS['bic'], rel=STAT_TOL)
