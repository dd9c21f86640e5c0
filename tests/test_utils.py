import numpy as np
import pandas as pd
import pytest
from scipy import stats

from ipw.utils import add_const, normal_pdf, ols_fit, require_columns, wls_fit


def test_ols_recovers_exact_line():
    x = np.arange(10, dtype=float)
    y = 3.0 + 2.0 * x
    b, se, e, s2 = ols_fit(add_const(x), y)
    np.testing.assert_allclose(b, [3.0, 2.0], atol=1e-10)
    assert np.allclose(e, 0)


def test_wls_with_unit_weights_matches_ols():
    rng = np.random.default_rng(0)
    x = rng.normal(size=200)
    y = 1.0 + 0.5 * x + rng.normal(size=200)
    X = add_const(x)
    fit = wls_fit(X, y, np.ones(200))
    b, _, _, _ = ols_fit(X, y)
    np.testing.assert_allclose(fit["beta"], b)
    assert np.all(fit["se_robust"] > 0)


def test_wls_integer_weights_match_duplicated_rows():
    X = add_const(np.array([0.0, 1.0, 2.0, 3.0]))
    y = np.array([1.0, 2.5, 2.9, 4.2])
    w = np.array([1, 2, 1, 3])
    fit = wls_fit(X, y, w)
    b, _, _, _ = ols_fit(np.repeat(X, w, axis=0), np.repeat(y, w))
    np.testing.assert_allclose(fit["beta"], b)


@pytest.mark.parametrize("w", [np.array([1.0, -1.0, 1.0]), np.zeros(3)])
def test_wls_rejects_bad_weights(w):
    X = add_const(np.array([0.0, 1.0, 2.0]))
    with pytest.raises(ValueError):
        wls_fit(X, np.array([1.0, 2.0, 3.0]), w)


def test_normal_pdf_matches_scipy():
    x = np.linspace(-4, 4, 50)
    np.testing.assert_allclose(normal_pdf(x, 0.5, 1.7), stats.norm.pdf(x, 0.5, 1.7))


def test_require_columns_names_missing():
    df = pd.DataFrame(dict(a=[1], b=[2]))
    require_columns(df, ["a", "b"])
    with pytest.raises(ValueError, match="propensity"):
        require_columns(df, ["a", "propensity"])
