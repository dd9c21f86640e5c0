"""
Shared utility functions used across the weighting modules.
"""

import numpy as np


def ols_fit(X, y):
    """
    OLS estimation via the normal equations.

    Parameters
    ----------
    X : ndarray, shape (n, k)
        Design matrix (should include a constant column if an intercept is desired).
    y : ndarray, shape (n,)
        Outcome vector.

    Returns
    -------
    b : ndarray, shape (k,)
        Coefficient estimates  beta_hat = (X'X)^{-1} X'y.
    se : ndarray, shape (k,)
        Homoskedastic standard errors.
    e : ndarray, shape (n,)
        Residuals  y - X @ b.
    s2 : float
        Estimated error variance  e'e / (n - k).
    """
    n, k = X.shape
    b = np.linalg.lstsq(X, y, rcond=None)[0]
    e = y - X @ b
    s2 = (e @ e) / (n - k)
    se = np.sqrt(np.diag(s2 * np.linalg.inv(X.T @ X)))
    return b, se, e, s2


def wls_fit(X, y, w):
    """
    Weighted least squares with sandwich (HC1) standard errors.

    beta_hat = (X'WX)^{-1} X'Wy

    The robust variance treats the weights as fixed:
        V = (n/(n-k)) * (X'WX)^{-1} [sum_i w_i^2 e_i^2 x_i x_i'] (X'WX)^{-1}

    Parameters
    ----------
    X : ndarray, shape (n, k)
    y : ndarray, shape (n,)
    w : ndarray, shape (n,)
        Non-negative observation weights.

    Returns
    -------
    dict with keys:
        beta      : coefficient vector
        se_robust : HC1 sandwich standard errors
        residuals : y - X @ beta
    """
    w = np.asarray(w, dtype=float)
    if np.any(w < 0) or not np.any(w > 0):
        raise ValueError("weights must be non-negative and not all zero")

    n, k = X.shape
    XtW = X.T * w
    bread = np.linalg.inv(XtW @ X)
    b = bread @ (XtW @ y)
    e = y - X @ b
    meat = (X.T * (w * e) ** 2) @ X
    V = bread @ meat @ bread * (n / (n - k))
    return dict(beta=b, se_robust=np.sqrt(np.diag(V)), residuals=e)


def add_const(x):
    """
    Prepend a column of ones (intercept) to the design matrix.

    Parameters
    ----------
    x : ndarray
        1-d array or 2-d matrix of regressors.

    Returns
    -------
    X : ndarray, shape (n, k+1)
        Design matrix with leading ones column.
    """
    x = np.atleast_2d(x).T if x.ndim == 1 else x
    return np.column_stack([np.ones(x.shape[0]), x])


def logistic(z):
    """Logistic (sigmoid) CDF: 1 / (1 + exp(-z))."""
    return 1 / (1 + np.exp(-np.clip(z, -500, 500)))


def normal_pdf(x, mu, sigma):
    """Normal density written out: exp(-(x-mu)^2 / 2 sigma^2) / (sigma sqrt(2 pi))."""
    z = (x - mu) / sigma
    return np.exp(-0.5 * z ** 2) / (sigma * np.sqrt(2 * np.pi))


def require_columns(df, columns):
    """
    Check that every column a step needs was created by an earlier step.

    Raises
    ------
    ValueError
        If any of `columns` is missing from `df`.
    """
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"missing required column(s): {', '.join(missing)}")


def design_matrix(df, covariates):
    """Constant plus the named covariate columns, as a float ndarray."""
    require_columns(df, covariates)
    return add_const(df[list(covariates)].to_numpy(dtype=float))
