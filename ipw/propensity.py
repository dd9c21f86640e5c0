"""
Propensity scores and inverse probability weights for a binary treatment.

The propensity model is a logistic GLM fit by iteratively reweighted
least squares (Newton-Raphson on the logit log-likelihood), and the
weights follow the usual estimand-specific formulas.
"""

import logging

import numpy as np

from .utils import design_matrix, logistic, require_columns

logger = logging.getLogger(__name__)

ESTIMANDS = ("ate", "att", "atc", "ato")


def _deviance(X, y, beta):
    p = np.clip(logistic(X @ beta), 1e-12, 1 - 1e-12)
    return -2 * np.sum(y * np.log(p) + (1 - y) * np.log(1 - p))


def fit_logit(X, y, max_iter=100, tol=1e-8):
    """
    Logit MLE via iteratively reweighted least squares.

    Each iteration solves the weighted normal equations
        (X'WX) beta_new = X'W z,   z = X beta + (y - p) / (p (1 - p))
    with W = diag(p (1 - p)).

    Parameters
    ----------
    X : ndarray, shape (n, k)
        Design matrix (with constant).
    y : ndarray, shape (n,)
        Binary outcome (0/1).
    max_iter : int
        Maximum number of Newton steps.
    tol : float
        Convergence tolerance on the relative change in deviance,
        |dev - dev_old| / (|dev| + 0.1).

    Returns
    -------
    dict with keys:
        beta      : MLE coefficient vector
        se        : standard errors from the inverse Fisher information
        p_hat     : predicted probabilities
        n_iter    : iterations used
        converged : bool
    """
    y = np.asarray(y, dtype=float)
    if not np.all((y == 0) | (y == 1)):
        raise ValueError("logit outcome must be coded 0/1")

    beta = np.zeros(X.shape[1])
    dev_old = np.inf
    converged = False
    for n_iter in range(1, max_iter + 1):
        eta = X @ beta
        p = np.clip(logistic(eta), 1e-10, 1 - 1e-10)
        W = p * (1 - p)
        z = eta + (y - p) / W
        XtW = X.T * W
        beta = np.linalg.solve(XtW @ X, XtW @ z)
        dev = _deviance(X, y, beta)
        if abs(dev - dev_old) / (abs(dev) + 0.1) < tol:
            converged = True
            break
        dev_old = dev

    if not converged:
        logger.warning("logit IRLS did not converge after %d iterations", max_iter)

    p_hat = logistic(X @ beta)
    fisher = (X.T * (p_hat * (1 - p_hat))) @ X
    se = np.sqrt(np.diag(np.linalg.inv(fisher)))
    return dict(beta=beta, se=se, p_hat=p_hat, n_iter=n_iter, converged=converged)


def propensity_scores(df, treatment, covariates):
    """
    Estimated P(treatment = 1 | covariates) from a logit model.

    Returns
    -------
    ndarray, shape (n,)
    """
    require_columns(df, [treatment])
    X = design_matrix(df, covariates)
    fit = fit_logit(X, df[treatment].to_numpy())
    logger.debug("propensity model: beta=%s, %d iterations", fit["beta"], fit["n_iter"])
    return fit["p_hat"]


def ipw_weights(treatment, propensity, estimand="ate", stabilize=False):
    """
    Inverse probability weights for a binary treatment.

        ATE : T/p + (1-T)/(1-p)
        ATT : T + (1-T) p/(1-p)
        ATC : T (1-p)/p + (1-T)
        ATO : T (1-p) + (1-T) p          (overlap weights)

    Parameters
    ----------
    treatment : array-like, shape (n,)
        Binary treatment indicator.
    propensity : array-like, shape (n,)
        Propensity scores, strictly inside (0, 1).
    estimand : {"ate", "att", "atc", "ato"}
    stabilize : bool
        ATE only: multiply treated weights by P(T=1) and untreated
        weights by P(T=0), which keeps the mean weight near 1.

    Returns
    -------
    ndarray, shape (n,)
    """
    T = np.asarray(treatment, dtype=float)
    p = np.asarray(propensity, dtype=float)
    if estimand not in ESTIMANDS:
        raise ValueError(f"unknown estimand {estimand!r}; expected one of {ESTIMANDS}")
    if np.any((p <= 0) | (p >= 1)):
        raise ValueError("propensity scores must lie strictly between 0 and 1")

    if estimand == "ate":
        w = T / p + (1 - T) / (1 - p)
    elif estimand == "att":
        w = T + (1 - T) * p / (1 - p)
    elif estimand == "atc":
        w = T * (1 - p) / p + (1 - T)
    else:
        w = T * (1 - p) + (1 - T) * p

    if stabilize:
        if estimand != "ate":
            raise ValueError("stabilized weights are only defined here for the ATE")
        share = T.mean()
        w = w * np.where(T == 1, share, 1 - share)
    return w


def truncate_weights(w, lower=0.01, upper=0.99):
    """
    Winsorize weights at the given quantiles.

    Parameters
    ----------
    w : ndarray
    lower, upper : float
        Quantiles in [0, 1] with lower <= upper.
    """
    if not 0 <= lower <= upper <= 1:
        raise ValueError(f"need 0 <= lower <= upper <= 1, got {lower}, {upper}")
    lo, hi = np.quantile(w, [lower, upper])
    return np.clip(w, lo, hi)


def add_binary_weights(df, treatment, covariates, estimand="ate", stabilize=False):
    """Copy of `df` with `propensity` and `ipw` columns added."""
    out = df.copy()
    out["propensity"] = propensity_scores(out, treatment, covariates)
    out["ipw"] = ipw_weights(out[treatment], out["propensity"],
                             estimand=estimand, stabilize=stabilize)
    return out
