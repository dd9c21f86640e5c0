"""
Density-ratio weights for a continuous treatment.

With a continuous exposure A there is no "probability of treatment",
so the propensity score is replaced by a conditional density. The
stabilized weight for person i is

    w_i = f(A_i) / f(A_i | X_i)

where both densities come from normal linear models: an intercept-only
model in the numerator and a regression of A on the confounders in the
denominator. The scale of each normal is the residual standard error
sqrt(e'e / (n - k)) of its regression.
"""

import numpy as np
from scipy import stats

from .utils import design_matrix, normal_pdf, ols_fit, require_columns


def _normal_models(df, treatment, covariates):
    require_columns(df, [treatment])
    a = df[treatment].to_numpy(dtype=float)

    b_num, _, _, s2_num = ols_fit(np.ones((len(a), 1)), a)
    X = design_matrix(df, covariates)
    b_den, _, _, s2_den = ols_fit(X, a)

    return dict(
        a=a,
        mu_num=np.full(len(a), b_num[0]),
        sigma_num=np.sqrt(s2_num),
        mu_den=X @ b_den,
        sigma_den=np.sqrt(s2_den),
    )


def density_ratio_weights(df, treatment, covariates):
    """
    Stabilized continuous-treatment weights, densities via scipy.stats.norm.

    Parameters
    ----------
    df : pandas.DataFrame
    treatment : str
        Name of the continuous treatment column.
    covariates : list of str
        Confounders in the denominator model.

    Returns
    -------
    ndarray, shape (n,)
    """
    m = _normal_models(df, treatment, covariates)
    num = stats.norm.pdf(m["a"], loc=m["mu_num"], scale=m["sigma_num"])
    den = stats.norm.pdf(m["a"], loc=m["mu_den"], scale=m["sigma_den"])
    return num / den


def density_ratio_weights_manual(df, treatment, covariates):
    """Same weights as `density_ratio_weights`, with the normal density written out."""
    m = _normal_models(df, treatment, covariates)
    num = normal_pdf(m["a"], m["mu_num"], m["sigma_num"])
    den = normal_pdf(m["a"], m["mu_den"], m["sigma_den"])
    return num / den


def add_continuous_weights(df, treatment, covariates):
    """Copy of `df` with an `ipw` column of density-ratio weights."""
    out = df.copy()
    out["ipw"] = density_ratio_weights(out, treatment, covariates)
    return out
