"""
Treatment-effect estimates: naive, regression-adjusted and IPW.

Every estimator regresses the outcome on the treatment (plus controls
for the adjusted version); for a binary treatment the slope is a
difference in means, for a continuous one it is the effect of one more
unit of treatment.
"""

import numpy as np
import pandas as pd

from .utils import add_const, ols_fit, require_columns, wls_fit


def naive_effect(df, treatment, outcome):
    """
    Unadjusted slope of outcome on treatment.

    Returns
    -------
    dict with keys: estimate, se
    """
    require_columns(df, [treatment, outcome])
    X = add_const(df[treatment].to_numpy(dtype=float))
    b, se, _, _ = ols_fit(X, df[outcome].to_numpy(dtype=float))
    return dict(estimate=b[1], se=se[1])


def regression_adjusted_effect(df, treatment, outcome, covariates):
    """
    Slope on treatment from outcome ~ treatment + covariates.

    Returns
    -------
    dict with keys: estimate, se
    """
    require_columns(df, [treatment, outcome, *covariates])
    X = add_const(df[[treatment, *covariates]].to_numpy(dtype=float))
    b, se, _, _ = ols_fit(X, df[outcome].to_numpy(dtype=float))
    return dict(estimate=b[1], se=se[1])


def weighted_effect(df, treatment, outcome, weights="ipw"):
    """
    IPW estimate: weighted regression of outcome on treatment.

    Parameters
    ----------
    df : pandas.DataFrame
    treatment, outcome : str
    weights : str
        Column holding the weights (created by an earlier weighting step).

    Returns
    -------
    dict with keys:
        estimate     : weighted slope (the ATE for a 0/1 treatment)
        se           : robust standard error
        ci_lo, ci_hi : normal 95% confidence interval
    """
    require_columns(df, [treatment, outcome, weights])
    X = add_const(df[treatment].to_numpy(dtype=float))
    fit = wls_fit(X, df[outcome].to_numpy(dtype=float),
                  df[weights].to_numpy(dtype=float))
    est, se = fit["beta"][1], fit["se_robust"][1]
    return dict(estimate=est, se=se, ci_lo=est - 1.96 * se, ci_hi=est + 1.96 * se)


def balance_table(df, treatment, covariates, weights=None):
    """
    Standardized mean differences between treated and untreated groups.

    SMD = (mean_treated - mean_control) / sqrt((var_treated + var_control) / 2)

    The denominator always uses the unweighted variances so that the
    weighted and unweighted columns are on the same scale.

    Parameters
    ----------
    df : pandas.DataFrame
    treatment : str
        Binary treatment column.
    covariates : list of str
    weights : str or None
        Weight column; adds a `smd_weighted` column when given.

    Returns
    -------
    pandas.DataFrame indexed by covariate with column `smd`
    (and `smd_weighted`).
    """
    require_columns(df, [treatment, *covariates] + ([weights] if weights else []))
    treated = df[treatment].to_numpy() == 1

    rows = []
    for cov in covariates:
        x = df[cov].to_numpy(dtype=float)
        xt, xc = x[treated], x[~treated]
        pooled_sd = np.sqrt((xt.var() + xc.var()) / 2)
        row = dict(covariate=cov, smd=(xt.mean() - xc.mean()) / pooled_sd)
        if weights:
            w = df[weights].to_numpy(dtype=float)
            mt = np.average(xt, weights=w[treated])
            mc = np.average(xc, weights=w[~treated])
            row["smd_weighted"] = (mt - mc) / pooled_sd
        rows.append(row)

    return pd.DataFrame(rows).set_index("covariate")
