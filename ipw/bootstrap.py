"""
Bootstrap inference for weighting estimators.

The robust WLS standard error treats the weights as known. Resampling
whole rows and re-running the full pipeline (propensity model, weights,
weighted regression) on each replicate also carries the uncertainty of
the estimated weights.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def bootstrap_ate(df, estimator, n_boot=500, seed=None):
    """
    Nonparametric bootstrap of a whole weighting pipeline.

    Parameters
    ----------
    df : pandas.DataFrame
        Original sample.
    estimator : callable
        Function (DataFrame) -> scalar estimate.
    n_boot : int
        Number of bootstrap replications.
    seed : int or None
        Random seed.

    Returns
    -------
    dict with keys:
        boot_estimates : array of bootstrap estimates
        se             : bootstrap standard error
        ci_lo, ci_hi   : 2.5th and 97.5th percentile CI
        mean           : mean of bootstrap distribution
        n_failed       : replications dropped because the estimator failed
    """
    if seed is not None:
        np.random.seed(seed)

    n = len(df)
    boots = np.empty(n_boot)
    for b in range(n_boot):
        idx = np.random.choice(n, n, replace=True)
        try:
            boots[b] = estimator(df.iloc[idx].reset_index(drop=True))
        except (ValueError, np.linalg.LinAlgError) as exc:
            logger.debug("bootstrap replication %d failed: %s", b, exc)
            boots[b] = np.nan

    valid = boots[~np.isnan(boots)]
    n_failed = n_boot - len(valid)
    if n_failed:
        logger.warning("%d of %d bootstrap replications failed", n_failed, n_boot)
    if len(valid) == 0:
        raise ValueError("every bootstrap replication failed")

    ci = np.percentile(valid, [2.5, 97.5])
    return dict(
        boot_estimates=valid,
        se=np.std(valid),
        ci_lo=ci[0],
        ci_hi=ci[1],
        mean=np.mean(valid),
        n_failed=n_failed,
    )
