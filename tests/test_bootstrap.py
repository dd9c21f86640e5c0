import numpy as np
import pandas as pd
import pytest

from ipw.bootstrap import bootstrap_ate


def _mean_y(df):
    return df["y"].mean()


def test_bootstrap_mean_of_sample():
    df = pd.DataFrame(dict(y=np.random.default_rng(3).normal(5, 2, 400)))
    res = bootstrap_ate(df, _mean_y, n_boot=300, seed=1)
    assert res["n_failed"] == 0
    assert res["ci_lo"] < 5 < res["ci_hi"]
    assert res["se"] == pytest.approx(2 / np.sqrt(400), rel=0.3)


def test_bootstrap_is_reproducible():
    df = pd.DataFrame(dict(y=np.arange(50.0)))
    a = bootstrap_ate(df, _mean_y, n_boot=50, seed=9)
    b = bootstrap_ate(df, _mean_y, n_boot=50, seed=9)
    np.testing.assert_array_equal(a["boot_estimates"], b["boot_estimates"])


def test_failed_replications_are_dropped():
    df = pd.DataFrame(dict(y=np.arange(20.0)))
    calls = {"n": 0}

    def flaky(sample):
        calls["n"] += 1
        if calls["n"] % 2:
            raise ValueError("boom")
        return sample["y"].mean()

    res = bootstrap_ate(df, flaky, n_boot=10, seed=0)
    assert res["n_failed"] == 5
    assert len(res["boot_estimates"]) == 5


def test_all_failed_raises():
    df = pd.DataFrame(dict(y=np.arange(5.0)))

    def broken(sample):
        raise np.linalg.LinAlgError("singular")

    with pytest.raises(ValueError):
        bootstrap_ate(df, broken, n_boot=3)
