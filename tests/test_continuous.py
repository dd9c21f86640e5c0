import numpy as np
import pytest

from ipw.continuous import (add_continuous_weights, density_ratio_weights,
                            density_ratio_weights_manual)

COVS = ["income", "health"]


def test_manual_weights_equal_library_weights(grants):
    lib = density_ratio_weights(grants, "grant", COVS)
    manual = density_ratio_weights_manual(grants, "grant", COVS)
    np.testing.assert_allclose(manual, lib, rtol=1e-10)


def test_stabilized_weights_average_near_one(grants):
    w = density_ratio_weights(grants, "grant", COVS)
    assert np.all(w > 0)
    assert np.mean(w) == pytest.approx(1.0, abs=0.1)


def test_weights_are_one_without_confounders(grants):
    # With no covariates numerator and denominator are the same model
    w = density_ratio_weights(grants, "grant", [])
    np.testing.assert_allclose(w, 1.0)


def test_missing_treatment_column(nets):
    with pytest.raises(ValueError, match="grant"):
        add_continuous_weights(nets, "grant", COVS)
