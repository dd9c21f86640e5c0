"""Test configuration and fixtures for the weighting tests."""

import pytest

from ipw.simulate import simulate_grants, simulate_nets
from ipw.tutorial import run_binary, run_continuous


@pytest.fixture(scope="session")
def nets():
    return simulate_nets(n=2000, seed=1234)


@pytest.fixture(scope="session")
def grants():
    return simulate_grants(n=2000, seed=1234)


@pytest.fixture(scope="session")
def binary_results():
    return run_binary(n=1000, seed=42, n_boot=20, verbose=False)


@pytest.fixture(scope="session")
def continuous_results():
    return run_continuous(n=1000, seed=42, verbose=False)
