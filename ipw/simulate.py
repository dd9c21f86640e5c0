"""
Simulated populations for the malaria / mosquito-net example.

Both DGPs share the same confounding structure:

    income  -> health
    income  -> treatment,  health -> treatment
    income  -> malaria_risk,  health -> malaria_risk
    temperature -> malaria_risk
    treatment   -> malaria_risk

so a naive comparison of treated and untreated people mixes the effect
of the treatment with the effect of being richer and healthier.
"""

import numpy as np
import pandas as pd

from .utils import logistic

DEFAULT_N = 1752
DEFAULT_SEED = 1234

TRUE_NET_EFFECT = -10.0
TRUE_GRANT_EFFECT = -0.4


def _confounders(n):
    income = np.clip(np.random.normal(900, 200, n), 100, None)
    health = np.clip(40 + 0.03 * income + np.random.normal(0, 10, n), 0, 100)
    temperature = np.random.normal(24, 3, n)
    return income, health, temperature


def _risk(income, health, temperature, effect):
    n = len(income)
    risk = (80 - 0.02 * income - 0.2 * health
            + 1.0 * (temperature - 24)
            + effect
            + np.random.normal(0, 5, n))
    return np.clip(risk, 0, 100)


def simulate_nets(n=DEFAULT_N, seed=DEFAULT_SEED):
    """
    Simulate net use (binary treatment) and malaria risk.

    DGP:
        income      ~ N(900, 200), floored at 100
        health      = 40 + 0.03*income + N(0, 10), clipped to [0, 100]
        temperature ~ N(24, 3)
        P(net = 1)  = logistic(-6.5 + 0.005*income + 0.03*health)
        malaria_risk = 80 - 0.02*income - 0.2*health
                       + (temperature - 24) - 10*net + N(0, 5)

    Parameters
    ----------
    n : int
        Number of simulated individuals.
    seed : int or None
        Random seed for reproducibility.

    Returns
    -------
    pandas.DataFrame
        Columns: income, health, temperature, net, malaria_risk.
    """
    if n < 2:
        raise ValueError(f"need at least 2 individuals, got n={n}")
    if seed is not None:
        np.random.seed(seed)

    income, health, temperature = _confounders(n)
    p_net = logistic(-6.5 + 0.005 * income + 0.03 * health)
    net = (np.random.uniform(0, 1, n) < p_net).astype(int)
    malaria_risk = _risk(income, health, temperature, TRUE_NET_EFFECT * net)

    return pd.DataFrame(dict(
        income=income, health=health, temperature=temperature,
        net=net, malaria_risk=malaria_risk,
    ))


def simulate_grants(n=DEFAULT_N, seed=DEFAULT_SEED):
    """
    Simulate a continuous treatment: the size of a net-purchase grant.

    DGP (confounders as in `simulate_nets`):
        grant        = 20 + 0.01*income + 0.1*health + N(0, 10)
        malaria_risk = 80 - 0.02*income - 0.2*health
                       + (temperature - 24) - 0.4*grant + N(0, 5)

    Returns
    -------
    pandas.DataFrame
        Columns: income, health, temperature, grant, malaria_risk.
    """
    if n < 2:
        raise ValueError(f"need at least 2 individuals, got n={n}")
    if seed is not None:
        np.random.seed(seed)

    income, health, temperature = _confounders(n)
    grant = 20 + 0.01 * income + 0.1 * health + np.random.normal(0, 10, n)
    malaria_risk = _risk(income, health, temperature, TRUE_GRANT_EFFECT * grant)

    return pd.DataFrame(dict(
        income=income, health=health, temperature=temperature,
        grant=grant, malaria_risk=malaria_risk,
    ))
