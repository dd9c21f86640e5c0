"""
ipw -- inverse probability weighting, step by step.

Each sub-module implements one step of the weighting workflow using
numpy / scipy / pandas directly, so every number in the tutorial can be
traced back to a formula.
"""

from .utils import ols_fit, wls_fit, add_const, require_columns
from . import simulate
from . import propensity
from . import continuous
from . import effects
from . import bootstrap
