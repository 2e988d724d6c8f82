"""
Stats package - binomial weights and layer moments.
"""

from .binomial import (
    binomial_pmf,
    binomial_layers,
    layer_expectation,
    layer_mean,
    layer_variance,
    layer_std,
)

__all__ = [
    "binomial_pmf",
    "binomial_layers",
    "layer_expectation",
    "layer_mean",
    "layer_variance",
    "layer_std",
]
