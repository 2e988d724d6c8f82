"""
Binomial path-counting weights and layer moments.

P(k, j) is the probability of exactly j up moves in k independent steps
with up probability p. Two ways to get it:

- binomial_pmf: a single layer from scipy.stats.binom (no factorials)
- binomial_layers: every layer 0..n by the recurrence
      P(k, j) = p P(k-1, j-1) + (1-p) P(k-1, j),   P(0, 0) = 1
  which only multiplies and adds numbers in [0, 1], so nothing overflows
  for thousands of steps; far tails underflow quietly to zero.

Moments are normalized by the layer's total mass.
"""

from typing import Callable, List, Optional
import numpy as np
from scipy.stats import binom

from ..errors import InvalidParameterError


def _check_probability(p: float) -> None:
    if not 0.0 < p < 1.0:
        raise InvalidParameterError(f"Up probability must be in (0, 1), got {p}")


def binomial_pmf(k: int, p: float = 0.5) -> np.ndarray:
    """
    Probabilities of 0..k up moves after k steps.

    Args:
        k: Number of steps (>= 0)
        p: Up move probability

    Returns:
        Array of length k+1
    """
    if k < 0:
        raise InvalidParameterError(f"Step count must be non-negative, got {k}")
    _check_probability(p)
    return binom.pmf(np.arange(k + 1), k, p)


def binomial_layers(n_steps: int, p: float = 0.5) -> List[np.ndarray]:
    """
    Node probabilities for every layer of an n-step recombining tree.

    Args:
        n_steps: Number of steps (>= 0)
        p: Up move probability, constant across steps

    Returns:
        List of n_steps+1 arrays, layer k of length k+1
    """
    if n_steps < 0:
        raise InvalidParameterError(f"Step count must be non-negative, got {n_steps}")
    _check_probability(p)

    q = 1.0 - p
    layers = [np.ones(1)]
    prev = layers[0]
    for k in range(1, n_steps + 1):
        probs = np.empty(k + 1)
        probs[0] = q * prev[0]
        probs[k] = p * prev[k - 1]
        probs[1:k] = p * prev[:-1] + q * prev[1:]
        layers.append(probs)
        prev = probs
    return layers


def layer_expectation(
    values: np.ndarray,
    probabilities: np.ndarray,
    fn: Optional[Callable[[np.ndarray], np.ndarray]] = None,
) -> float:
    """
    Probability-weighted mean of values (or of fn(values)) over one layer.
    """
    values = np.asarray(values, dtype=np.float64)
    probabilities = np.asarray(probabilities, dtype=np.float64)
    if values.shape != probabilities.shape:
        raise ValueError("Values and probabilities must have same shape")

    if fn is not None:
        values = fn(values)
    mass = probabilities.sum()
    if mass <= 0:
        raise ValueError("Layer probabilities sum to zero")
    return float(np.dot(probabilities, values) / mass)


def layer_mean(values: np.ndarray, probabilities: np.ndarray) -> float:
    return layer_expectation(values, probabilities)


def layer_variance(values: np.ndarray, probabilities: np.ndarray) -> float:
    """Central second moment, computed around the mean."""
    mean = layer_mean(values, probabilities)
    return layer_expectation(values, probabilities, lambda v: (v - mean) ** 2)


def layer_std(values: np.ndarray, probabilities: np.ndarray) -> float:
    return float(np.sqrt(layer_variance(values, probabilities)))


__all__ = [
    "binomial_pmf",
    "binomial_layers",
    "layer_expectation",
    "layer_mean",
    "layer_variance",
    "layer_std",
]
