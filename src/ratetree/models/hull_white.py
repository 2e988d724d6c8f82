"""
Hull-White (Ornstein-Uhlenbeck) rate-star tree and closed-form analytics.

The rate-star process is the centered state variable of the one-factor
Hull-White model,

    dx = -kappa x dt + sigma dW,   x(0) = 0,

whose marginal at time t is normal with mean 0 and variance

    V(t) = sigma^2 (1 - exp(-2 kappa t)) / (2 kappa)    (sigma^2 t if kappa = 0).

The tree is a recombining binomial lattice with up probability 1/2 on
every branch. Layer k holds k+1 symmetric nodes

    x(k, j) = (2j - k) h_k,   j = 0..k,

and the spacing h_k = sqrt(V(k dt) / k) makes the binomial(k, 1/2)
mean and variance of layer k equal 0 and V(k dt) exactly. Mean reversion
enters only through h_k, so the lattice stays recombining with k+1 nodes.
"""

from dataclasses import dataclass
import logging

import numpy as np
import pandas as pd

from ..errors import InvalidParameterError
from ..lattice import Lattice
from ..stats.binomial import binomial_layers, layer_mean, layer_std
from .params import HullWhiteParams

logger = logging.getLogger(__name__)


def hw_b(kappa: float, t: float, T: float) -> float:
    """
    Hull-White bond factor B(t,T) = (1 - exp(-kappa (T-t))) / kappa.

    Reduces to T - t when kappa is 0.
    """
    tau = T - t
    if kappa == 0:
        return float(tau)
    return float(-np.expm1(-kappa * tau) / kappa)


def ou_variance(kappa: float, sigma: float, t: float) -> float:
    """
    Variance of the centered OU state at time t.

    Uses expm1 so small kappa * t does not cancel; kappa = 0 gives sigma^2 t.
    """
    if kappa < 0:
        raise InvalidParameterError(f"kappa must be >= 0, got {kappa}")
    if t < 0:
        raise InvalidParameterError(f"t must be >= 0, got {t}")
    if kappa == 0:
        return sigma * sigma * t
    return float(sigma * sigma * -np.expm1(-2.0 * kappa * t) / (2.0 * kappa))


def ou_std(kappa: float, sigma: float, t: float) -> float:
    """Standard deviation of the centered OU state at time t."""
    return float(np.sqrt(ou_variance(kappa, sigma, t)))


def futures_convexity_adjustment(kappa: float, sigma: float, t1: float, t2: float) -> float:
    """
    Futures rate minus forward rate for the period [t1, t2] under Hull-White.

    Both rates continuously compounded:

        B(t1,t2)/(t2-t1) * [B(t1,t2) (1 - exp(-2 kappa t1)) + 2 kappa B(0,t1)^2] * sigma^2 / (4 kappa)

    which tends to the Ho-Lee value sigma^2 t1 t2 / 2 as kappa -> 0.

    Args:
        kappa: Mean reversion speed
        sigma: Short rate volatility
        t1: Futures expiry / period start in years
        t2: Period end in years

    Returns:
        Convexity adjustment in rate units
    """
    if kappa < 0:
        raise InvalidParameterError(f"kappa must be >= 0, got {kappa}")
    if sigma < 0:
        raise InvalidParameterError(f"sigma must be >= 0, got {sigma}")
    if t1 < 0 or t2 <= t1:
        raise InvalidParameterError(f"Need 0 <= t1 < t2, got t1={t1}, t2={t2}")

    b12 = hw_b(kappa, t1, t2)
    b01 = hw_b(kappa, 0.0, t1)
    # (1 - exp(-2 kappa t1)) / (4 kappa) == B(0, t1) with speed 2 kappa, halved
    decay = hw_b(2.0 * kappa, 0.0, t1) / 2.0
    return float(b12 / (t2 - t1) * sigma * sigma * (b12 * decay + b01 * b01 / 2.0))


@dataclass(frozen=True)
class RateStarTree:
    """
    Centered mean-reverting state lattice.

    Attributes:
        params: Tree parameters
        states: State values x(k, j)
        probabilities: Binomial(k, 1/2) node probabilities P(k, j)
        spacing: Half node distance h_k per layer (h_0 = 0)
    """
    params: HullWhiteParams
    states: Lattice
    probabilities: Lattice
    spacing: np.ndarray

    @property
    def n_steps(self) -> int:
        return self.params.n_steps

    @property
    def dt(self) -> float:
        return self.params.dt

    def times(self) -> np.ndarray:
        return self.params.times()

    def step_mean(self, k: int) -> float:
        """Probability-weighted mean of layer k."""
        return layer_mean(self.states[k], self.probabilities[k])

    def step_std(self, k: int) -> float:
        """Probability-weighted standard deviation of layer k."""
        return layer_std(self.states[k], self.probabilities[k])

    def target_std(self, k: int) -> float:
        """Continuous-time OU standard deviation at layer k's time."""
        return ou_std(self.params.kappa, self.params.sigma, k * self.params.dt)

    def to_frame(self) -> pd.DataFrame:
        """
        Long-format table of the tree.

        Returns:
            DataFrame with columns [step, node, time, state, probability]
        """
        df = self.states.to_frame("state")
        df["probability"] = self.probabilities.to_frame("probability")["probability"].values
        df.insert(2, "time", df["step"].values * self.params.dt)
        return df


def build_rate_star_tree(kappa: float, sigma: float, dt: float, n_steps: int) -> RateStarTree:
    """
    Build the recombining rate-star lattice.

    Args:
        kappa: Mean reversion speed (>= 0)
        sigma: Volatility (> 0)
        dt: Step size in years (> 0)
        n_steps: Number of steps (>= 1)

    Returns:
        RateStarTree with n_steps + 1 layers
    """
    params = HullWhiteParams(kappa=kappa, sigma=sigma, dt=dt, n_steps=n_steps)
    return build_rate_star_tree_from_params(params)


def build_rate_star_tree_from_params(params: HullWhiteParams) -> RateStarTree:
    """Build the rate-star lattice from a HullWhiteParams instance."""
    n = params.n_steps
    spacing = np.zeros(n + 1)
    layers = [np.zeros(1)]
    for k in range(1, n + 1):
        variance = ou_variance(params.kappa, params.sigma, k * params.dt)
        h = np.sqrt(variance / k)
        spacing[k] = h
        layers.append((2.0 * np.arange(k + 1) - k) * h)

    spacing.setflags(write=False)
    logger.debug(
        "Built rate-star tree: n_steps=%d kappa=%g sigma=%g dt=%g terminal_std=%g",
        n, params.kappa, params.sigma, params.dt, spacing[n] * np.sqrt(n),
    )
    return RateStarTree(
        params=params,
        states=Lattice(layers),
        probabilities=Lattice(binomial_layers(n, 0.5)),
        spacing=spacing,
    )


__all__ = [
    "hw_b",
    "ou_variance",
    "ou_std",
    "futures_convexity_adjustment",
    "RateStarTree",
    "build_rate_star_tree",
    "build_rate_star_tree_from_params",
]
