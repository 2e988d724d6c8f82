"""
Black-Karasinski binomial tree.

Lognormal variant of the fitted tree: the rate-star state drives the log of
the short rate,

    r(k, j) = exp(alpha_k + x(k, j)),

so rates stay positive. Layer k carries the period (k dt, (k+1) dt] and
alpha_k is found by Arrow-Debreu forward induction, solving

    sum_j Q(k, j) exp(-dt exp(alpha_k + x(k, j))) = P(as_of, (k+1) dt)

with a bracketing root solver. There is no closed form, and a curve the
model cannot reach (e.g. negative forward rates) is reported as a
CalibrationError.
"""

from datetime import date
from typing import Optional, Tuple
import logging

import numpy as np
from scipy.optimize import brentq

from ..curves.curve import SupportsEvaluate
from ..errors import CalibrationError
from ..lattice import Lattice
from .fitting import FittedTree, _check_residuals, target_discount_factors
from .hull_white import RateStarTree
from .params import CalibrationSettings, FitMethod

logger = logging.getLogger(__name__)

# log-rate floor when widening the search interval downwards (r ~ 1e-22)
_LOWEST_LOG_RATE = -50.0


def _bracket(fn, lo: float, hi: float) -> Tuple[float, float]:
    """Widen [lo, hi] until fn changes sign; fn is decreasing in its argument."""
    width = hi - lo
    for _ in range(8):
        f_lo, f_hi = fn(lo), fn(hi)
        if f_lo >= 0 >= f_hi:
            return lo, hi
        if f_lo < 0:
            if lo <= _LOWEST_LOG_RATE:
                break
            lo = max(lo - width, _LOWEST_LOG_RATE)
        if f_hi > 0:
            hi = hi + width
        width *= 2
    raise ValueError("no sign change")


def fit_black_karasinski(
    tree: RateStarTree,
    as_of: date,
    curve: SupportsEvaluate,
    settings: Optional[CalibrationSettings] = None,
) -> FittedTree:
    """
    Fit a lognormal short-rate tree to a discount curve.

    Args:
        tree: Rate-star tree; its states are the centered log-rate
        as_of: Date the tree starts from
        curve: Any object with evaluate(days) -> discount factor
        settings: Root solver bracket / tolerances

    Returns:
        FittedTree with model "black_karasinski" and Arrow-Debreu state prices

    Raises:
        CalibrationError: a layer drift cannot be found or misses the curve
    """
    settings = settings or CalibrationSettings(method=FitMethod.ARROW_DEBREU)
    n, dt = tree.n_steps, tree.dt
    curve_dfs = target_discount_factors(curve, as_of, dt, n + 2, settings.days_per_year)
    targets = curve_dfs[1:] / curve_dfs[0]

    drifts = np.empty(n + 1)
    rates, dfs, state_prices = [], [], []
    residuals = np.empty(n + 1)
    q = np.ones(1)
    lo, hi = settings.bracket
    for k in range(n + 1):
        x = tree.states[k]
        target = targets[k]

        def mismatch(alpha: float) -> float:
            return float(np.dot(q, np.exp(-dt * np.exp(alpha + x))) - target)

        try:
            a, b = _bracket(mismatch, lo, hi)
            root, info = brentq(
                mismatch, a, b,
                xtol=settings.solver_xtol,
                maxiter=settings.solver_maxiter,
                full_output=True,
                disp=False,
            )
        except ValueError as exc:
            raise CalibrationError(
                f"Cannot fit Black-Karasinski tree to initial term structure at step {k}"
            ) from exc
        if not info.converged:
            raise CalibrationError(
                f"Black-Karasinski drift solve did not converge at step {k}: {info.flag}"
            )

        drifts[k] = root
        r = np.exp(root + x)
        z = np.exp(-dt * r)
        rates.append(r)
        dfs.append(z)
        state_prices.append(q)

        discounted = q * z
        residuals[k] = discounted.sum() / target - 1.0

        q_next = np.zeros(k + 2)
        q_next[:-1] += 0.5 * discounted
        q_next[1:] += 0.5 * discounted
        q = q_next

    _check_residuals(residuals, settings, "Black-Karasinski")
    logger.debug("Fitted Black-Karasinski tree: n_steps=%d", n)
    return FittedTree(
        tree=tree,
        as_of=as_of,
        method=FitMethod.ARROW_DEBREU,
        model="black_karasinski",
        drifts=drifts,
        rates=Lattice(rates),
        discount_factors=Lattice(dfs),
        targets=targets,
        residuals=residuals,
        state_prices=Lattice(state_prices),
    )


__all__ = ["fit_black_karasinski"]
