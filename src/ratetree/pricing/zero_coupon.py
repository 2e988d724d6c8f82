"""
Backward-induction pricing on a fitted tree.

Every branch has probability 1/2, so rolling a value back one layer is

    v(k, j) = z(k, j) * (v(k+1, j) + v(k+1, j+1)) / 2

for layers that carry a discounting period, and the plain average for a
layer that does not (layer 0 of a STEP_EXPECTATION fit).
"""

from typing import Sequence
import numpy as np

from ..errors import InvalidParameterError
from ..models.fitting import FittedTree


def _check_maturity(fitted: FittedTree, maturity_step: int) -> None:
    if maturity_step < 0:
        raise InvalidParameterError(f"maturity_step must be >= 0, got {maturity_step}")
    if maturity_step > 0 and fitted.period_layer(maturity_step) > fitted.n_steps:
        raise InvalidParameterError(
            f"maturity_step {maturity_step} is beyond the tree "
            f"({fitted.n_steps} steps, {fitted.method.value} fit)"
        )


def price_zero_coupon_bond(fitted: FittedTree, maturity_step: int) -> float:
    """
    Time-0 price of a unit zero-coupon bond paying at maturity_step * dt.

    For Arrow-Debreu and Black-Karasinski fits this reproduces the curve's
    discount factor P(as_of, maturity_step * dt).

    Args:
        fitted: Fitted tree
        maturity_step: Number of periods to maturity

    Returns:
        Bond price
    """
    _check_maturity(fitted, maturity_step)
    if maturity_step == 0:
        return 1.0

    first = fitted.period_layer(1)
    last = fitted.period_layer(maturity_step)
    values = np.array(fitted.discount_factors[last])
    for k in range(last - 1, -1, -1):
        values = 0.5 * (values[:-1] + values[1:])
        if k >= first:
            values = values * fitted.discount_factors[k]
    return float(values[0])


def price_cashflows(
    fitted: FittedTree,
    steps: Sequence[int],
    amounts: Sequence[float],
) -> float:
    """
    Present value of fixed cashflows paid at the given step indices.

    Args:
        fitted: Fitted tree
        steps: Payment step per cashflow
        amounts: Cashflow amounts

    Returns:
        Sum of amount * zero-coupon price
    """
    if len(steps) != len(amounts):
        raise ValueError("Steps and amounts must have same length")
    return float(sum(
        amount * price_zero_coupon_bond(fitted, step)
        for step, amount in zip(steps, amounts)
    ))


def expected_discount_factors(fitted: FittedTree) -> np.ndarray:
    """Binomial-weighted mean node discount factor of every layer."""
    return np.array([
        fitted.step_mean_discount_factor(k) for k in range(fitted.n_steps + 1)
    ])


__all__ = [
    "price_zero_coupon_bond",
    "price_cashflows",
    "expected_discount_factors",
]
