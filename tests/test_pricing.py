"""
Tests for backward-induction pricing on fitted trees.
"""

from datetime import date
import numpy as np
import pytest

from ratetree.curves import create_curve_from_zero_rates
from ratetree.errors import InvalidParameterError
from ratetree.models import (
    CalibrationSettings,
    FitMethod,
    build_rate_star_tree,
    fit_discount_curve,
)
from ratetree.pricing import (
    expected_discount_factors,
    price_cashflows,
    price_zero_coupon_bond,
)


AS_OF = date(2024, 1, 15)


@pytest.fixture
def curve():
    return create_curve_from_zero_rates(
        AS_OF,
        tenors=[0.25, 1, 2, 5],
        zero_rates=[0.03, 0.032, 0.035, 0.04],
    )


@pytest.fixture
def ad_tree(curve):
    tree = build_rate_star_tree(0.05, 0.01, 0.25, 20)
    return fit_discount_curve(
        tree, AS_OF, curve, CalibrationSettings(method=FitMethod.ARROW_DEBREU)
    )


class TestZeroCouponBond:
    """Zero-coupon bond prices."""

    def test_arrow_debreu_reprices_curve(self, ad_tree, curve):
        for m in range(1, 22):
            expected = curve.discount_factor(m * 0.25)
            assert abs(price_zero_coupon_bond(ad_tree, m) - expected) < 1e-13

    def test_step_expectation_close_to_curve(self, curve):
        """With small volatility path discounting stays near the curve."""
        tree = build_rate_star_tree(0.05, 0.001, 0.25, 20)
        fitted = fit_discount_curve(tree, AS_OF, curve)

        for m in (1, 5, 20):
            expected = curve.discount_factor(m * 0.25)
            assert abs(price_zero_coupon_bond(fitted, m) / expected - 1.0) < 1e-4

    def test_step_expectation_one_period(self, curve):
        """One period ahead the price is the mean layer-1 discount factor."""
        tree = build_rate_star_tree(0.05, 0.02, 0.25, 4)
        fitted = fit_discount_curve(tree, AS_OF, curve)

        assert abs(price_zero_coupon_bond(fitted, 1) - curve.discount_factor(0.25)) < 1e-15

    def test_zero_maturity(self, ad_tree):
        assert price_zero_coupon_bond(ad_tree, 0) == 1.0

    def test_maturity_beyond_tree(self, ad_tree):
        with pytest.raises(InvalidParameterError):
            price_zero_coupon_bond(ad_tree, 22)
        with pytest.raises(InvalidParameterError):
            price_zero_coupon_bond(ad_tree, -1)

    def test_step_expectation_maturity_limit(self, curve):
        tree = build_rate_star_tree(0.05, 0.01, 0.25, 4)
        fitted = fit_discount_curve(tree, AS_OF, curve)

        price_zero_coupon_bond(fitted, 4)
        with pytest.raises(InvalidParameterError):
            price_zero_coupon_bond(fitted, 5)


class TestCashflows:
    """Fixed cashflow valuation."""

    def test_coupon_bond(self, ad_tree, curve):
        """Annual 4% coupon bond over 5 years."""
        steps = [4, 8, 12, 16, 20]
        amounts = [4.0, 4.0, 4.0, 4.0, 104.0]

        pv = price_cashflows(ad_tree, steps, amounts)
        expected = sum(a * curve.discount_factor(s * 0.25) for s, a in zip(steps, amounts))
        assert abs(pv - expected) < 1e-10

    def test_mismatched_lengths(self, ad_tree):
        with pytest.raises(ValueError):
            price_cashflows(ad_tree, [1, 2], [1.0])

    def test_expected_discount_factors(self, curve):
        tree = build_rate_star_tree(0.05, 0.01, 0.25, 6)
        fitted = fit_discount_curve(tree, AS_OF, curve)

        means = expected_discount_factors(fitted)
        assert means.shape == (7,)
        np.testing.assert_allclose(means[1:], fitted.targets[1:], rtol=1e-14)
