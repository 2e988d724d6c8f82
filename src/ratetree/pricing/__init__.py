"""
Pricing package - backward induction on fitted trees.
"""

from .zero_coupon import (
    price_zero_coupon_bond,
    price_cashflows,
    expected_discount_factors,
)

__all__ = [
    "price_zero_coupon_bond",
    "price_cashflows",
    "expected_discount_factors",
]
