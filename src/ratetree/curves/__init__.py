"""
Curves package - discount curves the trees are fitted to.

Provides:
- DiscountCurve: Discount factors with interpolation, queried by time, date or day offset
- create_flat_curve / create_curve_from_zero_rates: Convenience constructors
- SupportsEvaluate: Protocol for any curve-like collaborator of the fitters
"""

from .curve import (
    CurveNode,
    DiscountCurve,
    SupportsEvaluate,
    create_curve_from_zero_rates,
    create_flat_curve,
)
from .interpolation import (
    Interpolator,
    LinearInterpolator,
    CubicSplineInterpolator,
    create_interpolator,
)

__all__ = [
    "CurveNode",
    "DiscountCurve",
    "SupportsEvaluate",
    "create_flat_curve",
    "create_curve_from_zero_rates",
    "Interpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "create_interpolator",
]
