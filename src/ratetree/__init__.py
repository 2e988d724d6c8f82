"""
RateTree: Recombining short-rate binomial trees fitted to discount curves

A small library for:
- Building a centered, mean-reverting (Hull-White) binomial state lattice
- Fitting the lattice to an external discount curve (normal or lognormal rates)
- Binomial path weights and layer moments that stay stable for thousands of steps
- Hull-White closed forms (OU variance, B(t,T), futures convexity adjustment)
- Zero-coupon pricing by backward induction on a fitted tree

Scope: single-factor models, constant parameters, uniform time steps.
"""

__version__ = "0.1.0"

from .conventions import DayCount, year_fraction
from .errors import RateTreeError, InvalidParameterError, CalibrationError
from .lattice import Lattice

# Curves
from .curves import (
    DiscountCurve,
    SupportsEvaluate,
    create_flat_curve,
    create_curve_from_zero_rates,
)

# Statistics
from .stats import (
    binomial_pmf,
    binomial_layers,
    layer_expectation,
    layer_mean,
    layer_std,
    layer_variance,
)

# Models
from .models import (
    HullWhiteParams,
    FitMethod,
    CalibrationSettings,
    RateStarTree,
    build_rate_star_tree,
    build_rate_star_tree_from_params,
    FittedTree,
    fit_discount_curve,
    fit_black_karasinski,
    futures_convexity_adjustment,
    hw_b,
    ou_std,
    ou_variance,
)

# Pricing
from .pricing import price_zero_coupon_bond, price_cashflows, expected_discount_factors

__all__ = [
    # Version
    "__version__",
    # Conventions
    "DayCount",
    "year_fraction",
    # Errors
    "RateTreeError",
    "InvalidParameterError",
    "CalibrationError",
    # Lattice
    "Lattice",
    # Curves
    "DiscountCurve",
    "SupportsEvaluate",
    "create_flat_curve",
    "create_curve_from_zero_rates",
    # Statistics
    "binomial_pmf",
    "binomial_layers",
    "layer_expectation",
    "layer_mean",
    "layer_std",
    "layer_variance",
    # Models
    "HullWhiteParams",
    "FitMethod",
    "CalibrationSettings",
    "RateStarTree",
    "build_rate_star_tree",
    "build_rate_star_tree_from_params",
    "FittedTree",
    "fit_discount_curve",
    "fit_black_karasinski",
    "futures_convexity_adjustment",
    "hw_b",
    "ou_std",
    "ou_variance",
    # Pricing
    "price_zero_coupon_bond",
    "price_cashflows",
    "expected_discount_factors",
]
