"""
Models package - short-rate trees and their calibration.

Provides:
- HullWhiteParams / CalibrationSettings / FitMethod: Inputs and settings
- build_rate_star_tree: Centered mean-reverting binomial lattice
- fit_discount_curve: Normal (Hull-White) fit of the lattice to a curve
- fit_black_karasinski: Lognormal fit of the lattice to a curve
- ou_variance, ou_std, hw_b, futures_convexity_adjustment: Closed forms
"""

from .params import HullWhiteParams, FitMethod, CalibrationSettings
from .hull_white import (
    RateStarTree,
    build_rate_star_tree,
    build_rate_star_tree_from_params,
    futures_convexity_adjustment,
    hw_b,
    ou_std,
    ou_variance,
)
from .fitting import FittedTree, fit_discount_curve, target_discount_factors
from .black_karasinski import fit_black_karasinski

__all__ = [
    "HullWhiteParams",
    "FitMethod",
    "CalibrationSettings",
    "RateStarTree",
    "build_rate_star_tree",
    "build_rate_star_tree_from_params",
    "futures_convexity_adjustment",
    "hw_b",
    "ou_std",
    "ou_variance",
    "FittedTree",
    "fit_discount_curve",
    "target_discount_factors",
    "fit_black_karasinski",
]
