"""
Model parameters and calibration settings.

HullWhiteParams carries the tree inputs (kappa, sigma, dt, n_steps) and
validates them on construction. CalibrationSettings controls how a tree
is fitted to a discount curve.
"""

from dataclasses import dataclass
from enum import Enum
from numbers import Integral
from typing import Tuple
import math

import numpy as np

from ..conventions import DAYS_PER_YEAR
from ..errors import InvalidParameterError


@dataclass(frozen=True)
class HullWhiteParams:
    """
    One-factor mean-reverting short-rate tree parameters.

    Attributes:
        kappa: Mean reversion speed (>= 0, 0 means pure Brownian motion)
        sigma: Short rate volatility (> 0)
        dt: Step size in years (> 0)
        n_steps: Number of time steps (>= 1)
    """
    kappa: float
    sigma: float
    dt: float
    n_steps: int

    def __post_init__(self):
        for name in ("kappa", "sigma", "dt"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be finite, got {value}")
        if self.kappa < 0:
            raise InvalidParameterError(f"kappa must be >= 0, got {self.kappa}")
        if self.sigma <= 0:
            raise InvalidParameterError(f"sigma must be > 0, got {self.sigma}")
        if self.dt <= 0:
            raise InvalidParameterError(f"dt must be > 0, got {self.dt}")
        if isinstance(self.n_steps, bool) or not isinstance(self.n_steps, Integral):
            raise InvalidParameterError(f"n_steps must be an integer, got {self.n_steps!r}")
        if self.n_steps < 1:
            raise InvalidParameterError(f"n_steps must be >= 1, got {self.n_steps}")

    @classmethod
    def from_horizon(
        cls, kappa: float, sigma: float, horizon_years: float, n_steps: int
    ) -> "HullWhiteParams":
        """Split a horizon in years into n_steps equal steps."""
        if not horizon_years > 0:
            raise InvalidParameterError(f"horizon must be > 0, got {horizon_years}")
        if n_steps < 1:
            raise InvalidParameterError(f"n_steps must be >= 1, got {n_steps}")
        return cls(kappa=kappa, sigma=sigma, dt=horizon_years / n_steps, n_steps=n_steps)

    @classmethod
    def from_horizon_days(
        cls,
        kappa: float,
        sigma: float,
        horizon_days: float,
        n_steps: int,
        days_per_year: float = DAYS_PER_YEAR,
    ) -> "HullWhiteParams":
        """Split a horizon in calendar days into n_steps equal steps."""
        return cls.from_horizon(kappa, sigma, horizon_days / days_per_year, n_steps)

    @property
    def horizon(self) -> float:
        """Total tree horizon in years."""
        return self.dt * self.n_steps

    def times(self) -> np.ndarray:
        """Layer times k*dt for k = 0..n_steps."""
        return np.arange(self.n_steps + 1) * self.dt


class FitMethod(Enum):
    """How the drift per layer is chosen when fitting to a curve."""
    STEP_EXPECTATION = "StepExpectation"
    ARROW_DEBREU = "ArrowDebreu"

    @classmethod
    def from_string(cls, s: str) -> "FitMethod":
        key = s.upper().replace("-", "_").replace(" ", "_")
        mapping = {
            "STEP_EXPECTATION": cls.STEP_EXPECTATION,
            "STEPEXPECTATION": cls.STEP_EXPECTATION,
            "EXPECTATION": cls.STEP_EXPECTATION,
            "ARROW_DEBREU": cls.ARROW_DEBREU,
            "ARROWDEBREU": cls.ARROW_DEBREU,
            "AD": cls.ARROW_DEBREU,
        }
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown fit method: {s}")


@dataclass(frozen=True)
class CalibrationSettings:
    """
    Settings for fitting a tree to a discount curve.

    Attributes:
        method: Drift fitting method
        tolerance: Maximum accepted relative repricing residual
        days_per_year: Year fraction to curve day offset conversion
        solver_xtol: Absolute drift tolerance of the root solver (BK tree)
        solver_maxiter: Iteration cap of the root solver (BK tree)
        bracket: Initial drift search interval for the root solver
    """
    method: FitMethod = FitMethod.STEP_EXPECTATION
    tolerance: float = 1e-12
    days_per_year: float = DAYS_PER_YEAR
    solver_xtol: float = 1e-14
    solver_maxiter: int = 200
    bracket: Tuple[float, float] = (-5.0, 5.0)

    def __post_init__(self):
        if not self.tolerance > 0:
            raise InvalidParameterError(f"tolerance must be > 0, got {self.tolerance}")
        if not self.days_per_year > 0:
            raise InvalidParameterError(f"days_per_year must be > 0, got {self.days_per_year}")
        if self.solver_maxiter < 1:
            raise InvalidParameterError(f"solver_maxiter must be >= 1, got {self.solver_maxiter}")
        lo, hi = self.bracket
        if not lo < hi:
            raise InvalidParameterError(f"bracket must be increasing, got {self.bracket}")

    @classmethod
    def strict(cls, method: FitMethod = FitMethod.STEP_EXPECTATION) -> "CalibrationSettings":
        """Tight residual check for exact closed-form fits."""
        return cls(method=method, tolerance=1e-14)

    @classmethod
    def relaxed(cls, method: FitMethod = FitMethod.STEP_EXPECTATION) -> "CalibrationSettings":
        """Loose residual check for very long or very volatile trees."""
        return cls(method=method, tolerance=1e-8, solver_xtol=1e-12)


__all__ = [
    "HullWhiteParams",
    "FitMethod",
    "CalibrationSettings",
]
