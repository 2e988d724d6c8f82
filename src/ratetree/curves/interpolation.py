"""
Pillar interpolation for discount curves.

Interpolators only see (time, value) knots; the curve decides whether the
values are zero rates or log discount factors.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple
import numpy as np
from scipy.interpolate import CubicSpline


class Interpolator(ABC):
    """Fit once on knots, then evaluate at single times."""

    times: Optional[np.ndarray] = None
    values: Optional[np.ndarray] = None

    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        if len(times) != len(values):
            raise ValueError("Times and values must have same length")
        if len(times) < 2:
            raise ValueError("Need at least 2 points for interpolation")
        order = np.argsort(times)
        self.times = np.asarray(times, dtype=np.float64)[order]
        self.values = np.asarray(values, dtype=np.float64)[order]
        self._after_fit()

    def _after_fit(self) -> None:
        pass

    @abstractmethod
    def _inside(self, t: float) -> float:
        """Value for t strictly inside (first knot, last knot)."""

    def _beyond_last(self, t: float) -> float:
        return float(self.values[-1])

    def interpolate(self, t: float) -> float:
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")
        if t <= self.times[0]:
            return float(self.values[0])
        if t >= self.times[-1]:
            return self._beyond_last(t)
        return self._inside(t)

    def __call__(self, t: float) -> float:
        return self.interpolate(t)


class LinearInterpolator(Interpolator):
    """
    Piecewise linear between knots.

    Args:
        extrapolation: "flat" holds the last value; "linear" extends the
            last segment (for log discount factors: the last forward carries on)
    """

    def __init__(self, extrapolation: str = "flat"):
        if extrapolation not in ("flat", "linear"):
            raise ValueError(f"Unknown extrapolation: {extrapolation}")
        self.extrapolation = extrapolation

    def _segment(self, t: float) -> Tuple[float, float, float, float]:
        i = int(np.searchsorted(self.times, t, side="right")) - 1
        i = max(0, min(i, len(self.times) - 2))
        return self.times[i], self.times[i + 1], self.values[i], self.values[i + 1]

    def _inside(self, t: float) -> float:
        t0, t1, v0, v1 = self._segment(t)
        return float(v0 + (t - t0) / (t1 - t0) * (v1 - v0))

    def _beyond_last(self, t: float) -> float:
        if self.extrapolation == "flat":
            return float(self.values[-1])
        return self._inside(t)


class CubicSplineInterpolator(Interpolator):
    """Natural cubic spline between knots, flat outside."""

    _spline: Optional[CubicSpline] = None

    def _after_fit(self) -> None:
        self._spline = CubicSpline(self.times, self.values, bc_type="natural")

    def _inside(self, t: float) -> float:
        return float(self._spline(t))


def create_interpolator(method: str) -> Interpolator:
    """
    Interpolator by name: "linear", "cubic_spline" or "log_linear".

    "log_linear" is linear interpolation with linear extrapolation; the
    curve feeds it log discount factors.
    """
    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return LinearInterpolator()
    elif method in ("cubic_spline", "cubic", "spline"):
        return CubicSplineInterpolator()
    elif method in ("log_linear", "loglinear"):
        return LinearInterpolator(extrapolation="linear")
    raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "create_interpolator",
]
