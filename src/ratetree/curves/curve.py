"""
Discount curve the trees are fitted to.

A DiscountCurve is anchored at a date and holds discount factor pillars
in ACT/365 year fractions. Fitters only call evaluate(days), which returns
the discount factor a given number of calendar days after the anchor.
Discount factors above one are valid, so negative-rate curves work.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Protocol, Sequence, Tuple, Union
import numpy as np

from ..conventions import DAYS_PER_YEAR, DayCount, days_to_years, year_fraction
from .interpolation import Interpolator, create_interpolator


class SupportsEvaluate(Protocol):
    """Anything that returns a discount factor for a day offset from its anchor."""

    def evaluate(self, days: float) -> float:
        ...


@dataclass(frozen=True)
class CurveNode:
    """Discount factor pillar; zero_rate is continuously compounded (0 at t=0)."""
    time: float
    discount_factor: float
    zero_rate: float

    @classmethod
    def from_discount_factor(cls, time: float, df: float) -> "CurveNode":
        zero = 0.0 if time <= 0 else float(-np.log(df) / time)
        return cls(time=time, discount_factor=df, zero_rate=zero)


class DiscountCurve:
    """
    Pillar discount factors with interpolation.

    "log_linear" interpolates log discount factors, which gives piecewise
    flat forwards with the last forward carried past the final pillar.
    "linear" and "cubic_spline" interpolate zero rates.

    Attributes:
        anchor_date: Date of time 0
        day_count: Day count for date arguments
        interpolation_method: Interpolation method name
        days_per_year: Day offset to year fraction divisor used by evaluate()
    """

    def __init__(
        self,
        anchor_date: date,
        day_count: DayCount = DayCount.ACT_365,
        interpolation_method: str = "log_linear",
        days_per_year: float = DAYS_PER_YEAR,
    ):
        self.anchor_date = anchor_date
        self.day_count = day_count
        self.interpolation_method = interpolation_method
        self.days_per_year = days_per_year

        self._nodes: List[CurveNode] = [CurveNode(time=0.0, discount_factor=1.0, zero_rate=0.0)]
        self._interpolator: Optional[Interpolator] = None

    @property
    def _on_log_df(self) -> bool:
        return self.interpolation_method.lower().replace("-", "_") in ("log_linear", "loglinear")

    def add_node(self, time: float, discount_factor: float) -> None:
        """
        Add or replace the pillar at `time` (year fraction from the anchor).

        Raises:
            ValueError: negative time or a non-positive / non-finite discount factor
        """
        if time < 0:
            raise ValueError("Time must be non-negative")
        if not np.isfinite(discount_factor) or discount_factor <= 0:
            raise ValueError(f"Invalid discount factor: {discount_factor}")

        node = CurveNode.from_discount_factor(time, discount_factor)
        self._nodes = [n for n in self._nodes if abs(n.time - time) >= 1e-10]
        self._nodes.append(node)
        self._nodes.sort(key=lambda n: n.time)
        self._interpolator = None

    def add_node_from_date(self, d: date, discount_factor: float) -> None:
        self.add_node(year_fraction(self.anchor_date, d, self.day_count), discount_factor)

    def build(self) -> None:
        """Fit the interpolator; done lazily on the first query after a change."""
        if len(self._nodes) < 2:
            raise ValueError("Need at least 2 nodes to build curve")

        times = np.array([n.time for n in self._nodes])
        if self._on_log_df:
            values = np.log([n.discount_factor for n in self._nodes])
        else:
            values = np.array([n.zero_rate for n in self._nodes])
            # zero rate at t=0 is undefined; take the first pillar's
            values[0] = values[1]

        interpolator = create_interpolator(self.interpolation_method)
        interpolator.fit(times, values)
        self._interpolator = interpolator

    def _ensure_built(self) -> Interpolator:
        if self._interpolator is None:
            if len(self._nodes) < 2:
                raise RuntimeError("Curve not fitted - add more nodes and call build()")
            self.build()
        return self._interpolator

    def _to_time(self, t: Union[float, date]) -> float:
        if isinstance(t, date):
            return year_fraction(self.anchor_date, t, self.day_count)
        return float(t)

    def discount_factor(self, t: Union[float, date]) -> float:
        """Discount factor P(0, t) for a year fraction or date."""
        t = self._to_time(t)
        if t <= 0:
            return 1.0

        value = self._ensure_built().interpolate(t)
        if self._on_log_df:
            return float(np.exp(value))
        return float(np.exp(-value * t))

    def evaluate(self, days: float) -> float:
        """Discount factor `days` calendar days after the anchor date."""
        return self.discount_factor(days_to_years(days, self.days_per_year))

    def zero_rate(self, t: Union[float, date]) -> float:
        """Continuously compounded zero rate to t (first pillar's rate at t=0)."""
        t = self._to_time(t)
        if t <= 0:
            return self._nodes[1].zero_rate if len(self._nodes) > 1 else 0.0
        return float(-np.log(self.discount_factor(t)) / t)

    def get_nodes(self) -> List[Tuple[float, float, float]]:
        """List of (time, discount_factor, zero_rate) tuples."""
        return [(n.time, n.discount_factor, n.zero_rate) for n in self._nodes]

    def get_node_times(self) -> np.ndarray:
        return np.array([n.time for n in self._nodes])

    def __repr__(self) -> str:
        return (f"DiscountCurve(anchor={self.anchor_date}, "
                f"nodes={len(self._nodes)}, method={self.interpolation_method})")


def create_flat_curve(
    anchor_date: date,
    rate: float,
    max_tenor_years: float = 30.0,
    interpolation_method: str = "log_linear",
) -> DiscountCurve:
    """
    Flat continuously compounded curve; negative rates allowed.

    Pillars run from one day out to max_tenor_years.
    """
    curve = DiscountCurve(anchor_date, interpolation_method=interpolation_method)
    for t in [1 / 365, 1 / 12, 0.25, 0.5, 1, 2, 5, 10, 20, max_tenor_years]:
        if t <= max_tenor_years:
            curve.add_node(t, float(np.exp(-rate * t)))
    curve.build()
    return curve


def create_curve_from_zero_rates(
    anchor_date: date,
    tenors: Sequence[float],
    zero_rates: Sequence[float],
    interpolation_method: str = "log_linear",
) -> DiscountCurve:
    """Curve from continuously compounded zero rates at year-fraction pillars."""
    if len(tenors) != len(zero_rates):
        raise ValueError("Tenors and zero rates must have same length")
    curve = DiscountCurve(anchor_date, interpolation_method=interpolation_method)
    for t, zr in zip(tenors, zero_rates):
        curve.add_node(t, float(np.exp(-zr * t)))
    curve.build()
    return curve


__all__ = [
    "SupportsEvaluate",
    "CurveNode",
    "DiscountCurve",
    "create_flat_curve",
    "create_curve_from_zero_rates",
]
