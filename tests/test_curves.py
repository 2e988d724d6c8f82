"""
Unit tests for curves module.
"""

from datetime import date, timedelta
import numpy as np
import pytest

from ratetree.curves import (
    CubicSplineInterpolator,
    DiscountCurve,
    LinearInterpolator,
    create_curve_from_zero_rates,
    create_flat_curve,
    create_interpolator,
)


class TestInterpolators:
    """Tests for interpolation methods."""

    @pytest.fixture
    def sample_data(self):
        """Sample interpolation data."""
        x = np.array([0.0, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0])
        y = np.array([0.050, 0.051, 0.052, 0.053, 0.050, 0.048, 0.045])
        return x, y

    def test_linear_interpolator(self, sample_data):
        """Test linear interpolation."""
        x, y = sample_data
        interp = LinearInterpolator()
        interp.fit(x, y)

        # Test exact points
        assert abs(interp(0.0) - 0.050) < 1e-10
        assert abs(interp(1.0) - 0.053) < 1e-10

        # Between 0 and 0.25
        assert abs(interp(0.125) - 0.0505) < 1e-12

    def test_linear_extrapolation_modes(self, sample_data):
        x, y = sample_data
        flat = LinearInterpolator()
        flat.fit(x, y)
        extended = LinearInterpolator(extrapolation="linear")
        extended.fit(x, y)

        assert flat(20.0) == 0.045
        assert abs(extended(20.0) - (0.045 - 0.003 / 5 * 10)) < 1e-12

    def test_cubic_spline_interpolator(self, sample_data):
        """Test cubic spline interpolation."""
        x, y = sample_data
        interp = CubicSplineInterpolator()
        interp.fit(x, y)

        # Test exact points
        assert abs(interp(0.0) - 0.050) < 1e-10
        assert abs(interp(1.0) - 0.053) < 1e-10

        # Smooth between knots, flat outside
        assert interp(1.0) != interp(1.001)
        assert interp(15.0) == 0.045

    def test_factory(self):
        assert isinstance(create_interpolator("cubic"), CubicSplineInterpolator)
        assert create_interpolator("log-linear").extrapolation == "linear"
        with pytest.raises(ValueError):
            create_interpolator("akima")

    def test_unfitted(self):
        with pytest.raises(RuntimeError):
            LinearInterpolator()(1.0)


class TestDiscountCurve:
    """Tests for DiscountCurve class."""

    @pytest.fixture
    def sample_curve(self):
        """Create sample discount curve using flat curve helper."""
        anchor_date = date(2024, 1, 15)
        return create_flat_curve(anchor_date, rate=0.05, max_tenor_years=30.0)

    def test_discount_factor_base_date(self, sample_curve):
        """Test discount factor at anchor date is 1."""
        df = sample_curve.discount_factor(sample_curve.anchor_date)
        assert abs(df - 1.0) < 1e-10

    def test_discount_factor_future(self, sample_curve):
        """Test discount factor decreases for future dates."""
        anchor = sample_curve.anchor_date
        df1 = sample_curve.discount_factor(anchor + timedelta(days=365))
        df2 = sample_curve.discount_factor(anchor + timedelta(days=730))

        assert df1 < 1.0
        assert df2 < df1

    def test_evaluate_by_days(self, sample_curve):
        """evaluate() takes calendar days after the anchor."""
        for days in (0.0, 0.5, 1.0, 10.0, 400.0):
            expected = np.exp(-0.05 * days / 365)
            assert abs(sample_curve.evaluate(days) - expected) < 1e-14

    def test_flat_curve_between_pillars(self, sample_curve):
        """Log-linear interpolation keeps a flat curve flat."""
        for t in (0.001, 0.3, 3.7, 25.0, 40.0):
            assert abs(sample_curve.zero_rate(t) - 0.05) < 1e-12

    def test_negative_rates(self):
        """Negative rates give discount factors above one."""
        curve = create_flat_curve(date(2016, 3, 8), rate=-0.0035, max_tenor_years=5.0)

        assert curve.evaluate(10.0) > 1.0
        assert abs(curve.zero_rate(2.0) + 0.0035) < 1e-14
        assert curve.get_node_times()[-1] == 5.0

    def test_zero_rate(self, sample_curve):
        """Test zero rate calculation."""
        anchor = sample_curve.anchor_date
        rate = sample_curve.zero_rate(anchor + timedelta(days=365))
        assert abs(rate - 0.05) < 1e-12

    def test_add_node_validation(self):
        curve = DiscountCurve(date(2024, 1, 15))
        with pytest.raises(ValueError):
            curve.add_node(-1.0, 0.9)
        with pytest.raises(ValueError):
            curve.add_node(1.0, 0.0)
        with pytest.raises(ValueError):
            curve.add_node(1.0, float("nan"))

    def test_needs_two_nodes(self):
        curve = DiscountCurve(date(2024, 1, 15))
        with pytest.raises(RuntimeError):
            curve.discount_factor(1.0)

    def test_replace_node(self):
        curve = DiscountCurve(date(2024, 1, 15))
        curve.add_node(1.0, 0.95)
        curve.add_node(1.0, 0.96)
        assert len(curve.get_nodes()) == 2
        assert curve.discount_factor(1.0) == pytest.approx(0.96, abs=1e-15)

    def test_rebuilds_after_new_node(self):
        """Adding a pillar after a query changes later queries."""
        curve = create_flat_curve(date(2024, 1, 15), rate=0.02, max_tenor_years=5.0)
        before = curve.discount_factor(7.0)
        curve.add_node(10.0, float(np.exp(-0.03 * 10.0)))

        assert curve.discount_factor(7.0) < before
        assert abs(curve.zero_rate(10.0) - 0.03) < 1e-14

    def test_last_forward_carried(self):
        """Log-linear curves extend the last forward past the final pillar."""
        curve = create_curve_from_zero_rates(date(2024, 1, 15), [1.0, 2.0], [0.01, 0.02])
        last_forward = 0.02 * 2.0 - 0.01 * 1.0
        expected = np.exp(-0.04 - last_forward * 1.0)
        assert abs(curve.discount_factor(3.0) - expected) < 1e-14

    def test_add_node_from_date(self):
        anchor = date(2024, 1, 15)
        curve = DiscountCurve(anchor)
        curve.add_node_from_date(anchor + timedelta(days=365), 0.97)
        assert abs(curve.get_node_times()[-1] - 1.0) < 1e-15


class TestCurveFromZeroRates:
    """Tests for the zero-rate curve helper."""

    @pytest.mark.parametrize("method", ["log_linear", "linear", "cubic_spline"])
    def test_reprices_pillars(self, method):
        tenors = [0.5, 1, 2, 5]
        rates = [0.01, 0.015, 0.02, 0.03]
        curve = create_curve_from_zero_rates(date(2024, 1, 15), tenors, rates, method)

        for t, r in zip(tenors, rates):
            assert abs(curve.zero_rate(t) - r) < 1e-12

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError):
            create_curve_from_zero_rates(date(2024, 1, 15), [1, 2], [0.01])
