"""
Tests for NPV, IRR and payback helpers.
"""

import math

import numpy as np
import pytest

from pv_feasibility.core.economics import (
    discount_factors,
    internal_rate_of_return,
    net_present_value,
    payback_period,
)
from pv_feasibility.errors import NoConvergenceError


class TestNetPresentValue:
    """Test NPV of year-indexed cash flows."""

    def test_zero_rate_is_plain_sum(self):
        assert net_present_value(0.0, [-100, 50, 60]) == pytest.approx(10.0)

    def test_single_period(self):
        assert net_present_value(0.10, [-100, 110]) == pytest.approx(0.0, abs=1e-9)

    def test_discount_factors(self):
        np.testing.assert_array_almost_equal(discount_factors(0.08, 3), [1 / 1.08, 1 / 1.08 ** 2, 1 / 1.08 ** 3])


class TestInternalRateOfReturn:
    """Test bisection IRR."""

    def test_single_period(self):
        assert internal_rate_of_return([-100, 110]) == pytest.approx(0.10, abs=1e-6)

    def test_annuity(self):
        """10-year annuity of 200 on 1000 invested returns about 15.1 %."""
        flows = [-1000] + [200] * 10
        irr = internal_rate_of_return(flows)
        assert irr == pytest.approx(0.1510, abs=1e-4)
        assert net_present_value(irr, flows) == pytest.approx(0.0, abs=1e-4)

    def test_negative_irr(self):
        irr = internal_rate_of_return([-1000] + [90] * 10)
        assert irr < 0
        assert net_present_value(irr, [-1000] + [90] * 10) == pytest.approx(0.0, abs=1e-4)

    def test_no_sign_change(self):
        """All-positive or all-negative series have no IRR."""
        with pytest.raises(NoConvergenceError):
            internal_rate_of_return([100, 50, 50])
        with pytest.raises(NoConvergenceError):
            internal_rate_of_return([-100, -10, -10])

    def test_root_outside_bounds(self):
        """A 300 % return is not bracketed by the default bounds."""
        with pytest.raises(NoConvergenceError):
            internal_rate_of_return([-100, 400])

    def test_custom_bounds(self):
        assert internal_rate_of_return([-100, 400], upper_bound=5.0) == pytest.approx(3.0, abs=1e-6)

    def test_iteration_cap(self):
        with pytest.raises(NoConvergenceError):
            internal_rate_of_return([-1000] + [200] * 10, tolerance=1e-15, max_iterations=3)


class TestPaybackPeriod:
    """Test payback with linear interpolation."""

    def test_interpolated(self):
        assert payback_period(1000, [300] * 5) == pytest.approx(3 + 100 / 300)

    def test_exact_year(self):
        assert payback_period(900, [300] * 5) == pytest.approx(3.0)

    def test_never_recovered(self):
        assert payback_period(1000, [100] * 5) == math.inf

    def test_negative_years(self):
        """Losses delay payback."""
        assert payback_period(100, [-50, 100, 100]) == pytest.approx(2.5)

    def test_no_investment(self):
        assert payback_period(0, [100]) == 0.0
