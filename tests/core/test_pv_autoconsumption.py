"""
Tests for the alternate-tariff (operating hours) sizing path.
"""

import pytest

from pv_feasibility.core.coefficients import BuildingCategory, OperatingHoursCase, operating_hours_pairs
from pv_feasibility.core.pv_autoconsumption import (
    compute_autoconsumption,
    select_operating_point,
    size_for_operating_hours,
)
from pv_feasibility.errors import ConfigurationError, NoViableSizingError, ValidationError


class TestSelectOperatingPoint:
    """Test selection of the highest viable coverage rate."""

    def test_office_day(self):
        """Office, day-only: 70 % coverage exceeds the ceiling, 60 % does not."""
        pairs = operating_hours_pairs(OperatingHoursCase.DAY, BuildingCategory.OFFICE_ADMIN_BANK)
        assert select_operating_point(pairs) == (0.60, 0.71)

    def test_continuous_cafe_takes_highest(self):
        pairs = operating_hours_pairs(OperatingHoursCase.CONTINUOUS, BuildingCategory.CAFE_RESTAURANT)
        assert select_operating_point(pairs) == (0.70, 0.71)

    def test_continuous_office(self):
        pairs = operating_hours_pairs(OperatingHoursCase.CONTINUOUS, BuildingCategory.OFFICE_ADMIN_BANK)
        assert select_operating_point(pairs) == (0.60, 0.76)

    def test_surplus_at_ceiling_qualifies(self):
        """A surplus fraction of exactly 30 % is within the limit."""
        pairs = operating_hours_pairs(OperatingHoursCase.DAY, BuildingCategory.SERVICE)
        assert select_operating_point(pairs) == (0.60, 0.70)

    def test_first_occurrence_wins_ties(self):
        assert select_operating_point([(0.5, 0.90), (0.5, 0.80)]) == (0.5, 0.90)

    def test_table_order_does_not_matter_for_max(self):
        assert select_operating_point([(0.6, 0.75), (0.3, 0.95), (0.5, 0.80)]) == (0.6, 0.75)

    def test_custom_ceiling(self):
        pairs = operating_hours_pairs(OperatingHoursCase.DAY, BuildingCategory.OFFICE_ADMIN_BANK)
        assert select_operating_point(pairs, max_surplus_fraction=0.10) == (0.30, 0.92)

    def test_no_viable_pair(self):
        """Never silently exceeds the ceiling."""
        with pytest.raises(NoViableSizingError):
            select_operating_point([(0.5, 0.50), (0.6, 0.40)])


class TestComputeAutoconsumption:
    """Test one operating point evaluation."""

    def test_energy_balance(self):
        result = compute_autoconsumption(100000, 1600, 0.60, 0.71)

        assert result.theoretical_power_kwp == 37.5
        assert result.annual_pv_production_kwh == 60000.0
        assert result.self_consumed_energy_kwh == 42600.0
        assert result.grid_surplus_kwh == 17400.0
        assert result.actual_coverage_rate == 0.60
        assert result.surplus_fraction == 0.29
        assert result.surplus_within_limit is True

    def test_surplus_over_limit_flagged(self):
        result = compute_autoconsumption(100000, 1600, 0.70, 0.60)
        assert result.surplus_fraction == 0.40
        assert result.surplus_within_limit is False

    def test_zero_yield(self):
        with pytest.raises(ValidationError):
            compute_autoconsumption(100000, 0, 0.60, 0.71)

    def test_zero_consumption(self):
        with pytest.raises(ValidationError):
            compute_autoconsumption(0, 1600, 0.60, 0.71)


class TestSizeForOperatingHours:
    """Test the full alternate-tariff sizing path."""

    def test_office_day(self):
        result = size_for_operating_hours(100000, 1600, "DAY", "OFFICE_ADMIN_BANK")
        assert result.target_coverage_rate == 0.60
        assert result.self_consumption_ratio == 0.71
        assert result.theoretical_power_kwp == 37.5
        assert result.surplus_within_limit

    def test_unknown_case(self):
        with pytest.raises(ConfigurationError):
            size_for_operating_hours(100000, 1600, "NIGHT", BuildingCategory.HOTEL)

    def test_strict_ceiling_has_no_solution(self):
        with pytest.raises(NoViableSizingError):
            size_for_operating_hours(
                100000, 1600, OperatingHoursCase.DAY, BuildingCategory.SCHOOL_TRAINING,
                max_surplus_fraction=0.05,
            )

    def test_pair_at_ceiling_reported_within_limit(self):
        """A pair selected at exactly 30% surplus is never reported over the ceiling."""
        result = size_for_operating_hours(5000, 1637.3, "DAY", "SERVICE")
        assert result.self_consumption_ratio == 0.70
        assert result.surplus_fraction == 0.30
        assert result.surplus_within_limit

    @pytest.mark.parametrize("consumption", range(5000, 200001, 9750))
    def test_selected_pair_always_within_limit(self, consumption):
        result = size_for_operating_hours(consumption, 1637.3, "DAY_EVENING", "LIGHT_WORKSHOP")
        assert result.surplus_within_limit
