"""
Unit tests for the coefficient tables and their lookups.
"""

import numpy as np
import pytest

from pv_feasibility.core.coefficients import (
    BUILDING_USAGE_COEFFICIENTS,
    CLIMATIC_COEFFICIENTS,
    OPERATING_HOURS_MATRICES,
    BuildingCategory,
    ClimateZone,
    OperatingHoursCase,
    TariffSegment,
    building_coefficient,
    climatic_coefficient,
    operating_hours_pairs,
)
from pv_feasibility.errors import ConfigurationError, ValidationError


class TestEnumParsing:
    """Test resolution of identifiers to enum members."""

    def test_parse_member(self):
        """Members resolve to themselves."""
        assert BuildingCategory.parse(BuildingCategory.HOTEL) is BuildingCategory.HOTEL

    def test_parse_name_case_insensitive(self):
        """Names resolve regardless of case."""
        assert ClimateZone.parse("north") is ClimateZone.NORTH
        assert OperatingHoursCase.parse("DAY_EVENING") is OperatingHoursCase.DAY_EVENING

    def test_parse_label(self):
        """Labels resolve to their member."""
        assert BuildingCategory.parse("Office / Administration / Bank") is BuildingCategory.OFFICE_ADMIN_BANK
        assert OperatingHoursCase.parse("24_7") is OperatingHoursCase.CONTINUOUS

    def test_unknown_identifier(self):
        """Unknown identifiers are never defaulted."""
        with pytest.raises(ConfigurationError):
            BuildingCategory.parse("WAREHOUSE")
        with pytest.raises(ConfigurationError):
            ClimateZone.parse(None)

    def test_configuration_error_is_lookup_error(self):
        """ConfigurationError can be caught as a LookupError."""
        with pytest.raises(LookupError):
            ClimateZone.parse("EAST")


class TestTariffSegmentLabels:
    """Test mapping of bill tension labels to segments."""

    @pytest.mark.parametrize("label,expected", [
        ("Basse Tension", TariffSegment.BT),
        ("Moyenne Tension", TariffSegment.MT),
        ("Haute Tension", TariffSegment.MT),
        ("low voltage", TariffSegment.BT),
    ])
    def test_known_labels(self, label, expected):
        assert TariffSegment.from_bill_label(label) is expected

    def test_unknown_label(self):
        """Unrecognised labels raise instead of defaulting to BT."""
        with pytest.raises(ValidationError):
            TariffSegment.from_bill_label("Tarif vert")
        with pytest.raises(ValidationError):
            TariffSegment.from_bill_label("")


class TestMonthlyCoefficients:
    """Test building and climatic coefficient lookups."""

    def test_office_july(self):
        """Office buildings peak in July (air conditioning)."""
        assert building_coefficient(BuildingCategory.OFFICE_ADMIN_BANK, 7) == 1.15
        assert climatic_coefficient(ClimateZone.NORTH, 7) == 1.00

    def test_lookup_by_name(self):
        assert building_coefficient("CAFE_RESTAURANT", 7) == 1.40
        assert climatic_coefficient("CENTER", 7) == 1.40

    def test_tables_are_complete(self):
        """Every category and zone has 12 monthly values."""
        assert set(BUILDING_USAGE_COEFFICIENTS) == set(BuildingCategory)
        assert set(CLIMATIC_COEFFICIENTS) == set(ClimateZone)
        for values in list(BUILDING_USAGE_COEFFICIENTS.values()) + list(CLIMATIC_COEFFICIENTS.values()):
            assert len(values) == 12
            assert all(v > 0 for v in values)

    @pytest.mark.parametrize("month", [0, 13, -1, 7.0, "7", True])
    def test_invalid_month(self, month):
        """Months outside 1..12 or non-integers are rejected."""
        with pytest.raises(ValidationError):
            building_coefficient(BuildingCategory.HOTEL, month)

    def test_numpy_integer_month(self):
        """Months read from pandas columns arrive as numpy integers."""
        assert building_coefficient(BuildingCategory.OFFICE_ADMIN_BANK, np.int64(7)) == 1.15

    def test_missing_row(self, monkeypatch):
        """A category without a table row fails explicitly."""
        monkeypatch.delitem(BUILDING_USAGE_COEFFICIENTS, BuildingCategory.SERVICE)
        with pytest.raises(ConfigurationError):
            building_coefficient(BuildingCategory.SERVICE, 1)


class TestOperatingHoursMatrices:
    """Test the alternate-tariff operating-hours matrices."""

    def test_every_case_covers_every_category(self):
        for case in OperatingHoursCase:
            assert set(OPERATING_HOURS_MATRICES[case]) == set(BuildingCategory)

    def test_office_day_pairs(self):
        pairs = operating_hours_pairs(OperatingHoursCase.DAY, BuildingCategory.OFFICE_ADMIN_BANK)
        assert len(pairs) == 5
        assert pairs[0] == (0.30, 0.92)
        assert pairs[-1] == (0.70, 0.64)

    def test_pairs_ordered_by_coverage(self):
        for rows in OPERATING_HOURS_MATRICES.values():
            for pairs in rows.values():
                coverages = [c for c, _ in pairs]
                assert coverages == sorted(coverages)

    def test_unknown_case(self):
        with pytest.raises(ConfigurationError):
            operating_hours_pairs("NIGHT", BuildingCategory.HOTEL)
