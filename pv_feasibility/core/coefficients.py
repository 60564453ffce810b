"""
Coefficient tables for consumption extrapolation and alternate-tariff sizing.

Pure data, keyed by closed enums:
- Building usage coefficients Ki(category, month)
- Climatic coefficients Kzone(zone, month)
- Operating-hours matrices: up to 5 ordered (coverage rate, self-consumption
  ratio) pairs per (operating hours case, building category)

Every lookup is total: an unmapped key raises ConfigurationError instead of
falling back to a neutral coefficient.
"""

from enum import Enum
from typing import Dict, Tuple, Union

from pv_feasibility.errors import ConfigurationError, ValidationError, require_month

MONTHS = tuple(range(1, 13))


class _ParseableEnum(Enum):
    """Enum that resolves members from themselves, their name or their label."""

    @classmethod
    def parse(cls, value: Union["_ParseableEnum", str]):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            for member in cls:
                if key == member.value or key.upper() == member.name:
                    return member
        raise ConfigurationError(f"Unknown {cls.__name__}: {value!r}")


class BuildingCategory(_ParseableEnum):
    """Commercial building categories covered by the coefficient tables."""
    CAFE_RESTAURANT = "Cafe / Restaurant"
    BEAUTY_CENTER = "Beauty centre / Spa"
    HOTEL = "Hotel"
    CLINIC_MEDICAL = "Clinic / Medical centre"
    OFFICE_ADMIN_BANK = "Office / Administration / Bank"
    LIGHT_WORKSHOP = "Light workshop / Crafts"
    HEAVY_FACTORY = "Heavy factory / Metalworking"
    TEXTILE_PACKAGING = "Textile / Packaging"
    FOOD_INDUSTRY = "Food industry"
    PLASTIC_INJECTION = "Plastics / Injection moulding"
    COLD_AGRO_INDUSTRY = "Refrigerated agro-industry"
    SCHOOL_TRAINING = "School / Training centre"
    SERVICE = "Tertiary service"


class ClimateZone(_ParseableEnum):
    NORTH = "North"
    CENTER = "Center"
    SOUTH = "South"


class OperatingHoursCase(_ParseableEnum):
    """Daily operating profile of the site (alternate-tariff sizing only)."""
    DAY = "day"
    DAY_EVENING = "day_evening"
    CONTINUOUS = "24_7"


class TariffSegment(_ParseableEnum):
    """Utility tariff segments: low voltage (BT) and medium voltage (MT)."""
    BT = "BT"
    MT = "MT"

    @classmethod
    def from_bill_label(cls, label: str) -> "TariffSegment":
        """
        Map the tension label printed on a utility bill to a segment.

        High-voltage bills are treated as MT.

        Raises:
            ValidationError: If the label names no known tension
        """
        text = (label or "").lower()
        if "basse" in text or "low" in text:
            return cls.BT
        if any(word in text for word in ("moyenne", "haute", "medium", "high")):
            return cls.MT
        raise ValidationError(f"Unrecognised tariff tension label: {label!r}")


# =============================================================================
# MONTHLY COEFFICIENTS (January .. December)
# =============================================================================

BUILDING_USAGE_COEFFICIENTS: Dict[BuildingCategory, Tuple[float, ...]] = {
    BuildingCategory.CAFE_RESTAURANT:    (0.85, 0.85, 0.90, 0.95, 1.05, 1.25, 1.40, 1.40, 1.15, 0.95, 0.85, 0.90),
    BuildingCategory.BEAUTY_CENTER:      (0.90, 0.90, 0.95, 1.00, 1.05, 1.10, 1.15, 1.10, 1.05, 1.00, 0.90, 0.95),
    BuildingCategory.HOTEL:              (0.70, 0.70, 0.80, 0.90, 1.05, 1.30, 1.50, 1.50, 1.20, 0.95, 0.75, 0.75),
    BuildingCategory.CLINIC_MEDICAL:     (1.05, 1.00, 0.95, 0.90, 0.95, 1.05, 1.15, 1.15, 1.00, 0.90, 0.95, 1.05),
    BuildingCategory.OFFICE_ADMIN_BANK:  (0.75, 0.80, 0.85, 0.90, 1.00, 1.10, 1.15, 1.05, 1.00, 0.90, 0.85, 0.80),
    BuildingCategory.LIGHT_WORKSHOP:     (0.95, 0.95, 1.00, 1.00, 1.00, 1.05, 1.05, 0.85, 1.00, 1.05, 1.05, 1.00),
    BuildingCategory.HEAVY_FACTORY:      (1.00, 1.00, 1.00, 1.00, 1.00, 1.05, 1.05, 0.80, 1.00, 1.05, 1.05, 1.00),
    BuildingCategory.TEXTILE_PACKAGING:  (1.00, 1.00, 1.05, 1.05, 1.00, 1.00, 0.95, 0.75, 1.05, 1.05, 1.05, 1.05),
    BuildingCategory.FOOD_INDUSTRY:      (0.90, 0.90, 0.95, 1.00, 1.05, 1.10, 1.15, 1.15, 1.05, 0.95, 0.90, 0.90),
    BuildingCategory.PLASTIC_INJECTION:  (0.95, 0.95, 1.00, 1.00, 1.05, 1.10, 1.10, 0.90, 1.00, 1.00, 1.00, 0.95),
    BuildingCategory.COLD_AGRO_INDUSTRY: (0.80, 0.80, 0.85, 0.95, 1.05, 1.20, 1.30, 1.30, 1.15, 0.95, 0.85, 0.80),
    BuildingCategory.SCHOOL_TRAINING:    (1.10, 1.10, 1.05, 1.00, 1.00, 0.80, 0.50, 0.50, 0.95, 1.05, 1.10, 1.15),
    BuildingCategory.SERVICE:            (0.85, 0.85, 0.90, 0.95, 1.00, 1.10, 1.20, 1.15, 1.05, 0.95, 0.90, 0.90),
}

CLIMATIC_COEFFICIENTS: Dict[ClimateZone, Tuple[float, ...]] = {
    ClimateZone.NORTH:  (1.05, 1.00, 0.95, 0.90, 0.95, 1.00, 1.00, 1.05, 1.00, 0.95, 0.95, 1.05),
    ClimateZone.CENTER: (1.00, 0.95, 0.95, 0.95, 1.05, 1.25, 1.40, 1.40, 1.20, 1.00, 0.95, 1.00),
    ClimateZone.SOUTH:  (0.95, 0.95, 1.00, 1.05, 1.20, 1.40, 1.55, 1.55, 1.30, 1.05, 0.95, 0.95),
}


# =============================================================================
# OPERATING-HOURS MATRICES: ordered (coverage rate, self-consumption ratio)
# =============================================================================

OperatingPoint = Tuple[float, float]

_B = BuildingCategory

OPERATING_HOURS_MATRICES: Dict[OperatingHoursCase, Dict[BuildingCategory, Tuple[OperatingPoint, ...]]] = {
    OperatingHoursCase.DAY: {
        _B.CAFE_RESTAURANT:    ((0.30, 0.90), (0.40, 0.83), (0.50, 0.76), (0.60, 0.68), (0.70, 0.61)),
        _B.BEAUTY_CENTER:      ((0.30, 0.91), (0.40, 0.84), (0.50, 0.77), (0.60, 0.69), (0.70, 0.62)),
        _B.HOTEL:              ((0.30, 0.86), (0.40, 0.79), (0.50, 0.72), (0.60, 0.65), (0.70, 0.58)),
        _B.CLINIC_MEDICAL:     ((0.30, 0.93), (0.40, 0.87), (0.50, 0.80), (0.60, 0.73), (0.70, 0.66)),
        _B.OFFICE_ADMIN_BANK:  ((0.30, 0.92), (0.40, 0.85), (0.50, 0.78), (0.60, 0.71), (0.70, 0.64)),
        _B.LIGHT_WORKSHOP:     ((0.30, 0.92), (0.40, 0.86), (0.50, 0.79), (0.60, 0.72), (0.70, 0.65)),
        _B.HEAVY_FACTORY:      ((0.30, 0.94), (0.40, 0.88), (0.50, 0.81), (0.60, 0.74), (0.70, 0.67)),
        _B.TEXTILE_PACKAGING:  ((0.30, 0.93), (0.40, 0.87), (0.50, 0.80), (0.60, 0.73), (0.70, 0.66)),
        _B.FOOD_INDUSTRY:      ((0.30, 0.92), (0.40, 0.86), (0.50, 0.79), (0.60, 0.72), (0.70, 0.65)),
        _B.PLASTIC_INJECTION:  ((0.30, 0.94), (0.40, 0.88), (0.50, 0.82), (0.60, 0.75), (0.70, 0.68)),
        _B.COLD_AGRO_INDUSTRY: ((0.30, 0.93), (0.40, 0.87), (0.50, 0.81), (0.60, 0.74), (0.70, 0.67)),
        _B.SCHOOL_TRAINING:    ((0.30, 0.82), (0.40, 0.75), (0.50, 0.68), (0.60, 0.61), (0.70, 0.54)),
        _B.SERVICE:            ((0.30, 0.91), (0.40, 0.84), (0.50, 0.77), (0.60, 0.70), (0.70, 0.63)),
    },
    OperatingHoursCase.DAY_EVENING: {
        _B.CAFE_RESTAURANT:    ((0.30, 0.88), (0.40, 0.81), (0.50, 0.74), (0.60, 0.66), (0.70, 0.59)),
        _B.BEAUTY_CENTER:      ((0.30, 0.89), (0.40, 0.82), (0.50, 0.75), (0.60, 0.67), (0.70, 0.60)),
        _B.HOTEL:              ((0.30, 0.87), (0.40, 0.80), (0.50, 0.73), (0.60, 0.66), (0.70, 0.59)),
        _B.CLINIC_MEDICAL:     ((0.30, 0.92), (0.40, 0.86), (0.50, 0.79), (0.60, 0.72), (0.70, 0.65)),
        _B.OFFICE_ADMIN_BANK:  ((0.30, 0.90), (0.40, 0.83), (0.50, 0.76), (0.60, 0.69), (0.70, 0.62)),
        _B.LIGHT_WORKSHOP:     ((0.30, 0.91), (0.40, 0.84), (0.50, 0.77), (0.60, 0.70), (0.70, 0.63)),
        _B.HEAVY_FACTORY:      ((0.30, 0.93), (0.40, 0.87), (0.50, 0.80), (0.60, 0.73), (0.70, 0.66)),
        _B.TEXTILE_PACKAGING:  ((0.30, 0.92), (0.40, 0.85), (0.50, 0.78), (0.60, 0.71), (0.70, 0.64)),
        _B.FOOD_INDUSTRY:      ((0.30, 0.91), (0.40, 0.84), (0.50, 0.77), (0.60, 0.71), (0.70, 0.64)),
        _B.PLASTIC_INJECTION:  ((0.30, 0.93), (0.40, 0.87), (0.50, 0.80), (0.60, 0.73), (0.70, 0.66)),
        _B.COLD_AGRO_INDUSTRY: ((0.30, 0.92), (0.40, 0.86), (0.50, 0.79), (0.60, 0.72), (0.70, 0.65)),
        _B.SCHOOL_TRAINING:    ((0.30, 0.84), (0.40, 0.77), (0.50, 0.70), (0.60, 0.63), (0.70, 0.56)),
        _B.SERVICE:            ((0.30, 0.90), (0.40, 0.83), (0.50, 0.76), (0.60, 0.69), (0.70, 0.62)),
    },
    OperatingHoursCase.CONTINUOUS: {
        _B.CAFE_RESTAURANT:    ((0.30, 0.95), (0.40, 0.90), (0.50, 0.84), (0.60, 0.77), (0.70, 0.71)),
        _B.BEAUTY_CENTER:      ((0.30, 0.95), (0.40, 0.90), (0.50, 0.84), (0.60, 0.77), (0.70, 0.71)),
        _B.HOTEL:              ((0.30, 0.96), (0.40, 0.92), (0.50, 0.86), (0.60, 0.79), (0.70, 0.72)),
        _B.CLINIC_MEDICAL:     ((0.30, 0.97), (0.40, 0.93), (0.50, 0.87), (0.60, 0.81), (0.70, 0.74)),
        _B.OFFICE_ADMIN_BANK:  ((0.30, 0.95), (0.40, 0.90), (0.50, 0.83), (0.60, 0.76), (0.70, 0.69)),
        _B.LIGHT_WORKSHOP:     ((0.30, 0.96), (0.40, 0.91), (0.50, 0.85), (0.60, 0.78), (0.70, 0.71)),
        _B.HEAVY_FACTORY:      ((0.30, 0.98), (0.40, 0.95), (0.50, 0.90), (0.60, 0.84), (0.70, 0.77)),
        _B.TEXTILE_PACKAGING:  ((0.30, 0.97), (0.40, 0.93), (0.50, 0.88), (0.60, 0.82), (0.70, 0.75)),
        _B.FOOD_INDUSTRY:      ((0.30, 0.97), (0.40, 0.93), (0.50, 0.88), (0.60, 0.82), (0.70, 0.75)),
        _B.PLASTIC_INJECTION:  ((0.30, 0.98), (0.40, 0.95), (0.50, 0.90), (0.60, 0.84), (0.70, 0.77)),
        _B.COLD_AGRO_INDUSTRY: ((0.30, 0.98), (0.40, 0.94), (0.50, 0.89), (0.60, 0.83), (0.70, 0.76)),
        _B.SCHOOL_TRAINING:    ((0.30, 0.90), (0.40, 0.83), (0.50, 0.76), (0.60, 0.69), (0.70, 0.62)),
        _B.SERVICE:            ((0.30, 0.95), (0.40, 0.90), (0.50, 0.84), (0.60, 0.77), (0.70, 0.71)),
    },
}

MAX_OPERATING_POINTS = 5


def _validate_tables() -> None:
    """Check table integrity once at import."""
    for table_name, table in (
        ("building usage", BUILDING_USAGE_COEFFICIENTS),
        ("climatic", CLIMATIC_COEFFICIENTS),
    ):
        for key, values in table.items():
            if len(values) != len(MONTHS):
                raise ConfigurationError(
                    f"Invalid {table_name} coefficients for {key.name}: "
                    f"expected {len(MONTHS)} entries, received {len(values)}"
                )

    for case, rows in OPERATING_HOURS_MATRICES.items():
        for category, pairs in rows.items():
            if not 1 <= len(pairs) <= MAX_OPERATING_POINTS:
                raise ConfigurationError(
                    f"Operating-hours row {case.name}/{category.name} must hold "
                    f"1..{MAX_OPERATING_POINTS} pairs, found {len(pairs)}"
                )
            for coverage, ratio in pairs:
                if not (0 < coverage <= 1 and 0 < ratio <= 1):
                    raise ConfigurationError(
                        f"Operating-hours pair out of range in {case.name}/{category.name}: "
                        f"({coverage}, {ratio})"
                    )


_validate_tables()


def _month_index(month: int) -> int:
    return require_month(month) - 1


def building_coefficient(category: Union[BuildingCategory, str], month: int) -> float:
    """Ki(category, month)."""
    category = BuildingCategory.parse(category)
    index = _month_index(month)
    try:
        return BUILDING_USAGE_COEFFICIENTS[category][index]
    except KeyError:
        raise ConfigurationError(f"No building usage coefficients for {category.name}")


def climatic_coefficient(zone: Union[ClimateZone, str], month: int) -> float:
    """Kzone(zone, month)."""
    zone = ClimateZone.parse(zone)
    index = _month_index(month)
    try:
        return CLIMATIC_COEFFICIENTS[zone][index]
    except KeyError:
        raise ConfigurationError(f"No climatic coefficients for {zone.name}")


def operating_hours_pairs(
    case: Union[OperatingHoursCase, str],
    category: Union[BuildingCategory, str],
) -> Tuple[OperatingPoint, ...]:
    """
    Ordered (coverage rate, self-consumption ratio) pairs for a site profile.

    Raises:
        ConfigurationError: If the case or category has no matrix row
    """
    case = OperatingHoursCase.parse(case)
    category = BuildingCategory.parse(category)
    try:
        return OPERATING_HOURS_MATRICES[case][category]
    except KeyError:
        raise ConfigurationError(
            f"No operating-hours row for case={case.name}, category={category.name}"
        )
