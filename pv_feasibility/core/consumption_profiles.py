"""
Annual consumption profile reconstructed from a single measured month.

    Ceff(m)    = Ki(category, m) x Kzone(zone, m)
    Base       = E_measured / Ceff(reference month)
    E_est(m)   = Base x Ceff(m)            (rounded to 2 decimals)
    E_annual   = sum of E_est(m), m = 1..12
"""

from dataclasses import dataclass
from typing import Tuple, Union
import logging

import pandas as pd

from pv_feasibility.core.coefficients import (
    MONTHS,
    BuildingCategory,
    ClimateZone,
    building_coefficient,
    climatic_coefficient,
)
from pv_feasibility.errors import require_finite_non_negative, require_month

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthlyConsumption:
    """Estimated consumption of one month with the coefficients that produced it."""
    month: int
    raw_consumption_kwh: float
    climatic_coefficient: float
    building_coefficient: float
    effective_coefficient: float


@dataclass(frozen=True)
class ConsumptionProfile:
    """
    Twelve-month consumption curve for one building.

    Attributes:
        building_category: Category used for the usage coefficients
        climate_zone: Zone used for the climatic coefficients
        reference_month: Month (1-12) of the measured bill
        measured_consumption_kwh: Consumption of the reference month
        base_consumption_kwh: Normalised energy base (2 decimals)
        months: One entry per calendar month, January first
        annual_consumption_kwh: Sum of the 12 monthly estimates
    """
    building_category: BuildingCategory
    climate_zone: ClimateZone
    reference_month: int
    measured_consumption_kwh: float
    base_consumption_kwh: float
    months: Tuple[MonthlyConsumption, ...]
    annual_consumption_kwh: float

    @property
    def monthly_kwh(self) -> Tuple[float, ...]:
        """Raw consumption per month, January first."""
        return tuple(m.raw_consumption_kwh for m in self.months)

    def to_dataframe(self) -> pd.DataFrame:
        """Monthly table indexed by month number."""
        return pd.DataFrame([
            {
                'month': m.month,
                'raw_consumption_kwh': m.raw_consumption_kwh,
                'building_coefficient': m.building_coefficient,
                'climatic_coefficient': m.climatic_coefficient,
                'effective_coefficient': m.effective_coefficient,
            }
            for m in self.months
        ]).set_index('month')


def effective_coefficient(
    month: int,
    category: Union[BuildingCategory, str],
    zone: Union[ClimateZone, str],
) -> float:
    """Ki(category, month) x Kzone(zone, month)."""
    return building_coefficient(category, month) * climatic_coefficient(zone, month)


def calculate_energy_base(
    measured_consumption_kwh: float,
    reference_month: int,
    category: Union[BuildingCategory, str],
    zone: Union[ClimateZone, str],
) -> float:
    """
    Normalise the measured month to a coefficient-free energy base.

    A zero effective coefficient cannot be inverted; the measured value is
    then used as the base and a warning is logged.
    """
    coefficient = effective_coefficient(reference_month, category, zone)

    if coefficient == 0:
        logger.warning(
            f"Effective coefficient is zero for month {reference_month} "
            f"({BuildingCategory.parse(category).name}, {ClimateZone.parse(zone).name}); "
            f"using measured consumption as energy base"
        )
        return measured_consumption_kwh

    base = measured_consumption_kwh / coefficient
    logger.debug(f"Energy base: {measured_consumption_kwh} kWh / {coefficient:.4f} = {base:.2f} kWh")
    return base


def extrapolate(
    measured_consumption_kwh: float,
    reference_month: int,
    building_category: Union[BuildingCategory, str],
    climate_zone: Union[ClimateZone, str],
) -> ConsumptionProfile:
    """
    Reconstruct a 12-month consumption profile from one measured month.

    Args:
        measured_consumption_kwh: Consumption measured on the reference month [kWh]
        reference_month: Month of the measurement (1-12)
        building_category: BuildingCategory member, name or label
        climate_zone: ClimateZone member, name or label

    Returns:
        ConsumptionProfile whose reference month reproduces the measurement

    Raises:
        ValidationError: Negative/non-finite consumption or month outside 1..12
        ConfigurationError: Unknown building category or climate zone
    """
    measured = require_finite_non_negative(measured_consumption_kwh, "measured_consumption_kwh")
    reference_month = require_month(reference_month, "reference_month")

    category = BuildingCategory.parse(building_category)
    zone = ClimateZone.parse(climate_zone)

    logger.info(
        f"Extrapolating consumption: {measured} kWh in month {reference_month}, "
        f"{category.name} / {zone.name}"
    )

    base = calculate_energy_base(measured, reference_month, category, zone)

    months = []
    for month in MONTHS:
        ki = building_coefficient(category, month)
        kzone = climatic_coefficient(zone, month)
        coefficient = ki * kzone
        months.append(MonthlyConsumption(
            month=month,
            raw_consumption_kwh=round(base * coefficient, 2),
            climatic_coefficient=kzone,
            building_coefficient=ki,
            effective_coefficient=round(coefficient, 4),
        ))

    annual = round(sum(m.raw_consumption_kwh for m in months), 2)
    logger.info(f"Base consumption: {base:.2f} kWh, annual estimate: {annual:.2f} kWh")

    return ConsumptionProfile(
        building_category=category,
        climate_zone=zone,
        reference_month=reference_month,
        measured_consumption_kwh=measured,
        base_consumption_kwh=round(base, 2),
        months=tuple(months),
        annual_consumption_kwh=annual,
    )
