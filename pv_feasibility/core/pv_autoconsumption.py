"""
Alternate-tariff (MT) sizing from empirical self-consumption matrices.

For a chosen (target coverage rate, self-consumption ratio) pair:
    P_th   = E_annual x T_target / Y_spec   [kWp]
    E_PV   = P_th x Y_spec                  [kWh/year]
    E_auto = E_PV x r_auto
    E_exc  = E_PV - E_auto
    T_real = E_PV / E_annual
    %exc   = E_exc / E_PV = 1 - r_auto      must stay <= ceiling (default 30 %)
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union
import logging

from pv_feasibility.core.coefficients import (
    BuildingCategory,
    OperatingHoursCase,
    OperatingPoint,
    operating_hours_pairs,
)
from pv_feasibility.errors import (
    NoViableSizingError,
    ValidationError,
    require_finite_non_negative,
)

logger = logging.getLogger(__name__)

MAX_SURPLUS_FRACTION = 0.30


@dataclass(frozen=True)
class AutoconsumptionResult:
    """Outcome of one operating point."""
    target_coverage_rate: float
    self_consumption_ratio: float
    theoretical_power_kwp: float
    annual_pv_production_kwh: float
    self_consumed_energy_kwh: float
    grid_surplus_kwh: float
    actual_coverage_rate: float
    surplus_fraction: float
    surplus_within_limit: bool


def _surplus_fraction(self_consumption_ratio: float) -> float:
    return round(1.0 - self_consumption_ratio, 6)


def compute_autoconsumption(
    annual_consumption_kwh: float,
    annual_yield_kwh_per_kwp: float,
    target_coverage_rate: float,
    self_consumption_ratio: float,
    max_surplus_fraction: float = MAX_SURPLUS_FRACTION,
) -> AutoconsumptionResult:
    """
    Evaluate one (coverage rate, self-consumption ratio) operating point.

    Raises:
        ValidationError: Negative inputs, zero consumption or zero specific yield
    """
    annual_consumption = require_finite_non_negative(annual_consumption_kwh, "annual_consumption_kwh")
    annual_yield = require_finite_non_negative(annual_yield_kwh_per_kwp, "annual_yield_kwh_per_kwp")
    if annual_yield == 0:
        raise ValidationError("Annual specific yield is zero, cannot size for a target coverage")
    if annual_consumption == 0:
        raise ValidationError("annual_consumption_kwh must be positive to size a PV system")

    power = round(annual_consumption * target_coverage_rate / annual_yield, 2)
    production = round(power * annual_yield, 2)
    self_consumed = round(production * self_consumption_ratio, 2)
    surplus = round(production - self_consumed, 2)

    if production > 0:
        fraction = surplus / production
    else:
        fraction = 0.0

    return AutoconsumptionResult(
        target_coverage_rate=target_coverage_rate,
        self_consumption_ratio=self_consumption_ratio,
        theoretical_power_kwp=power,
        annual_pv_production_kwh=production,
        self_consumed_energy_kwh=self_consumed,
        grid_surplus_kwh=surplus,
        actual_coverage_rate=round(production / annual_consumption, 2),
        surplus_fraction=round(fraction, 2),
        surplus_within_limit=_surplus_fraction(self_consumption_ratio) <= max_surplus_fraction,
    )


def select_operating_point(
    pairs: Sequence[OperatingPoint],
    max_surplus_fraction: float = MAX_SURPLUS_FRACTION,
) -> OperatingPoint:
    """
    Pick the highest-coverage pair whose surplus fraction stays under the ceiling.

    Pairs are scanned in table order; ties keep the first occurrence.

    Raises:
        NoViableSizingError: If no pair satisfies the ceiling
    """
    best: Optional[OperatingPoint] = None
    for coverage, ratio in pairs:
        if _surplus_fraction(ratio) > max_surplus_fraction:
            continue
        if best is None or coverage > best[0]:
            best = (coverage, ratio)

    if best is None:
        raise NoViableSizingError(
            f"No operating point keeps grid surplus under {max_surplus_fraction:.0%} "
            f"(pairs: {list(pairs)})"
        )
    return best


def size_for_operating_hours(
    annual_consumption_kwh: float,
    annual_yield_kwh_per_kwp: float,
    operating_hours: Union[OperatingHoursCase, str],
    building_category: Union[BuildingCategory, str],
    max_surplus_fraction: float = MAX_SURPLUS_FRACTION,
) -> AutoconsumptionResult:
    """
    Size a PV system for an operating-hours profile.

    Args:
        annual_consumption_kwh: Annual consumption [kWh]
        annual_yield_kwh_per_kwp: Annual specific yield [kWh/kWp]
        operating_hours: OperatingHoursCase member, name or label
        building_category: BuildingCategory member, name or label
        max_surplus_fraction: Grid surplus ceiling as fraction of production

    Returns:
        AutoconsumptionResult for the selected operating point

    Raises:
        ConfigurationError: No matrix row for the case/category
        NoViableSizingError: No pair satisfies the surplus ceiling
    """
    pairs: Tuple[OperatingPoint, ...] = operating_hours_pairs(operating_hours, building_category)
    coverage, ratio = select_operating_point(pairs, max_surplus_fraction)

    result = compute_autoconsumption(
        annual_consumption_kwh,
        annual_yield_kwh_per_kwp,
        coverage,
        ratio,
        max_surplus_fraction,
    )

    logger.info(
        f"Operating point: coverage {coverage:.0%}, self-consumption {ratio:.0%} -> "
        f"{result.theoretical_power_kwp:.2f} kWp, surplus {result.surplus_fraction:.0%}"
    )
    return result
