"""
PV sizing and month-by-month net-metering simulation.

Sizing:
    P_th   = E_annual / Y_spec             [kWp]
    P_inst = override or P_th
    Prod(m) = P_inst x Y(m)                [kWh]

Net metering (credit rollover), processed strictly January -> December with
credit(0) = 0:
    balance(m) = (C_raw(m) - Prod(m)) + credit(m-1)
    balance < 0  -> billed = 0, credit = balance   (banked surplus)
    balance > 0  -> billed = balance, credit = 0
    balance == 0 -> billed = 0, credit = 0

December's credit is not carried into the following year.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging

import pandas as pd

from pv_feasibility.errors import (
    ValidationError,
    require_finite_non_negative,
    require_length,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PVSystemSizing:
    theoretical_power_kwp: float
    installed_power_kwp: float
    annual_producible_kwh: float


@dataclass(frozen=True)
class MonthlyPVRecord:
    """
    Snapshot of one month of the net-metering fold.

    billed_consumption_kwh >= 0 and credit_kwh <= 0; at most one is nonzero.
    """
    month: int
    raw_consumption_kwh: float
    pv_production_kwh: float
    billed_consumption_kwh: float
    credit_kwh: float


@dataclass(frozen=True)
class PVProductionResult:
    sizing: PVSystemSizing
    annual_pv_production_kwh: float
    monthly_records: Tuple[MonthlyPVRecord, ...]
    coverage_rate_percent: float

    @property
    def installed_power_kwp(self) -> float:
        return self.sizing.installed_power_kwp

    @property
    def annual_producible_kwh(self) -> float:
        return self.sizing.annual_producible_kwh

    @property
    def final_credit_kwh(self) -> float:
        return self.monthly_records[-1].credit_kwh

    @property
    def monthly_billed_kwh(self) -> Tuple[float, ...]:
        return tuple(r.billed_consumption_kwh for r in self.monthly_records)

    @property
    def monthly_raw_kwh(self) -> Tuple[float, ...]:
        return tuple(r.raw_consumption_kwh for r in self.monthly_records)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([
            {
                'month': r.month,
                'raw_consumption_kwh': r.raw_consumption_kwh,
                'pv_production_kwh': r.pv_production_kwh,
                'billed_consumption_kwh': r.billed_consumption_kwh,
                'credit_kwh': r.credit_kwh,
            }
            for r in self.monthly_records
        ]).set_index('month')


def calculate_theoretical_power(annual_consumption_kwh: float, annual_yield_kwh_per_kwp: float) -> float:
    """
    P_th = E_annual / Y_spec, rounded to 2 decimals.

    A zero specific yield is missing input rather than a physical scenario:
    it is logged and yields 0 kWp.
    """
    if annual_yield_kwh_per_kwp == 0:
        logger.warning("Annual specific yield is zero, cannot calculate theoretical PV power")
        return 0.0
    return round(annual_consumption_kwh / annual_yield_kwh_per_kwp, 2)


def calculate_monthly_production(installed_power_kwp: float, monthly_yield_kwh_per_kwp: Sequence[float]) -> Tuple[float, ...]:
    """Prod(m) = P_inst x Y(m), rounded to 2 decimals."""
    return tuple(round(installed_power_kwp * y, 2) for y in monthly_yield_kwh_per_kwp)


def next_credit_record(
    previous: Optional[MonthlyPVRecord],
    month: int,
    raw_consumption_kwh: float,
    pv_production_kwh: float,
) -> MonthlyPVRecord:
    """
    One step of the net-metering fold.

    Only the previous snapshot's credit is carried; `previous` is None for
    January.
    """
    previous_credit = previous.credit_kwh if previous is not None else 0.0
    balance = (raw_consumption_kwh - pv_production_kwh) + previous_credit

    if balance < 0:
        billed, credit = 0.0, balance
    elif balance > 0:
        billed, credit = balance, 0.0
    else:
        billed, credit = 0.0, 0.0

    return MonthlyPVRecord(
        month=month,
        raw_consumption_kwh=round(raw_consumption_kwh, 2),
        pv_production_kwh=round(pv_production_kwh, 2),
        billed_consumption_kwh=round(billed, 2),
        credit_kwh=round(credit, 2),
    )


def simulate_net_metering(
    monthly_raw_consumption_kwh: Sequence[float],
    monthly_production_kwh: Sequence[float],
) -> Tuple[MonthlyPVRecord, ...]:
    """
    Run the credit rollover over one calendar year.

    Must stay sequential: each month depends on the previous month's credit.
    """
    require_length(monthly_raw_consumption_kwh, 12, "monthly_raw_consumption_kwh")
    require_length(monthly_production_kwh, 12, "monthly_production_kwh")

    records = []
    previous = None
    for index, (raw, production) in enumerate(zip(monthly_raw_consumption_kwh, monthly_production_kwh)):
        previous = next_credit_record(previous, index + 1, float(raw), float(production))
        records.append(previous)
        logger.debug(
            f"Month {previous.month}: raw={previous.raw_consumption_kwh:.2f} "
            f"prod={previous.pv_production_kwh:.2f} billed={previous.billed_consumption_kwh:.2f} "
            f"credit={previous.credit_kwh:.2f}"
        )

    return tuple(records)


def calculate_coverage_rate(annual_pv_production_kwh: float, annual_consumption_kwh: float) -> float:
    """Coverage = E_PV / E_annual x 100, rounded to 2 decimals."""
    return round(annual_pv_production_kwh / annual_consumption_kwh * 100, 2)


def size(
    annual_consumption_kwh: float,
    annual_yield_kwh_per_kwp: float,
    monthly_yield_kwh_per_kwp: Sequence[float],
    monthly_raw_consumption_kwh: Sequence[float],
    installed_power_override_kwp: Optional[float] = None,
) -> PVProductionResult:
    """
    Size the PV system and simulate one year of net metering.

    Args:
        annual_consumption_kwh: Annual consumption to cover [kWh], > 0
        annual_yield_kwh_per_kwp: Annual specific yield [kWh/kWp]
        monthly_yield_kwh_per_kwp: 12 monthly specific yields [kWh/kWp]
        monthly_raw_consumption_kwh: 12 monthly consumptions [kWh]
        installed_power_override_kwp: Force the installed power [kWp]

    Returns:
        PVProductionResult with sizing, 12 monthly records and coverage

    Raises:
        ValidationError: Negative or non-finite inputs, or zero consumption
    """
    annual_consumption = require_finite_non_negative(annual_consumption_kwh, "annual_consumption_kwh")
    annual_yield = require_finite_non_negative(annual_yield_kwh_per_kwp, "annual_yield_kwh_per_kwp")
    if annual_consumption == 0:
        raise ValidationError("annual_consumption_kwh must be positive to size a PV system")

    require_length(monthly_yield_kwh_per_kwp, 12, "monthly_yield_kwh_per_kwp")
    require_length(monthly_raw_consumption_kwh, 12, "monthly_raw_consumption_kwh")
    monthly_yield = [require_finite_non_negative(y, "monthly_yield_kwh_per_kwp") for y in monthly_yield_kwh_per_kwp]
    monthly_raw = [require_finite_non_negative(c, "monthly_raw_consumption_kwh") for c in monthly_raw_consumption_kwh]

    theoretical = calculate_theoretical_power(annual_consumption, annual_yield)
    if installed_power_override_kwp is not None:
        installed = round(require_finite_non_negative(installed_power_override_kwp, "installed_power_override_kwp"), 2)
    else:
        installed = theoretical

    monthly_production = calculate_monthly_production(installed, monthly_yield)
    annual_producible = round(sum(y * installed for y in monthly_yield), 2)

    records = simulate_net_metering(monthly_raw, monthly_production)

    annual_production = round(sum(monthly_production), 2)
    coverage = calculate_coverage_rate(annual_production, annual_consumption)

    logger.info(
        f"PV system: {installed:.2f} kWp (theoretical {theoretical:.2f} kWp), "
        f"annual production {annual_production:.2f} kWh, coverage {coverage:.2f}%"
    )

    return PVProductionResult(
        sizing=PVSystemSizing(
            theoretical_power_kwp=theoretical,
            installed_power_kwp=installed,
            annual_producible_kwh=annual_producible,
        ),
        annual_pv_production_kwh=annual_production,
        monthly_records=records,
        coverage_rate_percent=coverage,
    )
