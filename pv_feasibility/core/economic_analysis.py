"""
Economic analysis of a PV installation under net metering.

Monthly (year 1):
    billWithoutPV(m) = raw(m) x rate(raw(m))
    billWithPV(m)    = billed(m) x rate(billed(m))
    savings(m)       = billWithoutPV(m) - billWithPV(m)

Investment:
    CAPEX     = P_inst x capex_per_kwp    (or an explicit override)
    OPEX(1)   = CAPEX x opex_rate

Projection, year n = 1..N as an ordered fold over frozen rows:
    savings(n) = savings(1) x (1 - d)^(n-1) x (1 + i_tariff)^(n-1)
    opex(n)    = OPEX(1) x (1 + i_opex)^(n-1)
    netGain(n) = savings(n) - opex(n)
    cumulativeCashFlow(n) = cumulativeCashFlow(n-1) + netGain(n),  cumulativeCashFlow(0) = -CAPEX
    discounted series use netGain(n) / (1 + r)^n

Tariff rates come from a whole-amount bracket tariff (see
pv_feasibility.infrastructure.tariffs).
"""

from dataclasses import asdict, dataclass
from typing import Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from pv_feasibility.config.simulation_config import EconomicConfig, SolverConfig
from pv_feasibility.core.coefficients import TariffSegment
from pv_feasibility.core.economics import (
    discount_factors,
    internal_rate_of_return,
    payback_period,
)
from pv_feasibility.errors import (
    ValidationError,
    require_finite_non_negative,
    require_length,
)
from pv_feasibility.infrastructure.tariffs.loader import ProgressiveTariff, TariffLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthlyEconomicResult:
    month: int
    raw_consumption_kwh: float
    billed_consumption_kwh: float
    applied_rate_without_pv: float
    applied_rate: float  # rate applied to the billed consumption
    bill_without_pv: float
    bill_with_pv: float
    savings: float


@dataclass(frozen=True)
class AnnualProjectionRow:
    """
    One year of the projection.

    Cumulative fields are derived from the previous row only.
    """
    year: int
    annual_raw_consumption_kwh: float
    annual_billed_consumption_kwh: float
    bill_without_pv: float
    bill_with_pv: float
    annual_savings: float
    opex: float
    capex: float  # year 1 only
    net_gain: float
    cumulative_cash_flow: float
    cumulative_cash_flow_discounted: float
    cumulative_net_gain: float
    cumulative_net_gain_discounted: float
    average_avoided_tariff: float


@dataclass(frozen=True)
class FinancialSummary:
    npv: float
    irr: float
    simple_payback_years: float  # math.inf if never recovered
    discounted_payback_years: float  # math.inf if never recovered
    roi: float  # ratio, 0.5 = 50 %
    total_savings_over_lifetime: float
    total_co2_avoided_tonnes: float
    capex: float
    year1_opex: float

    @property
    def roi_percent(self) -> float:
        return self.roi * 100

    @property
    def irr_percent(self) -> float:
        return self.irr * 100


@dataclass(frozen=True)
class EconomicAnalysisResult:
    monthly_results: Tuple[MonthlyEconomicResult, ...]
    annual_results: Tuple[AnnualProjectionRow, ...]
    summary: FinancialSummary
    base_annual_savings: float

    def monthly_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(m) for m in self.monthly_results]).set_index('month')

    def annual_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(r) for r in self.annual_results]).set_index('year')


def calculate_monthly_results(
    monthly_billed_kwh: Sequence[float],
    monthly_raw_kwh: Sequence[float],
    tariff: ProgressiveTariff,
) -> Tuple[MonthlyEconomicResult, ...]:
    """Year-1 bills with and without PV, month by month."""
    results = []
    for index, (billed, raw) in enumerate(zip(monthly_billed_kwh, monthly_raw_kwh)):
        bill_without_pv = tariff.monthly_cost(raw)
        bill_with_pv = tariff.monthly_cost(billed)
        results.append(MonthlyEconomicResult(
            month=index + 1,
            raw_consumption_kwh=raw,
            billed_consumption_kwh=billed,
            applied_rate_without_pv=tariff.applied_rate(raw),
            applied_rate=tariff.applied_rate(billed),
            bill_without_pv=bill_without_pv,
            bill_with_pv=bill_with_pv,
            savings=round(bill_without_pv - bill_with_pv, 2),
        ))
    return tuple(results)


def next_projection_row(
    previous: Optional[AnnualProjectionRow],
    year: int,
    capex: float,
    annual_raw_kwh: float,
    annual_billed_kwh: float,
    bill_without_pv: float,
    bill_with_pv: float,
    annual_savings: float,
    opex: float,
    discount_factor: float,
) -> AnnualProjectionRow:
    """
    One step of the yearly fold.

    `previous` is None for year 1, whose baseline cash flow is -CAPEX.
    """
    if previous is None:
        cash_flow, cash_flow_discounted = -capex, -capex
        net_gain_total, net_gain_total_discounted = 0.0, 0.0
    else:
        cash_flow = previous.cumulative_cash_flow
        cash_flow_discounted = previous.cumulative_cash_flow_discounted
        net_gain_total = previous.cumulative_net_gain
        net_gain_total_discounted = previous.cumulative_net_gain_discounted

    net_gain = annual_savings - opex
    discounted_gain = net_gain * discount_factor

    saved_kwh = annual_raw_kwh - annual_billed_kwh
    if saved_kwh > 0:
        average_avoided_tariff = round((bill_without_pv - bill_with_pv) / saved_kwh, 4)
    else:
        average_avoided_tariff = 0.0

    return AnnualProjectionRow(
        year=year,
        annual_raw_consumption_kwh=annual_raw_kwh,
        annual_billed_consumption_kwh=annual_billed_kwh,
        bill_without_pv=bill_without_pv,
        bill_with_pv=bill_with_pv,
        annual_savings=annual_savings,
        opex=opex,
        capex=capex if previous is None else 0.0,
        net_gain=net_gain,
        cumulative_cash_flow=cash_flow + net_gain,
        cumulative_cash_flow_discounted=cash_flow_discounted + discounted_gain,
        cumulative_net_gain=net_gain_total + net_gain,
        cumulative_net_gain_discounted=net_gain_total_discounted + discounted_gain,
        average_avoided_tariff=average_avoided_tariff,
    )


def _validate_params(params: EconomicConfig) -> None:
    for name in ['tariff_inflation_rate', 'opex_inflation_rate', 'discount_rate',
                 'degradation_rate', 'capex_per_kwp', 'opex_rate',
                 'co2_emission_factor_kg_per_kwh']:
        require_finite_non_negative(getattr(params, name), name)
    if params.degradation_rate >= 1:
        raise ValidationError("degradation_rate must be below 1")
    if isinstance(params.lifetime_years, bool) or not isinstance(params.lifetime_years, int) or params.lifetime_years < 1:
        raise ValidationError(f"lifetime_years must be a positive integer, got {params.lifetime_years!r}")


def analyze(
    monthly_billed_kwh: Sequence[float],
    monthly_raw_kwh: Sequence[float],
    installed_power_kwp: float,
    annual_pv_production_kwh: float,
    params: Optional[EconomicConfig] = None,
    tariff: Optional[ProgressiveTariff] = None,
    solver: Optional[SolverConfig] = None,
) -> EconomicAnalysisResult:
    """
    Multi-year financial projection of a PV installation.

    Args:
        monthly_billed_kwh: 12 billed consumptions after net metering [kWh]
        monthly_raw_kwh: 12 consumptions without PV [kWh]
        installed_power_kwp: Installed PV power [kWp]
        annual_pv_production_kwh: Year-1 PV production [kWh]
        params: Economic parameters (uses defaults if None)
        tariff: Bracket tariff (uses the bundled BT tariff if None)
        solver: IRR solver bounds (uses defaults if None)

    Returns:
        EconomicAnalysisResult with monthly results, annual rows and summary

    Raises:
        ValidationError: Negative or non-finite inputs, or zero CAPEX
        NoConvergenceError: IRR cannot be bracketed within the solver bounds
        ProgrammerError: Monthly arrays not of length 12
    """
    if params is None:
        params = EconomicConfig()
    if solver is None:
        solver = SolverConfig()
    if tariff is None:
        tariff = TariffLoader.get_default_tariff().get_segment(TariffSegment.BT)

    require_length(monthly_billed_kwh, 12, "monthly_billed_kwh")
    require_length(monthly_raw_kwh, 12, "monthly_raw_kwh")
    billed = [require_finite_non_negative(v, "monthly_billed_kwh") for v in monthly_billed_kwh]
    raw = [require_finite_non_negative(v, "monthly_raw_kwh") for v in monthly_raw_kwh]
    installed_power = require_finite_non_negative(installed_power_kwp, "installed_power_kwp")
    annual_production = require_finite_non_negative(annual_pv_production_kwh, "annual_pv_production_kwh")
    _validate_params(params)

    # Year 1: monthly bills
    monthly_results = calculate_monthly_results(billed, raw, tariff)
    year1_bill_without_pv = sum(m.bill_without_pv for m in monthly_results)
    year1_bill_with_pv = sum(m.bill_with_pv for m in monthly_results)

    if params.annual_savings_override is not None:
        base_savings = require_finite_non_negative(params.annual_savings_override, "annual_savings_override")
    else:
        base_savings = sum(m.savings for m in monthly_results)

    # Investment
    if params.capex_override is not None:
        capex = require_finite_non_negative(params.capex_override, "capex_override")
    else:
        capex = installed_power * params.capex_per_kwp
    if capex == 0:
        raise ValidationError("CAPEX is zero: installed power or capex_per_kwp must be positive")
    year1_opex = capex * params.opex_rate

    # Escalation factors
    years = params.lifetime_years
    n = np.arange(years)  # n - 1 for years 1..N
    degradation = (1 - params.degradation_rate) ** n
    tariff_inflation = (1 + params.tariff_inflation_rate) ** n
    opex_inflation = (1 + params.opex_inflation_rate) ** n
    discount = discount_factors(params.discount_rate, years)

    annual_savings = base_savings * degradation * tariff_inflation
    opex = year1_opex * opex_inflation

    annual_raw = sum(raw)
    annual_billed = sum(billed)

    rows = []
    previous = None
    for index in range(years):
        previous = next_projection_row(
            previous,
            year=index + 1,
            capex=capex,
            annual_raw_kwh=annual_raw,
            annual_billed_kwh=annual_billed,
            bill_without_pv=float(year1_bill_without_pv * tariff_inflation[index]),
            bill_with_pv=float(year1_bill_with_pv * tariff_inflation[index]),
            annual_savings=float(annual_savings[index]),
            opex=float(opex[index]),
            discount_factor=float(discount[index]),
        )
        rows.append(previous)

    # Summary
    net_gains = np.array([r.net_gain for r in rows])
    cash_flows = np.concatenate([[-capex], net_gains])
    final = rows[-1]

    irr = internal_rate_of_return(
        cash_flows,
        lower_bound=solver.irr_lower_bound,
        upper_bound=solver.irr_upper_bound,
        tolerance=solver.irr_tolerance,
        max_iterations=solver.irr_max_iterations,
    )

    co2_tonnes = float(np.sum(annual_production * degradation * params.co2_emission_factor_kg_per_kwh) / 1000)

    summary = FinancialSummary(
        npv=final.cumulative_cash_flow_discounted,
        irr=irr,
        simple_payback_years=payback_period(capex, net_gains),
        discounted_payback_years=payback_period(capex, net_gains * discount),
        roi=(final.cumulative_net_gain - capex) / capex,
        total_savings_over_lifetime=float(np.sum(annual_savings)),
        total_co2_avoided_tonnes=co2_tonnes,
        capex=capex,
        year1_opex=year1_opex,
    )

    logger.info(
        f"Economics: CAPEX {capex:,.0f}, NPV {summary.npv:,.0f}, IRR {summary.irr_percent:.2f}%, "
        f"payback {summary.simple_payback_years:.2f} years "
        f"(discounted {summary.discounted_payback_years:.2f})"
    )

    return EconomicAnalysisResult(
        monthly_results=monthly_results,
        annual_results=tuple(rows),
        summary=summary,
        base_annual_savings=base_savings,
    )
