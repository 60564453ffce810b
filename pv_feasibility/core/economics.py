"""
Discounted cash-flow metrics for a PV investment.

Cash flow series are indexed by year with year 0 holding the (negative)
investment:
    cash_flows = [-CAPEX, netGain(1), ..., netGain(N)]

    NPV(r)   = sum_n cash_flows[n] / (1 + r)^n
    IRR      = r such that NPV(r) = 0, found by bisection
    Payback  = first year where the cumulative series turns >= 0,
               linearly interpolated within that year
"""

from typing import Sequence
import logging
import math

import numpy as np
from scipy import optimize

from pv_feasibility.errors import NoConvergenceError

logger = logging.getLogger(__name__)


def discount_factors(rate: float, years: int) -> np.ndarray:
    """1 / (1 + rate)^n for n = 1..years."""
    return 1.0 / (1.0 + rate) ** np.arange(1, years + 1)


def net_present_value(rate: float, cash_flows: Sequence[float]) -> float:
    """
    Net present value of a year-indexed cash flow series.

    Args:
        rate: Discount rate (e.g. 0.08)
        cash_flows: Cash flows, cash_flows[0] at year 0

    Returns:
        NPV in the cash flows' monetary unit
    """
    flows = np.asarray(cash_flows, dtype=float)
    factors = (1.0 + rate) ** -np.arange(len(flows))
    return float(np.sum(flows * factors))


def internal_rate_of_return(
    cash_flows: Sequence[float],
    lower_bound: float = -0.99,
    upper_bound: float = 1.0,
    tolerance: float = 1e-8,
    max_iterations: int = 200,
) -> float:
    """
    Calculate Internal Rate of Return (IRR) by bisection.

    The root must be bracketed: NPV at the two bounds must have opposite
    signs (or one of them is exactly zero).

    Args:
        cash_flows: Cash flows, cash_flows[0] at year 0
        lower_bound: Lowest rate searched (default: -99%)
        upper_bound: Highest rate searched (default: +100%)
        tolerance: Absolute tolerance on the rate
        max_iterations: Bisection iteration cap

    Returns:
        IRR as decimal (e.g., 0.15 = 15%)

    Raises:
        NoConvergenceError: No sign change within the bounds, or bisection
            did not converge within max_iterations
    """
    npv_lower = net_present_value(lower_bound, cash_flows)
    npv_upper = net_present_value(upper_bound, cash_flows)

    if npv_lower == 0:
        return lower_bound
    if npv_upper == 0:
        return upper_bound
    if np.sign(npv_lower) == np.sign(npv_upper):
        raise NoConvergenceError(
            f"IRR not bracketed in [{lower_bound:.0%}, {upper_bound:.0%}]: "
            f"NPV {npv_lower:.2f} at lower bound, {npv_upper:.2f} at upper bound"
        )

    try:
        irr = optimize.bisect(
            net_present_value,
            lower_bound,
            upper_bound,
            args=(cash_flows,),
            xtol=tolerance,
            maxiter=max_iterations,
        )
    except RuntimeError as e:
        raise NoConvergenceError(f"IRR bisection did not converge: {e}") from e

    logger.debug(f"IRR converged: {irr:.6f}")
    return float(irr)


def payback_period(investment: float, annual_values: Sequence[float]) -> float:
    """
    Years until the cumulative series starting at -investment turns >= 0.

    Args:
        investment: Upfront investment (positive)
        annual_values: Yearly (possibly discounted) net gains, year 1 first

    Returns:
        Payback period [years], or math.inf if never recovered
    """
    if investment <= 0:
        return 0.0

    cumulative = -investment
    for year, value in enumerate(annual_values, start=1):
        previous = cumulative
        cumulative += value
        if cumulative >= 0:
            # Linear interpolation for fractional year
            return year - 1 + (-previous) / value

    return math.inf
