"""
Shared fixtures for the PV feasibility test suite.
"""

import pandas as pd
import pytest

from pv_feasibility.infrastructure.weather.solar_yield import SolarYieldProfile

# Specific yield of a south-facing 1 kWp system near Tunis, sums to 1800 kWh/kWp
MONTHLY_YIELD = [95.0, 110.0, 145.0, 165.0, 185.0, 190.0, 200.0, 190.0, 160.0, 130.0, 100.0, 130.0]


@pytest.fixture
def monthly_yield():
    return list(MONTHLY_YIELD)


@pytest.fixture
def solar_yield():
    """Yield profile for a 1 kWp system (1800 kWh/kWp/year)."""
    return SolarYieldProfile.from_monthly(MONTHLY_YIELD, latitude=36.8, longitude=10.18)


@pytest.fixture
def yield_csv(tmp_path):
    """Yield profile stored as CSV."""
    path = tmp_path / "yield.csv"
    pd.DataFrame({
        'month': range(1, 13),
        'yield_kwh_per_kwp': MONTHLY_YIELD,
    }).to_csv(path, index=False)
    return path
