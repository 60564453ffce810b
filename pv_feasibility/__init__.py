"""
PV Feasibility

Technical and financial feasibility of a rooftop photovoltaic installation
for a commercial building, starting from a single monthly electricity bill.

Main Components:
- Configuration: Economic, sizing and solver configuration with YAML support
- Core: Coefficient tables, consumption extrapolation, PV sizing with
  net-metering credit rollover, alternate-tariff sizing, economic projection
- Infrastructure: Bracket tariffs (STEG profiles) and solar yield sources
- Simulation: Orchestration of one request into an immutable result

Quick Start:
    >>> from pv_feasibility import FeasibilityOrchestrator, SimulationRequest, SolarYieldProfile
    >>>
    >>> solar_yield = SolarYieldProfile.from_csv("data/yield_tunis.csv")
    >>> request = SimulationRequest(
    ...     building_category="OFFICE_ADMIN_BANK",
    ...     climate_zone="NORTH",
    ...     reference_month=7,
    ...     measured_consumption_kwh=1200,
    ... )
    >>> result = FeasibilityOrchestrator().run(request, solar_yield)
    >>> print(result.economics.summary.npv)

Public API Exports:
    Configuration:
        - SimulationConfig, EconomicConfig, SizingConfig, SolverConfig

    Infrastructure:
        - TariffLoader, ProgressiveTariff: Bracket tariffs
        - SolarYieldProfile, SolarYieldProvider: Specific yield

    Simulation:
        - FeasibilityOrchestrator, SimulationRequest, SimulationResult
"""

__version__ = "1.0.0"

from pv_feasibility.config import EconomicConfig, SimulationConfig, SizingConfig, SolverConfig
from pv_feasibility.errors import (
    ConfigurationError,
    FeasibilityError,
    NoConvergenceError,
    NoViableSizingError,
    ProgrammerError,
    ValidationError,
)
from pv_feasibility.infrastructure.tariffs import ProgressiveTariff, TariffLoader
from pv_feasibility.infrastructure.weather import SolarYieldProfile, SolarYieldProvider
from pv_feasibility.simulation import FeasibilityOrchestrator, SimulationRequest, SimulationResult

__all__ = [
    # Configuration
    "SimulationConfig",
    "EconomicConfig",
    "SizingConfig",
    "SolverConfig",
    # Errors
    "FeasibilityError",
    "ValidationError",
    "ConfigurationError",
    "NoViableSizingError",
    "NoConvergenceError",
    "ProgrammerError",
    # Infrastructure
    "TariffLoader",
    "ProgressiveTariff",
    "SolarYieldProfile",
    "SolarYieldProvider",
    # Simulation
    "FeasibilityOrchestrator",
    "SimulationRequest",
    "SimulationResult",
]
