"""
Feasibility orchestrator.

Sequences one simulation request:
    bill amount -> kWh (if needed) -> 12-month extrapolation
    -> sizing path (operating hours -> alternate-tariff matrices, else net metering)
    -> net-metering simulation -> economic projection -> SimulationResult
"""

from dataclasses import dataclass
from typing import Optional
import logging

from pv_feasibility.config.simulation_config import SimulationConfig
from pv_feasibility.core.coefficients import (
    BuildingCategory,
    ClimateZone,
    OperatingHoursCase,
    TariffSegment,
)
from pv_feasibility.core.consumption_profiles import extrapolate
from pv_feasibility.core.economic_analysis import analyze
from pv_feasibility.core.pv_autoconsumption import size_for_operating_hours
from pv_feasibility.core.pv_production import size
from pv_feasibility.errors import ValidationError, require_finite_non_negative
from pv_feasibility.infrastructure.tariffs.loader import TariffLoader, TariffProfile
from pv_feasibility.infrastructure.weather.solar_yield import SolarYieldProfile, SolarYieldProvider
from pv_feasibility.simulation.simulation_results import SimulationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationRequest:
    """
    Caller input for one building.

    Exactly one of measured_consumption_kwh / measured_bill_amount must be
    given. Enum fields accept members, names or labels.
    """
    building_category: BuildingCategory
    climate_zone: ClimateZone
    reference_month: int
    measured_consumption_kwh: Optional[float] = None
    measured_bill_amount: Optional[float] = None
    tariff_segment: TariffSegment = TariffSegment.BT
    operating_hours: Optional[OperatingHoursCase] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __post_init__(self):
        if (self.measured_consumption_kwh is None) == (self.measured_bill_amount is None):
            raise ValidationError(
                "Provide exactly one of measured_consumption_kwh or measured_bill_amount"
            )

        # Normalise identifiers to enum members
        object.__setattr__(self, 'building_category', BuildingCategory.parse(self.building_category))
        object.__setattr__(self, 'climate_zone', ClimateZone.parse(self.climate_zone))
        object.__setattr__(self, 'tariff_segment', TariffSegment.parse(self.tariff_segment))
        if self.operating_hours is not None:
            object.__setattr__(self, 'operating_hours', OperatingHoursCase.parse(self.operating_hours))


class FeasibilityOrchestrator:
    """
    Runs the calculators for one request at a time.

    Holds only configuration; separate requests share no state.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        tariff_profile: Optional[TariffProfile] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Simulation configuration (uses defaults if None)
            tariff_profile: Tariff profile (loaded from config.tariff_file, or
                the bundled STEG 2024 profile, if None)
        """
        self.config = config if config is not None else SimulationConfig()

        if tariff_profile is None:
            if self.config.tariff_file is not None:
                tariff_profile = TariffLoader.from_yaml(self.config.tariff_file)
            else:
                tariff_profile = TariffLoader.get_default_tariff()
        self.tariff_profile = tariff_profile

    def resolve_measured_consumption(self, request: SimulationRequest) -> float:
        """Measured kWh of the reference month, converting a bill amount if needed."""
        if request.measured_consumption_kwh is not None:
            return require_finite_non_negative(request.measured_consumption_kwh, "measured_consumption_kwh")

        tariff = self.tariff_profile.get_segment(request.tariff_segment)
        consumption = tariff.consumption_from_bill(request.measured_bill_amount)
        logger.info(
            f"Bill amount {request.measured_bill_amount:.2f} -> {consumption:.2f} kWh "
            f"({request.tariff_segment.name} tariff)"
        )
        return consumption

    def run(self, request: SimulationRequest, solar_yield: SolarYieldProfile) -> SimulationResult:
        """
        Execute one feasibility simulation.

        Args:
            request: Building and bill data
            solar_yield: Specific yield for the site

        Returns:
            Frozen SimulationResult

        Raises:
            ValidationError: Invalid caller input
            ConfigurationError: Unknown category, zone or tariff segment
            NoViableSizingError: No operating point satisfies the surplus ceiling
            NoConvergenceError: IRR cannot be bracketed
        """
        tariff = self.tariff_profile.get_segment(request.tariff_segment)

        measured = self.resolve_measured_consumption(request)
        profile = extrapolate(
            measured,
            request.reference_month,
            request.building_category,
            request.climate_zone,
        )

        # Sizing path
        autoconsumption = None
        override = self.config.sizing.installed_power_override_kwp
        if request.operating_hours is not None:
            autoconsumption = size_for_operating_hours(
                profile.annual_consumption_kwh,
                solar_yield.annual_kwh_per_kwp,
                request.operating_hours,
                request.building_category,
                self.config.sizing.max_surplus_fraction,
            )
            if override is None:
                override = autoconsumption.theoretical_power_kwp
            else:
                logger.info(f"Configured installed power {override} kWp overrides operating-hours sizing")

        production = size(
            profile.annual_consumption_kwh,
            solar_yield.annual_kwh_per_kwp,
            solar_yield.monthly_kwh_per_kwp,
            profile.monthly_kwh,
            installed_power_override_kwp=override,
        )

        economics = analyze(
            production.monthly_billed_kwh,
            production.monthly_raw_kwh,
            production.installed_power_kwp,
            production.annual_pv_production_kwh,
            params=self.config.economic,
            tariff=tariff,
            solver=self.config.solver,
        )

        return SimulationResult(
            request=request,
            consumption=profile,
            solar_yield=solar_yield,
            production=production,
            economics=economics,
            autoconsumption=autoconsumption,
        )

    def run_with_provider(self, request: SimulationRequest, provider: SolarYieldProvider) -> SimulationResult:
        """
        Fetch the site's yield from a provider, then run.

        Raises:
            ValidationError: If the request has no coordinates
        """
        if request.latitude is None or request.longitude is None:
            raise ValidationError("Request needs latitude and longitude to fetch a solar yield")

        solar_yield = provider.fetch(request.latitude, request.longitude)
        return self.run(request, solar_yield)
