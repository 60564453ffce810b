"""
Core PV feasibility calculators

Contains:
- Lookup tables: coefficients.py
- Consumption extrapolation: consumption_profiles.py
- PV sizing and net metering: pv_production.py
- Alternate-tariff sizing: pv_autoconsumption.py
- Cash-flow metrics: economics.py
- Multi-year projection: economic_analysis.py (imported directly, it depends on
  the tariff infrastructure)
"""

from .coefficients import BuildingCategory, ClimateZone, OperatingHoursCase, TariffSegment
from .consumption_profiles import ConsumptionProfile, MonthlyConsumption, extrapolate
from .pv_production import MonthlyPVRecord, PVProductionResult, PVSystemSizing, size
from .pv_autoconsumption import AutoconsumptionResult, size_for_operating_hours

__all__ = [
    'BuildingCategory',
    'ClimateZone',
    'OperatingHoursCase',
    'TariffSegment',
    'ConsumptionProfile',
    'MonthlyConsumption',
    'extrapolate',
    'MonthlyPVRecord',
    'PVProductionResult',
    'PVSystemSizing',
    'size',
    'AutoconsumptionResult',
    'size_for_operating_hours',
]
