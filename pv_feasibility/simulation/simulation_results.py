"""
Simulation result with export capabilities.

One immutable record per feasibility request: the consumption profile, the
yield profile, the sizing and the economic projection. The record is handed
to persistence/reporting as a plain dict or as CSV files.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union
import math

import pandas as pd

from pv_feasibility.core.consumption_profiles import ConsumptionProfile
from pv_feasibility.core.economic_analysis import EconomicAnalysisResult
from pv_feasibility.core.pv_autoconsumption import AutoconsumptionResult
from pv_feasibility.core.pv_production import PVProductionResult
from pv_feasibility.infrastructure.weather.solar_yield import SolarYieldProfile

# Use TYPE_CHECKING to avoid circular imports
if TYPE_CHECKING:
    from pv_feasibility.simulation.orchestrator import SimulationRequest


def _to_plain(value: Any) -> Any:
    """Convert nested result values to JSON-compatible types."""
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {str(_to_plain(k)): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class SimulationResult:
    """
    Complete outcome of one feasibility simulation.

    autoconsumption is set only when the request named an operating-hours
    profile.
    """
    request: "SimulationRequest"
    consumption: ConsumptionProfile
    solar_yield: SolarYieldProfile
    production: PVProductionResult
    economics: EconomicAnalysisResult
    autoconsumption: Optional[AutoconsumptionResult] = None
    created_at: datetime = field(default_factory=datetime.now)

    def monthly_dataframe(self) -> pd.DataFrame:
        """
        Month-level table: consumption, production, net metering and bills.

        Returns:
            DataFrame indexed by month (1-12)
        """
        df = self.production.to_dataframe()
        df['effective_coefficient'] = self.consumption.to_dataframe()['effective_coefficient']
        df['yield_kwh_per_kwp'] = self.solar_yield.monthly_kwh_per_kwp
        economics = self.economics.monthly_dataframe()
        for column in ['applied_rate', 'bill_without_pv', 'bill_with_pv', 'savings']:
            df[column] = economics[column]
        return df

    def annual_dataframe(self) -> pd.DataFrame:
        """Year-level projection indexed by year."""
        return self.economics.annual_dataframe()

    def summary_dict(self) -> Dict[str, Any]:
        """Headline figures for reporting."""
        summary = self.economics.summary
        return {
            'installed_power_kwp': self.production.installed_power_kwp,
            'theoretical_power_kwp': self.production.sizing.theoretical_power_kwp,
            'annual_consumption_kwh': self.consumption.annual_consumption_kwh,
            'annual_pv_production_kwh': self.production.annual_pv_production_kwh,
            'coverage_rate_percent': self.production.coverage_rate_percent,
            'capex': summary.capex,
            'npv': summary.npv,
            'irr_percent': summary.irr_percent,
            'roi_percent': summary.roi_percent,
            'simple_payback_years': summary.simple_payback_years,
            'discounted_payback_years': summary.discounted_payback_years,
            'total_co2_avoided_tonnes': summary.total_co2_avoided_tonnes,
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Plain dict of the whole record.

        Enums become their names, tuples become lists and the "never
        recovered" payback sentinel becomes None.
        """
        record = {
            'created_at': self.created_at,
            'request': asdict(self.request),
            'consumption': asdict(self.consumption),
            'solar_yield': asdict(self.solar_yield),
            'production': asdict(self.production),
            'autoconsumption': asdict(self.autoconsumption) if self.autoconsumption else None,
            'economics': asdict(self.economics),
            'summary': self.summary_dict(),
        }
        return _to_plain(record)

    def to_csv(self, output_dir: Union[str, Path]) -> None:
        """
        Export results to CSV files.

        Args:
            output_dir: Directory to save CSV files
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        self.monthly_dataframe().to_csv(output_dir / 'monthly_results.csv', index=True)
        self.annual_dataframe().to_csv(output_dir / 'annual_projection.csv', index=True)
        pd.DataFrame([self.summary_dict()]).to_csv(output_dir / 'financial_summary.csv', index=False)
