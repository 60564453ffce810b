"""
Specific solar yield (kWh/kWp) per location.

The yield profile is produced outside the calculators (PVGIS or a stored
file) and is immutable once fetched. Sources supported here:
- monthly values given directly
- the monthly block of a PVGIS PVcalc JSON response
- CSV files with columns `month`, `yield_kwh_per_kwp`
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging

import pandas as pd

from pv_feasibility.errors import ValidationError, require_finite_non_negative

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolarYieldProfile:
    """
    Monthly and annual specific yield for one site.

    Attributes:
        monthly_kwh_per_kwp: 12 monthly yields, January first
        annual_kwh_per_kwp: Annual yield (about the sum of the monthly values)
        latitude: Site latitude
        longitude: Site longitude
        source: Data source identifier ("manual", "pvgis", "file")
    """
    monthly_kwh_per_kwp: Tuple[float, ...]
    annual_kwh_per_kwp: float
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    source: str = "manual"

    def __post_init__(self):
        if len(self.monthly_kwh_per_kwp) != 12:
            raise ValidationError(
                f"Solar yield needs 12 monthly values, got {len(self.monthly_kwh_per_kwp)}"
            )
        for value in self.monthly_kwh_per_kwp:
            require_finite_non_negative(value, "monthly_kwh_per_kwp")
        require_finite_non_negative(self.annual_kwh_per_kwp, "annual_kwh_per_kwp")

    @classmethod
    def from_monthly(
        cls,
        values: Iterable[float],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        source: str = "manual",
    ) -> "SolarYieldProfile":
        """Build a profile whose annual yield is the sum of the monthly values."""
        monthly = tuple(float(v) for v in values)
        return cls(
            monthly_kwh_per_kwp=monthly,
            annual_kwh_per_kwp=round(sum(monthly), 2),
            latitude=latitude,
            longitude=longitude,
            source=source,
        )

    @classmethod
    def from_pvgis_monthly(
        cls,
        response: Union[Mapping[str, Any], List[Mapping[str, Any]]],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> "SolarYieldProfile":
        """
        Parse a PVGIS PVcalc response computed for a 1 kWp system.

        Accepts either the full JSON response or its `outputs.monthly.fixed`
        list. The monthly yield is the `E_m` field; the annual yield is the
        rounded sum.

        Raises:
            ValidationError: If the response has no usable monthly block
        """
        if isinstance(response, Mapping):
            try:
                records = response['outputs']['monthly']['fixed']
            except (KeyError, TypeError):
                raise ValidationError("PVGIS response has no outputs.monthly.fixed block")
            inputs = response.get('inputs', {}).get('location', {})
            latitude = latitude if latitude is not None else inputs.get('latitude')
            longitude = longitude if longitude is not None else inputs.get('longitude')
        else:
            records = response

        try:
            by_month: Dict[int, float] = {int(r['month']): float(r['E_m']) for r in records}
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid PVGIS monthly record: {e}")

        if sorted(by_month) != list(range(1, 13)):
            raise ValidationError(f"PVGIS response must cover months 1-12, got {sorted(by_month)}")

        monthly = tuple(by_month[m] for m in range(1, 13))
        return cls(
            monthly_kwh_per_kwp=monthly,
            annual_kwh_per_kwp=float(round(sum(monthly))),
            latitude=latitude,
            longitude=longitude,
            source="pvgis",
        )

    @classmethod
    def from_csv(
        cls,
        file_path: Union[str, Path],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> "SolarYieldProfile":
        """
        Load a monthly yield profile from CSV.

        Expected CSV format:
        - month column: 1..12
        - yield_kwh_per_kwp column: numeric

        Raises:
            FileNotFoundError: If file doesn't exist
            ValidationError: If file format is invalid
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Solar yield file not found: {file_path}")

        logger.info(f"Loading solar yield from {file_path}")

        df = pd.read_csv(file_path)
        missing = {'month', 'yield_kwh_per_kwp'} - set(df.columns)
        if missing:
            raise ValidationError(f"Solar yield file {file_path} is missing columns: {sorted(missing)}")

        df = df.sort_values('month')
        if df['month'].tolist() != list(range(1, 13)):
            raise ValidationError(f"Solar yield file {file_path} must list months 1-12 exactly once")

        return cls.from_monthly(
            df['yield_kwh_per_kwp'].astype(float).tolist(),
            latitude=latitude,
            longitude=longitude,
            source="file",
        )

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({
            'month': range(1, 13),
            'yield_kwh_per_kwp': self.monthly_kwh_per_kwp,
        }).set_index('month')


class SolarYieldProvider(ABC):
    """Source of specific yield profiles keyed by coordinates."""

    @abstractmethod
    def fetch(self, latitude: float, longitude: float) -> SolarYieldProfile:
        """
        Fetch the yield profile for a site.

        Args:
            latitude: Site latitude
            longitude: Site longitude

        Returns:
            SolarYieldProfile for a 1 kWp system at the site
        """
        pass


class FileSolarYieldProvider(SolarYieldProvider):
    """Serves a stored CSV profile for any coordinates (offline runs)."""

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)

    def fetch(self, latitude: float, longitude: float) -> SolarYieldProfile:
        logger.debug(f"Serving stored solar yield {self.file_path} for ({latitude}, {longitude})")
        return SolarYieldProfile.from_csv(self.file_path, latitude=latitude, longitude=longitude)
