"""
Tariff configuration loader using dataclasses.

Provides the utility's bracket tariffs per segment (BT / MT) with YAML-based
configuration.

Billing model: by default a month's consumption selects ONE bracket and the
whole amount is billed at that bracket's rate. This approximates the utility's
cumulative bracket billing and is kept for continuity with issued reports.
The cumulative ("marginal") model is available but must be requested
explicitly.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Literal, Union
import logging
import math

import yaml

from pv_feasibility.core.coefficients import TariffSegment
from pv_feasibility.errors import ConfigurationError, require_finite_non_negative

logger = logging.getLogger(__name__)

BillingModel = Literal["whole_amount", "marginal"]

DEFAULT_TARIFF_PATH = Path(__file__).parent / "tariffs_steg_2024.yaml"


@dataclass(frozen=True)
class TariffBracket:
    """Single consumption bracket (min_kwh, max_kwh]."""

    min_kwh: float
    max_kwh: float
    rate: float  # monetary units/kWh


@dataclass(frozen=True)
class BracketDetail:
    min_kwh: float
    max_kwh: float
    rate: float
    consumption_kwh: float
    cost: float


@dataclass(frozen=True)
class ProgressiveTariffResult:
    applied_rate: float
    monthly_cost: float
    annual_cost: float  # flat: 12 x monthly_cost
    effective_rate: float
    bracket_details: List[BracketDetail] = field(default_factory=list)


@dataclass(frozen=True)
class ProgressiveTariff:
    """Bracket tariff for one segment."""

    brackets: List[TariffBracket]
    billing_model: BillingModel = "whole_amount"

    def __post_init__(self):
        if not self.brackets:
            raise ConfigurationError("Tariff must define at least one bracket")
        if self.billing_model not in ("whole_amount", "marginal"):
            raise ConfigurationError(f"Unknown billing model: {self.billing_model!r}")
        previous_max = 0.0
        for bracket in self.brackets:
            if bracket.min_kwh != previous_max or bracket.max_kwh <= bracket.min_kwh:
                raise ConfigurationError(
                    f"Tariff brackets must be contiguous and increasing from 0 kWh, "
                    f"got ({bracket.min_kwh}, {bracket.max_kwh}]"
                )
            previous_max = bracket.max_kwh
        if not math.isinf(previous_max):
            raise ConfigurationError("Last tariff bracket must be open-ended")

    def applied_rate(self, consumption_kwh: float) -> float:
        """
        Rate of the bracket containing the month's consumption.

        Returns 0 for zero consumption.

        Raises:
            ValidationError: If consumption is negative or not finite
        """
        consumption = require_finite_non_negative(consumption_kwh, "consumption_kwh")
        if consumption == 0:
            return 0.0

        for bracket in self.brackets:
            if bracket.min_kwh < consumption <= bracket.max_kwh:
                return bracket.rate

        return self.brackets[-1].rate

    def bracket_details(self, consumption_kwh: float) -> List[BracketDetail]:
        """Cumulative split of a month's consumption across brackets."""
        consumption = require_finite_non_negative(consumption_kwh, "consumption_kwh")
        details = []
        for bracket in self.brackets:
            if consumption <= bracket.min_kwh:
                break
            in_bracket = min(consumption, bracket.max_kwh) - bracket.min_kwh
            details.append(BracketDetail(
                min_kwh=bracket.min_kwh,
                max_kwh=bracket.max_kwh,
                rate=bracket.rate,
                consumption_kwh=round(in_bracket, 2),
                cost=round(in_bracket * bracket.rate, 3),
            ))
        return details

    def monthly_cost(self, consumption_kwh: float) -> float:
        """Bill for one month of consumption, rounded to 2 decimals."""
        if self.billing_model == "marginal":
            return round(sum(d.consumption_kwh * d.rate for d in self.bracket_details(consumption_kwh)), 2)
        return round(consumption_kwh * self.applied_rate(consumption_kwh), 2)

    def consumption_from_bill(self, bill_amount: float) -> float:
        """
        Invert the whole-amount billing: consumption [kWh] for a monthly bill.

        Bills between two brackets' reachable ranges cannot be produced by any
        consumption; they resolve to the upper bound of the lower bracket.

        Raises:
            ValidationError: Negative or non-finite amount
            ConfigurationError: If the tariff uses the marginal model
        """
        amount = require_finite_non_negative(bill_amount, "bill_amount")
        if self.billing_model != "whole_amount":
            raise ConfigurationError("Bill inversion is only defined for whole-amount billing")
        if amount == 0:
            return 0.0

        lower_bound = 0.0
        for bracket in self.brackets:
            consumption = amount / bracket.rate
            if bracket.min_kwh < consumption <= bracket.max_kwh:
                return round(consumption, 2)
            if consumption <= bracket.min_kwh:
                logger.warning(
                    f"Bill amount {amount:.2f} falls between tariff brackets; "
                    f"using {lower_bound:.0f} kWh"
                )
                return round(lower_bound, 2)
            lower_bound = bracket.max_kwh

        return round(amount / self.brackets[-1].rate, 2)


def compute_progressive_tariff(
    monthly_consumption_kwh: float,
    tariff: "ProgressiveTariff" = None,
) -> ProgressiveTariffResult:
    """
    Cost summary for one month of consumption.

    Args:
        monthly_consumption_kwh: Monthly consumption [kWh]
        tariff: Tariff to apply (default: bundled BT tariff)

    Returns:
        ProgressiveTariffResult with flat annual cost (12 x monthly)
    """
    if tariff is None:
        tariff = TariffLoader.get_default_tariff().get_segment(TariffSegment.BT)

    monthly_cost = tariff.monthly_cost(monthly_consumption_kwh)
    consumption = float(monthly_consumption_kwh)
    return ProgressiveTariffResult(
        applied_rate=tariff.applied_rate(consumption),
        monthly_cost=monthly_cost,
        annual_cost=round(monthly_cost * 12, 2),
        effective_rate=round(monthly_cost / consumption, 4) if consumption > 0 else 0.0,
        bracket_details=tariff.bracket_details(consumption),
    )


@dataclass(frozen=True)
class TariffProfile:
    """Complete tariff profile: one bracket tariff per segment."""

    name: str
    year: int
    currency: str
    segments: Dict[TariffSegment, ProgressiveTariff]

    def get_segment(self, segment: Union[TariffSegment, str]) -> ProgressiveTariff:
        """
        Raises:
            ConfigurationError: If the profile has no tariff for the segment
        """
        segment = TariffSegment.parse(segment)
        try:
            return self.segments[segment]
        except KeyError:
            raise ConfigurationError(f"Tariff profile '{self.name}' has no {segment.name} segment")


class TariffLoader:
    """Loader for tariff configuration from YAML files."""

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> TariffProfile:
        """
        Load tariff configuration from YAML file.

        Args:
            yaml_path: Path to tariff YAML file

        Returns:
            TariffProfile instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ConfigurationError: If YAML structure is invalid
        """
        yaml_path = Path(yaml_path)

        if not yaml_path.exists():
            raise FileNotFoundError(f"Tariff file not found: {yaml_path}")

        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data or "tariff_profile" not in data:
            raise ConfigurationError("YAML must contain 'tariff_profile' root key")

        profile_data = data["tariff_profile"]

        segments = {}
        for segment_key, segment_data in profile_data.get("segments", {}).items():
            brackets = [
                TariffBracket(
                    min_kwh=float(b["min_kwh"]),
                    max_kwh=float("inf") if b["max_kwh"] in (".inf", "inf", None) else float(b["max_kwh"]),
                    rate=float(b["rate"]),
                )
                for b in segment_data["brackets"]
            ]
            segments[TariffSegment.parse(segment_key)] = ProgressiveTariff(
                brackets=brackets,
                billing_model=segment_data.get("billing_model", "whole_amount"),
            )

        if not segments:
            raise ConfigurationError(f"Tariff profile in {yaml_path} defines no segments")

        return TariffProfile(
            name=profile_data["name"],
            year=int(profile_data["year"]),
            currency=profile_data.get("currency", "TND"),
            segments=segments,
        )

    @classmethod
    def get_default_tariff(cls) -> TariffProfile:
        """
        Get the bundled STEG 2024 tariff.

        Returns:
            TariffProfile with BT brackets and the flat MT rate
        """
        return cls.from_yaml(DEFAULT_TARIFF_PATH)
