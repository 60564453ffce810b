"""
Feasibility study configuration.

Groups the economic assumptions, the sizing options and the IRR solver bounds
used by one simulation run. All defaults reproduce the published STEG-era
study assumptions.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union
import math
import numbers

import yaml

from pv_feasibility.errors import ValidationError


def _number(value: Any, name: str) -> float:
    """Finite real number, or ValidationError (YAML may yield strings or None)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number, got {value!r}")
    return float(value)


def _section(config_dict: dict, key: str, yaml_path: Path) -> dict:
    """Named YAML section; an empty section (None) keeps all defaults."""
    section = config_dict[key]
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"Section '{key}' must be a mapping in {yaml_path}")
    return section


@dataclass
class EconomicConfig:
    """Economic parameters of the multi-year projection."""
    tariff_inflation_rate: float = 0.07  # per year
    opex_inflation_rate: float = 0.03  # per year
    discount_rate: float = 0.08  # per year
    degradation_rate: float = 0.004  # PV output loss per year
    capex_per_kwp: float = 2300.0  # TND/kWp
    opex_rate: float = 0.04  # fraction of CAPEX per year
    lifetime_years: int = 25
    co2_emission_factor_kg_per_kwh: float = 0.512  # grid emission factor

    # Explicit overrides
    capex_override: Optional[float] = None
    annual_savings_override: Optional[float] = None  # year-1 savings, still escalated


@dataclass
class SizingConfig:
    """PV sizing options."""
    max_surplus_fraction: float = 0.30  # grid surplus ceiling for the MT path
    installed_power_override_kwp: Optional[float] = None


@dataclass
class SolverConfig:
    """IRR bisection bounds."""
    irr_lower_bound: float = -0.99
    irr_upper_bound: float = 1.0
    irr_tolerance: float = 1e-8
    irr_max_iterations: int = 200


@dataclass
class SimulationConfig:
    """
    Master configuration for a PV feasibility study.

    tariff_file points to an optional YAML tariff profile; when unset the
    bundled STEG 2024 profile is used.
    """

    economic: EconomicConfig = field(default_factory=EconomicConfig)
    sizing: SizingConfig = field(default_factory=SizingConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)

    tariff_file: Optional[str] = None
    output_dir: Optional[str] = None  # CSV export directory, None disables export

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "SimulationConfig":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            SimulationConfig instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If YAML is empty or invalid
        """
        yaml_path = Path(yaml_path)

        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            try:
                config_dict = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

        if config_dict is None:
            raise ValueError(f"Empty or invalid YAML file: {yaml_path}")
        if not isinstance(config_dict, dict):
            raise ValueError(f"Configuration root must be a mapping: {yaml_path}")

        config = cls(
            tariff_file=config_dict.get('tariff_file'),
            output_dir=config_dict.get('output_dir'),
        )

        # Tariff file paths are relative to the config file
        if config.tariff_file is not None and not Path(config.tariff_file).is_absolute():
            config.tariff_file = str((yaml_path.parent / config.tariff_file).resolve())

        if 'economic' in config_dict:
            eco = _section(config_dict, 'economic', yaml_path)
            config.economic = EconomicConfig(
                tariff_inflation_rate=eco.get('tariff_inflation_rate', 0.07),
                opex_inflation_rate=eco.get('opex_inflation_rate', 0.03),
                discount_rate=eco.get('discount_rate', 0.08),
                degradation_rate=eco.get('degradation_rate', 0.004),
                capex_per_kwp=eco.get('capex_per_kwp', 2300.0),
                opex_rate=eco.get('opex_rate', 0.04),
                lifetime_years=eco.get('lifetime_years', 25),
                co2_emission_factor_kg_per_kwh=eco.get('co2_emission_factor_kg_per_kwh', 0.512),
                capex_override=eco.get('capex_override'),
                annual_savings_override=eco.get('annual_savings_override'),
            )

        if 'sizing' in config_dict:
            sizing = _section(config_dict, 'sizing', yaml_path)
            config.sizing = SizingConfig(
                max_surplus_fraction=sizing.get('max_surplus_fraction', 0.30),
                installed_power_override_kwp=sizing.get('installed_power_override_kwp'),
            )

        if 'solver' in config_dict:
            solver = _section(config_dict, 'solver', yaml_path)
            config.solver = SolverConfig(
                irr_lower_bound=solver.get('irr_lower_bound', -0.99),
                irr_upper_bound=solver.get('irr_upper_bound', 1.0),
                irr_tolerance=solver.get('irr_tolerance', 1e-8),
                irr_max_iterations=solver.get('irr_max_iterations', 200),
            )

        return config

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Args:
            yaml_path: Path to save YAML file
        """
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = {
            'tariff_file': self.tariff_file,
            'output_dir': self.output_dir,
            'economic': {
                'tariff_inflation_rate': self.economic.tariff_inflation_rate,
                'opex_inflation_rate': self.economic.opex_inflation_rate,
                'discount_rate': self.economic.discount_rate,
                'degradation_rate': self.economic.degradation_rate,
                'capex_per_kwp': self.economic.capex_per_kwp,
                'opex_rate': self.economic.opex_rate,
                'lifetime_years': self.economic.lifetime_years,
                'co2_emission_factor_kg_per_kwh': self.economic.co2_emission_factor_kg_per_kwh,
                'capex_override': self.economic.capex_override,
                'annual_savings_override': self.economic.annual_savings_override,
            },
            'sizing': {
                'max_surplus_fraction': self.sizing.max_surplus_fraction,
                'installed_power_override_kwp': self.sizing.installed_power_override_kwp,
            },
            'solver': {
                'irr_lower_bound': self.solver.irr_lower_bound,
                'irr_upper_bound': self.solver.irr_upper_bound,
                'irr_tolerance': self.solver.irr_tolerance,
                'irr_max_iterations': self.solver.irr_max_iterations,
            },
        }

        with open(yaml_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If tariff_file is set but missing
        """
        eco = self.economic
        for name in ['tariff_inflation_rate', 'opex_inflation_rate', 'discount_rate',
                     'capex_per_kwp', 'opex_rate', 'co2_emission_factor_kg_per_kwh']:
            if _number(getattr(eco, name), f"economic.{name}") < 0:
                raise ValidationError(f"economic.{name} must be non-negative, got {getattr(eco, name)}")

        if not (0 <= _number(eco.degradation_rate, "economic.degradation_rate") < 1):
            raise ValidationError("economic.degradation_rate must be in [0, 1)")
        if isinstance(eco.lifetime_years, bool) or not isinstance(eco.lifetime_years, numbers.Integral) or eco.lifetime_years < 1:
            raise ValidationError("economic.lifetime_years must be a positive integer")
        for name in ['capex_override', 'annual_savings_override']:
            value = getattr(eco, name)
            if value is not None and _number(value, f"economic.{name}") < 0:
                raise ValidationError(f"economic.{name} must be non-negative when set")

        if not (0 < _number(self.sizing.max_surplus_fraction, "sizing.max_surplus_fraction") <= 1):
            raise ValidationError("sizing.max_surplus_fraction must be in (0, 1]")
        override = self.sizing.installed_power_override_kwp
        if override is not None and _number(override, "sizing.installed_power_override_kwp") < 0:
            raise ValidationError("sizing.installed_power_override_kwp must be non-negative when set")

        lower = _number(self.solver.irr_lower_bound, "solver.irr_lower_bound")
        upper = _number(self.solver.irr_upper_bound, "solver.irr_upper_bound")
        if not (-1 < lower < upper):
            raise ValidationError("solver bounds invalid: -1 < irr_lower_bound < irr_upper_bound")
        if _number(self.solver.irr_tolerance, "solver.irr_tolerance") <= 0:
            raise ValidationError("solver.irr_tolerance must be positive")
        iterations = self.solver.irr_max_iterations
        if isinstance(iterations, bool) or not isinstance(iterations, numbers.Integral) or iterations < 1:
            raise ValidationError("solver.irr_max_iterations must be a positive integer")

        if self.tariff_file is not None and not Path(self.tariff_file).exists():
            raise FileNotFoundError(f"Tariff file not found: {self.tariff_file}")
