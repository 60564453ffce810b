"""
Unit tests for SimulationConfig and related dataclasses.
"""

import pytest
import yaml

from pv_feasibility.config.simulation_config import (
    EconomicConfig,
    SimulationConfig,
    SizingConfig,
    SolverConfig,
)
from pv_feasibility.errors import ValidationError


class TestEconomicConfig:
    """Test economic configuration dataclass."""

    def test_default_values(self):
        """Test default economic assumptions."""
        config = EconomicConfig()
        assert config.tariff_inflation_rate == 0.07
        assert config.opex_inflation_rate == 0.03
        assert config.discount_rate == 0.08
        assert config.degradation_rate == 0.004
        assert config.capex_per_kwp == 2300.0
        assert config.opex_rate == 0.04
        assert config.lifetime_years == 25
        assert config.co2_emission_factor_kg_per_kwh == 0.512
        assert config.capex_override is None
        assert config.annual_savings_override is None


class TestSizingAndSolverConfig:
    """Test sizing and solver defaults."""

    def test_sizing_defaults(self):
        config = SizingConfig()
        assert config.max_surplus_fraction == 0.30
        assert config.installed_power_override_kwp is None

    def test_solver_defaults(self):
        config = SolverConfig()
        assert config.irr_lower_bound == -0.99
        assert config.irr_upper_bound == 1.0


class TestSimulationConfigYaml:
    """Test YAML loading and saving."""

    def test_from_yaml_partial(self, tmp_path):
        """Missing sections keep their defaults."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({
            'output_dir': 'out',
            'economic': {'discount_rate': 0.10, 'capex_per_kwp': 2100},
        }))

        config = SimulationConfig.from_yaml(path)

        assert config.output_dir == 'out'
        assert config.economic.discount_rate == 0.10
        assert config.economic.capex_per_kwp == 2100
        assert config.economic.tariff_inflation_rate == 0.07
        assert config.sizing == SizingConfig()
        assert config.solver == SolverConfig()

    def test_round_trip(self, tmp_path):
        """to_yaml then from_yaml restores the configuration."""
        config = SimulationConfig(
            economic=EconomicConfig(discount_rate=0.06, annual_savings_override=12000.0),
            sizing=SizingConfig(max_surplus_fraction=0.25, installed_power_override_kwp=40.0),
            solver=SolverConfig(irr_upper_bound=2.0),
            output_dir='reports',
        )
        path = tmp_path / "nested" / "config.yaml"
        config.to_yaml(path)

        assert SimulationConfig.from_yaml(path) == config

    def test_relative_tariff_file(self, tmp_path):
        """Tariff paths are resolved relative to the config file."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({'tariff_file': 'tariffs/custom.yaml'}))

        config = SimulationConfig.from_yaml(path)

        assert config.tariff_file == str((tmp_path / 'tariffs' / 'custom.yaml').resolve())

    def test_empty_section_keeps_defaults(self, tmp_path):
        """A section header with no keys loads as the defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("economic:\nsizing:\n  max_surplus_fraction: 0.25\n")

        config = SimulationConfig.from_yaml(path)

        assert config.economic == EconomicConfig()
        assert config.sizing.max_surplus_fraction == 0.25
        assert config.output_dir is None

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("economic: [discount_rate: 0.08\n")
        with pytest.raises(ValueError):
            SimulationConfig.from_yaml(path)

    def test_section_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({'solver': [1, 2]}))
        with pytest.raises(ValueError):
            SimulationConfig.from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SimulationConfig.from_yaml(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError):
            SimulationConfig.from_yaml(path)


class TestSimulationConfigValidation:
    """Test configuration validation."""

    def test_defaults_are_valid(self):
        SimulationConfig().validate()

    @pytest.mark.parametrize("field,value", [
        ('discount_rate', -0.01),
        ('tariff_inflation_rate', float('nan')),
        ('degradation_rate', 1.0),
        ('lifetime_years', 0),
        ('capex_override', -1.0),
        ('discount_rate', '8%'),
        ('capex_per_kwp', None),
        ('lifetime_years', 25.0),
    ])
    def test_invalid_economic_values(self, field, value):
        config = SimulationConfig()
        setattr(config.economic, field, value)
        with pytest.raises(ValidationError):
            config.validate()

    def test_invalid_surplus_ceiling(self):
        config = SimulationConfig(sizing=SizingConfig(max_surplus_fraction=0.0))
        with pytest.raises(ValidationError):
            config.validate()

    def test_invalid_solver_bounds(self):
        config = SimulationConfig(solver=SolverConfig(irr_lower_bound=0.5, irr_upper_bound=0.1))
        with pytest.raises(ValidationError):
            config.validate()

    def test_missing_tariff_file(self, tmp_path):
        config = SimulationConfig(tariff_file=str(tmp_path / "missing.yaml"))
        with pytest.raises(FileNotFoundError):
            config.validate()

    def test_non_numeric_solver_values(self):
        config = SimulationConfig(solver=SolverConfig(irr_upper_bound='high', irr_max_iterations=2.5))
        with pytest.raises(ValidationError):
            config.validate()
