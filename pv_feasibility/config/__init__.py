"""
Configuration module for PV feasibility studies.

Provides dataclass-based configuration management with YAML support.

Main Components:
    - SimulationConfig: Primary configuration dataclass
    - EconomicConfig, SizingConfig, SolverConfig: Nested sections

Usage:
    >>> from pv_feasibility.config import SimulationConfig
    >>>
    >>> config = SimulationConfig.from_yaml("configs/default.yaml")
    >>> print(config.economic.discount_rate)
"""

from .simulation_config import EconomicConfig, SimulationConfig, SizingConfig, SolverConfig

__all__ = [
    "EconomicConfig",
    "SimulationConfig",
    "SizingConfig",
    "SolverConfig",
]
