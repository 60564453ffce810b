"""
Tariff infrastructure for STEG-style bracket tariffs.

Provides YAML-based configuration loading and bracket billing.
"""

from pv_feasibility.infrastructure.tariffs.loader import (
    BracketDetail,
    ProgressiveTariff,
    ProgressiveTariffResult,
    TariffBracket,
    TariffLoader,
    TariffProfile,
    compute_progressive_tariff,
)

__all__ = [
    'BracketDetail',
    'ProgressiveTariff',
    'ProgressiveTariffResult',
    'TariffBracket',
    'TariffLoader',
    'TariffProfile',
    'compute_progressive_tariff',
]
