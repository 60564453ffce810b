"""
Weather infrastructure module for specific solar yield data.

Provides the immutable yield profile consumed by the calculators and the
provider interface used to fetch it for a site.
"""

from .solar_yield import FileSolarYieldProvider, SolarYieldProfile, SolarYieldProvider

__all__ = ['FileSolarYieldProvider', 'SolarYieldProfile', 'SolarYieldProvider']
