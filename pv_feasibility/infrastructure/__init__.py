"""
Infrastructure layer: tariff profiles and solar yield sources.
"""
