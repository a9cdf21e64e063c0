"""
Spot price oracles for Sandglass market valuation.
"""

from .pyth_client import SpotPriceProvider, PythPriceProvider

__all__ = ['SpotPriceProvider', 'PythPriceProvider']
