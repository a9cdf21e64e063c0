"""
Sandglass yield-tokenization market valuation.
Pure pricing core: yield curve, PT/YT prices, pool prices and position accumulation.
"""

from .errors import SandglassError, InvalidMarketConfigError
from .models import MarketType, MarketConfig, PoolConfig, ChainClock, PoolReserves, SpotQuote
from .valuation import value_market, validate_market_config

__all__ = [
    'SandglassError',
    'InvalidMarketConfigError',
    'MarketType',
    'MarketConfig',
    'PoolConfig',
    'ChainClock',
    'PoolReserves',
    'SpotQuote',
    'value_market',
    'validate_market_config',
]
