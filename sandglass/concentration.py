"""
Pool concentration curve.
Concentration is the virtual reserve added to both sides of the PT/YT pool;
it moves linearly from the initial to the maturity value over the market window.
"""
from decimal import Decimal

from sandglass.errors import InvalidMarketConfigError
from sandglass.fixed_point import ZERO, fixed_point
from sandglass.models import MarketConfig


@fixed_point
def market_concentration(solana_timestamp: int, config: MarketConfig) -> Decimal:
    """
    Concentration of the pool at the given chain time.

    Args:
        solana_timestamp: Current chain time (seconds)
        config: Market configuration holding the pool config

    Returns:
        initial_concentration when the curve is flat, maturity_concentration
        once the market has ended, otherwise the linear interpolation
    """
    initial = config.pool_config.initial_concentration
    maturity = config.pool_config.maturity_concentration

    if maturity == ZERO:
        return initial

    if config.end_time <= solana_timestamp:
        return maturity

    if config.market_duration <= 0:
        raise InvalidMarketConfigError(
            f"end_time {config.end_time} must be after start_time {config.start_time}"
        )

    time_diff = Decimal(solana_timestamp - config.start_time)
    delta = (maturity - initial) * time_diff / Decimal(config.market_duration)
    return initial + delta
