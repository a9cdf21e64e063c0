"""
Market yield curve.

Derives the current implied APY and terminal (end) price of a market.

FIXED_ACCRUAL markets compound the yield-bearing token's growth since the
market start. The curve is only refreshed once enough time (or enough epochs)
has passed since the last on-chain update and the spot price has risen above
the last recorded one; otherwise the persisted values are returned.

LINEAR_DECAY markets ignore the spot price: the end price moves linearly from
initial_end_price at start_time down to start_price at end_time.

Formulas (all prices raw, scaled by price_base):
    apr_plus_one     = (floor(spot * price_base) / start_price) ^ (1 / epoch_count)
    market_apy       = floor((apr_plus_one ^ year_epoch - 1) * price_base) / price_base
    market_end_price = floor(apr_plus_one ^ market_epoch * start_price) / price_base
"""
import logging
from decimal import Decimal
from typing import Callable, Dict, Tuple

from sandglass.errors import InvalidMarketConfigError
from sandglass.fixed_point import ONE, ZERO, dpow, fixed_point, round_down, to_decimal
from sandglass.models import ChainClock, MarketConfig, MarketCurve, MarketType

logger = logging.getLogger(__name__)

YEAR_SECONDS = 365 * 24 * 60 * 60


def _epoch_periods(config: MarketConfig, clock: ChainClock) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Compounding periods for epoch-based markets.

    Returns:
        (epoch_count, year_epoch, market_epoch), all zero when the update
        guard is not met
    """
    now = Decimal(clock.solana_timestamp)
    epoch_start = Decimal(clock.epoch_start_timestamp)
    update_skip_time = Decimal(config.update_skip_time)

    if not (now > epoch_start + update_skip_time and clock.epoch >= config.last_update_epoch):
        return ZERO, ZERO, ZERO

    epoch_count = Decimal(clock.epoch) - Decimal(config.start_epoch)
    if epoch_count <= ZERO:
        return ZERO, ZERO, ZERO

    time_diff = epoch_start - Decimal(config.start_time)
    if time_diff == ZERO:
        raise InvalidMarketConfigError(
            f"Epoch start {clock.epoch_start_timestamp} equals market start time"
        )

    year_epoch = Decimal(YEAR_SECONDS) / time_diff * epoch_count
    market_epoch = epoch_count * Decimal(config.market_duration) / time_diff
    return epoch_count, year_epoch, market_epoch


def _time_periods(config: MarketConfig, clock: ChainClock) -> Tuple[Decimal, Decimal, Decimal]:
    """Compounding periods for markets with a fixed compounding_period in seconds."""
    now = Decimal(clock.solana_timestamp)
    last_update_time = Decimal(config.last_update_time)

    if not now > last_update_time + Decimal(config.update_skip_time):
        return ZERO, ZERO, ZERO

    compounding_period = Decimal(config.compounding_period)
    time_diff = now - Decimal(config.start_time)
    epoch_count = time_diff / compounding_period
    year_epoch = Decimal(YEAR_SECONDS) / compounding_period
    market_epoch = Decimal(config.market_duration) / compounding_period
    return epoch_count, year_epoch, market_epoch


@fixed_point
def fixed_accrual_curve(config: MarketConfig, spot_price: Decimal, clock: ChainClock) -> MarketCurve:
    """
    Yield curve of a FIXED_ACCRUAL market.

    Args:
        config: Market configuration
        spot_price: Yield-bearing token price in the base asset
        clock: Chain clock

    Returns:
        MarketCurve, refreshed from spot_price when an update applies,
        otherwise the persisted market values
    """
    price_base = Decimal(config.price_base)
    spot_price = to_decimal(spot_price)
    scaled_spot = round_down(spot_price * price_base)

    market_apy = Decimal(config.market_apy) / price_base
    market_sol_price = Decimal(config.market_sol_price) / price_base
    market_end_price = Decimal(config.market_end_price) / price_base

    market_open = clock.solana_timestamp < config.end_time
    if not (market_open and market_sol_price < spot_price):
        return MarketCurve(market_apy, market_end_price, market_sol_price)

    if config.compounding_period == 0:
        epoch_count, year_epoch, market_epoch = _epoch_periods(config, clock)
    else:
        epoch_count, year_epoch, market_epoch = _time_periods(config, clock)

    if epoch_count > ZERO:
        start_price = Decimal(config.start_price)
        apr_plus_one = dpow(scaled_spot / start_price, ONE / epoch_count)

        market_apy = round_down((dpow(apr_plus_one, year_epoch) - ONE) * price_base) / price_base
        market_sol_price = spot_price
        market_end_price = round_down(
            dpow(apr_plus_one, market_epoch) * (start_price / price_base) * price_base
        ) / price_base

        logger.debug(
            f"Refreshed curve over {epoch_count} periods: apy={market_apy} end_price={market_end_price}"
        )

    return MarketCurve(market_apy, market_end_price, market_sol_price)


@fixed_point
def linear_decay_curve(config: MarketConfig, spot_price: Decimal, clock: ChainClock) -> MarketCurve:
    """
    Yield curve of a LINEAR_DECAY market. The spot price is not used.

    Past the end of the market the raw start_price is returned as end price.
    """
    price_base = Decimal(config.price_base)
    time_diff = Decimal(clock.solana_timestamp - config.start_time)
    market_duration = Decimal(config.market_duration)
    initial_end_price = Decimal(config.initial_end_price)
    delta_price = initial_end_price - Decimal(config.start_price)

    market_end_price = Decimal(config.start_price)
    if time_diff <= market_duration:
        market_end_price = round_down(
            (initial_end_price - delta_price * time_diff / market_duration) / price_base * price_base
        ) / price_base

    return MarketCurve(market_apy=ZERO, market_end_price=market_end_price, market_sol_price=ONE)


CURVES: Dict[MarketType, Callable[[MarketConfig, Decimal, ChainClock], MarketCurve]] = {
    MarketType.FIXED_ACCRUAL: fixed_accrual_curve,
    MarketType.LINEAR_DECAY: linear_decay_curve,
}


def market_curve(config: MarketConfig, spot_price: Decimal, clock: ChainClock) -> MarketCurve:
    """Dispatch to the curve of the market's type."""
    return CURVES[config.market_type](config, spot_price, clock)
