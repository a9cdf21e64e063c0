"""
Market valuation: yield curve -> PT/YT prices -> pool prices -> token prices.
Pure function of one market snapshot and its oracle quotes.
"""
import logging

from sandglass.concentration import market_concentration
from sandglass.errors import InvalidMarketConfigError
from sandglass.fixed_point import fixed_point
from sandglass.models import ChainClock, MarketConfig, MarketValue, PoolReserves, SpotQuote
from sandglass.pricing import lp_rates, pool_price, pt_yt_prices
from sandglass.yield_curve import market_curve

logger = logging.getLogger(__name__)


def validate_market_config(config: MarketConfig, market_id: str = None) -> None:
    """
    Reject configurations that cannot be valued.

    Raises:
        InvalidMarketConfigError: price_base or start_price not positive, or
            end_time not after start_time
    """
    if config.price_base <= 0:
        raise InvalidMarketConfigError(f"price_base must be positive, got {config.price_base}", market_id)
    if config.start_price <= 0:
        raise InvalidMarketConfigError(f"start_price must be positive, got {config.start_price}", market_id)
    if config.end_time <= config.start_time:
        raise InvalidMarketConfigError(
            f"end_time {config.end_time} must be after start_time {config.start_time}", market_id
        )
    if config.compounding_period < 0:
        raise InvalidMarketConfigError(
            f"compounding_period must not be negative, got {config.compounding_period}", market_id
        )


@fixed_point
def value_market(
    config: MarketConfig,
    clock: ChainClock,
    reserves: PoolReserves,
    quote: SpotQuote,
    mint_decimals: int,
    market_id: str = None,
) -> MarketValue:
    """
    Value a market snapshot.

    Args:
        config: Market configuration
        clock: Chain clock at snapshot time
        reserves: Pool reserves and LP supply
        quote: Oracle quotes; SpotQuote.unavailable() values the tokens at 0
        mint_decimals: PT mint decimals, shared by PT/YT/LP
        market_id: Used in error messages only

    Returns:
        MarketValue with USD token prices and LP rates
    """
    validate_market_config(config, market_id)

    try:
        curve = market_curve(config, quote.ybt_price, clock)
        token_prices = pt_yt_prices(config, curve.market_end_price)
        concentration = market_concentration(clock.solana_timestamp, config)
        prices = pool_price(concentration, reserves.pt_pool_amount, reserves.yt_pool_amount, token_prices)
        rates = lp_rates(reserves)
    except InvalidMarketConfigError as e:
        if market_id and e.market_id is None:
            raise InvalidMarketConfigError(str(e), market_id) from e
        raise

    logger.debug(
        f"Market {market_id}: end_price={curve.market_end_price} pt={token_prices.pt_price} "
        f"pool_pt={prices.pool_pt_price} concentration={concentration}"
    )

    return MarketValue(
        curve=curve,
        token_prices=token_prices,
        concentration=concentration,
        pool_price=prices,
        pt_token_price=prices.pool_pt_price * quote.base_price * quote.ybt_price,
        yt_token_price=prices.pool_yt_price * quote.base_price * quote.ybt_price,
        lp_rates=rates,
        mint_decimals=mint_decimals,
    )
