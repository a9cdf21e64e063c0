"""
PT/YT pricing.

Fundamental prices come from the market end price:
    pt_price = floor(start_price / price_base / end_price * price_base) / price_base
    yt_price = 1 - pt_price

The pool trades on a bonding curve with both reserves offset by the
concentration:
    virtual_pt    = pt_pool_amount + concentration
    virtual_yt    = yt_pool_amount + concentration
    pool_price    = (virtual_yt / yt_price) / (virtual_pt / pt_price)
    pool_pt_price = pool_price / (pool_price + 1)
    pool_yt_price = 1 - pool_pt_price
"""
from decimal import Decimal

from sandglass.errors import InvalidMarketConfigError
from sandglass.fixed_point import ONE, ZERO, fixed_point, round_down
from sandglass.models import LpRates, MarketConfig, PoolPrice, PoolReserves, TokenPrices


@fixed_point
def pt_yt_prices(config: MarketConfig, market_end_price: Decimal) -> TokenPrices:
    """
    PT and YT prices relative to the underlying.

    Args:
        config: Market configuration (start_price, price_base)
        market_end_price: End price from the yield curve (normalized)

    Returns:
        TokenPrices with pt_price clamped to at most 1
    """
    if market_end_price == ZERO:
        raise InvalidMarketConfigError("Market end price is zero")

    price_base = Decimal(config.price_base)
    start_price = Decimal(config.start_price) / price_base
    pt_price = round_down(start_price / market_end_price * price_base) / price_base

    if pt_price > ONE:
        pt_price = ONE

    return TokenPrices(pt_price=pt_price, yt_price=ONE - pt_price)


@fixed_point
def pool_price(
    concentration: Decimal,
    pt_pool_amount: Decimal,
    yt_pool_amount: Decimal,
    token_prices: TokenPrices,
) -> PoolPrice:
    """
    Trade prices implied by the pool reserves.

    A side priced at zero has no finite ratio; the pool price then sits
    entirely on the other side.
    """
    virtual_pt = pt_pool_amount + concentration
    virtual_yt = yt_pool_amount + concentration

    if virtual_pt <= ZERO or virtual_yt <= ZERO:
        raise InvalidMarketConfigError(
            f"Virtual reserves must be positive (pt={virtual_pt}, yt={virtual_yt})"
        )

    pt_price = token_prices.pt_price
    yt_price = token_prices.yt_price

    if yt_price == ZERO:
        return PoolPrice(pool_price=Decimal("Infinity"), pool_pt_price=ONE, pool_yt_price=ZERO)
    if pt_price == ZERO:
        return PoolPrice(pool_price=ZERO, pool_pt_price=ZERO, pool_yt_price=ONE)

    price = (virtual_yt / yt_price) / (virtual_pt / pt_price)
    pool_pt_price = price / (price + ONE)

    return PoolPrice(
        pool_price=price,
        pool_pt_price=pool_pt_price,
        pool_yt_price=ONE - pool_pt_price,
    )


@fixed_point
def lp_rates(reserves: PoolReserves) -> LpRates:
    """PT and YT backing of one LP token."""
    if reserves.lp_supply_amount == ZERO:
        if reserves.pt_pool_amount != ZERO or reserves.yt_pool_amount != ZERO:
            raise InvalidMarketConfigError(
                "LP supply is zero while the pool holds "
                f"{reserves.pt_pool_amount} PT / {reserves.yt_pool_amount} YT"
            )
        return LpRates(lp_pt_rate=ZERO, lp_yt_rate=ZERO)

    return LpRates(
        lp_pt_rate=reserves.pt_pool_amount / reserves.lp_supply_amount,
        lp_yt_rate=reserves.yt_pool_amount / reserves.lp_supply_amount,
    )
