from decimal import Decimal

import pytest

from sandglass.models import (
    ChainClock,
    MarketConfig,
    MarketState,
    MarketType,
    PoolConfig,
)

DAY = 86400
START_TIME = 1_700_000_000


def make_config(**overrides) -> MarketConfig:
    """Market config with sensible defaults; pool config fields may be overridden by name."""
    pool = PoolConfig(
        initial_concentration=Decimal(overrides.pop("initial_concentration", 1000)),
        maturity_concentration=Decimal(overrides.pop("maturity_concentration", 0)),
    )
    values = dict(
        market_type=MarketType.LINEAR_DECAY,
        start_time=START_TIME,
        end_time=START_TIME + 100 * DAY,
        start_price=1_000_000,
        initial_end_price=1_100_000,
        price_base=1_000_000,
        compounding_period=0,
        update_skip_time=3600,
        last_update_time=START_TIME,
        last_update_epoch=0,
        start_epoch=0,
        market_apy=0,
        market_sol_price=0,
        market_end_price=1_000_000,
        pool_config=pool,
    )
    values.update(overrides)
    return MarketConfig(**values)


def make_clock(timestamp: int, epoch: int = 0, epoch_start: int = None) -> ChainClock:
    return ChainClock(
        solana_timestamp=timestamp,
        epoch=epoch,
        epoch_start_timestamp=timestamp if epoch_start is None else epoch_start,
    )


def make_market(market_id: str = "market-1", config: MarketConfig = None, **overrides) -> MarketState:
    values = dict(
        market_id=market_id,
        config=config or make_config(),
        sy_mint="sy-mint",
        pt_mint="pt-mint",
        yt_mint="yt-mint",
        lp_mint="lp-mint",
        pool_pt_token_account="pool-pt",
        pool_yt_token_account="pool-yt",
    )
    values.update(overrides)
    return MarketState(**values)


@pytest.fixture
def linear_config():
    return make_config()


@pytest.fixture
def accrual_config():
    return make_config(
        market_type=MarketType.FIXED_ACCRUAL,
        market_apy=50_000,
        market_sol_price=1_020_000,
        market_end_price=1_050_000,
    )
