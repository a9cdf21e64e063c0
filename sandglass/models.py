"""
Snapshot and result types for Sandglass market valuation.
Raw on-chain integers stay as int; everything derived is Decimal.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict

from sandglass.fixed_point import ONE, ZERO
from sandglass.errors import InvalidMarketConfigError


class MarketType(Enum):
    """Terminal price model of a market"""
    FIXED_ACCRUAL = 0  # End price compounds from the yield-bearing token spot price
    LINEAR_DECAY = 1   # End price decays linearly from initial_end_price to start_price

    @classmethod
    def from_tag(cls, tag: int) -> "MarketType":
        try:
            return cls(int(tag))
        except ValueError:
            raise InvalidMarketConfigError(f"Unknown market type tag: {tag}")


@dataclass(frozen=True)
class PoolConfig:
    """Bonding curve parameters of the PT/YT pool"""
    initial_concentration: Decimal
    maturity_concentration: Decimal  # 0 keeps the concentration flat


@dataclass(frozen=True)
class MarketConfig:
    """
    On-chain market configuration at snapshot time.
    Prices are raw integers scaled by price_base.
    """
    market_type: MarketType
    start_time: int
    end_time: int
    start_price: int
    initial_end_price: int
    price_base: int
    compounding_period: int  # 0 = epoch compounding, >0 = seconds per period
    update_skip_time: int
    last_update_time: int
    last_update_epoch: int
    start_epoch: int
    market_apy: int  # Last persisted values, used when no refresh applies
    market_sol_price: int
    market_end_price: int
    pool_config: PoolConfig

    @property
    def market_duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class ChainClock:
    """Clock sysvar values"""
    solana_timestamp: int
    epoch: int
    epoch_start_timestamp: int


@dataclass(frozen=True)
class PoolReserves:
    """Pool token account balances and LP mint supply, in pool units"""
    pt_pool_amount: Decimal
    yt_pool_amount: Decimal
    lp_supply_amount: Decimal


@dataclass(frozen=True)
class SpotQuote:
    """
    Oracle quotes for a market's underlying.

    ybt_price is the yield-bearing token priced in the base asset and drives
    the yield curve; base_price converts the base asset to USD.
    """
    ybt_price: Decimal
    base_price: Decimal

    @classmethod
    def unavailable(cls) -> "SpotQuote":
        return cls(ybt_price=ZERO, base_price=ZERO)

    @classmethod
    def unit(cls) -> "SpotQuote":
        return cls(ybt_price=ONE, base_price=ONE)

    @property
    def is_available(self) -> bool:
        return self.ybt_price > ZERO and self.base_price > ZERO


@dataclass(frozen=True)
class MarketState:
    """Decoded market account with the addresses the monitor reads"""
    market_id: str
    config: MarketConfig
    sy_mint: str
    pt_mint: str
    yt_mint: str
    lp_mint: str
    pool_pt_token_account: str
    pool_yt_token_account: str


@dataclass(frozen=True)
class StakeRecord:
    """Staked position of one wallet in one market (raw amounts)"""
    market_id: str
    user_address: str
    stake_pt_amount: int
    stake_yt_amount: int
    stake_lp_amount: int

    @property
    def is_empty(self) -> bool:
        return self.stake_pt_amount == 0 and self.stake_yt_amount == 0 and self.stake_lp_amount == 0


@dataclass(frozen=True)
class TokenHolding:
    """Token account balance (raw amount)"""
    owner: str
    mint: str
    amount: int


@dataclass(frozen=True)
class MarketData:
    """Everything read from chain for one market valuation"""
    mint_decimals: int
    reserves: PoolReserves
    clock: ChainClock


@dataclass(frozen=True)
class MarketCurve:
    """Yield curve output"""
    market_apy: Decimal
    market_end_price: Decimal
    market_sol_price: Decimal


@dataclass(frozen=True)
class TokenPrices:
    """Fundamental PT/YT prices relative to the underlying"""
    pt_price: Decimal
    yt_price: Decimal


@dataclass(frozen=True)
class PoolPrice:
    """Bonding-curve implied trade prices"""
    pool_price: Decimal
    pool_pt_price: Decimal
    pool_yt_price: Decimal


@dataclass(frozen=True)
class LpRates:
    """PT/YT backing per LP token"""
    lp_pt_rate: Decimal
    lp_yt_rate: Decimal


@dataclass(frozen=True)
class MarketValue:
    """Full valuation of one market snapshot"""
    curve: MarketCurve
    token_prices: TokenPrices
    concentration: Decimal
    pool_price: PoolPrice
    pt_token_price: Decimal  # pool PT price in USD
    yt_token_price: Decimal
    lp_rates: LpRates
    mint_decimals: int


@dataclass
class WalletPosition:
    """Human-scaled holdings of one wallet in one market"""
    wallet_address: str
    pt_amount: Decimal = ZERO
    yt_amount: Decimal = ZERO
    lp_amount: Decimal = ZERO
    lp_pt_amount: Decimal = ZERO
    lp_yt_amount: Decimal = ZERO

    def to_dict(self) -> Dict[str, str]:
        return {
            "walletAddress": self.wallet_address,
            "ptAmount": str(self.pt_amount),
            "ytAmount": str(self.yt_amount),
            "lpAmount": str(self.lp_amount),
            "lpPtAmount": str(self.lp_pt_amount),
            "lpYtAmount": str(self.lp_yt_amount),
        }


@dataclass
class MarketSnapshot:
    """Per-market output row of the snapshot flow"""
    market_id: str
    pt_price: Decimal
    yt_price: Decimal
    accounts: list = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "marketId": self.market_id,
            "ptPrice": str(self.pt_price),
            "ytPrice": str(self.yt_price),
            "accounts": [account.to_dict() for account in self.accounts],
        }


@dataclass
class UserMarketPosition:
    """Per-market output row of the single-wallet flow"""
    market_id: str
    pt_price: Decimal
    yt_price: Decimal
    position: WalletPosition

    def to_dict(self) -> Dict:
        return {
            "marketId": self.market_id,
            "ptPrice": str(self.pt_price),
            "ytPrice": str(self.yt_price),
            **self.position.to_dict(),
        }
