"""
Market sources: where decoded market and staked-position records come from.

MarketMapper reads a JSON export of the Sandglass program accounts (Anchor
field names). ProgramMarketSource fetches the raw accounts over RPC and hands
them to an injected AccountDecoder.
"""
import json
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional

from config.networks import PROGRAM_IDS, ACCOUNT_SIZES
from rpc.solana_client import SolanaRpcClient, account_bytes
from sandglass.models import MarketConfig, MarketState, MarketType, PoolConfig, StakeRecord

logger = logging.getLogger(__name__)


def parse_market_config(config: Dict, pool_config: Dict) -> MarketConfig:
    """Build a MarketConfig from Anchor-style camelCase fields (ints or strings)."""
    return MarketConfig(
        market_type=MarketType.from_tag(config["marketType"]),
        start_time=int(config["startTime"]),
        end_time=int(config["endTime"]),
        start_price=int(config["startPrice"]),
        initial_end_price=int(config.get("initialEndPrice", 0)),
        price_base=int(config["priceBase"]),
        compounding_period=int(config.get("compoundingPeriod", 0)),
        update_skip_time=int(config.get("updateSkipTime", 0)),
        last_update_time=int(config.get("lastUpdateTime", 0)),
        last_update_epoch=int(config.get("lastUpdateEpoch", 0)),
        start_epoch=int(config.get("startEpoch", 0)),
        market_apy=int(config.get("marketApy", 0)),
        market_sol_price=int(config.get("marketSolPrice", 0)),
        market_end_price=int(config["marketEndPrice"]),
        pool_config=PoolConfig(
            initial_concentration=Decimal(str(pool_config["initialConcentration"])),
            maturity_concentration=Decimal(str(pool_config.get("maturityConcentration", 0))),
        ),
    )


def parse_market_state(record: Dict) -> MarketState:
    return MarketState(
        market_id=record["id"],
        config=parse_market_config(record["marketConfig"], record["poolConfig"]),
        sy_mint=record["tokenSyMintAddress"],
        pt_mint=record["tokenPtMintAddress"],
        yt_mint=record["tokenYtMintAddress"],
        lp_mint=record["tokenLpMintAddress"],
        pool_pt_token_account=record["poolPtTokenAccount"],
        pool_yt_token_account=record["poolYtTokenAccount"],
    )


def parse_stake_record(record: Dict) -> StakeRecord:
    stake_info = record.get("stakeInfo", {})
    return StakeRecord(
        market_id=record["marketAccount"],
        user_address=record["userAddress"],
        stake_pt_amount=int(stake_info.get("stakePtAmount", 0)),
        stake_yt_amount=int(stake_info.get("stakeYtAmount", 0)),
        stake_lp_amount=int(stake_info.get("stakeLpAmount", 0)),
    )


class MarketSource(ABC):
    """Supplies decoded markets and staked positions"""

    @abstractmethod
    def get_markets(self) -> List[MarketState]:
        pass

    @abstractmethod
    def get_stake_records(self, market_id: str) -> List[StakeRecord]:
        """All staked positions of a market."""
        pass

    def get_stake_record(self, market_id: str, wallet_address: str) -> Optional[StakeRecord]:
        """Staked position of one wallet in a market, or None."""
        for record in self.get_stake_records(market_id):
            if record.user_address == wallet_address:
                return record
        return None


class MarketMapper(MarketSource):
    """Markets and stakes loaded from a JSON export"""

    def __init__(self, markets_path: str):
        self.markets_path = markets_path
        self._load_markets()

    def _load_markets(self):
        """Load the export; a missing file means no markets."""
        try:
            with open(self.markets_path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"Markets file not found: {self.markets_path}")
            data = {}

        self.markets = [parse_market_state(m) for m in data.get("markets", [])]
        self.stakes: Dict[str, List[StakeRecord]] = {}
        for record in data.get("sandglassAccounts", []):
            stake = parse_stake_record(record)
            self.stakes.setdefault(stake.market_id, []).append(stake)

        logger.info(f"Loaded {len(self.markets)} markets from {self.markets_path}")

    def get_markets(self) -> List[MarketState]:
        return list(self.markets)

    def get_stake_records(self, market_id: str) -> List[StakeRecord]:
        return list(self.stakes.get(market_id, []))


class AccountDecoder(ABC):
    """Decodes raw Sandglass program accounts"""

    @abstractmethod
    def decode_market(self, pubkey: str, data: bytes) -> MarketState:
        pass

    @abstractmethod
    def decode_stake(self, data: bytes) -> StakeRecord:
        pass


class ProgramMarketSource(MarketSource):
    """
    Markets and stakes read live from the Sandglass program.
    Staked accounts are fetched once and grouped by market.
    """

    def __init__(self, client: SolanaRpcClient, decoder: AccountDecoder):
        self.client = client
        self.decoder = decoder
        self._stakes: Optional[Dict[str, List[StakeRecord]]] = None

    def get_markets(self) -> List[MarketState]:
        accounts = self.client.get_program_accounts(
            PROGRAM_IDS["sandglass"], data_size=ACCOUNT_SIZES["market"]
        )
        return [self.decoder.decode_market(a["pubkey"], account_bytes(a["account"])) for a in accounts]

    def get_stake_records(self, market_id: str) -> List[StakeRecord]:
        if self._stakes is None:
            accounts = self.client.get_program_accounts(
                PROGRAM_IDS["sandglass"], data_size=ACCOUNT_SIZES["sandglass_account"]
            )
            self._stakes = {}
            for account in accounts:
                stake = self.decoder.decode_stake(account_bytes(account["account"]))
                self._stakes.setdefault(stake.market_id, []).append(stake)
        return list(self._stakes.get(market_id, []))
