"""
Sandglass balance manager.
Values every market and the PT/YT/LP positions held or staked in it.
"""
import logging
from typing import Any, Dict, List

from config.base_client import BaseProtocolClient
from oracle.pyth_client import SpotPriceProvider
from sandglass.balance.check_balances import ChainStateReader
from sandglass.errors import InvalidMarketConfigError
from sandglass.markets.market_mapper import MarketSource
from sandglass.models import (
    MarketSnapshot,
    MarketState,
    MarketValue,
    UserMarketPosition,
)
from sandglass.positions import PositionBook, WalletLedger
from sandglass.valuation import value_market

logger = logging.getLogger(__name__)


class SandglassBalanceManager(BaseProtocolClient):
    """
    Unified manager for Sandglass positions handling:
    - Market valuation (yield curve, PT/YT and pool prices)
    - Staked positions
    - Wallet-held PT/YT/LP balances
    """

    PROTOCOL_INFO = {
        "name": "Sandglass",
        "type": "yield-tokenization",
        "chain": "eclipse",
    }

    def __init__(self, reader: ChainStateReader, markets: MarketSource, prices: SpotPriceProvider):
        self.reader = reader
        self.markets = markets
        self.prices = prices

    def get_market_value(self, market: MarketState) -> MarketValue:
        """
        Value one market from live chain state and oracle quotes.

        Raises:
            InvalidMarketConfigError: the market configuration cannot be valued
        """
        market_data = self.reader.get_market_data(market)
        quote = self.prices.get_quote(market)

        if not quote.is_available:
            logger.warning(f"Market {market.market_id} valued without oracle quote")

        return value_market(
            market.config,
            market_data.clock,
            market_data.reserves,
            quote,
            market_data.mint_decimals,
            market_id=market.market_id,
        )

    def get_market_snapshot(self, market: MarketState) -> MarketSnapshot:
        """
        Positions of every wallet in one market.

        Staked records with nothing staked are skipped; token accounts are
        added per owner on top of their stakes.
        """
        value = self.get_market_value(market)
        book = PositionBook(value.lp_rates, value.mint_decimals)

        stakes = self.markets.get_stake_records(market.market_id)
        added = sum(1 for stake in stakes if book.add_stake(stake))
        logger.info(f"Market {market.market_id}: {added}/{len(stakes)} staked positions")

        for holding in self.reader.get_token_holdings(market.pt_mint):
            book.add_pt_holding(holding)
        for holding in self.reader.get_token_holdings(market.yt_mint):
            book.add_yt_holding(holding)
        for holding in self.reader.get_token_holdings(market.lp_mint):
            book.add_lp_holding(holding)

        return MarketSnapshot(
            market_id=market.market_id,
            pt_price=value.pt_token_price,
            yt_price=value.yt_token_price,
            accounts=book.positions(),
        )

    def get_snapshot(self) -> List[MarketSnapshot]:
        """
        Snapshot of all markets.

        A market whose configuration cannot be valued is logged and left out;
        the remaining markets are still returned.
        """
        snapshots = []
        for market in self.markets.get_markets():
            try:
                snapshots.append(self.get_market_snapshot(market))
            except InvalidMarketConfigError as e:
                logger.error(f"Skipping market {market.market_id}: {str(e)}")
        return snapshots

    def get_user_market_position(self, market: MarketState, wallet_address: str) -> UserMarketPosition:
        """Position of one wallet in one market."""
        value = self.get_market_value(market)
        ledger = WalletLedger(wallet_address, value.lp_rates, value.mint_decimals)

        ledger.add_stake(self.markets.get_stake_record(market.market_id, wallet_address))
        ledger.add_pt_holding(self.reader.get_wallet_amount(wallet_address, market.pt_mint))
        ledger.add_yt_holding(self.reader.get_wallet_amount(wallet_address, market.yt_mint))
        ledger.add_lp_holding(self.reader.get_wallet_amount(wallet_address, market.lp_mint))

        return UserMarketPosition(
            market_id=market.market_id,
            pt_price=value.pt_token_price,
            yt_price=value.yt_token_price,
            position=ledger.position,
        )

    def get_user_tokens(self, wallet_address: str) -> List[UserMarketPosition]:
        """One row per market for a single wallet."""
        rows = []
        for market in self.markets.get_markets():
            try:
                rows.append(self.get_user_market_position(market, wallet_address))
            except InvalidMarketConfigError as e:
                logger.error(f"Skipping market {market.market_id}: {str(e)}")
        return rows

    def get_balances(self, address: str) -> List[Dict[str, Any]]:
        return [row.to_dict() for row in self.get_user_tokens(address)]

    def get_protocol_info(self) -> dict:
        return dict(self.PROTOCOL_INFO)
