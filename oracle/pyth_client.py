"""
Pyth Hermes price client.
Supplies the spot quotes a Sandglass market needs for valuation.
"""
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional

from config.networks import PYTH_CONFIG, PYTH_FEEDS, ORACLE_FEEDS, DEFAULT_NETWORK
from sandglass.fixed_point import MARKET_CONTEXT
from sandglass.models import MarketState, MarketType, SpotQuote
from utils.retry import APIRetry

logger = logging.getLogger(__name__)


class SpotPriceProvider(ABC):
    """Capability injected into the balance manager to quote a market's underlying"""

    @abstractmethod
    def get_quote(self, market: MarketState) -> SpotQuote:
        pass


class PythPriceProvider(SpotPriceProvider):
    """
    Quotes FIXED_ACCRUAL markets from Pyth USD feeds.

    ybt_price = ybt_usd / base_usd and base_price = base_usd.
    Feed ids come from PYTH_FEEDS, or are looked up by symbol on Hermes.
    LINEAR_DECAY markets are quoted at 1/1 without a request, and markets
    without a configured or listed feed pair get SpotQuote.unavailable().
    """

    def __init__(self, network: str = DEFAULT_NETWORK, base_url: str = None):
        self.network = network
        self.base_url = base_url or PYTH_CONFIG["base_url"]
        self.oracle_feeds = ORACLE_FEEDS.get(network, {})
        self._resolved_feeds: Dict[str, Optional[str]] = {}

    def get_prices(self, feed_ids: List[str]) -> Dict[str, Decimal]:
        """
        Latest prices of several feeds.

        Returns:
            Mapping feed id (0x-prefixed, lower case) -> price
        """
        url = f"{self.base_url}{PYTH_CONFIG['price_path']}"
        response = APIRetry.get(url, params={"ids[]": feed_ids, "parsed": "true"})
        data = response.json()

        prices = {}
        for entry in data.get("parsed", []):
            feed_id = _normalize_feed_id(entry["id"])
            price = entry["price"]
            prices[feed_id] = Decimal(price["price"]).scaleb(int(price["expo"]))
        return prices

    def find_feed_id(self, symbol: str) -> Optional[str]:
        """
        Look up a crypto feed id by symbol (e.g. "tETH/USD").

        Returns:
            0x-prefixed feed id, or None when Hermes lists no such feed
        """
        if symbol in self._resolved_feeds:
            return self._resolved_feeds[symbol]

        url = f"{self.base_url}{PYTH_CONFIG['feeds_path']}"
        base = symbol.split("/")[0]
        response = APIRetry.get(url, params={"query": base, "asset_type": "crypto"})

        wanted = f"crypto.{symbol}".lower()
        feed_id = None
        for feed in response.json():
            if feed.get("attributes", {}).get("symbol", "").lower() == wanted:
                feed_id = _normalize_feed_id(feed["id"])
                break

        logger.info(f"Resolved Pyth feed {symbol}: {feed_id}")
        self._resolved_feeds[symbol] = feed_id
        return feed_id

    def _feed_id(self, symbol: str) -> Optional[str]:
        return PYTH_FEEDS.get(symbol) or self.find_feed_id(symbol)

    def _feed_ids(self, market: MarketState) -> Optional[Dict[str, str]]:
        feeds = self.oracle_feeds.get(market.sy_mint)
        if not feeds:
            return None

        ybt_feed = self._feed_id(feeds["ybt_feed"])
        base_feed = self._feed_id(feeds["base_feed"])
        if not ybt_feed or not base_feed:
            logger.warning(f"Pyth feed id missing for {feeds['ybt_feed']} or {feeds['base_feed']}")
            return None

        return {"ybt": _normalize_feed_id(ybt_feed), "base": _normalize_feed_id(base_feed)}

    def get_quote(self, market: MarketState) -> SpotQuote:
        if market.config.market_type == MarketType.LINEAR_DECAY:
            return SpotQuote.unit()

        feed_ids = self._feed_ids(market)
        if feed_ids is None:
            logger.warning(
                f"No oracle for SY mint {market.sy_mint} (market {market.market_id}); valuing at 0"
            )
            return SpotQuote.unavailable()

        prices = self.get_prices([feed_ids["ybt"], feed_ids["base"]])
        ybt_usd = prices.get(feed_ids["ybt"])
        base_usd = prices.get(feed_ids["base"])

        if not ybt_usd or not base_usd:
            logger.warning(f"Pyth returned no price for market {market.market_id}; valuing at 0")
            return SpotQuote.unavailable()

        return SpotQuote(ybt_price=MARKET_CONTEXT.divide(ybt_usd, base_usd), base_price=base_usd)


def _normalize_feed_id(feed_id: str) -> str:
    feed_id = feed_id.lower()
    return feed_id if feed_id.startswith("0x") else f"0x{feed_id}"
