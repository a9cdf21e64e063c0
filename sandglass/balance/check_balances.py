import logging
from decimal import Decimal
from typing import Dict, List, Optional

from config.networks import PROGRAM_IDS, ACCOUNT_SIZES
from rpc.solana_client import SolanaRpcClient, parsed_info
from sandglass.errors import SandglassError
from sandglass.fixed_point import ZERO
from sandglass.models import ChainClock, MarketData, MarketState, PoolReserves, TokenHolding

logger = logging.getLogger(__name__)

# Mint is the first field of an SPL token account
TOKEN_ACCOUNT_MINT_OFFSET = 0


class ChainStateReader:
    """
    Reads the chain state a market valuation needs:
    - PT mint decimals and LP mint supply
    - pool PT/YT token account balances
    - the clock sysvar
    - token holders per mint and a wallet's balance per mint
    """

    def __init__(self, client: SolanaRpcClient):
        self.client = client

    def get_market_data(self, market: MarketState) -> MarketData:
        """
        Fetch mint, pool and clock accounts for one market in a single call.

        Missing accounts read as zero.
        """
        clock_address = PROGRAM_IDS["sysvar_clock"]
        accounts = self.client.get_multiple_accounts([
            market.pt_mint,
            market.lp_mint,
            market.pool_pt_token_account,
            market.pool_yt_token_account,
            clock_address,
        ])

        pt_mint = parsed_info(accounts.get(market.pt_mint))
        lp_mint = parsed_info(accounts.get(market.lp_mint))
        pool_pt = parsed_info(accounts.get(market.pool_pt_token_account))
        pool_yt = parsed_info(accounts.get(market.pool_yt_token_account))
        clock = parsed_info(accounts.get(clock_address))

        if pt_mint is None:
            logger.warning(f"PT mint {market.pt_mint} not found for market {market.market_id}")
        if clock is None:
            raise SandglassError(f"Clock sysvar {clock_address} could not be read")

        reserves = PoolReserves(
            pt_pool_amount=_token_amount(pool_pt),
            yt_pool_amount=_token_amount(pool_yt),
            lp_supply_amount=Decimal(lp_mint["supply"]) if lp_mint else ZERO,
        )

        return MarketData(
            mint_decimals=int(pt_mint["decimals"]) if pt_mint else 0,
            reserves=reserves,
            clock=parse_clock(clock),
        )

    def get_token_holdings(self, mint: str) -> List[TokenHolding]:
        """
        All non-empty Token-2022 accounts of a mint.
        """
        holdings = []
        for data_size in ACCOUNT_SIZES["token_account"]:
            accounts = self.client.get_program_accounts(
                PROGRAM_IDS["token_2022"],
                data_size=data_size,
                memcmp={"offset": TOKEN_ACCOUNT_MINT_OFFSET, "bytes": mint},
                encoding="jsonParsed",
            )
            for account in accounts:
                holding = _holding(account["account"])
                if holding is not None and holding.amount > 0:
                    holdings.append(holding)

        logger.info(f"Found {len(holdings)} holders of {mint}")
        return holdings

    def get_wallet_amount(self, wallet_address: str, mint: str) -> Optional[TokenHolding]:
        """
        Balance of a wallet for one mint, summed over its token accounts.

        Returns:
            None when the wallet has no token account for the mint
        """
        accounts = self.client.get_token_accounts_by_owner(wallet_address, mint)
        holdings = [h for h in (_holding(a["account"]) for a in accounts) if h is not None]
        if not holdings:
            return None

        return TokenHolding(
            owner=wallet_address,
            mint=mint,
            amount=sum(h.amount for h in holdings),
        )


def parse_clock(info: Dict) -> ChainClock:
    return ChainClock(
        solana_timestamp=int(info["unixTimestamp"]),
        epoch=int(info["epoch"]),
        epoch_start_timestamp=int(info["epochStartTimestamp"]),
    )


def _token_amount(info: Optional[Dict]) -> Decimal:
    if not info:
        return ZERO
    return Decimal(info["tokenAmount"]["amount"])


def _holding(account: Dict) -> Optional[TokenHolding]:
    info = parsed_info(account)
    if not info:
        return None
    return TokenHolding(
        owner=info["owner"],
        mint=info["mint"],
        amount=int(info["tokenAmount"]["amount"]),
    )
