from decimal import Decimal

import pytest

from config.networks import PROGRAM_IDS
from sandglass.balance.check_balances import ChainStateReader, parse_clock
from sandglass.errors import SandglassError
from tests.conftest import make_market

CLOCK_INFO = {"unixTimestamp": 1_700_000_100, "epoch": 500, "epochStartTimestamp": 1_699_990_000}


def parsed(info):
    return {"data": {"program": "spl-token-2022", "parsed": {"info": info}}}


def token_account(owner, mint, amount):
    return {"pubkey": f"{owner}-{mint}", "account": parsed({
        "owner": owner,
        "mint": mint,
        "tokenAmount": {"amount": str(amount), "decimals": 6},
    })}


class FakeClient:
    """Records calls and answers from canned accounts"""

    def __init__(self, accounts=None, program_accounts=None, owner_accounts=None):
        self.accounts = accounts or {}
        self.program_accounts = program_accounts or {}
        self.owner_accounts = owner_accounts or {}
        self.program_calls = []

    def get_multiple_accounts(self, pubkeys, encoding="jsonParsed"):
        return {key: self.accounts.get(key) for key in pubkeys}

    def get_program_accounts(self, program_id, data_size=None, memcmp=None, encoding="base64"):
        self.program_calls.append((program_id, data_size, memcmp["bytes"], encoding))
        return self.program_accounts.get(data_size, [])

    def get_token_accounts_by_owner(self, owner, mint):
        return self.owner_accounts.get((owner, mint), [])


def market_accounts(**missing):
    accounts = {
        "pt-mint": parsed({"decimals": 9, "supply": "5000"}),
        "lp-mint": parsed({"decimals": 9, "supply": "2000"}),
        "pool-pt": parsed({"tokenAmount": {"amount": "1200"}}),
        "pool-yt": parsed({"tokenAmount": {"amount": "800"}}),
        PROGRAM_IDS["sysvar_clock"]: parsed(CLOCK_INFO),
    }
    for key in missing:
        accounts.pop(key.replace("_", "-"), None)
    return accounts


class TestMarketData:

    def test_reads_decimals_reserves_and_clock(self):
        reader = ChainStateReader(FakeClient(market_accounts()))

        data = reader.get_market_data(make_market())

        assert data.mint_decimals == 9
        assert data.reserves.pt_pool_amount == Decimal(1200)
        assert data.reserves.yt_pool_amount == Decimal(800)
        assert data.reserves.lp_supply_amount == Decimal(2000)
        assert data.clock.solana_timestamp == 1_700_000_100
        assert data.clock.epoch == 500

    def test_missing_pool_accounts_read_as_zero(self):
        reader = ChainStateReader(FakeClient(market_accounts(pool_pt=True, pool_yt=True)))

        reserves = reader.get_market_data(make_market()).reserves

        assert reserves.pt_pool_amount == Decimal(0)
        assert reserves.yt_pool_amount == Decimal(0)

    def test_missing_clock_raises(self):
        accounts = market_accounts()
        accounts.pop(PROGRAM_IDS["sysvar_clock"])
        reader = ChainStateReader(FakeClient(accounts))

        with pytest.raises(SandglassError):
            reader.get_market_data(make_market())


def test_parse_clock_accepts_strings():
    clock = parse_clock({"unixTimestamp": "10", "epoch": "2", "epochStartTimestamp": "5"})
    assert (clock.solana_timestamp, clock.epoch, clock.epoch_start_timestamp) == (10, 2, 5)


def test_token_holdings_cover_both_account_sizes():
    client = FakeClient(program_accounts={
        165: [token_account("alice", "pt-mint", 10), token_account("empty", "pt-mint", 0)],
        170: [token_account("bob", "pt-mint", 20)],
    })
    reader = ChainStateReader(client)

    holdings = reader.get_token_holdings("pt-mint")

    assert [(h.owner, h.amount) for h in holdings] == [("alice", 10), ("bob", 20)]
    assert [call[1] for call in client.program_calls] == [165, 170]
    assert all(call[0] == PROGRAM_IDS["token_2022"] for call in client.program_calls)
    assert all(call[2] == "pt-mint" and call[3] == "jsonParsed" for call in client.program_calls)


def test_wallet_amount_sums_token_accounts():
    client = FakeClient(owner_accounts={
        ("alice", "yt-mint"): [token_account("alice", "yt-mint", 7), token_account("alice", "yt-mint", 3)],
    })
    reader = ChainStateReader(client)

    holding = reader.get_wallet_amount("alice", "yt-mint")

    assert holding.amount == 10
    assert holding.mint == "yt-mint"
    assert reader.get_wallet_amount("alice", "pt-mint") is None
