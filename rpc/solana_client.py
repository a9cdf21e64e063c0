import base64
import logging
from itertools import count
from typing import Any, Dict, List, Optional

from config.networks import RPC_URLS, RPC_COMMITMENT, DEFAULT_NETWORK
from sandglass.errors import SandglassError
from utils.retry import APIRetry

"""
Minimal Solana JSON-RPC client.
Reads accounts over HTTP; SPL token, mint and clock accounts are requested
jsonParsed so no binary layout handling is needed for them.
"""

logger = logging.getLogger(__name__)

# getMultipleAccounts accepts at most 100 keys per call
MAX_MULTIPLE_ACCOUNTS = 100


class RpcError(SandglassError):
    """JSON-RPC error payload returned by the node"""

    def __init__(self, method: str, error: Dict[str, Any]):
        self.method = method
        self.code = error.get("code")
        super().__init__(f"{method} failed ({self.code}): {error.get('message')}")


class SolanaRpcClient:
    """
    JSON-RPC reader for a Solana-compatible network.
    """

    def __init__(self, network: str = DEFAULT_NETWORK, rpc_url: str = None, commitment: str = RPC_COMMITMENT):
        self.network = network
        self.rpc_url = rpc_url or RPC_URLS[network]
        self.commitment = commitment
        self._ids = count(1)

    def _request(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        response = APIRetry.post(self.rpc_url, json=payload)
        data = response.json()

        if "error" in data:
            raise RpcError(method, data["error"])
        return data["result"]

    def get_account_info(self, pubkey: str, encoding: str = "jsonParsed") -> Optional[Dict[str, Any]]:
        """
        Fetch one account.

        Returns:
            Account dict (lamports, owner, data, ...) or None if it does not exist
        """
        result = self._request(
            "getAccountInfo",
            [pubkey, {"encoding": encoding, "commitment": self.commitment}]
        )
        return result["value"]

    def get_multiple_accounts(self, pubkeys: List[str], encoding: str = "jsonParsed") -> Dict[str, Optional[Dict[str, Any]]]:
        """
        Fetch several accounts in as few calls as possible.

        Returns:
            Mapping pubkey -> account (None for missing accounts)
        """
        accounts = {}
        for start in range(0, len(pubkeys), MAX_MULTIPLE_ACCOUNTS):
            batch = pubkeys[start:start + MAX_MULTIPLE_ACCOUNTS]
            result = self._request(
                "getMultipleAccounts",
                [batch, {"encoding": encoding, "commitment": self.commitment}]
            )
            accounts.update(zip(batch, result["value"]))
        return accounts

    def get_program_accounts(
        self,
        program_id: str,
        data_size: int = None,
        memcmp: Dict[str, Any] = None,
        encoding: str = "base64"
    ) -> List[Dict[str, Any]]:
        """
        Fetch all accounts owned by a program matching the filters.

        Args:
            program_id: Owning program
            data_size: Exact account data length
            memcmp: {"offset": int, "bytes": base58 string}
            encoding: base64 or jsonParsed

        Returns:
            List of {"pubkey": str, "account": dict}
        """
        filters = []
        if data_size is not None:
            filters.append({"dataSize": data_size})
        if memcmp is not None:
            filters.append({"memcmp": memcmp})

        config = {"encoding": encoding, "commitment": self.commitment}
        if filters:
            config["filters"] = filters

        result = self._request("getProgramAccounts", [program_id, config])
        logger.debug(f"getProgramAccounts {program_id} {filters}: {len(result)} accounts")
        return result

    def get_token_accounts_by_owner(self, owner: str, mint: str) -> List[Dict[str, Any]]:
        """Token accounts of a wallet for one mint (jsonParsed)."""
        result = self._request(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed", "commitment": self.commitment}]
        )
        return result["value"]


def account_bytes(account: Dict[str, Any]) -> bytes:
    """Raw data of an account fetched with base64 encoding."""
    data, encoding = account["data"]
    if encoding != "base64":
        raise ValueError(f"Unsupported account encoding: {encoding}")
    return base64.b64decode(data)


def parsed_info(account: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """The `info` section of a jsonParsed account, or None."""
    if not account:
        return None
    data = account.get("data")
    if not isinstance(data, dict) or "parsed" not in data:
        return None
    return data["parsed"].get("info")
