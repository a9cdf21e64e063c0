import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from config.networks import OUTPUT_CONFIG, MARKETS_FILE, DEFAULT_NETWORK
from oracle.pyth_client import PythPriceProvider
from rpc.solana_client import SolanaRpcClient
from sandglass.balance.check_balances import ChainStateReader
from sandglass.balance_manager import SandglassBalanceManager
from sandglass.markets.market_mapper import MarketMapper

"""
Snapshot builder.
Writes the all-wallet market snapshot and per-wallet token reports as JSON.
"""

logger = logging.getLogger(__name__)


class SnapshotBuilder:
    """
    Bridges the balance manager and the JSON output files.
    """

    def __init__(self, manager: SandglassBalanceManager, output_dir: str = None):
        self.manager = manager
        self.output_dir = Path(output_dir or OUTPUT_CONFIG["directory"])

    def _write(self, filename: str, rows: List[Dict[str, Any]]) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / filename
        with open(path, 'w') as f:
            json.dump(rows, f, indent=1)
        logger.info(f"Wrote {len(rows)} rows to {path}")
        return path

    def _banner(self, title: str) -> None:
        info = self.manager.get_protocol_info()
        logger.info("=" * 80)
        logger.info(f"{info['name'].upper()} ({info['type']}, {info['chain']}) - {title}")
        logger.info(f"{datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}")
        logger.info("=" * 80)

    def build_snapshot(self) -> Path:
        """Value all markets and write every wallet's positions."""
        self._banner("BUILDING SNAPSHOT")

        snapshots = self.manager.get_snapshot()
        for snapshot in snapshots:
            logger.info(
                f"Market {snapshot.market_id}: PT {snapshot.pt_price} / YT {snapshot.yt_price}, "
                f"{len(snapshot.accounts)} wallets"
            )

        return self._write(OUTPUT_CONFIG["snapshot_filename"], [s.to_dict() for s in snapshots])

    def build_user_tokens(self, wallet_address: str) -> Path:
        """Value all markets and write one wallet's positions."""
        self._banner(f"BUILDING USER TOKENS FOR {wallet_address}")

        rows = self.manager.get_balances(wallet_address)
        filename = f"{OUTPUT_CONFIG['user_tokens_prefix']}{wallet_address}.json"
        return self._write(filename, rows)


def build_manager(rpc_url: str = None, markets_file: str = None, network: str = DEFAULT_NETWORK) -> SandglassBalanceManager:
    client = SolanaRpcClient(network=network, rpc_url=rpc_url)
    return SandglassBalanceManager(
        reader=ChainStateReader(client),
        markets=MarketMapper(markets_file or MARKETS_FILE),
        prices=PythPriceProvider(network=network),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sandglass PT/YT position snapshot")
    parser.add_argument("--rpc-url", help="RPC endpoint (defaults to the configured network)")
    parser.add_argument("--markets", help="Decoded markets JSON export")
    parser.add_argument("--output-dir", help="Directory for output files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("snapshot", help="All wallets in all markets")
    user_parser = subparsers.add_parser("user", help="One wallet in all markets")
    user_parser.add_argument("wallet", help="Wallet address")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """
    CLI entry point.
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    manager = build_manager(rpc_url=args.rpc_url, markets_file=args.markets)
    builder = SnapshotBuilder(manager, output_dir=args.output_dir)

    if args.command == "snapshot":
        builder.build_snapshot()
    else:
        builder.build_user_tokens(args.wallet)


if __name__ == "__main__":
    main()
