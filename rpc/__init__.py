"""
Solana JSON-RPC access for the Sandglass monitor.
"""

from .solana_client import SolanaRpcClient, RpcError, account_bytes, parsed_info

__all__ = ['SolanaRpcClient', 'RpcError', 'account_bytes', 'parsed_info']
