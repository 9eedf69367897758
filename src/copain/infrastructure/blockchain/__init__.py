"""
Blockchain infrastructure.
"""

from copain.infrastructure.blockchain.solana_rpc_client import SolanaRPCClient
from copain.infrastructure.blockchain.state_reader import StateReader

__all__ = [
    "SolanaRPCClient",
    "StateReader",
]
