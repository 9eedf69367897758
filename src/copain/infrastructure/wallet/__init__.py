"""
Wallet infrastructure.
"""

from copain.infrastructure.wallet.keypair_loader import (
    load_keypair,
    read_cli_config,
    resolve_payer_path,
    resolve_target,
)

__all__ = [
    "load_keypair",
    "read_cli_config",
    "resolve_payer_path",
    "resolve_target",
]
