"""
Blockchain-related exceptions.

Raised by the ledger transport. The protocol layer wraps them into
social graph errors before they reach callers.
"""

from typing import Optional

from copain.domain.exceptions.base import CopainException


class BlockchainException(CopainException):
    """Base exception for ledger operations."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, details=details)


class RPCException(BlockchainException):
    """RPC call failed."""


class TransactionException(BlockchainException):
    """Transaction was rejected or failed on-chain."""


class TransactionTimeoutException(TransactionException):
    """Transaction confirmation timeout."""


class InsufficientFundsException(TransactionException):
    """Insufficient funds for operation."""


class ProgramNotDeployedError(BlockchainException):
    """Social program is missing or not executable on the cluster."""


class KeypairLoadError(CopainException):
    """Keypair file could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Failed to load keypair at '{path}': {reason}",
            code="KEYPAIR_LOAD_ERROR",
            details={"path": path},
        )
        self.path = path
