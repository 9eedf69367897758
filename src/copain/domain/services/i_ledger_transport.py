"""
Ledger transport interface.

Defines the contract the protocol layer needs from a Solana cluster.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from solders.instruction import Instruction  # type: ignore
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore


@dataclass(frozen=True)
class LedgerAccount:
    """
    Raw account as returned by the ledger.

    Attributes:
        address: Account address
        data: Raw account data
        lamports: Account balance
        owner: Owning program
        executable: Whether the account holds a program
    """

    address: Pubkey
    data: bytes
    lamports: int
    owner: Pubkey
    executable: bool = False


class ILedgerTransport(ABC):
    """
    Interface for reading and writing ledger state.

    Clean Architecture: Domain layer defines interface,
    Infrastructure layer implements concrete RPC access.
    """

    @abstractmethod
    async def get_account_info(self, address: Pubkey) -> Optional[LedgerAccount]:
        """
        Fetch an account.

        Args:
            address: Account address

        Returns:
            LedgerAccount, or None if no account exists

        Raises:
            RPCException: If the query fails
        """

    @abstractmethod
    async def send_and_confirm(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair],
    ) -> str:
        """
        Submit one atomic transaction and wait for confirmation.

        The first signer pays fees.

        Args:
            instructions: Instructions of the transaction
            signers: Signing keypairs

        Returns:
            Transaction signature

        Raises:
            TransactionException: If rejected or failed on-chain
            TransactionTimeoutException: If confirmation does not arrive
            RPCException: On transport failure
        """

    @abstractmethod
    async def confirm_transaction(self, signature: str) -> bool:
        """
        Wait until a signature reaches the configured commitment.

        Raises:
            TransactionException: If the transaction failed
            TransactionTimeoutException: If confirmation times out
        """

    @abstractmethod
    async def get_balance(self, address: Pubkey) -> int:
        """Balance in lamports."""

    @abstractmethod
    async def request_airdrop(self, address: Pubkey, lamports: int) -> str:
        """Request an airdrop and return its signature."""

    @abstractmethod
    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Minimum lamports for a rent-exempt account of ``size`` bytes."""

    @abstractmethod
    async def get_version(self) -> Dict[str, Any]:
        """Cluster version information."""

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
