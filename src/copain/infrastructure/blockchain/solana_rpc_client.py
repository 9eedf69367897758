"""
Solana JSON-RPC client.

Implements the ledger transport over plain JSON-RPC with aiohttp and builds
transactions with solders. Calls are awaited one at a time; submissions are
never retried here.
"""

import asyncio
import base64
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
from solders.hash import Hash  # type: ignore
from solders.instruction import Instruction  # type: ignore
from solders.keypair import Keypair  # type: ignore
from solders.message import Message  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.transaction import Transaction  # type: ignore

from copain.domain.exceptions import (
    InsufficientFundsException,
    RPCException,
    TransactionException,
    TransactionTimeoutException,
)
from copain.domain.services.i_ledger_transport import (
    ILedgerTransport,
    LedgerAccount,
)
from copain.infrastructure.monitoring.system_reporter import SystemReporter

COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


class SolanaRPCClient(ILedgerTransport):
    """
    Solana RPC client used as the ledger transport.

    Reads and confirmation polling use the configured commitment, so a read
    issued after ``send_and_confirm`` returns observes the write.
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: str = "confirmed",
        rpc_timeout: float = 10.0,
        confirmation_timeout: float = 60.0,
        poll_interval: float = 0.5,
        reporter: Optional[SystemReporter] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize Solana RPC client.

        Args:
            rpc_url: Cluster RPC endpoint
            commitment: processed, confirmed or finalized
            rpc_timeout: Per-request HTTP timeout in seconds
            confirmation_timeout: How long to wait for a signature
            poll_interval: Delay between signature status polls
            reporter: Optional reporter
            session: Optional aiohttp session (owned by caller)
        """
        if commitment not in COMMITMENT_RANK:
            raise ValueError(f"Unknown commitment: {commitment}")

        self.rpc_url = rpc_url
        self.commitment = commitment
        self.rpc_timeout = rpc_timeout
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self.reporter = reporter or SystemReporter(name="solana_rpc", verbose=0)
        self._session = session
        self._owns_session = session is None
        self._request_id = 0

    @classmethod
    def from_settings(
        cls, settings, rpc_url: str, reporter: Optional[SystemReporter] = None
    ) -> "SolanaRPCClient":
        """Build client from CopainConfig."""
        return cls(
            rpc_url=rpc_url,
            commitment=settings.commitment,
            rpc_timeout=settings.timeouts.rpc_call,
            confirmation_timeout=settings.timeouts.transaction_confirmation,
            poll_interval=settings.timeouts.poll_interval,
            reporter=reporter,
        )

    # ================================================================
    # Raw RPC
    # ================================================================

    async def call_rpc(
        self,
        method: str,
        params: Optional[list] = None,
    ) -> Any:
        """
        Call Solana RPC method.

        Args:
            method: RPC method name
            params: Optional method parameters

        Returns:
            ``result`` member of the RPC response

        Raises:
            RPCException: On connection error, timeout or RPC error
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        session = self._get_session()
        try:
            async with session.post(
                self.rpc_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.rpc_timeout),
            ) as response:
                response.raise_for_status()
                data = await response.json()
        except aiohttp.ClientError as e:
            raise RPCException(
                f"RPC connection error: {str(e)}",
                details={"method": method},
            )
        except asyncio.TimeoutError:
            raise RPCException(
                f"RPC timeout: {method}",
                details={"method": method, "timeout": self.rpc_timeout},
            )

        if "error" in data:
            raise RPCException(
                f"RPC error: {data['error']}",
                details={"method": method, "error": data["error"]},
            )

        return data.get("result")

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    # ================================================================
    # Reads
    # ================================================================

    async def get_account_info(self, address: Pubkey) -> Optional[LedgerAccount]:
        """
        Fetch account data.

        Args:
            address: Account address

        Returns:
            LedgerAccount, or None if the account does not exist
        """
        result = await self.call_rpc(
            "getAccountInfo",
            [
                str(address),
                {"encoding": "base64", "commitment": self.commitment},
            ],
        )
        value = (result or {}).get("value")
        if value is None:
            return None

        data_field = value.get("data") or ["", "base64"]
        raw = base64.b64decode(data_field[0]) if data_field[0] else b""

        return LedgerAccount(
            address=address,
            data=raw,
            lamports=value.get("lamports", 0),
            owner=Pubkey.from_string(value["owner"]),
            executable=bool(value.get("executable", False)),
        )

    async def get_balance(self, address: Pubkey) -> int:
        """
        Get account balance.

        Args:
            address: Account address

        Returns:
            Balance in lamports
        """
        result = await self.call_rpc(
            "getBalance", [str(address), {"commitment": self.commitment}]
        )
        return (result or {}).get("value", 0)

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Minimum balance for a rent-exempt account of ``size`` bytes."""
        result = await self.call_rpc(
            "getMinimumBalanceForRentExemption",
            [size, {"commitment": self.commitment}],
        )
        return int(result)

    async def get_version(self) -> Dict[str, Any]:
        """Cluster version information."""
        return await self.call_rpc("getVersion") or {}

    async def get_latest_blockhash(self) -> Hash:
        """Latest blockhash at the configured commitment."""
        result = await self.call_rpc(
            "getLatestBlockhash", [{"commitment": self.commitment}]
        )
        return Hash.from_string(result["value"]["blockhash"])

    # ================================================================
    # Writes
    # ================================================================

    async def request_airdrop(self, address: Pubkey, lamports: int) -> str:
        """
        Request an airdrop.

        Args:
            address: Recipient
            lamports: Amount

        Returns:
            Airdrop transaction signature
        """
        return await self.call_rpc(
            "requestAirdrop",
            [str(address), lamports, {"commitment": self.commitment}],
        )

    async def send_and_confirm(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair],
    ) -> str:
        """
        Sign, submit and confirm one transaction.

        Args:
            instructions: Instructions of the transaction
            signers: Signing keypairs; the first one pays fees

        Returns:
            Transaction signature
        """
        if not signers:
            raise ValueError("At least one signer is required")

        blockhash = await self.get_latest_blockhash()
        message = Message.new_with_blockhash(
            list(instructions), signers[0].pubkey(), blockhash
        )
        transaction = Transaction(list(signers), message, blockhash)
        encoded = base64.b64encode(bytes(transaction)).decode("utf-8")

        try:
            signature = await self.call_rpc(
                "sendTransaction",
                [
                    encoded,
                    {"encoding": "base64", "preflightCommitment": self.commitment},
                ],
            )
        except RPCException as e:
            error = e.details.get("error")
            if error is None:
                raise
            raise _transaction_error(error, method="sendTransaction") from e

        self.reporter.debug(f"Submitted transaction {signature}", context="RPC")
        await self.confirm_transaction(signature)
        return signature

    async def confirm_transaction(self, signature: str) -> bool:
        """
        Wait for transaction confirmation.

        Args:
            signature: Transaction signature

        Returns:
            True once the configured commitment is reached

        Raises:
            TransactionException: If the transaction failed on-chain
            TransactionTimeoutException: If confirmation times out
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.confirmation_timeout
        wanted = COMMITMENT_RANK[self.commitment]

        while loop.time() < deadline:
            try:
                result = await self.call_rpc(
                    "getSignatureStatuses",
                    [[signature], {"searchTransactionHistory": True}],
                )
            except RPCException as e:
                self.reporter.debug(
                    f"Status poll failed for {signature}: {e.message}",
                    context="RPC",
                )
                await asyncio.sleep(self.poll_interval)
                continue

            statuses: List[Optional[dict]] = (result or {}).get("value") or []
            status = statuses[0] if statuses else None
            if status:
                if status.get("err") is not None:
                    raise TransactionException(
                        f"Transaction {signature} failed: {status['err']}",
                        details={"signature": signature, "error": status["err"]},
                    )
                reached = COMMITMENT_RANK.get(status.get("confirmationStatus"), -1)
                if reached >= wanted:
                    return True

            await asyncio.sleep(self.poll_interval)

        raise TransactionTimeoutException(
            f"Transaction confirmation timeout: {signature}",
            details={"signature": signature, "timeout": self.confirmation_timeout},
        )


def _transaction_error(error: Any, method: str) -> TransactionException:
    """Map an RPC error object from sendTransaction to a domain exception."""
    text = str(error)
    details = {"method": method, "error": error}
    if "insufficient" in text.lower() or "InsufficientFundsForFee" in text:
        return InsufficientFundsException(
            f"Insufficient funds: {text}", details=details
        )
    return TransactionException(f"Transaction rejected: {text}", details=details)
