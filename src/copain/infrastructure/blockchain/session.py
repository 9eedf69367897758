"""
Social session bootstrap.

Connects to the cluster, checks that the social program is deployed, and
prepares the paying identity (keypair, state account, fee balance) before
any friend operation runs.
"""

import os
from typing import Optional

from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.system_program import (  # type: ignore
    CreateAccountWithSeedParams,
    create_account_with_seed,
)

from copain.application.use_cases.get_online_friends import GetOnlineFriends
from copain.application.use_cases.mutation_engine import MutationEngine
from copain.config.settings import CopainConfig
from copain.domain.exceptions import (
    ConfigurationError,
    InsufficientFundsException,
    KeypairLoadError,
    ProgramNotDeployedError,
    RPCException,
)
from copain.domain.services.i_ledger_transport import ILedgerTransport
from copain.domain.value_objects.identity import Identity
from copain.infrastructure.blockchain.solana_rpc_client import SolanaRPCClient
from copain.infrastructure.blockchain.state_reader import StateReader
from copain.infrastructure.monitoring.system_reporter import SystemReporter
from copain.infrastructure.wallet.keypair_loader import (
    load_keypair,
    read_cli_config,
    resolve_payer_path,
)

LAMPORTS_PER_SOL = 1_000_000_000


def resolve_program_id(settings: CopainConfig) -> Pubkey:
    """
    Determine the social program identity.

    The configured program id wins, then the program keypair written by the
    program build.

    Args:
        settings: Copain configuration

    Returns:
        Program identity

    Raises:
        InvalidIdentityError: If the configured program id is malformed
        ProgramNotDeployedError: If no program id is configured and the
            program keypair cannot be read
    """
    if settings.program_id:
        return Identity(settings.program_id).to_pubkey()

    path = settings.program_keypair_path
    try:
        return load_keypair(path).pubkey()
    except KeypairLoadError as e:
        raise ProgramNotDeployedError(
            f"Failed to read program keypair at '{path}' due to error: "
            f"{e.message}. Program may need to be deployed with "
            f"`solana program deploy {settings.program_so_path}`",
            details={"path": path},
        ) from e


class SocialSession:
    """
    Wires transport, reader and use cases for one client invocation.

    Usage:
        async with SocialSession(settings) as session:
            engine = session.mutation_engine()
            await engine.add_friend(target)
    """

    def __init__(
        self,
        settings: CopainConfig,
        reporter: Optional[SystemReporter] = None,
        transport: Optional[ILedgerTransport] = None,
        payer: Optional[Keypair] = None,
        cli_config: Optional[dict] = None,
        require_payer: bool = True,
    ):
        """
        Initialize session.

        Args:
            settings: Copain configuration
            reporter: Optional reporter (built from settings if omitted)
            transport: Optional ledger transport (RPC client if omitted)
            payer: Optional payer keypair (loaded from config if omitted)
            cli_config: Parsed Solana CLI config (read from disk if omitted)
            require_payer: Skip payer setup for read-only invocations
        """
        self.settings = settings
        self.reporter = reporter or SystemReporter.from_settings(settings)
        self.cli_config = cli_config if cli_config is not None else read_cli_config()
        self.rpc_url = settings.resolve_rpc_url(self.cli_config)
        self.transport = transport or SolanaRPCClient.from_settings(
            settings, self.rpc_url, reporter=self.reporter
        )
        self.payer = payer
        self.require_payer = require_payer
        self.program_id: Optional[Pubkey] = None
        self.reader: Optional[StateReader] = None

    async def __aenter__(self) -> "SocialSession":
        try:
            await self.establish_connection()
            await self.check_program()
            if self.require_payer:
                await self.establish_payer()
        except BaseException:
            await self.transport.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.transport.close()

    # ================================================================
    # Bootstrap steps
    # ================================================================

    async def establish_connection(self) -> None:
        """Establish a connection to the cluster."""
        version = await self.transport.get_version()
        self.reporter.info(
            f"Connection to cluster established: {self.rpc_url} {version}",
            context="Session",
        )

    async def check_program(self) -> Pubkey:
        """
        Check that the social program has been deployed.

        Returns:
            Program identity

        Raises:
            ProgramNotDeployedError: If missing or not executable
        """
        program_id = resolve_program_id(self.settings)

        program_info = await self.transport.get_account_info(program_id)
        if program_info is None:
            if os.path.exists(self.settings.program_so_path):
                hint = (
                    "Program needs to be deployed with `solana program deploy "
                    f"{self.settings.program_so_path}`"
                )
            else:
                hint = "Program needs to be built and deployed"
            raise ProgramNotDeployedError(
                f"{hint} (program {program_id})",
                details={"program_id": str(program_id)},
            )
        if not program_info.executable:
            raise ProgramNotDeployedError(
                f"Program {program_id} is not executable",
                details={"program_id": str(program_id)},
            )

        self.program_id = program_id
        self.reader = StateReader(self.transport, program_id, self.settings.state_seed)
        self.reporter.info(f"Using program {program_id}", context="Session")
        return program_id

    async def establish_payer(self) -> Keypair:
        """
        Establish an account to pay for everything.

        Loads the payer keypair, tops up its balance to cover fees (and the
        state account rent when the account is missing), then creates the
        payer's state account if it does not exist yet.

        Returns:
            Payer keypair
        """
        if self.reader is None:
            raise ConfigurationError("check_program must run before establish_payer")

        if self.payer is None:
            self.payer = self._load_payer()

        state_address = self.reader.address_of(self.payer.pubkey())
        state_account = await self.transport.get_account_info(state_address)

        fees = self.settings.lamports_per_signature * self.settings.fee_signature_budget
        rent = 0
        if state_account is None:
            rent = await self.transport.get_minimum_balance_for_rent_exemption(
                self.settings.user_state_size
            )
            fees += rent

        lamports = await self._ensure_balance(fees)

        if state_account is None:
            await self._create_state_account(state_address, rent)

        self.reporter.info(
            f"Using account {self.payer.pubkey()} containing "
            f"{lamports / LAMPORTS_PER_SOL} SOL to pay for fees",
            context="Session",
        )
        return self.payer

    # ================================================================
    # Factories
    # ================================================================

    def mutation_engine(self) -> MutationEngine:
        """Mutation engine signing with the session payer."""
        if self.payer is None or self.program_id is None:
            raise ConfigurationError("Session has no payer; enter it with require_payer")
        return MutationEngine(
            transport=self.transport,
            payer=self.payer,
            program_id=self.program_id,
            reader=self.reader,
            reporter=self.reporter,
        )

    def online_friends_query(self) -> GetOnlineFriends:
        """Online friends query, bound to the payer when one is set."""
        if self.reader is None:
            raise ConfigurationError("Session is not connected")
        engine = self.mutation_engine() if self.payer is not None else None
        return GetOnlineFriends(reader=self.reader, engine=engine)

    # ================================================================
    # Helpers
    # ================================================================

    def _load_payer(self) -> Keypair:
        path = resolve_payer_path(self.settings.keypair_path, self.cli_config)
        if path:
            try:
                return load_keypair(path)
            except KeypairLoadError as e:
                self.reporter.warning(
                    f"{e.message}, falling back to new random keypair",
                    context="Session",
                )
        else:
            self.reporter.warning(
                "No payer keypair configured, falling back to new random keypair",
                context="Session",
            )
        return Keypair()

    async def _ensure_balance(self, required: int) -> int:
        lamports = await self.transport.get_balance(self.payer.pubkey())
        if lamports >= required:
            return lamports

        shortfall = required - lamports
        self.reporter.info(
            f"Requesting airdrop of {shortfall} lamports", context="Session"
        )
        try:
            signature = await self.transport.request_airdrop(
                self.payer.pubkey(), shortfall
            )
            await self.transport.confirm_transaction(signature)
        except RPCException as e:
            raise InsufficientFundsException(
                f"Balance {lamports} below required {required} and airdrop "
                f"failed: {e.message}",
                details={"required": required, "balance": lamports},
            ) from e
        return await self.transport.get_balance(self.payer.pubkey())

    async def _create_state_account(self, state_address: Pubkey, lamports: int) -> None:
        self.reporter.info(
            f"Creating user state account {state_address} for payer",
            context="Session",
        )
        instruction = create_account_with_seed(
            CreateAccountWithSeedParams(
                from_pubkey=self.payer.pubkey(),
                to_pubkey=state_address,
                base=self.payer.pubkey(),
                seed=self.settings.state_seed,
                lamports=lamports,
                space=self.settings.user_state_size,
                owner=self.program_id,
            )
        )
        await self.transport.send_and_confirm([instruction], [self.payer])
