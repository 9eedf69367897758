"""
Mutation engine for friend state.

Each mutation follows the same protocol step:

1. Read the caller's state; skip submission if the operation already holds
   (friend operations only).
2. Make sure the target identity exists on the ledger.
3. Submit a single one-byte instruction and wait for confirmation.
4. Re-read the caller's state and check the expected post-condition.

Nothing is retried here. A caller that retries gets idempotent behavior
from the pre-check.
"""

from dataclasses import dataclass
from typing import Optional, Union

from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from copain.domain.entities.user_state import UserState
from copain.domain.exceptions import (
    BlockchainException,
    PostConditionFailedError,
    SubmissionFailedError,
    TargetNotFoundError,
)
from copain.domain.services.i_ledger_transport import ILedgerTransport
from copain.domain.value_objects.identity import Identity
from copain.domain.value_objects.operation import (
    AddFriend,
    Operation,
    RemoveFriend,
    SetOnline,
)
from copain.infrastructure.blockchain.state_reader import StateReader
from copain.infrastructure.monitoring.system_reporter import SystemReporter


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of a mutation.

    Attributes:
        operation: Operation that was applied
        actor: Identity that signed
        submitted: False if the pre-check found nothing to do
        signature: Transaction signature when submitted
        state: Caller's state observed after the call
    """

    operation: Operation
    actor: str
    submitted: bool
    signature: Optional[str]
    state: UserState


class MutationEngine:
    """
    Applies friend-state operations with mutate-then-verify semantics.

    Business rules:
    - AddFriend/RemoveFriend are no-ops when already satisfied
    - SetOnline is always submitted
    - Missing targets are rejected before a transaction is built
    - A confirmed transaction without the expected effect is an error
    """

    def __init__(
        self,
        transport: ILedgerTransport,
        payer: Keypair,
        program_id: Pubkey,
        reader: Optional[StateReader] = None,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize mutation engine with dependencies.

        Args:
            transport: Ledger transport
            payer: Signing keypair, also the owner of the mutated state
            program_id: Social program identity
            reader: State reader (built from transport if omitted)
            reporter: Optional reporter
        """
        self.transport = transport
        self.payer = payer
        self.program_id = program_id
        self.reader = reader or StateReader(transport, program_id)
        self.reporter = reporter or SystemReporter(name="mutation_engine", verbose=0)

    @property
    def actor(self) -> Identity:
        """Identity of the signing payer."""
        return Identity.from_pubkey(self.payer.pubkey())

    @property
    def state_address(self) -> Pubkey:
        """Payer's derived storage address."""
        return self.reader.address_of(self.payer.pubkey())

    async def get_own_state(self) -> UserState:
        """Read the payer's current state from the ledger."""
        return await self.reader.read(self.state_address)

    async def add_friend(self, target: Union[Identity, str]) -> MutationResult:
        """
        Add ``target`` to the payer's friends.

        Raises:
            TargetNotFoundError: If target has no ledger account
            SubmissionFailedError: If the transaction failed
            PostConditionFailedError: If target is absent afterwards
        """
        return await self.apply(AddFriend(_identity(target)))

    async def remove_friend(self, target: Union[Identity, str]) -> MutationResult:
        """
        Remove ``target`` from the payer's friends.

        Raises:
            TargetNotFoundError: If target has no ledger account
            SubmissionFailedError: If the transaction failed
            PostConditionFailedError: If target is still present afterwards
        """
        return await self.apply(RemoveFriend(_identity(target)))

    async def set_online(self, online: bool) -> MutationResult:
        """
        Set the payer's online flag.

        Raises:
            SubmissionFailedError: If the transaction failed
            PostConditionFailedError: If the flag did not change
        """
        return await self.apply(SetOnline(online))

    async def apply(self, operation: Operation) -> MutationResult:
        """
        Run one operation through pre-check, submit and verify.

        Args:
            operation: Operation to apply

        Returns:
            MutationResult
        """
        actor = self.actor.address
        context = operation.name

        current = await self.get_own_state()
        if operation.skip_when_satisfied and operation.is_satisfied(current):
            self.reporter.info(
                f"{operation.subject} already satisfied for {actor}, "
                f"nothing to submit",
                context=context,
            )
            return MutationResult(
                operation=operation,
                actor=actor,
                submitted=False,
                signature=None,
                state=current,
            )

        target = operation.target
        if target is not None:
            account = await self.transport.get_account_info(target.to_pubkey())
            if account is None:
                raise TargetNotFoundError(actor=actor, target=target.address)

        instruction = operation.build_instruction(
            self.program_id, self.payer.pubkey(), self.state_address
        )
        self.reporter.info(
            f"Request initiated by {actor} for {operation.subject}",
            context=context,
        )

        try:
            signature = await self.transport.send_and_confirm(
                [instruction], [self.payer]
            )
        except BlockchainException as e:
            self.reporter.error(f"Submission failed: {e.message}", context=context)
            raise SubmissionFailedError(
                actor=actor,
                target=operation.subject,
                operation=operation.name,
                cause=e,
            ) from e

        after = await self.get_own_state()
        if not operation.is_satisfied(after):
            self.reporter.error(
                f"Transaction {signature} confirmed but "
                f"{operation.expectation()} does not hold",
                context=context,
            )
            raise PostConditionFailedError(
                actor=actor,
                target=operation.subject,
                operation=operation.name,
                expected=operation.expectation(),
                signature=signature,
            )

        self.reporter.info(
            f"{operation.name} confirmed for {actor} ({signature})",
            context=context,
            verbose_level=2,
        )
        return MutationResult(
            operation=operation,
            actor=actor,
            submitted=True,
            signature=signature,
            state=after,
        )


def _identity(value: Union[Identity, str]) -> Identity:
    return value if isinstance(value, Identity) else Identity(value)
