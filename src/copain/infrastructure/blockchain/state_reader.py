"""
State reader.

Fetches social state accounts and decodes them. An absent account is a
normal state and reads as the empty default.
"""

from typing import Union

from solders.pubkey import Pubkey  # type: ignore

from copain.domain.entities.user_state import RecordKind, StateSnapshot, UserState
from copain.domain.services.i_ledger_transport import ILedgerTransport
from copain.domain.value_objects.identity import Identity
from copain.utils.address import SOCIAL_STATE_SEED, derive_user_state_address
from copain.utils.codec import parse_record


class StateReader:
    """Reads UserState records from the ledger. Never caches."""

    def __init__(
        self,
        transport: ILedgerTransport,
        program_id: Pubkey,
        seed: str = SOCIAL_STATE_SEED,
    ):
        """
        Initialize state reader.

        Args:
            transport: Ledger transport
            program_id: Social program identity
            seed: Derivation seed
        """
        self.transport = transport
        self.program_id = program_id
        self.seed = seed

    def address_of(self, owner: Union[Identity, Pubkey, str]) -> Pubkey:
        """Storage address of ``owner``'s state."""
        return derive_user_state_address(owner, self.program_id, self.seed)

    async def read_snapshot(self, address: Pubkey) -> StateSnapshot:
        """
        Read the record at ``address``.

        Args:
            address: Storage address

        Returns:
            StateSnapshot telling absent, empty and populated records apart
        """
        account = await self.transport.get_account_info(address)
        if account is None:
            return StateSnapshot(address, RecordKind.ABSENT, UserState.empty())

        state = parse_record(account.data)
        if state is None:
            return StateSnapshot(address, RecordKind.EMPTY, UserState.empty())

        return StateSnapshot(address, RecordKind.POPULATED, state)

    async def read(self, address: Pubkey) -> UserState:
        """Read and decode the state at ``address``."""
        snapshot = await self.read_snapshot(address)
        return snapshot.state

    async def read_own(self, owner: Union[Identity, Pubkey, str]) -> UserState:
        """Read the state belonging to ``owner``."""
        return await self.read(self.address_of(owner))
