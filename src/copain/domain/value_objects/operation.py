"""
Friend-state operations and their wire opcodes.

Each operation knows its opcode, the accounts the on-chain program expects,
and the predicate that holds once the operation has taken effect. The
mutation engine drives all of them through the same submit-then-verify step.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional

from solders.instruction import AccountMeta, Instruction  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from copain.domain.entities.user_state import UserState
from copain.domain.value_objects.identity import Identity


class Opcode(IntEnum):
    """Instruction opcodes understood by the social program."""

    ADD_FRIEND = 0
    REMOVE_FRIEND = 1
    SET_ONLINE = 2
    SET_OFFLINE = 3


class Operation(ABC):
    """A single friend-state transition."""

    # Whether a satisfied pre-check short-circuits submission.
    skip_when_satisfied: bool = True

    @property
    @abstractmethod
    def opcode(self) -> Opcode:
        """Opcode byte sent as instruction data."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable operation name."""

    @property
    @abstractmethod
    def subject(self) -> str:
        """Target identity or value the operation acts on."""

    @property
    def target(self) -> Optional[Identity]:
        """Target identity that must exist on the ledger, if any."""
        return None

    @abstractmethod
    def is_satisfied(self, state: UserState) -> bool:
        """Return True if the state already reflects this operation."""

    @abstractmethod
    def expectation(self) -> str:
        """Describe the post-condition for error reporting."""

    def accounts(self, payer: Pubkey, state_address: Pubkey) -> List[AccountMeta]:
        """
        Account list for the instruction.

        Args:
            payer: Signing identity
            state_address: Payer's derived storage account

        Returns:
            Ordered account metas
        """
        return [
            AccountMeta(pubkey=payer, is_signer=True, is_writable=False),
            AccountMeta(pubkey=state_address, is_signer=False, is_writable=True),
        ]

    def build_instruction(
        self, program_id: Pubkey, payer: Pubkey, state_address: Pubkey
    ) -> Instruction:
        """
        Build the ledger instruction.

        The payload is exactly one byte: the opcode. Targets travel in the
        account list.
        """
        return Instruction(
            program_id,
            bytes([int(self.opcode)]),
            self.accounts(payer, state_address),
        )


@dataclass(frozen=True)
class _FriendOperation(Operation):
    """Operation that references another identity."""

    friend: Identity

    @property
    def subject(self) -> str:
        return self.friend.address

    @property
    def target(self) -> Optional[Identity]:
        return self.friend

    def accounts(self, payer: Pubkey, state_address: Pubkey) -> List[AccountMeta]:
        metas = super().accounts(payer, state_address)
        metas.append(
            AccountMeta(
                pubkey=self.friend.to_pubkey(), is_signer=False, is_writable=False
            )
        )
        return metas


@dataclass(frozen=True)
class AddFriend(_FriendOperation):
    """Add an identity to the caller's friend set."""

    @property
    def opcode(self) -> Opcode:
        return Opcode.ADD_FRIEND

    @property
    def name(self) -> str:
        return "AddFriend"

    def is_satisfied(self, state: UserState) -> bool:
        return state.has_friend(self.friend.address)

    def expectation(self) -> str:
        return f"{self.friend.address} in friends"


@dataclass(frozen=True)
class RemoveFriend(_FriendOperation):
    """Remove an identity from the caller's friend set."""

    @property
    def opcode(self) -> Opcode:
        return Opcode.REMOVE_FRIEND

    @property
    def name(self) -> str:
        return "RemoveFriend"

    def is_satisfied(self, state: UserState) -> bool:
        return not state.has_friend(self.friend.address)

    def expectation(self) -> str:
        return f"{self.friend.address} not in friends"


@dataclass(frozen=True)
class SetOnline(Operation):
    """Set the caller's online flag.

    Status flips are always submitted, even when the flag already matches.
    """

    online: bool
    skip_when_satisfied = False

    @property
    def opcode(self) -> Opcode:
        return Opcode.SET_ONLINE if self.online else Opcode.SET_OFFLINE

    @property
    def name(self) -> str:
        return "SetOnline"

    @property
    def subject(self) -> str:
        return "online" if self.online else "offline"

    def is_satisfied(self, state: UserState) -> bool:
        return state.online == self.online

    def expectation(self) -> str:
        return f"online == {self.online}"
