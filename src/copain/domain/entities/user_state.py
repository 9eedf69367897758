"""
UserState entity - per-identity social record stored on the ledger.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List

from solders.pubkey import Pubkey  # type: ignore

from copain.domain.exceptions.base import InvalidIdentityError
from copain.domain.value_objects.identity import is_valid_identity


@dataclass(frozen=True)
class UserState:
    """
    Authoritative friend-state record of one identity.

    Business rules:
    - ``friends`` is a set of identity strings; every entry is a valid identity
    - ``online`` is binary
    - The empty default (offline, no friends) stands in for absent accounts
    """

    online: bool = False
    friends: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        """Normalize and validate on creation."""
        object.__setattr__(self, "online", bool(self.online))
        object.__setattr__(self, "friends", frozenset(self.friends))
        invalid = sorted(f for f in self.friends if not is_valid_identity(f))
        if invalid:
            raise InvalidIdentityError(invalid[0], "friend is not a valid identity")

    @classmethod
    def empty(cls) -> "UserState":
        """Empty default state."""
        return cls()

    @property
    def is_empty(self) -> bool:
        """True if this equals the empty default."""
        return not self.online and not self.friends

    def has_friend(self, identity: str) -> bool:
        """Check friend set membership."""
        return str(identity) in self.friends

    def ordered_friends(self) -> List[str]:
        """Friends in wire order (sorted by key)."""
        return sorted(self.friends)

    def with_friend(self, identity: str) -> "UserState":
        """Return a copy with ``identity`` added."""
        return UserState(online=self.online, friends=self.friends | {str(identity)})

    def without_friend(self, identity: str) -> "UserState":
        """Return a copy with ``identity`` removed."""
        return UserState(online=self.online, friends=self.friends - {str(identity)})

    def with_online(self, online: bool) -> "UserState":
        """Return a copy with the online flag set."""
        return UserState(online=online, friends=self.friends)

    @classmethod
    def from_friends(cls, friends: Iterable[str], online: bool = False) -> "UserState":
        """Build state from any iterable of identity strings."""
        return cls(online=online, friends=frozenset(str(f) for f in friends))


class RecordKind(Enum):
    """What the ledger held at a storage address."""

    ABSENT = "absent"
    EMPTY = "empty"
    POPULATED = "populated"


@dataclass(frozen=True)
class StateSnapshot:
    """
    Result of a single state read.

    Attributes:
        address: Storage address that was read
        kind: Whether the account was absent, empty or populated
        state: Decoded state (empty default unless populated)
    """

    address: Pubkey
    kind: RecordKind
    state: UserState

    @property
    def exists(self) -> bool:
        """True if an account exists at the address."""
        return self.kind is not RecordKind.ABSENT
