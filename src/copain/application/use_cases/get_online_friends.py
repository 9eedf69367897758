"""
Get Online Friends use case.

Read-only fan-out over the owner's friend set.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from copain.application.use_cases.mutation_engine import MutationEngine
from copain.domain.entities.user_state import UserState
from copain.domain.exceptions import ConfigurationError
from copain.domain.value_objects.identity import Identity
from copain.infrastructure.blockchain.state_reader import StateReader


@dataclass(frozen=True)
class FriendStatus:
    """
    Online flag of one friend.

    Attributes:
        identity: Friend identity string
        online: Friend's online flag at read time
        registered: False if the friend has no state account
    """

    identity: str
    online: bool
    registered: bool


class GetOnlineFriends:
    """
    List the friends of an identity that are currently online.

    Business rules:
    - Friends are visited in wire order (sorted identity strings)
    - Each friend is read independently; the result is a best-effort
      snapshot, not a consistent cut
    - Never mutates state
    """

    def __init__(
        self,
        reader: StateReader,
        engine: Optional[MutationEngine] = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            reader: State reader
            engine: Mutation engine used as accessor for the caller's state
        """
        self.reader = reader
        self.engine = engine

    async def execute(
        self, owner: Optional[Union[Identity, str]] = None
    ) -> List[str]:
        """
        Execute the query.

        Args:
            owner: Identity whose friends to inspect (defaults to the caller)

        Returns:
            Identity strings of online friends
        """
        statuses = await self.list_friends(owner)
        return [status.identity for status in statuses if status.online]

    async def list_friends(
        self, owner: Optional[Union[Identity, str]] = None
    ) -> List[FriendStatus]:
        """
        Read every friend's online flag.

        Args:
            owner: Identity whose friends to inspect (defaults to the caller)

        Returns:
            FriendStatus per friend, in wire order
        """
        owner_state = await self._owner_state(owner)

        statuses = []
        for friend in owner_state.ordered_friends():
            snapshot = await self.reader.read_snapshot(self.reader.address_of(friend))
            statuses.append(
                FriendStatus(
                    identity=friend,
                    online=snapshot.state.online,
                    registered=snapshot.exists,
                )
            )
        return statuses

    async def _owner_state(self, owner: Optional[Union[Identity, str]]) -> UserState:
        if owner is not None:
            return await self.reader.read_own(owner)
        if self.engine is None:
            raise ConfigurationError(
                "No owner given and no signing identity configured"
            )
        return await self.engine.get_own_state()
