"""
Application use cases.
"""

from copain.application.use_cases.get_online_friends import (
    FriendStatus,
    GetOnlineFriends,
)
from copain.application.use_cases.mutation_engine import (
    MutationEngine,
    MutationResult,
)

__all__ = [
    "MutationEngine",
    "MutationResult",
    "GetOnlineFriends",
    "FriendStatus",
]
