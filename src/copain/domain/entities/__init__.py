"""
Domain entities.
"""

from copain.domain.entities.user_state import RecordKind, StateSnapshot, UserState

__all__ = ["UserState", "RecordKind", "StateSnapshot"]
