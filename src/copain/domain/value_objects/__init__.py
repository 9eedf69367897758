"""
Domain value objects.

Operations live in ``copain.domain.value_objects.operation``; they depend on
the user state entity and are imported from there directly.
"""

from copain.domain.value_objects.identity import Identity, is_valid_identity

__all__ = ["Identity", "is_valid_identity"]
