"""
Identity value object - Immutable Solana public key in base58 form.
"""

from dataclasses import dataclass

import base58
from solders.pubkey import Pubkey  # type: ignore

from copain.domain.exceptions.base import InvalidIdentityError

IDENTITY_LENGTH = 32


def is_valid_identity(value: str) -> bool:
    """
    Check whether a string is a syntactically valid identity.

    Args:
        value: Candidate base58 string

    Returns:
        True if it decodes to exactly 32 bytes
    """
    if not value or not isinstance(value, str):
        return False
    if len(value) < 32 or len(value) > 44:
        return False
    try:
        return len(base58.b58decode(value)) == IDENTITY_LENGTH
    except ValueError:
        return False


@dataclass(frozen=True)
class Identity:
    """
    Value object representing a participant of the social graph.

    Business rules:
    - Must be a base58 string decoding to 32 bytes
    - Immutable once created
    """

    address: str

    def __post_init__(self):
        """Validate identity on creation."""
        if not self.address:
            raise InvalidIdentityError(self.address, "identity cannot be empty")

        if not is_valid_identity(self.address):
            raise InvalidIdentityError(
                self.address, "not a base58-encoded 32-byte public key"
            )

    @classmethod
    def from_pubkey(cls, pubkey: Pubkey) -> "Identity":
        """Build identity from a solders Pubkey."""
        return cls(str(pubkey))

    def to_pubkey(self) -> Pubkey:
        """Convert to a solders Pubkey."""
        return Pubkey.from_string(self.address)

    def truncated(self) -> str:
        """Return truncated address for display (e.g., 'ABC...XYZ')."""
        return f"{self.address[:6]}...{self.address[-4:]}"

    def __str__(self) -> str:
        """String representation returns full address."""
        return self.address
