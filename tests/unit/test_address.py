"""
Unit tests for storage address derivation.
"""

import hashlib

import pytest
from solders.pubkey import Pubkey  # type: ignore

from copain.domain.value_objects.identity import Identity
from copain.utils.address import SOCIAL_STATE_SEED, derive_user_state_address

PROGRAM = "BPFLoaderUpgradeab1e11111111111111111111111"
OWNER = "Vote111111111111111111111111111111111111111"


class TestDeriveUserStateAddress:
    """Unit tests for derive_user_state_address."""

    def test_seed_constant(self):
        """Test the seed shared with the program."""
        assert SOCIAL_STATE_SEED == "INITIALIZE_STATE"

    def test_matches_create_with_seed_scheme(self):
        """Test address is sha256(owner || seed || program)."""
        owner = Pubkey.from_string(OWNER)
        program = Pubkey.from_string(PROGRAM)
        digest = hashlib.sha256(
            bytes(owner) + SOCIAL_STATE_SEED.encode() + bytes(program)
        ).digest()

        assert derive_user_state_address(owner, program) == Pubkey(digest)

    def test_deterministic(self):
        """Test identical inputs yield identical addresses."""
        first = derive_user_state_address(OWNER, PROGRAM)
        second = derive_user_state_address(Identity(OWNER), Pubkey.from_string(PROGRAM))

        assert first == second

    def test_distinct_owners(self):
        """Test distinct identities yield distinct addresses."""
        owners = [Pubkey.new_unique() for _ in range(50)]
        addresses = {derive_user_state_address(o, PROGRAM) for o in owners}

        assert len(addresses) == len(owners)

    def test_seed_and_program_change_address(self):
        """Test seed and program are part of the derivation."""
        base = derive_user_state_address(OWNER, PROGRAM)

        assert derive_user_state_address(OWNER, PROGRAM, seed="OTHER") != base
        assert derive_user_state_address(OWNER, Pubkey.new_unique()) != base

    def test_rejects_long_seed(self):
        """Test seeds longer than 32 bytes are refused."""
        with pytest.raises(ValueError):
            derive_user_state_address(OWNER, PROGRAM, seed="x" * 33)
